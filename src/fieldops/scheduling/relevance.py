"""Selection of the duties worth showing right now."""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from fieldops.domain.models import ScheduleInstance
from fieldops.domain.policies import DefaultRelevancePolicy, RelevancePolicy
from fieldops.persistence.ports import ScheduleLookupError

logger = logging.getLogger(__name__)

DayLoader = Callable[[date], list[ScheduleInstance]]


class TimeRelevanceSelector:
    """Picks the live-workday view, or a preview of tomorrow.

    During the workday the selector keeps instances that are in progress or
    start within the lookahead window. When nothing qualifies it switches to
    an after-hours view: the first few instances of the next calendar date.
    """

    def __init__(self, policy: Optional[RelevancePolicy] = None):
        self.policy = policy or DefaultRelevancePolicy()

    def live_instances(
        self,
        instances: list[ScheduleInstance],
        now: datetime,
    ) -> list[ScheduleInstance]:
        """Instances that are active or upcoming at ``now``, by start time."""
        lookahead = self.policy.lookahead()
        live = [
            i for i in instances
            if i.is_active(now) or i.is_upcoming(now, lookahead)
        ]
        return sorted(live, key=lambda i: i.start_time)

    def select(
        self,
        today_instances: list[ScheduleInstance],
        now: datetime,
        load_day: DayLoader,
        on_date: Optional[date] = None,
    ) -> list[ScheduleInstance]:
        """Select relevant instances for ``now``.

        Args:
            today_instances: All instances expanded for the query date.
            now: The current moment.
            load_day: Returns the full, unfiltered instances for a date.
            on_date: The query date (defaults to the date of ``now``).

        Returns:
            The live view when non-empty, otherwise up to preview_limit
            instances of the next day. If loading the next day fails, the
            original today list is returned unchanged.
        """
        live = self.live_instances(today_instances, now)
        if live:
            return live

        next_date = (on_date or now.date()) + timedelta(days=1)
        try:
            tomorrow = load_day(next_date)
        except ScheduleLookupError as exc:
            logger.warning("Could not load next-day preview for %s: %s", next_date, exc)
            return today_instances

        if not tomorrow:
            return today_instances

        preview = sorted(tomorrow, key=lambda i: i.start_time)
        return preview[: self.policy.preview_limit()]
