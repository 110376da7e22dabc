"""Weekly duty view built from independent daily expansions.

This module provides the WeeklyScheduleAggregator, which expands a worker's
routines for seven consecutive dates. Each day is loaded on its own so one
failed lookup costs one day, not the week.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable

from fieldops.domain.models import ScheduleInstance
from fieldops.persistence.ports import ScheduleLookupError

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7

WorkerDayLoader = Callable[[str, date], list[ScheduleInstance]]


@dataclass
class WeeklyDuties:
    """Expanded duties for a week.

    Attributes:
        worker_id: Worker the week belongs to.
        start_date: First date of the week.
        day_instances: Instances per successfully loaded date.
        skipped_dates: Dates whose lookup failed.
    """

    worker_id: str
    start_date: date
    day_instances: dict[date, list[ScheduleInstance]] = field(default_factory=dict)
    skipped_dates: list[date] = field(default_factory=list)

    @property
    def schedule_dates(self) -> list[date]:
        """All seven dates of the week."""
        return [self.start_date + timedelta(days=i) for i in range(DAYS_PER_WEEK)]

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=DAYS_PER_WEEK - 1)

    def all_instances(self) -> list[ScheduleInstance]:
        """Every instance of the week, in date order."""
        instances = []
        for d in sorted(self.day_instances):
            instances.extend(self.day_instances[d])
        return instances

    def get_weekly_summary(self) -> dict:
        """Get summary statistics for the week."""
        total_minutes = 0
        by_day = {}
        by_category: dict[str, int] = {}

        for d, instances in self.day_instances.items():
            day_minutes = sum(i.duration_minutes for i in instances)
            total_minutes += day_minutes
            by_day[d] = {"count": len(instances), "minutes": day_minutes}
            for instance in instances:
                by_category[instance.category] = by_category.get(instance.category, 0) + 1

        return {
            "total_instances": sum(len(v) for v in self.day_instances.values()),
            "total_hours": total_minutes / 60.0,
            "days_loaded": len(self.day_instances),
            "days_skipped": len(self.skipped_dates),
            "by_day": by_day,
            "by_category": by_category,
        }


class WeeklyScheduleAggregator:
    """Composes seven daily expansions into a week view.

    The week view never applies relevance filtering: it always shows
    everything scheduled.

    Example:
        >>> aggregator = WeeklyScheduleAggregator(service.load_day)
        >>> instances = aggregator.for_week("4", date(2024, 1, 15))
    """

    def __init__(self, load_day: WorkerDayLoader):
        """Initialize the aggregator.

        Args:
            load_day: Returns all instances for (worker_id, date), raising
                ScheduleLookupError when the store cannot be read.
        """
        self.load_day = load_day

    def build_week(self, worker_id: str, start_date: date) -> WeeklyDuties:
        """Load each day of the week, skipping days that fail."""
        week = WeeklyDuties(worker_id=worker_id, start_date=start_date)

        for d in week.schedule_dates:
            try:
                week.day_instances[d] = self.load_day(worker_id, d)
            except ScheduleLookupError as exc:
                logger.warning("Skipping %s for worker %s: %s", d, worker_id, exc)
                week.skipped_dates.append(d)

        return week

    def for_week(self, worker_id: str, start_date: date) -> list[ScheduleInstance]:
        """All instances for seven consecutive dates from ``start_date``."""
        return self.build_week(worker_id, start_date).all_instances()
