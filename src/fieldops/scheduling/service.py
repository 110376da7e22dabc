"""Main schedule service interface.

This module provides the high-level ScheduleService class that orchestrates
recurrence expansion, relevance selection, weekly aggregation and route
sequencing on top of the schedule store and weather ports.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fieldops.domain.models import (
    RouteSequence,
    ScheduleInstance,
    WeatherSnapshot,
    WorkerRoute,
)
from fieldops.domain.policies import ServiceConfig
from fieldops.persistence.ports import ScheduleStore, WeatherProvider
from fieldops.scheduling.recurrence_expander import RecurrenceExpander
from fieldops.scheduling.relevance import TimeRelevanceSelector
from fieldops.scheduling.route_sequencer import DependencyRouteSequencer
from fieldops.scheduling.weekly_aggregator import WeeklyDuties, WeeklyScheduleAggregator

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ScheduleService:
    """High-level service answering a worker's schedule queries.

    The service is built once at the composition root and handed to
    callers; it holds no mutable state, so one instance serves concurrent
    requests for different workers.

    Only ScheduleLookupError from the store escapes the service, and only
    for the date the caller asked about. Everything else degrades to an
    empty list, the unmodified route, or a skipped day.

    Example:
        >>> service = ScheduleService(store=InMemoryScheduleStore(defs, routes))
        >>> duties = service.get_schedule_for_date("4", date(2024, 1, 15))
    """

    def __init__(
        self,
        store: ScheduleStore,
        expander: Optional[RecurrenceExpander] = None,
        selector: Optional[TimeRelevanceSelector] = None,
        sequencer: Optional[DependencyRouteSequencer] = None,
        weather_provider: Optional[WeatherProvider] = None,
        clock: Optional[Clock] = None,
    ):
        """Initialize the service with its collaborators.

        Args:
            store: Source of routine definitions and routes.
            expander: Recurrence expander.
            selector: Relevance selector for the live view.
            sequencer: Route sequencer.
            weather_provider: Fallback weather source for route optimization.
            clock: Returns the current moment (datetime.now by default).
        """
        self.store = store
        self.expander = expander or RecurrenceExpander()
        self.selector = selector or TimeRelevanceSelector()
        self.sequencer = sequencer or DependencyRouteSequencer()
        self.weather_provider = weather_provider
        self.clock = clock or datetime.now
        self.aggregator = WeeklyScheduleAggregator(self.load_day)

    @classmethod
    def from_config(
        cls,
        store: ScheduleStore,
        config: Optional[ServiceConfig] = None,
        weather_provider: Optional[WeatherProvider] = None,
        clock: Optional[Clock] = None,
    ) -> "ScheduleService":
        """Build a service whose components share one configuration."""
        config = config or ServiceConfig()
        return cls(
            store=store,
            expander=RecurrenceExpander(
                weekly_without_days_expands_daily=config.weekly_without_days_expands_daily,
            ),
            selector=TimeRelevanceSelector(config.relevance_policy),
            sequencer=DependencyRouteSequencer(config.weather_policy),
            weather_provider=weather_provider,
            clock=clock,
        )

    def load_day(self, worker_id: str, on_date: date) -> list[ScheduleInstance]:
        """All instances for a worker and date, sorted by start time.

        Raises:
            ScheduleLookupError: If the definitions cannot be loaded.
        """
        definitions = self.store.fetch_routine_definitions(worker_id)
        return self.expander.expand_all(definitions, on_date)

    def get_schedule_for_date(
        self,
        worker_id: str,
        on_date: date,
        skip_relevance_filter: bool = False,
    ) -> list[ScheduleInstance]:
        """Get a worker's duties for a date.

        Args:
            worker_id: Worker to query.
            on_date: Date to expand.
            skip_relevance_filter: If True, return every instance of the
                date instead of the live view / next-day preview.

        Returns:
            Instances sorted by start time.

        Raises:
            ScheduleLookupError: If the date's definitions cannot be loaded.
        """
        instances = self.load_day(worker_id, on_date)
        if skip_relevance_filter:
            return instances

        return self.selector.select(
            instances,
            self.clock(),
            lambda d: self.load_day(worker_id, d),
            on_date=on_date,
        )

    def get_weekly_schedule(
        self,
        worker_id: str,
        start_date: Optional[date] = None,
    ) -> list[ScheduleInstance]:
        """Get every instance for seven days from ``start_date`` (today by default)."""
        return self.aggregator.for_week(worker_id, start_date or self.clock().date())

    def get_weekly_duties(
        self,
        worker_id: str,
        start_date: Optional[date] = None,
    ) -> WeeklyDuties:
        """Like get_weekly_schedule, keeping the per-day breakdown."""
        return self.aggregator.build_week(worker_id, start_date or self.clock().date())

    def get_current_route(self, worker_id: str) -> Optional[WorkerRoute]:
        """Today's route for a worker, if any."""
        return self.store.fetch_route(worker_id, self.clock().date())

    def get_active_sequences(self, worker_id: str) -> list[RouteSequence]:
        """Visits of today's route in progress right now."""
        route = self.get_current_route(worker_id)
        if route is None:
            return []

        now = self.clock()
        return [s for s in route.sequences if s.is_active(now)]

    def get_upcoming_sequences(self, worker_id: str, limit: int = 3) -> list[RouteSequence]:
        """The next visits of today's route within the lookahead window."""
        route = self.get_current_route(worker_id)
        if route is None:
            return []

        now = self.clock()
        lookahead = self.selector.policy.lookahead()
        upcoming = [s for s in route.sequences if s.is_upcoming(now, lookahead)]
        upcoming.sort(key=lambda s: s.arrival_time)
        return upcoming[:limit]

    def get_optimized_route(
        self,
        worker_id: str,
        weather: Optional[WeatherSnapshot] = None,
    ) -> Optional[WorkerRoute]:
        """Today's route reordered for the weather.

        Args:
            worker_id: Worker to query.
            weather: Snapshot to use; the weather provider's is used if None.

        Returns:
            The optimized route, the unmodified route when there is no
            weather data, or None if the worker has no route today.
        """
        route = self.get_current_route(worker_id)
        if route is None:
            logger.debug("No route today for worker %s", worker_id)
            return None

        if weather is None and self.weather_provider is not None:
            weather = self.weather_provider.current_snapshot()

        return self.sequencer.optimize(route, weather)
