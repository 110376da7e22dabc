"""In-memory adapters for the schedule and weather ports."""

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from fieldops.domain.models import (
    RoutineScheduleDefinition,
    WeatherSnapshot,
    WorkerRoute,
)
from fieldops.persistence.ports import ScheduleStore, WeatherProvider


class InMemoryScheduleStore(ScheduleStore):
    """Schedule store backed by plain dicts.

    Routes are keyed by (worker_id, day_of_week); the date passed to
    fetch_route only contributes its weekday.
    """

    def __init__(
        self,
        definitions: Optional[Iterable[RoutineScheduleDefinition]] = None,
        routes: Optional[Iterable[WorkerRoute]] = None,
    ):
        self._definitions: dict[str, list[RoutineScheduleDefinition]] = defaultdict(list)
        self._routes: dict[tuple[str, int], WorkerRoute] = {}
        for definition in definitions or []:
            self.add_definition(definition)
        for route in routes or []:
            self.add_route(route)

    def add_definition(self, definition: RoutineScheduleDefinition) -> None:
        self._definitions[definition.worker_id].append(definition)

    def add_route(self, route: WorkerRoute) -> None:
        self._routes[(route.worker_id, route.day_of_week)] = route

    @property
    def worker_ids(self) -> list[str]:
        """All workers with at least one definition or route."""
        ids = set(self._definitions)
        ids.update(worker_id for worker_id, _ in self._routes)
        return sorted(ids)

    def fetch_routine_definitions(
        self, worker_id: str
    ) -> list[RoutineScheduleDefinition]:
        return list(self._definitions.get(worker_id, []))

    def fetch_route(self, worker_id: str, on_date: date) -> Optional[WorkerRoute]:
        return self._routes.get((worker_id, on_date.weekday()))


class StaticWeatherProvider(WeatherProvider):
    """Weather provider that always returns the same snapshot."""

    def __init__(self, snapshot: Optional[WeatherSnapshot] = None):
        self.snapshot = snapshot

    def current_snapshot(self) -> Optional[WeatherSnapshot]:
        return self.snapshot
