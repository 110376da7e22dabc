"""Ports to the collaborators that own schedule data and weather.

The engine only reads through these interfaces. Anything that stores
definitions or routes (a database, a JSON export, a test double) implements
ScheduleStore; anything that supplies weather implements WeatherProvider.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from fieldops.domain.models import (
    RoutineScheduleDefinition,
    WeatherSnapshot,
    WorkerRoute,
)


class ScheduleLookupError(Exception):
    """The schedule store could not be read.

    This is the only error allowed to cross the service boundary. Callers
    that can degrade (weekly view, next-day preview) log it and carry on.
    """

    def __init__(self, message: str, worker_id: Optional[str] = None):
        super().__init__(message)
        self.worker_id = worker_id


class ScheduleStore(ABC):
    """Abstract source of routine definitions and daily routes."""

    @abstractmethod
    def fetch_routine_definitions(
        self, worker_id: str
    ) -> list[RoutineScheduleDefinition]:
        """Get every recurring routine assigned to a worker.

        Raises:
            ScheduleLookupError: If the store is unavailable.
        """
        pass

    @abstractmethod
    def fetch_route(self, worker_id: str, on_date: date) -> Optional[WorkerRoute]:
        """Get the worker's route for the date's weekday, if one exists.

        Raises:
            ScheduleLookupError: If the store is unavailable.
        """
        pass


class WeatherProvider(ABC):
    """Abstract source of weather snapshots."""

    @abstractmethod
    def current_snapshot(self) -> Optional[WeatherSnapshot]:
        """Get the latest snapshot, or None when no data is available."""
        pass
