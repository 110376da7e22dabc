"""Domain models for duty scheduling and route sequencing.

This module contains the core data structures shared across the package:
routine definitions and the duty instances expanded from them, worker
routes with their visit sequences, weather snapshots, and route progress.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from fieldops.domain.recurrence import RecurrenceRule, parse_rule


class SequenceType(Enum):
    """Kind of visit a route sequence represents."""

    BUILDING_CHECK = "building_check"
    OUTDOOR_CLEANING = "outdoor_cleaning"
    INDOOR_CLEANING = "indoor_cleaning"
    MAINTENANCE = "maintenance"
    SANITATION = "sanitation"
    OPERATIONS = "operations"
    INSPECTION = "inspection"


class RouteType(Enum):
    """Shape of a worker's day."""

    MORNING_CLEANING = "morning_cleaning"
    AFTERNOON_MAINTENANCE = "afternoon_maintenance"
    EVENING_OPERATIONS = "evening_operations"
    SPECIAL_PROJECT = "special_project"
    COVERAGE = "coverage"


PHOTO_CATEGORIES = ("sanitation", "cleaning")


@dataclass(frozen=True)
class RoutineScheduleDefinition:
    """A recurring duty assigned to a worker at a building.

    Definitions are created by the import pipeline and are read-only here.

    Attributes:
        id: Unique routine identifier.
        worker_id: Worker the routine belongs to.
        building_id: Building where the duty happens.
        name: Display name of the duty.
        category: Free-text category (e.g. "Cleaning", "Maintenance").
        rule: Parsed recurrence rule.
        estimated_duration_minutes: Expected duration of one occurrence.
        weather_dependent: True if the duty is affected by weather.
        priority: Relative priority, higher is more important.
        building_name: Optional display name of the building.
    """

    id: str
    worker_id: str
    building_id: str
    name: str
    category: str
    rule: RecurrenceRule
    estimated_duration_minutes: int = 60
    weather_dependent: bool = False
    priority: int = 0
    building_name: str = ""

    @classmethod
    def from_rule_text(cls, rule_text: str, **kwargs) -> "RoutineScheduleDefinition":
        """Create a definition, parsing the rule text once."""
        return cls(rule=parse_rule(rule_text), **kwargs)

    @property
    def requires_photo(self) -> bool:
        """Cleaning and sanitation duties need photo evidence."""
        category = self.category.lower()
        return any(c in category for c in PHOTO_CATEGORIES)


@dataclass(frozen=True)
class ScheduleInstance:
    """One concrete occurrence of a routine on a specific date.

    Instances are derived on demand and never stored.

    Attributes:
        id: Identifier built from routine id and start timestamp.
        routine_id: Routine this instance was expanded from.
        building_id: Building where the duty happens.
        start_time: When the duty starts.
        end_time: When the duty is expected to finish.
        category: Routine category.
        weather_dependent: Copied from the routine.
        requires_photo: Whether completion needs photo evidence.
        title: Routine name.
        building_name: Building display name, if known.
        priority: Routine priority.
    """

    id: str
    routine_id: str
    building_id: str
    start_time: datetime
    end_time: datetime
    category: str
    weather_dependent: bool = False
    requires_photo: bool = False
    title: str = ""
    building_name: str = ""
    priority: int = 0

    @property
    def duration_minutes(self) -> int:
        """Duration in whole minutes."""
        return int((self.end_time - self.start_time).total_seconds() // 60)

    @property
    def schedule_date(self) -> date:
        return self.start_time.date()

    def is_active(self, now: datetime) -> bool:
        """Check if ``now`` falls inside the instance (bounds included)."""
        return self.start_time <= now <= self.end_time

    def is_upcoming(self, now: datetime, lookahead: timedelta) -> bool:
        """Check if the instance starts after ``now`` within ``lookahead``."""
        return now < self.start_time and self.start_time - now <= lookahead

    def __repr__(self) -> str:
        return (
            f"ScheduleInstance({self.routine_id}: "
            f"{self.start_time.strftime('%Y-%m-%d %H:%M')}-"
            f"{self.end_time.strftime('%H:%M')})"
        )


@dataclass(frozen=True)
class OperationTask:
    """A single task performed during a visit.

    Attributes:
        id: Task identifier.
        name: Display name.
        category: Task category (e.g. "sweeping", "hosing").
        is_weather_sensitive: True if rain or wind affects the task.
        requires_photo: Whether completion needs photo evidence.
        estimated_duration_minutes: Expected duration.
    """

    id: str
    name: str
    category: str = ""
    is_weather_sensitive: bool = False
    requires_photo: bool = False
    estimated_duration_minutes: int = 15


@dataclass(frozen=True)
class RouteSequence:
    """One stop on a worker's route, bundling one or more operations.

    Attributes:
        id: Sequence identifier, unique within a route.
        building_id: Building visited.
        arrival_time: Planned arrival.
        estimated_duration_minutes: Expected time on site.
        operations: Tasks performed during the visit.
        is_flexible: If False the sequence is an anchor and never moves.
        dependencies: Ids of sequences that must be placed before this one.
        building_name: Building display name.
        sequence_type: Kind of visit.
    """

    id: str
    building_id: str
    arrival_time: datetime
    estimated_duration_minutes: int
    operations: tuple[OperationTask, ...] = ()
    is_flexible: bool = True
    dependencies: frozenset[str] = field(default_factory=frozenset)
    building_name: str = ""
    sequence_type: SequenceType = SequenceType.BUILDING_CHECK

    @property
    def end_time(self) -> datetime:
        return self.arrival_time + timedelta(minutes=self.estimated_duration_minutes)

    @property
    def has_weather_sensitive_operation(self) -> bool:
        """True if any operation in the visit is weather-sensitive."""
        return any(op.is_weather_sensitive for op in self.operations)

    def is_active(self, now: datetime) -> bool:
        """Check if ``now`` falls inside the visit (bounds included)."""
        return self.arrival_time <= now <= self.end_time

    def is_upcoming(self, now: datetime, lookahead: Optional[timedelta] = None) -> bool:
        """Check if the visit starts after ``now``, optionally within ``lookahead``."""
        if self.arrival_time <= now:
            return False
        return lookahead is None or self.arrival_time - now <= lookahead


@dataclass(frozen=True)
class WorkerRoute:
    """A worker's ordered visits for a single day.

    Routes are values: reordering builds a new route and leaves the
    original untouched.

    Attributes:
        id: Route identifier.
        worker_id: Worker the route belongs to.
        day_of_week: date.weekday() value the route runs on (Monday = 0).
        sequences: Visits in route order.
        route_name: Display name.
        route_type: Shape of the day.
    """

    id: str
    worker_id: str
    day_of_week: int
    sequences: tuple[RouteSequence, ...] = ()
    route_name: str = ""
    route_type: RouteType = RouteType.MORNING_CLEANING

    @property
    def sequence_ids(self) -> list[str]:
        return [s.id for s in self.sequences]

    def get_sequence(self, sequence_id: str) -> Optional[RouteSequence]:
        """Look up a sequence by id."""
        for sequence in self.sequences:
            if sequence.id == sequence_id:
                return sequence
        return None

    def with_sequences(
        self,
        sequences: list[RouteSequence],
        id_suffix: str = "",
        name_suffix: str = "",
    ) -> "WorkerRoute":
        """Return a copy carrying a new sequence order."""
        return replace(
            self,
            id=f"{self.id}{id_suffix}",
            route_name=f"{self.route_name}{name_suffix}",
            sequences=tuple(sequences),
        )


@dataclass(frozen=True)
class CurrentConditions:
    """Weather right now.

    Attributes:
        temp_f: Temperature in Fahrenheit.
        condition: Human-readable condition ("Light rain", "Cloudy").
        wind_mph: Wind speed in miles per hour.
    """

    temp_f: float
    condition: str
    wind_mph: float


@dataclass(frozen=True)
class HourBlock:
    """Forecast for one hour.

    Attributes:
        time: Top of the hour.
        precip_prob: Precipitation probability, 0.0 to 1.0.
        wind_mph: Forecast wind speed.
        temp_f: Forecast temperature.
        precip_intensity: Optional intensity estimate.
    """

    time: datetime
    precip_prob: float
    wind_mph: float = 0.0
    temp_f: float = 0.0
    precip_intensity: Optional[float] = None


# Precipitation probability and intensity inferred from a condition label
CONDITION_PRECIPITATION: dict[str, tuple[float, Optional[float]]] = {
    "sunny": (0.0, None),
    "clear": (0.0, None),
    "hot": (0.0, None),
    "cold": (0.0, None),
    "cloudy": (0.1, None),
    "windy": (0.1, None),
    "overcast": (0.2, None),
    "fog": (0.3, None),
    "foggy": (0.3, None),
    "rain": (0.8, 0.6),
    "snow": (0.85, 0.5),
    "snowy": (0.85, 0.5),
    "storm": (0.9, 0.9),
}


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current conditions plus an hourly forecast.

    Attributes:
        current: Conditions right now.
        hourly: Forecast blocks, nearest hour first.
    """

    current: CurrentConditions
    hourly: tuple[HourBlock, ...] = ()

    def max_precip_probability(self, hours: int) -> float:
        """Highest precipitation probability over the next ``hours`` blocks."""
        return max((h.precip_prob for h in self.hourly[:hours]), default=0.0)

    @classmethod
    def from_conditions(
        cls,
        current_condition: str,
        current_wind_mph: float,
        hourly_conditions: list[tuple[datetime, str, float, float]],
        current_temp_f: float = 60.0,
        max_hours: int = 12,
    ) -> "WeatherSnapshot":
        """Build a snapshot from condition labels.

        Feeds that only report a condition label get a precipitation
        probability from a fixed table; unknown labels count as dry.

        Args:
            current_condition: Condition label for now.
            current_wind_mph: Current wind speed.
            hourly_conditions: (time, condition, wind_mph, temp_f) per hour.
            current_temp_f: Current temperature.
            max_hours: Forecast blocks to keep.
        """
        blocks = []
        for when, condition, wind, temp in hourly_conditions[:max_hours]:
            prob, intensity = CONDITION_PRECIPITATION.get(
                condition.strip().lower(), (0.0, None)
            )
            blocks.append(
                HourBlock(
                    time=when,
                    precip_prob=prob,
                    wind_mph=wind,
                    temp_f=temp,
                    precip_intensity=intensity,
                )
            )
        return cls(
            current=CurrentConditions(
                temp_f=current_temp_f,
                condition=current_condition.strip().capitalize(),
                wind_mph=current_wind_mph,
            ),
            hourly=tuple(blocks),
        )


class SequenceStatus(Enum):
    """Progress state of a single visit."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    WEATHER_DELAYED = "weather_delayed"


@dataclass
class SequenceProgress:
    """Progress of one visit within a route."""

    sequence_id: str
    status: SequenceStatus = SequenceStatus.PENDING
    completed_operations: set[str] = field(default_factory=set)
    start_time: Optional[datetime] = None
    completion_time: Optional[datetime] = None
    notes: Optional[str] = None


@dataclass
class RouteProgress:
    """Progress of a worker through one route.

    Attributes:
        route_id: Route being tracked.
        sequence_progress: Progress keyed by sequence id.
    """

    route_id: str
    sequence_progress: dict[str, SequenceProgress] = field(default_factory=dict)

    def update(self, progress: SequenceProgress) -> None:
        """Record progress for a sequence, replacing any earlier entry."""
        self.sequence_progress[progress.sequence_id] = progress

    def completion(self, route: WorkerRoute) -> float:
        """Fraction of the route's sequences marked completed."""
        total = len(route.sequences)
        if total == 0:
            return 0.0
        route_ids = set(route.sequence_ids)
        completed = sum(
            1
            for p in self.sequence_progress.values()
            if p.sequence_id in route_ids and p.status == SequenceStatus.COMPLETED
        )
        return completed / total
