"""Domain models, recurrence rules and policies for duty scheduling."""

from fieldops.domain.models import (
    CurrentConditions,
    HourBlock,
    OperationTask,
    RouteProgress,
    RouteSequence,
    RouteType,
    RoutineScheduleDefinition,
    ScheduleInstance,
    SequenceProgress,
    SequenceStatus,
    SequenceType,
    WeatherSnapshot,
    WorkerRoute,
)
from fieldops.domain.policies import (
    DefaultRelevancePolicy,
    DefaultWeatherPolicy,
    RelevancePolicy,
    ServiceConfig,
    WeatherPolicy,
)
from fieldops.domain.recurrence import (
    DailyRule,
    Frequency,
    MonthlyRule,
    RecurrenceRule,
    UnsupportedRule,
    WeeklyRule,
    parse_rule,
)

__all__ = [
    # Models
    "CurrentConditions",
    "HourBlock",
    "OperationTask",
    "RouteProgress",
    "RouteSequence",
    "RouteType",
    "RoutineScheduleDefinition",
    "ScheduleInstance",
    "SequenceProgress",
    "SequenceStatus",
    "SequenceType",
    "WeatherSnapshot",
    "WorkerRoute",
    # Recurrence
    "DailyRule",
    "Frequency",
    "MonthlyRule",
    "RecurrenceRule",
    "UnsupportedRule",
    "WeeklyRule",
    "parse_rule",
    # Policies
    "DefaultRelevancePolicy",
    "DefaultWeatherPolicy",
    "RelevancePolicy",
    "ServiceConfig",
    "WeatherPolicy",
]
