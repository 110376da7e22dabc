"""Scheduling engine for expanding duties and sequencing routes."""

from fieldops.scheduling.recurrence_expander import RecurrenceExpander
from fieldops.scheduling.relevance import TimeRelevanceSelector
from fieldops.scheduling.route_sequencer import (
    DependencyRouteSequencer,
    PlacementCandidate,
    RoutePartition,
)
from fieldops.scheduling.service import ScheduleService
from fieldops.scheduling.weekly_aggregator import (
    WeeklyDuties,
    WeeklyScheduleAggregator,
)

__all__ = [
    # Facade
    "ScheduleService",
    # Components
    "RecurrenceExpander",
    "TimeRelevanceSelector",
    "DependencyRouteSequencer",
    "WeeklyScheduleAggregator",
    # Results
    "PlacementCandidate",
    "RoutePartition",
    "WeeklyDuties",
]
