"""Weather- and dependency-aware reordering of a worker's route.

This module implements a greedy approach to:
1. Split visits into anchors and weather-sensitive / protected flexible visits
2. Put protected or sensitive visits first depending on the forecast
3. Place visits only after the visits they depend on, breaking cycles
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fieldops.domain.models import RouteSequence, WeatherSnapshot, WorkerRoute
from fieldops.domain.policies import DefaultWeatherPolicy, WeatherPolicy

logger = logging.getLogger(__name__)

OPTIMIZED_ID_SUFFIX = "_weather_optimized"
OPTIMIZED_NAME_SUFFIX = " (Weather Optimized)"

ANCHOR_TIER = 0


@dataclass(frozen=True)
class PlacementCandidate:
    """A visit waiting to be placed.

    Ready visits sort by tier before arrival time; sorting on arrival alone
    would undo the weather ordering of the flexible blocks.

    Attributes:
        sequence: The visit.
        tier: Merge block it came from (anchors, first block, second block).
        position: Index in the merged candidate pool.
    """

    sequence: RouteSequence
    tier: int
    position: int

    @property
    def sort_key(self) -> tuple:
        """Anchors keep route order; flexible visits go by arrival time."""
        if self.tier == ANCHOR_TIER:
            return (self.tier, self.position)
        return (self.tier, self.sequence.arrival_time, self.position)


@dataclass
class RoutePartition:
    """A route's visits split by flexibility and weather sensitivity."""

    anchors: list[RouteSequence]
    weather_sensitive: list[RouteSequence]
    weather_protected: list[RouteSequence]


class DependencyRouteSequencer:
    """Greedy sequencer for a worker's daily route.

    The sequencer follows this approach:
    1. Keep non-flexible visits (anchors) in their original order, first
    2. In poor weather put indoor (protected) flexible visits next, then
       outdoor (sensitive) ones; in fair weather the reverse
    3. Place visits in rounds: every visit whose dependencies are already
       placed goes in, by arrival time within its block
    4. When no visit is ready (cycle or dependency outside the route), force
       the earliest-arriving remaining visit and continue

    Every visit of the input appears exactly once in the output and the
    input route is never modified.

    Example:
        >>> sequencer = DependencyRouteSequencer()
        >>> optimized = sequencer.optimize(route, weather)
        >>> optimized.id
        'kevin_mon_weather_optimized'
    """

    def __init__(self, weather_policy: Optional[WeatherPolicy] = None):
        self.weather_policy = weather_policy or DefaultWeatherPolicy()

    def optimize(
        self,
        route: Optional[WorkerRoute],
        weather: Optional[WeatherSnapshot],
    ) -> Optional[WorkerRoute]:
        """Reorder a route for the given weather.

        Args:
            route: Today's route, or None if the worker has none.
            weather: Current weather, or None if unavailable.

        Returns:
            A new, weather-optimized route; None when there is no route; the
            input route unchanged when there is no weather data.
        """
        optimized, _ = self.optimize_with_stats(route, weather)
        return optimized

    def optimize_with_stats(
        self,
        route: Optional[WorkerRoute],
        weather: Optional[WeatherSnapshot],
    ) -> tuple[Optional[WorkerRoute], dict]:
        """Reorder a route and return statistics about the decision.

        Returns:
            Tuple of (route, stats_dict).
        """
        if route is None:
            return None, {}
        if weather is None:
            logger.debug("No weather data for route %s, keeping original order", route.id)
            return route, {"weather_available": False}

        partition = self.partition(route.sequences)
        protected_first = self.weather_policy.prefers_protected_first(weather)

        if protected_first:
            blocks = [partition.weather_protected, partition.weather_sensitive]
        else:
            blocks = [partition.weather_sensitive, partition.weather_protected]

        pool = self._merge(partition.anchors, blocks)
        ordered, forced = self.resolve_dependencies(pool)

        logger.debug(
            "Route %s: %s first, %d forced placements",
            route.id,
            "protected" if protected_first else "sensitive",
            forced,
        )

        stats = {
            "weather_available": True,
            "protected_first": protected_first,
            "anchors": len(partition.anchors),
            "weather_sensitive": len(partition.weather_sensitive),
            "weather_protected": len(partition.weather_protected),
            "forced_placements": forced,
        }
        optimized = route.with_sequences(
            ordered,
            id_suffix=OPTIMIZED_ID_SUFFIX,
            name_suffix=OPTIMIZED_NAME_SUFFIX,
        )
        return optimized, stats

    def partition(self, sequences: tuple[RouteSequence, ...]) -> RoutePartition:
        """Split visits into anchors and the two flexible buckets."""
        anchors = []
        sensitive = []
        protected = []
        for sequence in sequences:
            if not sequence.is_flexible:
                anchors.append(sequence)
            elif sequence.has_weather_sensitive_operation:
                sensitive.append(sequence)
            else:
                protected.append(sequence)
        return RoutePartition(
            anchors=anchors,
            weather_sensitive=sensitive,
            weather_protected=protected,
        )

    def _merge(
        self,
        anchors: list[RouteSequence],
        blocks: list[list[RouteSequence]],
    ) -> list[PlacementCandidate]:
        """Concatenate anchors and the flexible blocks into one pool."""
        pool = []
        for tier, group in enumerate([anchors] + blocks):
            for sequence in group:
                pool.append(PlacementCandidate(sequence, tier, len(pool)))
        return pool

    def resolve_dependencies(
        self,
        pool: list[PlacementCandidate],
    ) -> tuple[list[RouteSequence], int]:
        """Place visits so that dependencies come first.

        Args:
            pool: Merged candidates in merge order.

        Returns:
            Tuple of (ordered visits, number of forced placements).
        """
        placed: list[RouteSequence] = []
        placed_ids: set[str] = set()
        remaining = list(pool)
        forced = 0

        while remaining:
            ready = [
                c for c in remaining
                if c.sequence.dependencies <= placed_ids
            ]

            if not ready:
                earliest = min(
                    remaining,
                    key=lambda c: (c.sequence.arrival_time, c.position),
                )
                logger.debug(
                    "No visit ready, forcing %s (unmet: %s)",
                    earliest.sequence.id,
                    sorted(earliest.sequence.dependencies - placed_ids),
                )
                ready = [earliest]
                forced += 1
            else:
                ready.sort(key=lambda c: c.sort_key)

            for candidate in ready:
                placed.append(candidate.sequence)
                placed_ids.add(candidate.sequence.id)
            ready_positions = {c.position for c in ready}
            remaining = [c for c in remaining if c.position not in ready_positions]

        return placed, forced
