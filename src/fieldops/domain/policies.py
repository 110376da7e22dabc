"""Policy definitions for scheduling rules.

This module contains configurable policies for the two judgement calls the
engine makes: whether the weather is bad enough to move outdoor work later,
and which duties are worth showing right now. Policies are kept separate
from the engine to allow independent testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from fieldops.domain.models import WeatherSnapshot


class WeatherPolicy(ABC):
    """Abstract base class for weather-driven route ordering."""

    @abstractmethod
    def prefers_protected_first(self, weather: WeatherSnapshot) -> bool:
        """Decide whether protected visits should precede sensitive ones.

        Args:
            weather: Current snapshot with hourly forecast.

        Returns:
            True when conditions are poor for outdoor work.
        """
        pass


class RelevancePolicy(ABC):
    """Abstract base class for the live-workday window."""

    @abstractmethod
    def lookahead(self) -> timedelta:
        """How far ahead an instance still counts as upcoming."""
        pass

    @abstractmethod
    def preview_limit(self) -> int:
        """Maximum instances shown in the next-day preview."""
        pass


@dataclass
class DefaultWeatherPolicy(WeatherPolicy):
    """Default weather policy implementation.

    Poor conditions:
    - Precipitation probability above 60% in any of the next 4 hours, or
    - Current wind above 25 mph

    Both comparisons are strict, so exactly 0.6 or 25 mph is still fair.
    """

    precipitation_threshold: float = 0.6
    wind_threshold_mph: float = 25.0
    forecast_hours: int = 4

    def prefers_protected_first(self, weather: WeatherSnapshot) -> bool:
        upcoming_rain = weather.max_precip_probability(self.forecast_hours)
        return (
            upcoming_rain > self.precipitation_threshold
            or weather.current.wind_mph > self.wind_threshold_mph
        )


@dataclass
class DefaultRelevancePolicy(RelevancePolicy):
    """Default relevance policy implementation.

    - Upcoming window: 3 hours (180 minutes)
    - After-hours preview: first 5 instances of the next day
    """

    lookahead_minutes: int = 180
    preview_count: int = 5

    def lookahead(self) -> timedelta:
        return timedelta(minutes=self.lookahead_minutes)

    def preview_limit(self) -> int:
        return self.preview_count


@dataclass
class ServiceConfig:
    """Configuration for building a ScheduleService.

    Attributes:
        weather_policy: Policy for the weather split.
        relevance_policy: Policy for the live-workday window.
        weekly_without_days_expands_daily: Keep expanding WEEKLY rules
            without BYDAY on every day, as existing data relies on it.
    """

    weather_policy: Optional[WeatherPolicy] = None
    relevance_policy: Optional[RelevancePolicy] = None
    weekly_without_days_expands_daily: bool = True

    def __post_init__(self):
        if self.weather_policy is None:
            self.weather_policy = DefaultWeatherPolicy()
        if self.relevance_policy is None:
            self.relevance_policy = DefaultRelevancePolicy()
