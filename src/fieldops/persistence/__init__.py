"""Ports and adapters for schedule data and weather."""

from fieldops.persistence.json_store import JsonScheduleStore
from fieldops.persistence.memory import InMemoryScheduleStore, StaticWeatherProvider
from fieldops.persistence.ports import (
    ScheduleLookupError,
    ScheduleStore,
    WeatherProvider,
)

__all__ = [
    "InMemoryScheduleStore",
    "JsonScheduleStore",
    "ScheduleLookupError",
    "ScheduleStore",
    "StaticWeatherProvider",
    "WeatherProvider",
]
