"""JSON-file adapter for the schedule store port.

The file is a single document exported by the import pipeline::

    {
      "definitions": [
        {"id": "r1", "worker_id": "4", "building_id": "10",
         "name": "Sidewalk Sweep", "category": "Cleaning",
         "rrule": "FREQ=DAILY;BYHOUR=6", "estimated_duration_minutes": 30,
         "weather_dependent": true, "priority": 2}
      ],
      "routes": [
        {"id": "kevin_mon", "worker_id": "4", "day_of_week": 0,
         "route_name": "Monday Morning", "route_type": "morning_cleaning",
         "sequences": [
           {"id": "s1", "building_id": "10", "arrival_time": "06:00",
            "estimated_duration_minutes": 45, "is_flexible": false,
            "dependencies": [], "operations": [
              {"id": "op1", "name": "Sweep", "is_weather_sensitive": true}
            ]}
         ]}
      ]
    }

Route arrival times are times of day; they are placed on the requested date
when the route is fetched. The file is re-read on every call so edits show
up without restarting. Every read or decode problem surfaces as a
ScheduleLookupError, including rule hours or minutes outside a day.
"""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Optional

from fieldops.domain.models import (
    OperationTask,
    RouteSequence,
    RouteType,
    RoutineScheduleDefinition,
    SequenceType,
    WorkerRoute,
)
from fieldops.domain.recurrence import RecurrenceRule, UnsupportedRule, parse_rule
from fieldops.persistence.ports import ScheduleLookupError, ScheduleStore

logger = logging.getLogger(__name__)


class JsonScheduleStore(ScheduleStore):
    """Schedule store reading a JSON export from disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (OSError, ValueError) as exc:
            raise ScheduleLookupError(f"Cannot read schedule data from {self.path}: {exc}") from exc
        if not isinstance(document, dict):
            raise ScheduleLookupError(f"Schedule data in {self.path} is not a JSON object")
        return document

    def fetch_routine_definitions(self, worker_id: str) -> list[RoutineScheduleDefinition]:
        document = self._load()
        definitions = []
        for record in document.get("definitions", []):
            if str(record.get("worker_id")) != worker_id:
                continue
            definitions.append(_definition_from_record(record, worker_id))
        logger.debug("Loaded %d routine definitions for worker %s", len(definitions), worker_id)
        return definitions

    def fetch_route(self, worker_id: str, on_date: date) -> Optional[WorkerRoute]:
        document = self._load()
        for record in document.get("routes", []):
            if str(record.get("worker_id")) != worker_id:
                continue
            if _day_of_week(record, worker_id) != on_date.weekday():
                continue
            return _route_from_record(record, worker_id, on_date)
        return None


def _definition_from_record(record: dict[str, Any], worker_id: str) -> RoutineScheduleDefinition:
    try:
        return RoutineScheduleDefinition(
            id=str(record["id"]),
            worker_id=worker_id,
            building_id=str(record["building_id"]),
            name=record.get("name") or "",
            category=record.get("category") or "",
            rule=_checked_rule(record.get("rrule") or ""),
            estimated_duration_minutes=int(record.get("estimated_duration_minutes", 60)),
            weather_dependent=bool(record.get("weather_dependent", False)),
            priority=int(record.get("priority", 0)),
            building_name=record.get("building_name") or "",
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ScheduleLookupError(f"Malformed routine definition: {record!r}", worker_id) from exc


def _checked_rule(text: str) -> RecurrenceRule:
    """Parse rule text, rejecting hours and minutes that are not times of day."""
    rule = parse_rule(text)
    if isinstance(rule, UnsupportedRule):
        return rule
    if any(not 0 <= h <= 23 for h in rule.hours):
        raise ValueError(f"BYHOUR out of range in {text!r}")
    if any(not 0 <= m <= 59 for m in rule.minutes):
        raise ValueError(f"BYMINUTE out of range in {text!r}")
    return rule


def _day_of_week(record: dict[str, Any], worker_id: str) -> Optional[int]:
    value = record.get("day_of_week")
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ScheduleLookupError(f"Malformed route record: {record.get('id')!r}", worker_id) from exc


def _parse_time_of_day(value: str) -> time:
    hour, minute = value.split(":")
    return time(hour=int(hour), minute=int(minute))


def _route_from_record(record: dict[str, Any], worker_id: str, on_date: date) -> WorkerRoute:
    try:
        sequences = []
        for seq in record.get("sequences", []):
            operations = tuple(
                OperationTask(
                    id=str(op["id"]),
                    name=op.get("name") or "",
                    category=op.get("category") or "",
                    is_weather_sensitive=bool(op.get("is_weather_sensitive", False)),
                    requires_photo=bool(op.get("requires_photo", False)),
                    estimated_duration_minutes=int(op.get("estimated_duration_minutes", 15)),
                )
                for op in seq.get("operations", [])
            )
            sequences.append(
                RouteSequence(
                    id=str(seq["id"]),
                    building_id=str(seq["building_id"]),
                    building_name=seq.get("building_name") or "",
                    arrival_time=datetime.combine(on_date, _parse_time_of_day(seq["arrival_time"])),
                    estimated_duration_minutes=int(seq["estimated_duration_minutes"]),
                    operations=operations,
                    is_flexible=bool(seq.get("is_flexible", True)),
                    dependencies=frozenset(str(d) for d in seq.get("dependencies", [])),
                    sequence_type=SequenceType(seq.get("sequence_type", SequenceType.BUILDING_CHECK.value)),
                )
            )
        return WorkerRoute(
            id=str(record["id"]),
            worker_id=worker_id,
            day_of_week=int(record["day_of_week"]),
            sequences=tuple(sequences),
            route_name=record.get("route_name") or "",
            route_type=RouteType(record.get("route_type", RouteType.MORNING_CLEANING.value)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ScheduleLookupError(f"Malformed route record: {record.get('id')!r}", worker_id) from exc
