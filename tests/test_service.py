"""Tests for the ScheduleService facade."""

from datetime import date, datetime, timedelta

import pytest

from fieldops.domain.models import (
    CurrentConditions,
    HourBlock,
    OperationTask,
    RouteSequence,
    RoutineScheduleDefinition,
    WeatherSnapshot,
    WorkerRoute,
)
from fieldops.domain.policies import DefaultRelevancePolicy, ServiceConfig
from fieldops.persistence.memory import InMemoryScheduleStore, StaticWeatherProvider
from fieldops.persistence.ports import ScheduleLookupError
from fieldops.scheduling.service import ScheduleService

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)


def definition(routine_id, rule, minutes=60, category="Cleaning"):
    return RoutineScheduleDefinition.from_rule_text(
        rule,
        id=routine_id,
        worker_id="4",
        building_id="10",
        name=routine_id.title(),
        category=category,
        estimated_duration_minutes=minutes,
    )


def rainy():
    return WeatherSnapshot(
        current=CurrentConditions(temp_f=50.0, condition="Rain", wind_mph=8.0),
        hourly=tuple(
            HourBlock(time=datetime(2024, 1, 15, h), precip_prob=0.9) for h in range(6, 12)
        ),
    )


@pytest.fixture
def store():
    definitions = [
        definition("sweep", "FREQ=DAILY;BYHOUR=6", minutes=30),
        definition("trash", "FREQ=WEEKLY;BYDAY=MO,WE,FR;BYHOUR=7"),
        definition("mop", "FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14", minutes=120),
        definition("lobby", "FREQ=DAILY;BYHOUR=13", minutes=20, category="Operations"),
    ]
    outdoor = OperationTask(id="op1", name="Sweep", is_weather_sensitive=True)
    indoor = OperationTask(id="op2", name="Mop")
    monday_route = WorkerRoute(
        id="kevin_mon",
        worker_id="4",
        day_of_week=0,
        route_name="Monday Morning",
        sequences=(
            RouteSequence(
                id="open", building_id="10", arrival_time=datetime(2024, 1, 15, 6, 0),
                estimated_duration_minutes=30, operations=(indoor,), is_flexible=False,
            ),
            RouteSequence(
                id="sweep", building_id="10", arrival_time=datetime(2024, 1, 15, 6, 30),
                estimated_duration_minutes=45, operations=(outdoor,),
            ),
            RouteSequence(
                id="mop", building_id="14", arrival_time=datetime(2024, 1, 15, 7, 30),
                estimated_duration_minutes=60, operations=(indoor,),
            ),
            RouteSequence(
                id="hall", building_id="14", arrival_time=datetime(2024, 1, 15, 11, 30),
                estimated_duration_minutes=30, operations=(indoor,),
            ),
        ),
    )
    return InMemoryScheduleStore(definitions, [monday_route])


def service_at(store, now, **kwargs):
    return ScheduleService.from_config(store, clock=lambda: now, **kwargs)


class TestGetScheduleForDate:
    """Tests for ScheduleService.get_schedule_for_date."""

    def test_skip_relevance_returns_whole_day(self, store):
        service = service_at(store, datetime(2024, 1, 15, 12, 0))

        instances = service.get_schedule_for_date("4", MONDAY, skip_relevance_filter=True)

        assert [i.routine_id for i in instances] == ["sweep", "trash", "lobby"]
        assert [i.start_time.hour for i in instances] == [6, 7, 13]

    def test_live_view_during_workday(self, store):
        service = service_at(store, datetime(2024, 1, 15, 6, 45))

        instances = service.get_schedule_for_date("4", MONDAY)

        # sweep ended at 06:30, trash is upcoming, lobby is 6h15m away
        assert [i.routine_id for i in instances] == ["trash"]

    def test_after_hours_previews_next_day(self, store):
        service = service_at(store, datetime(2024, 1, 15, 20, 0))

        instances = service.get_schedule_for_date("4", MONDAY)

        assert [i.routine_id for i in instances] == ["sweep", "mop", "lobby", "mop"]
        assert all(i.schedule_date == TUESDAY for i in instances)

    def test_unknown_worker_is_empty(self, store):
        service = service_at(store, datetime(2024, 1, 15, 9, 0))

        assert service.get_schedule_for_date("99", MONDAY) == []

    def test_lookup_error_for_requested_date_propagates(self, store):
        class BrokenStore(InMemoryScheduleStore):
            def fetch_routine_definitions(self, worker_id):
                raise ScheduleLookupError("store offline", worker_id)

        service = service_at(BrokenStore(), datetime(2024, 1, 15, 9, 0))

        with pytest.raises(ScheduleLookupError):
            service.get_schedule_for_date("4", MONDAY)

    def test_preview_limit_from_config(self, store):
        config = ServiceConfig(relevance_policy=DefaultRelevancePolicy(preview_count=1))
        service = service_at(store, datetime(2024, 1, 15, 20, 0), config=config)

        instances = service.get_schedule_for_date("4", MONDAY)

        assert [i.routine_id for i in instances] == ["sweep"]


class TestWeeklySchedule:
    """Tests for the weekly queries."""

    def test_weekly_schedule_defaults_to_today(self, store):
        service = service_at(store, datetime(2024, 1, 15, 9, 0))

        instances = service.get_weekly_schedule("4")

        # 7 sweeps, 7 lobby checks, 3 trash days, 2 mop days x 2
        assert len(instances) == 21
        assert instances[0].schedule_date == MONDAY
        assert instances[-1].schedule_date == date(2024, 1, 21)

    def test_weekly_duties_breakdown(self, store):
        service = service_at(store, datetime(2024, 1, 15, 9, 0))

        week = service.get_weekly_duties("4", TUESDAY)

        assert week.start_date == TUESDAY
        assert len(week.day_instances[TUESDAY]) == 4


class TestRouteQueries:
    """Tests for the route queries."""

    def test_current_route_by_weekday(self, store):
        assert service_at(store, datetime(2024, 1, 15, 9, 0)).get_current_route("4").id == "kevin_mon"
        assert service_at(store, datetime(2024, 1, 16, 9, 0)).get_current_route("4") is None

    def test_active_sequences(self, store):
        service = service_at(store, datetime(2024, 1, 15, 6, 40))

        assert [s.id for s in service.get_active_sequences("4")] == ["sweep"]

    def test_upcoming_sequences_limited(self, store):
        service = service_at(store, datetime(2024, 1, 15, 5, 0))

        upcoming = service.get_upcoming_sequences("4", limit=2)

        assert [s.id for s in upcoming] == ["open", "sweep"]

    def test_upcoming_sequences_within_lookahead(self, store):
        service = service_at(store, datetime(2024, 1, 15, 8, 0))

        # hall at 11:30 is more than three hours away
        assert service.get_upcoming_sequences("4") == []

    def test_no_route_gives_empty_lists(self, store):
        service = service_at(store, datetime(2024, 1, 16, 9, 0))

        assert service.get_active_sequences("4") == []
        assert service.get_upcoming_sequences("4") == []
        assert service.get_optimized_route("4", rainy()) is None

    def test_optimized_route_with_explicit_weather(self, store):
        service = service_at(store, datetime(2024, 1, 15, 5, 0))

        route = service.get_optimized_route("4", rainy())

        assert route.sequence_ids == ["open", "mop", "hall", "sweep"]
        assert route.id == "kevin_mon_weather_optimized"

    def test_optimized_route_uses_weather_provider(self, store):
        service = service_at(
            store,
            datetime(2024, 1, 15, 5, 0),
            weather_provider=StaticWeatherProvider(rainy()),
        )

        route = service.get_optimized_route("4")

        assert route.sequence_ids == ["open", "mop", "hall", "sweep"]

    def test_optimized_route_without_weather_is_unchanged(self, store):
        service = service_at(store, datetime(2024, 1, 15, 5, 0))

        route = service.get_optimized_route("4")

        assert route.id == "kevin_mon"
        assert route.sequence_ids == ["open", "sweep", "mop", "hall"]
