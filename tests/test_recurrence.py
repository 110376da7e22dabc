"""Tests for recurrence parsing and expansion."""

from datetime import date, datetime

import pytest

from fieldops.domain.models import RoutineScheduleDefinition
from fieldops.domain.recurrence import (
    DailyRule,
    Frequency,
    MonthlyRule,
    UnsupportedRule,
    WeeklyRule,
    parse_rule,
)
from fieldops.scheduling.recurrence_expander import RecurrenceExpander

MONDAY = date(2024, 1, 15)
TUESDAY = date(2024, 1, 16)
WEDNESDAY = date(2024, 1, 17)


class TestParseRule:
    """Tests for parse_rule."""

    def test_weekly_rule(self):
        rule = parse_rule("FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14")

        assert isinstance(rule, WeeklyRule)
        assert rule.frequency == Frequency.WEEKLY
        assert rule.weekdays == frozenset({1, 3})
        assert rule.hours == (9, 14)
        assert rule.minutes == ()

    def test_keys_are_case_insensitive_and_trimmed(self):
        rule = parse_rule(" freq = daily ; byhour = 6 ")

        assert isinstance(rule, DailyRule)
        assert rule.hours == (6,)

    def test_unknown_keys_and_bad_tokens_ignored(self):
        rule = parse_rule("FREQ=DAILY;INTERVAL=2;BYHOUR=7;garbage;A=B=C")

        assert isinstance(rule, DailyRule)
        assert rule.hours == (7,)

    def test_non_integer_values_skipped(self):
        rule = parse_rule("FREQ=DAILY;BYHOUR=6,x,18;BYMINUTE=abc")

        assert rule.hours == (6, 18)
        assert rule.minutes == ()

    def test_unknown_weekday_codes_ignored(self):
        rule = parse_rule("FREQ=WEEKLY;BYDAY=MO,XX,fr")

        assert rule.weekdays == frozenset({0, 4})

    def test_unsupported_frequency(self):
        rule = parse_rule("FREQ=YEARLY;BYHOUR=9")

        assert isinstance(rule, UnsupportedRule)
        assert rule.frequency == "YEARLY"
        assert rule.to_text() == "FREQ=YEARLY;BYHOUR=9"

    def test_missing_frequency(self):
        assert isinstance(parse_rule("BYHOUR=9"), UnsupportedRule)
        assert isinstance(parse_rule(""), UnsupportedRule)

    def test_to_text_round_trips_parsed_fields(self):
        rule = parse_rule("FREQ=WEEKLY;BYHOUR=9;BYDAY=TH,TU")

        assert rule.to_text() == "FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9"
        assert parse_rule(rule.to_text()) == rule


class TestRecurrenceExpander:
    """Tests for RecurrenceExpander.expand."""

    @pytest.fixture
    def expander(self):
        return RecurrenceExpander()

    def test_weekly_day_filter(self, expander):
        rule = "FREQ=WEEKLY;BYDAY=MO,WE,FR;BYHOUR=7"

        assert expander.expand(rule, TUESDAY) == []
        assert expander.expand(rule, WEDNESDAY) == [
            (datetime(2024, 1, 17, 7, 0), 120),
        ]

    def test_hour_cross_product(self, expander):
        result = expander.expand("FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14", TUESDAY)

        assert result == [
            (datetime(2024, 1, 16, 9, 0), 120),
            (datetime(2024, 1, 16, 14, 0), 120),
        ]

    def test_hour_and_minute_cross_product(self, expander):
        result = expander.expand("FREQ=DAILY;BYHOUR=8,16;BYMINUTE=0,30", MONDAY)

        assert [start.strftime("%H:%M") for start, _ in result] == [
            "08:00", "08:30", "16:00", "16:30",
        ]

    def test_daily_defaults(self, expander):
        assert expander.expand("FREQ=DAILY", MONDAY) == [
            (datetime(2024, 1, 15, 9, 0), 60),
        ]

    def test_daily_with_byday(self, expander):
        rule = DailyRule(hours=(6,), weekdays=frozenset({0}))

        assert len(expander.expand(rule, MONDAY)) == 1
        assert expander.expand(rule, TUESDAY) == []

    def test_monthly_first_week_weekdays(self, expander):
        rule = "FREQ=MONTHLY"

        # January 1, 2024 is a Monday
        assert expander.expand(rule, date(2024, 1, 1)) == [
            (datetime(2024, 1, 1, 11, 0), 180),
        ]
        assert expander.expand(rule, date(2024, 1, 5)) != []
        # Saturday in the first week
        assert expander.expand(rule, date(2024, 1, 6)) == []
        # Past day 7
        assert expander.expand(rule, date(2024, 1, 8)) == []

    def test_monthly_ignores_byday(self, expander):
        rule = MonthlyRule(hours=(13,), weekdays=frozenset({4}))

        assert expander.expand(rule, date(2024, 1, 2)) == [
            (datetime(2024, 1, 2, 13, 0), 180),
        ]

    def test_unsupported_frequency_expands_to_nothing(self, expander):
        assert expander.expand("FREQ=YEARLY;BYHOUR=9", MONDAY) == []

    def test_weekly_without_days_expands_daily(self, expander):
        for offset_date in (MONDAY, TUESDAY, date(2024, 1, 21)):
            assert expander.expand("FREQ=WEEKLY;BYHOUR=8", offset_date) == [
                (datetime.combine(offset_date, datetime.min.time()).replace(hour=8), 120),
            ]

    def test_weekly_without_days_can_be_disabled(self):
        expander = RecurrenceExpander(weekly_without_days_expands_daily=False)

        assert expander.expand("FREQ=WEEKLY;BYHOUR=8", MONDAY) == []
        assert len(expander.expand("FREQ=WEEKLY;BYDAY=MO;BYHOUR=8", MONDAY)) == 1

    def test_expansion_is_deterministic(self, expander):
        rule = "FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14;BYMINUTE=15"

        assert expander.expand(rule, TUESDAY) == expander.expand(rule, TUESDAY)

    def test_all_starts_fall_on_the_date(self, expander):
        result = expander.expand("FREQ=DAILY;BYHOUR=0,23;BYMINUTE=0,59", MONDAY)

        assert len(result) == 4
        assert all(start.date() == MONDAY for start, _ in result)


class TestExpandDefinition:
    """Tests for RecurrenceExpander.expand_definition and expand_all."""

    @pytest.fixture
    def expander(self):
        return RecurrenceExpander()

    def _definition(self, routine_id="r1", rule="FREQ=DAILY;BYHOUR=6", **kwargs):
        defaults = dict(
            id=routine_id,
            worker_id="4",
            building_id="10",
            name="Sidewalk Sweep",
            category="Cleaning",
            estimated_duration_minutes=30,
        )
        defaults.update(kwargs)
        return RoutineScheduleDefinition.from_rule_text(rule, **defaults)

    def test_instance_fields(self, expander):
        definition = self._definition(weather_dependent=True, priority=2)

        (instance,) = expander.expand_definition(definition, MONDAY)

        start = datetime(2024, 1, 15, 6, 0)
        assert instance.id == f"r1_{int(start.timestamp())}"
        assert instance.routine_id == "r1"
        assert instance.building_id == "10"
        assert instance.start_time == start
        assert instance.duration_minutes == 30
        assert instance.weather_dependent is True
        assert instance.requires_photo is True
        assert instance.title == "Sidewalk Sweep"
        assert instance.priority == 2

    def test_non_positive_duration_uses_rule_default(self, expander):
        definition = self._definition(
            rule="FREQ=WEEKLY;BYDAY=MO;BYHOUR=10",
            estimated_duration_minutes=0,
        )

        (instance,) = expander.expand_definition(definition, MONDAY)

        assert instance.duration_minutes == 120

    def test_photo_only_for_cleaning_categories(self, expander):
        definition = self._definition(category="Maintenance")

        (instance,) = expander.expand_definition(definition, MONDAY)

        assert instance.requires_photo is False

    def test_expand_all_sorted_by_start(self, expander):
        definitions = [
            self._definition("late", "FREQ=DAILY;BYHOUR=15"),
            self._definition("early", "FREQ=DAILY;BYHOUR=6"),
            self._definition("tue-only", "FREQ=WEEKLY;BYDAY=TU;BYHOUR=7"),
            self._definition("odd", "FREQ=HOURLY"),
        ]

        instances = expander.expand_all(definitions, MONDAY)

        assert [i.routine_id for i in instances] == ["early", "late"]
