"""Recurrence expansion into concrete duty times.

This module turns a parsed recurrence rule and a calendar date into the
start times the rule produces on that date, and routine definitions into
ScheduleInstance values.
"""

from datetime import date, datetime, time, timedelta
from typing import Union

from fieldops.domain.models import RoutineScheduleDefinition, ScheduleInstance
from fieldops.domain.recurrence import (
    DailyRule,
    MonthlyRule,
    RecurrenceRule,
    UnsupportedRule,
    WeeklyRule,
    parse_rule,
)

# (default start hour, default slot duration in minutes) per frequency
DAILY_DEFAULTS = (9, 60)
WEEKLY_DEFAULTS = (10, 120)
MONTHLY_DEFAULTS = (11, 180)

# Monthly rules fire on weekdays within the first 7 days of the month
MONTHLY_LAST_DAY = 7
FRIDAY = 4


class RecurrenceExpander:
    """Expands recurrence rules for a single date.

    Expansion is a pure function of (rule, date): calling it twice with the
    same inputs gives the same result.

    Example:
        >>> expander = RecurrenceExpander()
        >>> expander.expand("FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14", date(2024, 1, 16))
        [(datetime(2024, 1, 16, 9, 0), 120), (datetime(2024, 1, 16, 14, 0), 120)]
    """

    def __init__(self, weekly_without_days_expands_daily: bool = True):
        """Initialize the expander.

        Args:
            weekly_without_days_expands_daily: If True, a WEEKLY rule with no
                BYDAY fires every day. Existing routine data depends on this;
                set False to make such rules produce nothing.
        """
        self.weekly_without_days_expands_daily = weekly_without_days_expands_daily

    def expand(
        self,
        rule: Union[RecurrenceRule, str],
        on_date: date,
    ) -> list[tuple[datetime, int]]:
        """Expand a rule for one date.

        Args:
            rule: Parsed rule, or rule text to parse.
            on_date: Calendar date to expand for.

        Returns:
            List of (start_time, default_duration_minutes). Empty when the
            rule does not fire on the date or its frequency is unsupported.
        """
        if isinstance(rule, str):
            rule = parse_rule(rule)

        if isinstance(rule, UnsupportedRule):
            return []

        weekday = on_date.weekday()

        if isinstance(rule, DailyRule):
            if not rule.matches_weekday(weekday):
                return []
            default_hour, duration = DAILY_DEFAULTS

        elif isinstance(rule, WeeklyRule):
            if rule.weekdays:
                if weekday not in rule.weekdays:
                    return []
            elif not self.weekly_without_days_expands_daily:
                return []
            default_hour, duration = WEEKLY_DEFAULTS

        elif isinstance(rule, MonthlyRule):
            if on_date.day > MONTHLY_LAST_DAY or weekday > FRIDAY:
                return []
            default_hour, duration = MONTHLY_DEFAULTS

        else:
            return []

        hours = rule.hours or (default_hour,)
        minutes = rule.minutes or (0,)

        return [
            (datetime.combine(on_date, time(hour=hour, minute=minute)), duration)
            for hour in hours
            for minute in minutes
        ]

    def expand_definition(
        self,
        definition: RoutineScheduleDefinition,
        on_date: date,
    ) -> list[ScheduleInstance]:
        """Expand a routine definition into schedule instances for a date.

        The routine's own estimated duration sets each instance's end; the
        rule's default slot length is used only when that is not positive.
        """
        instances = []
        for start_time, default_minutes in self.expand(definition.rule, on_date):
            minutes = definition.estimated_duration_minutes
            if minutes <= 0:
                minutes = default_minutes

            instances.append(
                ScheduleInstance(
                    id=f"{definition.id}_{int(start_time.timestamp())}",
                    routine_id=definition.id,
                    building_id=definition.building_id,
                    start_time=start_time,
                    end_time=start_time + timedelta(minutes=minutes),
                    category=definition.category,
                    weather_dependent=definition.weather_dependent,
                    requires_photo=definition.requires_photo,
                    title=definition.name,
                    building_name=definition.building_name,
                    priority=definition.priority,
                )
            )
        return instances

    def expand_all(
        self,
        definitions: list[RoutineScheduleDefinition],
        on_date: date,
    ) -> list[ScheduleInstance]:
        """Expand every definition for a date, merged and sorted by start."""
        instances = []
        for definition in definitions:
            instances.extend(self.expand_definition(definition, on_date))
        instances.sort(key=lambda i: (i.start_time, i.routine_id))
        return instances
