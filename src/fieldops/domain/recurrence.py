"""Recurrence rules for routine duties.

Routines are declared with a small subset of calendar recurrence syntax,
``KEY=VALUE`` pairs joined by ``;``. Only ``FREQ``, ``BYHOUR``, ``BYMINUTE``
and ``BYDAY`` are understood; anything else is ignored so newer rule text
keeps loading.

Rules are parsed once, when definitions are loaded, into one of the frozen
rule types below. Expansion never looks at the text again.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class Frequency(Enum):
    """Supported recurrence frequencies."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


# Two-letter weekday codes mapped to date.weekday() (Monday = 0)
WEEKDAY_CODES: dict[str, int] = {
    "MO": 0,
    "TU": 1,
    "WE": 2,
    "TH": 3,
    "FR": 4,
    "SA": 5,
    "SU": 6,
}

_CODE_BY_WEEKDAY = {v: k for k, v in WEEKDAY_CODES.items()}


@dataclass(frozen=True)
class _TimedRule:
    """Fields shared by every supported frequency.

    Attributes:
        hours: Hours of day (0-23) the duty starts at. Empty means default.
        minutes: Minutes (0-59) combined with every hour. Empty means :00.
        weekdays: Allowed weekdays as date.weekday() values. Empty means any.
    """

    hours: tuple[int, ...] = ()
    minutes: tuple[int, ...] = ()
    weekdays: frozenset[int] = field(default_factory=frozenset)

    frequency = None  # overridden per variant

    def matches_weekday(self, weekday: int) -> bool:
        """Check a weekday against BYDAY (no BYDAY matches every day)."""
        return not self.weekdays or weekday in self.weekdays

    def to_text(self) -> str:
        """Render the rule back into ``KEY=VALUE;...`` form."""
        parts = [f"FREQ={self.frequency.value}"]
        if self.weekdays:
            codes = [_CODE_BY_WEEKDAY[d] for d in sorted(self.weekdays)]
            parts.append("BYDAY=" + ",".join(codes))
        if self.hours:
            parts.append("BYHOUR=" + ",".join(str(h) for h in self.hours))
        if self.minutes:
            parts.append("BYMINUTE=" + ",".join(str(m) for m in self.minutes))
        return ";".join(parts)


@dataclass(frozen=True)
class DailyRule(_TimedRule):
    """Every day, or only on the BYDAY weekdays."""

    frequency = Frequency.DAILY


@dataclass(frozen=True)
class WeeklyRule(_TimedRule):
    """On the BYDAY weekdays of every week."""

    frequency = Frequency.WEEKLY


@dataclass(frozen=True)
class MonthlyRule(_TimedRule):
    """Once a month, in the first week. BYDAY is carried but not used."""

    frequency = Frequency.MONTHLY


@dataclass(frozen=True)
class UnsupportedRule:
    """A rule whose FREQ is missing or not one we expand.

    Kept as a value instead of raising so that a single odd routine does
    not prevent the rest of a worker's day from loading.
    """

    frequency: str = ""
    source: str = ""

    def to_text(self) -> str:
        return self.source


RecurrenceRule = Union[DailyRule, WeeklyRule, MonthlyRule, UnsupportedRule]

_RULE_TYPES = {
    Frequency.DAILY: DailyRule,
    Frequency.WEEKLY: WeeklyRule,
    Frequency.MONTHLY: MonthlyRule,
}


def _parse_ints(value: str) -> tuple[int, ...]:
    result = []
    for item in value.split(","):
        item = item.strip()
        try:
            result.append(int(item))
        except ValueError:
            continue
    return tuple(result)


def _parse_weekdays(value: str) -> frozenset[int]:
    days = set()
    for item in value.split(","):
        code = item.strip().upper()
        if code in WEEKDAY_CODES:
            days.add(WEEKDAY_CODES[code])
    return frozenset(days)


def parse_rule(text: str) -> RecurrenceRule:
    """Parse rule text such as ``FREQ=WEEKLY;BYDAY=TU,TH;BYHOUR=9,14``.

    Unknown keys, tokens without exactly one ``=`` and values that are not
    integers are skipped. A missing or unknown FREQ gives an
    UnsupportedRule, which expands to nothing.

    Args:
        text: Raw rule text.

    Returns:
        The parsed rule.
    """
    frequency = None
    hours: tuple[int, ...] = ()
    minutes: tuple[int, ...] = ()
    weekdays: frozenset[int] = frozenset()

    for token in (text or "").split(";"):
        parts = token.split("=")
        if len(parts) != 2:
            continue
        key = parts[0].strip().upper()
        value = parts[1].strip()

        if key == "FREQ":
            frequency = value.upper()
        elif key == "BYHOUR":
            hours = _parse_ints(value)
        elif key == "BYMINUTE":
            minutes = _parse_ints(value)
        elif key == "BYDAY":
            weekdays = _parse_weekdays(value)

    try:
        freq = Frequency(frequency)
    except ValueError:
        return UnsupportedRule(frequency=frequency or "", source=text or "")

    return _RULE_TYPES[freq](hours=hours, minutes=minutes, weekdays=weekdays)
