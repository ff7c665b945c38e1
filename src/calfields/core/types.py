from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Tuple

from .errors import UnknownField


class Field(IntEnum):
    ERA = 0
    YEAR = 1
    MONTH = 2
    WEEK_OF_YEAR = 3
    WEEK_OF_MONTH = 4
    DAY_OF_MONTH = 5
    DAY_OF_YEAR = 6
    DAY_OF_WEEK = 7
    DAY_OF_WEEK_IN_MONTH = 8
    AM_PM = 9
    HOUR = 10
    HOUR_OF_DAY = 11
    MINUTE = 12
    SECOND = 13
    MILLISECOND = 14
    ZONE_OFFSET = 15
    DST_OFFSET = 16


FIELD_COUNT = len(Field)

BCE = 0
CE = 1

(JANUARY, FEBRUARY, MARCH, APRIL, MAY, JUNE, JULY,
 AUGUST, SEPTEMBER, OCTOBER, NOVEMBER, DECEMBER) = range(12)

SUNDAY, MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY = range(1, 8)

AM = 0
PM = 1

_HOUR = 60 * 60 * 1000

#                  ERA YEAR       MONTH WOY WOM DOM DOY DOW DOWIM AM_PM HOUR HOD MIN SEC MS   ZONE        DST
MIN_VALUES = (       0, 1,         0,    1,  0,  1,  1,  1,  -1,   0,    0,   0,  0,  0,  0, -13 * _HOUR, 0)
LEAST_MAX_VALUES = ( 1, 292269054, 11,  52,  4, 28, 365, 7,   4,   1,   11,  23, 59, 59, 999, 14 * _HOUR, 20 * 60 * 1000)
MAX_VALUES = (       1, 292278994, 11,  53,  6, 31, 366, 7,   6,   1,   11,  23, 59, 59, 999, 14 * _HOUR, 2 * _HOUR)

MONTH_LENGTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
LEAP_MONTH_LENGTH = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def as_field(value: Any) -> Field:
    """Coerce an int or name to a Field, raising UnknownField otherwise."""
    if isinstance(value, Field):
        return value
    if isinstance(value, str):
        try:
            return Field[value.upper().replace("-", "_")]
        except KeyError:
            raise UnknownField(value) from None
    try:
        return Field(value)
    except (ValueError, TypeError):
        raise UnknownField(value) from None


class Provenance(Enum):
    UNSET = 0
    COMPUTED = 1
    EXTERNALLY_SET = 2


@dataclass(frozen=True)
class WeekRule:
    first_day_of_week: int = SUNDAY
    minimal_days_in_first_week: int = 1

    def __post_init__(self) -> None:
        if not (SUNDAY <= self.first_day_of_week <= SATURDAY):
            raise ValueError("first_day_of_week must be in 1..7")
        if not (1 <= self.minimal_days_in_first_week <= 7):
            raise ValueError("minimal_days_in_first_week must be in 1..7")


DEFAULT_WEEK_RULE = WeekRule()
ISO_WEEK_RULE = WeekRule(MONDAY, 4)


@dataclass(frozen=True)
class FieldGroup:
    """
    One way of naming a day within a year.

    `keys` must all be set for the group to be complete. `month_based` groups
    also take MONTH. `triggers` decide whether a partially set group is still
    used when no group is complete.
    """
    name: str
    keys: Tuple[Field, ...]
    month_based: bool
    triggers: Tuple[Field, ...] = ()


DOM_GROUP = FieldGroup("day_of_month", (Field.DAY_OF_MONTH,), True)
WOM_GROUP = FieldGroup(
    "week_of_month", (Field.WEEK_OF_MONTH, Field.DAY_OF_WEEK), True,
    triggers=(Field.WEEK_OF_MONTH,),
)
DOWIM_GROUP = FieldGroup(
    "day_of_week_in_month", (Field.DAY_OF_WEEK_IN_MONTH, Field.DAY_OF_WEEK), True,
    triggers=(Field.DAY_OF_WEEK_IN_MONTH, Field.DAY_OF_WEEK),
)
DOY_GROUP = FieldGroup("day_of_year", (Field.DAY_OF_YEAR,), False)
WOY_GROUP = FieldGroup(
    "week_of_year", (Field.WEEK_OF_YEAR, Field.DAY_OF_WEEK), False,
    triggers=(Field.WEEK_OF_YEAR,),
)

DEFAULT_FIELD_PRIORITY: Tuple[FieldGroup, ...] = (
    DOM_GROUP, WOM_GROUP, DOWIM_GROUP, DOY_GROUP, WOY_GROUP,
)


@dataclass(frozen=True)
class CalendarSpec:
    """Pure data payload for constructing a CutoverCalendar."""
    name: str
    cutover: int
    week_rule: WeekRule = DEFAULT_WEEK_RULE
    lenient: bool = True
    field_priority: Tuple[FieldGroup, ...] = DEFAULT_FIELD_PRIORITY
    meta: Dict[str, Any] = field(default_factory=dict)

    def tweak(self, **kwargs) -> "CalendarSpec":
        return replace(self, **kwargs)

    def info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "cutover": self.cutover,
            "first_day_of_week": self.week_rule.first_day_of_week,
            "minimal_days_in_first_week": self.week_rule.minimal_days_in_first_week,
            "lenient": self.lenient,
            "field_priority": [g.name for g in self.field_priority],
            **self.meta,
        }


@dataclass(frozen=True)
class CalendarState:
    """Normalized snapshot sufficient to rebuild a calendar without replaying history."""
    era: int
    year: int
    month: int
    day_of_month: int
    hour_of_day: int
    minute: int
    second: int
    millisecond: int
    zone_offset: int
    dst_offset: int
    cutover: int
    first_day_of_week: int
    minimal_days_in_first_week: int
    lenient: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalendarState":
        return cls(**data)


@dataclass(frozen=True)
class DayInfo:
    instant: int
    spec: str
    fields: Dict[str, int]
    fixed_date: int
    rule_set: str
    attributes: Optional[Dict[str, Any]] = None
    debug: Optional[Dict[str, Any]] = None
