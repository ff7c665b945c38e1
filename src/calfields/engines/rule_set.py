"""
calfields.engines.rule_set
--------------------------
The two leap-year rule sets (Julian, Gregorian) as immutable values.

Months are 1-based here. Years are normalized (0 = 1 BCE). Both rule sets
are stateless and shared.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from ..core.types import LEAP_MONTH_LENGTH, MONTH_LENGTH
from . import fixed_day as fdm


class RuleSetKind(Enum):
    JULIAN = "julian"
    GREGORIAN = "gregorian"


@dataclass(frozen=True)
class CalendarRuleSet:
    kind: RuleSetKind

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def is_gregorian(self) -> bool:
        return self.kind is RuleSetKind.GREGORIAN

    def is_leap_year(self, year: int) -> bool:
        if self.is_gregorian:
            return fdm.gregorian_is_leap(year)
        return fdm.julian_is_leap(year)

    def fixed_date_of(self, year: int, month: int, day: int) -> int:
        """Fixed date of (year, month, day). Days and months may overflow."""
        if self.is_gregorian:
            return fdm.gregorian_fixed_date(year, month, day)
        return fdm.julian_fixed_date(year, month, day)

    def date_of(self, fixed: int) -> Tuple[int, int, int]:
        if self.is_gregorian:
            return fdm.gregorian_date(fixed)
        return fdm.julian_date(fixed)

    def year_of(self, fixed: int) -> int:
        if self.is_gregorian:
            return fdm.gregorian_year(fixed)
        return fdm.julian_year(fixed)

    def day_of_week(self, fixed: int) -> int:
        return fdm.day_of_week(fixed)

    def month_length(self, year: int, month: int) -> int:
        table = LEAP_MONTH_LENGTH if self.is_leap_year(year) else MONTH_LENGTH
        return table[month - 1]

    def year_length(self, year: int) -> int:
        return 366 if self.is_leap_year(year) else 365

    def day_of_year(self, fixed: int) -> int:
        return fixed - self.fixed_date_of(self.year_of(fixed), 1, 1) + 1


JULIAN = CalendarRuleSet(RuleSetKind.JULIAN)
GREGORIAN = CalendarRuleSet(RuleSetKind.GREGORIAN)
