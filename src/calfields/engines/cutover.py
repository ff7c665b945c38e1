"""
calfields.engines.cutover
-------------------------
Owns the cutover instant and everything derived from it: the first Gregorian
fixed date, the Gregorian year containing it, and the Julian year containing
the last Julian day.

The policy decides which rule set governs a day, which one governs a year's
February, and where months and years begin when the cutover truncates them.
"""

from __future__ import annotations

import logging
from typing import Tuple

from ..core.time import DEFAULT_CUTOVER, EPOCH_OFFSET, MAX_INSTANT, MIN_INSTANT, ONE_DAY
from ..core.types import LEAP_MONTH_LENGTH, MONTH_LENGTH
from . import fixed_day as fdm
from .rule_set import GREGORIAN, JULIAN, CalendarRuleSet

logger = logging.getLogger(__name__)

# Degenerate cutovers.
PURE_GREGORIAN = MIN_INSTANT
PURE_JULIAN = MAX_INSTANT


class CutoverPolicy:
    """
    Mutable holder of the cutover. Both rule sets are shared module constants,
    so changing the cutover never rebuilds them.
    """

    julian: CalendarRuleSet = JULIAN
    gregorian: CalendarRuleSet = GREGORIAN

    def __init__(self, cutover: int = DEFAULT_CUTOVER):
        self.set_cutover(cutover)

    def set_cutover(self, cutover: int) -> None:
        fixed = cutover // ONE_DAY + EPOCH_OFFSET
        if cutover == MAX_INSTANT:
            # The last representable instant is still Julian.
            fixed += 1
        self.cutover = cutover
        self.cutover_fixed_date = fixed
        self.cutover_year = fdm.gregorian_year(fixed)
        self.cutover_year_julian = fdm.julian_year(fixed - 1)
        logger.debug(
            "cutover at %d: fixed date %d, gregorian year %d, julian year %d",
            cutover, fixed, self.cutover_year, self.cutover_year_julian,
        )

    def copy(self) -> "CutoverPolicy":
        return CutoverPolicy(self.cutover)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CutoverPolicy):
            return NotImplemented
        return self.cutover == other.cutover

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CutoverPolicy(cutover={self.cutover})"

    # ---------------------------------------------------------
    # Rule-set selection
    # ---------------------------------------------------------

    def active_rule_set(self, fixed: int) -> CalendarRuleSet:
        """Gregorian on and after the cutover fixed date, Julian before it."""
        return self.gregorian if fixed >= self.cutover_fixed_date else self.julian

    def rule_set_at(self, instant: int) -> CalendarRuleSet:
        """Same choice keyed on a UTC instant rather than a local day."""
        return self.gregorian if instant >= self.cutover else self.julian

    def calendar_date(self, fixed: int) -> Tuple[CalendarRuleSet, int, int, int]:
        """(rule set, normalized year, 1-based month, day) of a fixed date."""
        rule = self.active_rule_set(fixed)
        y, m, d = rule.date_of(fixed)
        return rule, y, m, d

    def cutover_rule_set(self) -> CalendarRuleSet:
        """Rule set whose year numbering the cutover year belongs to."""
        if self.cutover_year_julian < self.cutover_year:
            return self.gregorian
        return self.julian

    def is_cutover_year(self, year: int, rule: CalendarRuleSet) -> bool:
        cy = self.cutover_year if rule.is_gregorian else self.cutover_year_julian
        return year == cy

    def gregorian_cutover_date(self) -> Tuple[int, int, int]:
        return fdm.gregorian_date(self.cutover_fixed_date)

    def last_julian_date(self) -> Tuple[int, int, int]:
        return fdm.julian_date(self.cutover_fixed_date - 1)

    # ---------------------------------------------------------
    # Year and month structure on the hybrid calendar
    # ---------------------------------------------------------

    def is_leap_year(self, year: int) -> bool:
        """Leap-year test on the hybrid calendar (normalized year)."""
        if year % 4 != 0:
            return False
        if year > self.cutover_year:
            return fdm.gregorian_is_leap(year)
        if year < self.cutover_year_julian:
            return True
        if self.cutover_year == self.cutover_year_julian:
            # February belongs to whichever rule set is in force on March 1.
            gregorian = self.gregorian_cutover_date()[1] < 3
        else:
            gregorian = year == self.cutover_year
        return fdm.gregorian_is_leap(year) if gregorian else True

    def month_length(self, year: int, month: int) -> int:
        """Nominal month length on the hybrid calendar (ignores truncation)."""
        table = LEAP_MONTH_LENGTH if self.is_leap_year(year) else MONTH_LENGTH
        return table[month - 1]

    def year_length(self, year: int) -> int:
        return 366 if self.is_leap_year(year) else 365

    def fixed_date_jan1(self, year: int, fixed: int) -> int:
        """First day of the year containing `fixed`; the cutover day if the year is truncated."""
        if self.cutover_year != self.cutover_year_julian and fixed >= self.cutover_fixed_date:
            return self.cutover_fixed_date
        return JULIAN.fixed_date_of(year, 1, 1)

    def month_bounds(self, fixed: int) -> Tuple[int, int]:
        """
        First and last fixed dates of the month containing `fixed`.

        A month is the run of consecutive days carrying the same (year, month)
        label. The cutover can cut a month short (the days in the gap never
        occur) or lengthen it when the Gregorian labels after the cutover
        repeat the last Julian ones.
        """
        cfd = self.cutover_fixed_date
        rule, y, m, _ = self.calendar_date(fixed)
        ny, nm = (y + 1, 1) if m == 12 else (y, m + 1)
        first = rule.fixed_date_of(y, m, 1)
        last = rule.fixed_date_of(ny, nm, 1) - 1
        if rule.is_gregorian:
            if first < cfd:
                first = cfd
                if JULIAN.date_of(cfd - 1)[:2] == (y, m):
                    first = JULIAN.fixed_date_of(y, m, 1)
        elif last >= cfd:
            last = cfd - 1
            if GREGORIAN.date_of(cfd)[:2] == (y, m):
                last = GREGORIAN.fixed_date_of(ny, nm, 1) - 1
        return first, last
