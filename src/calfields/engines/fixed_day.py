"""
calfields.engines.fixed_day
---------------------------
Pure integer arithmetic on fixed dates (day 1 = 0001-01-01 proleptic
Gregorian) for the Julian and Gregorian rule sets.

Months are 1-based at this layer. Years are "normalized": year 0 is 1 BCE,
year -1 is 2 BCE. Out-of-range months carry into the year, so
(2000, 13, 1) is (2001, 1, 1). All division is floor division, which keeps
the formulas valid for negative years and fixed dates.
"""

from __future__ import annotations

from typing import Tuple

# Fixed date of Julian 0001-01-01.
JULIAN_EPOCH = -1


def _carry_month(year: int, month: int) -> Tuple[int, int]:
    if 1 <= month <= 12:
        return year, month
    return year + (month - 1) // 12, (month - 1) % 12 + 1


def _days_before_month(month: int) -> int:
    """Days before `month` assuming a 30-day February; callers correct for March on."""
    return (367 * month - 362) // 12


# ---------------------------------------------------------
# Gregorian
# ---------------------------------------------------------

def gregorian_is_leap(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def gregorian_fixed_date(year: int, month: int, day: int) -> int:
    year, month = _carry_month(year, month)
    prev = year - 1
    fd = 365 * prev + prev // 4 - prev // 100 + prev // 400 + _days_before_month(month) + day
    if month > 2:
        fd -= 1 if gregorian_is_leap(year) else 2
    return fd


def gregorian_year(fixed: int) -> int:
    d0 = fixed - 1
    n400, d1 = divmod(d0, 146097)
    n100, d2 = divmod(d1, 36524)
    n4, d3 = divmod(d2, 1461)
    n1 = d3 // 365
    year = 400 * n400 + 100 * n100 + 4 * n4 + n1
    if n100 != 4 and n1 != 4:
        year += 1
    return year


def gregorian_date(fixed: int) -> Tuple[int, int, int]:
    year = gregorian_year(fixed)
    prior = fixed - gregorian_fixed_date(year, 1, 1)
    if fixed >= gregorian_fixed_date(year, 3, 1):
        prior += 1 if gregorian_is_leap(year) else 2
    month = (12 * prior + 373) // 367
    day = fixed - gregorian_fixed_date(year, month, 1) + 1
    return year, month, day


# ---------------------------------------------------------
# Julian
# ---------------------------------------------------------

def julian_is_leap(year: int) -> bool:
    return year % 4 == 0


def julian_fixed_date(year: int, month: int, day: int) -> int:
    year, month = _carry_month(year, month)
    prev = year - 1
    fd = JULIAN_EPOCH - 1 + 365 * prev + prev // 4 + _days_before_month(month) + day
    if month > 2:
        fd -= 1 if julian_is_leap(year) else 2
    return fd


def julian_year(fixed: int) -> int:
    return (4 * (fixed - JULIAN_EPOCH) + 1464) // 1461


def julian_date(fixed: int) -> Tuple[int, int, int]:
    year = julian_year(fixed)
    prior = fixed - julian_fixed_date(year, 1, 1)
    if fixed >= julian_fixed_date(year, 3, 1):
        prior += 1 if julian_is_leap(year) else 2
    month = (12 * prior + 373) // 367
    day = fixed - julian_fixed_date(year, month, 1) + 1
    return year, month, day


# ---------------------------------------------------------
# Weeks
# ---------------------------------------------------------

def day_of_week(fixed: int) -> int:
    """1 = Sunday .. 7 = Saturday. Fixed date 1 is a Monday."""
    return fixed % 7 + 1


def day_of_week_on_or_before(fixed: int, dow: int) -> int:
    return fixed - (fixed - (dow - 1)) % 7


def week_number(first_day: int, fixed: int, first_day_of_week: int, minimal_days: int) -> int:
    """
    Week number of `fixed` in the period starting at `first_day`.

    Week 1 is the first week (starting on `first_day_of_week`) holding at
    least `minimal_days` days of the period. Days before it are in week 0
    (or a negative week).
    """
    start = day_of_week_on_or_before(first_day + 6, first_day_of_week)
    if start - first_day >= minimal_days:
        start -= 7
    return (fixed - start) // 7 + 1


# ---------------------------------------------------------
# Era helpers
# ---------------------------------------------------------

def normalize_year(era: int, year: int) -> int:
    """(era, year-of-era) to a normalized year; era 0 is BCE."""
    return year if era != 0 else 1 - year


def era_year(normalized: int) -> Tuple[int, int]:
    """Normalized year to (era, year-of-era)."""
    if normalized > 0:
        return 1, normalized
    return 0, 1 - normalized
