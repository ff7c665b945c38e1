# tests/test_fixed_day.py

import random
from datetime import date

import pytest

from calfields.core.time import EPOCH_OFFSET, from_jdn, to_jdn
from calfields.core.types import MONDAY, SUNDAY, THURSDAY
from calfields.engines import fixed_day as fdm


def test_known_fixed_dates():
    assert fdm.gregorian_fixed_date(1, 1, 1) == 1
    assert fdm.gregorian_fixed_date(1970, 1, 1) == EPOCH_OFFSET
    assert fdm.julian_fixed_date(1, 1, 1) == fdm.JULIAN_EPOCH == -1
    # The 1582 reform: Julian Oct 4 is followed by Gregorian Oct 15.
    assert fdm.julian_fixed_date(1582, 10, 4) == 577735
    assert fdm.gregorian_fixed_date(1582, 10, 15) == 577736
    assert fdm.julian_date(577736) == (1582, 10, 5)

def test_gregorian_matches_datetime():
    random.seed(42)
    for _ in range(5000):
        fd = random.randint(1, date.max.toordinal())
        d = date.fromordinal(fd)
        assert fdm.gregorian_date(fd) == (d.year, d.month, d.day)
        assert fdm.gregorian_fixed_date(d.year, d.month, d.day) == fd
        assert fdm.gregorian_year(fd) == d.year

def test_roundtrip_negative_years():
    random.seed(7)
    for _ in range(5000):
        fd = random.randint(-2_000_000, 2_000_000)
        assert fdm.gregorian_fixed_date(*fdm.gregorian_date(fd)) == fd
        assert fdm.julian_fixed_date(*fdm.julian_date(fd)) == fd
        assert fdm.julian_year(fd) == fdm.julian_date(fd)[0]

def test_month_overflow_carries_into_year():
    assert fdm.gregorian_fixed_date(2000, 13, 1) == fdm.gregorian_fixed_date(2001, 1, 1)
    assert fdm.gregorian_fixed_date(2000, 0, 1) == fdm.gregorian_fixed_date(1999, 12, 1)
    assert fdm.julian_fixed_date(2000, -11, 1) == fdm.julian_fixed_date(1999, 1, 1)
    assert fdm.gregorian_fixed_date(2000, 2, 30) == fdm.gregorian_fixed_date(2000, 3, 1)

@pytest.mark.parametrize("year,greg,jul", [
    (2000, True, True),
    (1900, False, True),
    (1996, True, True),
    (1999, False, False),
    (0, True, True),      # 1 BCE
    (-4, True, True),     # 5 BCE
    (-100, False, True),  # 101 BCE
])
def test_leap_rules(year, greg, jul):
    assert fdm.gregorian_is_leap(year) is greg
    assert fdm.julian_is_leap(year) is jul

def test_day_of_week():
    assert fdm.day_of_week(1) == MONDAY
    assert fdm.day_of_week(fdm.gregorian_fixed_date(1998, 1, 1)) == THURSDAY
    assert fdm.day_of_week(EPOCH_OFFSET) == THURSDAY
    for fd in range(-50, 50):
        assert fdm.day_of_week(fd + 7) == fdm.day_of_week(fd)

def test_day_of_week_on_or_before():
    thu = fdm.gregorian_fixed_date(1998, 1, 1)
    assert fdm.day_of_week_on_or_before(thu, THURSDAY) == thu
    assert fdm.day_of_week_on_or_before(thu, MONDAY) == thu - 3
    assert fdm.day_of_week_on_or_before(thu, SUNDAY) == thu - 4
    assert fdm.day_of_week_on_or_before(-10, SUNDAY) <= -10

def test_week_number():
    jan1 = fdm.gregorian_fixed_date(1998, 1, 1)
    # Sunday weeks, one day is enough: Jan 1 opens week 1.
    assert fdm.week_number(jan1, jan1, SUNDAY, 1) == 1
    # ISO weeks: Thursday Jan 1 still has four days in its Monday week.
    assert fdm.week_number(jan1, jan1, MONDAY, 4) == 1
    jan1_99 = fdm.gregorian_fixed_date(1999, 1, 1)
    # Friday Jan 1 1999 is before ISO week 1.
    assert fdm.week_number(jan1_99, jan1_99, MONDAY, 4) == 0
    assert fdm.week_number(jan1_99, jan1_99 + 3, MONDAY, 4) == 1

def test_era_helpers():
    assert fdm.era_year(1) == (1, 1)
    assert fdm.era_year(0) == (0, 1)
    assert fdm.era_year(-1) == (0, 2)
    for y in range(-20, 20):
        assert fdm.normalize_year(*fdm.era_year(y)) == y

def test_jdn():
    fd = date(2000, 1, 1).toordinal()
    assert to_jdn(fd) == 2451545
    assert from_jdn(2451545) == fd
