# tests/test_cutover.py

import pytest

from calfields.core.time import DEFAULT_CUTOVER
from calfields.engines.cutover import PURE_GREGORIAN, PURE_JULIAN, CutoverPolicy
from calfields.engines.rule_set import GREGORIAN, JULIAN
from calfields.engines.specs import gregorian_cutover


def test_default_derived_values():
    p = CutoverPolicy()
    assert p.cutover == DEFAULT_CUTOVER
    assert p.cutover_fixed_date == 577736
    assert p.cutover_year == 1582
    assert p.cutover_year_julian == 1582
    assert p.gregorian_cutover_date() == (1582, 10, 15)
    assert p.last_julian_date() == (1582, 10, 4)

def test_rule_set_selection():
    p = CutoverPolicy()
    # 577735 is Julian 1582-10-04, the last Julian day.
    assert p.active_rule_set(577735) is JULIAN
    assert p.active_rule_set(577736) is GREGORIAN
    assert p.rule_set_at(DEFAULT_CUTOVER) is GREGORIAN
    assert p.rule_set_at(DEFAULT_CUTOVER - 1) is JULIAN
    assert p.calendar_date(577735) == (JULIAN, 1582, 10, 4)
    assert p.calendar_date(577736) == (GREGORIAN, 1582, 10, 15)

@pytest.mark.parametrize("year,leap", [
    (2000, True),
    (1900, False),
    (1700, False),
    (1600, True),
    (1500, True),   # Julian rules before the cutover
    (1582, False),
    (1584, True),
])
def test_hybrid_leap_years(year, leap):
    assert CutoverPolicy().is_leap_year(year) is leap

def test_degenerate_cutovers():
    greg = CutoverPolicy(PURE_GREGORIAN)
    assert greg.is_leap_year(1500) is False
    assert greg.active_rule_set(1) is GREGORIAN
    assert greg.active_rule_set(-10_000_000) is GREGORIAN

    jul = CutoverPolicy(PURE_JULIAN)
    assert jul.is_leap_year(1900) is True
    assert jul.is_leap_year(2100) is True
    assert jul.active_rule_set(10_000_000) is JULIAN

def test_britain_and_russia():
    britain = CutoverPolicy(gregorian_cutover(1752, 9, 14))
    assert britain.cutover_year == britain.cutover_year_julian == 1752
    assert britain.last_julian_date() == (1752, 9, 2)
    assert britain.is_leap_year(1700) is True

    russia = CutoverPolicy(gregorian_cutover(1918, 2, 14))
    assert russia.last_julian_date() == (1918, 1, 31)
    assert russia.is_leap_year(1900) is True

def test_set_cutover_recomputes():
    p = CutoverPolicy()
    p.set_cutover(gregorian_cutover(1752, 9, 14))
    assert p.cutover_year == 1752
    assert p.gregorian_cutover_date() == (1752, 9, 14)

def test_month_bounds_in_truncated_month():
    p = CutoverPolicy()
    # Oct 15 1582 belongs to a month that began on Julian Oct 1.
    october = (JULIAN.fixed_date_of(1582, 10, 1), GREGORIAN.fixed_date_of(1582, 10, 31))
    assert p.month_bounds(577736) == october
    assert p.month_bounds(577735) == october
    nov1 = GREGORIAN.fixed_date_of(1582, 11, 1)
    assert p.month_bounds(nov1) == (nov1, GREGORIAN.fixed_date_of(1582, 11, 30))

    russia = CutoverPolicy(gregorian_cutover(1918, 2, 14))
    # February 1918 starts on the 14th; January keeps all its Julian days.
    assert russia.month_bounds(GREGORIAN.fixed_date_of(1918, 2, 20)) == (
        russia.cutover_fixed_date, GREGORIAN.fixed_date_of(1918, 2, 28))
    assert russia.month_bounds(JULIAN.fixed_date_of(1918, 1, 10)) == (
        JULIAN.fixed_date_of(1918, 1, 1), russia.cutover_fixed_date - 1)

def test_month_bounds_with_repeated_labels():
    # Julian 50-03-11 is followed by Gregorian 50-03-10: March has 33 days.
    p = CutoverPolicy(gregorian_cutover(50, 3, 10))
    assert p.cutover_year == p.cutover_year_julian == 50
    assert p.last_julian_date() == (50, 3, 11)
    march = (JULIAN.fixed_date_of(50, 3, 1), GREGORIAN.fixed_date_of(50, 3, 31))
    assert p.month_bounds(JULIAN.fixed_date_of(50, 3, 1)) == march
    assert p.month_bounds(p.cutover_fixed_date) == march
    assert march[1] - march[0] + 1 == 33

def test_month_bounds_when_cutover_years_differ():
    # Julian 1599-12-25 is followed by Gregorian 1600-01-05.
    p = CutoverPolicy(gregorian_cutover(1600, 1, 5))
    assert (p.cutover_year, p.cutover_year_julian) == (1600, 1599)
    assert p.last_julian_date() == (1599, 12, 25)
    cfd = p.cutover_fixed_date
    assert p.month_bounds(JULIAN.fixed_date_of(1599, 12, 3)) == (JULIAN.fixed_date_of(1599, 12, 1), cfd - 1)
    assert p.month_bounds(cfd) == (cfd, GREGORIAN.fixed_date_of(1600, 1, 31))
    # Months with the same number in the other year are whole.
    assert p.month_bounds(JULIAN.fixed_date_of(1599, 1, 2)) == (
        JULIAN.fixed_date_of(1599, 1, 1), JULIAN.fixed_date_of(1599, 1, 31))
    assert p.month_bounds(GREGORIAN.fixed_date_of(1600, 12, 3)) == (
        GREGORIAN.fixed_date_of(1600, 12, 1), GREGORIAN.fixed_date_of(1600, 12, 31))

def test_copy_and_equality():
    p = CutoverPolicy()
    q = p.copy()
    assert p == q and p is not q
    q.set_cutover(PURE_GREGORIAN)
    assert p != q
    with pytest.raises(TypeError):
        hash(p)
