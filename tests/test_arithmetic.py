# tests/test_arithmetic.py

import pytest

from calfields.core.errors import InconsistentField, InvalidFieldValue, UnknownField
from calfields.core.types import (
    BCE, CE, DECEMBER, FEBRUARY, JANUARY, JUNE, MAY, MONDAY, OCTOBER, SEPTEMBER,
    Field as F, Provenance,
)
from calfields.core.time import instant_of
from calfields.engines.arithmetic import rolled_value
from calfields.engines.calendar import CutoverCalendar
from calfields.engines.factory import make_calendar
from calfields.engines.rule_set import GREGORIAN, JULIAN
from calfields.engines.specs import BRITAIN, DEFAULT, ISO, JULIAN as JULIAN_SPEC, RUSSIA, gregorian_cutover


def _cal(year, month, day, hour=0, minute=0, *, spec=DEFAULT):
    cal = make_calendar(spec, instant=0)
    cal.set_date(year, month, day, hour, minute, 0)
    cal.get_time()
    return cal

def _ymd(cal):
    return cal.get(F.YEAR), cal.get(F.MONTH), cal.get(F.DAY_OF_MONTH)


def test_rolled_value():
    assert rolled_value(31, 1, 1, 31) == 1
    assert rolled_value(1, -1, 1, 31) == 31
    assert rolled_value(5, 24, 0, 11) == 5
    assert rolled_value(5, -25, 0, 11) == 4
    assert rolled_value(1, 3, 1, 1) == 1
    assert rolled_value(0, 1, 0, -1) == 0

# ---------------------------------------------------------
# add
# ---------------------------------------------------------

def test_add_month_pins_day():
    cal = _cal(2001, JANUARY, 31)
    cal.add(F.MONTH, 1)
    assert _ymd(cal) == (2001, FEBRUARY, 28)

    cal = _cal(2000, JANUARY, 31)
    cal.add(F.MONTH, 1)
    assert _ymd(cal) == (2000, FEBRUARY, 29)

def test_add_month_carries_into_year():
    cal = _cal(2000, 2, 15)
    cal.add(F.MONTH, -13)
    assert _ymd(cal) == (1999, FEBRUARY, 15)
    cal.add("month", 23)
    assert _ymd(cal) == (2001, JANUARY, 15)

def test_add_year_pins_leap_day():
    cal = _cal(2000, FEBRUARY, 29, 10)
    cal.add(F.YEAR, 1)
    assert _ymd(cal) == (2001, FEBRUARY, 28)
    assert cal.get(F.HOUR_OF_DAY) == 10

def test_add_year_crosses_era():
    cal = _cal(1, JANUARY, 1)
    cal.add(F.YEAR, -1)
    assert (cal.get(F.ERA), cal.get(F.YEAR)) == (BCE, 1)
    cal.add(F.YEAR, 2)
    assert (cal.get(F.ERA), cal.get(F.YEAR)) == (CE, 2)

def test_add_era_clamps():
    cal = _cal(2000, JANUARY, 1)
    cal.add(F.ERA, 1)
    assert cal.get(F.ERA) == CE

def test_add_days_across_cutover():
    cal = _cal(1582, OCTOBER, 4)
    cal.add(F.DAY_OF_MONTH, 1)
    assert _ymd(cal) == (1582, OCTOBER, 15)
    cal.add(F.DAY_OF_YEAR, -1)
    assert _ymd(cal) == (1582, OCTOBER, 4)
    cal.add(F.WEEK_OF_YEAR, 1)
    assert _ymd(cal) == (1582, OCTOBER, 21)

def test_add_time_units():
    cal = _cal(2000, JANUARY, 1)
    cal.add(F.HOUR, 25)
    assert _ymd(cal) == (2000, JANUARY, 2)
    assert cal.get(F.HOUR_OF_DAY) == 1
    cal.add(F.MINUTE, -61)
    assert _ymd(cal) == (2000, JANUARY, 1)
    assert (cal.get(F.HOUR_OF_DAY), cal.get(F.MINUTE)) == (23, 59)

def test_add_am_pm():
    cal = _cal(2000, JANUARY, 1, 13)
    cal.add(F.AM_PM, 1)
    assert _ymd(cal) == (2000, JANUARY, 2)
    assert cal.get(F.HOUR_OF_DAY) == 1

    cal = _cal(2000, JANUARY, 1, 13)
    cal.add(F.AM_PM, -1)
    assert _ymd(cal) == (2000, JANUARY, 1)
    assert cal.get(F.HOUR_OF_DAY) == 1

def test_add_zero_is_noop():
    cal = make_calendar(DEFAULT, instant=0)
    cal.set_field(F.DAY_OF_MONTH, 5)
    cal.add(F.DAY_OF_MONTH, 0)
    assert cal.is_set(F.DAY_OF_MONTH)
    assert cal.get(F.DAY_OF_MONTH) == 5

@pytest.mark.parametrize("field", [F.ZONE_OFFSET, F.DST_OFFSET])
def test_zone_fields_reject_arithmetic(field):
    cal = _cal(2000, JANUARY, 1)
    with pytest.raises(UnknownField):
        cal.add(field, 1)
    with pytest.raises(UnknownField):
        cal.roll(field, 1)
    with pytest.raises(UnknownField):
        cal.add("decade", 1)

# ---------------------------------------------------------
# roll
# ---------------------------------------------------------

def test_roll_month_keeps_year():
    cal = _cal(2001, JANUARY, 31)
    cal.roll(F.MONTH, 1)
    assert _ymd(cal) == (2001, FEBRUARY, 28)
    cal = _cal(2001, JANUARY, 15)
    cal.roll(F.MONTH, -1)
    assert _ymd(cal) == (2001, DECEMBER, 15)
    cal.roll(F.MONTH, 12)
    assert _ymd(cal) == (2001, DECEMBER, 15)

def test_roll_day_of_month_wraps():
    cal = _cal(2001, JANUARY, 31)
    cal.roll(F.DAY_OF_MONTH, 1)
    assert _ymd(cal) == (2001, JANUARY, 1)
    cal.roll(F.DAY_OF_MONTH, True)
    assert _ymd(cal) == (2001, JANUARY, 2)
    cal.roll(F.DAY_OF_MONTH, False)
    assert _ymd(cal) == (2001, JANUARY, 1)

def test_roll_day_of_month_in_cutover_month():
    cal = _cal(1582, OCTOBER, 4)
    cal.roll(F.DAY_OF_MONTH, 1)
    assert _ymd(cal) == (1582, OCTOBER, 15)
    cal = _cal(1582, OCTOBER, 31)
    cal.roll(F.DAY_OF_MONTH, 1)
    assert _ymd(cal) == (1582, OCTOBER, 1)

def test_roll_hour_of_day_keeps_date():
    cal = _cal(2000, JANUARY, 1, 23)
    cal.roll(F.HOUR_OF_DAY, 1)
    assert _ymd(cal) == (2000, JANUARY, 1)
    assert cal.get(F.HOUR_OF_DAY) == 0

def test_roll_day_of_year():
    cal = _cal(2001, JANUARY, 1)
    cal.roll(F.DAY_OF_YEAR, -1)
    assert _ymd(cal) == (2001, DECEMBER, 31)

def test_roll_week_of_year_at_year_end():
    # Wednesday 2021-12-29 already belongs to week 1 of 2022.
    cal = _cal(2021, DECEMBER, 29)
    assert cal.get(F.WEEK_OF_YEAR) == 1
    cal.roll(F.WEEK_OF_YEAR, -1)
    assert _ymd(cal) == (2021, DECEMBER, 22)

def test_roll_day_of_week_in_month():
    cal = _cal(2024, MAY, 27)
    assert cal.get(F.DAY_OF_WEEK) == MONDAY
    cal.roll(F.DAY_OF_WEEK_IN_MONTH, 1)
    assert _ymd(cal) == (2024, MAY, 6)

def test_roll_week_of_month():
    cal = _cal(2024, MAY, 15)
    assert cal.get(F.WEEK_OF_MONTH) == 3
    cal.roll(F.WEEK_OF_MONTH, 2)
    assert _ymd(cal) == (2024, MAY, 29)

def test_roll_year_pins_leap_day():
    cal = _cal(2000, FEBRUARY, 29)
    cal.roll(F.YEAR, 1)
    assert _ymd(cal) == (2001, FEBRUARY, 28)

# ---------------------------------------------------------
# Bounds
# ---------------------------------------------------------

def test_static_bounds():
    cal = _cal(2000, JANUARY, 1)
    assert cal.minimum(F.DAY_OF_MONTH) == 1
    assert cal.maximum(F.DAY_OF_MONTH) == 31
    assert cal.least_maximum(F.DAY_OF_MONTH) == 28
    assert cal.greatest_minimum(F.DAY_OF_MONTH) == 1
    assert cal.least_maximum(F.DAY_OF_YEAR) == 355
    assert cal.maximum(F.WEEK_OF_YEAR) == 53

def test_greatest_minimum_for_truncated_month():
    cal = _cal(2000, JANUARY, 1, spec=RUSSIA)
    assert cal.greatest_minimum(F.DAY_OF_MONTH) == 14

@pytest.mark.parametrize("spec,year,month,days", [
    (DEFAULT, 2000, FEBRUARY, 29),
    (DEFAULT, 2001, FEBRUARY, 28),
    (DEFAULT, 1500, FEBRUARY, 29),
    (JULIAN_SPEC, 1900, FEBRUARY, 29),
    (ISO, 1900, FEBRUARY, 28),
    (DEFAULT, 1582, OCTOBER, 31),
])
def test_actual_maximum_day_of_month(spec, year, month, days):
    cal = _cal(year, month, 1, spec=spec)
    assert cal.actual_maximum(F.DAY_OF_MONTH) == days

def test_actual_bounds_in_cutover_years():
    assert _cal(1582, JANUARY, 1).actual_maximum(F.DAY_OF_YEAR) == 355
    assert _cal(1752, JANUARY, 1, spec=BRITAIN).actual_maximum(F.DAY_OF_YEAR) == 355
    assert _cal(2000, JANUARY, 1).actual_maximum(F.DAY_OF_YEAR) == 366
    sep = _cal(1752, SEPTEMBER, 20, spec=BRITAIN)
    assert sep.actual_minimum(F.DAY_OF_MONTH) == 1
    assert sep.actual_maximum(F.MONTH) == 11

def test_actual_minimum_day_of_week_in_month():
    cal = _cal(2024, MAY, 27)
    assert cal.minimum(F.DAY_OF_WEEK_IN_MONTH) == -1
    assert cal.actual_minimum(F.DAY_OF_WEEK_IN_MONTH) == 1

def test_actual_maximum_week_fields():
    cal = _cal(2024, MAY, 15)
    assert cal.actual_maximum(F.WEEK_OF_MONTH) == 5
    assert cal.actual_maximum(F.DAY_OF_WEEK_IN_MONTH) == 5
    assert cal.actual_maximum(F.WEEK_OF_YEAR) == 52

def test_actual_maximum_year():
    cal = _cal(2000, JANUARY, 1)
    assert cal.actual_maximum(F.YEAR) == 292278994

def test_bound_queries_do_not_commit_pending_fields():
    cal = _cal(2000, JANUARY, 1)
    cal.set_field(F.MONTH, FEBRUARY)
    assert cal.actual_maximum(F.DAY_OF_MONTH) == 29
    assert cal.provenance(F.MONTH) is Provenance.EXTERNALLY_SET

# ---------------------------------------------------------
# Week dates
# ---------------------------------------------------------

def test_week_year():
    assert _cal(1999, JANUARY, 1, spec=ISO).week_year() == 1998
    assert _cal(2024, DECEMBER, 30, spec=ISO).week_year() == 2025
    assert _cal(2024, JUNE, 15, spec=ISO).week_year() == 2024

@pytest.mark.parametrize("spec,year,weeks", [
    (ISO, 2020, 53),
    (ISO, 2015, 53),
    (ISO, 2019, 52),
    (DEFAULT, 2020, 52),
])
def test_weeks_in_week_year(spec, year, weeks):
    assert _cal(year, 5, 15, spec=spec).weeks_in_week_year() == weeks

def test_set_week_date():
    cal = _cal(2000, JANUARY, 1, 9, spec=ISO)
    cal.set_week_date(2020, 1, MONDAY)
    assert _ymd(cal) == (2019, DECEMBER, 30)
    assert cal.get(F.HOUR_OF_DAY) == 9
    assert cal.week_year() == 2020
    assert cal.get(F.WEEK_OF_YEAR) == 1

def test_set_week_date_strict():
    cal = _cal(2000, JANUARY, 1, spec=ISO)
    cal.set_lenient(False)
    with pytest.raises(InconsistentField):
        cal.set_week_date(2020, 54, MONDAY)
    with pytest.raises(InvalidFieldValue):
        cal.set_week_date(2020, 1, 8)
    assert _ymd(cal) == (2000, JANUARY, 1)

# ---------------------------------------------------------
# Unusual cutovers
# ---------------------------------------------------------

# Julian 50-03-11 is followed by Gregorian 50-03-10, so March 50 repeats two labels.
REPEAT = gregorian_cutover(50, 3, 10)
# Julian 1599-12-25 is followed by Gregorian 1600-01-05.
SPLIT = gregorian_cutover(1600, 1, 5)

CUTOVERS = [DEFAULT.cutover, BRITAIN.cutover, RUSSIA.cutover, REPEAT, SPLIT]
MONTH_FIELDS = [F.DAY_OF_MONTH, F.WEEK_OF_MONTH, F.DAY_OF_WEEK_IN_MONTH]


def _at(cutover, fixed):
    return CutoverCalendar(cutover=cutover, instant=instant_of(fixed))

def _label(cal):
    return cal.get(F.ERA), cal.get(F.YEAR), cal.get(F.MONTH)

def _days_around(cutover):
    cfd = CutoverCalendar(cutover=cutover, instant=cutover).fixed_date
    return range(cfd - 45, cfd + 46, 3)


def test_repeated_labels_make_a_long_month():
    cal = _at(REPEAT, JULIAN.fixed_date_of(50, 3, 1))
    assert cal.rule_set is JULIAN
    assert cal.actual_minimum(F.DAY_OF_MONTH) == 1
    assert cal.actual_maximum(F.DAY_OF_MONTH) == 31
    assert cal.actual_maximum(F.DAY_OF_WEEK_IN_MONTH) == 5

    days = []
    for _ in range(33):
        days.append(cal.get(F.DAY_OF_MONTH))
        cal.add(F.DAY_OF_MONTH, 1)
    assert days == list(range(1, 12)) + list(range(10, 32))
    assert (cal.get(F.MONTH), cal.get(F.DAY_OF_MONTH)) == (3, 1)

def test_roll_day_of_month_through_repeated_labels():
    first = JULIAN.fixed_date_of(50, 3, 1)
    cal = _at(REPEAT, first)
    cal.roll(F.DAY_OF_MONTH, -1)
    assert cal.fixed_date == GREGORIAN.fixed_date_of(50, 3, 31)
    cal.roll(F.DAY_OF_MONTH, 1)
    assert cal.fixed_date == first

    cal = _at(REPEAT, JULIAN.fixed_date_of(50, 3, 11))
    cal.roll(F.DAY_OF_MONTH, 1)
    assert cal.rule_set is GREGORIAN
    assert cal.get(F.DAY_OF_MONTH) == 10

def test_repeated_label_keeps_the_current_rule_set():
    cal = _at(REPEAT, JULIAN.fixed_date_of(50, 3, 5))
    cal.set_field(F.DAY_OF_MONTH, 10)
    assert cal.fixed_date == JULIAN.fixed_date_of(50, 3, 10)
    assert cal.rule_set is JULIAN

    cal = _at(REPEAT, GREGORIAN.fixed_date_of(50, 3, 20))
    cal.set_field(F.DAY_OF_MONTH, 10)
    assert cal.fixed_date == GREGORIAN.fixed_date_of(50, 3, 10)
    assert cal.rule_set is GREGORIAN

def test_split_cutover_years_leave_other_months_whole():
    dec = _at(SPLIT, GREGORIAN.fixed_date_of(1600, 12, 3))
    assert dec.actual_maximum(F.DAY_OF_MONTH) == 31
    assert dec.actual_maximum(F.DAY_OF_WEEK_IN_MONTH) == 5
    dec.roll(F.DAY_OF_MONTH, 1)
    assert _ymd(dec) == (1600, DECEMBER, 4)

    dec = _at(SPLIT, GREGORIAN.fixed_date_of(1600, 12, 3))
    dec.roll(F.DAY_OF_WEEK_IN_MONTH, 1)
    assert _ymd(dec) == (1600, DECEMBER, 10)

    jan = _at(SPLIT, JULIAN.fixed_date_of(1599, 1, 2))
    assert jan.actual_minimum(F.DAY_OF_MONTH) == 1
    jan.roll(F.DAY_OF_MONTH, -1)
    assert _ymd(jan) == (1599, JANUARY, 1)

def test_split_cutover_truncated_months():
    dec = _at(SPLIT, JULIAN.fixed_date_of(1599, 12, 3))
    assert dec.actual_maximum(F.DAY_OF_MONTH) == 25
    dec.roll(F.DAY_OF_MONTH, -3)
    assert _ymd(dec) == (1599, DECEMBER, 25)

    jan = _at(SPLIT, GREGORIAN.fixed_date_of(1600, 1, 5))
    assert jan.actual_minimum(F.DAY_OF_MONTH) == 5
    assert jan.get(F.DAY_OF_YEAR) == 1
    assert jan.actual_maximum(F.DAY_OF_YEAR) == 362

@pytest.mark.parametrize("cutover", CUTOVERS)
@pytest.mark.parametrize("field", MONTH_FIELDS + [F.MONTH, F.DAY_OF_YEAR])
def test_value_lies_within_actual_bounds(cutover, field):
    for fixed in _days_around(cutover):
        cal = _at(cutover, fixed)
        assert cal.actual_minimum(field) <= cal.get(field) <= cal.actual_maximum(field), fixed

@pytest.mark.parametrize("cutover", CUTOVERS)
@pytest.mark.parametrize("field", MONTH_FIELDS)
def test_month_rolls_stay_in_month(cutover, field):
    for fixed in _days_around(cutover):
        for amount in (1, -1, 2):
            cal = _at(cutover, fixed)
            before = _label(cal)
            cal.roll(field, amount)
            assert _label(cal) == before, (fixed, amount)

@pytest.mark.parametrize("cutover", CUTOVERS)
@pytest.mark.parametrize("field", [F.DAY_OF_MONTH, F.DAY_OF_WEEK_IN_MONTH])
def test_month_rolls_are_reversible(cutover, field):
    for fixed in _days_around(cutover):
        cal = _at(cutover, fixed)
        cal.roll(field, 1)
        cal.roll(field, -1)
        assert cal.fixed_date == fixed

@pytest.mark.parametrize("cutover", CUTOVERS)
def test_roll_month_keeps_year_across_cutover(cutover):
    for fixed in _days_around(cutover):
        for amount in (1, -1):
            cal = _at(cutover, fixed)
            era, year = cal.get(F.ERA), cal.get(F.YEAR)
            cal.roll(F.MONTH, amount)
            assert (cal.get(F.ERA), cal.get(F.YEAR)) == (era, year), (fixed, amount)
