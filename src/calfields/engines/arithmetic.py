"""
calfields.engines.arithmetic
----------------------------
Field arithmetic (add, roll) and context-sensitive bounds on normalized
field tables.

Every operation takes a normalized table and returns a new normalized table
(or a number); inputs are never mutated. What-if questions ("what is the
day-of-week of the first of this month?") are answered by resolving an
explicit copy, so probes cannot leak into the caller's state.
"""

from __future__ import annotations

import logging
from typing import Dict, Tuple

from ..core.errors import InconsistentField, InvalidFieldValue, UnknownField
from ..core.time import EPOCH_OFFSET, MAX_INSTANT, MIN_INSTANT, ONE_DAY, ONE_HOUR, split_instant
from ..core.types import (
    BCE, CE, JANUARY, LEAST_MAX_VALUES, MAX_VALUES, MIN_VALUES, SATURDAY, SUNDAY,
    Field, as_field,
)
from . import fixed_day as fdm
from .conversion import ConversionEngine
from .field_table import FieldTable
from .rule_set import GREGORIAN, JULIAN
from .zones import UTC

logger = logging.getLogger(__name__)

F = Field

_FIXED_MAX = frozenset({
    F.ERA, F.DAY_OF_WEEK, F.HOUR, F.AM_PM, F.HOUR_OF_DAY, F.MINUTE,
    F.SECOND, F.MILLISECOND, F.ZONE_OFFSET, F.DST_OFFSET,
})
_CUTOVER_SENSITIVE = frozenset({
    F.MONTH, F.DAY_OF_MONTH, F.DAY_OF_YEAR, F.WEEK_OF_YEAR,
    F.WEEK_OF_MONTH, F.DAY_OF_WEEK_IN_MONTH, F.YEAR,
})
_TIME_UNITS = {
    F.HOUR: ONE_HOUR, F.HOUR_OF_DAY: ONE_HOUR, F.MINUTE: 60 * 1000,
    F.SECOND: 1000, F.MILLISECOND: 1,
}
_DAY_UNITS = {
    F.WEEK_OF_YEAR: 7, F.WEEK_OF_MONTH: 7, F.DAY_OF_WEEK_IN_MONTH: 7,
    F.DAY_OF_MONTH: 1, F.DAY_OF_YEAR: 1, F.DAY_OF_WEEK: 1,
}


def _trunc_rem(a: int, b: int) -> int:
    """Remainder with the sign of the dividend."""
    r = abs(a) % abs(b)
    return r if a >= 0 else -r


def rolled_value(value: int, amount: int, minimum: int, maximum: int) -> int:
    """Wrap `value + amount` into [minimum, maximum]. A range of one value or less collapses to `minimum`."""
    if maximum <= minimum:
        return minimum
    span = maximum - minimum + 1
    n = value + _trunc_rem(amount, span)
    if n > maximum:
        n -= span
    elif n < minimum:
        n += span
    return n


def _arith_field(field) -> Field:
    f = as_field(field)
    if f >= F.ZONE_OFFSET:
        raise UnknownField(f, f"{f.name} does not support add or roll")
    return f


class FieldArithmetic:
    def __init__(self, engine: ConversionEngine, lenient: bool = True):
        self.engine = engine
        self.lenient = lenient

    @property
    def policy(self):
        return self.engine.policy

    # ---------------------------------------------------------
    # Plumbing
    # ---------------------------------------------------------

    def resolve(self, table: FieldTable, lenient=None) -> FieldTable:
        if lenient is None:
            lenient = self.lenient
        return self.engine.resolve(table, lenient=lenient, maximum=self.maximum)

    def _probe(self, table: FieldTable, values: Dict[Field, int]) -> FieldTable:
        t = table.copy()
        for f, v in values.items():
            t.set(f, v)
        return self.engine.resolve(t, lenient=True)

    def _at(self, instant: int) -> FieldTable:
        return self.engine.time_to_fields(instant)

    def _utc(self) -> "FieldArithmetic":
        """Lenient arithmetic in UTC, so date probes never disturb the time of day."""
        return FieldArithmetic(self.engine.with_zone(UTC), lenient=True)

    def _cutover_year(self, table: FieldTable) -> bool:
        return self.policy.is_cutover_year(table.normalized_year, table.rule_set)

    def _move_to(self, table: FieldTable, fixed: int) -> FieldTable:
        """`table` moved to another day, keeping the local time of day."""
        return self.add(table, F.DAY_OF_MONTH, fixed - table.fixed_date)

    def _day_of_month_at(self, fixed: int) -> Tuple[int, int, int]:
        _, y, m, d = self.policy.calendar_date(fixed)
        return y, m, d

    # ---------------------------------------------------------
    # add
    # ---------------------------------------------------------

    def add(self, table: FieldTable, field, amount: int) -> FieldTable:
        """
        Shift `field` by `amount`, carrying into larger fields.

        YEAR and MONTH keep the day of month unless the target month is too
        short, in which case it is pinned to the month's last day.
        """
        if amount == 0:
            return table
        f = _arith_field(field)

        if f is F.YEAR:
            t = table.copy()
            self._shift_year(t, amount)
            return self.resolve(self._pin_day_of_month(t))

        if f is F.MONTH:
            month = table.get(F.MONTH) + amount
            t = table.copy()
            years, month = divmod(month, 12)
            if years:
                self._shift_year(t, years)
            t.set(F.MONTH, month)
            return self.resolve(self._pin_day_of_month(t))

        if f is F.ERA:
            era = min(max(table.get(F.ERA) + amount, BCE), CE)
            t = table.copy()
            t.set(F.ERA, era)
            return self.resolve(t)

        if f in _TIME_UNITS:
            return self._at(table.instant + amount * _TIME_UNITS[f])

        # Day, week and AM_PM fields keep the local time of day across zone changes.
        if f is F.AM_PM:
            days = abs(amount) // 2 * (1 if amount > 0 else -1)
            hours = 12 * (amount - 2 * days)
        else:
            days = amount * _DAY_UNITS[f]
            hours = 0
        time_of_day = (
            ((hours + table.get(F.HOUR_OF_DAY)) * 60 + table.get(F.MINUTE)) * 60 + table.get(F.SECOND)
        ) * 1000 + table.get(F.MILLISECOND)
        fixed = table.fixed_date
        if time_of_day >= ONE_DAY:
            fixed += 1
            time_of_day -= ONE_DAY
        elif time_of_day < 0:
            fixed -= 1
            time_of_day += ONE_DAY
        fixed += days

        offset = table.get(F.ZONE_OFFSET) + table.get(F.DST_OFFSET)
        result = self._at((fixed - EPOCH_OFFSET) * ONE_DAY + time_of_day - offset)
        diff = offset - (result.get(F.ZONE_OFFSET) + result.get(F.DST_OFFSET))
        if diff:
            adjusted = self._at(result.instant + diff)
            if adjusted.fixed_date == fixed:
                logger.debug("add(%s, %d): zone offset changed by %d ms, adjusted", f.name, amount, diff)
                result = adjusted
        return result

    def _shift_year(self, t: FieldTable, amount: int) -> None:
        """Move YEAR by `amount` on the continuous year line; there is no year 0."""
        year = t.get(F.YEAR)
        if t.era == CE:
            year += amount
            if year > 0:
                t.set(F.YEAR, year)
            else:
                t.set(F.YEAR, 1 - year)
                t.set(F.ERA, BCE)
        else:
            year -= amount
            if year > 0:
                t.set(F.YEAR, year)
            else:
                t.set(F.YEAR, 1 - year)
                t.set(F.ERA, CE)

    def _pin_day_of_month(self, t: FieldTable) -> FieldTable:
        """Clamp DAY_OF_MONTH to the length of the (year, month) now in `t`."""
        p = self.policy
        year = t.normalized_year
        if year > p.cutover_year or year < p.cutover_year_julian:
            carry, month = divmod(t.get(F.MONTH), 12)
            length = p.month_length(year + carry, month + 1)
        else:
            first = self._probe(t, {F.DAY_OF_MONTH: 1})
            length = self.actual_maximum(first, F.DAY_OF_MONTH)
        if t.get(F.DAY_OF_MONTH) > length:
            t.set(F.DAY_OF_MONTH, length)
        return t

    # ---------------------------------------------------------
    # roll
    # ---------------------------------------------------------

    def roll(self, table: FieldTable, field, amount) -> FieldTable:
        """
        Shift `field` by `amount` within its current range, leaving larger
        fields unchanged. `amount` may be a bool (True = +1, False = -1).
        """
        if isinstance(amount, bool):
            amount = 1 if amount else -1
        if amount == 0:
            return table
        f = _arith_field(field)

        p = self.policy
        r = self.engine.week_rule
        lo = MIN_VALUES[f]
        hi = self.maximum(f)
        year = table.normalized_year
        fixed = table.fixed_date
        cutover = self._cutover_year(table)
        t = table.copy()

        if f in (F.HOUR, F.HOUR_OF_DAY):
            unit = hi + 1
            h = table.get(f)
            nh = (h + amount) % unit
            result = self._at(table.instant + ONE_HOUR * (nh - h))
            if result.get(F.DAY_OF_MONTH) != table.get(F.DAY_OF_MONTH):
                # A zone transition moved the day; keep the date, take the hour.
                hour_of_day = nh if f is F.HOUR_OF_DAY else nh + 12 * table.get(F.AM_PM)
                result = self._probe(table, {F.HOUR_OF_DAY: hour_of_day})
            return result

        if f is F.MONTH:
            if not cutover:
                month = (table.get(F.MONTH) + amount) % 12
                t.set(F.MONTH, month)
                length = p.month_length(year, month + 1)
            else:
                months = self.actual_maximum(table, F.MONTH) + 1
                month = (table.get(F.MONTH) + amount) % months
                t.set(F.MONTH, month)
                length = self.actual_maximum(self._probe(t, {F.DAY_OF_MONTH: 1}), F.DAY_OF_MONTH)
            if table.get(F.DAY_OF_MONTH) > length:
                t.set(F.DAY_OF_MONTH, length)
            return self.resolve(t)

        if f is F.WEEK_OF_YEAR:
            return self._roll_week_of_year(table, amount, lo)

        if f is F.WEEK_OF_MONTH:
            dow = (table.get(F.DAY_OF_WEEK) - r.first_day_of_week) % 7
            month1, month_end = p.month_bounds(fixed)
            first = fdm.day_of_week_on_or_before(month1 + 6, r.first_day_of_week)
            if first - month1 >= r.minimal_days_in_first_week:
                first -= 7
            hi = self.actual_maximum(table, f)
            value = rolled_value(table.get(f), amount, 1, hi) - 1
            nfd = first + value * 7 + dow
            # Unlike WEEK_OF_YEAR, the day of week gives way at the month's edges.
            return self._move_to(table, min(max(nfd, month1), month_end))

        if f is F.DAY_OF_MONTH:
            # Days of a cutover month are counted from its first existing day,
            # since a label may be missing or occur twice.
            month1, month_end = p.month_bounds(fixed)
            value = rolled_value(fixed - month1, amount, 0, month_end - month1)
            return self._move_to(table, month1 + value)

        if f is F.DAY_OF_YEAR:
            hi = self.actual_maximum(table, f)
            if cutover:
                jan1 = fixed - table.get(F.DAY_OF_YEAR) + 1
                value = rolled_value(fixed - jan1 + 1, amount, lo, hi)
                return self._move_to(table, jan1 + value - 1)

        elif f is F.DAY_OF_WEEK:
            woy = table.get(F.WEEK_OF_YEAR)
            if not cutover and 1 < woy < 52:
                t.set(F.WEEK_OF_YEAR, woy)
                hi = SATURDAY
            else:
                # At year edges the week may straddle two years (or eras).
                amount = _trunc_rem(amount, 7)
                if amount == 0:
                    return table
                week_start = fdm.day_of_week_on_or_before(fixed, r.first_day_of_week)
                nfd = fixed + amount
                if nfd < week_start:
                    nfd += 7
                elif nfd >= week_start + 7:
                    nfd -= 7
                return self._move_to(table, nfd)

        elif f is F.DAY_OF_WEEK_IN_MONTH:
            month1, month_end = p.month_bounds(fixed)
            length = month_end - month1 + 1
            x = (fixed - month1) % 7
            hi = length // 7 + (1 if x < length % 7 else 0)
            value = rolled_value(table.get(f), amount, 1, hi) - 1
            return self._move_to(table, month1 + value * 7 + x)

        t.set(f, rolled_value(table.get(f), amount, lo, hi))
        if f is F.YEAR:
            t = self._pin_day_of_month(t)
        return self.resolve(t)

    def _roll_week_of_year(self, table: FieldTable, amount: int, lo: int) -> FieldTable:
        p = self.policy
        year = table.normalized_year
        rule = table.rule_set
        hi = self.actual_maximum(table, F.WEEK_OF_YEAR)
        woy = table.get(F.WEEK_OF_YEAR)
        t = table.copy()
        t.set(F.DAY_OF_WEEK, table.get(F.DAY_OF_WEEK))

        if not self._cutover_year(table):
            week_year = self.week_year(table)
            if week_year == year:
                value = woy + amount
                if lo < value < hi:
                    t.set(F.WEEK_OF_YEAR, value)
                    return self.resolve(t)
                # The end weeks count only if they hold this weekday within the year.
                if rule.year_of(table.fixed_date - 7 * (woy - lo)) != year:
                    lo += 1
                if rule.year_of(table.fixed_date + 7 * (hi - woy)) != year:
                    hi -= 1
            elif week_year > year:
                if amount < 0:
                    amount += 1
                woy = hi
            else:
                if amount > 0:
                    amount -= woy - hi
                woy = lo
            t.set(F.WEEK_OF_YEAR, rolled_value(woy, amount, lo, hi))
            return self.resolve(t)

        if p.cutover_year == p.cutover_year_julian:
            cal = p.cutover_rule_set()
        elif year == p.cutover_year:
            cal = GREGORIAN
        else:
            cal = JULIAN
        day1 = table.fixed_date - 7 * (woy - lo)
        if cal.year_of(day1) != year:
            lo += 1
        last = table.fixed_date + 7 * (hi - woy)
        if p.active_rule_set(last).year_of(last) != year:
            hi -= 1
        value = rolled_value(woy, amount, lo, hi) - 1
        return self._move_to(table, day1 + value * 7)

    # ---------------------------------------------------------
    # Bounds
    # ---------------------------------------------------------

    def minimum(self, field) -> int:
        return MIN_VALUES[as_field(field)]

    def greatest_minimum(self, field) -> int:
        f = as_field(field)
        if f is F.DAY_OF_MONTH:
            month1 = self.policy.month_bounds(self.policy.cutover_fixed_date)[0]
            return max(MIN_VALUES[f], self._day_of_month_at(month1)[2])
        return MIN_VALUES[f]

    def _cutover_probes(self, f: Field) -> Tuple[int, int]:
        cutover = self.policy.cutover
        return (
            self.actual_maximum(self._at(cutover), f),
            self.actual_maximum(self._at(cutover - 1), f),
        )

    def maximum(self, field) -> int:
        f = as_field(field)
        if f in _CUTOVER_SENSITIVE and self.policy.cutover_year <= 200:
            # Overlapping dates are possible this early.
            return max(MAX_VALUES[f], *self._cutover_probes(f))
        return MAX_VALUES[f]

    def least_maximum(self, field) -> int:
        f = as_field(field)
        if f in _CUTOVER_SENSITIVE:
            return min(LEAST_MAX_VALUES[f], *self._cutover_probes(f))
        return LEAST_MAX_VALUES[f]

    def actual_minimum(self, table: FieldTable, field) -> int:
        """
        Smallest value of `field` in the table's month or year.

        DAY_OF_WEEK_IN_MONTH gives 1 here, although `minimum` allows -1
        (counting back from the end of the month).
        """
        f = as_field(field)
        if f is F.DAY_OF_MONTH:
            return self._day_of_month_at(self.policy.month_bounds(table.fixed_date)[0])[2]
        if f is F.DAY_OF_WEEK_IN_MONTH:
            return 1
        return MIN_VALUES[f]

    def actual_maximum(self, table: FieldTable, field) -> int:
        f = as_field(field)
        if f in _FIXED_MAX:
            return self.maximum(f)

        p = self.policy
        r = self.engine.week_rule
        rule = table.rule_set
        year = table.normalized_year
        month = table.get(F.MONTH) + 1
        cutover = p.is_cutover_year(year, rule)

        if f is F.MONTH:
            if not cutover:
                return 11
            # January 1 of the next year may not exist.
            ny = year
            while True:
                ny += 1
                next_jan1 = GREGORIAN.fixed_date_of(ny, 1, 1)
                if next_jan1 >= p.cutover_fixed_date:
                    break
            return self._day_of_month_at(next_jan1 - 1)[1] - 1

        if f is F.DAY_OF_MONTH:
            if not cutover:
                return rule.month_length(year, month)
            return self._day_of_month_at(p.month_bounds(table.fixed_date)[1])[2]

        if f is F.DAY_OF_YEAR:
            if not cutover:
                return rule.year_length(year)
            if p.cutover_year == p.cutover_year_julian:
                jan1 = p.cutover_rule_set().fixed_date_of(year, 1, 1)
            elif year == p.cutover_year_julian:
                jan1 = rule.fixed_date_of(year, 1, 1)
            else:
                jan1 = p.cutover_fixed_date
            next_jan1 = max(GREGORIAN.fixed_date_of(year + 1, 1, 1), p.cutover_fixed_date)
            return next_jan1 - jan1

        if f is F.WEEK_OF_YEAR:
            if not cutover:
                jan1_dow = (fdm.day_of_week(rule.fixed_date_of(year, 1, 1)) - r.first_day_of_week) % 7
                magic = jan1_dow + r.minimal_days_in_first_week - 1
                if magic == 6 or (rule.is_leap_year(year) and magic in (5, 12)):
                    return 53
                return 52
            max_doy = self.actual_maximum(table, F.DAY_OF_YEAR)
            probe = self._probe(table, {F.DAY_OF_YEAR: max_doy})
            if year != self.week_year(probe):
                probe = self._probe(table, {F.DAY_OF_YEAR: max_doy - 7})
            return probe.get(F.WEEK_OF_YEAR)

        if f is F.WEEK_OF_MONTH:
            if not cutover:
                first = rule.fixed_date_of(year, month, 1)
                dow = (fdm.day_of_week(first) - r.first_day_of_week) % 7
                first_week_days = 7 - dow
                value = 3
                if first_week_days >= r.minimal_days_in_first_week:
                    value += 1
                rest = rule.month_length(year, month) - (first_week_days + 7 * 3)
                if rest > 0:
                    value += 1
                    if rest > 7:
                        value += 1
                return value
            month1, month_end = p.month_bounds(table.fixed_date)
            return self.engine.week_number(month1, month_end)

        if f is F.DAY_OF_WEEK_IN_MONTH:
            dow = table.get(F.DAY_OF_WEEK)
            if not cutover:
                days = rule.month_length(year, month)
                dow1 = fdm.day_of_week(rule.fixed_date_of(year, month, 1))
            else:
                month1, month_end = p.month_bounds(table.fixed_date)
                days = month_end - month1 + 1
                dow1 = fdm.day_of_week(month1)
            days -= (dow - dow1) % 7
            return (days + 6) // 7

        if f is F.YEAR:
            return self._actual_maximum_year(table)

        raise UnknownField(f)

    def _year_offset(self, t: FieldTable) -> int:
        """Milliseconds from the start of the table's year, in UTC terms."""
        ms = (t.get(F.DAY_OF_YEAR) - 1) * 24 + t.get(F.HOUR_OF_DAY)
        ms = (ms * 60 + t.get(F.MINUTE)) * 60 + t.get(F.SECOND)
        return ms * 1000 + t.get(F.MILLISECOND) - (t.get(F.ZONE_OFFSET) + t.get(F.DST_OFFSET))

    def _actual_maximum_year(self, table: FieldTable) -> int:
        current = self._year_offset(table)
        if table.era == CE:
            last = self._at(MAX_INSTANT)
            value = last.get(F.YEAR)
            if current > self._year_offset(last):
                value -= 1
            return value
        rule = self.policy.rule_set_at(table.instant)
        raw, dst = self.engine.zone.offsets_at(MIN_INSTANT)
        fixed, time_of_day = split_instant(MIN_INSTANT + raw + dst)
        ny = rule.year_of(fixed)
        day_of_year = fixed - rule.fixed_date_of(ny, 1, 1) + 1
        first_end = (day_of_year - 1) * ONE_DAY + time_of_day - (raw + dst)
        value = 1 - ny if ny <= 0 else ny
        if current < first_end:
            value -= 1
        return value

    # ---------------------------------------------------------
    # Week dates
    # ---------------------------------------------------------

    def week_year(self, table: FieldTable) -> int:
        """Normalized year that owns the table's WEEK_OF_YEAR."""
        p = self.policy
        minimal = self.engine.week_rule.minimal_days_in_first_week
        first_dow = self.engine.week_rule.first_day_of_week
        year = table.normalized_year

        if year > p.cutover_year + 1:
            woy = table.get(F.WEEK_OF_YEAR)
            if table.get(F.MONTH) == JANUARY:
                if woy >= 52:
                    year -= 1
            elif woy == 1:
                year += 1
            return year

        day_of_year = table.get(F.DAY_OF_YEAR)
        max_doy = self.actual_maximum(table, F.DAY_OF_YEAR)
        if minimal < day_of_year < max_doy - 6:
            return year

        utc = self._utc()
        start = utc._probe(table, {F.DAY_OF_YEAR: 1})
        delta = (first_dow - start.get(F.DAY_OF_WEEK)) % 7
        if delta:
            start = utc.add(start, F.DAY_OF_YEAR, delta)
        min_doy = start.get(F.DAY_OF_YEAR)
        if day_of_year < min_doy:
            if min_doy <= minimal:
                year -= 1
            return year

        era, y = fdm.era_year(year + 1)
        nxt = utc._probe(table, {F.ERA: era, F.YEAR: y, F.DAY_OF_YEAR: 1})
        delta = (first_dow - nxt.get(F.DAY_OF_WEEK)) % 7
        if delta:
            nxt = utc.add(nxt, F.DAY_OF_YEAR, delta)
        min_doy = nxt.get(F.DAY_OF_YEAR) - 1
        if min_doy == 0:
            min_doy = 7
        if min_doy >= minimal:
            days = max_doy - day_of_year + 1
            if days <= 7 - min_doy:
                year += 1
        return year

    def set_week_date(self, table: FieldTable, week_year: int, week_of_year: int, day_of_week: int) -> FieldTable:
        """The table for (week year, week, weekday), keeping the time of day."""
        if not (SUNDAY <= day_of_week <= SATURDAY):
            raise InvalidFieldValue(F.DAY_OF_WEEK, day_of_week, f"invalid day of week: {day_of_week}")
        first_dow = self.engine.week_rule.first_day_of_week
        utc = self._utc()

        g = FieldTable()
        g.rule_set = table.rule_set
        g.set(F.ERA, table.get(F.ERA))
        g.set(F.YEAR, week_year)
        g.set(F.WEEK_OF_YEAR, 1)
        g.set(F.DAY_OF_WEEK, first_dow)
        g = utc.resolve(g)
        days = (day_of_week - first_dow) % 7 + 7 * (week_of_year - 1)
        if days:
            g = utc.add(g, F.DAY_OF_YEAR, days)

        if not self.lenient:
            if utc.week_year(g) != week_year or g.get(F.WEEK_OF_YEAR) != week_of_year:
                raise InconsistentField(F.WEEK_OF_YEAR, week_of_year, g.get(F.WEEK_OF_YEAR))
            if g.get(F.DAY_OF_WEEK) != day_of_week:
                raise InconsistentField(F.DAY_OF_WEEK, day_of_week, g.get(F.DAY_OF_WEEK))

        t = table.copy()
        for f in (F.ERA, F.YEAR, F.MONTH, F.DAY_OF_MONTH):
            t.set(f, g.get(f))
        return self.resolve(t)

    def weeks_in_week_year(self, table: FieldTable) -> int:
        week_year = self.week_year(table)
        if week_year == table.normalized_year:
            return self.actual_maximum(table, F.WEEK_OF_YEAR)
        lenient = FieldArithmetic(self.engine, lenient=True)
        probe = lenient.set_week_date(table, week_year, 2, table.get(F.DAY_OF_WEEK))
        return lenient.actual_maximum(probe, F.WEEK_OF_YEAR)
