"""
calfields.engines.conversion
----------------------------
Instant <-> FieldTable conversion on the hybrid Julian/Gregorian calendar.

`time_to_fields` always produces a complete table (every field COMPUTED).
`resolve` goes the other way: it selects the governing fields, finds the
fixed date and local time, applies the zone, and returns the table
recomputed from the resulting instant. The input table is never modified,
so a failed resolution leaves the caller's state intact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, FrozenSet, Optional, Sequence, Tuple

from ..core.errors import InconsistentField, InvalidFieldValue, NonExistentDate
from ..core.time import EPOCH_OFFSET, EPOCH_YEAR, ONE_DAY, ONE_HOUR, ONE_MINUTE, ONE_SECOND, split_instant
from ..core.types import (
    BCE, CE, DEFAULT_FIELD_PRIORITY, DEFAULT_WEEK_RULE, MAX_VALUES, MIN_VALUES,
    Field, FieldGroup, WeekRule,
)
from . import fixed_day as fdm
from .cutover import CutoverPolicy
from .field_table import FieldTable
from .interfaces import ZoneOffsetProvider
from .rule_set import GREGORIAN, JULIAN, CalendarRuleSet
from .zones import UTC

logger = logging.getLogger(__name__)

F = Field


@dataclass
class ConversionEngine:
    policy: CutoverPolicy = field(default_factory=CutoverPolicy)
    week_rule: WeekRule = DEFAULT_WEEK_RULE
    zone: ZoneOffsetProvider = UTC
    field_priority: Tuple[FieldGroup, ...] = DEFAULT_FIELD_PRIORITY

    def with_zone(self, zone: ZoneOffsetProvider) -> "ConversionEngine":
        return replace(self, zone=zone)

    def week_number(self, first_day: int, fixed: int) -> int:
        r = self.week_rule
        return fdm.week_number(first_day, fixed, r.first_day_of_week, r.minimal_days_in_first_week)

    # ---------------------------------------------------------
    # Month structure of a normalized table
    # ---------------------------------------------------------

    def month_start(self, table: FieldTable) -> int:
        """Fixed date of the first existing day of the table's month."""
        return self.policy.month_bounds(table.fixed_date)[0]

    def actual_month_length(self, table: FieldTable) -> int:
        """Number of existing days in the table's month, cutover gap excluded."""
        first, last = self.policy.month_bounds(table.fixed_date)
        return last - first + 1

    # ---------------------------------------------------------
    # Instant -> fields
    # ---------------------------------------------------------

    def time_to_fields(
        self,
        instant: int,
        zone_offset: Optional[int] = None,
        dst_offset: Optional[int] = None,
    ) -> FieldTable:
        """
        All fields for `instant`. Explicit `zone_offset` / `dst_offset`
        override the zone provider.
        """
        if zone_offset is None or dst_offset is None:
            raw, dst = self.zone.offsets_at(instant)
            if zone_offset is not None:
                raw = zone_offset
            if dst_offset is not None:
                dst = dst_offset
        else:
            raw, dst = zone_offset, dst_offset

        fixed, time_of_day = split_instant(instant + raw + dst)
        rule, year, month, dom = self.policy.calendar_date(fixed)
        era, year_of_era = fdm.era_year(year)

        t = FieldTable()
        t.instant, t.fixed_date, t.rule_set = instant, fixed, rule
        t.set_computed(F.ERA, era)
        t.set_computed(F.YEAR, year_of_era)
        t.set_computed(F.MONTH, month - 1)
        t.set_computed(F.DAY_OF_MONTH, dom)
        t.set_computed(F.DAY_OF_WEEK, fdm.day_of_week(fixed))

        hours, rem = divmod(time_of_day, ONE_HOUR)
        t.set_computed(F.HOUR_OF_DAY, hours)
        t.set_computed(F.AM_PM, hours // 12)
        t.set_computed(F.HOUR, hours % 12)
        t.set_computed(F.MINUTE, rem // ONE_MINUTE)
        rem %= ONE_MINUTE
        t.set_computed(F.SECOND, rem // ONE_SECOND)
        t.set_computed(F.MILLISECOND, rem % ONE_SECOND)
        t.set_computed(F.ZONE_OFFSET, raw)
        t.set_computed(F.DST_OFFSET, dst)

        self._compute_week_fields(t, rule, year, dom, fixed)
        return t

    def _compute_week_fields(self, t: FieldTable, rule: CalendarRuleSet, year: int, dom: int, fixed: int) -> None:
        p = self.policy
        cy, cyj, cfd = p.cutover_year, p.cutover_year_julian, p.cutover_fixed_date
        rule_cutover_year = cy if rule.is_gregorian else cyj

        jan1 = rule.fixed_date_of(year, 1, 1)
        day_of_year = fixed - jan1 + 1
        month1 = fixed - dom + 1
        relative_dom = dom - 1

        if year == rule_cutover_year:
            # Count from the first existing day of the cutover year and month.
            if cyj <= cy:
                jan1 = p.fixed_date_jan1(year, fixed)
            month1 = p.month_bounds(fixed)[0]
            day_of_year = fixed - jan1 + 1
            relative_dom = fixed - month1

        t.set_computed(F.DAY_OF_YEAR, day_of_year)
        t.set_computed(F.DAY_OF_WEEK_IN_MONTH, relative_dom // 7 + 1)

        woy = self.week_number(jan1, fixed)
        if woy == 0:
            # The day belongs to the last week of the previous year.
            dec31 = jan1 - 1
            prev_jan1 = jan1 - 365
            if year > rule_cutover_year + 1:
                if fdm.gregorian_is_leap(year - 1):
                    prev_jan1 -= 1
            elif year <= cyj:
                if fdm.julian_is_leap(year - 1):
                    prev_jan1 -= 1
            else:
                prev_year = p.calendar_date(dec31)[1]
                if prev_year == cy:
                    if p.cutover_rule_set() is JULIAN:
                        prev_jan1 = JULIAN.fixed_date_of(prev_year, 1, 1)
                    else:
                        prev_jan1 = cfd
                elif prev_year <= cyj:
                    prev_jan1 = JULIAN.fixed_date_of(prev_year, 1, 1)
            woy = self.week_number(prev_jan1, dec31)
        elif year > cy or year < cyj - 1:
            if woy >= 52:
                next_jan1 = jan1 + rule.year_length(year)
                if self._starts_week_one(next_jan1, fixed):
                    woy = 1
        else:
            cal = rule
            next_year = year + 1
            if next_year == cyj + 1 and next_year < cy:
                next_year = cy
            if next_year == cy:
                cal = p.cutover_rule_set()
            if next_year > cy or cyj == cy or next_year == cyj:
                next_jan1 = cal.fixed_date_of(next_year, 1, 1)
            else:
                next_jan1 = cfd
            if self._starts_week_one(next_jan1, fixed):
                woy = 1

        t.set_computed(F.WEEK_OF_YEAR, woy)
        t.set_computed(F.WEEK_OF_MONTH, self.week_number(month1, fixed))

    def _starts_week_one(self, next_jan1: int, fixed: int) -> bool:
        """True if `fixed` falls in week 1 of the year starting at `next_jan1`."""
        r = self.week_rule
        first = fdm.day_of_week_on_or_before(next_jan1 + 6, r.first_day_of_week)
        return first - next_jan1 >= r.minimal_days_in_first_week and fixed >= first - 7

    # ---------------------------------------------------------
    # Fields -> instant
    # ---------------------------------------------------------

    def fields_to_time(self, table: FieldTable, *, lenient: bool = True) -> int:
        return self.resolve(table, lenient=lenient).instant

    def resolve(
        self,
        table: FieldTable,
        *,
        lenient: bool = True,
        maximum: Optional[Callable[[Field], int]] = None,
    ) -> FieldTable:
        """
        Compute the instant named by `table` and return the complete table for it.

        In strict mode every externally set field must lie within
        [minimum, maximum] and must survive normalization unchanged.
        """
        external = table.externally_set()
        if not lenient:
            for f in external:
                hi = maximum(f) if maximum is not None else MAX_VALUES[f]
                value = table.get(f)
                if value < MIN_VALUES[f] or value > hi:
                    raise InvalidFieldValue(f, value)

        mask = table.select_fields(self.field_priority)

        year = table.get(F.YEAR) if table.is_set(F.YEAR) else EPOCH_YEAR
        era = table.era
        if era == BCE:
            year = 1 - year
        elif era != CE:
            raise InvalidFieldValue(F.ERA, era, f"ERA: {era} is neither BCE (0) nor CE (1)")

        if F.HOUR_OF_DAY in mask:
            hours = table.get(F.HOUR_OF_DAY)
        else:
            hours = table.get(F.HOUR)
            if F.AM_PM in mask:
                hours += 12 * table.get(F.AM_PM)
        time_of_day = ((hours * 60 + table.get(F.MINUTE)) * 60 + table.get(F.SECOND)) * 1000
        time_of_day += table.get(F.MILLISECOND)
        day_carry, time_of_day = divmod(time_of_day, ONE_DAY)

        fixed = day_carry + self._resolve_fixed_date(table, year, mask, lenient)
        millis = (fixed - EPOCH_OFFSET) * ONE_DAY + time_of_day

        zone_set = F.ZONE_OFFSET in mask
        dst_set = F.DST_OFFSET in mask
        if zone_set and dst_set:
            raw, dst = table.get(F.ZONE_OFFSET), table.get(F.DST_OFFSET)
        else:
            raw, dst = self.zone.offsets_at_wall_clock(millis)
            if zone_set:
                raw = table.get(F.ZONE_OFFSET)
            if dst_set:
                dst = table.get(F.DST_OFFSET)
        instant = millis - raw - dst

        result = self.time_to_fields(
            instant,
            raw if zone_set else None,
            dst if dst_set else None,
        )
        if not lenient:
            self._check_consistency(table, result, external)
        return result

    def _check_consistency(self, original: FieldTable, result: FieldTable, external: Sequence[Field]) -> None:
        for f in external:
            value = original.get(f)
            got = result.get(f)
            if f is F.DAY_OF_WEEK_IN_MONTH and value < 0:
                relative = result.fixed_date - self.month_start(result)
                got = -((self.actual_month_length(result) - 1 - relative) // 7 + 1)
            if value != got:
                raise InconsistentField(f, value, got)

    def _resolve_fixed_date(self, table: FieldTable, year: int, mask: FrozenSet[Field], lenient: bool) -> int:
        p = self.policy
        cy, cyj, cfd = p.cutover_year, p.cutover_year_julian, p.cutover_fixed_date

        if year > cy and year > cyj:
            gfd = self._fixed_date(GREGORIAN, year, table, mask)
            if gfd >= cfd:
                return gfd
            jfd = self._fixed_date(JULIAN, year, table, mask)
        elif year < cy and year < cyj:
            jfd = self._fixed_date(JULIAN, year, table, mask)
            if jfd < cfd:
                return jfd
            gfd = jfd
        else:
            jfd = self._fixed_date(JULIAN, year, table, mask)
            gfd = self._fixed_date(GREGORIAN, year, table, mask)

        # Day-of-year and week-of-year count from the cutover year's actual first day.
        if F.DAY_OF_YEAR in mask or F.WEEK_OF_YEAR in mask:
            if cy == cyj:
                return jfd
            if year == cy:
                return gfd

        if gfd >= cfd:
            if jfd >= cfd:
                return gfd
            # overlap: keep the rule set of the previous resolution
            previous = table.rule_set
            chosen = jfd if previous is not None and not previous.is_gregorian else gfd
            logger.debug("overlap in %d: julian %d, gregorian %d, chose %d", year, jfd, gfd, chosen)
            return chosen
        if jfd < cfd:
            return jfd
        # gap
        if not lenient:
            raise NonExistentDate(year, table.get(F.MONTH) + 1, table.get(F.DAY_OF_MONTH))
        logger.debug("date in cutover gap (year %d), using julian fixed date %d", year, jfd)
        return jfd

    def _fixed_date(self, rule: CalendarRuleSet, year: int, table: FieldTable, mask: FrozenSet[Field]) -> int:
        r = self.week_rule
        month = 0
        if F.MONTH in mask:
            month = table.get(F.MONTH)
            if not (0 <= month <= 11):
                carry, month = divmod(month, 12)
                year += carry

        fixed = rule.fixed_date_of(year, month + 1, 1)
        if F.MONTH in mask:
            if F.DAY_OF_MONTH in mask:
                if table.is_set(F.DAY_OF_MONTH):
                    fixed += table.get(F.DAY_OF_MONTH) - 1
            elif F.WEEK_OF_MONTH in mask:
                first = fdm.day_of_week_on_or_before(fixed + 6, r.first_day_of_week)
                if first - fixed >= r.minimal_days_in_first_week:
                    first -= 7
                if F.DAY_OF_WEEK in mask:
                    first = fdm.day_of_week_on_or_before(first + 6, table.get(F.DAY_OF_WEEK))
                fixed = first + 7 * (table.get(F.WEEK_OF_MONTH) - 1)
            else:
                dow = table.get(F.DAY_OF_WEEK) if F.DAY_OF_WEEK in mask else r.first_day_of_week
                dowim = table.get(F.DAY_OF_WEEK_IN_MONTH) if F.DAY_OF_WEEK_IN_MONTH in mask else 1
                if dowim >= 0:
                    fixed = fdm.day_of_week_on_or_before(fixed + 7 * dowim - 1, dow)
                else:
                    last = self.policy.month_length(year, month + 1) + 7 * (dowim + 1)
                    fixed = fdm.day_of_week_on_or_before(fixed + last - 1, dow)
            return fixed

        p = self.policy
        if (year == p.cutover_year and rule.is_gregorian and fixed < p.cutover_fixed_date
                and p.cutover_year != p.cutover_year_julian):
            # January 1 does not exist in this year.
            fixed = p.cutover_fixed_date
        if F.DAY_OF_YEAR in mask:
            return fixed + table.get(F.DAY_OF_YEAR) - 1
        first = fdm.day_of_week_on_or_before(fixed + 6, r.first_day_of_week)
        if first - fixed >= r.minimal_days_in_first_week:
            first -= 7
        if F.DAY_OF_WEEK in mask:
            dow = table.get(F.DAY_OF_WEEK)
            if dow != r.first_day_of_week:
                first = fdm.day_of_week_on_or_before(first + 6, dow)
        return first + 7 * (table.get(F.WEEK_OF_YEAR) - 1)
