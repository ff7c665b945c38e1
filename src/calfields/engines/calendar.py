"""
calfields.engines.calendar
--------------------------
The Orchestrator. Binds the cutover policy, the conversion engine and the
field arithmetic to one mutable field table, and exposes the set/get
protocol: fields are resolved lazily, and a new table is committed only after
a full, validated resolution.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence

from ..core.time import DEFAULT_CUTOVER, now_millis
from ..core.types import (
    DEFAULT_FIELD_PRIORITY, DEFAULT_WEEK_RULE, ISO_WEEK_RULE,
    CalendarState, DayInfo, Field, FieldGroup, Provenance, WeekRule, as_field,
)
from .arithmetic import FieldArithmetic
from .conversion import ConversionEngine
from .cutover import PURE_GREGORIAN, CutoverPolicy
from .field_table import FieldTable
from .interfaces import ZoneOffsetProvider
from .zones import UTC, FixedOffsetZone, TzInfoZone

F = Field

_EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


class CutoverCalendar:
    """
    A hybrid Julian/Gregorian calendar positioned at one instant.

    Setting a field only records it; `get` and `get_time` resolve the
    recorded fields on demand. In strict (non-lenient) mode a failed
    resolution raises and leaves the previous state untouched.
    """

    def __init__(
        self,
        cutover: int = DEFAULT_CUTOVER,
        week_rule: WeekRule = DEFAULT_WEEK_RULE,
        zone: ZoneOffsetProvider = UTC,
        *,
        lenient: bool = True,
        field_priority: Sequence[FieldGroup] = DEFAULT_FIELD_PRIORITY,
        instant: Optional[int] = None,
        name: str = "custom",
    ):
        self.engine = ConversionEngine(CutoverPolicy(cutover), week_rule, zone, tuple(field_priority))
        self.lenient = lenient
        self.name = name
        self._table = self.engine.time_to_fields(now_millis() if instant is None else int(instant))

    @property
    def policy(self) -> CutoverPolicy:
        return self.engine.policy

    @property
    def cutover(self) -> int:
        return self.engine.policy.cutover

    @property
    def week_rule(self) -> WeekRule:
        return self.engine.week_rule

    @property
    def zone(self) -> ZoneOffsetProvider:
        return self.engine.zone

    @property
    def arithmetic(self) -> FieldArithmetic:
        return FieldArithmetic(self.engine, self.lenient)

    def copy(self) -> "CutoverCalendar":
        other = CutoverCalendar.__new__(CutoverCalendar)
        other.engine = replace(self.engine, policy=self.engine.policy.copy())
        other.lenient = self.lenient
        other.name = self.name
        other._table = self._table.copy()
        return other

    # ---------------------------------------------------------
    # Resolution
    # ---------------------------------------------------------

    def _normalized(self) -> FieldTable:
        """Resolve pending fields and commit the result."""
        if not self._table.is_normalized:
            self._table = self.arithmetic.resolve(self._table)
        return self._table

    def _probe_table(self) -> FieldTable:
        """Normalized view for bound queries; resolves leniently and commits nothing."""
        if self._table.is_normalized:
            return self._table
        return self.arithmetic.resolve(self._table, lenient=True)

    # ---------------------------------------------------------
    # Input
    # ---------------------------------------------------------

    def set_field(self, field, value: int) -> None:
        self._table.set(as_field(field), value)

    def set_date(
        self,
        year: int,
        month: int,
        day: int,
        hour_of_day: Optional[int] = None,
        minute: Optional[int] = None,
        second: Optional[int] = None,
    ) -> None:
        """Set YEAR, MONTH (0-based) and DAY_OF_MONTH, and optionally the time of day."""
        self.set_field(F.YEAR, year)
        self.set_field(F.MONTH, month)
        self.set_field(F.DAY_OF_MONTH, day)
        for f, v in ((F.HOUR_OF_DAY, hour_of_day), (F.MINUTE, minute), (F.SECOND, second)):
            if v is not None:
                self.set_field(f, v)

    def set_time(self, instant: int) -> None:
        self._table = self.engine.time_to_fields(int(instant))

    def clear(self, field=None) -> None:
        self._table.clear(None if field is None else as_field(field))

    def set_lenient(self, lenient: bool) -> None:
        self.lenient = bool(lenient)

    def set_cutover(self, cutover: int) -> None:
        instant = self.get_time()
        self.policy.set_cutover(int(cutover))
        self._table = self.engine.time_to_fields(instant)

    def set_week_rule(self, first_day_of_week: int, minimal_days_in_first_week: int) -> None:
        rule = WeekRule(first_day_of_week, minimal_days_in_first_week)
        if rule == self.engine.week_rule:
            return
        self.engine = replace(self.engine, week_rule=rule)
        computed = [
            f for f in (F.WEEK_OF_MONTH, F.WEEK_OF_YEAR)
            if self._table.provenance_of(f) is Provenance.COMPUTED
        ]
        if not computed:
            return
        probe = self._table.copy()
        probe.clear(F.WEEK_OF_MONTH)
        probe.clear(F.WEEK_OF_YEAR)
        probe = self.engine.resolve(probe, lenient=True)
        for f in computed:
            self._table.set_computed(f, probe.get(f))

    def set_zone(self, zone: ZoneOffsetProvider) -> None:
        instant = self.get_time()
        self.engine = self.engine.with_zone(zone)
        self._table = self.engine.time_to_fields(instant)

    # ---------------------------------------------------------
    # Output
    # ---------------------------------------------------------

    def get(self, field) -> int:
        return self._normalized().get(as_field(field))

    def get_time(self) -> int:
        return self._normalized().instant

    def is_set(self, field) -> bool:
        return self._table.is_set(field)

    def provenance(self, field) -> Provenance:
        return self._table.provenance_of(field)

    def fields(self) -> Dict[str, int]:
        return self._normalized().as_dict()

    @property
    def fixed_date(self) -> int:
        return self._normalized().fixed_date

    @property
    def rule_set(self):
        return self._normalized().rule_set

    # ---------------------------------------------------------
    # Arithmetic
    # ---------------------------------------------------------

    def add(self, field, amount: int) -> None:
        f = as_field(field)
        if amount == 0:
            return
        self._table = self.arithmetic.add(self._normalized(), f, amount)

    def roll(self, field, amount) -> None:
        f = as_field(field)
        if amount == 0 and not isinstance(amount, bool):
            return
        self._table = self.arithmetic.roll(self._normalized(), f, amount)

    # ---------------------------------------------------------
    # Bounds
    # ---------------------------------------------------------

    def minimum(self, field) -> int:
        return self.arithmetic.minimum(field)

    def maximum(self, field) -> int:
        return self.arithmetic.maximum(field)

    def greatest_minimum(self, field) -> int:
        return self.arithmetic.greatest_minimum(field)

    def least_maximum(self, field) -> int:
        return self.arithmetic.least_maximum(field)

    def actual_minimum(self, field) -> int:
        return self.arithmetic.actual_minimum(self._probe_table(), field)

    def actual_maximum(self, field) -> int:
        return self.arithmetic.actual_maximum(self._probe_table(), field)

    def is_leap_year(self, year: int) -> bool:
        return self.policy.is_leap_year(year)

    # ---------------------------------------------------------
    # Week dates
    # ---------------------------------------------------------

    def week_year(self) -> int:
        return self.arithmetic.week_year(self._normalized())

    def set_week_date(self, week_year: int, week_of_year: int, day_of_week: int) -> None:
        self._table = self.arithmetic.set_week_date(self._probe_table(), week_year, week_of_year, day_of_week)

    def weeks_in_week_year(self) -> int:
        return FieldArithmetic(self.engine, lenient=True).weeks_in_week_year(self._probe_table())

    # ---------------------------------------------------------
    # Comparison
    # ---------------------------------------------------------

    def compare(self, other: "CutoverCalendar") -> int:
        a, b = self.get_time(), other.get_time()
        return (a > b) - (a < b)

    def before(self, other: "CutoverCalendar") -> bool:
        return self.compare(other) < 0

    def after(self, other: "CutoverCalendar") -> bool:
        return self.compare(other) > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CutoverCalendar):
            return NotImplemented
        return (
            self.get_time() == other.get_time()
            and self.lenient == other.lenient
            and self.week_rule == other.week_rule
            and self.cutover == other.cutover
            and self.zone == other.zone
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"CutoverCalendar(name={self.name!r}, cutover={self.cutover}, "
            f"zone={self.zone.name!r}, lenient={self.lenient}, {self._table!r})"
        )

    # ---------------------------------------------------------
    # Introspection
    # ---------------------------------------------------------

    def info(self) -> Dict[str, Any]:
        p = self.policy
        return {
            "name": self.name,
            "cutover": p.cutover,
            "cutover_fixed_date": p.cutover_fixed_date,
            "cutover_year": p.cutover_year,
            "cutover_year_julian": p.cutover_year_julian,
            "first_day_of_week": self.week_rule.first_day_of_week,
            "minimal_days_in_first_week": self.week_rule.minimal_days_in_first_week,
            "lenient": self.lenient,
            "zone": self.zone.name,
        }

    def day_info(self, *, debug: bool = False) -> DayInfo:
        t = self._normalized()
        dbg = None
        if debug:
            dbg = {
                "calendar": self.info(),
                "week_year": self.week_year(),
                "actual_max_day_of_month": self.actual_maximum(F.DAY_OF_MONTH),
                "actual_max_day_of_year": self.actual_maximum(F.DAY_OF_YEAR),
            }
        return DayInfo(
            instant=t.instant,
            spec=self.name,
            fields=t.as_dict(),
            fixed_date=t.fixed_date,
            rule_set=t.rule_set.name,
            debug=dbg,
        )

    # ---------------------------------------------------------
    # Persistence and interop
    # ---------------------------------------------------------

    def to_state(self) -> CalendarState:
        t = self._normalized()
        return CalendarState(
            era=t.get(F.ERA),
            year=t.get(F.YEAR),
            month=t.get(F.MONTH),
            day_of_month=t.get(F.DAY_OF_MONTH),
            hour_of_day=t.get(F.HOUR_OF_DAY),
            minute=t.get(F.MINUTE),
            second=t.get(F.SECOND),
            millisecond=t.get(F.MILLISECOND),
            zone_offset=t.get(F.ZONE_OFFSET),
            dst_offset=t.get(F.DST_OFFSET),
            cutover=self.cutover,
            first_day_of_week=self.week_rule.first_day_of_week,
            minimal_days_in_first_week=self.week_rule.minimal_days_in_first_week,
            lenient=self.lenient,
        )

    @classmethod
    def from_state(cls, state: CalendarState, zone: ZoneOffsetProvider = UTC, *, name: str = "custom") -> "CutoverCalendar":
        cal = cls(
            cutover=state.cutover,
            week_rule=WeekRule(state.first_day_of_week, state.minimal_days_in_first_week),
            zone=zone,
            lenient=state.lenient,
            instant=0,
            name=name,
        )
        cal.clear()
        for f, v in (
            (F.ERA, state.era), (F.YEAR, state.year), (F.MONTH, state.month),
            (F.DAY_OF_MONTH, state.day_of_month), (F.HOUR_OF_DAY, state.hour_of_day),
            (F.MINUTE, state.minute), (F.SECOND, state.second), (F.MILLISECOND, state.millisecond),
            (F.ZONE_OFFSET, state.zone_offset), (F.DST_OFFSET, state.dst_offset),
        ):
            cal.set_field(f, v)
        cal.get_time()
        return cal

    def to_datetime(self) -> datetime:
        """Aware `datetime` for the current instant, in the calendar's zone."""
        t = self._normalized()
        if isinstance(self.zone, TzInfoZone):
            tz = self.zone.tz
        else:
            tz = timezone(timedelta(milliseconds=t.get(F.ZONE_OFFSET) + t.get(F.DST_OFFSET)))
        return (_EPOCH_UTC + t.instant * _ONE_MS).astimezone(tz)

    @classmethod
    def from_datetime(cls, dt: datetime) -> "CutoverCalendar":
        """
        Pure Gregorian calendar with ISO weeks at `dt`'s instant. A naive
        `dt` is read as UTC.
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
            zone: ZoneOffsetProvider = UTC
        elif isinstance(dt.tzinfo, timezone):
            offset = dt.utcoffset() // _ONE_MS
            zone = UTC if offset == 0 else FixedOffsetZone(offset)
        else:
            zone = TzInfoZone(dt.tzinfo)
        instant = (dt - _EPOCH_UTC) // _ONE_MS
        return cls(PURE_GREGORIAN, ISO_WEEK_RULE, zone, instant=instant, name="iso")
