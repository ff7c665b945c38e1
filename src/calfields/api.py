from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Union

from .core.registry import SpecRegistry
from .core.types import CE, CalendarSpec, DayInfo, Field
from .core.time import instant_of
from .attributes import standard as _standard  # noqa: F401
from .attributes.registry import compute_attributes
from .engines.calendar import CutoverCalendar
from .engines.factory import make_calendar as _make_calendar
from .engines.interfaces import ZoneOffsetProvider
from .engines.zones import zone_for

ZoneLike = Union[None, str, ZoneOffsetProvider]
SpecLike = Union[str, CalendarSpec]

_registry: Optional[SpecRegistry] = None

def set_registry(reg: SpecRegistry) -> None:
    global _registry
    _registry = reg

def _reg() -> SpecRegistry:
    if _registry is None:
        raise RuntimeError("Spec registry not initialized")
    return _registry

def _zone(zone: ZoneLike) -> Optional[ZoneOffsetProvider]:
    return zone_for(zone) if isinstance(zone, str) else zone

def _spec(spec: SpecLike) -> CalendarSpec:
    return spec if isinstance(spec, CalendarSpec) else _reg().get(spec)

def list_specs() -> List[str]:
    return _reg().list()

def spec_info(spec: str = "default") -> Dict[str, Any]:
    return _reg().get(spec).info()

def register_spec(spec: CalendarSpec, *, name: Optional[str] = None, overwrite: bool = False) -> None:
    _reg().register(name or spec.name, spec, overwrite=overwrite)

def make_calendar(
    spec: SpecLike = "default",
    *,
    zone: ZoneLike = None,
    instant: Optional[int] = None,
    lenient: Optional[bool] = None,
) -> CutoverCalendar:
    s = _spec(spec)
    if lenient is not None:
        s = replace(s, lenient=lenient)
    return _make_calendar(s, _zone(zone), instant)

# ============================================================
# Day-level API
# ============================================================

def _local_midnight(cal: CutoverCalendar, fixed: int) -> int:
    local = instant_of(fixed)
    raw, dst = cal.zone.offsets_at_wall_clock(local)
    return local - raw - dst

def day_info(
    d: Union[date, int],
    *,
    spec: SpecLike = "default",
    zone: ZoneLike = None,
    attributes: Sequence[str] = (),
    debug: bool = False,
) -> DayInfo:
    """
    Fields of a day. `d` is either a `datetime.date` (read as a proleptic
    Gregorian day, taken at local midnight) or an instant in milliseconds.
    """
    cal = make_calendar(spec, zone=zone, instant=0)
    if isinstance(d, date):
        cal.set_time(_local_midnight(cal, d.toordinal()))
    else:
        cal.set_time(d)
    info = cal.day_info(debug=debug)
    if attributes:
        attrs = compute_attributes(info, attributes)
        info = replace(info, attributes=attrs)
    return info

def to_instant(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    millisecond: int = 0,
    *,
    era: int = CE,
    spec: SpecLike = "default",
    zone: ZoneLike = None,
    lenient: Optional[bool] = None,
) -> int:
    """Instant of a calendar label; `month` is 1-based here."""
    cal = make_calendar(spec, zone=zone, instant=0, lenient=lenient)
    cal.clear()
    for f, v in (
        (Field.ERA, era), (Field.YEAR, year), (Field.MONTH, month - 1),
        (Field.DAY_OF_MONTH, day), (Field.HOUR_OF_DAY, hour), (Field.MINUTE, minute),
        (Field.SECOND, second), (Field.MILLISECOND, millisecond),
    ):
        cal.set_field(f, v)
    return cal.get_time()

def fields_at(instant: int, *, spec: SpecLike = "default", zone: ZoneLike = None) -> Dict[str, int]:
    return make_calendar(spec, zone=zone, instant=instant).fields()

def from_datetime(dt: datetime) -> CutoverCalendar:
    return CutoverCalendar.from_datetime(dt)

def to_datetime(instant: int, *, zone: ZoneLike = None) -> datetime:
    return make_calendar("iso", zone=zone, instant=instant).to_datetime()
