from __future__ import annotations

from typing import Dict

from ..core.time import DEFAULT_CUTOVER, instant_of
from ..core.types import DEFAULT_WEEK_RULE, ISO_WEEK_RULE, CalendarSpec
from . import fixed_day as fdm
from .cutover import PURE_GREGORIAN, PURE_JULIAN


def gregorian_cutover(year: int, month: int, day: int) -> int:
    """Cutover instant whose first Gregorian day is (year, month, day), 00:00 UTC."""
    return instant_of(fdm.gregorian_fixed_date(year, month, day))


# ============================================================
# PRESETS
# ============================================================

DEFAULT = CalendarSpec(
    name="default",
    cutover=DEFAULT_CUTOVER,
    week_rule=DEFAULT_WEEK_RULE,
    meta={"description": "Papal reform: Julian 1582-10-04 followed by Gregorian 1582-10-15"},
)

ISO = CalendarSpec(
    name="iso",
    cutover=PURE_GREGORIAN,
    week_rule=ISO_WEEK_RULE,
    meta={"description": "Proleptic Gregorian with ISO-8601 weeks"},
)

PROLEPTIC_GREGORIAN = CalendarSpec(
    name="proleptic-gregorian",
    cutover=PURE_GREGORIAN,
    meta={"description": "Gregorian rules for all dates"},
)

JULIAN = CalendarSpec(
    name="julian",
    cutover=PURE_JULIAN,
    meta={"description": "Julian rules for all dates"},
)

BRITAIN = CalendarSpec(
    name="britain",
    cutover=gregorian_cutover(1752, 9, 14),
    meta={"description": "British reform: Julian 1752-09-02 followed by Gregorian 1752-09-14"},
)

RUSSIA = CalendarSpec(
    name="russia",
    cutover=gregorian_cutover(1918, 2, 14),
    week_rule=ISO_WEEK_RULE,
    meta={"description": "Russian reform: Julian 1918-01-31 followed by Gregorian 1918-02-14"},
)

ALL_SPECS: Dict[str, CalendarSpec] = {
    s.name: s for s in (DEFAULT, ISO, PROLEPTIC_GREGORIAN, JULIAN, BRITAIN, RUSSIA)
}
