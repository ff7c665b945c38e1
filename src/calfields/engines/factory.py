"""
calfields.engines.factory
-------------------------
Builds a live CutoverCalendar from a CalendarSpec preset.
"""

from __future__ import annotations

from typing import Optional

from ..core.types import CalendarSpec
from .calendar import CutoverCalendar
from .interfaces import ZoneOffsetProvider
from .zones import UTC


def make_calendar(
    spec: CalendarSpec,
    zone: Optional[ZoneOffsetProvider] = None,
    instant: Optional[int] = None,
) -> CutoverCalendar:
    """A fresh calendar for `spec`, at `instant` (default: now) in `zone` (default: UTC)."""
    return CutoverCalendar(
        cutover=spec.cutover,
        week_rule=spec.week_rule,
        zone=UTC if zone is None else zone,
        lenient=spec.lenient,
        field_priority=spec.field_priority,
        instant=instant,
        name=spec.name,
    )
