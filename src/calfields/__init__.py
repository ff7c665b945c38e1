"""calfields public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

# Initialize registry on import
from . import api_init as _api_init  # noqa: F401

from .api import (
    list_specs,
    spec_info,
    register_spec,
    make_calendar,
    day_info,
    to_instant,
    fields_at,
    from_datetime,
    to_datetime,
)
from .core.errors import (
    CalfieldsError,
    InvalidFieldValue,
    NonExistentDate,
    InconsistentField,
    UnknownField,
)
from .core.types import CalendarSpec, CalendarState, DayInfo, Field, WeekRule
from .engines.calendar import CutoverCalendar

__all__ = [
    "list_specs",
    "spec_info",
    "register_spec",
    "make_calendar",
    "day_info",
    "to_instant",
    "fields_at",
    "from_datetime",
    "to_datetime",
    "CalfieldsError",
    "InvalidFieldValue",
    "NonExistentDate",
    "InconsistentField",
    "UnknownField",
    "CalendarSpec",
    "CalendarState",
    "DayInfo",
    "Field",
    "WeekRule",
    "CutoverCalendar",
]
