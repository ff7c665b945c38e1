from __future__ import annotations
from datetime import date
from typing import Any, Dict

from ..engines import fixed_day as fdm
from .registry import register_attribute, jdn

def julian_day(info) -> Dict[str, Any]:
    return {"jdn": jdn(info)}

def iso_week_date(info) -> Dict[str, Any]:
    # Proleptic Gregorian; only defined from 0001-01-01 on.
    y, w, d = date.fromordinal(info.fixed_date).isocalendar()
    return {"iso_year": y, "iso_week": w, "iso_weekday": d}

def rule_set(info) -> Dict[str, Any]:
    return {"rule_set": info.rule_set, "is_gregorian": info.rule_set == "gregorian"}

def dual_date(info) -> Dict[str, Any]:
    # Both labels of the same day, as (normalized year, month 1..12, day).
    return {
        "julian_date": fdm.julian_date(info.fixed_date),
        "gregorian_date": fdm.gregorian_date(info.fixed_date),
    }

register_attribute("jdn", julian_day)
register_attribute("week_date", iso_week_date)
register_attribute("rule_set", rule_set)
register_attribute("dual_date", dual_date)
