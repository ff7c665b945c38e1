"""
calfields.engines.zones
-----------------------
Zone offset providers: fixed offsets, annual daylight-saving rules, and an
adapter for any `datetime.tzinfo` (typically `zoneinfo.ZoneInfo`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from ..core.time import EPOCH_OFFSET, ONE_DAY, ONE_HOUR, ONE_MINUTE, instant_of
from . import fixed_day as fdm

_OFFSET_RE = re.compile(r"^(?:UTC|GMT)?([+-])(\d{1,2}):?(\d{2})$")


def _format_offset(ms: int) -> str:
    sign = "+" if ms >= 0 else "-"
    h, m = divmod(abs(ms) // ONE_MINUTE, 60)
    return f"{sign}{h:02d}:{m:02d}"


@dataclass(frozen=True)
class FixedOffsetZone:
    raw_offset: int = 0
    dst_offset: int = 0
    label: Optional[str] = None

    @property
    def name(self) -> str:
        if self.label:
            return self.label
        return "UTC" if self.raw_offset == 0 and self.dst_offset == 0 else _format_offset(self.raw_offset + self.dst_offset)

    def offsets_at(self, instant: int) -> Tuple[int, int]:
        return self.raw_offset, self.dst_offset

    def offsets_at_wall_clock(self, local_millis: int) -> Tuple[int, int]:
        return self.raw_offset, self.dst_offset


UTC = FixedOffsetZone(0, 0, "UTC")


# ---------------------------------------------------------
# Rule-based daylight saving
# ---------------------------------------------------------

@dataclass(frozen=True)
class DstRule:
    """
    "The `week`-th `day_of_week` of `month` at `time` ms past local midnight".
    `week` is 1..4, or -1 for the last such weekday. Months are 1-based.
    """
    month: int
    week: int
    day_of_week: int
    time: int = 2 * ONE_HOUR

    def __post_init__(self) -> None:
        if not (1 <= self.month <= 12):
            raise ValueError("month must be in 1..12")
        if self.week not in (-1, 1, 2, 3, 4):
            raise ValueError("week must be 1..4 or -1")
        if not (1 <= self.day_of_week <= 7):
            raise ValueError("day_of_week must be in 1..7")
        if not (0 <= self.time < ONE_DAY):
            raise ValueError("time must be within one day")

    def fixed_date(self, year: int) -> int:
        if self.week > 0:
            first = fdm.gregorian_fixed_date(year, self.month, 1)
            return fdm.day_of_week_on_or_before(first + 7 * self.week - 1, self.day_of_week)
        last = fdm.gregorian_fixed_date(year, self.month + 1, 1) - 1
        return fdm.day_of_week_on_or_before(last, self.day_of_week)


@dataclass(frozen=True)
class RuleBasedZone:
    """
    Standard offset plus one annual daylight-saving period.

    `start.time` is local standard time; `end.time` is local daylight time.
    A start later in the year than the end describes a southern-hemisphere
    zone whose daylight period spans the new year.
    """
    raw_offset: int
    start: DstRule
    end: DstRule
    savings: int = ONE_HOUR
    label: Optional[str] = None

    def __post_init__(self) -> None:
        if self.savings <= 0:
            raise ValueError("savings must be positive")

    @property
    def name(self) -> str:
        return self.label or f"{_format_offset(self.raw_offset)}/dst"

    def _in_dst(self, instant: int) -> bool:
        local_fixed = (instant + self.raw_offset) // ONE_DAY + EPOCH_OFFSET
        year = fdm.gregorian_year(local_fixed)
        start = instant_of(self.start.fixed_date(year), self.start.time) - self.raw_offset
        end = instant_of(self.end.fixed_date(year), self.end.time) - self.raw_offset - self.savings
        if start < end:
            return start <= instant < end
        return not (end <= instant < start)

    def offsets_at(self, instant: int) -> Tuple[int, int]:
        if self._in_dst(instant):
            return self.raw_offset, self.savings
        return self.raw_offset, 0

    def offsets_at_wall_clock(self, local_millis: int) -> Tuple[int, int]:
        standard = self.offsets_at(local_millis - self.raw_offset)
        if standard[1] == 0:
            return standard
        daylight = self.offsets_at(local_millis - self.raw_offset - self.savings)
        if daylight[1] != 0:
            return daylight
        # gap
        return self.raw_offset, 0


# ---------------------------------------------------------
# datetime.tzinfo adapter
# ---------------------------------------------------------

_EPOCH = datetime(1970, 1, 1)
_MIN_LOCAL = (datetime.min - _EPOCH) // timedelta(milliseconds=1) + ONE_DAY
_MAX_LOCAL = (datetime.max - _EPOCH) // timedelta(milliseconds=1) - ONE_DAY


def _naive(ms: int) -> datetime:
    ms = min(max(ms, _MIN_LOCAL), _MAX_LOCAL)
    return _EPOCH + timedelta(milliseconds=ms)


def _split(aware: datetime) -> Tuple[int, int]:
    one = timedelta(milliseconds=1)
    total = aware.utcoffset() // one
    dst = (aware.dst() or timedelta(0)) // one
    return total - dst, dst


@dataclass(frozen=True)
class TzInfoZone:
    """
    Adapts a `datetime.tzinfo`. Instants outside the `datetime` range use the
    offsets at the nearest representable instant.
    """
    tz: tzinfo

    @property
    def name(self) -> str:
        return getattr(self.tz, "key", None) or str(self.tz)

    def offsets_at(self, instant: int) -> Tuple[int, int]:
        utc = _naive(instant).replace(tzinfo=timezone.utc)
        return _split(utc.astimezone(self.tz))

    def offsets_at_wall_clock(self, local_millis: int) -> Tuple[int, int]:
        naive = _naive(local_millis)
        candidates = []
        for fold in (0, 1):
            aware = naive.replace(tzinfo=self.tz, fold=fold)
            back = aware.astimezone(timezone.utc).astimezone(self.tz).replace(tzinfo=None)
            if back == naive:
                candidates.append(_split(aware))
        for raw, dst in candidates:
            if dst == 0:
                return raw, dst
        if candidates:
            return candidates[0]
        # gap: the offset in force before the transition, as standard time
        raw, dst = _split(naive.replace(tzinfo=self.tz, fold=0))
        return raw + dst, 0


def zone_for(name: str):
    """'UTC'/'GMT'/'Z', '+HH:MM', or an IANA zone name."""
    if name.upper() in ("UTC", "GMT", "Z"):
        return UTC
    m = _OFFSET_RE.match(name)
    if m:
        sign = -1 if m.group(1) == "-" else 1
        offset = sign * (int(m.group(2)) * ONE_HOUR + int(m.group(3)) * ONE_MINUTE)
        return FixedOffsetZone(offset)
    return TzInfoZone(ZoneInfo(name))
