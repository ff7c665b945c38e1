from __future__ import annotations

import time
from typing import Tuple

ONE_SECOND = 1000
ONE_MINUTE = 60 * ONE_SECOND
ONE_HOUR = 60 * ONE_MINUTE
ONE_DAY = 24 * ONE_HOUR

# Fixed date of 1970-01-01; fixed date 1 is 0001-01-01 (proleptic Gregorian).
EPOCH_OFFSET = 719163
EPOCH_YEAR = 1970

# Julian Day Number of fixed date 0.
JDN_OFFSET = 1721425

MIN_INSTANT = -(2 ** 63)
MAX_INSTANT = 2 ** 63 - 1

# 1582-10-15 00:00 UTC, the first Gregorian day of the 1582 reform.
DEFAULT_CUTOVER = -12219292800000


def split_instant(instant: int) -> Tuple[int, int]:
    """Split epoch milliseconds into (fixed date, milliseconds into the day)."""
    days, ms = divmod(instant, ONE_DAY)
    return days + EPOCH_OFFSET, ms


def instant_of(fixed: int, ms_of_day: int = 0) -> int:
    """Epoch milliseconds at `ms_of_day` into fixed date `fixed` (UTC)."""
    return (fixed - EPOCH_OFFSET) * ONE_DAY + ms_of_day


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def to_jdn(fixed: int) -> int:
    """Fixed date to Julian Day Number."""
    return fixed + JDN_OFFSET


def from_jdn(jdn: int) -> int:
    """Julian Day Number to fixed date."""
    return jdn - JDN_OFFSET


