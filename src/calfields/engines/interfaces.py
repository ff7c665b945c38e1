"""
calfields.engines.interfaces
----------------------------
Boundary between the calendar engines and the outside world's notion of
local time.

All offsets are integer milliseconds east of UTC, returned as the pair
(standard offset, daylight-saving offset).
"""

from __future__ import annotations

from typing import Protocol, Tuple


class ZoneOffsetProvider(Protocol):
    """
    Maps instants (and local wall-clock readings) to zone offsets.
    Implementations must be pure: the same input always yields the same pair.
    """

    @property
    def name(self) -> str:
        ...

    def offsets_at(self, instant: int) -> Tuple[int, int]:
        """(standard, dst) offsets in force at the UTC instant."""
        ...

    def offsets_at_wall_clock(self, local_millis: int) -> Tuple[int, int]:
        """
        (standard, dst) offsets for a local wall-clock reading, expressed as
        milliseconds since 1970-01-01T00:00 local.

        An ambiguous reading resolves to standard time. A reading inside a
        spring-forward gap is read as standard time, landing after the gap.
        """
        ...
