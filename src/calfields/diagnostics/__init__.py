"""Diagnostics package.

- pretty_month, round_trip: always available, light-weight checks
- drift: optional (requires the diagnostics extras: numpy, matplotlib)
"""

__all__ = ["pretty_month", "round_trip", "drift"]
