#!/usr/bin/env python3
"""
Julian-minus-Gregorian drift: how many days the Julian label of a day lags
its Gregorian label, year by year (measured on March 1).
"""
from __future__ import annotations

import argparse
from typing import List, Optional

from calfields.engines import fixed_day as fdm


def _need_numpy():
    try:
        import numpy as np
        return np
    except ImportError as e:
        raise RuntimeError('Need numpy. Install: pip install "calfields[diagnostics]"') from e


def _need_matplotlib():
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "calfields[diagnostics]"') from e


def drift_days(year: int) -> int:
    return fdm.julian_fixed_date(year, 3, 1) - fdm.gregorian_fixed_date(year, 3, 1)


def drift_series(year_start: int, year_end: int):
    """(years, drift) as integer numpy arrays, `year_end` inclusive."""
    np = _need_numpy()
    years = np.arange(year_start, year_end + 1, dtype=np.int64)
    drift = np.array([drift_days(int(y)) for y in years], dtype=np.int64)
    return years, drift


def drift_changes(years, drift) -> List[tuple[int, int]]:
    """(year, new drift) at each year where the drift changes."""
    np = _need_numpy()
    idx = np.nonzero(np.diff(drift))[0] + 1
    return [(int(years[i]), int(drift[i])) for i in idx]


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Julian-minus-Gregorian day offset per year.")
    p.add_argument("--year-start", type=int, default=-500)
    p.add_argument("--year-end", type=int, default=2500)
    p.add_argument("--out-png", default=None, help="write a step plot to this file")
    args = p.parse_args(argv)

    years, drift = drift_series(args.year_start, args.year_end)
    print(f"{args.year_start}: {int(drift[0]):+d} days")
    for y, d in drift_changes(years, drift):
        print(f"{y}: {d:+d} days")

    if args.out_png:
        plt = _need_matplotlib()
        fig, ax = plt.subplots(figsize=(12, 4))
        ax.step(years, drift, where="post")
        ax.set_title("Julian - Gregorian offset (days, March 1)")
        ax.set_xlabel("Year (normalized)")
        ax.set_ylabel("Days")
        ax.grid(True, alpha=0.3)
        fig.tight_layout()
        fig.savefig(args.out_png, dpi=150)
        print(f"Saved {args.out_png}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
