#!/usr/bin/env python3
from __future__ import annotations

import argparse
import random
from typing import Iterable, List, Optional, Tuple

import calfields
from calfields.core.time import instant_of
from calfields.core.types import Field
from calfields.engines import fixed_day as fdm

_LABEL_FIELDS = (
    Field.ERA, Field.YEAR, Field.MONTH, Field.DAY_OF_MONTH,
    Field.HOUR_OF_DAY, Field.MINUTE, Field.SECOND, Field.MILLISECOND,
)


def check_round_trip(spec: str, instants: Iterable[int], zone: Optional[str] = None) -> List[Tuple[int, int]]:
    """(instant, instant after fields -> instant) for every instant that does not survive."""
    failures = []
    cal = calfields.make_calendar(spec, zone=zone, instant=0)
    back = calfields.make_calendar(spec, zone=zone, instant=0)
    for t in instants:
        cal.set_time(t)
        back.clear()
        for f in _LABEL_FIELDS:
            back.set_field(f, cal.get(f))
        got = back.get_time()
        if got != t:
            failures.append((t, got))
    return failures


def random_instants(n: int, year_lo: int, year_hi: int, seed: int = 0) -> List[int]:
    rng = random.Random(seed)
    lo = instant_of(fdm.gregorian_fixed_date(year_lo, 1, 1))
    hi = instant_of(fdm.gregorian_fixed_date(year_hi + 1, 1, 1)) - 1
    return [rng.randint(lo, hi) for _ in range(n)]


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Randomized instant -> fields -> instant check.")
    p.add_argument("--spec", action="append", default=[], help="spec name (repeatable; default: all)")
    p.add_argument("--n", type=int, default=2000)
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--year-lo", type=int, default=-4000)
    p.add_argument("--year-hi", type=int, default=4000)
    p.add_argument("--zone", default=None)
    args = p.parse_args(argv)

    specs = args.spec or calfields.list_specs()
    instants = random_instants(args.n, args.year_lo, args.year_hi, seed=args.seed)

    bad = 0
    for spec in specs:
        failures = check_round_trip(spec, instants, zone=args.zone)
        bad += len(failures)
        print(f"{spec:>20}: {len(instants) - len(failures)}/{len(instants)} ok")
        for t, got in failures[:5]:
            print(f"{'':>22}{t} -> {got} (diff {got - t} ms)")
    return 1 if bad else 0


if __name__ == "__main__":
    raise SystemExit(main())
