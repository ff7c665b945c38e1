from __future__ import annotations

import argparse

import calfields
from calfields.core.types import Field

_DAY_NAMES = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


def dow_header(first_day_of_week: int) -> str:
    names = [_DAY_NAMES[(first_day_of_week - 1 + i) % 7] for i in range(7)]
    return "wk   " + " ".join(f"{n:>3}" for n in names)


def month_days(spec: str, year: int, month: int) -> list[tuple[int, int, int]]:
    """(day of month, day of week, week of year) for every existing day of a month (1-based)."""
    cal = calfields.make_calendar(spec, instant=0)
    cal.clear()
    cal.set_date(year, month - 1, 1)
    cal.set_field(Field.DAY_OF_MONTH, cal.actual_minimum(Field.DAY_OF_MONTH))

    out = []
    while cal.get(Field.MONTH) == month - 1:
        out.append((cal.get(Field.DAY_OF_MONTH), cal.get(Field.DAY_OF_WEEK), cal.get(Field.WEEK_OF_YEAR)))
        cal.add(Field.DAY_OF_MONTH, 1)
    return out


def month_grid(spec: str, year: int, month: int) -> list[str]:
    fdow = calfields.spec_info(spec)["first_day_of_week"]
    lines = [f"{spec}  {year}-{month:02d}", dow_header(fdow)]
    row: list[str] = []
    week = None
    for dom, dow, woy in month_days(spec, year, month):
        col = (dow - fdow) % 7
        if row and col == 0:
            lines.append(f"{week:>3}  " + " ".join(row))
            row = []
        if not row:
            row = ["   "] * col
            week = woy
        row.append(f"{dom:>3}")
    if row:
        lines.append(f"{week:>3}  " + " ".join(row))
    return lines


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print a month grid, cutover gaps included.")
    p.add_argument("year", type=int, nargs="?", default=1582)
    p.add_argument("month", type=int, nargs="?", default=10, help="1..12")
    p.add_argument("--spec", default="default")
    args = p.parse_args(argv)

    for line in month_grid(args.spec, args.year, args.month):
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
