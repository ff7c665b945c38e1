from __future__ import annotations

import argparse
import importlib
import inspect
import logging
import re
import sys


_DATE_RE = re.compile(r"^(\d{1,9})-(\d{1,2})-(\d{1,2})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.(\d{1,3}))?)?$")


def _parse_ymd(s: str) -> tuple[int, int, int]:
    m = _DATE_RE.match(s)
    if not m:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}")
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def _parse_hms(s: str) -> tuple[int, int, int, int]:
    m = _TIME_RE.match(s)
    if not m:
        raise argparse.ArgumentTypeError(f"expected HH:MM[:SS[.mmm]], got {s!r}")
    ms = (m.group(4) or "0").ljust(3, "0")
    return int(m.group(1)), int(m.group(2)), int(m.group(3) or 0), int(ms)


def _run_module_main(modpath: str, argv: list[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _label(cal) -> str:
    from calfields.core.types import BCE, Field as F

    era = "BCE" if cal.get(F.ERA) == BCE else "CE"
    return (
        f"{cal.get(F.YEAR):04d}-{cal.get(F.MONTH) + 1:02d}-{cal.get(F.DAY_OF_MONTH):02d} "
        f"{cal.get(F.HOUR_OF_DAY):02d}:{cal.get(F.MINUTE):02d}:{cal.get(F.SECOND):02d}"
        f".{cal.get(F.MILLISECOND):03d} {era} ({cal.rule_set.name})"
    )


def _common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--spec", default="default", help="calendar preset (see `calfields specs`)")
    p.add_argument("--zone", default=None, help="UTC, +HH:MM, or an IANA zone name")


def _calendar_at(date_s: str, args):
    import calfields

    y, m, d = _parse_ymd(date_s)
    era = 0 if getattr(args, "bce", False) else 1
    t = calfields.to_instant(y, m, d, era=era, spec=args.spec, zone=args.zone)
    return calfields.make_calendar(args.spec, zone=args.zone, instant=t, lenient=not getattr(args, "strict", False))


def cmd_fields(argv: list[str]) -> int:
    import calfields

    p = argparse.ArgumentParser(prog="calfields fields", description="Print all calendar fields of a date or instant")
    p.add_argument("when", help="YYYY-MM-DD or epoch milliseconds")
    p.add_argument("--bce", action="store_true")
    p.add_argument("--debug", action="store_true")
    p.add_argument("--attr", action="append", default=[], help="attribute name (repeatable)")
    _common(p)
    args = p.parse_args(argv)

    if _DATE_RE.match(args.when):
        cal = _calendar_at(args.when, args)
        instant = cal.get_time()
    else:
        instant = int(args.when)
    info = calfields.day_info(instant, spec=args.spec, zone=args.zone, attributes=tuple(args.attr), debug=args.debug)

    print(f"instant  = {info.instant}")
    print(f"fixed    = {info.fixed_date}")
    print(f"rule set = {info.rule_set}")
    for name, value in info.fields.items():
        print(f"{name:<22}{value}")
    if info.attributes:
        for name, value in info.attributes.items():
            print(f"{name:<22}{value}")
    if info.debug:
        for name, value in info.debug.items():
            print(f"{name:<22}{value}")
    return 0


def cmd_time(argv: list[str]) -> int:
    import calfields

    p = argparse.ArgumentParser(prog="calfields time", description="Calendar label -> epoch milliseconds")
    p.add_argument("date", help="YYYY-MM-DD (year of era)")
    p.add_argument("--time", default="00:00", help="HH:MM[:SS[.mmm]]")
    p.add_argument("--bce", action="store_true")
    p.add_argument("--strict", action="store_true", help="reject nonexistent and out-of-range labels")
    _common(p)
    args = p.parse_args(argv)

    y, m, d = _parse_ymd(args.date)
    hh, mm, ss, ms = _parse_hms(args.time)
    t = calfields.to_instant(
        y, m, d, hh, mm, ss, ms,
        era=0 if args.bce else 1, spec=args.spec, zone=args.zone, lenient=not args.strict,
    )
    print(t)
    return 0


def _cmd_arith(op: str, argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog=f"calfields {op}", description=f"{op} an amount to one field")
    p.add_argument("field", help="field name, e.g. MONTH or day_of_month")
    p.add_argument("amount", type=int)
    p.add_argument("--date", required=True, help="YYYY-MM-DD")
    p.add_argument("--bce", action="store_true")
    p.add_argument("--strict", action="store_true")
    _common(p)
    args = p.parse_args(argv)

    cal = _calendar_at(args.date, args)
    print(_label(cal))
    getattr(cal, op)(args.field, args.amount)
    print(_label(cal))
    print(cal.get_time())
    return 0


def cmd_add(argv: list[str]) -> int:
    return _cmd_arith("add", argv)


def cmd_roll(argv: list[str]) -> int:
    return _cmd_arith("roll", argv)


def cmd_specs(argv: list[str]) -> int:
    import calfields

    p = argparse.ArgumentParser(prog="calfields specs", description="List calendar presets")
    p.parse_args(argv)
    for name in calfields.list_specs():
        info = calfields.spec_info(name)
        print(f"{name:<20}{info.get('description', '')}")
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    # Shorthand: `calfields YYYY-MM-DD ...`
    if argv and _DATE_RE.match(argv[0]):
        argv = ["fields"] + argv

    p = argparse.ArgumentParser(prog="calfields", description="Julian/Gregorian cutover calendar fields CLI.")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("fields", help="Print all fields of a date or instant", add_help=False)
    sub.add_parser("time", help="Calendar label -> epoch milliseconds", add_help=False)
    sub.add_parser("add", help="Add to a field, carrying into larger fields", add_help=False)
    sub.add_parser("roll", help="Roll a field within its current range", add_help=False)
    sub.add_parser("specs", help="List calendar presets", add_help=False)
    sub.add_parser("month", help="Print a month grid (diagnostics)", add_help=False)

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument("tool", choices=["round-trip", "drift"], help="Which diagnostic to run")

    args, rest = p.parse_known_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    from calfields.core.errors import CalfieldsError

    commands = {
        "fields": cmd_fields,
        "time": cmd_time,
        "add": cmd_add,
        "roll": cmd_roll,
        "specs": cmd_specs,
    }
    try:
        if args.cmd in commands:
            return commands[args.cmd](rest)
        if args.cmd == "month":
            return _run_module_main("calfields.diagnostics.pretty_month", rest)
        if args.cmd == "diag":
            tool_map = {
                "round-trip": "calfields.diagnostics.round_trip",
                "drift": "calfields.diagnostics.drift",
            }
            return _run_module_main(tool_map[args.tool], rest)
    except (CalfieldsError, KeyError) as e:
        # KeyError from an unknown spec or attribute name.
        message = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"calfields: error: {message}", file=sys.stderr)
        return 2

    p.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
