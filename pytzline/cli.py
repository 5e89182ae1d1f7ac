"""Command line entry point: dashboard by default, plus list/time/zone."""

from __future__ import annotations

import argparse
import logging
import os
import sys

from . import __version__, app
from .catalog import CityCatalog, CityRecord, load_catalog
from .config import CONFIG_PATH, THEMES, load_config
from .tzutil import format_dt_full, format_utc_label, offset_seconds, to_local, utc_now

logger = logging.getLogger(__name__)

LOG_PATH = os.path.join(os.path.expanduser("~"), ".pytzline.log")


def setup_logging(path: str | None = None, verbose: bool = False) -> None:
    # The dashboard owns the terminal, so log lines go to a file only.
    path = path or LOG_PATH
    failure = None
    try:
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        handler = logging.NullHandler()
        failure = exc
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[handler],
    )
    if failure is not None:
        logger.warning("cannot open log file %s: %s; logging disabled", path, failure)


def format_coordinates(coords: tuple[float, float] | None) -> str:
    if coords is None:
        return "-"
    lat, lon = coords
    ns = "N" if lat >= 0 else "S"
    ew = "E" if lon >= 0 else "W"
    return f"{abs(lat):.2f}°{ns}, {abs(lon):.2f}°{ew}"


def _lookup(catalog: CityCatalog, name: str) -> CityRecord | None:
    city = catalog.find(name)
    if city is None:
        print(f"City '{name}' not found. Try 'pytzline list'.", file=sys.stderr)
        logger.info("unknown city %r", name)
    return city


def cmd_list(args: argparse.Namespace, catalog: CityCatalog, clock=utc_now) -> int:
    for city in catalog:
        print(f"{catalog.label_for(city):<34} {city.code:<5} {city.timezone_id:<32} "
              f"{format_coordinates(city.coordinates)}")
    print(f"\n{len(catalog)} cities")
    return 0


def cmd_time(args: argparse.Namespace, catalog: CityCatalog, clock=utc_now) -> int:
    city = _lookup(catalog, args.city)
    if city is None:
        return 1
    now = clock()
    there = to_local(city.timezone_id, now)
    label = format_utc_label(offset_seconds(city.timezone_id, now))
    print(f"{catalog.label_for(city)}: {format_dt_full(there)} ({label})")
    print(f"Local: {format_dt_full(now.astimezone())}")
    return 0


def cmd_zone(args: argparse.Namespace, catalog: CityCatalog, clock=utc_now) -> int:
    city = _lookup(catalog, args.city)
    if city is None:
        return 1
    now = clock()
    print(f"City:        {catalog.label_for(city)}")
    print(f"Code:        {city.code}")
    print(f"Timezone:    {city.timezone_id}")
    print(f"Offset:      {format_utc_label(offset_seconds(city.timezone_id, now))}")
    print(f"Coordinates: {format_coordinates(city.coordinates)}")
    print(f"Time:        {format_dt_full(to_local(city.timezone_id, now))}")
    return 0


def cmd_dashboard(args: argparse.Namespace, catalog: CityCatalog, clock=utc_now) -> int:
    # Imported here so list/time/zone work without a usable terminal.
    from .tui import run_dashboard

    config_path = args.config or CONFIG_PATH
    cfg = load_config(config_path)
    if args.twelve_hour:
        cfg.time_format = "12h"
    if args.theme:
        cfg.theme = args.theme

    state = app.new_state(cfg, catalog, clock=clock, config_path=config_path)
    app.select_local_zone(state)
    if args.timezone and not app.add_zone(state, args.timezone):
        print(f"City '{args.timezone}' not found. Try 'pytzline list'.", file=sys.stderr)
        return 1
    run_dashboard(state)
    app.persist(state)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pytzline",
        description="Terminal dashboard comparing local time across cities on a shared timeline.",
    )
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("--timezone", metavar="CITY", default=None, help="Add CITY to the dashboard and select it")
    ap.add_argument("--twelve-hour", action="store_true", help="Use the 12-hour clock")
    ap.add_argument("--theme", choices=THEMES, default=None, help="Colour theme")
    ap.add_argument("--config", default=None, help=f"Preferences file (default: {CONFIG_PATH})")
    ap.add_argument("--log-file", default=None, help=f"Log file (default: {LOG_PATH})")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.set_defaults(handler=cmd_dashboard)

    sub = ap.add_subparsers(dest="command")
    p_list = sub.add_parser("list", aliases=["ls"], help="List every known city")
    p_list.set_defaults(handler=cmd_list)

    p_time = sub.add_parser("time", aliases=["show"], help="Show the current time in a city")
    p_time.add_argument("city", help="City name, or 'City, Country' for shared names")
    p_time.set_defaults(handler=cmd_time)

    p_zone = sub.add_parser("zone", aliases=["info"], help="Show details for a city's timezone")
    p_zone.add_argument("city", help="City name, or 'City, Country' for shared names")
    p_zone.set_defaults(handler=cmd_zone)
    return ap


def main(argv: list[str] | None = None, clock=utc_now) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    catalog = load_catalog()
    return args.handler(args, catalog, clock)


def run(argv: list[str] | None = None) -> int:
    try:
        return main(argv)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        logger.exception("fatal error")
        print(f"Fatal error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(run())
