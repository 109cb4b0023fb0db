#!/usr/bin/env python3
"""
routeplot — Route Plotter
================================
Parse route data (structured JSON, TomTom Positioning logs, telemetry CSV or
pasted coordinates) and show what was found.

Usage:
    routeplot route.json                       # Summary of the parsed route
    routeplot log.ttp --points                 # List every point
    pbpaste | routeplot -                      # Parse pasted text
    routeplot drive.csv --csv-col-lat latitude # Custom CSV column names
    routeplot route.json --dump                # Object-notation dump
    routeplot --formats                        # List all formats
"""

from __future__ import annotations
import argparse
import json
import sys
from typing import List

from .formats import (
    CSV_DEFAULTS, FORMAT_REGISTRY, SOFT_FULL_NAME, TTP_INCOMING, TTP_OUTGOING,
    extract_routes, supported_formats,
)
from .logging_config import configure
from .models import NavigationPoint, Route
from .projections import flatten_points, instructions_of, summary_of, waypoints_of
from .serializer import dump_routes


def format_distance(meters: float) -> str:
    """Format distance in human-readable form."""
    if meters >= 1000:
        return f"{meters / 1000:.2f} km"
    return f"{meters:.0f} m"


def format_duration(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    remaining = int(seconds % 60)
    return f"{hours} hours, {minutes} minutes, {remaining} seconds"


def _format_point(i: int, pt: NavigationPoint) -> str:
    line = f"  {i:>5}  {pt.latitude:.6f}, {pt.longitude:.6f}"
    if pt.timestamp is not None:
        line += f"  t={pt.timestamp}"
    if pt.speed is not None:
        line += f"  {pt.speed:.2f} m/s"
    return line


def show_info(routes: List[Route], args) -> None:
    """Display what was found in the first route; the others are only counted."""
    route = routes[0]
    points = flatten_points(route)
    summary = summary_of(route)
    print(f"   Routes: {len(routes)}" + ("  (showing the first)" if len(routes) > 1 else ""))
    print(f"   Legs: {len(route.legs)}")
    print(f"   Points: {len(points)}")
    print(f"   Distance: {format_distance(summary.length_in_meters)}")
    print(f"   Duration: {format_duration(summary.travel_time_in_seconds)}")
    if summary.traffic_delay_in_seconds:
        print(f"   Traffic delay: {format_duration(summary.traffic_delay_in_seconds)}")
    if summary.departure_time:
        print(f"   Departure: {summary.departure_time}")
    if summary.arrival_time:
        print(f"   Arrival: {summary.arrival_time}")

    if args.waypoints:
        print("\n   Waypoints:")
        for i, pt in enumerate(waypoints_of(route)):
            print(_format_point(i, pt))
    if args.instructions:
        instructions = instructions_of(route)
        print(f"\n   Instructions: {len(instructions)}")
        for ins in instructions:
            print(f"  {ins.route_offset_in_meters:>8.0f} m  {ins.maneuver} ({ins.driving_side})")
    if args.points:
        print("\n   Points:")
        for i, pt in enumerate(points):
            print(_format_point(i, pt))


def list_formats():
    """Display all supported formats, in the order they are tried."""
    print(f"\n{SOFT_FULL_NAME}")
    print("=" * 45)
    print(f"{'Key':<8} {'Format Name':<30}")
    print("-" * 45)
    for fmt in FORMAT_REGISTRY:
        print(f"  {fmt.key:<6} {fmt.name:<30}")
    print("-" * 45)
    print(f"  Total: {len(FORMAT_REGISTRY)} formats\n")


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8-sig") as f:
        return f.read()


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="routeplot",
        description=f"{SOFT_FULL_NAME} — Route Plotter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s route.json                    Show the parsed route
  %(prog)s log.ttp --points              List every point
  %(prog)s - < coordinates.txt           Parse text from stdin
  %(prog)s --formats                     List all supported formats
        """)

    parser.add_argument("input", nargs="?", help="Input file, or - for stdin")
    parser.add_argument("--formats", action="store_true", help="List supported formats")
    parser.add_argument("--only", nargs="+", choices=supported_formats(),
                        help="Only try these formats")
    parser.add_argument("--points", action="store_true", help="List route points")
    parser.add_argument("--waypoints", action="store_true", help="List waypoints")
    parser.add_argument("--instructions", action="store_true", help="List guidance instructions")
    parser.add_argument("--dump", action="store_true", help="Print routes in object notation")
    parser.add_argument("--json", action="store_true", help="Print routes as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # CSV options
    csv_group = parser.add_argument_group("CSV options")
    csv_group.add_argument("--csv-sep", default=CSV_DEFAULTS["delimiter"], help="CSV separator (default: ,)")
    csv_group.add_argument("--csv-col-lat", default=CSV_DEFAULTS["col_lat"], help="CSV latitude column name")
    csv_group.add_argument("--csv-col-lon", default=CSV_DEFAULTS["col_lon"], help="CSV longitude column name")
    csv_group.add_argument("--csv-col-timestamp", default=CSV_DEFAULTS["col_timestamp"],
                           help="CSV timestamp column name")
    csv_group.add_argument("--csv-col-speed", default=CSV_DEFAULTS["col_speed"], help="CSV speed column name")

    # TTP options
    ttp_group = parser.add_argument_group("TTP options")
    ttp_group.add_argument("--ttp-incoming", default=TTP_INCOMING, help="Incoming channel type code")
    ttp_group.add_argument("--ttp-outgoing", default=TTP_OUTGOING, help="Outgoing channel type code")

    args = parser.parse_args(argv)
    configure("DEBUG" if args.verbose else "WARNING")

    if args.formats:
        list_formats()
        return 0

    if not args.input:
        parser.print_help()
        return 1

    # Build options dict
    opts = {
        "delimiter": args.csv_sep,
        "col_lat": args.csv_col_lat,
        "col_lon": args.csv_col_lon,
        "col_timestamp": args.csv_col_timestamp,
        "col_speed": args.csv_col_speed,
        "incoming": args.ttp_incoming,
        "outgoing": args.ttp_outgoing,
    }

    try:
        text = _read_input(args.input)
    except (OSError, UnicodeDecodeError) as e:
        print(f"❌ Error reading {args.input}: {e}", file=sys.stderr)
        return 1

    outcome = extract_routes(text, only=args.only, **opts)
    if not outcome.is_success:
        print(f"❌ {outcome.message}", file=sys.stderr)
        return 1

    routes = outcome.value
    if args.json:
        print(json.dumps([r.to_dict() for r in routes], indent=2, ensure_ascii=False))
        return 0
    if args.dump:
        print(dump_routes(routes))
        return 0

    print(f"✅ {outcome.message}")
    show_info(routes, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
