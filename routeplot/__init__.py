"""
routeplot — Route Plotter
==========================================
Parse route data from structured JSON, TomTom Positioning logs, telemetry CSV
or pasted coordinates into one route model, with derived distance and time.

Quick start:
    routeplot route.json              # CLI
    routeplot-server                  # JSON API for a map front end

Library:
    from routeplot import extract_routes, flatten_points
    outcome = extract_routes(text)
    if outcome.is_success:
        points = flatten_points(outcome.value[0])
"""

from .models import (
    NavigationPoint, RouteLeg, Route, Summary, GuidanceInstruction, RoutePath,
    Success, Failure, ParseError, ErrorKind, RouteParseError, TimestampError,
)
from .geometry import distance_between, total_distance, elapsed_time
from .formats import (
    extract_routes, extract_json, extract_ttp, extract_csv, extract_text,
    supported_formats, get_format, FORMAT_REGISTRY,
)
from .projections import (
    flatten_points, waypoints_of, instructions_of, summary_of,
    route_points, route_stops,
)

__version__ = "1.0.0"
__all__ = [
    "NavigationPoint", "RouteLeg", "Route", "Summary", "GuidanceInstruction",
    "RoutePath", "Success", "Failure", "ParseError", "ErrorKind",
    "RouteParseError", "TimestampError",
    "distance_between", "total_distance", "elapsed_time",
    "extract_routes", "extract_json", "extract_ttp", "extract_csv", "extract_text",
    "supported_formats", "get_format", "FORMAT_REGISTRY",
    "flatten_points", "waypoints_of", "instructions_of", "summary_of",
    "route_points", "route_stops",
]
