"""
routeplot — Route Format Extractors

Every extractor takes the raw text blob and returns an Outcome holding a list
of routes, or a Failure saying why the text is not in its format.

Supported formats, in the order extract_routes() tries them:
  json  Structured route data (formatVersion 0.0.12)
  ttp   TomTom Positioning log (version 0.7)
  csv   Telemetry CSV with a header row
  text  Coordinates pasted as free text
"""

from __future__ import annotations
import csv
import inspect
import io
import json
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .geometry import elapsed_time, read_timestamp, Known, total_distance
from .models import (
    ErrorKind, Failure, NavigationPoint, Outcome, Route, RouteParseError,
    Success, Summary,
)

log = logging.getLogger("routeplot.formats")

SOFT_NAME = "routeplot"
SOFT_VERSION = "1.0"
SOFT_FULL_NAME = f"{SOFT_NAME} v{SOFT_VERSION}"


def _derived_route(points: List[NavigationPoint]) -> Route:
    """Single-leg route with distance and travel time computed from the points."""
    summary = Summary(
        length_in_meters=total_distance(points),
        travel_time_in_seconds=elapsed_time(points),
    )
    return Route.single_leg(points, summary)


def _safe_float(s: Optional[str]) -> Optional[float]:
    if s is None:
        return None
    try:
        return float(s.strip())
    except (ValueError, TypeError):
        return None


# ─────────────────────────────────────────────────────────────
# Structured route data (JSON)
# ─────────────────────────────────────────────────────────────

SUPPORTED_JSON_VERSION = "0.0.12"


def extract_json(text: str, json_version: str = SUPPORTED_JSON_VERSION) -> Outcome:
    """Routes from a routing-response JSON document. Summaries are taken as-is."""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        return Failure.of(ErrorKind.FORMAT_MISMATCH, f"Not JSON: {e}")
    if not isinstance(data, dict) or "formatVersion" not in data:
        return Failure.of(ErrorKind.FORMAT_MISMATCH, "No formatVersion in JSON")

    version = data["formatVersion"]
    if version != json_version:
        return Failure.of(
            ErrorKind.UNSUPPORTED_VERSION,
            f"Unsupported route data version: {version}, expected {json_version}",
        )

    routes = data.get("routes")
    if not isinstance(routes, list) or not routes:
        return Failure.of(ErrorKind.NO_DATA, "No routes found in JSON")
    try:
        parsed = [Route.from_dict(r) for r in routes]
    except (AttributeError, TypeError, ValueError) as e:
        return Failure.of(ErrorKind.FORMAT_MISMATCH, f"Malformed route in JSON: {e}")
    return Success(parsed, "using structured route data (JSON)")


# ─────────────────────────────────────────────────────────────
# TomTom Positioning log (TTP)
# ─────────────────────────────────────────────────────────────

TTP_HEADER = "BEGIN:ApplicationVersion=TomTom Positioning"
TTP_VERSION = "0.7"
TTP_INCOMING = "245"
TTP_OUTGOING = "246"

# Fixed column layout of a TTP record
TTP_COL_TIMESTAMP = 0
TTP_COL_TYPE = 1
TTP_COL_LNG = 3
TTP_COL_LAT = 5
TTP_COL_SPEED = 11


def _ttp_field(parts: Sequence[str], index: int) -> str:
    return parts[index].strip() if index < len(parts) else ""


def _read_ttp_channels(lines: Sequence[str], channels: Sequence[str]) -> Dict[str, List[NavigationPoint]]:
    """
    Points per channel, in file order, one per reception timestamp.

    A record without a usable position or speed blocks its timestamp for
    every channel, so the other channel does not pick that moment up again.
    """
    points: Dict[str, List[NavigationPoint]] = {channel: [] for channel in channels}
    seen = {channel: set() for channel in channels}
    rejected = set()
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(",")
        channel = _ttp_field(parts, TTP_COL_TYPE)
        if channel not in points:
            continue

        timestamp = _ttp_field(parts, TTP_COL_TIMESTAMP)
        ts = read_timestamp(timestamp)
        if not timestamp or (isinstance(ts, Known) and ts.value == 0):
            continue
        if timestamp in seen[channel] or timestamp in rejected:
            continue

        lng = _safe_float(_ttp_field(parts, TTP_COL_LNG) or None)
        lat = _safe_float(_ttp_field(parts, TTP_COL_LAT) or None)
        speed = _safe_float(_ttp_field(parts, TTP_COL_SPEED) or None)
        if lng is None or lat is None or speed is None:
            rejected.add(timestamp)
            continue
        seen[channel].add(timestamp)
        points[channel].append(NavigationPoint(
            latitude=lat, longitude=lng, timestamp=timestamp, speed=round(speed, 2),
        ))
    return points


def extract_ttp(text: str, incoming: str = TTP_INCOMING, outgoing: str = TTP_OUTGOING,
                ttp_version: str = TTP_VERSION) -> Outcome:
    """
    Route from a TomTom Positioning log.

    The log interleaves two channels of location records. Each channel keeps
    its own points; the outgoing channel is used only when it holds strictly more
    points than the incoming one.
    """
    lines = text.splitlines()
    first = lines[0].lstrip("\ufeff").strip() if lines else ""
    if not first.startswith(TTP_HEADER):
        return Failure.of(ErrorKind.FORMAT_MISMATCH, "Invalid TTP header")
    version = first[len(TTP_HEADER):].strip()
    if version != ttp_version:
        return Failure.of(
            ErrorKind.UNSUPPORTED_VERSION,
            f"Unsupported TTP version: {version}, expected {ttp_version}",
        )

    channels = _read_ttp_channels(lines[1:], (incoming, outgoing))
    incoming_points, outgoing_points = channels[incoming], channels[outgoing]
    log.debug("TTP channels: %d incoming, %d outgoing points",
              len(incoming_points), len(outgoing_points))

    if len(outgoing_points) > len(incoming_points):
        channel, points = "outgoing", outgoing_points
    elif incoming_points:
        channel, points = "incoming", incoming_points
    else:
        return Failure.of(ErrorKind.NO_DATA, "No locations found in TTP log")
    return Success([_derived_route(points)], f"using {channel} locations from positioning log")


# ─────────────────────────────────────────────────────────────
# Telemetry CSV
# ─────────────────────────────────────────────────────────────

# Default column names
CSV_DEFAULTS = {
    "delimiter": ",",
    "col_lat": "lat",
    "col_lon": "lon",
    "col_timestamp": "source_timestamp",
    "col_speed": "speed",
}


def _cell(row: Dict[str, str], name: str) -> Optional[str]:
    value = row.get(name)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def extract_csv(text: str, **opts) -> Outcome:
    """
    Route from a telemetry CSV. Options: delimiter, col_lat, col_lon,
    col_timestamp, col_speed. All four named columns must be in the header.
    """
    cfg = {**CSV_DEFAULTS, **opts}
    required = [cfg["col_lat"], cfg["col_lon"], cfg["col_timestamp"], cfg["col_speed"]]

    try:
        reader = csv.DictReader(io.StringIO(text), delimiter=cfg["delimiter"])
        header = [(name or "").strip() for name in reader.fieldnames or []]
        missing = [name for name in required if name not in header]
        if missing:
            return Failure.of(
                ErrorKind.FORMAT_MISMATCH, f"CSV header lacks columns: {', '.join(missing)}"
            )
        rows = [{(k or "").strip(): v for k, v in row.items()} for row in reader]
    except csv.Error as e:
        return Failure.of(ErrorKind.FORMAT_MISMATCH, f"Not CSV: {e}")

    points: List[NavigationPoint] = []
    for row in rows:
        timestamp = _cell(row, cfg["col_timestamp"])
        lat = _safe_float(_cell(row, cfg["col_lat"]))
        lng = _safe_float(_cell(row, cfg["col_lon"]))
        if lat is None or lng is None or timestamp is None:
            continue
        speed = _safe_float(_cell(row, cfg["col_speed"]))
        points.append(NavigationPoint(
            latitude=lat, longitude=lng, timestamp=timestamp,
            speed=None if speed is None else round(speed, 2),
        ))

    if not points:
        return Failure.of(ErrorKind.NO_DATA, "No valid rows in CSV")
    log.debug("CSV: %d of %d rows usable", len(points), len(rows))
    return Success([_derived_route(points)], "using telemetry CSV")


# ─────────────────────────────────────────────────────────────
# Free text coordinates
# ─────────────────────────────────────────────────────────────

_NUM = r"([\d.-]+)"

# Tried in order; the bare pair pattern would also match the wrapped forms.
TEXT_PATTERNS = [
    ("GeoPoint(latitude = …, longitude = …)", re.compile(
        r"GeoPoint\(\s*latitude\s*=\s*" + _NUM + r"[,\s]+longitude\s*=\s*" + _NUM + r"\s*\)")),
    ("GeoPoint(…, …)", re.compile(
        r"GeoPoint\(\s*" + _NUM + r"[,\s]+" + _NUM + r"\s*\)")),
    ("latitude/longitude", re.compile(
        r'"?\b(?:latitude|lat)"?\s*[:=]?\s*' + _NUM
        + r'[,;\s]+"?(?:longitude|lng|lon)"?\s*[:=]?\s*' + _NUM)),
    ("plain", re.compile(_NUM + r"[,\s]+" + _NUM)),
]


def find_coordinates(text: str, pattern: re.Pattern) -> List[NavigationPoint]:
    points = []
    for match in pattern.finditer(text):
        lat = _safe_float(match.group(1))
        lng = _safe_float(match.group(2))
        # zero reads as missing
        if lat and lng:
            points.append(NavigationPoint(latitude=lat, longitude=lng))
    return points


def extract_text(text: str) -> Outcome:
    """Route through coordinates found in pasted text. Distance only, no timing."""
    for name, pattern in TEXT_PATTERNS:
        points = find_coordinates(text, pattern)
        if points:
            log.debug("Text: %d points as %s", len(points), name)
            return Success([_derived_route(points)], f"using {name} coordinates")
    return Failure.of(ErrorKind.NO_DATA, "No coordinates found in text")


# ─────────────────────────────────────────────────────────────
# Format Registry
# ─────────────────────────────────────────────────────────────

@dataclass
class FormatDesc:
    """Description of an input format."""
    key: str
    name: str
    extractor: Callable[..., Outcome]


# Dispatch order. Free text goes last since its bare pattern matches CSV rows.
FORMAT_REGISTRY: List[FormatDesc] = [
    FormatDesc("json", "Structured route data", extract_json),
    FormatDesc("ttp",  "TomTom Positioning log", extract_ttp),
    FormatDesc("csv",  "Telemetry CSV",          extract_csv),
    FormatDesc("text", "Free text coordinates",  extract_text),
]


def get_format(key: str) -> Optional[FormatDesc]:
    """Get format descriptor by key."""
    key = key.lower()
    return next((fmt for fmt in FORMAT_REGISTRY if fmt.key == key), None)


def supported_formats() -> List[str]:
    return [fmt.key for fmt in FORMAT_REGISTRY]


def _filter_kwargs(func: Callable, opts: dict) -> dict:
    """Filter kwargs to only include parameters accepted by the function."""
    sig = inspect.signature(func)
    if any(p.kind == inspect.Parameter.VAR_KEYWORD for p in sig.parameters.values()):
        return opts
    valid = set(sig.parameters.keys())
    return {k: v for k, v in opts.items() if k in valid}


def extract_routes(text: str, only: Optional[Sequence[str]] = None, **opts) -> Outcome:
    """
    Try each format in registry order and return the first success.

    A recognized format with an unsupported version ends the search. Errors
    raised inside an extractor count as that format not matching.
    """
    if not text or not text.strip():
        return Failure.of(ErrorKind.EMPTY_INPUT, "Nothing to parse")
    if isinstance(only, str):
        only = [only]

    for fmt in FORMAT_REGISTRY:
        if only and fmt.key not in only:
            continue
        try:
            outcome = fmt.extractor(text, **_filter_kwargs(fmt.extractor, opts))
        except RouteParseError as e:
            log.warning("Error parsing as %s: %s", fmt.name, e)
            continue
        if outcome.is_success:
            log.info("Parsed as %s: %s", fmt.name, outcome.message)
            return outcome
        if outcome.kind is ErrorKind.UNSUPPORTED_VERSION:
            log.warning("%s", outcome.message)
            return outcome
        log.debug("Not %s: %s", fmt.name, outcome.message)

    return Failure.of(ErrorKind.EXHAUSTED, "Could not parse input")
