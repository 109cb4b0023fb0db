"""
routeplot — Route dump
Renders a route as indented object-notation text, a starting point for
hand-written route fixtures.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .models import NavigationPoint, Route, RouteLeg, Summary
from .projections import route_points, route_stops

DEFAULT_INDENT = 2


class Serializer:
    """Accumulates lines of text at the current indentation level."""

    def __init__(self, indent: int = DEFAULT_INDENT):
        self._lines: List[str] = []
        self._level = 0
        self._step = indent

    @contextmanager
    def indented(self, amount: Optional[int] = None) -> Iterator[Serializer]:
        amount = self._step if amount is None else amount
        self._level += amount
        try:
            yield self
        finally:
            self._level = max(0, self._level - amount)

    def append(self, text: str):
        self._lines.append(" " * self._level + text)

    @contextmanager
    def wrap(self, start: str, end: str) -> Iterator[Serializer]:
        self.append(start)
        with self.indented():
            yield self
        self.append(end)

    def build(self) -> str:
        return "\n".join(self._lines) + "\n" if self._lines else ""


def with_milliseconds(date_time: str) -> str:
    """'2024-01-01T10:00:00+01:00' -> '2024-01-01T10:00:00.000+01:00'"""
    if "+" not in date_time:
        return date_time
    stamp, zone = date_time.split("+", 1)
    return f"{stamp}.000+{zone}"


def _geo(pt: NavigationPoint) -> str:
    return f"GeoPoint(latitude = {pt.latitude}, longitude = {pt.longitude})"


def _times(summary: Summary, s: Serializer):
    if summary.departure_time:
        s.append(f"departureTimeWithZone = {with_milliseconds(summary.departure_time)},")
    if summary.arrival_time:
        s.append(f"arrivalTimeWithZone = {with_milliseconds(summary.arrival_time)},")


def _summary(summary: Summary, s: Serializer):
    with s.wrap("summary = Summary(", "),"):
        s.append(f"length = Distance.meters({summary.length_in_meters}),")
        s.append(f"travelTime = {summary.travel_time_in_seconds}.seconds,")
        _times(summary, s)


def _leg(leg: RouteLeg, s: Serializer):
    with s.wrap("RouteLeg(", "),"):
        with s.wrap("points = listOf(", "),"):
            for pt in leg.points:
                s.append(f"{_geo(pt)},")
        s.append("instructions = emptyList(),")
        summary = leg.summary or Summary()
        with s.wrap("Summary(", "),"):
            s.append(f"length = {summary.length_in_meters},")
            s.append(f"travelTime = {summary.travel_time_in_seconds},")
            if summary.traffic_delay_in_seconds:
                s.append(f"trafficDelay = {summary.traffic_delay_in_seconds},")
            if summary.traffic_length_in_meters:
                s.append(f"trafficLength = {summary.traffic_length_in_meters},")
            _times(summary, s)


def dump_route(route: Route) -> str:
    s = Serializer()
    with s.wrap("Route(", ")"):
        _summary(route.summary, s)
        with s.wrap("legs = listOf(", "),"):
            for leg in route.legs:
                _leg(leg, s)
        with s.wrap("routeStops = listOf(", "),"):
            for stop in route_stops(route):
                with s.wrap("RouteStop(", "),"):
                    s.append("id = RouteStopId(),")
                    s.append(f"place = Place({_geo(stop.point)}),")
                    s.append("navigableCoordinates = emptyList(),")
                    s.append(f"routeOffset = {stop.route_offset}")
        with s.wrap("routePoints = listOf(", "),"):
            for rp in route_points(route):
                with s.wrap("RoutePoint(", "),"):
                    s.append(f"coordinate = {_geo(rp.point)},")
                    s.append(f"routeOffset = {rp.route_offset},")
                    s.append(f"travelTime = {rp.travel_time}")
        s.append("sections = Sections(),")
        with s.wrap("modificationHistory = RouteModificationHistory(", "),"):
            s.append("RouteTimestamp(0L, Calendar.getInstance()),")
    return s.build()


def dump_routes(routes: List[Route]) -> str:
    parts = []
    for i, route in enumerate(routes):
        parts.append(f"Route {i} serialized as object:\n-------------------\n{dump_route(route)}")
    return "\n".join(parts)
