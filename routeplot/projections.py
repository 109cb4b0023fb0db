"""
routeplot — Route projections
Views of a parsed route for display: points, waypoints, guidance, summary.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from .geometry import distance_between
from .models import GuidanceInstruction, NavigationPoint, Route, Summary


def flatten_points(route: Route) -> List[NavigationPoint]:
    """All points of the route. Each leg after the first starts on the previous
    leg's last point, so that duplicate is dropped."""
    points: List[NavigationPoint] = []
    for i, leg in enumerate(route.legs):
        points.extend(leg.points[1:] if i > 0 else leg.points)
    return points


def waypoints_of(route: Route) -> List[NavigationPoint]:
    """Departure, the start of every further leg, and the final arrival."""
    legs = [leg for leg in route.legs if leg.points]
    waypoints = [leg.first for leg in legs]
    if legs:
        waypoints.append(legs[-1].last)
    return waypoints


def instructions_of(route: Optional[Route]) -> List[GuidanceInstruction]:
    if route is None:
        return []
    return list(route.instructions)


def summary_of(route: Optional[Route]) -> Optional[Summary]:
    if route is None:
        return None
    return route.summary


@dataclass(frozen=True)
class RoutePoint:
    point: NavigationPoint
    route_offset: float = 0.0
    travel_time: float = 0.0


@dataclass(frozen=True)
class RouteStop:
    point: NavigationPoint
    route_offset: float = 0.0


def route_points(route: Route) -> List[RoutePoint]:
    """Route geometry with the distance travelled up to each point."""
    result: List[RoutePoint] = []
    offset = 0.0
    previous = None
    for pt in flatten_points(route):
        if previous is not None:
            offset += distance_between(previous, pt)
        result.append(RoutePoint(pt, round(offset, 2)))
        previous = pt
    return result


def route_stops(route: Route) -> List[RouteStop]:
    """Departure point followed by the end point of every leg."""
    legs = [leg for leg in route.legs if leg.points]
    if not legs:
        return []
    return [RouteStop(legs[0].first)] + [RouteStop(leg.last) for leg in legs]
