"""
routeplot — Route Plotter
Data models: NavigationPoint, RouteLeg, Route, Summary, GuidanceInstruction,
and the Outcome wrapper returned by every parser.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar, Union


# ─────────────────────────────────────────────────────────────
# Route model
# ─────────────────────────────────────────────────────────────

def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class NavigationPoint:
    """A single sampled or derived position."""
    latitude: float
    longitude: float
    timestamp: Optional[str] = None
    speed: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[NavigationPoint]:
        """Returns None when the point has no usable coordinates."""
        lat = data.get("latitude")
        lng = data.get("longitude")
        if lat is None or lng is None:
            return None
        ts = data.get("timestamp")
        speed = data.get("speed")
        return cls(
            latitude=float(lat),
            longitude=float(lng),
            timestamp=None if ts is None else str(ts),
            speed=None if speed is None else round(float(speed), 2),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp,
            "speed": self.speed,
        })


@dataclass(frozen=True)
class Summary:
    length_in_meters: float = 0.0
    travel_time_in_seconds: float = 0.0
    traffic_delay_in_seconds: Optional[float] = None
    traffic_length_in_meters: Optional[float] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Summary:
        return cls(
            length_in_meters=data.get("lengthInMeters", 0.0),
            travel_time_in_seconds=data.get("travelTimeInSeconds", 0.0),
            traffic_delay_in_seconds=data.get("trafficDelayInSeconds"),
            traffic_length_in_meters=data.get("trafficLengthInMeters"),
            departure_time=data.get("departureTime"),
            arrival_time=data.get("arrivalTime"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "lengthInMeters": self.length_in_meters,
            "travelTimeInSeconds": self.travel_time_in_seconds,
            "trafficDelayInSeconds": self.traffic_delay_in_seconds,
            "trafficLengthInMeters": self.traffic_length_in_meters,
            "departureTime": self.departure_time,
            "arrivalTime": self.arrival_time,
        })


@dataclass(frozen=True)
class RoutePath:
    point: NavigationPoint
    distance_in_meters: float = 0.0
    travel_time_in_seconds: float = 0.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional[RoutePath]:
        point = NavigationPoint.from_dict(data.get("point") or {})
        if point is None:
            return None
        return cls(
            point=point,
            distance_in_meters=data.get("distanceInMeters", 0.0),
            travel_time_in_seconds=data.get("travelTimeInSeconds", 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distanceInMeters": self.distance_in_meters,
            "point": self.point.to_dict(),
            "travelTimeInSeconds": self.travel_time_in_seconds,
        }


@dataclass(frozen=True)
class GuidanceInstruction:
    """A maneuver description. Only structured route data carries these."""
    driving_side: str
    maneuver: str
    maneuver_point: Optional[NavigationPoint]
    route_offset_in_meters: float = 0.0
    route_path: Tuple[RoutePath, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GuidanceInstruction:
        paths = (RoutePath.from_dict(p) for p in data.get("routePath") or [])
        return cls(
            driving_side=data.get("drivingSide", ""),
            maneuver=data.get("maneuver", ""),
            maneuver_point=NavigationPoint.from_dict(data.get("maneuverPoint") or {}),
            route_offset_in_meters=data.get("routeOffsetInMeters", 0.0),
            route_path=tuple(p for p in paths if p is not None),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "drivingSide": self.driving_side,
            "maneuver": self.maneuver,
            "maneuverPoint": self.maneuver_point.to_dict() if self.maneuver_point else None,
            "routeOffsetInMeters": self.route_offset_in_meters,
            "routePath": [p.to_dict() for p in self.route_path],
        }


@dataclass(frozen=True)
class RouteLeg:
    """One continuous segment of travel. Consecutive legs share a boundary point."""
    points: Tuple[NavigationPoint, ...] = ()
    summary: Optional[Summary] = None

    def __len__(self) -> int:
        return len(self.points)

    @property
    def first(self) -> Optional[NavigationPoint]:
        return self.points[0] if self.points else None

    @property
    def last(self) -> Optional[NavigationPoint]:
        return self.points[-1] if self.points else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RouteLeg:
        points = (NavigationPoint.from_dict(p) for p in data.get("points") or [])
        summary = data.get("summary")
        return cls(
            points=tuple(p for p in points if p is not None),
            summary=Summary.from_dict(summary) if summary else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"points": [p.to_dict() for p in self.points]}
        if self.summary is not None:
            data["summary"] = self.summary.to_dict()
        return data


@dataclass(frozen=True)
class Route:
    """One complete trip: legs, an overall summary and guidance."""
    legs: Tuple[RouteLeg, ...]
    summary: Summary = field(default_factory=Summary)
    instructions: Tuple[GuidanceInstruction, ...] = ()

    @classmethod
    def single_leg(cls, points: List[NavigationPoint], summary: Summary) -> Route:
        return cls(legs=(RouteLeg(tuple(points)),), summary=summary)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Route:
        guidance = data.get("guidance") or {}
        summary = data.get("summary")
        return cls(
            legs=tuple(RouteLeg.from_dict(leg) for leg in data.get("legs") or []),
            summary=Summary.from_dict(summary) if summary else Summary(),
            instructions=tuple(
                GuidanceInstruction.from_dict(i) for i in guidance.get("instructions") or []
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "legs": [leg.to_dict() for leg in self.legs],
            "summary": self.summary.to_dict(),
            "guidance": {"instructions": [i.to_dict() for i in self.instructions]},
        }


# ─────────────────────────────────────────────────────────────
# Outcome
# ─────────────────────────────────────────────────────────────

class ErrorKind(Enum):
    EMPTY_INPUT = "empty_input"
    FORMAT_MISMATCH = "format_mismatch"
    UNSUPPORTED_VERSION = "unsupported_version"
    NO_DATA = "no_data"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class ParseError:
    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


class RouteParseError(Exception):
    """Raised inside an extractor for conditions that cannot be returned as a Failure."""


class TimestampError(RouteParseError):
    pass


T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    message: str = ""

    is_success = True

    def __bool__(self) -> bool:
        return True

    def if_success(self, fn: Callable[[T, str], Any]) -> Success[T]:
        fn(self.value, self.message)
        return self

    def if_failure(self, fn: Callable[[ParseError], Any]) -> Success[T]:
        return self


@dataclass(frozen=True)
class Failure:
    error: ParseError

    is_success = False

    def __bool__(self) -> bool:
        return False

    @classmethod
    def of(cls, kind: ErrorKind, message: str) -> Failure:
        return cls(ParseError(kind, message))

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    def if_success(self, fn: Callable[[Any, str], Any]) -> Failure:
        return self

    def if_failure(self, fn: Callable[[ParseError], Any]) -> Failure:
        fn(self.error)
        return self


Outcome = Union[Success[T], Failure]
