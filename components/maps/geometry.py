"""
Geometry value types for route overlays.

Coordinates are kept as (lat, lon) pairs throughout the maps component, the
same order Folium and the polyline codec use.
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Coordinate:
    """Geographic point in decimal degrees."""
    latitude: float
    longitude: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def rounded(self, digits: int = 6) -> Tuple[float, float]:
        return (round(self.latitude, digits), round(self.longitude, digits))


@dataclass(frozen=True)
class RouteSegment:
    """
    Geographic endpoints of one logical route with its current traffic weight.

    Attributes:
        start: Start coordinate
        end: End coordinate
        weight: Traffic intensity in vehicles per hour
        route_id: Route name, e.g. 'jakarta-pagedangan'
    """
    start: Coordinate
    end: Coordinate
    weight: float
    route_id: str

    @property
    def is_degenerate(self) -> bool:
        return self.start == self.end


# Ordered polyline; stored as a tuple so cached geometries cannot be mutated by callers
RouteGeometry = Tuple[Coordinate, ...]


def straight_line(segment: RouteSegment) -> RouteGeometry:
    """Two-point fallback geometry between a segment's endpoints."""
    return (segment.start, segment.end)


def to_latlon_list(geometry: RouteGeometry) -> List[List[float]]:
    """Convert geometry to the [[lat, lon], ...] form Folium expects."""
    return [[point.latitude, point.longitude] for point in geometry]


def from_latlon_pairs(points) -> RouteGeometry:
    """Build geometry from an iterable of (lat, lon) pairs."""
    return tuple(Coordinate(float(lat), float(lon)) for lat, lon in points)
