"""
Route catalog for the heatmap.

Fixed set of monitored toll-road routes with their endpoints, plus helpers
for the map view (centre, zoom span) and for building the segments drawn for
a route selection.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from .geometry import Coordinate, RouteSegment

logger = logging.getLogger(__name__)

ALL_ROUTES = "all-routes"
ALL_ROUTES_CENTER = Coordinate(-6.295, 106.71)
DEFAULT_ROUTE_WEIGHT = 3500.0

# Span in degrees; long routes and the overview need a wider view
WIDE_SPAN = 0.05
NARROW_SPAN = 0.02
WIDE_SPAN_ROUTES = {ALL_ROUTES, "jakarta-pagedangan", "pagedangan-jakarta"}


@dataclass(frozen=True)
class RouteOption:
    name: str
    display_name: str

    @property
    def is_all_routes(self) -> bool:
        return self.name == ALL_ROUTES


ROUTE_OPTIONS: List[RouteOption] = [
    RouteOption(ALL_ROUTES, "All Routes"),
    RouteOption("jakarta-pagedangan", "Jakarta - Pagedangan"),
    RouteOption("pagedangan-jakarta", "Pagedangan - Jakarta"),
    RouteOption("bintaro-out", "Bintaro Out"),
    RouteOption("bintaro-in", "Bintaro In"),
    RouteOption("jakarta-pamulang", "Jakarta - Pamulang"),
    RouteOption("jakarta-alam-sutera", "Jakarta - Alam Sutera"),
    RouteOption("pagedangan-alam-sutera", "Pagedangan - Alam Sutera"),
    RouteOption("pagedangan-pamulang", "Pagedangan - Pamulang"),
    RouteOption("pamulang-pagedangan", "Pamulang - Pagedangan"),
    RouteOption("pamulang-jakarta", "Pamulang - Jakarta"),
    RouteOption("alam-sutera-jakarta", "Alam Sutera - Jakarta"),
    RouteOption("alam-sutera-pagedangan", "Alam Sutera - Pagedangan"),
]

ROUTE_ENDPOINTS: Dict[str, Tuple[Coordinate, Coordinate]] = {
    "jakarta-pagedangan": (Coordinate(-6.28572, 106.73091), Coordinate(-6.30782, 106.69069)),
    "pagedangan-jakarta": (Coordinate(-6.30482, 106.69713), Coordinate(-6.28477, 106.73216)),
    "bintaro-out": (Coordinate(-6.28984, 106.72461), Coordinate(-6.28687, 106.72674)),
    "bintaro-in": (Coordinate(-6.28889, 106.72886), Coordinate(-6.29013, 106.72485)),
    "jakarta-pamulang": (Coordinate(-6.29797, 106.70813), Coordinate(-6.30534, 106.70586)),
    "jakarta-alam-sutera": (Coordinate(-6.29816, 106.70786), Coordinate(-6.29894, 106.69725)),
    "pagedangan-alam-sutera": (Coordinate(-6.30331, 106.69954), Coordinate(-6.29894, 106.69725)),
    "pagedangan-pamulang": (Coordinate(-6.30338, 106.69960), Coordinate(-6.30310, 106.70402)),
    "pamulang-pagedangan": (Coordinate(-6.30564, 106.70574), Coordinate(-6.30724, 106.69257)),
    "pamulang-jakarta": (Coordinate(-6.30290, 106.70340), Coordinate(-6.29853, 106.70694)),
    "alam-sutera-pagedangan": (Coordinate(-6.30026, 106.70040), Coordinate(-6.30380, 106.69977)),
    "alam-sutera-jakarta": (Coordinate(-6.29989, 106.69956), Coordinate(-6.29917, 106.70617)),
}

FALLBACK_ROUTE = "jakarta-alam-sutera"


class RouteCatalog:
    """Lookup of route options, endpoints and map view parameters."""

    def __init__(self, options: Optional[List[RouteOption]] = None,
                 endpoints: Optional[Dict[str, Tuple[Coordinate, Coordinate]]] = None,
                 default_weight: float = DEFAULT_ROUTE_WEIGHT):
        self.options = options or ROUTE_OPTIONS
        self.endpoints = endpoints or ROUTE_ENDPOINTS
        self.default_weight = default_weight
        self._by_name = {option.name: option for option in self.options}

    def get_option(self, name: str) -> RouteOption:
        if name not in self._by_name:
            raise ValueError(f"Unknown route: {name}")
        return self._by_name[name]

    def route_names(self) -> List[str]:
        """Concrete route names, excluding the all-routes pseudo-route."""
        return [option.name for option in self.options if not option.is_all_routes]

    def display_name(self, name: str) -> str:
        option = self._by_name.get(name)
        return option.display_name if option else name

    def endpoints_for(self, name: str) -> Tuple[Coordinate, Coordinate]:
        """Endpoints of a route; unknown routes fall back to Jakarta - Alam Sutera."""
        if name not in self.endpoints:
            logger.debug(f"No endpoints for {name}, using {FALLBACK_ROUTE}")
            return self.endpoints[FALLBACK_ROUTE]
        return self.endpoints[name]

    def center_for(self, name: str) -> Coordinate:
        """Map centre for a route selection: endpoint midpoint, or the overview centre."""
        if name == ALL_ROUTES:
            return ALL_ROUTES_CENTER
        start, end = self.endpoints_for(name)
        return Coordinate(
            (start.latitude + end.latitude) / 2,
            (start.longitude + end.longitude) / 2
        )

    def span_for(self, name: str) -> float:
        return WIDE_SPAN if name in WIDE_SPAN_ROUTES else NARROW_SPAN

    def zoom_for(self, name: str) -> int:
        """Folium zoom level roughly matching the route's span."""
        return 14 if self.span_for(name) == WIDE_SPAN else 15

    def segments_for(self, name: str, route_weights: Dict[str, float]) -> List[RouteSegment]:
        """
        Build the segments to draw for a route selection.

        Args:
            name: Selected route name or 'all-routes'
            route_weights: Mean hourly volume per route; missing routes get
                the default weight

        Returns:
            One segment per route for 'all-routes', otherwise one segment
        """
        names = self.route_names() if name == ALL_ROUTES else [name]

        segments = []
        for route_name in names:
            start, end = self.endpoints_for(route_name)
            weight = route_weights.get(route_name, self.default_weight)
            segments.append(RouteSegment(start, end, float(weight), route_name))

        logger.debug(f"Built {len(segments)} segments for {name}")
        return segments
