"""
OSRM routing provider.

Talks to an OSRM server over HTTP and returns road-following route geometry
for a pair of endpoints. Encapsulates the OSRM-specific details:
coordinate formatting (lon,lat), URL construction, response validation and
polyline decoding. It knows nothing about caching or rendering.
"""

import os
from typing import Optional
import logging

import polyline
import requests
from dotenv import load_dotenv

from components.maps.geometry import Coordinate, RouteGeometry, from_latlon_pairs

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_BASE_URL = "https://router.project-osrm.org"


class OverlayError(Exception):
    """Base exception for route overlay errors."""
    pass


class RoutingProviderError(OverlayError):
    """Raised when the routing provider cannot resolve a route."""
    pass


class OSRMClient:
    """
    OSRM adapter implementing the routing provider contract
    resolve(start, end) -> RouteGeometry.
    """

    def __init__(self, base_url: Optional[str] = None, profile: str = "driving",
                 timeout: Optional[float] = 10, session: Optional[requests.Session] = None):
        self.base_url = (base_url or os.getenv("OSRM_BASE_URL") or DEFAULT_BASE_URL).rstrip('/')
        self.profile = profile
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, routing_config: dict) -> 'OSRMClient':
        return cls(
            base_url=routing_config.get('base_url'),
            profile=routing_config.get('profile', 'driving'),
            timeout=routing_config.get('timeout_sec', 10)
        )

    @staticmethod
    def format_coordinates(start: Coordinate, end: Coordinate) -> str:
        """Convert (lat, lon) endpoints to OSRM 'lon,lat;lon,lat'."""
        return ';'.join(f"{c.longitude},{c.latitude}" for c in (start, end))

    def route_url(self, start: Coordinate, end: Coordinate) -> str:
        return f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(start, end)}"

    def resolve(self, start: Coordinate, end: Coordinate) -> RouteGeometry:
        """
        Resolve the driving route between two points.

        Args:
            start: Route start
            end: Route end

        Returns:
            Road-following polyline as a tuple of Coordinates

        Raises:
            RoutingProviderError: On transport errors, non-Ok responses or
                unusable geometry
        """
        url = self.route_url(start, end)

        try:
            response = self.session.get(
                url,
                params={
                    "overview": "full",
                    "geometries": "polyline",
                    "alternatives": "false",
                },
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise RoutingProviderError(f"OSRM request failed for {url}: {e}") from e

        if data.get("code") != "Ok" or not data.get("routes"):
            raise RoutingProviderError(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

        encoded = data["routes"][0].get("geometry")
        if not encoded:
            raise RoutingProviderError("OSRM response did not include route geometry")

        points = polyline.decode(encoded, 5)
        if len(points) < 2:
            raise RoutingProviderError(f"OSRM returned a polyline with {len(points)} point(s)")

        logger.debug(f"Resolved {len(points)}-point route {start.as_tuple()} -> {end.as_tuple()}")
        return from_latlon_pairs(points)
