"""
Click hit-testing for route overlays.

Maps a clicked map coordinate to the nearest logical route using planar
point-to-segment distance in degree space. No geodesic correction is applied;
the map area is small and localized.
"""

import numpy as np
from typing import Optional, Sequence
import logging

from .geometry import Coordinate, RouteSegment

logger = logging.getLogger(__name__)


class SpatialHitTester:
    """Finds the route segment closest to a clicked point."""

    def __init__(self, threshold: float = 0.002):
        self.threshold = threshold

    @staticmethod
    def distances(point: Coordinate, segments: Sequence[RouteSegment]) -> np.ndarray:
        """
        Compute point-to-segment distances for all segments at once.

        The point is projected onto each segment with
        t = clamp(dot(p - a, b - a) / |b - a|^2, 0, 1). Zero-length segments
        use t = 0, which reduces to point-to-point distance.

        Args:
            point: Clicked coordinate
            segments: Candidate route segments

        Returns:
            Array of distances, one per segment, in input order
        """
        if len(segments) == 0:
            return np.array([], dtype=float)

        p = np.array([point.latitude, point.longitude], dtype=float)
        starts = np.array([[s.start.latitude, s.start.longitude] for s in segments], dtype=float)
        ends = np.array([[s.end.latitude, s.end.longitude] for s in segments], dtype=float)

        direction = ends - starts
        length_sq = np.einsum('ij,ij->i', direction, direction)
        offset = p - starts

        t = np.zeros(len(segments), dtype=float)
        non_zero = length_sq > 0
        t[non_zero] = np.einsum('ij,ij->i', offset[non_zero], direction[non_zero]) / length_sq[non_zero]
        t = np.clip(t, 0.0, 1.0)

        closest = starts + t[:, np.newaxis] * direction
        return np.linalg.norm(closest - p, axis=1)

    def distance_to_segment(self, point: Coordinate, segment: RouteSegment) -> float:
        """Distance from a point to a single segment."""
        return float(self.distances(point, [segment])[0])

    def find_nearest(self, point: Coordinate, segments: Sequence[RouteSegment],
                     threshold: Optional[float] = None) -> Optional[str]:
        """
        Find the route id of the segment nearest to the clicked point.

        Args:
            point: Clicked coordinate
            segments: Candidate route segments
            threshold: Maximum accepted distance in degrees (defaults to the
                tester's configured threshold)

        Returns:
            route_id of the nearest segment, or None if nothing is within threshold
        """
        if threshold is None:
            threshold = self.threshold

        distances = self.distances(point, segments)
        if distances.size == 0:
            return None

        # argmin returns the first minimum, so equal distances keep input order
        nearest_idx = int(np.argmin(distances))
        nearest_distance = float(distances[nearest_idx])

        if nearest_distance < threshold:
            route_id = segments[nearest_idx].route_id
            logger.debug(f"Click at {point.as_tuple()} hit {route_id} at distance {nearest_distance:.6f}")
            return route_id

        logger.debug(f"Click at {point.as_tuple()} missed all routes (nearest {nearest_distance:.6f})")
        return None
