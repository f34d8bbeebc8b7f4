"""
Route overlay controller.

Composition root for the heatmap: turns the current route selection and route
weights into styled overlays, asks the geometry cache what to draw for each
route, and routes map clicks through the hit tester.
"""

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from .geometry import Coordinate, RouteGeometry, RouteSegment
from .geometry_cache import CacheKey, RouteGeometryCache
from .hit_testing import SpatialHitTester
from .route_catalog import ALL_ROUTES, RouteCatalog
from .symbology import SymbologyEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteOverlay:
    """One drawable route polyline with its heatmap styling."""
    route_id: str
    display_name: str
    geometry: RouteGeometry
    color: str
    line_width: float
    opacity: float
    weight: float
    intensity: str
    resolved: bool
    selected: bool = False


class RouteOverlayController:
    """
    Owns one session's route selection and overlay state.

    The geometry cache is injected; the controller registers itself as the
    cache's redraw notifier and exposes the pending redraw as a flag the page
    consumes on its next run.
    """

    def __init__(self, cache: RouteGeometryCache,
                 catalog: Optional[RouteCatalog] = None,
                 symbology: Optional[SymbologyEngine] = None,
                 hit_tester: Optional[SpatialHitTester] = None,
                 route_weights: Optional[Dict[str, float]] = None):
        self.cache = cache
        self.catalog = catalog or RouteCatalog()
        self.symbology = symbology or SymbologyEngine()
        self.hit_tester = hit_tester or SpatialHitTester()

        self.selected_route = ALL_ROUTES
        self._route_weights: Dict[str, float] = dict(route_weights or {})
        self.segments: List[RouteSegment] = []

        self._redraw_lock = threading.Lock()
        self._redraw_pending = False
        self._resolved_routes: List[str] = []

        self.cache.set_notifier(self._on_geometry_resolved)
        self._rebuild_segments()

    @classmethod
    def from_config(cls, config, provider, executor=None) -> 'RouteOverlayController':
        """
        Build a controller and its cache from a MapOverlayConfig.

        Args:
            config: MapOverlayConfig instance
            provider: Routing provider with resolve(start, end)
            executor: Optional executor for geometry fetches
        """
        routing = config.get_routing_config()
        cache = RouteGeometryCache(provider, executor=executor,
                                   max_workers=int(routing.get('max_workers', 4)))
        return cls(
            cache,
            catalog=RouteCatalog(default_weight=config.get_default_route_weight()),
            symbology=SymbologyEngine.from_config(config),
            hit_tester=SpatialHitTester(config.get_hit_threshold())
        )

    def _rebuild_segments(self) -> None:
        self.segments = self.catalog.segments_for(self.selected_route, self._route_weights)

    def _on_geometry_resolved(self, key: CacheKey, route_ids: Tuple[str, ...]) -> None:
        # Runs on a fetch worker thread
        with self._redraw_lock:
            self._redraw_pending = True
            self._resolved_routes.extend(route_ids)
        logger.debug(f"Redraw requested for {', '.join(route_ids)}")

    def consume_redraw(self) -> List[str]:
        """
        Take and clear the pending redraw.

        Returns:
            Route ids whose geometry resolved since the last call; empty when
            no redraw is pending
        """
        with self._redraw_lock:
            if not self._redraw_pending:
                return []
            routes = self._resolved_routes
            self._redraw_pending = False
            self._resolved_routes = []
        return routes

    @property
    def redraw_pending(self) -> bool:
        with self._redraw_lock:
            return self._redraw_pending

    def geometry_outstanding(self) -> bool:
        """True while a resolved geometry is undrawn or a fetch is still pending."""
        return self.redraw_pending or self.cache.stats()["pending"] > 0

    @property
    def route_weights(self) -> Dict[str, float]:
        return dict(self._route_weights)

    def set_route_weights(self, route_weights: Dict[str, float]) -> None:
        """Replace the per-route weights used for segment styling."""
        self._route_weights = dict(route_weights)
        self._rebuild_segments()

    def select_route(self, route_name: str) -> None:
        """
        Change the route selection.

        Raises:
            ValueError: If the route is not in the catalog
        """
        self.catalog.get_option(route_name)
        if route_name != self.selected_route:
            logger.info(f"Route selection changed to {route_name}")
        self.selected_route = route_name
        self._rebuild_segments()

    def build_overlays(self) -> List[RouteOverlay]:
        """
        Styled overlays for the current selection.

        Each lookup returns immediately; unresolved routes are drawn with
        their straight-line fallback until a redraw picks up the real geometry.
        """
        overlays = []
        for segment in self.segments:
            geometry, resolved = self.cache.lookup(segment)
            style = self.symbology.style_for(segment.weight)
            overlays.append(RouteOverlay(
                route_id=segment.route_id,
                display_name=self.catalog.display_name(segment.route_id),
                geometry=geometry,
                color=style['color'],
                line_width=style['weight'],
                opacity=style['opacity'],
                weight=segment.weight,
                intensity=self.symbology.color_mapper.intensity_label(segment.weight),
                resolved=resolved,
                selected=segment.route_id == self.selected_route
            ))
        return overlays

    def handle_click(self, latitude: float, longitude: float) -> Optional[str]:
        """
        Resolve a map click to a route and select it.

        Args:
            latitude: Clicked latitude
            longitude: Clicked longitude

        Returns:
            The selected route id, or None when the click missed every route
        """
        route_id = self.hit_tester.find_nearest(Coordinate(latitude, longitude), self.segments)
        if route_id is None:
            return None

        self.select_route(route_id)
        return route_id

    def map_center(self) -> Coordinate:
        return self.catalog.center_for(self.selected_route)

    def map_zoom(self) -> int:
        return self.catalog.zoom_for(self.selected_route)

    def close(self) -> None:
        """Detach from and retire the geometry cache."""
        self.cache.set_notifier(None)
        self.cache.close()
        logger.debug("Route overlay controller closed")
