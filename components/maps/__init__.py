"""
Maps Component - Route heatmap visualization.

This component draws the monitored routes on a Folium map colored by traffic
intensity, resolves road-following route geometry in the background and maps
clicks back to routes.
"""

from .maps_page import render_heatmap_page
from .map_config import MapOverlayConfig
from .geometry_cache import RouteGeometryCache
from .hit_testing import SpatialHitTester
from .overlay_controller import RouteOverlayController
from .symbology import HeatmapColorMapper, SymbologyEngine

__all__ = [
    'render_heatmap_page',
    'MapOverlayConfig',
    'RouteGeometryCache',
    'SpatialHitTester',
    'RouteOverlayController',
    'HeatmapColorMapper',
    'SymbologyEngine'
]
