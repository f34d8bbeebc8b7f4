"""
Map rendering module for the route heatmap.

This module draws route overlays and the heatmap legend on a Folium map and
hands the map to Streamlit.
"""

import folium
from typing import Dict, List, Optional, Tuple, Any
import logging

from .geometry import to_latlon_list
from .overlay_controller import RouteOverlay
from .symbology import HeatmapColorMapper

logger = logging.getLogger(__name__)


class MapRenderer:
    """Core map rendering using Folium."""

    def __init__(self, map_settings: Optional[Dict[str, Any]] = None,
                 fallback_dash_array: str = "8, 6"):
        settings = map_settings or {}
        self.default_center = list(settings.get('default_center', [-6.295, 106.71]))
        self.default_zoom = settings.get('default_zoom', 13)
        self.tiles = settings.get('tiles', 'OpenStreetMap')
        self.height = settings.get('height', 400)
        self.fallback_dash_array = fallback_dash_array

    def create_base_map(self, center: Optional[Tuple[float, float]] = None,
                        zoom: Optional[int] = None) -> folium.Map:
        """
        Create the base map.

        Args:
            center: Optional (lat, lon) centre; defaults to the configured centre
            zoom: Optional zoom level

        Returns:
            Folium Map object
        """
        location = list(center) if center is not None else self.default_center
        m = folium.Map(
            location=location,
            zoom_start=zoom if zoom is not None else self.default_zoom,
            tiles=self.tiles
        )

        logger.debug(f"Created base map centered at {location}")
        return m

    def add_route_overlays(self, map_obj: folium.Map, overlays: List[RouteOverlay]) -> folium.Map:
        """
        Add route polylines to the map.

        Unresolved routes are drawn dashed along the straight-line fallback.
        """
        if not overlays:
            logger.warning("No route overlays to render")
            return map_obj

        for overlay in overlays:
            self._add_overlay_to_map(map_obj, overlay)

        resolved = sum(1 for overlay in overlays if overlay.resolved)
        logger.debug(f"Added {len(overlays)} route overlays to map ({resolved} resolved)")
        return map_obj

    def _add_overlay_to_map(self, map_obj: folium.Map, overlay: RouteOverlay) -> None:
        folium.PolyLine(
            locations=to_latlon_list(overlay.geometry),
            color=overlay.color,
            weight=overlay.line_width + (2 if overlay.selected else 0),
            opacity=overlay.opacity,
            dash_array=None if overlay.resolved else self.fallback_dash_array,
            line_cap='round',
            line_join='round',
            popup=folium.Popup(self._create_popup_content(overlay), max_width=300),
            tooltip=folium.Tooltip(self._create_tooltip_content(overlay), sticky=True)
        ).add_to(map_obj)

    def _create_popup_content(self, overlay: RouteOverlay) -> str:
        """Create HTML popup content for a route."""
        content = f"""
        <div style="font-family: Arial, sans-serif;">
            <h4>{overlay.display_name}</h4>
            <p><strong>Route:</strong> {overlay.route_id}</p>
            <p><strong>Volume:</strong> {overlay.weight:,.0f} vehicles/hour</p>
            <p><strong>Intensity:</strong>
                <span style="color: {overlay.color}; font-weight: bold;">{overlay.intensity}</span>
            </p>
        """
        if not overlay.resolved:
            content += '<p style="font-size: 11px; color: #666;">Road geometry loading</p>'

        content += "</div>"
        return content

    def _create_tooltip_content(self, overlay: RouteOverlay) -> str:
        return f"{overlay.display_name} | {overlay.weight:,.0f} veh/h | {overlay.intensity}"

    def render_to_streamlit(self, map_obj: folium.Map, key: str = "route_heatmap",
                            height: Optional[int] = None) -> Optional[Tuple[float, float]]:
        """
        Render Folium map in Streamlit.

        Args:
            map_obj: Folium Map object
            key: Streamlit widget key
            height: Map height in pixels

        Returns:
            (lat, lon) of the last click, or None
        """
        from streamlit_folium import st_folium

        map_data = st_folium(
            map_obj,
            width=None,
            height=height or self.height,
            key=key,
            returned_objects=["last_clicked"]
        )

        last_clicked = (map_data or {}).get('last_clicked')
        if last_clicked:
            return (last_clicked['lat'], last_clicked['lng'])
        return None


class LegendGenerator:
    """Generates the traffic intensity legend."""

    def __init__(self):
        self.legend_template = """
        <div style="position: fixed;
                    bottom: 30px; left: 30px; width: 220px; height: auto;
                    background-color: white; border:2px solid grey; z-index:9999;
                    font-size:12px; padding: 10px; border-radius: 5px;
                    box-shadow: 0 2px 4px rgba(0,0,0,0.2);">
        <h4 style="margin: 0 0 10px 0; font-size: 14px; color: #333;">{title}</h4>
        {content}
        </div>
        """

    def create_legend(self, color_mapper: HeatmapColorMapper,
                      title: str = "Traffic Intensity (veh/h)",
                      labels: Optional[List[str]] = None) -> str:
        """
        Create HTML legend with the heatmap gradient and its anchor stops.

        Args:
            color_mapper: Mapper providing the anchor thresholds and colors
            title: Legend title
            labels: Optional labels for the three anchors

        Returns:
            HTML string for legend
        """
        stops = color_mapper.legend_stops()
        labels = labels or ["Light", "Medium", "Heavy"]
        gradient = ", ".join(hex_color for _, hex_color in stops)

        content = f"""
        <div style="height: 12px; border: 1px solid #ccc; margin-bottom: 6px;
                    background: linear-gradient(to right, {gradient});"></div>
        """

        for (threshold, hex_color), label in zip(stops, labels):
            content += f"""
            <div style="margin: 3px 0; display: flex; align-items: center;">
                <span style="background-color: {hex_color}; width: 20px; height: 12px;
                           display: inline-block; margin-right: 8px; border: 1px solid #ccc;"></span>
                <span style="font-size: 11px;">{label}: {threshold:,.0f}</span>
            </div>
            """

        return self.legend_template.format(title=title, content=content)

    def add_legend_to_map(self, map_obj: folium.Map, legend_html: str) -> folium.Map:
        map_obj.get_root().html.add_child(folium.Element(legend_html))
        return map_obj
