"""
Visual Data page: route heatmap with traffic statistics.

Renders the route overlay map with its filters, the vehicle count cards and
route share for the current selection, and the monthly route comparison.
"""

import streamlit as st
from streamlit_autorefresh import st_autorefresh
from datetime import date
from typing import List, Optional, Sequence, Tuple
import logging

from components.analytics.aggregator import TrafficAggregator
from components.analytics.dataset import load_sample_monthly_comparison
from components.analytics.models import HourlyTrafficRecord
from components.analytics.traffic_panels import TrafficPanels

from .map_config import MapOverlayConfig
from .map_renderer import LegendGenerator, MapRenderer
from .overlay_controller import RouteOverlayController
from .route_catalog import ALL_ROUTES

logger = logging.getLogger(__name__)

DEFAULT_COMPARISON_ROUTES = ["bintaro-out", "jakarta-alam-sutera"]


def create_overlay_controller(config: MapOverlayConfig) -> RouteOverlayController:
    """Build a session's controller with an OSRM-backed geometry cache."""
    from components.routing import OSRMClient

    provider = OSRMClient.from_config(config.get_routing_config())
    return RouteOverlayController.from_config(config, provider)


class HeatmapPageInterface:
    """Main interface for the Visual Data page."""

    def __init__(self, records: Sequence[HourlyTrafficRecord]):
        self.aggregator = TrafficAggregator(records)
        self.panels = TrafficPanels()
        self.rerun_requested = False
        self.refresh_scheduled = False

    def render(self) -> None:
        st.title("🗺️ Traffic Heatmap")
        st.markdown("---")

        self._initialize_session_state()
        config: MapOverlayConfig = st.session_state.overlay_config
        controller: RouteOverlayController = st.session_state.overlay_controller

        resolved_routes = controller.consume_redraw()
        if resolved_routes:
            logger.debug(f"Drawing resolved geometry for {', '.join(resolved_routes)}")

        route_name, date_range, time_slot = self._render_filters(controller)

        window_records = self.aggregator.records_for('all', date_range, time_slot)
        controller.set_route_weights(TrafficAggregator.route_weights(window_records))
        controller.select_route(route_name)

        map_col, stats_col = st.columns([3, 2])

        with map_col:
            self._render_map(config, controller)

        with stats_col:
            self._render_statistics(controller, route_name, window_records, date_range, time_slot)

        st.markdown("---")
        self._render_comparison(controller)

    def _initialize_session_state(self) -> None:
        """Create the per-session config and overlay controller once."""
        if 'overlay_config' not in st.session_state:
            st.session_state.overlay_config = MapOverlayConfig()

        if 'overlay_controller' not in st.session_state:
            st.session_state.overlay_controller = create_overlay_controller(st.session_state.overlay_config)

        if 'heatmap_route' not in st.session_state:
            st.session_state.heatmap_route = ALL_ROUTES

        if 'heatmap_last_click' not in st.session_state:
            st.session_state.heatmap_last_click = None

        # Route picked on the map during the previous run
        if st.session_state.get('heatmap_pending_route'):
            st.session_state.heatmap_route = st.session_state.pop('heatmap_pending_route')

    def _render_filters(self, controller: RouteOverlayController) -> Tuple[str, Optional[Tuple[date, date]], Optional[str]]:
        catalog = controller.catalog
        col1, col2, col3 = st.columns([2, 2, 1])

        with col1:
            route_name = st.selectbox(
                "Route",
                options=[option.name for option in catalog.options],
                format_func=catalog.display_name,
                key="heatmap_route"
            )

        date_range = None
        bounds = self.aggregator.date_bounds()
        with col2:
            if bounds:
                selected = st.date_input(
                    "Date range",
                    value=bounds,
                    min_value=bounds[0],
                    max_value=bounds[1],
                    key="heatmap_dates"
                )
                # date_input returns a partial tuple while the user is picking
                if isinstance(selected, (list, tuple)) and len(selected) == 2:
                    date_range = (selected[0], selected[1])

        with col3:
            time_slot = st.selectbox(
                "Time slot",
                options=['all'] + self.aggregator.time_slots(),
                format_func=lambda slot: "All slots" if slot == 'all' else slot,
                key="heatmap_time_slot"
            )

        return route_name, date_range, time_slot

    def _render_map(self, config: MapOverlayConfig, controller: RouteOverlayController) -> None:
        styling = config.get_styling()
        renderer = MapRenderer(config.get_map_settings(), styling.get('fallback_dash_array', "8, 6"))
        legend = LegendGenerator()

        try:
            overlays = controller.build_overlays()
            center = controller.map_center()
            map_obj = renderer.create_base_map(center.as_tuple(), controller.map_zoom())
            renderer.add_route_overlays(map_obj, overlays)
            legend_html = legend.create_legend(
                controller.symbology.color_mapper,
                labels=config.get_heatmap_config().get('labels')
            )
            legend.add_legend_to_map(map_obj, legend_html)

            clicked = renderer.render_to_streamlit(map_obj)
        except Exception as e:
            logger.error(f"Failed to render route heatmap: {e}", exc_info=True)
            st.error(f"❌ Could not render map: {e}")
            return

        pending = [overlay.display_name for overlay in overlays if not overlay.resolved]
        info_col, button_col = st.columns([4, 1])
        with info_col:
            if pending:
                st.caption(f"⏳ Loading road geometry for {len(pending)} route(s); dashed lines are approximate")
        with button_col:
            if st.button("🔄 Refresh map", key="heatmap_refresh"):
                self.rerun_requested = True

        self._schedule_geometry_refresh(config, controller)

        self._handle_map_click(controller, clicked)

    def _schedule_geometry_refresh(self, config: MapOverlayConfig, controller: RouteOverlayController) -> None:
        """Re-run the page on a timer until every fetched route geometry is drawn."""
        if not controller.geometry_outstanding():
            return
        st_autorefresh(interval=config.get_refresh_interval_ms(), key="heatmap_geometry_refresh")
        self.refresh_scheduled = True

    def _handle_map_click(self, controller: RouteOverlayController,
                          clicked: Optional[Tuple[float, float]]) -> None:
        """Select the clicked route and recentre on it."""
        if clicked is None or clicked == st.session_state.heatmap_last_click:
            return
        st.session_state.heatmap_last_click = clicked

        route_id = controller.handle_click(*clicked)
        if route_id and route_id != st.session_state.heatmap_route:
            st.session_state.heatmap_pending_route = route_id
            self.rerun_requested = True

    def _render_statistics(self, controller: RouteOverlayController, route_name: str,
                           window_records: List[HourlyTrafficRecord],
                           date_range: Optional[Tuple[date, date]], time_slot: Optional[str]) -> None:
        st.subheader("🚦 Vehicle Count")

        route_records = self.aggregator.records_for(route_name, date_range, time_slot)
        shares = TrafficAggregator.vehicle_shares(route_records)
        self.panels.render_vehicle_cards(shares)
        self.panels.render_vehicle_mix(shares)

        total, percentage = TrafficAggregator.route_share(route_name, window_records)
        self.panels.render_route_share(controller.catalog.display_name(route_name), total, percentage)

    def _render_comparison(self, controller: RouteOverlayController) -> None:
        st.subheader("📊 Monthly Comparison")
        catalog = controller.catalog

        bounds = self.aggregator.date_bounds()
        spans_months = bool(bounds) and (bounds[0].year, bounds[0].month) != (bounds[1].year, bounds[1].month)

        if spans_months:
            available = catalog.route_names()
        else:
            st.caption("Loaded data covers a single month; showing reference monthly volumes")
            available = list(DEFAULT_COMPARISON_ROUTES)

        route_ids = st.multiselect(
            "Routes to compare",
            options=available,
            default=[name for name in DEFAULT_COMPARISON_ROUTES if name in available],
            format_func=catalog.display_name,
            key="comparison_routes"
        )

        if spans_months:
            year = st.selectbox(
                "Year",
                options=list(range(bounds[1].year, bounds[0].year - 1, -1)),
                key="comparison_year"
            )
            monthly = self.aggregator.monthly_totals(route_ids, year)
        else:
            monthly = load_sample_monthly_comparison()

        self.panels.render_monthly_comparison(monthly, route_ids, catalog.display_name)


def render_heatmap_page(records: Sequence[HourlyTrafficRecord]) -> None:
    """Render the Visual Data page for the given hourly records."""
    page = HeatmapPageInterface(records)
    try:
        page.render()
    except Exception as e:
        logger.error(f"Visual Data page failed: {e}", exc_info=True)
        st.error(f"❌ Error rendering Visual Data page: {e}")
        return

    if page.rerun_requested:
        st.rerun()
