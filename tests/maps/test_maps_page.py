"""
Tests for the Visual Data page wiring.
"""

import pytest
from unittest.mock import patch

from components.maps.geometry_cache import RouteGeometryCache
from components.maps.map_config import MapOverlayConfig
from components.maps.maps_page import HeatmapPageInterface, create_overlay_controller
from components.maps.overlay_controller import RouteOverlayController
from components.routing import OSRMClient


class SessionState(dict):
    """Dict with attribute access, like st.session_state."""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value


class TestCreateOverlayController:

    def test_controller_uses_osrm_provider(self, config_path):
        controller = create_overlay_controller(MapOverlayConfig(str(config_path)))
        try:
            assert isinstance(controller.cache._provider, OSRMClient)
            assert controller.hit_tester.threshold == 0.002
        finally:
            controller.close()


class TestHeatmapMapClicks:
    """Map clicks select a route on the next run."""

    @pytest.fixture(autouse=True)
    def _page(self, sample_records, routing_provider, manual_executor):
        self.page = HeatmapPageInterface(sample_records)
        self.controller = RouteOverlayController(
            RouteGeometryCache(routing_provider, executor=manual_executor),
            route_weights=self.page.aggregator.route_weights(sample_records)
        )
        self.state = SessionState(heatmap_route="all-routes", heatmap_last_click=None)

    def test_click_on_route_requests_rerun(self):
        with patch('components.maps.maps_page.st') as mock_st:
            mock_st.session_state = self.state
            self.page._handle_map_click(self.controller, (-6.28951, 106.726855))

        assert self.state['heatmap_pending_route'] == "bintaro-in"
        assert self.page.rerun_requested is True

    def test_repeated_click_ignored(self):
        self.state['heatmap_last_click'] = (-6.28951, 106.726855)

        with patch('components.maps.maps_page.st') as mock_st:
            mock_st.session_state = self.state
            self.page._handle_map_click(self.controller, (-6.28951, 106.726855))

        assert 'heatmap_pending_route' not in self.state
        assert self.page.rerun_requested is False

    def test_click_off_route(self):
        with patch('components.maps.maps_page.st') as mock_st:
            mock_st.session_state = self.state
            self.page._handle_map_click(self.controller, (-6.0, 106.0))

        assert 'heatmap_pending_route' not in self.state
        assert self.state['heatmap_last_click'] == (-6.0, 106.0)
        assert self.page.rerun_requested is False

    def test_pending_route_applied_before_widgets(self, config_path):
        self.state.update(
            overlay_config=MapOverlayConfig(str(config_path)),
            overlay_controller=self.controller,
            heatmap_pending_route="bintaro-in"
        )

        with patch('components.maps.maps_page.st') as mock_st:
            mock_st.session_state = self.state
            self.page._initialize_session_state()

        assert self.state['heatmap_route'] == "bintaro-in"
        assert 'heatmap_pending_route' not in self.state


class TestGeometryRefresh:
    """The page re-runs on a timer until fetched geometry is drawn."""

    @pytest.fixture(autouse=True)
    def _page(self, sample_records, routing_provider, manual_executor, config_path):
        self.executor = manual_executor
        self.config = MapOverlayConfig(str(config_path))
        self.page = HeatmapPageInterface(sample_records)
        self.controller = RouteOverlayController(
            RouteGeometryCache(routing_provider, executor=manual_executor),
            route_weights=self.page.aggregator.route_weights(sample_records)
        )

    def _schedule(self):
        with patch('components.maps.maps_page.st_autorefresh') as mock_refresh:
            self.page._schedule_geometry_refresh(self.config, self.controller)
        return mock_refresh

    def test_pending_fetches_schedule_refresh(self):
        self.controller.build_overlays()

        mock_refresh = self._schedule()

        mock_refresh.assert_called_once_with(interval=1500, key="heatmap_geometry_refresh")
        assert self.page.refresh_scheduled is True

    def test_pending_redraw_schedules_refresh(self):
        self.controller.build_overlays()
        self.executor.run_all()
        assert self.controller.redraw_pending is True

        mock_refresh = self._schedule()

        mock_refresh.assert_called_once()
        assert self.page.refresh_scheduled is True

    def test_refresh_stops_once_everything_is_drawn(self):
        self.controller.build_overlays()
        self.executor.run_all()
        assert len(self.controller.consume_redraw()) == 12
        assert all(overlay.resolved for overlay in self.controller.build_overlays())

        mock_refresh = self._schedule()

        mock_refresh.assert_not_called()
        assert self.page.refresh_scheduled is False

    def test_failed_fetches_do_not_keep_refreshing(self, failing_provider, manual_executor):
        controller = RouteOverlayController(RouteGeometryCache(failing_provider, executor=manual_executor))
        controller.build_overlays()
        manual_executor.run_all()

        with patch('components.maps.maps_page.st_autorefresh') as mock_refresh:
            self.page._schedule_geometry_refresh(self.config, controller)

        mock_refresh.assert_not_called()
