"""
Tests for the route overlay controller.
"""

import pytest

from components.analytics.aggregator import TrafficAggregator
from components.maps.geometry_cache import RouteGeometryCache
from components.maps.map_config import MapOverlayConfig
from components.maps.overlay_controller import RouteOverlayController
from components.maps.route_catalog import ALL_ROUTES


class TestRouteOverlayController:
    """Test cases for RouteOverlayController."""

    @pytest.fixture(autouse=True)
    def _controller(self, routing_provider, manual_executor, sample_records):
        self.provider = routing_provider
        self.executor = manual_executor
        self.cache = RouteGeometryCache(self.provider, executor=self.executor)
        self.controller = RouteOverlayController(
            self.cache,
            route_weights=TrafficAggregator.route_weights(sample_records)
        )

    def test_defaults_to_all_routes(self):
        assert self.controller.selected_route == ALL_ROUTES
        assert len(self.controller.segments) == 12

    def test_build_overlays_returns_fallbacks_first(self):
        overlays = self.controller.build_overlays()

        assert len(overlays) == 12
        assert all(not overlay.resolved for overlay in overlays)
        assert all(len(overlay.geometry) == 2 for overlay in overlays)
        assert len(self.executor.submitted) == 12

    def test_overlay_styling_uses_route_weight(self):
        overlays = {o.route_id: o for o in self.controller.build_overlays()}

        # jakarta-pamulang averages (6060 + 5370) / 2 = 5715 vehicles/hour
        pamulang = overlays["jakarta-pamulang"]
        assert pamulang.weight == pytest.approx(5715.0)
        assert pamulang.color == '#F90501'
        assert pamulang.intensity == 'Heavy'
        assert pamulang.line_width == pytest.approx(9.715)

        # pagedangan-alam-sutera averages (2490 + 2460) / 2 = 2475
        assert overlays["pagedangan-alam-sutera"].color == '#00FC33'
        assert overlays["pagedangan-alam-sutera"].intensity == 'Light'

    def test_resolution_requests_redraw(self):
        self.controller.build_overlays()
        assert self.controller.consume_redraw() == []

        self.executor.run_all()

        assert self.controller.redraw_pending is True
        redrawn = self.controller.consume_redraw()
        assert len(redrawn) == 12
        assert self.controller.consume_redraw() == []

        overlays = self.controller.build_overlays()
        assert all(overlay.resolved for overlay in overlays)
        assert all(len(overlay.geometry) == 3 for overlay in overlays)
        assert len(self.provider.calls) == 12

    def test_select_route(self):
        self.controller.select_route("bintaro-in")

        overlays = self.controller.build_overlays()
        assert [o.route_id for o in overlays] == ["bintaro-in"]
        assert overlays[0].selected is True
        assert self.controller.map_zoom() == 15

    def test_select_unknown_route(self):
        with pytest.raises(ValueError):
            self.controller.select_route("nowhere")

    def test_handle_click_selects_and_recentres(self):
        # Midpoint of bintaro-in
        route_id = self.controller.handle_click(-6.28951, 106.726855)

        assert route_id == "bintaro-in"
        assert self.controller.selected_route == "bintaro-in"
        center = self.controller.map_center()
        assert center.latitude == pytest.approx(-6.28951)
        assert center.longitude == pytest.approx(106.726855)

    def test_handle_click_miss(self):
        assert self.controller.handle_click(-6.0, 106.0) is None
        assert self.controller.selected_route == ALL_ROUTES

    def test_set_route_weights_rebuilds_segments(self):
        self.controller.set_route_weights({"bintaro-out": 100.0})
        weights = {s.route_id: s.weight for s in self.controller.segments}

        assert weights["bintaro-out"] == 100.0
        assert weights["bintaro-in"] == 3500.0

    def test_close_detaches_cache(self):
        self.controller.build_overlays()
        self.controller.close()
        self.executor.run_all()

        assert self.cache.closed is True
        assert self.controller.consume_redraw() == []

    def test_from_config(self, config_path, routing_provider, manual_executor):
        config = MapOverlayConfig(str(config_path))
        config.config['hit_testing']['threshold_degrees'] = 0.01

        controller = RouteOverlayController.from_config(config, routing_provider, executor=manual_executor)

        assert controller.hit_tester.threshold == 0.01
        assert controller.catalog.default_weight == 3500.0
        controller.build_overlays()
        assert len(manual_executor.submitted) == 12
