"""
Tests for the heatmap color gradient and route line styling.
"""

import pytest

from components.maps.symbology import (
    HeatmapColorMapper,
    RGBColor,
    StyleCalculator,
    SymbologyEngine,
    interpolate_color
)


class TestRGBColor:
    """Test cases for RGBColor."""

    def test_hex_round_trip(self):
        color = RGBColor.from_hex('#F2FE06')
        assert color.hex == '#F2FE06'

    def test_to_rgb255(self):
        assert RGBColor.from_hex('#00FC33').to_rgb255() == (0, 252, 51)

    def test_to_css(self):
        assert RGBColor(1.0, 0.0, 0.0).to_css(0.5) == "rgba(255, 0, 0, 0.5)"

    def test_interpolate_clamps_ratio(self):
        start = RGBColor(0.0, 0.0, 0.0)
        end = RGBColor(1.0, 1.0, 1.0)
        assert interpolate_color(start, end, -1.0) == start
        assert interpolate_color(start, end, 2.0) == end


class TestHeatmapColorMapper:
    """Test cases for HeatmapColorMapper."""

    def setup_method(self):
        """Set up test fixtures."""
        self.mapper = HeatmapColorMapper()
        self.green = RGBColor.from_hex('#00FC33')
        self.yellow = RGBColor.from_hex('#F2FE06')
        self.red = RGBColor.from_hex('#F90501')

    def test_anchor_colors(self):
        """Anchors map exactly to their colors."""
        assert self.mapper.hex_for(2850) == '#00FC33'
        assert self.mapper.hex_for(3990) == '#F2FE06'
        assert self.mapper.hex_for(5700) == '#F90501'

    def test_below_first_threshold_is_green(self):
        assert self.mapper.color_for(0) == self.green
        assert self.mapper.color_for(-50) == self.green
        assert self.mapper.color_for(1000) == self.green

    def test_above_last_threshold_is_red(self):
        assert self.mapper.color_for(5701) == self.red
        assert self.mapper.color_for(1_000_000) == self.red

    def test_midpoint_between_green_and_yellow(self):
        """3420 is halfway between 2850 and 3990."""
        color = self.mapper.color_for(3420)
        expected = interpolate_color(self.green, self.yellow, 0.5)

        for actual_channel, expected_channel in zip(color, expected):
            assert actual_channel == pytest.approx(expected_channel)

    def test_continuity_at_thresholds(self):
        """Color does not jump at T1 or T2."""
        for threshold in (2850, 3990):
            below = self.mapper.color_for(threshold - 1e-6)
            above = self.mapper.color_for(threshold + 1e-6)
            for b, a in zip(below, above):
                assert b == pytest.approx(a, abs=1e-6)

    def test_between_yellow_and_red(self):
        color = self.mapper.color_for(4845)
        expected = interpolate_color(self.yellow, self.red, 0.5)
        assert color.hex == expected.hex

    def test_rejects_non_increasing_thresholds(self):
        with pytest.raises(ValueError):
            HeatmapColorMapper(thresholds=(3990, 2850, 5700))

        with pytest.raises(ValueError):
            HeatmapColorMapper(thresholds=(2850, 2850, 5700))

    def test_rejects_wrong_anchor_count(self):
        with pytest.raises(ValueError):
            HeatmapColorMapper(thresholds=(1, 2), colors=('#000000', '#FFFFFF'))

    def test_from_config(self):
        mapper = HeatmapColorMapper.from_config({
            'thresholds': [100, 200, 300],
            'colors': ['#000000', '#808080', '#FFFFFF']
        })
        assert mapper.thresholds == (100.0, 200.0, 300.0)
        assert mapper.hex_for(50) == '#000000'
        assert mapper.hex_for(400) == '#FFFFFF'

    def test_legend_stops(self):
        assert self.mapper.legend_stops() == [
            (2850.0, '#00FC33'),
            (3990.0, '#F2FE06'),
            (5700.0, '#F90501'),
        ]

    def test_intensity_label(self):
        assert self.mapper.intensity_label(2850) == 'Light'
        assert self.mapper.intensity_label(3500) == 'Medium'
        assert self.mapper.intensity_label(3990) == 'Medium'
        assert self.mapper.intensity_label(4000) == 'Heavy'


class TestStyleCalculator:
    """Test cases for StyleCalculator."""

    def setup_method(self):
        self.calculator = StyleCalculator()

    def test_width_grows_with_volume(self):
        assert self.calculator.line_width(0) == 4.0
        assert self.calculator.line_width(3500) == pytest.approx(7.5)

    def test_width_capped(self):
        assert self.calculator.line_width(50_000) == 12.0

    def test_negative_volume_uses_base_width(self):
        assert self.calculator.line_width(-100) == 4.0

    def test_rejects_non_positive_scale(self):
        with pytest.raises(ValueError):
            StyleCalculator(width_scale=0)


class TestSymbologyEngine:
    """Test cases for SymbologyEngine."""

    def test_style_for(self):
        engine = SymbologyEngine()
        style = engine.style_for(5700)

        assert style == {'color': '#F90501', 'weight': pytest.approx(9.7), 'opacity': 0.8}

    def test_from_config(self, config_path):
        from components.maps.map_config import MapOverlayConfig

        config = MapOverlayConfig(str(config_path))
        config.config['styling']['opacity'] = 0.5
        engine = SymbologyEngine.from_config(config)

        assert engine.style_calculator.opacity == 0.5
        assert engine.color_mapper.thresholds == (2850.0, 3990.0, 5700.0)
