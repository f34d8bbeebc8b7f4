"""
Symbology and styling module for the route heatmap.

This module owns the traffic-volume color gradient and line styling. Every
color shown on the dashboard (map strokes, legend gradient, swatches) is
produced by HeatmapColorMapper so thresholds cannot drift between callers.
"""

import matplotlib.colors as mcolors
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple, Any
import logging

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = (2850.0, 3990.0, 5700.0)
DEFAULT_COLORS = ('#00FC33', '#F2FE06', '#F90501')  # green, yellow, red


class RGBColor(NamedTuple):
    """RGB color with channels in the 0-1 range."""
    red: float
    green: float
    blue: float

    @classmethod
    def from_hex(cls, hex_color: str) -> 'RGBColor':
        r, g, b = mcolors.to_rgb(hex_color)
        return cls(r, g, b)

    @property
    def hex(self) -> str:
        return mcolors.to_hex((self.red, self.green, self.blue)).upper()

    def to_rgb255(self) -> Tuple[int, int, int]:
        return tuple(int(round(channel * 255)) for channel in self)

    def to_css(self, alpha: float = 1.0) -> str:
        r, g, b = self.to_rgb255()
        return f"rgba({r}, {g}, {b}, {alpha})"


def interpolate_color(start: RGBColor, end: RGBColor, ratio: float) -> RGBColor:
    """Linear per-channel interpolation; ratio is clamped to [0, 1]."""
    ratio = max(0.0, min(1.0, ratio))
    return RGBColor(*(s + (e - s) * ratio for s, e in zip(start, end)))


class HeatmapColorMapper:
    """
    Maps a traffic volume to a color on a green -> yellow -> red gradient.

    Three anchors (T1, green), (T2, yellow), (T3, red) define the gradient:
    volumes at or below T1 are green, above T3 red, and in between the color
    is interpolated linearly between the two surrounding anchors.
    """

    def __init__(self, thresholds: Sequence[float] = DEFAULT_THRESHOLDS,
                 colors: Sequence[str] = DEFAULT_COLORS):
        if len(thresholds) != 3 or len(colors) != 3:
            raise ValueError("Heatmap requires exactly three thresholds and three colors")

        t1, t2, t3 = (float(t) for t in thresholds)
        if not (t1 < t2 < t3):
            raise ValueError(f"Heatmap thresholds must be strictly increasing, got {list(thresholds)}")

        self.thresholds = (t1, t2, t3)
        self.anchor_colors = tuple(RGBColor.from_hex(c) for c in colors)

    @classmethod
    def from_config(cls, heatmap_config: Dict[str, Any]) -> 'HeatmapColorMapper':
        return cls(
            thresholds=heatmap_config.get('thresholds', DEFAULT_THRESHOLDS),
            colors=heatmap_config.get('colors', DEFAULT_COLORS)
        )

    def color_for(self, weight: float) -> RGBColor:
        """
        Get heatmap color for a traffic volume.

        Args:
            weight: Vehicles per hour

        Returns:
            Interpolated RGBColor
        """
        t1, t2, t3 = self.thresholds
        green, yellow, red = self.anchor_colors

        if weight <= t1:
            return green
        if weight <= t2:
            return interpolate_color(green, yellow, (weight - t1) / (t2 - t1))
        if weight <= t3:
            return interpolate_color(yellow, red, (weight - t2) / (t3 - t2))
        return red

    def hex_for(self, weight: float) -> str:
        return self.color_for(weight).hex

    def legend_stops(self) -> List[Tuple[float, str]]:
        """Threshold/color pairs used to draw the legend gradient."""
        return [(t, self.hex_for(t)) for t in self.thresholds]

    def intensity_label(self, weight: float) -> str:
        t1, t2, _ = self.thresholds
        if weight <= t1:
            return 'Light'
        if weight <= t2:
            return 'Medium'
        return 'Heavy'


class StyleCalculator:
    """Calculates line width and opacity for route overlays."""

    def __init__(self, base_width: float = 4.0, width_scale: float = 1000.0,
                 max_width: float = 12.0, opacity: float = 0.8):
        if width_scale <= 0:
            raise ValueError("width_scale must be positive")
        self.base_width = base_width
        self.width_scale = width_scale
        self.max_width = max_width
        self.opacity = opacity

    def line_width(self, weight: float) -> float:
        """Line width grows with volume, capped at max_width."""
        width = self.base_width + max(weight, 0.0) / self.width_scale
        return min(width, self.max_width)


class SymbologyEngine:
    """Main interface for route overlay styling."""

    def __init__(self, color_mapper: Optional[HeatmapColorMapper] = None,
                 style_calculator: Optional[StyleCalculator] = None):
        self.color_mapper = color_mapper or HeatmapColorMapper()
        self.style_calculator = style_calculator or StyleCalculator()

    @classmethod
    def from_config(cls, config) -> 'SymbologyEngine':
        """Build from a MapOverlayConfig."""
        styling = config.get_styling()
        return cls(
            HeatmapColorMapper.from_config(config.get_heatmap_config()),
            StyleCalculator(
                base_width=styling.get('base_width', 4.0),
                width_scale=styling.get('width_scale', 1000.0),
                max_width=styling.get('max_width', 12.0),
                opacity=styling.get('opacity', 0.8)
            )
        )

    def style_for(self, weight: float) -> Dict[str, Any]:
        """Folium-ready style dictionary for a route with the given volume."""
        return {
            'color': self.color_mapper.hex_for(weight),
            'weight': self.style_calculator.line_width(weight),
            'opacity': self.style_calculator.opacity,
        }
