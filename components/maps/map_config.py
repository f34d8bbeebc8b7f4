"""
Configuration management for the route overlay map.

Settings are read from a JSON file and merged over built-in defaults so a
partial file only needs to name the values it changes.
"""

import copy
import json
import os
from typing import Dict, Any, Optional, Tuple
from pathlib import Path
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_CONFIG_PATH = "map_overlay_config.json"


class MapOverlayConfig:
    """Manages heatmap, styling, hit-testing and routing settings."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("MAP_OVERLAY_CONFIG", DEFAULT_CONFIG_PATH)
        self.default_config = self._get_default_config()
        self.config = self._load_config()
        self._apply_environment_overrides()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default overlay configuration."""
        return {
            "heatmap": {
                "thresholds": [2850, 3990, 5700],
                "colors": ["#00FC33", "#F2FE06", "#F90501"],
                "labels": ["Light", "Medium", "Heavy"]
            },
            "styling": {
                "base_width": 4.0,
                "width_scale": 1000.0,
                "max_width": 12.0,
                "opacity": 0.8,
                "fallback_dash_array": "8, 6"
            },
            "hit_testing": {
                "threshold_degrees": 0.002
            },
            "routing": {
                "base_url": None,
                "profile": "driving",
                "timeout_sec": 10,
                "max_workers": 4,
                "refresh_interval_ms": 1500
            },
            "map_settings": {
                "default_center": [-6.295, 106.71],
                "default_zoom": 13,
                "tiles": "OpenStreetMap",
                "height": 400
            },
            "analytics": {
                "default_route_weight": 3500
            }
        }

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or use defaults."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config = json.load(f)
                logger.info(f"Loaded map overlay configuration from {self.config_path}")
                return self._merge_configs(self.default_config, config)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")
                return copy.deepcopy(self.default_config)
        else:
            logger.debug(f"Config file {self.config_path} not found, using defaults")
            return copy.deepcopy(self.default_config)

    def _merge_configs(self, default: Dict, user: Dict) -> Dict:
        """Recursively merge user config with defaults."""
        merged = copy.deepcopy(default)

        for key, value in user.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _apply_environment_overrides(self) -> None:
        base_url = os.getenv("OSRM_BASE_URL")
        if base_url:
            self.config["routing"]["base_url"] = base_url
            logger.debug("Routing base URL taken from OSRM_BASE_URL")

    def save_config(self) -> None:
        """Save current configuration to file."""
        try:
            Path(self.config_path).parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=2)
            logger.info(f"Saved map overlay configuration to {self.config_path}")
        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")

    def get_heatmap_config(self) -> Dict[str, Any]:
        return self.config["heatmap"]

    def get_styling(self) -> Dict[str, Any]:
        return self.config["styling"]

    def get_hit_threshold(self) -> float:
        return float(self.config["hit_testing"]["threshold_degrees"])

    def get_routing_config(self) -> Dict[str, Any]:
        return self.config["routing"]

    def get_refresh_interval_ms(self) -> int:
        return int(self.config["routing"].get("refresh_interval_ms", 1500))

    def get_map_settings(self) -> Dict[str, Any]:
        return self.config["map_settings"]

    def get_default_center(self) -> Tuple[float, float]:
        lat, lon = self.config["map_settings"]["default_center"]
        return (float(lat), float(lon))

    def get_default_route_weight(self) -> float:
        return float(self.config["analytics"]["default_route_weight"])

    def update_heatmap_config(self, updates: Dict[str, Any]) -> None:
        """Update heatmap thresholds or colors."""
        self.config["heatmap"].update(updates)
        logger.info("Updated heatmap configuration")

    def reset_to_defaults(self) -> None:
        """Reset configuration to defaults."""
        self.config = copy.deepcopy(self.default_config)
        logger.info("Reset configuration to defaults")
