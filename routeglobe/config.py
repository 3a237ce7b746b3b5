"""
Configuration loader for Route Globe Monitor.
Loads and validates configuration from YAML file.
"""

import os
from typing import Any, Dict, Optional

import yaml


class Config:
    """Load and provide access to configuration from YAML file."""

    def __init__(self, config_file: str = "config.yaml"):
        self.path = config_file
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self):
        """Load YAML configuration file."""
        if not os.path.exists(self.path):
            raise FileNotFoundError(f"Config file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            self.data = yaml.safe_load(f) or {}

    # Backend properties
    @property
    def backend(self) -> Dict[str, Any]:
        """Get backend store configuration."""
        return self.data.get("backend", {})

    @property
    def project_id(self) -> str:
        """Get Firestore project ID."""
        return self.backend.get("project_id", "")

    @property
    def database_id(self) -> str:
        """Get Firestore database ID."""
        return self.backend.get("database", "(default)")

    @property
    def collection(self) -> str:
        """Get name of the route events collection."""
        return self.backend.get("collection", "route_planned_events")

    @property
    def api_key(self) -> str:
        """Get backend API key (empty string if not configured)."""
        return self.backend.get("api_key", "")

    @property
    def request_timeout(self) -> float:
        """Get backend request timeout in seconds."""
        return self.backend.get("timeout", 15)

    @property
    def base_url(self) -> str:
        """Get Firestore REST base URL."""
        return self.backend.get(
            "base_url", "https://firestore.googleapis.com/v1"
        )

    # Timing properties
    @property
    def refresh_interval(self) -> float:
        """Get refresh cycle period in seconds."""
        return self.data.get("timing", {}).get("refresh_interval", 60)

    @property
    def blink_interval(self) -> float:
        """Get blink toggle period in seconds."""
        return self.data.get("timing", {}).get("blink_interval", 1.5)

    @property
    def settle_duration(self) -> float:
        """Get time from blink start until visuals settle, in seconds."""
        return self.data.get("timing", {}).get("settle_duration", 65)

    @property
    def focus_transition_ms(self) -> int:
        """Get camera transition duration in milliseconds."""
        timing_cfg = self.data.get("timing", {})
        return timing_cfg.get("focus_transition_ms", 1500)

    # Fetch properties
    @property
    def batch_size(self) -> int:
        """Get number of latest records pulled per refresh."""
        return self.data.get("fetch", {}).get("batch_size", 10)

    # View properties
    @property
    def view(self) -> Dict[str, Any]:
        """Get globe view configuration."""
        return self.data.get("view", {})

    @property
    def default_lat(self) -> float:
        """Get fallback focus latitude."""
        return self.view.get("default_lat", 20)

    @property
    def default_lng(self) -> float:
        """Get fallback focus longitude."""
        return self.view.get("default_lng", 100)

    @property
    def altitude(self) -> float:
        """Get camera altitude in globe radii."""
        return self.view.get("altitude", 0.8)

    @property
    def globe_height(self) -> int:
        """Get render surface height in pixels."""
        return self.view.get("height", 500)

    @property
    def arc_altitude(self) -> float:
        """Get peak arc height in globe radii."""
        return self.view.get("arc_altitude", 0.2)

    @property
    def route_color(self) -> str:
        """Get colour of visible arcs and points."""
        return self.view.get("color", "#F86A28")

    @property
    def dimmed_color(self) -> str:
        """Get colour of arcs and points in the hidden blink phase."""
        return self.view.get("dimmed_color", "rgba(248,106,40,0.3)")

    @property
    def rotate_period(self) -> float:
        """Get seconds per full idle camera orbit (0 disables rotation)."""
        return self.view.get("rotate_period", 600)

    # Display properties
    @property
    def count_label(self) -> str:
        """Get label shown in front of the total route count."""
        display_cfg = self.data.get("display", {})
        default_label = "Total routes planned: "
        return display_cfg.get("count_label", default_label)

    @property
    def error_text(self) -> str:
        """Get text shown on the count surface when a refresh fails."""
        display_cfg = self.data.get("display", {})
        return display_cfg.get("error_text", "Error loading route data")

    # Server properties
    @property
    def dev_host(self) -> str:
        """Get development server host."""
        return self.data.get("server", {}).get("dev_host", "127.0.0.1")

    @property
    def dev_port(self) -> int:
        """Get development server port."""
        return self.data.get("server", {}).get("dev_port", 3000)


_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration, loading it on first use."""
    global _config

    if _config is None:
        _config = Config(os.getenv("ROUTEGLOBE_CONFIG", "config.yaml"))
    return _config
