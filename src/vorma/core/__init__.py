"""Core infrastructure modules."""

from .config import (
    HeatmapConfig,
    PacingConfig,
    ServicesConfig,
    Settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "HeatmapConfig",
    "PacingConfig",
    "ServicesConfig",
    "Settings",
    "get_settings",
    "reload_settings",
]
