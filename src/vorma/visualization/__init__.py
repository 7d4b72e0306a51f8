"""Visualization of gait analysis results."""

from .heatmap import (
    DEFAULT_STYLE,
    ZONES,
    HeatmapStyle,
    ZoneSpec,
    draw_heatmap,
    foot_outline,
    format_load,
    heat_color,
    heat_hue,
    heat_rgba,
    legend_entries,
    render_heatmap,
    render_heatmap_array,
    render_legend,
    save_heatmap,
    zone_layer,
    zone_path,
)

__all__ = [
    # Colors
    "heat_color",
    "heat_hue",
    "heat_rgba",
    "legend_entries",
    "format_load",
    # Geometry
    "ZONES",
    "ZoneSpec",
    "foot_outline",
    "zone_path",
    "zone_layer",
    # Rendering
    "DEFAULT_STYLE",
    "HeatmapStyle",
    "draw_heatmap",
    "render_heatmap",
    "render_heatmap_array",
    "render_legend",
    "save_heatmap",
]
