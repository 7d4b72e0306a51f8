"""
Foot Pressure Heatmap
=====================

Render forefoot, midfoot and rearfoot pressure fractions onto a stylized
foot silhouette.

Geometry is expressed in canvas pixels with the y axis pointing down, so a
shape at ``0.15 * height`` sits near the toes and ``0.85 * height`` near the
heel. Each zone is painted with a radial gradient masked to the zone shape
and the foot outline. Percentages and zone labels are drawn last, on top of
the masked fills.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from matplotlib.axes import Axes
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure
from matplotlib.patches import BoxStyle, PathPatch, Rectangle
from matplotlib.path import Path as MplPath
from matplotlib.transforms import Affine2D

from vorma.analysis.models import PredictedLoads
from vorma.core.config import get_settings

HUE_MAX = 240.0  # blue at zero load, red at full load


@dataclass
class HeatmapStyle:
    """Heatmap styling. Sizes are in pixels."""

    outline_fill: str = "#1a1f2e"
    outline_color: str = "#22d3ee"
    outline_width: float = 2.0
    value_color: str = "#ffffff"
    value_font_size: float = 14.0
    label_color: str = "#22d3ee"
    label_font_size: float = 12.0
    font_family: str = "monospace"
    inner_alpha: float = 0.9
    outer_alpha: float = 0.3
    inner_radius: float = 0.05  # fraction of width
    outer_radius: float = 0.35  # fraction of width
    label_x: float = 0.85  # fraction of width
    corner_radius: float = 40.0


DEFAULT_STYLE = HeatmapStyle()


@dataclass(frozen=True)
class ZoneSpec:
    """An anatomical zone and where its value is drawn."""

    name: str
    label: str
    anchor_y: float  # fraction of height


ZONES = (
    ZoneSpec("forefoot", "Forefoot", 0.15),
    ZoneSpec("midfoot", "Midfoot", 0.50),
    ZoneSpec("rearfoot", "Rearfoot", 0.85),
)


# ============================================================================
# Color mapping
# ============================================================================


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(max(value, low), high)


def heat_hue(value: float) -> float:
    """Hue in degrees for a pressure fraction: 240 at 0, 0 at 1."""
    return (1.0 - clamp(value)) * HUE_MAX


def heat_color(value: float, alpha: float = 1.0) -> str:
    """CSS ``hsla()`` color for a pressure fraction."""
    return f"hsla({heat_hue(value):g}, 100%, 50%, {alpha:g})"


def heat_rgba(value: float, alpha: float = 1.0) -> tuple[float, float, float, float]:
    """Matplotlib RGBA tuple matching :func:`heat_color`."""
    r, g, b = colorsys.hls_to_rgb(heat_hue(value) / 360.0, 0.5, 1.0)
    return (r, g, b, alpha)


def legend_entries() -> list[tuple[str, str]]:
    """Three-stop legend, independent of any data."""
    return [
        ("Low", heat_color(0.0)),
        ("Med", heat_color(0.5)),
        ("High", heat_color(1.0)),
    ]


def format_load(value: float) -> str:
    """Percentage label for a pressure fraction, e.g. ``"80.0%"``."""
    return f"{value * 100:.1f}%"


# ============================================================================
# Geometry
# ============================================================================


def foot_outline(width: float, height: float) -> MplPath:
    """Closed foot silhouette: heel, lateral edge, toes, medial edge."""
    w, h = width, height
    vertices = [
        # Heel
        (w * 0.3, h * 0.95),
        (w * 0.5, h), (w * 0.7, h * 0.95),
        # Right side
        (w * 0.75, h * 0.75),
        (w * 0.8, h * 0.5), (w * 0.8, h * 0.3),
        # Toes
        (w * 0.8, h * 0.15), (w * 0.7, h * 0.05),
        (w * 0.5, 0.0), (w * 0.3, h * 0.05),
        (w * 0.2, h * 0.15), (w * 0.2, h * 0.3),
        # Left side
        (w * 0.2, h * 0.5), (w * 0.25, h * 0.75),
        (w * 0.3, h * 0.95),
    ]
    codes = (
        [MplPath.MOVETO]
        + [MplPath.CURVE3] * 2
        + [MplPath.LINETO]
        + [MplPath.CURVE3] * 10
        + [MplPath.CLOSEPOLY]
    )
    return MplPath(vertices, codes)


def _ellipse(cx: float, cy: float, rx: float, ry: float) -> MplPath:
    transform = Affine2D().scale(rx, ry).translate(cx, cy)
    return transform.transform_path(MplPath.unit_circle())


def zone_path(
    name: str,
    width: float,
    height: float,
    style: HeatmapStyle = DEFAULT_STYLE,
) -> MplPath:
    """Shape of a zone before clipping to the foot outline."""
    w, h = width, height
    if name == "forefoot":
        return _ellipse(w * 0.5, h * 0.15, w * 0.25, h * 0.12)
    if name == "midfoot":
        x0, y0, bw, bh = w * 0.28, h * 0.38, w * 0.44, h * 0.26
        radius = min(style.corner_radius, bw / 2, bh / 2)
        return BoxStyle("Round", pad=0.0, rounding_size=radius)(x0, y0, bw, bh, 1.0)
    if name == "rearfoot":
        return _ellipse(w * 0.5, h * 0.85, w * 0.2, h * 0.12)
    raise ValueError(f"Unknown zone: {name}")


def _pixel_mask(path: MplPath, width: int, height: int) -> np.ndarray:
    """Boolean (height, width) mask of pixel centers inside a path."""
    xs = np.arange(width) + 0.5
    ys = np.arange(height) + 0.5
    grid_x, grid_y = np.meshgrid(xs, ys)
    points = np.column_stack([grid_x.ravel(), grid_y.ravel()])
    return path.contains_points(points).reshape(height, width)


def zone_layer(
    value: float,
    zone_mask: np.ndarray,
    anchor_y: float,
    style: HeatmapStyle = DEFAULT_STYLE,
) -> np.ndarray:
    """
    RGBA layer for one zone.

    Alpha falls off radially from ``inner_alpha`` at the inner radius to
    ``outer_alpha`` at the outer radius, and is zero outside ``zone_mask``.

    Args:
        value: Pressure fraction of the zone
        zone_mask: Boolean (height, width) mask of paintable pixels
        anchor_y: Gradient center y in pixels
        style: Heatmap style

    Returns:
        Float array of shape (height, width, 4)
    """
    height, width = zone_mask.shape
    cx = width * 0.5
    r0 = width * style.inner_radius
    r1 = width * style.outer_radius

    xs = np.arange(width) + 0.5
    ys = np.arange(height) + 0.5
    grid_x, grid_y = np.meshgrid(xs, ys)
    distance = np.hypot(grid_x - cx, grid_y - anchor_y)
    t = np.clip((distance - r0) / (r1 - r0), 0.0, 1.0)

    r, g, b, _ = heat_rgba(value)
    layer = np.empty((height, width, 4), dtype=float)
    layer[..., 0] = r
    layer[..., 1] = g
    layer[..., 2] = b
    layer[..., 3] = (style.inner_alpha + (style.outer_alpha - style.inner_alpha) * t) * zone_mask
    return layer


# ============================================================================
# Rendering
# ============================================================================


def draw_heatmap(
    ax: Axes | None,
    loads: PredictedLoads,
    width: int,
    height: int,
    dpi: float = 100.0,
    style: HeatmapStyle = DEFAULT_STYLE,
) -> None:
    """
    Draw the heatmap onto existing axes spanning a ``width`` x ``height``
    pixel canvas. Does nothing when ``ax`` is None.
    """
    if ax is None:
        return

    px = 72.0 / dpi  # points per pixel
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()

    outline = foot_outline(width, height)
    ax.add_patch(
        PathPatch(
            outline,
            facecolor=style.outline_fill,
            edgecolor=style.outline_color,
            linewidth=style.outline_width * px,
            zorder=1,
        )
    )

    foot_mask = _pixel_mask(outline, width, height)
    values = dict(loads.items())

    for zone in ZONES:
        value = values[zone.name]
        anchor_y = height * zone.anchor_y
        mask = foot_mask & _pixel_mask(zone_path(zone.name, width, height, style), width, height)

        ax.imshow(
            zone_layer(value, mask, anchor_y, style),
            extent=(0, width, height, 0),
            origin="upper",
            interpolation="nearest",
            aspect="auto",
            zorder=2,
        )
        ax.text(
            width * 0.5,
            anchor_y,
            format_load(value),
            color=style.value_color,
            fontsize=style.value_font_size * px,
            fontweight="bold",
            family=style.font_family,
            ha="center",
            va="center",
            zorder=3,
        )

    for zone in ZONES:
        ax.text(
            width * style.label_x,
            height * zone.anchor_y,
            zone.label,
            color=style.label_color,
            fontsize=style.label_font_size * px,
            family=style.font_family,
            ha="left",
            va="center",
            zorder=3,
        )

    # imshow resets limits
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)


def render_heatmap(
    loads: PredictedLoads,
    width: int | None = None,
    height: int | None = None,
    dpi: int | None = None,
    style: HeatmapStyle | None = None,
) -> Figure:
    """
    Render the heatmap to a new figure of ``width`` x ``height`` pixels.

    Uses an Agg canvas directly, so no pyplot state is created or shared.
    """
    config = get_settings().heatmap
    if width is None:
        width = config.width
    if height is None:
        height = config.height
    if dpi is None:
        dpi = config.dpi
    if min(width, height, dpi) <= 0:
        raise ValueError(f"Heatmap size must be positive, got {width}x{height} at {dpi} dpi")
    style = style or DEFAULT_STYLE

    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    FigureCanvasAgg(fig)
    fig.patch.set_alpha(0.0)

    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    draw_heatmap(ax, loads, width, height, dpi=dpi, style=style)
    return fig


def render_heatmap_array(
    loads: PredictedLoads,
    width: int | None = None,
    height: int | None = None,
    dpi: int | None = None,
    style: HeatmapStyle | None = None,
) -> np.ndarray:
    """Render the heatmap and return its (height, width, 4) uint8 pixels."""
    fig = render_heatmap(loads, width, height, dpi, style)
    fig.canvas.draw()
    return np.asarray(fig.canvas.buffer_rgba()).copy()


def save_heatmap(
    loads: PredictedLoads,
    save_path: str | Path,
    width: int | None = None,
    height: int | None = None,
    dpi: int | None = None,
    style: HeatmapStyle | None = None,
) -> Path:
    """Render the heatmap to a PNG file."""
    fig = render_heatmap(loads, width, height, dpi, style)

    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(save_path, dpi=fig.dpi, transparent=True)
    return save_path


def render_legend(dpi: int = 100, style: HeatmapStyle | None = None) -> Figure:
    """Render the Low / Med / High pressure legend as swatches."""
    style = style or DEFAULT_STYLE
    px = 72.0 / dpi
    width, height = 240, 24

    fig = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
    FigureCanvasAgg(fig)
    fig.patch.set_alpha(0.0)
    ax = fig.add_axes((0.0, 0.0, 1.0, 1.0))
    ax.set_xlim(0, width)
    ax.set_ylim(height, 0)
    ax.set_axis_off()

    ax.text(4, height / 2, "Pressure:", fontsize=style.label_font_size * px,
            fontweight="bold", family=style.font_family, va="center")

    swatch = 12
    for i, (label, value) in enumerate(zip(["Low", "Med", "High"], [0.0, 0.5, 1.0])):
        x = 90 + i * 50
        ax.add_patch(Rectangle((x, (height - swatch) / 2), swatch, swatch,
                               facecolor=heat_rgba(value)))
        ax.text(x + swatch + 4, height / 2, label, fontsize=style.label_font_size * px,
                family=style.font_family, va="center")

    return fig
