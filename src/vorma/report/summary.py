"""
Analysis Result Summary
=======================

Text and rich renderables for each pipeline state: status lines, progress,
the orthotic prescription table and the key gait metrics.
"""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from vorma.analysis.models import (
    AnalysisResult,
    AnalysisSnapshot,
    AnalysisState,
    GaitFeatures,
    OrthoticPrescription,
)
from vorma.visualization.heatmap import ZONES, format_load, heat_rgba

STATUS_DESCRIPTIONS = {
    AnalysisState.IDLE: "Awaiting video upload",
    AnalysisState.UPLOADING: "Uploading video...",
    AnalysisState.EXTRACTING: "Extracting gait features...",
    AnalysisState.PREDICTING: "Generating prescription...",
    AnalysisState.COMPLETED: "Analysis complete",
    AnalysisState.ERROR: "Analysis failed",
}

STAGE_DETAILS = {
    AnalysisState.UPLOADING: "Transferring video to server",
    AnalysisState.EXTRACTING: "Analyzing biomechanical data",
    AnalysisState.PREDICTING: "Computing orthotic specifications",
}

PROGRESS_PERCENT = {
    AnalysisState.UPLOADING: 25,
    AnalysisState.EXTRACTING: 50,
    AnalysisState.PREDICTING: 75,
    AnalysisState.COMPLETED: 100,
}

PRESCRIPTION_COMPONENTS = [
    ("Rearfoot Medial Post", "rearfoot_medial_post_mm"),
    ("Rearfoot Lateral Post", "rearfoot_lateral_post_mm"),
    ("Forefoot Lateral Wedge", "forefoot_lateral_wedge_mm"),
    ("Forefoot Medial Wedge", "forefoot_medial_wedge_mm"),
    ("Arch Support", "arch_support_mm"),
    ("Heel Cushion", "heel_cushion_mm"),
]

PRESCRIPTION_NOTE = (
    "Note: This AI-generated prescription should be reviewed by a qualified "
    "healthcare professional before manufacturing orthotics."
)

IDLE_HINT = (
    "Upload a gait analysis video to receive AI-powered orthotic recommendations "
    "based on biomechanical patterns."
)

ERROR_HINT = "Please try uploading your video again."


def progress_percent(state: AnalysisState) -> int:
    """Progress shown for a state: 25/50/75 while running, 100 when done."""
    return PROGRESS_PERCENT.get(state, 0)


def prescription_rows(prescription: OrthoticPrescription) -> list[tuple[str, str]]:
    """(component, height in mm) rows in manufacturing order."""
    return [
        (label, f"{getattr(prescription, attr):.2f}")
        for label, attr in PRESCRIPTION_COMPONENTS
    ]


def key_metrics(features: GaitFeatures) -> list[tuple[str, str]]:
    """Headline gait metrics with units."""
    return [
        ("Cadence", f"{features.cadence:.1f} steps/min"),
        ("Stance Ratio", f"{features.stance_ratio * 100:.1f}%"),
        ("Mean Step Height", f"{features.mean_step_height:.3f} m"),
        ("Ankle Angle Range", f"{features.ankle_angle_range:.1f}°"),
    ]


def _heat_style(value: float) -> str:
    """Rich color style for a pressure fraction."""
    r, g, b, _ = heat_rgba(value)
    return f"rgb({round(r * 255)},{round(g * 255)},{round(b * 255)})"


def legend_text() -> Text:
    """One-line Low / Med / High pressure legend."""
    text = Text("Pressure: ", style="bold")
    for label, value in zip(["Low", "Med", "High"], [0.0, 0.5, 1.0]):
        text.append("■ ", style=_heat_style(value))
        text.append(f"{label}  ")
    return text


def frames_text(result: AnalysisResult) -> Text:
    return Text(f"{result.num_frames} frames analyzed", style="dim")


def loads_table(result: AnalysisResult) -> Table:
    """Predicted load per zone, colored like the heatmap."""
    table = Table(title="Pressure Distribution")
    table.add_column("Zone", style="cyan")
    table.add_column("Load", justify="right")

    values = dict(result.predicted_loads.items())
    for zone in ZONES:
        value = values[zone.name]
        table.add_row(zone.label, Text(format_load(value), style=_heat_style(value)))
    return table


def prescription_table(prescription: OrthoticPrescription) -> Table:
    table = Table(title="Orthotic Prescription", caption=PRESCRIPTION_NOTE)
    table.add_column("Component", style="cyan")
    table.add_column("Height (mm)", justify="right", style="bold")

    for component, height in prescription_rows(prescription):
        table.add_row(component, height)
    return table


def metrics_table(features: GaitFeatures) -> Table:
    table = Table(title="Key Gait Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    for name, value in key_metrics(features):
        table.add_row(name, value)
    return table


def render_snapshot(snapshot: AnalysisSnapshot) -> RenderableType:
    """Rich renderable for the current pipeline state."""
    state = snapshot.state
    title = f"Analysis Result: {STATUS_DESCRIPTIONS[state]}"

    if state is AnalysisState.IDLE:
        return Panel(Text(IDLE_HINT, style="dim"), title=title)

    if state.is_busy:
        body = Group(
            Text(snapshot.loading_message or "Processing...", style="bold"),
            Text(STAGE_DETAILS[state], style="dim"),
            ProgressBar(total=100, completed=progress_percent(state), width=40),
        )
        return Panel(body, title=title)

    if state is AnalysisState.ERROR:
        body = Group(
            Text("Analysis Failed", style="bold red"),
            Text(snapshot.error_message or ""),
            Text(ERROR_HINT, style="dim"),
        )
        return Panel(body, title=title, border_style="red")

    result = snapshot.result
    if result is None:
        return Panel(Text("No result available", style="dim"), title=title)

    return Group(
        loads_table(result),
        frames_text(result),
        legend_text(),
        prescription_table(result.orthotic_prescription),
        metrics_table(result.features),
    )
