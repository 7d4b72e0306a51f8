"""Result presentation for the analysis pipeline."""

from .summary import (
    PRESCRIPTION_NOTE,
    STAGE_DETAILS,
    STATUS_DESCRIPTIONS,
    key_metrics,
    legend_text,
    loads_table,
    metrics_table,
    prescription_rows,
    prescription_table,
    progress_percent,
    render_snapshot,
)

__all__ = [
    "PRESCRIPTION_NOTE",
    "STAGE_DETAILS",
    "STATUS_DESCRIPTIONS",
    "key_metrics",
    "legend_text",
    "loads_table",
    "metrics_table",
    "prescription_rows",
    "prescription_table",
    "progress_percent",
    "render_snapshot",
]
