"""VORMA: Video-based Orthotic Recommendation through ML & Gait Analysis.

Client toolkit that uploads a gait video to the remote feature-extraction
and prediction services, tracks the analysis pipeline, and renders the
predicted foot pressure as a heatmap alongside an orthotic prescription.
"""

__version__ = "0.1.0"

from vorma.analysis import (
    AnalysisOrchestrator,
    AnalysisResult,
    AnalysisSnapshot,
    AnalysisState,
    AnalysisStore,
    PredictedLoads,
    VideoUpload,
)
from vorma.core import Settings, get_settings
from vorma.visualization import heat_color, render_heatmap

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisResult",
    "AnalysisSnapshot",
    "AnalysisState",
    "AnalysisStore",
    "PredictedLoads",
    "Settings",
    "VideoUpload",
    "__version__",
    "get_settings",
    "heat_color",
    "render_heatmap",
]
