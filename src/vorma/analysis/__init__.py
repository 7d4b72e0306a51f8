"""Gait analysis pipeline: state machine, service client and orchestrator."""

from .client import (
    AnalysisServiceClient,
    ExtractionResponse,
    PredictionResponse,
    describe_failure,
)
from .errors import AnalysisError, InvalidVideoError, PipelineBusyError, ServiceError
from .models import (
    AnalysisResult,
    AnalysisSnapshot,
    AnalysisState,
    GaitFeatures,
    OrthoticPrescription,
    PredictedLoads,
)
from .orchestrator import AnalysisOrchestrator
from .state import (
    AnalysisStore,
    ExtractionStarted,
    ExtractionSucceeded,
    Failed,
    PredictionSucceeded,
    Reset,
    Submitted,
    can_submit,
    reduce,
)
from .upload import VideoUpload, format_file_size, validate_video

__all__ = [
    # Models
    "AnalysisResult",
    "AnalysisSnapshot",
    "AnalysisState",
    "GaitFeatures",
    "OrthoticPrescription",
    "PredictedLoads",
    # State
    "AnalysisStore",
    "ExtractionStarted",
    "ExtractionSucceeded",
    "Failed",
    "PredictionSucceeded",
    "Reset",
    "Submitted",
    "can_submit",
    "reduce",
    # Services
    "AnalysisOrchestrator",
    "AnalysisServiceClient",
    "ExtractionResponse",
    "PredictionResponse",
    "describe_failure",
    # Upload
    "VideoUpload",
    "format_file_size",
    "validate_video",
    # Errors
    "AnalysisError",
    "InvalidVideoError",
    "PipelineBusyError",
    "ServiceError",
]
