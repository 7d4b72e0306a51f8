"""Data model for gait analysis results and pipeline state."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Iterator, Mapping


class AnalysisState(Enum):
    """Pipeline state. Exactly one is active at a time."""

    IDLE = "idle"
    UPLOADING = "uploading"
    EXTRACTING = "extracting"
    PREDICTING = "predicting"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_busy(self) -> bool:
        """Whether a pipeline run is in flight."""
        return self in (
            AnalysisState.UPLOADING,
            AnalysisState.EXTRACTING,
            AnalysisState.PREDICTING,
        )


@dataclass(frozen=True)
class GaitFeatures:
    """Typed view over the feature payload of the extraction service.

    Angles are in degrees, step height in meters, cadence in steps/min
    and stance ratio in [0, 1].
    """

    mean_ankle_angle: float
    ankle_angle_range: float
    ankle_angle_std: float
    mean_knee_angle: float
    knee_angle_range: float
    knee_angle_std: float
    mean_step_height: float
    cadence: float
    stance_ratio: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GaitFeatures:
        """Create from a service payload, ignoring unknown keys."""
        return cls(**{f.name: float(data[f.name]) for f in fields(cls)})

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class PredictedLoads:
    """Pressure fractions per foot zone, each expected in [0, 1]."""

    forefoot: float
    midfoot: float
    rearfoot: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PredictedLoads:
        return cls(
            forefoot=float(data["forefoot"]),
            midfoot=float(data["midfoot"]),
            rearfoot=float(data["rearfoot"]),
        )

    def items(self) -> Iterator[tuple[str, float]]:
        """Yield (zone, value) from toe to heel."""
        yield "forefoot", self.forefoot
        yield "midfoot", self.midfoot
        yield "rearfoot", self.rearfoot

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class OrthoticPrescription:
    """Orthotic manufacturing offsets and thicknesses in millimeters."""

    rearfoot_medial_post_mm: float
    rearfoot_lateral_post_mm: float
    forefoot_lateral_wedge_mm: float
    forefoot_medial_wedge_mm: float
    arch_support_mm: float
    heel_cushion_mm: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OrthoticPrescription:
        return cls(**{f.name: float(data[f.name]) for f in fields(cls)})

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AnalysisResult:
    """Merged output of a successful extraction and prediction.

    ``gait_features`` is the extraction payload exactly as received; it is
    also the body sent to the prediction service.
    """

    gait_features: Mapping[str, Any]
    predicted_loads: PredictedLoads
    orthotic_prescription: OrthoticPrescription
    video_filename: str
    num_frames: int

    @property
    def features(self) -> GaitFeatures:
        """Typed view of ``gait_features``."""
        return GaitFeatures.from_dict(self.gait_features)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Observable pipeline state read by the view layer."""

    state: AnalysisState = AnalysisState.IDLE
    loading_message: str = ""
    result: AnalysisResult | None = None
    error_message: str | None = None
    filename: str | None = None
