"""HTTP client for the remote feature-extraction and prediction services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from vorma.core.config import ServicesConfig, get_settings

from .errors import ServiceError
from .models import OrthoticPrescription, PredictedLoads
from .upload import VideoUpload

logger = logging.getLogger(__name__)

ANALYZE_PATH = "/api/analyze"
PREDICT_PATH = "/api/predict"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


@dataclass
class ExtractionResponse:
    """Body of a successful ``/api/analyze`` call."""

    gait_features: dict[str, Any]
    video_filename: str
    num_frames: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> ExtractionResponse:
        return cls(
            gait_features=data["gait_features"],
            video_filename=data["video_filename"],
            num_frames=int(data["num_frames"]),
        )


@dataclass
class PredictionResponse:
    """Body of a successful ``/api/predict`` call."""

    predicted_loads: PredictedLoads
    orthotic_prescription: OrthoticPrescription

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> PredictionResponse:
        return cls(
            predicted_loads=PredictedLoads.from_dict(data["predicted_loads"]),
            orthotic_prescription=OrthoticPrescription.from_dict(data["orthotic_prescription"]),
        )


def describe_failure(exc: BaseException) -> str:
    """Human-readable message for a failed pipeline stage."""
    return str(exc) or UNKNOWN_ERROR_MESSAGE


class AnalysisServiceClient:
    """
    Async client for the two analysis services.

    Usage:
        async with AnalysisServiceClient() as client:
            extraction = await client.extract(video)
            prediction = await client.predict(extraction.gait_features)
    """

    def __init__(
        self,
        config: ServicesConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if config is None:
            config = get_settings().services
        self.config = config
        self._client = httpx.AsyncClient(timeout=config.timeout, transport=transport)

    async def extract(self, video: VideoUpload) -> ExtractionResponse:
        """Upload a video and return its gait features."""
        url = f"{self.config.extractor_url}{ANALYZE_PATH}"
        logger.debug("POST %s (%s, %d bytes)", url, video.filename, video.size)

        response = await self._client.post(
            url,
            files={"file": (video.filename, video.content, video.content_type)},
        )
        self._check(response, "Feature extraction failed")
        return ExtractionResponse.from_json(response.json())

    async def predict(self, gait_features: Mapping[str, Any]) -> PredictionResponse:
        """Send gait features unchanged and return loads and prescription."""
        url = f"{self.config.predictor_url}{PREDICT_PATH}"
        logger.debug("POST %s", url)

        response = await self._client.post(url, json=gait_features)
        self._check(response, "Prediction failed")
        return PredictionResponse.from_json(response.json())

    @staticmethod
    def _check(response: httpx.Response, prefix: str) -> None:
        if response.is_success:
            return
        raise ServiceError(
            f"{prefix}: {response.reason_phrase}",
            status_code=response.status_code,
        )

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AnalysisServiceClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
