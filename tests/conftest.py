"""Pytest fixtures for vorma tests."""

from __future__ import annotations

import asyncio
import tempfile
from pathlib import Path

import httpx
import pytest

from vorma.analysis.client import AnalysisServiceClient
from vorma.analysis.models import AnalysisResult, OrthoticPrescription, PredictedLoads
from vorma.analysis.orchestrator import AnalysisOrchestrator
from vorma.analysis.upload import VideoUpload
from vorma.core.config import ServicesConfig, Settings

EXTRACTOR_URL = "http://extractor.test"
PREDICTOR_URL = "http://predictor.test"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def services_config() -> ServicesConfig:
    """Service endpoints that only a mock transport answers."""
    return ServicesConfig(extractor_url=EXTRACTOR_URL, predictor_url=PREDICTOR_URL)


@pytest.fixture
def test_settings(services_config: ServicesConfig) -> Settings:
    return Settings(services=services_config)


@pytest.fixture
def gait_features() -> dict[str, float]:
    """Sample extraction service feature payload."""
    return {
        "mean_ankle_angle": 92.4,
        "ankle_angle_range": 27.8,
        "ankle_angle_std": 6.1,
        "mean_knee_angle": 158.2,
        "knee_angle_range": 54.3,
        "knee_angle_std": 12.9,
        "mean_step_height": 0.0712,
        "cadence": 108.5,
        "stance_ratio": 0.62,
    }


@pytest.fixture
def extraction_payload(gait_features) -> dict:
    return {
        "gait_features": gait_features,
        "video_filename": "a.mp4",
        "num_frames": 120,
    }


@pytest.fixture
def prediction_payload() -> dict:
    return {
        "predicted_loads": {"forefoot": 0.8, "midfoot": 0.3, "rearfoot": 0.5},
        "orthotic_prescription": {
            "rearfoot_medial_post_mm": 3.25,
            "rearfoot_lateral_post_mm": 1.0,
            "forefoot_lateral_wedge_mm": 0.5,
            "forefoot_medial_wedge_mm": 2.125,
            "arch_support_mm": 12.0,
            "heel_cushion_mm": 4.75,
        },
    }


@pytest.fixture
def sample_result(gait_features, prediction_payload) -> AnalysisResult:
    """Create a sample analysis result."""
    return AnalysisResult(
        gait_features=gait_features,
        predicted_loads=PredictedLoads.from_dict(prediction_payload["predicted_loads"]),
        orthotic_prescription=OrthoticPrescription.from_dict(
            prediction_payload["orthotic_prescription"]
        ),
        video_filename="a.mp4",
        num_frames=120,
    )


@pytest.fixture
def video_upload() -> VideoUpload:
    """A small fake video payload."""
    return VideoUpload(
        filename="a.mp4",
        content=b"\x00\x00\x00\x18ftypmp42" * 64,
        content_type="video/mp4",
    )


class FakeServices:
    """Mock handler for both services that records requests.

    ``extract_status`` / ``predict_status`` set the response codes;
    ``extract_delay`` / ``predict_delay`` delay the responses in seconds;
    ``extract_error`` raises a transport error instead of responding.
    """

    def __init__(self, extraction_payload: dict, prediction_payload: dict) -> None:
        self.extraction_payload = extraction_payload
        self.prediction_payload = prediction_payload
        self.extract_status = 200
        self.predict_status = 200
        self.extract_delay = 0.0
        self.predict_delay = 0.0
        self.extract_error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def count(self, path: str) -> int:
        return sum(1 for r in self.requests if r.url.path == path)

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.path == "/api/analyze":
            await asyncio.sleep(self.extract_delay)
            if self.extract_error is not None:
                raise self.extract_error
            if self.extract_status != 200:
                return httpx.Response(self.extract_status)
            return httpx.Response(200, json=self.extraction_payload)

        if request.url.path == "/api/predict":
            await asyncio.sleep(self.predict_delay)
            if self.predict_status != 200:
                return httpx.Response(self.predict_status)
            return httpx.Response(200, json=self.prediction_payload)

        return httpx.Response(404)

    def client(self, config: ServicesConfig) -> AnalysisServiceClient:
        return AnalysisServiceClient(config, transport=httpx.MockTransport(self))

    def orchestrator(
        self, config: ServicesConfig, min_display_seconds: float = 0.0
    ) -> AnalysisOrchestrator:
        return AnalysisOrchestrator(
            client=self.client(config),
            min_display_seconds=min_display_seconds,
        )


@pytest.fixture
def fake_services(extraction_payload, prediction_payload) -> FakeServices:
    return FakeServices(extraction_payload, prediction_payload)
