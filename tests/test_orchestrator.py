"""Tests for the analysis orchestrator."""

from __future__ import annotations

import asyncio
import gc
import json

import httpx
import pytest

from vorma.analysis.errors import PipelineBusyError
from vorma.analysis.models import AnalysisSnapshot, AnalysisState
from vorma.analysis.upload import VideoUpload

ANALYZE = "/api/analyze"
PREDICT = "/api/predict"


def record_states(orchestrator) -> list[AnalysisState]:
    states: list[AnalysisState] = []
    orchestrator.store.subscribe(lambda snap: states.append(snap.state))
    return states


class TestSuccessfulAnalysis:
    """Tests for the happy path."""

    def test_state_sequence(self, fake_services, services_config, video_upload):
        """Test states advance strictly forward to completed."""

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                states = record_states(orchestrator)
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot, states

        snapshot, states = asyncio.run(scenario())

        assert states == [
            AnalysisState.UPLOADING,
            AnalysisState.EXTRACTING,
            AnalysisState.PREDICTING,
            AnalysisState.COMPLETED,
        ]
        assert snapshot.state is AnalysisState.COMPLETED
        assert snapshot.loading_message == ""
        assert snapshot.error_message is None

    def test_result_merges_both_responses(
        self, fake_services, services_config, video_upload, gait_features
    ):
        """Test the result carries features, loads, prescription and metadata."""

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot.result

        result = asyncio.run(scenario())

        assert result.gait_features == gait_features
        assert result.video_filename == "a.mp4"
        assert result.num_frames == 120
        assert result.predicted_loads.forefoot == 0.8
        assert result.orthotic_prescription.heel_cushion_mm == 4.75
        assert result.features.cadence == 108.5

    def test_features_forwarded_unchanged(
        self, fake_services, services_config, video_upload, gait_features
    ):
        """Test the prediction body equals the extracted features exactly."""

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)

        asyncio.run(scenario())

        predict_request = fake_services.requests[-1]
        assert predict_request.url.path == PREDICT
        assert json.loads(predict_request.content) == gait_features

    def test_one_request_per_stage(self, fake_services, services_config, video_upload):
        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)

        asyncio.run(scenario())

        assert fake_services.count(ANALYZE) == 1
        assert fake_services.count(PREDICT) == 1


class TestFailedAnalysis:
    """Tests for failures of either stage."""

    def test_extraction_http_error(self, fake_services, services_config, video_upload):
        """Test extraction failure never enters predicting."""
        fake_services.extract_status = 500

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                states = record_states(orchestrator)
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot, states

        snapshot, states = asyncio.run(scenario())

        assert AnalysisState.PREDICTING not in states
        assert states[-1] is AnalysisState.ERROR
        assert snapshot.error_message == "Feature extraction failed: Internal Server Error"
        assert snapshot.result is None
        assert fake_services.count(PREDICT) == 0

    def test_prediction_http_error(self, fake_services, services_config, video_upload):
        """Test prediction failure happens after entering predicting."""
        fake_services.predict_status = 503

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                states = record_states(orchestrator)
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot, states

        snapshot, states = asyncio.run(scenario())

        assert states == [
            AnalysisState.UPLOADING,
            AnalysisState.EXTRACTING,
            AnalysisState.PREDICTING,
            AnalysisState.ERROR,
        ]
        assert snapshot.error_message == "Prediction failed: Service Unavailable"
        assert snapshot.result is None

    def test_transport_error(self, fake_services, services_config, video_upload):
        fake_services.extract_error = httpx.ConnectError("Connection refused")

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot

        snapshot = asyncio.run(scenario())

        assert snapshot.state is AnalysisState.ERROR
        assert snapshot.error_message == "Connection refused"

    def test_malformed_response_is_a_failure(self, fake_services, services_config, video_upload):
        fake_services.extraction_payload = {"unexpected": True}

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot

        snapshot = asyncio.run(scenario())

        assert snapshot.state is AnalysisState.ERROR
        assert snapshot.error_message

    def test_resubmit_after_error_restarts(self, fake_services, services_config, video_upload):
        """Test resubmission reruns both stages from scratch."""
        fake_services.predict_status = 500

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)
                assert orchestrator.snapshot.state is AnalysisState.ERROR

                fake_services.predict_status = 200
                await orchestrator.submit(video_upload)
                return orchestrator.snapshot

        snapshot = asyncio.run(scenario())

        assert snapshot.state is AnalysisState.COMPLETED
        assert snapshot.error_message is None
        assert fake_services.count(ANALYZE) == 2
        assert fake_services.count(PREDICT) == 2


class TestSubmissionGuard:
    """Tests for rejecting overlapping submissions."""

    @pytest.mark.parametrize(
        "busy_state",
        [AnalysisState.UPLOADING, AnalysisState.EXTRACTING, AnalysisState.PREDICTING],
    )
    def test_submit_while_busy_rejected(
        self, fake_services, services_config, video_upload, busy_state
    ):
        fake_services.extract_delay = 0.1
        fake_services.predict_delay = 0.2
        min_display = 0.05

        async def scenario():
            async with fake_services.orchestrator(services_config, min_display) as orchestrator:
                reached = asyncio.Event()

                def on_change(snap):
                    if snap.state is busy_state:
                        reached.set()

                orchestrator.store.subscribe(on_change)
                first = asyncio.ensure_future(orchestrator.submit(video_upload))
                await reached.wait()

                with pytest.raises(PipelineBusyError):
                    await orchestrator.submit(VideoUpload("b.mp4", b"data", "video/mp4"))

                assert orchestrator.snapshot.filename == "a.mp4"
                await first
                return orchestrator.snapshot

        snapshot = asyncio.run(scenario())

        assert snapshot.state is AnalysisState.COMPLETED
        assert fake_services.count(ANALYZE) == 1

    def test_submit_after_completion_rejected(
        self, fake_services, services_config, video_upload
    ):
        """Test a completed result must be reset before a new upload."""

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)
                first = orchestrator.snapshot

                with pytest.raises(PipelineBusyError):
                    await orchestrator.submit(VideoUpload("b.mp4", b"data", "video/mp4"))
                return first, orchestrator.snapshot

        first, after = asyncio.run(scenario())

        assert after is first
        assert after.state is AnalysisState.COMPLETED
        assert fake_services.count(ANALYZE) == 1

    def test_submit_after_reset_replaces_result(
        self, fake_services, services_config, video_upload
    ):
        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                await orchestrator.submit(video_upload)
                first = orchestrator.snapshot.result

                orchestrator.reset()
                assert orchestrator.snapshot == AnalysisSnapshot()

                fake_services.extraction_payload = {
                    **fake_services.extraction_payload,
                    "video_filename": "b.mp4",
                    "num_frames": 90,
                }
                await orchestrator.submit(VideoUpload("b.mp4", b"data", "video/mp4"))
                return first, orchestrator.snapshot.result

        first, second = asyncio.run(scenario())

        assert first.num_frames == 120
        assert second.num_frames == 90
        assert second.video_filename == "b.mp4"


class TestSubscriberErrors:
    """Tests for exceptions raised by store subscribers."""

    def test_subscriber_error_propagates(self, fake_services, services_config, video_upload):
        """Test a broken subscriber is not reported as a service failure."""

        def broken_view(snap):
            if snap.state is AnalysisState.EXTRACTING:
                raise RuntimeError("view bug")

        async def scenario():
            async with fake_services.orchestrator(services_config) as orchestrator:
                orchestrator.store.subscribe(broken_view)
                with pytest.raises(RuntimeError, match="view bug"):
                    await orchestrator.submit(video_upload)
                return orchestrator.snapshot

        snapshot = asyncio.run(scenario())

        assert snapshot.state is AnalysisState.EXTRACTING
        assert snapshot.error_message is None
        assert fake_services.count(PREDICT) == 0


class TestPacing:
    """Tests for the minimum upload display duration."""

    def test_fast_extraction_held_until_pacing_elapses(
        self, fake_services, services_config, video_upload
    ):
        """Test a quick response does not skip the upload step."""
        min_display = 0.3

        async def scenario():
            loop = asyncio.get_running_loop()
            async with fake_services.orchestrator(services_config, min_display) as orchestrator:
                times: dict[AnalysisState, float] = {}
                orchestrator.store.subscribe(lambda snap: times.setdefault(snap.state, loop.time()))

                task = asyncio.ensure_future(orchestrator.submit(video_upload))
                await asyncio.sleep(0.1)
                early_state = orchestrator.snapshot.state
                await task
                return early_state, times

        early_state, times = asyncio.run(scenario())

        assert fake_services.count(ANALYZE) == 1
        assert early_state is AnalysisState.UPLOADING
        elapsed = times[AnalysisState.EXTRACTING] - times[AnalysisState.UPLOADING]
        assert elapsed >= min_display - 0.05
        # Stored response is used right away
        assert times[AnalysisState.PREDICTING] - times[AnalysisState.EXTRACTING] < 0.1

    def test_slow_extraction_waits_in_extracting(
        self, fake_services, services_config, video_upload
    ):
        """Test total latency is the max of pacing and network, not the sum."""
        min_display = 0.1
        fake_services.extract_delay = 0.4

        async def scenario():
            loop = asyncio.get_running_loop()
            async with fake_services.orchestrator(services_config, min_display) as orchestrator:
                times: dict[AnalysisState, float] = {}
                orchestrator.store.subscribe(lambda snap: times.setdefault(snap.state, loop.time()))
                await orchestrator.submit(video_upload)
                return times

        times = asyncio.run(scenario())

        start = times[AnalysisState.UPLOADING]
        assert times[AnalysisState.EXTRACTING] - start < 0.35
        assert times[AnalysisState.PREDICTING] - start >= 0.35
        assert times[AnalysisState.PREDICTING] - start < 0.4 + min_display

    def test_cancel_cancels_extraction(self, fake_services, services_config, video_upload):
        fake_services.extract_delay = 10.0

        async def scenario():
            async with fake_services.orchestrator(services_config, 0.01) as orchestrator:
                task = asyncio.ensure_future(orchestrator.submit(video_upload))
                await asyncio.sleep(0.1)
                state = orchestrator.snapshot.state
                task.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await task
                return state

        assert asyncio.run(scenario()) is AnalysisState.EXTRACTING

    def test_cancel_after_extraction_failed(self, fake_services, services_config, video_upload):
        """Test an early extraction failure is not left unretrieved."""
        fake_services.extract_error = httpx.ConnectError("Connection refused")
        contexts: list[dict] = []

        async def scenario():
            asyncio.get_running_loop().set_exception_handler(
                lambda loop, context: contexts.append(context)
            )
            async with fake_services.orchestrator(services_config, 10.0) as orchestrator:
                task = asyncio.ensure_future(orchestrator.submit(video_upload))
                await asyncio.sleep(0.1)
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                state = orchestrator.snapshot.state
                del task
                gc.collect()
                return state

        state = asyncio.run(scenario())

        assert state is AnalysisState.UPLOADING
        assert contexts == []
