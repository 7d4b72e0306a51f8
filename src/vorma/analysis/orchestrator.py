"""
Analysis Orchestrator
=====================

Drives a video through the two remote stages (feature extraction, then
load prediction) and publishes progress through an ``AnalysisStore``.

The extraction request starts as soon as a video is submitted. It runs
concurrently with a pacing timer that keeps the "uploading" step on screen
for a minimum duration; the pipeline only moves on to prediction once both
the timer and the extraction response are done.
"""

from __future__ import annotations

import asyncio
import logging

from vorma.core.config import get_settings

from .client import AnalysisServiceClient, describe_failure
from .errors import PipelineBusyError
from .models import AnalysisResult, AnalysisSnapshot
from .state import (
    AnalysisStore,
    ExtractionStarted,
    ExtractionSucceeded,
    Failed,
    PredictionSucceeded,
    Reset,
    Submitted,
    can_submit,
)
from .upload import VideoUpload

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """
    Run gait analyses one at a time.

    Usage:
        async with AnalysisOrchestrator() as orchestrator:
            orchestrator.store.subscribe(print)
            await orchestrator.submit(VideoUpload.from_path("walk.mp4"))
            snapshot = orchestrator.snapshot
    """

    def __init__(
        self,
        client: AnalysisServiceClient | None = None,
        store: AnalysisStore | None = None,
        min_display_seconds: float | None = None,
    ) -> None:
        if min_display_seconds is None:
            min_display_seconds = get_settings().pacing.min_display_seconds
        self.client = client or AnalysisServiceClient()
        self.store = store or AnalysisStore()
        self.min_display_seconds = min_display_seconds

    @property
    def snapshot(self) -> AnalysisSnapshot:
        """Current pipeline snapshot."""
        return self.store.snapshot

    async def submit(self, video: VideoUpload) -> None:
        """
        Analyze a video.

        Service failures do not raise; they leave the store in the error
        state with a readable message. Exceptions from store subscribers
        propagate.

        Args:
            video: Video payload to upload

        Raises:
            PipelineBusyError: If the pipeline is running or holds a
                completed result that has not been reset
        """
        if not can_submit(self.store.snapshot):
            raise PipelineBusyError(
                f"Cannot submit {video.filename} while analysis is {self.store.state.value}"
            )

        self.store.dispatch(Submitted(video.filename))
        extraction = asyncio.ensure_future(self.client.extract(video))

        try:
            await asyncio.sleep(self.min_display_seconds)
            self.store.dispatch(ExtractionStarted())

            try:
                extracted = await extraction
            except Exception as e:
                self._fail(video, e)
                return
            self.store.dispatch(ExtractionSucceeded())

            try:
                predicted = await self.client.predict(extracted.gait_features)
            except Exception as e:
                self._fail(video, e)
                return
        finally:
            if not extraction.done():
                extraction.cancel()
            elif not extraction.cancelled():
                # Mark a failure as retrieved when submit exits early
                extraction.exception()

        result = AnalysisResult(
            gait_features=extracted.gait_features,
            predicted_loads=predicted.predicted_loads,
            orthotic_prescription=predicted.orthotic_prescription,
            video_filename=extracted.video_filename,
            num_frames=extracted.num_frames,
        )
        self.store.dispatch(PredictionSucceeded(result))

    def reset(self) -> None:
        """Return a finished run to idle so a new video can be submitted."""
        self.store.dispatch(Reset())

    def _fail(self, video: VideoUpload, exc: Exception) -> None:
        message = describe_failure(exc)
        logger.warning("Analysis of %s failed: %s", video.filename, message)
        self.store.dispatch(Failed(message))

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "AnalysisOrchestrator":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
