"""
Analysis State Machine
======================

Pipeline transitions expressed as a pure reducer from (snapshot, event) to
a new snapshot, plus a small store that holds the current snapshot and
notifies subscribers.

    store = AnalysisStore()
    unsubscribe = store.subscribe(lambda snap: print(snap.state))
    store.dispatch(Submitted("walk.mp4"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Union

from .models import AnalysisResult, AnalysisSnapshot, AnalysisState

logger = logging.getLogger(__name__)

UPLOADING_MESSAGE = "Uploading video..."
EXTRACTING_MESSAGE = "Analyzing gait patterns..."
PREDICTING_MESSAGE = "Generating orthotic prescription..."


@dataclass(frozen=True)
class Submitted:
    """A video was handed to the pipeline."""

    filename: str


@dataclass(frozen=True)
class ExtractionStarted:
    """The upload pacing interval elapsed."""


@dataclass(frozen=True)
class ExtractionSucceeded:
    """The extraction service returned gait features."""


@dataclass(frozen=True)
class PredictionSucceeded:
    """The prediction service returned loads and a prescription."""

    result: AnalysisResult


@dataclass(frozen=True)
class Failed:
    """Either remote call failed."""

    message: str


@dataclass(frozen=True)
class Reset:
    """Return to idle after a finished run."""


Event = Union[Submitted, ExtractionStarted, ExtractionSucceeded, PredictionSucceeded, Failed, Reset]


ACCEPTING_STATES = frozenset({AnalysisState.IDLE, AnalysisState.ERROR})


def can_submit(snapshot: AnalysisSnapshot) -> bool:
    """Whether a new video may be submitted in this snapshot.

    A completed run has to be reset to idle first.
    """
    return snapshot.state in ACCEPTING_STATES


def reduce(snapshot: AnalysisSnapshot, event: Event) -> AnalysisSnapshot:
    """
    Apply an event to a snapshot.

    Transitions only move forward. An event that is not valid for the
    current state returns the snapshot unchanged.

    Args:
        snapshot: Current snapshot
        event: Pipeline event

    Returns:
        The next snapshot
    """
    state = snapshot.state

    if isinstance(event, Submitted):
        if not can_submit(snapshot):
            return snapshot
        return AnalysisSnapshot(
            state=AnalysisState.UPLOADING,
            loading_message=UPLOADING_MESSAGE,
            filename=event.filename,
        )

    if isinstance(event, ExtractionStarted):
        if state is not AnalysisState.UPLOADING:
            return snapshot
        return replace(
            snapshot,
            state=AnalysisState.EXTRACTING,
            loading_message=EXTRACTING_MESSAGE,
        )

    if isinstance(event, ExtractionSucceeded):
        if state is not AnalysisState.EXTRACTING:
            return snapshot
        return replace(
            snapshot,
            state=AnalysisState.PREDICTING,
            loading_message=PREDICTING_MESSAGE,
        )

    if isinstance(event, PredictionSucceeded):
        if state is not AnalysisState.PREDICTING:
            return snapshot
        return replace(
            snapshot,
            state=AnalysisState.COMPLETED,
            loading_message="",
            result=event.result,
        )

    if isinstance(event, Failed):
        if not state.is_busy:
            return snapshot
        return replace(
            snapshot,
            state=AnalysisState.ERROR,
            loading_message="",
            result=None,
            error_message=event.message,
        )

    if isinstance(event, Reset):
        if state.is_busy:
            return snapshot
        return AnalysisSnapshot()

    raise TypeError(f"Unknown event: {event!r}")


Subscriber = Callable[[AnalysisSnapshot], None]


class AnalysisStore:
    """Holds the current snapshot and notifies subscribers on change."""

    def __init__(self, initial: AnalysisSnapshot | None = None) -> None:
        self._snapshot = initial or AnalysisSnapshot()
        self._subscribers: list[Subscriber] = []

    @property
    def snapshot(self) -> AnalysisSnapshot:
        """Current snapshot."""
        return self._snapshot

    @property
    def state(self) -> AnalysisState:
        return self._snapshot.state

    def dispatch(self, event: Event) -> AnalysisSnapshot:
        """Apply an event and notify subscribers if the snapshot changed."""
        previous = self._snapshot
        self._snapshot = reduce(previous, event)

        if self._snapshot == previous:
            logger.debug("Ignored %s in state %s", type(event).__name__, previous.state.value)
            return self._snapshot

        logger.info("Analysis state: %s -> %s", previous.state.value, self._snapshot.state.value)
        for callback in list(self._subscribers):
            callback(self._snapshot)
        return self._snapshot

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that removes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe
