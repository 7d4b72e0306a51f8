#!/usr/bin/env python3
"""
Quick Start Examples
====================

Simple examples to get started with vorma.

Usage:
    python examples/quick_start.py [path/to/video.mp4]
"""

import sys

# ============================================================================
# 1. Pressure Heatmap
# ============================================================================

def example_heatmap():
    """Render a heatmap from known zone loads."""
    from vorma.analysis import PredictedLoads
    from vorma.visualization import heat_color, legend_entries, save_heatmap

    loads = PredictedLoads(forefoot=0.8, midfoot=0.3, rearfoot=0.5)

    for zone, value in loads.items():
        print(f"{zone}: {value * 100:.1f}% -> {heat_color(value)}")

    for label, color in legend_entries():
        print(f"Legend {label}: {color}")

    path = save_heatmap(loads, "heatmap.png")
    print(f"Saved {path}")


# ============================================================================
# 2. State Machine
# ============================================================================

def example_state_machine():
    """Drive the reducer by hand and watch the snapshots."""
    from vorma.analysis import (
        AnalysisStore,
        ExtractionStarted,
        ExtractionSucceeded,
        Failed,
        Submitted,
    )

    store = AnalysisStore()
    store.subscribe(lambda snap: print(f"{snap.state.value:<11} {snap.loading_message}"))

    store.dispatch(Submitted("walk.mp4"))
    store.dispatch(ExtractionStarted())
    store.dispatch(ExtractionSucceeded())
    store.dispatch(Failed("Prediction failed: Bad Gateway"))

    print(f"Error: {store.snapshot.error_message}")


# ============================================================================
# 3. Full Analysis (needs the remote services)
# ============================================================================

def example_analysis(video_path: str):
    """Upload a video and print the prescription."""
    import asyncio

    from vorma.analysis import AnalysisOrchestrator, AnalysisState, VideoUpload
    from vorma.report import prescription_rows

    async def run():
        async with AnalysisOrchestrator() as orchestrator:
            orchestrator.store.subscribe(lambda snap: print(snap.state.value))
            await orchestrator.submit(VideoUpload.from_path(video_path))
            return orchestrator.snapshot

    snapshot = asyncio.run(run())

    if snapshot.state is AnalysisState.ERROR:
        print(f"Failed: {snapshot.error_message}")
        return

    for component, height in prescription_rows(snapshot.result.orthotic_prescription):
        print(f"{component:<24} {height} mm")


# ============================================================================
# Run Examples
# ============================================================================

if __name__ == "__main__":
    print("=" * 50)
    print("1. Pressure Heatmap")
    print("=" * 50)
    example_heatmap()

    print("\n" + "=" * 50)
    print("2. State Machine")
    print("=" * 50)
    example_state_machine()

    if len(sys.argv) > 1:
        print("\n" + "=" * 50)
        print("3. Full Analysis")
        print("=" * 50)
        example_analysis(sys.argv[1])
