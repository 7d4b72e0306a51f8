"""CLI application using Typer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

app = typer.Typer(
    name="vorma",
    help="Video-based orthotic recommendation through gait analysis",
    no_args_is_help=True,
)
console = Console()

# Sub-applications
config_app = typer.Typer(help="Configuration management")

app.add_typer(config_app, name="config")

DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


# ============================================================================
# Config commands
# ============================================================================


@config_app.command("show")
def config_show():
    """Show current configuration."""
    from vorma.core.config import get_settings

    settings = get_settings()
    data = settings.to_dict()

    console.print("[bold]Current Configuration[/bold]\n")

    for section, values in data.items():
        console.print(f"[cyan]{section}:[/cyan]")
        for key, value in values.items():
            console.print(f"  {key}: {value}")
        console.print()


@config_app.command("init")
def config_init(
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file path")] = DEFAULT_CONFIG_PATH,
):
    """Initialize configuration file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Abort()

    yaml_content = """# VORMA Configuration

services:
  # Or set VORMA_EXTRACTOR_URL / VORMA_PREDICTOR_URL
  extractor_url: https://vorma-backend-extractor.onrender.com
  predictor_url: https://vorma-backend-predictor.onrender.com
  # Request timeout in seconds; null waits indefinitely
  timeout: null

pacing:
  # Minimum time the upload step stays on screen
  min_display_seconds: 5.0

heatmap:
  width: 300
  height: 450
  dpi: 100
"""

    path.write_text(yaml_content)
    console.print(f"[green]Created config at {path}[/green]")


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Config key (e.g., pacing.min_display_seconds)")],
    value: Annotated[str, typer.Argument(help="New value")],
    path: Annotated[Path, typer.Option("--path", "-p", help="Config file path")] = DEFAULT_CONFIG_PATH,
):
    """Set a configuration value."""
    import yaml

    if not path.exists():
        console.print("[red]Config file not found. Run 'vorma config init' first.[/red]")
        raise typer.Exit(1)

    from vorma.core.config import Settings

    # Only keys that Settings understands
    parts = key.split(".")
    known = Settings().to_dict()
    for part in parts:
        if not isinstance(known, dict) or part not in known:
            console.print(f"[red]Unknown config key: {key}[/red]")
            raise typer.Exit(1)
        known = known[part]
    if isinstance(known, dict):
        console.print(f"[red]{key} is a section; set one of: {', '.join(known)}[/red]")
        raise typer.Exit(1)

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    current = data
    for part in parts[:-1]:
        current = current.setdefault(part, {})

    # Convert value type
    if value.lower() == "true":
        value = True
    elif value.lower() == "false":
        value = False
    elif value.lower() == "null":
        value = None
    elif value.isdigit():
        value = int(value)
    else:
        try:
            value = float(value)
        except ValueError:
            pass

    current[parts[-1]] = value

    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False)

    console.print(f"[green]Set {key} = {value}[/green]")


# ============================================================================
# Analysis commands
# ============================================================================


@app.command("analyze")
def analyze(
    video: Annotated[Path, typer.Argument(help="Gait video file", exists=True, dir_okay=False)],
    heatmap: Annotated[
        Optional[Path], typer.Option("--heatmap", "-o", help="Save pressure heatmap PNG")
    ] = None,
    min_display: Annotated[
        Optional[float],
        typer.Option("--min-display", help="Minimum seconds to show the upload step"),
    ] = None,
):
    """Upload a gait video and show the orthotic prescription."""
    from vorma.analysis import (
        AnalysisError,
        AnalysisOrchestrator,
        AnalysisState,
        VideoUpload,
        format_file_size,
        validate_video,
    )
    from vorma.report import render_snapshot
    from vorma.visualization import save_heatmap

    try:
        upload = validate_video(VideoUpload.from_path(video))
    except AnalysisError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]{upload.filename}[/bold] ({format_file_size(upload.size)})")

    def show_progress(snapshot) -> None:
        if snapshot.state.is_busy:
            console.print(render_snapshot(snapshot))

    async def run():
        async with AnalysisOrchestrator(min_display_seconds=min_display) as orchestrator:
            orchestrator.store.subscribe(show_progress)
            await orchestrator.submit(upload)
            return orchestrator.snapshot

    snapshot = asyncio.run(run())
    console.print(render_snapshot(snapshot))

    if snapshot.state is AnalysisState.ERROR:
        raise typer.Exit(1)

    if heatmap and snapshot.result is not None:
        save_heatmap(snapshot.result.predicted_loads, heatmap)
        console.print(f"\n[green]Heatmap saved to: {heatmap}[/green]")


@app.command("heatmap")
def heatmap_command(
    forefoot: Annotated[float, typer.Option("--forefoot", help="Forefoot load (0-1)")],
    midfoot: Annotated[float, typer.Option("--midfoot", help="Midfoot load (0-1)")],
    rearfoot: Annotated[float, typer.Option("--rearfoot", help="Rearfoot load (0-1)")],
    output: Annotated[Path, typer.Option("--output", "-o", help="Output PNG path")] = Path(
        "heatmap.png"
    ),
    width: Annotated[Optional[int], typer.Option("--width", help="Canvas width (px)")] = None,
    height: Annotated[Optional[int], typer.Option("--height", help="Canvas height (px)")] = None,
):
    """Render a pressure heatmap from given zone loads."""
    from vorma.analysis import PredictedLoads
    from vorma.visualization import save_heatmap

    loads = PredictedLoads(forefoot=forefoot, midfoot=midfoot, rearfoot=rearfoot)
    path = save_heatmap(loads, output, width=width, height=height)
    console.print(f"[green]Heatmap saved to: {path}[/green]")


@app.command("legend")
def legend():
    """Show the pressure color legend."""
    from vorma.report import legend_text
    from vorma.visualization import legend_entries

    console.print(legend_text())
    for label, color in legend_entries():
        console.print(f"  {label}: {color}")


# ============================================================================
# Main entry point
# ============================================================================


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """Video-based orthotic recommendation through gait analysis."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
