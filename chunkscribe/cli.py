"""
chunkscribe.cli - Typer CLI entry point.

Provides the transcribe, segment, export and init subcommands.
"""

from __future__ import annotations

import asyncio
import signal
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.table import Table

from chunkscribe import __version__
from chunkscribe.cancellation import CancellationToken
from chunkscribe.config import (
    CONFIG_FILENAME,
    ChunkscribeConfig,
    create_default_config,
    load_config,
    write_config,
)
from chunkscribe.exceptions import (
    ConfigError,
    DependencyError,
    ExportError,
    InvalidSource,
    TransportError,
)
from chunkscribe.logging import configure_logging
from chunkscribe.models import AudioSegment, PipelineState, TranscriptFragment
from chunkscribe.utils import format_bytes, format_duration, format_span

app = typer.Typer(
    name="chunkscribe",
    help="Segmented streaming transcription client.\n\n"
    "Splits long recordings into fixed-length segments, streams each one to a "
    "transcription endpoint, and reassembles a single time-ordered transcript.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"chunkscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Chunkscribe - segmented streaming transcription client."""
    pass


def _load_config_or_exit(config_file: Path | None, overrides: dict[str, Any]) -> ChunkscribeConfig:
    try:
        return load_config(config_file, overrides)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


async def _run_interruptible(
    audio: Path,
    config: ChunkscribeConfig,
    token: CancellationToken,
    **callbacks: Any,
) -> PipelineState:
    """Run the pipeline with Ctrl-C mapped onto the cancellation token."""
    from chunkscribe.pipeline import transcribe

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        installed = False

    try:
        return await transcribe(audio, config, token=token, **callbacks)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


# Transcription


@app.command("transcribe")
def transcribe_cmd(
    audio: Path = typer.Argument(..., help="Audio file to transcribe"),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help=f"Config file (default: ./{CONFIG_FILENAME} if present)"
    ),
    endpoint: str | None = typer.Option(None, "--endpoint", "-e", help="Transcription endpoint URL"),
    window: float | None = typer.Option(None, "--window", "-w", help="Segment length in seconds"),
    decoder: str | None = typer.Option(
        None, "--decoder", "-d", help="Audio decoder (soundfile, librosa, ffmpeg)"
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the transcript here"),
    fmt: str | None = typer.Option(
        None, "--format", "-f", help="Export format (txt, html, json, srt)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable debug logging"),
) -> None:
    """Transcribe a recording segment by segment.

    Fragments are printed as they stream in. Press Ctrl-C to abort the current
    request and stop; results received so far are kept.
    """
    configure_logging(verbose)
    config = _load_config_or_exit(
        config_file,
        {
            "endpoint_url": endpoint,
            "window_seconds": window,
            "decoder": decoder,
            "export_format": fmt,
        },
    )

    if not audio.exists():
        console.print(f"[red]Error: Audio file not found: {audio}[/red]")
        raise typer.Exit(1)

    console.print(f"[cyan]Transcribing {audio.name} via {config.endpoint_url}...[/cyan]\n")

    token = CancellationToken()
    failure: TransportError | None = None

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task_id = progress.add_task("Preparing segments", total=1.0)

        def on_fragment(fragment: TranscriptFragment) -> None:
            progress.console.print(
                f"[dim]{format_span(fragment.start, fragment.end)}[/dim] {escape(fragment.text)}"
            )

        def on_progress(value: float) -> None:
            progress.update(task_id, completed=value)

        def on_segment(segment: AudioSegment, total: int) -> None:
            progress.update(task_id, description=f"Segment {segment.index + 1}/{total}")

        try:
            state = asyncio.run(
                _run_interruptible(
                    audio,
                    config,
                    token,
                    on_fragment=on_fragment,
                    on_progress=on_progress,
                    on_segment=on_segment,
                )
            )
        except (InvalidSource, DependencyError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        except TransportError as e:
            failure = e
            state = e.state or PipelineState()

    _print_summary(state)

    if output is not None:
        _export_state(state, output, fmt or (None if output.suffix else config.export_format))

    if failure is not None:
        console.print(f"[red]Transcription error: {failure}[/red]")
        raise typer.Exit(1)


def _print_summary(state: PipelineState) -> None:
    count = len(state.fragments)
    if state.cancelled:
        console.print(
            f"\n[dim]Stopped at {state.overall_progress:.0%} with {count} fragment(s).[/dim]"
        )
    elif state.status == "completed":
        last_end = format_duration(state.fragments[-1].end) if state.fragments else "0:00"
        console.print(
            f"\n[green]✓[/green] {count} fragment(s) from {state.total_segments} "
            f"segment(s), transcript length {last_end}"
        )
    if state.elapsed_seconds is not None:
        console.print(f"[green]Processing time: {state.elapsed_seconds:.2f} s[/green]")


def _export_state(state: PipelineState, output: Path, fmt: str | None) -> None:
    from chunkscribe.export import export_transcript

    metadata = {key: value for key, value in state.to_dict().items() if key != "fragments"}
    try:
        path = export_transcript(state.fragments, output, fmt=fmt, metadata=metadata)
    except ExportError as e:
        console.print(f"[red]Export error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[dim]  Transcript written to {path}[/dim]")


# Segmentation


@app.command("segment")
def segment_cmd(
    audio: Path = typer.Argument(..., help="Audio file to split"),
    out_dir: Path = typer.Option(Path("segments"), "--out-dir", "-o", help="Output directory"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
    window: float | None = typer.Option(None, "--window", "-w", help="Segment length in seconds"),
    decoder: str | None = typer.Option(None, "--decoder", "-d", help="Audio decoder"),
) -> None:
    """Write the encoded segments that would be uploaded, without sending them."""
    from chunkscribe.io import write_bytes
    from chunkscribe.pipeline import build_segmenter

    config = _load_config_or_exit(config_file, {"window_seconds": window, "decoder": decoder})

    try:
        segments = build_segmenter(config).segment_path(audio)
    except (InvalidSource, DependencyError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Segments")
    table.add_column("Index", style="cyan")
    table.add_column("Offset", style="green")
    table.add_column("Duration", style="green")
    table.add_column("Size", style="yellow")

    for segment in segments:
        write_bytes(out_dir / segment.filename, segment.payload)
        table.add_row(
            str(segment.index),
            f"{segment.start_offset:.2f}s",
            f"{segment.duration:.2f}s",
            format_bytes(len(segment.payload)),
        )

    console.print(table)
    console.print(f"\n[green]✓[/green] Wrote {len(segments)} segment(s) to {out_dir}")


# Export


@app.command("export")
def export_cmd(
    transcript: Path = typer.Argument(..., help="JSON transcript written by 'transcribe -f json'"),
    output: Path = typer.Option(..., "--output", "-o", help="Output document"),
    fmt: str | None = typer.Option(None, "--format", "-f", help="txt, html, json or srt"),
) -> None:
    """Convert a saved JSON transcript into another document format."""
    from chunkscribe.export import export_transcript, load_transcript

    try:
        fragments = load_transcript(transcript)
        path = export_transcript(fragments, output, fmt=fmt)
    except ExportError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Exported {len(fragments)} fragment(s) to {path}")


@app.command("init")
def init_config(
    path: Path = typer.Option(Path(CONFIG_FILENAME), "--path", "-p", help="Config file to create"),
) -> None:
    """Write a default configuration file."""
    if path.exists():
        console.print(f"[red]Error: '{path}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), path)
    console.print(f"[green]✓[/green] Created {path}")


if __name__ == "__main__":
    app()
