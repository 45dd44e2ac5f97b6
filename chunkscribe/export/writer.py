"""
chunkscribe.export.writer - Format dispatch for transcript documents.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from chunkscribe.exceptions import ExportError
from chunkscribe.export.html import HtmlRenderer
from chunkscribe.export.timecode import seconds_to_srt_timestamp
from chunkscribe.io import read_json, write_json, write_text
from chunkscribe.models import TranscriptFragment

EXPORT_FORMATS = ("txt", "html", "json", "srt")


def render_text(fragments: list[TranscriptFragment]) -> str:
    """One paragraph per fragment, separated by a blank line."""
    paragraphs = [fragment.text.strip() for fragment in fragments]
    return "\n\n".join(paragraphs) + "\n" if paragraphs else ""


def render_srt(fragments: list[TranscriptFragment]) -> str:
    cues = []
    for number, fragment in enumerate(fragments, start=1):
        cues.append(
            f"{number}\n"
            f"{seconds_to_srt_timestamp(fragment.start)} --> "
            f"{seconds_to_srt_timestamp(fragment.end)}\n"
            f"{fragment.text.strip()}\n"
        )
    return "\n".join(cues)


def export_transcript(
    fragments: list[TranscriptFragment],
    output_path: Path,
    fmt: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Path:
    """Write fragments to ``output_path``.

    Args:
        fragments: Fragments in transcript order, global timestamps
        output_path: Destination file
        fmt: One of txt, html, json, srt; inferred from the suffix if None
        metadata: Run details stored in JSON exports (status, elapsed, ...)

    Returns:
        Path to the written file

    Raises:
        ExportError: If the format is unknown or the file cannot be written
    """
    fmt = (fmt or output_path.suffix.lstrip(".")).lower()
    if fmt not in EXPORT_FORMATS:
        raise ExportError(f"Unknown export format: {fmt!r} (expected one of {EXPORT_FORMATS})")

    try:
        if fmt == "txt":
            write_text(output_path, render_text(fragments))
        elif fmt == "html":
            html = HtmlRenderer().render(
                fragments, title=output_path.stem, metadata=metadata
            )
            write_text(output_path, html)
        elif fmt == "srt":
            write_text(output_path, render_srt(fragments))
        else:
            data = dict(metadata or {})
            data["fragments"] = [fragment.to_dict() for fragment in fragments]
            write_json(output_path, data)
    except OSError as e:
        raise ExportError(f"Cannot write {output_path}: {e}") from e

    return output_path


def load_transcript(path: Path) -> list[TranscriptFragment]:
    """Read fragments back from a JSON export.

    Raises:
        ExportError: If the file is missing or not a transcript export
    """
    try:
        data = read_json(path)
    except FileNotFoundError as e:
        raise ExportError(f"Transcript not found: {path}") from e
    except ValueError as e:
        raise ExportError(f"Invalid transcript JSON in {path}: {e}") from e

    try:
        return [TranscriptFragment.from_dict(item) for item in data["fragments"]]
    except (KeyError, TypeError, ValueError) as e:
        raise ExportError(f"{path} is not a transcript export: {e}") from e
