"""Tests for chunkscribe.export package."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chunkscribe.exceptions import ExportError
from chunkscribe.export import export_transcript, load_transcript
from chunkscribe.export.html import HtmlRenderer
from chunkscribe.export.timecode import seconds_to_srt_timestamp
from chunkscribe.export.writer import render_srt, render_text
from chunkscribe.models import TranscriptFragment


@pytest.fixture
def fragments(sample_fragments: list[dict]) -> list[TranscriptFragment]:
    return [TranscriptFragment.from_dict(item) for item in sample_fragments]


class TestTimecode:
    def test_zero(self) -> None:
        assert seconds_to_srt_timestamp(0.0) == "00:00:00,000"

    def test_hours_minutes_millis(self) -> None:
        assert seconds_to_srt_timestamp(3661.25) == "01:01:01,250"

    def test_negative_clamps(self) -> None:
        assert seconds_to_srt_timestamp(-3.0) == "00:00:00,000"


class TestRenderText:
    def test_one_paragraph_per_fragment_without_timestamps(
        self, fragments: list[TranscriptFragment]
    ) -> None:
        text = render_text(fragments)

        assert text.split("\n\n") == [
            "Good morning everyone.",
            "hi",
            "Thanks & goodbye <all>.\n",
        ]
        assert "61" not in text

    def test_empty(self) -> None:
        assert render_text([]) == ""


class TestRenderSrt:
    def test_numbered_cues(self, fragments: list[TranscriptFragment]) -> None:
        srt = render_srt(fragments)

        assert srt.startswith("1\n00:00:00,500 --> 00:00:02,000\nGood morning everyone.\n")
        assert "2\n00:01:01,000 --> 00:01:02,000\nhi\n" in srt
        assert "3\n01:01:01,250 --> 01:01:02,500\n" in srt


class TestHtmlRenderer:
    def test_paragraphs_escaped(self, fragments: list[TranscriptFragment]) -> None:
        html = HtmlRenderer().render(fragments, title="Interview")

        assert "<title>Interview</title>" in html
        assert html.count("<p>") == 3
        assert "<p>Thanks &amp; goodbye &lt;all&gt;.</p>" in html

    def test_elapsed_metadata_shown(self, fragments: list[TranscriptFragment]) -> None:
        html = HtmlRenderer().render(fragments, metadata={"elapsed_seconds": 3.2})
        assert "Processing time: 3.20 s" in html

    def test_elapsed_absent(self, fragments: list[TranscriptFragment]) -> None:
        html = HtmlRenderer().render(fragments, metadata={"elapsed_seconds": None})
        assert "Processing time" not in html


class TestExportTranscript:
    def test_format_inferred_from_suffix(
        self, tmp_path: Path, fragments: list[TranscriptFragment]
    ) -> None:
        path = export_transcript(fragments, tmp_path / "out.txt")
        assert path.read_text(encoding="utf-8").startswith("Good morning everyone.\n\nhi")

    def test_html_export(self, tmp_path: Path, fragments: list[TranscriptFragment]) -> None:
        path = export_transcript(fragments, tmp_path / "doc.html")
        assert "<title>doc</title>" in path.read_text(encoding="utf-8")

    def test_json_round_trip(self, tmp_path: Path, fragments: list[TranscriptFragment]) -> None:
        path = export_transcript(
            fragments,
            tmp_path / "transcript.json",
            metadata={"status": "completed", "elapsed_seconds": 3.2},
        )

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["status"] == "completed"
        assert data["fragments"][1] == {"start": 61.0, "end": 62.0, "text": "hi"}
        assert load_transcript(path) == fragments

    def test_explicit_format_overrides_suffix(
        self, tmp_path: Path, fragments: list[TranscriptFragment]
    ) -> None:
        path = export_transcript(fragments, tmp_path / "subs.out", fmt="srt")
        assert path.read_text(encoding="utf-8").startswith("1\n")

    def test_unknown_format_raises(self, tmp_path: Path, fragments: list[TranscriptFragment]) -> None:
        with pytest.raises(ExportError):
            export_transcript(fragments, tmp_path / "out.docx")


class TestLoadTranscript:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ExportError):
            load_transcript(tmp_path / "missing.json")

    def test_not_a_transcript(self, tmp_path: Path) -> None:
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"hello": "world"}))

        with pytest.raises(ExportError):
            load_transcript(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{")

        with pytest.raises(ExportError):
            load_transcript(path)
