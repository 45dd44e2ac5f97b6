"""Tests for chunkscribe.models module."""

from __future__ import annotations

import numpy as np
import pytest

from chunkscribe.models import AudioSegment, AudioSource, PipelineState, TranscriptFragment


class TestAudioSource:
    def test_derived_properties(self) -> None:
        source = AudioSource(samples=np.zeros((2, 48000), dtype=np.float32), sample_rate=16000)

        assert source.channels == 2
        assert source.frames == 48000
        assert source.duration == 3.0


class TestAudioSegment:
    def test_end_offset_and_filename(self) -> None:
        segment = AudioSegment(index=12, start_offset=720.0, duration=5.0, payload=b"")

        assert segment.end_offset == 725.0
        assert segment.filename == "segment_0012.wav"

    def test_immutable(self) -> None:
        segment = AudioSegment(index=0, start_offset=0.0, duration=1.0, payload=b"")
        with pytest.raises(AttributeError):
            segment.index = 1


class TestTranscriptFragment:
    def test_shifted(self) -> None:
        fragment = TranscriptFragment(1.0, 2.0, "hi").shifted(60.0)
        assert fragment == TranscriptFragment(61.0, 62.0, "hi")

    @pytest.mark.parametrize("start,end", [(-0.1, 1.0), (2.0, 1.0)])
    def test_invalid_span_raises(self, start: float, end: float) -> None:
        with pytest.raises(ValueError):
            TranscriptFragment(start, end, "bad")

    def test_dict_round_trip(self) -> None:
        fragment = TranscriptFragment(0.5, 1.5, "text")
        assert TranscriptFragment.from_dict(fragment.to_dict()) == fragment


class TestPipelineState:
    def test_status_transitions(self) -> None:
        state = PipelineState(total_segments=2)
        assert state.status == "pending"

        state.current_segment_index = 0
        assert state.status == "running"

        state.finished = True
        assert state.status == "completed"

    def test_failed_and_cancelled(self) -> None:
        assert PipelineState(error="boom").status == "failed"
        assert PipelineState(cancelled=True, error="boom").status == "cancelled"

    def test_text_and_dict(self) -> None:
        state = PipelineState(
            fragments=[TranscriptFragment(0, 1, "a"), TranscriptFragment(1, 2, "b")],
            elapsed_seconds=2.0,
        )

        assert state.text == "a\nb"
        data = state.to_dict()
        assert data["elapsed_seconds"] == 2.0
        assert data["fragments"][1] == {"start": 1, "end": 2, "text": "b"}
