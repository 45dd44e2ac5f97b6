"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import soundfile as sf
from helpers import make_source


@pytest.fixture
def stereo_wav(tmp_path: Path) -> Path:
    """A 2.5 second stereo 16-bit WAV file at 8 kHz."""
    source = make_source(2.5, sample_rate=8000, channels=2)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), source.samples.T, source.sample_rate, subtype="PCM_16")
    return path


@pytest.fixture
def mono_wav(tmp_path: Path) -> Path:
    """A 125 second mono WAV file at 16 kHz."""
    source = make_source(125.0, sample_rate=16000)
    path = tmp_path / "long.wav"
    sf.write(str(path), source.samples.T, source.sample_rate, subtype="PCM_16")
    return path


@pytest.fixture
def sample_fragments() -> list[dict]:
    """Fragments as a finished run would hold them (global times)."""
    return [
        {"start": 0.5, "end": 2.0, "text": "Good morning everyone."},
        {"start": 61.0, "end": 62.0, "text": "hi"},
        {"start": 3661.25, "end": 3662.5, "text": "Thanks & goodbye <all>."},
    ]
