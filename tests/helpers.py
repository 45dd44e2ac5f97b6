"""
Shared test helpers: synthetic audio, placeholder segments, fake endpoints.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import numpy as np

from chunkscribe.models import AudioSegment, AudioSource
from chunkscribe.transcribe.client import TranscriptionClient

ENDPOINT = "http://transcriber.test/transcribe"


def make_source(duration: float, sample_rate: int = 16000, channels: int = 1) -> AudioSource:
    """Build a quiet sine-wave source of the given length."""
    frames = int(round(duration * sample_rate))
    t = np.arange(frames, dtype=np.float32) / sample_rate
    tone = 0.25 * np.sin(2 * np.pi * 440.0 * t)
    samples = np.stack([tone * (c + 1) / channels for c in range(channels)]).astype(np.float32)
    return AudioSource(samples=samples, sample_rate=sample_rate)


def make_segments(durations: list[float]) -> list[AudioSegment]:
    """Build placeholder segments with contiguous offsets."""
    segments = []
    offset = 0.0
    for index, duration in enumerate(durations):
        segments.append(
            AudioSegment(index=index, start_offset=offset, duration=duration, payload=b"RIFF")
        )
        offset += duration
    return segments


def ndjson(*objects: Any) -> bytes:
    """Encode objects (or raw strings) as newline-terminated lines."""
    lines = [obj if isinstance(obj, str) else json.dumps(obj) for obj in objects]
    return "".join(f"{line}\n" for line in lines).encode("utf-8")


def make_client(handler: Callable[[httpx.Request], Any]) -> TranscriptionClient:
    """TranscriptionClient whose HTTP traffic goes to ``handler``."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TranscriptionClient(ENDPOINT, client=http_client)


async def chunked(*chunks: bytes) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk
