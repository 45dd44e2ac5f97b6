"""
chunkscribe.audio.segmenter - Fixed-window segmentation.

Partitions a decoded source into consecutive windows of ``window_seconds``
(the last one possibly shorter) and encodes each window as a transport WAV.
"""

from __future__ import annotations

import math

from chunkscribe.audio.decoders import AudioDecoder, AudioInput, SoundfileDecoder
from chunkscribe.audio.pcm import DEFAULT_SAMPLE_RATE, encode_wav
from chunkscribe.exceptions import InvalidSource
from chunkscribe.logging import get_logger
from chunkscribe.models import AudioSegment, AudioSource

logger = get_logger("segmenter")

DEFAULT_WINDOW_SECONDS = 60.0

# Float slack when deciding whether the duration is an exact multiple of the window.
_EPSILON = 1e-9


def plan_windows(duration: float, window_seconds: float) -> list[tuple[float, float]]:
    """Compute ``(start_offset, duration)`` pairs covering ``[0, duration)``.

    Produces ``ceil(duration / window_seconds)`` windows; every window is
    ``window_seconds`` long except the last, which holds the remainder.

    Raises:
        InvalidSource: If the duration is not a positive finite number
        ValueError: If the window length is not positive
    """
    if window_seconds <= 0:
        raise ValueError(f"window_seconds must be positive, got {window_seconds}")
    if duration is None or not math.isfinite(duration) or duration <= 0:
        raise InvalidSource(f"Cannot segment audio with duration {duration}")

    count = max(1, math.ceil(duration / window_seconds - _EPSILON))

    windows = []
    for i in range(count):
        start = i * window_seconds
        length = window_seconds if i < count - 1 else duration - start
        windows.append((start, length))
    return windows


class Segmenter:
    """Split audio into encoded segments using a pluggable decoder."""

    def __init__(
        self,
        decoder: AudioDecoder | None = None,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        target_sample_rate: int = DEFAULT_SAMPLE_RATE,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")
        self.decoder = decoder or SoundfileDecoder()
        self.window_seconds = window_seconds
        self.target_sample_rate = target_sample_rate

    def segment_path(self, source: AudioInput) -> list[AudioSegment]:
        """Decode a file path or payload, then segment it."""
        return self.segment(self.decoder.decode(source))

    def segment(self, source: AudioSource) -> list[AudioSegment]:
        """Segment an already decoded source.

        Raises:
            InvalidSource: If the source duration is unknown or not positive
        """
        windows = plan_windows(source.duration, self.window_seconds)
        rate = source.sample_rate
        logger.info(
            "Splitting %.2fs of audio into %d segments of %ss",
            source.duration,
            len(windows),
            self.window_seconds,
        )

        segments = []
        for index, (start, length) in enumerate(windows):
            first = round(start * rate)
            last = source.frames if index == len(windows) - 1 else round((start + length) * rate)
            payload = encode_wav(
                source.samples[:, first:last],
                rate,
                self.target_sample_rate,
            )
            segments.append(
                AudioSegment(index=index, start_offset=start, duration=length, payload=payload)
            )
        return segments
