"""
chunkscribe.audio.decoders - Audio decoding strategies.

Each decoder turns a file path or raw file payload into an AudioSource with
all channels preserved. The segmenter depends only on the AudioDecoder
interface, so any strategy can feed the rest of the pipeline:

- soundfile: libsndfile containers (WAV, FLAC, OGG, ...), the default
- librosa: anything librosa/audioread can load
- ffmpeg: any container/codec FFmpeg understands, raw PCM piped back
"""

from __future__ import annotations

import io
import json
import shutil
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

import numpy as np

from chunkscribe.exceptions import DependencyError, InvalidSource
from chunkscribe.logging import get_logger
from chunkscribe.models import AudioSource

logger = get_logger("audio")

AudioInput = Union[Path, str, bytes]


class AudioDecoder(ABC):
    """Decoding strategy used by the segmenter."""

    name: str = "base"

    @abstractmethod
    def decode(self, source: AudioInput) -> AudioSource:
        """Decode a file path or raw payload.

        Raises:
            InvalidSource: If the container/codec cannot be parsed or holds no audio
        """


def build_source(samples: np.ndarray, sample_rate: int) -> AudioSource:
    """Normalize decoded samples to a ``(channels, frames)`` float32 AudioSource."""
    data = np.asarray(samples, dtype=np.float32)
    if data.ndim == 1:
        data = data[np.newaxis, :]
    if data.ndim != 2:
        raise InvalidSource(f"Unexpected sample array shape: {data.shape}")

    if sample_rate <= 0:
        raise InvalidSource(f"Invalid sample rate: {sample_rate}")
    if data.shape[1] == 0:
        raise InvalidSource("Audio contains no samples")

    return AudioSource(samples=np.ascontiguousarray(data), sample_rate=int(sample_rate))


def _check_exists(source: AudioInput) -> None:
    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise InvalidSource(f"Audio file not found: {source}")


class SoundfileDecoder(AudioDecoder):
    """Decode with libsndfile through the soundfile package."""

    name = "soundfile"

    def decode(self, source: AudioInput) -> AudioSource:
        import soundfile as sf

        _check_exists(source)
        target = io.BytesIO(source) if isinstance(source, bytes) else str(source)

        try:
            data, sample_rate = sf.read(target, dtype="float32", always_2d=True)
        except (RuntimeError, TypeError, ValueError) as e:
            raise InvalidSource(f"Cannot decode audio: {e}") from e

        logger.debug("soundfile decoded %d frames at %d Hz", data.shape[0], sample_rate)
        return build_source(data.T, sample_rate)


class LibrosaDecoder(AudioDecoder):
    """Decode with librosa at the native sample rate, channels preserved."""

    name = "librosa"

    def decode(self, source: AudioInput) -> AudioSource:
        try:
            import librosa
        except ImportError as e:
            raise DependencyError(
                "librosa", "not installed", install_hint="pip install librosa"
            ) from e

        _check_exists(source)
        target = io.BytesIO(source) if isinstance(source, bytes) else str(source)

        try:
            data, sample_rate = librosa.load(target, sr=None, mono=False)
        except Exception as e:
            raise InvalidSource(f"Cannot decode audio: {e}") from e

        return build_source(data, sample_rate)


class FFmpegDecoder(AudioDecoder):
    """Decode through FFmpeg to raw little-endian float32 PCM.

    When ``sample_rate`` is set FFmpeg resamples during decoding, so the
    encoder stage receives audio already at the transport rate.
    """

    name = "ffmpeg"

    def __init__(self, sample_rate: int | None = None) -> None:
        self.sample_rate = sample_rate

    def _require(self, tool: str) -> str:
        path = shutil.which(tool)
        if not path:
            raise DependencyError(
                tool,
                "not found on PATH",
                install_hint="Install FFmpeg (e.g. brew install ffmpeg / apt install ffmpeg)",
            )
        return path

    def probe(self, source: AudioInput) -> tuple[int, int]:
        """Return ``(channels, sample_rate)`` of the first audio stream."""
        ffprobe = self._require("ffprobe")
        cmd = [
            ffprobe,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_streams",
            "-select_streams",
            "a:0",
            "pipe:0" if isinstance(source, bytes) else str(source),
        ]
        proc = subprocess.run(
            cmd,
            input=source if isinstance(source, bytes) else None,
            capture_output=True,
        )
        if proc.returncode != 0:
            raise InvalidSource(f"ffprobe failed: {proc.stderr.decode(errors='replace')}")

        try:
            streams = json.loads(proc.stdout).get("streams", [])
        except json.JSONDecodeError as e:
            raise InvalidSource(f"Unreadable ffprobe output: {e}") from e
        if not streams:
            raise InvalidSource("No audio stream found")

        stream = streams[0]
        try:
            return int(stream["channels"]), int(stream["sample_rate"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidSource(f"Audio stream lacks channel/rate info: {e}") from e

    def decode(self, source: AudioInput) -> AudioSource:
        _check_exists(source)
        ffmpeg = self._require("ffmpeg")
        channels, native_rate = self.probe(source)
        sample_rate = self.sample_rate or native_rate

        cmd = [
            ffmpeg,
            "-v",
            "error",
            "-i",
            "pipe:0" if isinstance(source, bytes) else str(source),
            "-vn",
            "-acodec",
            "pcm_f32le",
            "-f",
            "f32le",
            "-ac",
            str(channels),
            "-ar",
            str(sample_rate),
            "pipe:1",
        ]

        proc = subprocess.run(
            cmd,
            input=source if isinstance(source, bytes) else None,
            capture_output=True,
        )
        if proc.returncode != 0:
            raise InvalidSource(f"FFmpeg decode failed: {proc.stderr.decode(errors='replace')}")

        interleaved = np.frombuffer(proc.stdout, dtype="<f4")
        usable = len(interleaved) - len(interleaved) % channels
        data = interleaved[:usable].reshape(-1, channels).T

        logger.debug("ffmpeg decoded %d frames x %d channels", data.shape[1], channels)
        return build_source(data, sample_rate)


def get_decoder(name: str, sample_rate: int | None = None) -> AudioDecoder:
    """Return a decoder instance for a configured decoder name."""
    if name == "soundfile":
        return SoundfileDecoder()
    if name == "librosa":
        return LibrosaDecoder()
    if name == "ffmpeg":
        return FFmpegDecoder(sample_rate=sample_rate)
    raise ValueError(f"Unknown decoder: {name}")
