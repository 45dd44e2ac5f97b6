"""
chunkscribe.audio.pcm - Transport encoding for segments.

Every segment travels as a canonical 16-bit little-endian mono WAV at the
transport sample rate (16 kHz by default), which any conformant backend
can decode without extra metadata.
"""

from __future__ import annotations

import io
import wave

import numpy as np

DEFAULT_SAMPLE_RATE = 16000
SAMPLE_WIDTH_BYTES = 2


def downmix(samples: np.ndarray) -> np.ndarray:
    """Collapse a ``(channels, frames)`` buffer to mono by averaging channels."""
    data = np.asarray(samples, dtype=np.float32)
    if data.ndim == 1:
        return data
    if data.shape[0] == 1:
        return data[0]
    return data.mean(axis=0, dtype=np.float32)


def resample(mono: np.ndarray, sample_rate: int, target_sample_rate: int) -> np.ndarray:
    """Resample a mono buffer with librosa. No-op when the rates match."""
    if sample_rate == target_sample_rate:
        return mono

    import librosa

    return librosa.resample(mono, orig_sr=sample_rate, target_sr=target_sample_rate)


def float_to_int16(mono: np.ndarray) -> np.ndarray:
    """Convert float samples to int16, clamping out-of-range values.

    Negative values scale by 32768 and positive by 32767 so that -1.0 and
    1.0 map onto the full signed 16-bit range.
    """
    data = np.nan_to_num(np.asarray(mono, dtype=np.float64), nan=0.0, posinf=1.0, neginf=-1.0)
    clipped = np.clip(data, -1.0, 1.0)
    scaled = np.where(clipped < 0, clipped * 32768.0, clipped * 32767.0)
    return np.clip(np.round(scaled), -32768, 32767).astype("<i2")


def encode_wav(
    samples: np.ndarray,
    sample_rate: int,
    target_sample_rate: int = DEFAULT_SAMPLE_RATE,
) -> bytes:
    """Encode a sample buffer as a mono 16-bit PCM WAV container.

    Args:
        samples: ``(channels, frames)`` or ``(frames,)`` float buffer
        sample_rate: Rate of ``samples``
        target_sample_rate: Rate written into the container

    Returns:
        WAV file bytes (44-byte RIFF header followed by PCM frames)
    """
    mono = resample(downmix(samples), sample_rate, target_sample_rate)
    pcm = float_to_int16(mono)

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(SAMPLE_WIDTH_BYTES)
        wf.setframerate(target_sample_rate)
        wf.writeframes(pcm.tobytes())
    return buffer.getvalue()
