"""
chunkscribe.models - Pipeline data model.

Audio buffers and segments produced before submission, stream events parsed
from the endpoint, and the mutable state of one pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

import numpy as np


@dataclass
class AudioSource:
    """Decoded audio owned by one pipeline invocation.

    ``samples`` is shaped ``(channels, frames)``, float values in [-1, 1].
    """

    samples: np.ndarray
    sample_rate: int

    @property
    def channels(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration(self) -> float:
        """Total duration in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.frames / self.sample_rate


@dataclass(frozen=True)
class AudioSegment:
    """One encoded window of the source, submitted as its own request."""

    index: int
    start_offset: float  # seconds
    duration: float  # seconds
    payload: bytes = field(repr=False)

    @property
    def end_offset(self) -> float:
        return self.start_offset + self.duration

    @property
    def filename(self) -> str:
        return f"segment_{self.index:04d}.wav"


@dataclass(frozen=True)
class TranscriptFragment:
    """A timed span of recognized text."""

    start: float  # seconds
    end: float  # seconds
    text: str

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid fragment span: {self.start} - {self.end}")

    @property
    def duration(self) -> float:
        return self.end - self.start

    def shifted(self, offset: float) -> TranscriptFragment:
        """Return this fragment moved forward by ``offset`` seconds."""
        return TranscriptFragment(start=self.start + offset, end=self.end + offset, text=self.text)

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start, "end": self.end, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranscriptFragment:
        return cls(start=float(data["start"]), end=float(data["end"]), text=str(data["text"]))


@dataclass(frozen=True)
class ResultEvent:
    fragment: TranscriptFragment


@dataclass(frozen=True)
class ProgressEvent:
    fraction: float


@dataclass(frozen=True)
class DoneEvent:
    elapsed: float


StreamEvent = Union[ResultEvent, ProgressEvent, DoneEvent]


@dataclass
class PipelineState:
    """Running state of one pipeline run.

    Mutated only by the timeline reassembler and the orchestrator that owns it.
    """

    fragments: list[TranscriptFragment] = field(default_factory=list)
    overall_progress: float = 0.0
    current_segment_index: int | None = None
    total_segments: int = 0
    cancelled: bool = False
    elapsed_seconds: float | None = None
    error: str | None = None
    finished: bool = False

    @property
    def status(self) -> str:
        if self.cancelled:
            return "cancelled"
        if self.error is not None:
            return "failed"
        if self.finished:
            return "completed"
        if self.current_segment_index is None:
            return "pending"
        return "running"

    @property
    def text(self) -> str:
        return "\n".join(fragment.text for fragment in self.fragments)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "total_segments": self.total_segments,
            "overall_progress": self.overall_progress,
            "elapsed_seconds": self.elapsed_seconds,
            "error": self.error,
            "fragments": [fragment.to_dict() for fragment in self.fragments],
        }
