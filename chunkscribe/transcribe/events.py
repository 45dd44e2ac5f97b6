"""
chunkscribe.transcribe.events - Newline-delimited JSON event decoding.

The endpoint streams one JSON object per ``\\n``-terminated line. Lines are
decoded incrementally as bytes arrive; each complete line is classified by
field presence into Progress, Result and Done events (in that order when a
line carries several). A trailing line without its terminator is held back
until more bytes complete it and is discarded if the body ends first.
"""

from __future__ import annotations

import codecs
import json
from collections.abc import AsyncIterator, Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from chunkscribe.exceptions import MalformedEvent
from chunkscribe.logging import get_logger
from chunkscribe.models import (
    DoneEvent,
    ProgressEvent,
    ResultEvent,
    StreamEvent,
    TranscriptFragment,
)

logger = get_logger("events")


class WireResult(BaseModel):
    """``result`` object as sent by the endpoint, in segment-local seconds."""

    start: float = Field(ge=0.0, allow_inf_nan=False)
    end: float = Field(allow_inf_nan=False)
    text: str

    @model_validator(mode="after")
    def check_span(self) -> WireResult:
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) precedes start ({self.start})")
        return self


class WireLine(BaseModel):
    """One decoded stream line. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    result: WireResult | None = None
    progress: float | None = Field(default=None, allow_inf_nan=False)
    done: bool | None = None
    elapsed: float | None = Field(default=None, allow_inf_nan=False)


def parse_line(line: str) -> list[StreamEvent]:
    """Classify one complete line into zero or more events.

    Raises:
        MalformedEvent: If the line is not a JSON object or a known field
            carries an invalid value
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedEvent(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedEvent(f"Expected a JSON object, got {type(data).__name__}")

    try:
        wire = WireLine.model_validate(data)
    except ValidationError as e:
        raise MalformedEvent(f"Invalid event fields: {e}") from e

    events: list[StreamEvent] = []
    if wire.progress is not None:
        events.append(ProgressEvent(fraction=min(max(wire.progress, 0.0), 1.0)))
    if wire.result is not None:
        fragment = TranscriptFragment(
            start=wire.result.start,
            end=wire.result.end,
            text=wire.result.text,
        )
        events.append(ResultEvent(fragment=fragment))
    if wire.done and wire.elapsed is not None:
        events.append(DoneEvent(elapsed=wire.elapsed))
    return events


class LineDecoder:
    """Incremental UTF-8 decoder that splits a byte stream into lines."""

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received after the last ``\\n``."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """Add bytes and return every line they complete, blank lines skipped."""
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return [line.rstrip("\r") for line in lines if line.strip()]

    def flush(self) -> str:
        """Return and clear the unterminated remainder."""
        remainder = self._buffer + self._decoder.decode(b"", final=True)
        self._buffer = ""
        return remainder


def decode_events(lines: Iterable[str]) -> Iterator[StreamEvent]:
    """Parse lines into events, dropping malformed ones."""
    for line in lines:
        try:
            events = parse_line(line)
        except MalformedEvent as e:
            logger.debug("Dropping malformed stream line %r: %s", line[:200], e)
            continue
        yield from events


async def aiter_events(chunks: AsyncIterator[bytes]) -> AsyncIterator[StreamEvent]:
    """Turn an async byte stream into events as soon as lines complete."""
    decoder = LineDecoder()
    async for chunk in chunks:
        for event in decode_events(decoder.feed(chunk)):
            yield event

    remainder = decoder.flush()
    if remainder.strip():
        logger.debug("Discarding unterminated trailing line %r", remainder[:200])
