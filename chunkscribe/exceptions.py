"""
chunkscribe.exceptions - Custom exception classes.

All Chunkscribe failures inherit from ChunkscribeError. Cancelled is a
termination signal, not a failure, and sits outside that hierarchy.
"""

from __future__ import annotations

from typing import Any


class ChunkscribeError(Exception):
    """Base exception for all Chunkscribe errors."""

    pass


class ConfigError(ChunkscribeError):
    """Configuration loading or validation error."""

    pass


class InvalidSource(ChunkscribeError):
    """Audio could not be decoded or has no usable duration."""

    pass


class TransportError(ChunkscribeError):
    """Network or backend failure while streaming one segment.

    ``state`` carries the partial pipeline state (fragments and progress
    reached before the failure) when the error escapes a pipeline run.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        segment_index: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.segment_index = segment_index
        self.state: Any = None
        super().__init__(message)


class MalformedEvent(ChunkscribeError):
    """A single stream line could not be decoded into an event."""

    pass


class ExportError(ChunkscribeError):
    """Transcript export error."""

    pass


class DependencyError(ChunkscribeError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")


class Cancelled(Exception):
    """Raised when a run was stopped on request rather than by a failure."""

    pass
