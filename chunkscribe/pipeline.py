"""
chunkscribe.pipeline - Segment orchestration and timeline reassembly.

Segments are processed strictly one after another: segment i+1 is not sent
until segment i's stream has ended. The reassembler moves every fragment onto
the source timeline and folds per-segment progress into one overall value.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from contextlib import aclosing

import httpx

from chunkscribe.audio.decoders import AudioInput, get_decoder
from chunkscribe.audio.segmenter import Segmenter
from chunkscribe.cancellation import CancellationToken
from chunkscribe.config import ChunkscribeConfig
from chunkscribe.exceptions import Cancelled, TransportError
from chunkscribe.logging import get_logger
from chunkscribe.models import (
    AudioSegment,
    DoneEvent,
    PipelineState,
    ProgressEvent,
    ResultEvent,
    StreamEvent,
    TranscriptFragment,
)
from chunkscribe.transcribe.client import TranscriptionClient

logger = get_logger("pipeline")

FragmentCallback = Callable[[TranscriptFragment], None]
ProgressCallback = Callable[[float], None]
SegmentCallback = Callable[[AudioSegment, int], None]


class TimelineReassembler:
    """Apply segment-local events to a PipelineState."""

    def __init__(
        self,
        state: PipelineState,
        on_fragment: FragmentCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.state = state
        self.on_fragment = on_fragment
        self.on_progress = on_progress
        self._index: int | None = None
        self._offset = 0.0

    def begin_segment(self, segment: AudioSegment) -> None:
        self._index = segment.index
        self._offset = segment.start_offset
        self.state.current_segment_index = segment.index

    def apply(self, event: StreamEvent) -> None:
        if self._index is None:
            raise RuntimeError("apply() called before begin_segment()")

        if isinstance(event, ResultEvent):
            fragment = event.fragment.shifted(self._offset)
            self.state.fragments.append(fragment)
            if self.on_fragment:
                self.on_fragment(fragment)
        elif isinstance(event, ProgressEvent):
            self._advance((self._index + event.fraction) / self._total())
        elif isinstance(event, DoneEvent):
            if not self.state.cancelled:
                self.state.elapsed_seconds = (self.state.elapsed_seconds or 0.0) + event.elapsed

    def end_segment(self) -> None:
        """Raise progress to at least the end of the current segment."""
        if self._index is None:
            return
        self._advance((self._index + 1) / self._total())

    def complete(self) -> None:
        """Snap progress to 1.0 after the last segment."""
        if self.state.overall_progress != 1.0:
            self.state.overall_progress = 1.0
            self._notify()

    def _total(self) -> int:
        return max(self.state.total_segments, 1)

    def _advance(self, candidate: float) -> None:
        value = min(max(candidate, 0.0), 1.0)
        # never regress
        if value > self.state.overall_progress:
            self.state.overall_progress = value
            self._notify()

    def _notify(self) -> None:
        if self.on_progress:
            self.on_progress(self.state.overall_progress)


class TranscriptionPipeline:
    """Run segmentation, streaming and reassembly for one source."""

    def __init__(
        self,
        client: TranscriptionClient,
        segmenter: Segmenter,
        token: CancellationToken | None = None,
        on_fragment: FragmentCallback | None = None,
        on_progress: ProgressCallback | None = None,
        on_segment: SegmentCallback | None = None,
    ) -> None:
        self.client = client
        self.segmenter = segmenter
        self.token = token or CancellationToken()
        self.on_fragment = on_fragment
        self.on_progress = on_progress
        self.on_segment = on_segment

    async def run(self, source: AudioInput) -> PipelineState:
        """Decode, segment and transcribe one recording.

        Returns:
            Final state. ``state.cancelled`` is set when the token stopped the
            run; fragments and progress reached until then are kept.

        Raises:
            InvalidSource: If the audio cannot be decoded; nothing is sent
            TransportError: If a segment request fails; ``error.state`` holds
                the partial state
        """
        segments = await asyncio.to_thread(self.segmenter.segment_path, source)
        return await self.run_segments(segments)

    async def run_segments(self, segments: Sequence[AudioSegment]) -> PipelineState:
        """Transcribe pre-built segments in index order."""
        state = PipelineState(total_segments=len(segments))
        reassembler = TimelineReassembler(state, self.on_fragment, self.on_progress)

        for segment in segments:
            if self.token.cancelled:
                state.cancelled = True
                break

            reassembler.begin_segment(segment)
            if self.on_segment:
                self.on_segment(segment, len(segments))
            logger.info("Transcribing segment %d/%d", segment.index + 1, len(segments))

            try:
                completed = await self._run_segment(segment, reassembler)
            except TransportError as e:
                logger.warning("Segment %d failed: %s", segment.index, e)
                state.error = str(e)
                e.state = state
                raise

            if not completed:
                state.cancelled = True
                break
            reassembler.end_segment()
        else:
            reassembler.complete()
            state.finished = True

        if state.cancelled:
            logger.info(
                "Run cancelled after %d fragments at %.0f%%",
                len(state.fragments),
                state.overall_progress * 100,
            )
        return state

    async def _run_segment(self, segment: AudioSegment, reassembler: TimelineReassembler) -> bool:
        """Stream one segment. Returns False when the token aborted it."""
        task = asyncio.create_task(self._consume(segment, reassembler))
        with self.token.bind(task):
            try:
                await task
            except (asyncio.CancelledError, Cancelled):
                current = asyncio.current_task()
                if (current is not None and current.cancelling()) or not self.token.cancelled:
                    raise
                return False
        return True

    async def _consume(self, segment: AudioSegment, reassembler: TimelineReassembler) -> None:
        async with aclosing(self.client.stream_events(segment, self.token)) as events:
            async for event in events:
                self.token.raise_if_cancelled()
                reassembler.apply(event)


def build_segmenter(config: ChunkscribeConfig) -> Segmenter:
    """Create the segmenter described by a config."""
    rate = config.target_sample_rate if config.decoder == "ffmpeg" else None
    return Segmenter(
        decoder=get_decoder(config.decoder, sample_rate=rate),
        window_seconds=config.window_seconds,
        target_sample_rate=config.target_sample_rate,
    )


async def transcribe(
    source: AudioInput,
    config: ChunkscribeConfig,
    *,
    token: CancellationToken | None = None,
    on_fragment: FragmentCallback | None = None,
    on_progress: ProgressCallback | None = None,
    on_segment: SegmentCallback | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> PipelineState:
    """Transcribe one recording with the endpoint and settings from ``config``.

    ``http_client`` replaces the default HTTP client. It is not closed here;
    the caller closes it.
    """
    async with TranscriptionClient(
        config.endpoint_url,
        upload_field=config.upload_field,
        timeout=config.timeout_seconds,
        client=http_client,
    ) as client:
        pipeline = TranscriptionPipeline(
            client,
            build_segmenter(config),
            token=token,
            on_fragment=on_fragment,
            on_progress=on_progress,
            on_segment=on_segment,
        )
        return await pipeline.run(source)


def transcribe_file(source: AudioInput, config: ChunkscribeConfig, **kwargs) -> PipelineState:
    """Blocking wrapper around :func:`transcribe`."""
    return asyncio.run(transcribe(source, config, **kwargs))
