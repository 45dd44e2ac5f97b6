"""
chunkscribe.transcribe.client - Streaming transcription endpoint client.

Sends one segment per request as a multipart upload and yields events while
the response body is still arriving.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx

from chunkscribe.cancellation import CancellationToken
from chunkscribe.exceptions import TransportError
from chunkscribe.logging import get_logger
from chunkscribe.models import AudioSegment, StreamEvent
from chunkscribe.transcribe.events import aiter_events

logger = get_logger("client")


class TranscriptionClient:
    """Async client for a line-delimited JSON transcription endpoint.

    A caller-supplied ``client`` is used as-is and left open on ``aclose()``;
    the caller owns it. A non-None ``timeout`` is applied to it as well.
    """

    def __init__(
        self,
        endpoint_url: str,
        *,
        upload_field: str = "file",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.upload_field = upload_field
        self.timeout = timeout
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        elif timeout is not None:
            client.timeout = httpx.Timeout(timeout)
        self._client = client

    async def __aenter__(self) -> TranscriptionClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def stream_events(
        self,
        segment: AudioSegment,
        token: CancellationToken | None = None,
    ) -> AsyncIterator[StreamEvent]:
        """Submit one segment and yield its events as lines arrive.

        Events carry segment-local times. The sequence ends with the response
        body. If the token aborts the task consuming this generator, the
        read is interrupted with ``asyncio.CancelledError`` and the response
        is closed; that path is a cancellation, never a TransportError.

        Args:
            segment: Encoded segment to upload
            token: Run cancellation token, checked before the request is sent

        Raises:
            Cancelled: If the token was already cancelled
            TransportError: If the endpoint is unreachable, answers with a
                non-success status, or the connection fails mid-body
        """
        if token is not None:
            token.raise_if_cancelled()

        files = {self.upload_field: (segment.filename, segment.payload, "audio/wav")}
        logger.debug(
            "POST %s segment %d (%d bytes, offset %.2fs)",
            self.endpoint_url,
            segment.index,
            len(segment.payload),
            segment.start_offset,
        )

        try:
            async with self._client.stream("POST", self.endpoint_url, files=files) as response:
                if not response.is_success:
                    raise TransportError(
                        f"Endpoint returned HTTP {response.status_code} for segment {segment.index}",
                        status_code=response.status_code,
                        segment_index=segment.index,
                    )
                async for event in aiter_events(response.aiter_bytes()):
                    yield event
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise TransportError(
                f"Request for segment {segment.index} failed: {e}",
                segment_index=segment.index,
            ) from e
