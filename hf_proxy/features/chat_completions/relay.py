"""
Server-Sent Events relay from a streaming inference response to a client.

A relay moves through ``OPEN -> RELAYING* -> DONE | FAILED`` (or
``CANCELLED`` when the client goes away). Response headers are committed by
the ``StreamingResponse`` before the relay asks the upstream for its first
byte, so failures from that point on can only be reported in-band as a
``data: {"error": ...}`` event.

Every upstream chunk becomes exactly one ``data: <chunk json>`` event, in
arrival order and without batching. A successful relay ends with a single
``data: [DONE]``. The client stream is closed exactly once whatever happens.
"""

import codecs
import json
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from pydantic import BaseModel

from hf_proxy.shared.config import logger
from hf_proxy.shared.constants import SSE_DONE
from hf_proxy.shared.errors import UpstreamError
from hf_proxy.shared.metrics import ACTIVE_STREAMS, STREAM_EVENTS, STREAMS

from .transcoder import to_chunk

DisconnectProbe = Callable[[], Awaitable[bool]]


class StreamClosedError(RuntimeError):
    """Raised on a write or close after the stream has been closed."""


class RelayState(str, Enum):
    OPEN = "open"
    RELAYING = "relaying"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


def format_event(data: str) -> bytes:
    return f"data: {data}\n\n".encode("utf-8")


class SSEStream:
    """
    Write end of one client event stream.

    Owned by a single relay. Every write returns the framed bytes for the
    caller to hand to the transport. ``done`` may be emitted once and
    ``close`` is terminal: afterwards every call raises StreamClosedError.
    """

    def __init__(self) -> None:
        self._closed = False
        self._done_sent = False
        self.events_sent = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise StreamClosedError("event stream is already closed")

    def event(self, data: Any) -> bytes:
        self._check_open()
        if self._done_sent:
            raise StreamClosedError("event stream already finished with [DONE]")
        if isinstance(data, BaseModel):
            payload = data.model_dump_json()
        else:
            payload = json.dumps(data, ensure_ascii=False)
        self.events_sent += 1
        return format_event(payload)

    def done(self) -> bytes:
        self._check_open()
        if self._done_sent:
            raise StreamClosedError("[DONE] already sent")
        self._done_sent = True
        return format_event(SSE_DONE)

    def close(self) -> None:
        self._check_open()
        self._closed = True


class StreamRelay:
    """Pipes upstream byte chunks to a client as chat-completion chunk events."""

    def __init__(
        self,
        fragments: AsyncIterator[bytes],
        model: str,
        disconnected: Optional[DisconnectProbe] = None,
    ):
        self._fragments = fragments
        self._model = model
        self._disconnected = disconnected
        self.sse = SSEStream()
        self.state = RelayState.OPEN

    async def _client_gone(self) -> bool:
        return self._disconnected is not None and await self._disconnected()

    async def _release_upstream(self) -> None:
        aclose = getattr(self._fragments, "aclose", None)
        if aclose is not None:
            await aclose()

    async def events(self) -> AsyncIterator[bytes]:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        ACTIVE_STREAMS.inc()
        try:
            async for chunk in self._fragments:
                if await self._client_gone():
                    logger.info("Client disconnected, stopping relay for model '%s'.", self._model)
                    self.state = RelayState.CANCELLED
                    break
                self.state = RelayState.RELAYING
                yield self.sse.event(to_chunk(decoder.decode(chunk), self._model))
                STREAM_EVENTS.inc()
            else:
                tail = decoder.decode(b"", final=True)
                if tail:
                    yield self.sse.event(to_chunk(tail, self._model))
                    STREAM_EVENTS.inc()
                self.state = RelayState.DONE
                yield self.sse.done()
        except UpstreamError as e:
            self.state = RelayState.FAILED
            yield self.sse.event({"error": e.message})
        except StreamClosedError:
            raise
        except Exception as e:
            logger.exception("Stream relay error for model '%s'", self._model)
            self.state = RelayState.FAILED
            yield self.sse.event({"error": str(e) or "Internal stream error"})
        finally:
            if self.state in (RelayState.OPEN, RelayState.RELAYING):
                # Closed by the server before reaching a terminal state.
                self.state = RelayState.CANCELLED
            ACTIVE_STREAMS.dec()
            STREAMS.labels(outcome=self.state.value).inc()
            try:
                await self._release_upstream()
            finally:
                logger.info(
                    "Stream for model '%s' finished: %s after %d events",
                    self._model, self.state.value, self.sse.events_sent
                )
                self.sse.close()
