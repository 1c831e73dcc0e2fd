"""Live entry feed over the API WebSocket."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from typing import Protocol

import httpx
from httpx_ws import AsyncWebSocketSession, WebSocketDisconnect, aconnect_ws

logger = logging.getLogger(__name__)

FEED_PATH = "/ws"

FrameHandler = Callable[[dict[str, object]], object]


class FeedConnection(Protocol):
    """Client side of the broadcast channel."""

    def subscribe(self, handler: FrameHandler) -> None:
        """Register the callback that receives every inbound frame."""

    async def connect(self) -> None:
        """Open the subscription if it is not already open."""

    async def send(self, frame: dict[str, object]) -> None:
        """Send a JSON frame to the server."""

    async def close(self) -> None:
        """Close the subscription."""


@dataclass
class WebSocketFeed(FeedConnection):
    """Feed connection implemented with httpx-ws.

    ``http_client`` is rooted at the API prefix, the same client the REST
    calls use. Inbound frames are read on a background task and handed to
    the subscribed handler.
    """

    http_client: httpx.AsyncClient
    path: str = FEED_PATH
    _handler: FrameHandler | None = field(default=None, init=False)
    _stack: AsyncExitStack | None = field(default=None, init=False)
    _session: AsyncWebSocketSession | None = field(default=None, init=False)
    _reader: asyncio.Task[None] | None = field(default=None, init=False)

    @property
    def is_open(self) -> bool:
        return self._session is not None

    def subscribe(self, handler: FrameHandler) -> None:
        self._handler = handler

    async def connect(self) -> None:
        if self._session is not None:
            return
        stack = AsyncExitStack()
        session = await stack.enter_async_context(
            aconnect_ws(self.path, self.http_client)
        )
        self._stack = stack
        self._session = session
        self._reader = asyncio.create_task(self._read_loop(session))
        logger.info("Live feed connected")

    async def send(self, frame: dict[str, object]) -> None:
        if self._session is None:
            raise RuntimeError("Live feed is not connected")
        await self._session.send_json(frame)

    async def close(self) -> None:
        reader, stack = self._reader, self._stack
        self._reader = self._stack = self._session = None
        if reader is not None:
            reader.cancel()
            try:
                await reader
            except asyncio.CancelledError:
                pass
        if stack is not None:
            await stack.aclose()
            logger.info("Live feed closed")

    async def _read_loop(self, session: AsyncWebSocketSession) -> None:
        while True:
            try:
                frame = await session.receive_json()
            except WebSocketDisconnect:
                logger.info("Live feed closed by server")
                return
            if not isinstance(frame, dict):
                logger.warning("Ignoring malformed feed frame")
                continue
            if self._handler is None:
                continue
            try:
                self._handler(frame)
            except Exception:
                logger.exception("Failed to handle %s frame", frame.get("event"))
