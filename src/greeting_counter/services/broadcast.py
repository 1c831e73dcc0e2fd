"""In-process broadcast channel for live entry updates."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Protocol

from fastapi import WebSocket

logger = logging.getLogger(__name__)

ENTRY_CREATED_EVENT = "entryCreated"
JOIN_EVENT = "join"


class Broadcaster(Protocol):
    """Interface for pushing events to every connected client."""

    def publish(self, event: str, payload: dict[str, object]) -> None:
        """Queue an event for every current subscriber."""


@dataclass(eq=False)
class Subscription:
    """A single connected client and its outbound queue."""

    websocket: WebSocket
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    user_id: str | None = None
    user_name: str | None = None

    async def serve(self) -> None:
        """Pump queued events out and client frames in until either side stops."""
        sender = asyncio.create_task(self._send_loop())
        receiver = asyncio.create_task(self._receive_loop())
        try:
            done, _ = await asyncio.wait(
                {sender, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            sender.cancel()
            receiver.cancel()
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.warning(
                    "Subscriber connection failed: %s", task.exception()
                )

    async def _send_loop(self) -> None:
        while True:
            message = await self.queue.get()
            if message is None:
                return
            try:
                await self.websocket.send_json(message)
            except Exception:
                logger.exception("Failed to deliver %s event", message.get("event"))
                return

    async def _receive_loop(self) -> None:
        async for raw in self.websocket.iter_text():
            self._handle_frame(raw)

    def _handle_frame(self, raw: str) -> None:
        try:
            frame = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed client frame")
            return
        if not isinstance(frame, dict):
            logger.warning("Ignoring malformed client frame")
            return
        event = frame.get("event")
        if event != JOIN_EVENT:
            logger.info("Ignoring unknown client event %r", event)
            return
        data = frame.get("data")
        if isinstance(data, dict):
            self.user_id = data.get("userId")
            self.user_name = data.get("userName")
        logger.info("User joined: %s (%s)", self.user_name, self.user_id)


@dataclass
class BroadcastHub(Broadcaster):
    """Fan-out of events to all live WebSocket subscribers."""

    _subscriptions: set[Subscription] = field(default_factory=set)

    @property
    def connection_count(self) -> int:
        """Return the number of live subscribers."""
        return len(self._subscriptions)

    async def connect(self, websocket: WebSocket) -> Subscription:
        """Register and accept a WebSocket connection."""
        subscription = Subscription(websocket=websocket)
        self._subscriptions.add(subscription)
        await websocket.accept()
        logger.info("Client connected (%d live)", self.connection_count)
        return subscription

    def disconnect(self, subscription: Subscription) -> None:
        """Forget a subscriber; later events are not delivered to it."""
        if subscription in self._subscriptions:
            self._subscriptions.discard(subscription)
            logger.info("Client disconnected (%d live)", self.connection_count)

    def publish(self, event: str, payload: dict[str, object]) -> None:
        """Queue an event for every subscriber without waiting on delivery."""
        message = {"event": event, "data": payload}
        for subscription in list(self._subscriptions):
            subscription.queue.put_nowait(message)

    async def close(self) -> None:
        """Stop every subscriber's sender loop and drop all subscriptions."""
        for subscription in list(self._subscriptions):
            subscription.queue.put_nowait(None)
        self._subscriptions.clear()
