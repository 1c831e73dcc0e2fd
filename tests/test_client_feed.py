"""Tests for the live feed client against the running application."""

import asyncio
from pathlib import Path

import httpx
import pytest
from httpx_ws.transport import ASGIWebSocketTransport

from greeting_counter.api.app import create_app
from greeting_counter.client.api_client import CounterApiClient
from greeting_counter.client.app import CounterClientApp
from greeting_counter.client.feed import WebSocketFeed
from greeting_counter.client.session import SessionStore
from tests.conftest import KEYWORD_TEXT


async def _wait_for(condition, attempts: int = 200) -> bool:  # type: ignore[no-untyped-def]
    for _ in range(attempts):
        if condition():
            return True
        await asyncio.sleep(0.01)
    return condition()


def test_feed_merges_posts_from_other_clients(container, tmp_path: Path) -> None:
    app = create_app(container)

    async def scenario() -> None:
        async with httpx.AsyncClient(
            transport=ASGIWebSocketTransport(app), base_url="http://test/api"
        ) as http_client:
            client = CounterClientApp(
                api=CounterApiClient(http_client),
                session_store=SessionStore(tmp_path / "currentUser.json"),
                feed=WebSocketFeed(http_client),
            )
            user = await client.login("A")
            assert user is not None
            assert client.feed.is_open
            await client.select_tab("list")
            assert client.entries("list") == []

            other = CounterApiClient(http_client)
            await other.create_entry(KEYWORD_TEXT, "other", "B")
            await other.create_entry(KEYWORD_TEXT, "other", "B")

            assert await _wait_for(
                lambda: [e.count for e in client.entries("ranking")] == [2]
            )
            assert client.entries("list")[0].user_name == "B"
            assert client.refresh_key == 0

            await client.logout()
            assert not client.feed.is_open
        await container.close_resources()

    asyncio.run(scenario())


def test_join_frame_reaches_the_server(container, tmp_path: Path) -> None:
    app = create_app(container)
    hub = container.broadcast_hub

    async def scenario() -> None:
        async with httpx.AsyncClient(
            transport=ASGIWebSocketTransport(app), base_url="http://test/api"
        ) as http_client:
            feed = WebSocketFeed(http_client)
            await feed.connect()
            await feed.send(
                {"event": "join", "data": {"userId": "u1", "userName": "ロマ子"}}
            )
            assert await _wait_for(
                lambda: any(
                    sub.user_name == "ロマ子" for sub in hub._subscriptions
                )
            )
            await feed.close()
            assert await _wait_for(lambda: hub.connection_count == 0)
        await container.close_resources()

    asyncio.run(scenario())


def test_send_requires_connection() -> None:
    async def scenario() -> None:
        async with httpx.AsyncClient(base_url="http://test/api") as http_client:
            await WebSocketFeed(http_client).send({"event": "join", "data": {}})

    with pytest.raises(RuntimeError, match="not connected"):
        asyncio.run(scenario())
