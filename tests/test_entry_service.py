"""Tests for entry service."""

import asyncio

import pytest

from greeting_counter.domain.errors import EntryValidationError
from greeting_counter.services.broadcast import ENTRY_CREATED_EVENT
from greeting_counter.services.entries import (
    KEYWORD_REQUIRED_MESSAGE,
    TEXT_REQUIRED_MESSAGE,
    EntryService,
    contains_keyword,
)
from tests.conftest import (
    KEYWORD_TEXT,
    InMemoryEntryRepository,
    RecordingBroadcaster,
)


def _service() -> tuple[EntryService, InMemoryEntryRepository, RecordingBroadcaster]:
    repository = InMemoryEntryRepository()
    broadcaster = RecordingBroadcaster()
    return EntryService(repository, broadcaster), repository, broadcaster


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("だいたいロマ子のテスト", True),
        ("今日も大体ロマ子", True),
        ("ロマ子がない投稿", False),
        ("だいたい ロマ子", False),
        ("", False),
    ],
)
def test_contains_keyword(text: str, expected: bool) -> None:
    assert contains_keyword(text) is expected


def test_post_entry_publishes_stored_entry() -> None:
    service, _, broadcaster = _service()

    entry = asyncio.run(service.post_entry(KEYWORD_TEXT, "u1", "A"))

    assert entry.count == 1
    assert broadcaster.events == [(ENTRY_CREATED_EVENT, entry.to_payload())]


def test_repeat_post_increments_and_takes_latest_poster() -> None:
    service, _, broadcaster = _service()

    first = asyncio.run(service.post_entry(KEYWORD_TEXT, "u1", "A"))
    second = asyncio.run(service.post_entry(KEYWORD_TEXT, "u2", "B"))

    assert second.count == 2
    assert second.user_id == "u2"
    assert second.user_name == "B"
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at
    assert len(broadcaster.events) == 2


@pytest.mark.parametrize("text", ["", "   "])
def test_blank_text_is_rejected_first(text: str) -> None:
    service, repository, broadcaster = _service()

    with pytest.raises(EntryValidationError, match=TEXT_REQUIRED_MESSAGE):
        asyncio.run(service.post_entry(text))

    assert repository.entries == {}
    assert broadcaster.events == []


def test_text_without_keyword_is_rejected() -> None:
    service, repository, broadcaster = _service()

    with pytest.raises(EntryValidationError) as excinfo:
        asyncio.run(service.post_entry("ロマ子がない投稿", "u1", "A"))

    assert str(excinfo.value) == KEYWORD_REQUIRED_MESSAGE
    assert repository.entries == {}
    assert repository.user_repository.users == {}
    assert broadcaster.events == []


def test_ranking_orders_by_count_then_recency() -> None:
    service, _, _ = _service()

    async def scenario() -> list[str]:
        await service.post_entry("だいたいロマ子 A")
        await service.post_entry("だいたいロマ子 B")
        await service.post_entry("だいたいロマ子 B")
        await service.post_entry("大体ロマ子 C")
        return [entry.text for entry in await service.ranking()]

    assert asyncio.run(scenario()) == [
        "だいたいロマ子 B",
        "大体ロマ子 C",
        "だいたいロマ子 A",
    ]
