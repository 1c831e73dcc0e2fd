"""Tests for the client session store."""

from datetime import UTC, datetime
from pathlib import Path

from greeting_counter.client.session import SessionStore
from greeting_counter.domain.models import UserRecord


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    store = SessionStore(tmp_path / "session" / "currentUser.json")
    user = UserRecord(id="u1", name="ロマ子", created_at=datetime(2024, 1, 1, tzinfo=UTC))

    store.save(user)

    assert store.load() == user


def test_load_without_saved_session(tmp_path: Path) -> None:
    assert SessionStore(tmp_path / "missing.json").load() is None


def test_corrupt_session_is_discarded(tmp_path: Path) -> None:
    path = tmp_path / "currentUser.json"
    path.write_text("{not json", encoding="utf-8")
    store = SessionStore(path)

    assert store.load() is None
    assert not path.exists()


def test_clear_is_safe_when_empty(tmp_path: Path) -> None:
    store = SessionStore(tmp_path / "currentUser.json")

    store.clear()

    assert store.load() is None
