"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from greeting_counter.config import Settings
from greeting_counter.containers import AppContainer, build_container
from greeting_counter.domain.errors import RetrievalError
from greeting_counter.domain.models import EntryRecord, UserRecord
from greeting_counter.services.broadcast import BroadcastHub, Broadcaster
from greeting_counter.services.entries import EntryRepository, EntryService
from greeting_counter.services.users import UserRepository, UserService

KEYWORD_TEXT = "だいたいロマ子のテスト"


@dataclass
class TickingClock:
    """Deterministic clock that advances one second per reading."""

    current: datetime = field(
        default_factory=lambda: datetime(2024, 1, 1, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[str, UserRecord] = field(default_factory=dict)
    clock: TickingClock = field(default_factory=TickingClock)

    async def create_user(self, user_id: str, name: str) -> UserRecord:
        user = UserRecord(id=user_id, name=name, created_at=self.clock())
        self.users[user_id] = user
        return user

    async def get_user(self, user_id: str) -> UserRecord | None:
        return self.users.get(user_id)


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository for tests."""

    user_repository: InMemoryUserRepository = field(
        default_factory=InMemoryUserRepository
    )
    entries: dict[str, EntryRecord] = field(default_factory=dict)
    clock: TickingClock = field(default_factory=TickingClock)

    async def create_or_update_entry(
        self, text: str, user_id: str | None = None, user_name: str | None = None
    ) -> EntryRecord:
        if user_id and user_name:
            await self.user_repository.create_user(user_id, user_name)
        now = self.clock()
        current = self.entries.get(text)
        if current is None:
            entry = EntryRecord(
                id=len(self.entries) + 1,
                text=text,
                count=1,
                created_at=now,
                updated_at=now,
                user_id=user_id,
                user_name=user_name,
            )
        else:
            entry = EntryRecord(
                id=current.id,
                text=text,
                count=current.count + 1,
                created_at=current.created_at,
                updated_at=now,
                user_id=user_id,
                user_name=user_name,
            )
        self.entries[text] = entry
        return entry

    async def get_all_entries(self) -> list[EntryRecord]:
        return sorted(
            self.entries.values(), key=lambda entry: entry.updated_at, reverse=True
        )

    async def get_ranking(self) -> list[EntryRecord]:
        return sorted(
            self.entries.values(),
            key=lambda entry: (entry.count, entry.updated_at),
            reverse=True,
        )


@dataclass
class FailingEntryRepository(EntryRepository):
    """Entry repository whose every call fails like a broken store."""

    async def create_or_update_entry(
        self, text: str, user_id: str | None = None, user_name: str | None = None
    ) -> EntryRecord:
        raise RetrievalError("Failed to retrieve saved entry")

    async def get_all_entries(self) -> list[EntryRecord]:
        raise RuntimeError("database is locked")

    async def get_ranking(self) -> list[EntryRecord]:
        raise RuntimeError("database is locked")


@dataclass
class FailingUserRepository(UserRepository):
    """User repository whose every call fails like a broken store."""

    async def create_user(self, user_id: str, name: str) -> UserRecord:
        raise RuntimeError("disk I/O error")

    async def get_user(self, user_id: str) -> UserRecord | None:
        raise RuntimeError("disk I/O error")


@dataclass
class RecordingBroadcaster(Broadcaster):
    """Broadcaster that keeps every published event."""

    events: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def publish(self, event: str, payload: dict[str, object]) -> None:
        self.events.append((event, payload))


def make_entry(  # noqa: PLR0913
    entry_id: int,
    text: str,
    count: int = 1,
    updated_at: datetime | None = None,
    user_id: str | None = None,
    user_name: str | None = None,
) -> EntryRecord:
    """Build an entry record with sensible timestamps."""
    updated = updated_at or datetime(2024, 1, 1, tzinfo=UTC)
    return EntryRecord(
        id=entry_id,
        text=text,
        count=count,
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
        updated_at=updated,
        user_id=user_id,
        user_name=user_name,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test")


@pytest.fixture
def container(settings: Settings) -> AppContainer:
    return build_container(settings)


@pytest.fixture
def failing_container(settings: Settings) -> AppContainer:
    broadcaster = RecordingBroadcaster()

    async def noop() -> None:
        return None

    return AppContainer(
        settings=settings,
        broadcast_hub=BroadcastHub(),
        entry_service=EntryService(
            repository=FailingEntryRepository(), broadcaster=broadcaster
        ),
        user_service=UserService(FailingUserRepository()),
        open_resources=noop,
        close_resources=noop,
    )
