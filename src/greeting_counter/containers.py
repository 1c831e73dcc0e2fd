"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from greeting_counter.adapters.sqlite_entry_repository import SqliteEntryRepository
from greeting_counter.adapters.sqlite_store import SqliteStore
from greeting_counter.adapters.sqlite_user_repository import SqliteUserRepository
from greeting_counter.config import Settings
from greeting_counter.services.broadcast import BroadcastHub
from greeting_counter.services.entries import EntryService
from greeting_counter.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    broadcast_hub: BroadcastHub
    entry_service: EntryService
    user_service: UserService
    open_resources: Callable[[], Awaitable[None]]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = SqliteStore.from_settings(resolved_settings)
    broadcast_hub = BroadcastHub()
    entry_service = EntryService(
        repository=SqliteEntryRepository(store),
        broadcaster=broadcast_hub,
    )
    user_service = UserService(SqliteUserRepository(store))

    async def open_resources() -> None:
        await store.initialize()

    async def close_resources() -> None:
        await broadcast_hub.close()
        await store.close()

    return AppContainer(
        settings=resolved_settings,
        broadcast_hub=broadcast_hub,
        entry_service=entry_service,
        user_service=user_service,
        open_resources=open_resources,
        close_resources=close_resources,
    )
