"""SQLite store shared by the repositories."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager, nullcontext
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    event,
)
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from greeting_counter.config import Settings

logger = logging.getLogger(__name__)

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)

entries_table = Table(
    "entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("text", Text, nullable=False, unique=True),
    Column("count", Integer, nullable=False, default=1),
    Column("user_id", String, ForeignKey("users.id"), nullable=True),
    Column("user_name", Text, nullable=True),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    sqlite_autoincrement=True,
)


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to the naive datetimes SQLite hands back."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@dataclass
class SqliteStore:
    """Owns the async engine and the one-time schema creation.

    An in-memory database lives on a single DBAPI connection, so checkouts
    are serialized: a transaction returned to the pool is rolled back, and
    interleaving would discard another coroutine's uncommitted writes.
    """

    engine: AsyncEngine
    shared_connection: bool = False
    _initialized: bool = field(default=False, init=False)
    _init_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _checkout_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)

    @classmethod
    def create(cls, url: str) -> "SqliteStore":
        """Create a store for a SQLAlchemy aiosqlite URL."""
        if url.endswith(":memory:"):
            # One shared connection, otherwise each checkout sees an empty database.
            engine = create_async_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
            shared = True
        else:
            engine = create_async_engine(url)
            shared = False
        event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
        return cls(engine=engine, shared_connection=shared)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqliteStore":
        """Create the store selected by the application settings."""
        return cls.create(settings.database_url())

    @classmethod
    def in_memory(cls) -> "SqliteStore":
        """Create an ephemeral store that lives as long as this object."""
        return cls.create("sqlite+aiosqlite:///:memory:")

    async def initialize(self) -> None:
        """Create the schema once; concurrent callers wait for the first."""
        if self._initialized:
            return
        async with self._init_lock:
            if self._initialized:
                return
            async with self._checkout(), self.engine.begin() as connection:
                await connection.run_sync(metadata.create_all)
            self._initialized = True
            logger.info("Users and entries tables initialized")

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[AsyncConnection]:
        """Yield a connection inside a transaction that commits on exit."""
        await self.initialize()
        async with self._checkout(), self.engine.begin() as connection:
            yield connection

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[AsyncConnection]:
        """Yield a connection for reads."""
        await self.initialize()
        async with self._checkout(), self.engine.connect() as connection:
            yield connection

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await self.engine.dispose()

    def _checkout(self) -> AbstractAsyncContextManager[object]:
        if self.shared_connection:
            return self._checkout_lock
        return nullcontext()
