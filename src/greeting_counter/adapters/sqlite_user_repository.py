"""SQLite-backed user repository."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection

from greeting_counter.adapters.sqlite_store import (
    SqliteStore,
    as_utc,
    users_table,
    utcnow,
)
from greeting_counter.domain.errors import RetrievalError
from greeting_counter.domain.models import UserRecord
from greeting_counter.services.users import UserRepository


@dataclass
class SqliteUserRepository(UserRepository):
    """SQLite implementation for user persistence."""

    store: SqliteStore

    async def create_user(self, user_id: str, name: str) -> UserRecord:
        """Insert the user, replacing name and created_at if the id exists."""
        async with self.store.begin() as connection:
            await upsert_user(connection, user_id, name)
            row = await _select_user(connection, user_id)
        if row is None:
            raise RetrievalError("Failed to retrieve user")
        return _parse_user(row)

    async def get_user(self, user_id: str) -> UserRecord | None:
        """Return the user for an id, if present."""
        async with self.store.connect() as connection:
            row = await _select_user(connection, user_id)
        if row is None:
            return None
        return _parse_user(row)


async def upsert_user(connection: AsyncConnection, user_id: str, name: str) -> None:
    """Write a user row; an existing id is fully replaced."""
    now = utcnow()
    statement = insert(users_table).values(id=user_id, name=name, created_at=now)
    statement = statement.on_conflict_do_update(
        index_elements=[users_table.c.id],
        set_={"name": statement.excluded.name, "created_at": now},
    )
    await connection.execute(statement)


async def _select_user(connection: AsyncConnection, user_id: str) -> RowMapping | None:
    result = await connection.execute(
        select(users_table).where(users_table.c.id == user_id).limit(1)
    )
    return result.mappings().first()


def _parse_user(row: RowMapping) -> UserRecord:
    """Parse a users row into a domain model."""
    return UserRecord(
        id=str(row["id"]),
        name=str(row["name"]),
        created_at=as_utc(row["created_at"]),
    )
