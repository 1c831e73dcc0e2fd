"""SQLite implementation for deduplicated entries."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import RowMapping

from greeting_counter.adapters.sqlite_store import (
    SqliteStore,
    as_utc,
    entries_table,
    utcnow,
)
from greeting_counter.adapters.sqlite_user_repository import upsert_user
from greeting_counter.domain.errors import RetrievalError
from greeting_counter.domain.models import EntryRecord
from greeting_counter.services.entries import EntryRepository


@dataclass
class SqliteEntryRepository(EntryRepository):
    """SQLite-backed repository keyed on exact entry text."""

    store: SqliteStore

    async def create_or_update_entry(
        self, text: str, user_id: str | None = None, user_name: str | None = None
    ) -> EntryRecord:
        """Insert the text with count 1 or bump the existing row by one.

        The poster identity always overwrites the previous one, including
        with NULL for anonymous repeats. When both id and name are given the
        user row is upserted first, in the same transaction.
        """
        now = utcnow()
        statement = insert(entries_table).values(
            text=text,
            count=1,
            user_id=user_id,
            user_name=user_name,
            created_at=now,
            updated_at=now,
        )
        statement = statement.on_conflict_do_update(
            index_elements=[entries_table.c.text],
            set_={
                "count": entries_table.c["count"] + 1,
                "updated_at": now,
                "user_id": statement.excluded.user_id,
                "user_name": statement.excluded.user_name,
            },
        )
        async with self.store.begin() as connection:
            if user_id and user_name:
                await upsert_user(connection, user_id, user_name)
            await connection.execute(statement)
            result = await connection.execute(
                select(entries_table).where(entries_table.c.text == text).limit(1)
            )
            row = result.mappings().first()
        if row is None:
            raise RetrievalError("Failed to retrieve saved entry")
        return _parse_entry(row)

    async def get_all_entries(self) -> list[EntryRecord]:
        """Return all entries, most recently updated first."""
        return await self._list(
            entries_table.c.updated_at.desc(),
            entries_table.c.id.desc(),
        )

    async def get_ranking(self) -> list[EntryRecord]:
        """Return all entries by count, then most recently updated."""
        return await self._list(
            entries_table.c["count"].desc(),
            entries_table.c.updated_at.desc(),
            entries_table.c.id.desc(),
        )

    async def _list(self, *order_by) -> list[EntryRecord]:  # type: ignore[no-untyped-def]
        async with self.store.connect() as connection:
            result = await connection.execute(
                select(entries_table).order_by(*order_by)
            )
            rows = result.mappings().all()
        return [_parse_entry(row) for row in rows]


def _parse_entry(row: RowMapping) -> EntryRecord:
    """Parse an entries row into a domain model."""
    return EntryRecord(
        id=int(row["id"]),
        text=str(row["text"]),
        count=int(row["count"]),
        created_at=as_utc(row["created_at"]),
        updated_at=as_utc(row["updated_at"]),
        user_id=row["user_id"],
        user_name=row["user_name"],
    )
