"""Entry posting, deduplication and broadcast logic."""

from dataclasses import dataclass
from typing import Protocol

from greeting_counter.domain.errors import EntryValidationError
from greeting_counter.domain.models import EntryRecord
from greeting_counter.services.broadcast import ENTRY_CREATED_EVENT, Broadcaster

KEYWORD_FORMS = ("だいたいロマ子", "大体ロマ子")

TEXT_REQUIRED_MESSAGE = "Validation error: Text is required"
KEYWORD_REQUIRED_MESSAGE = 'Text must contain "だいたいロマ子" or "大体ロマ子"'


def contains_keyword(text: str) -> bool:
    """Return True when the text includes any accepted keyword form."""
    return any(keyword in text for keyword in KEYWORD_FORMS)


class EntryRepository(Protocol):
    """Persistence interface for entries."""

    async def create_or_update_entry(
        self, text: str, user_id: str | None = None, user_name: str | None = None
    ) -> EntryRecord:
        """Insert a new entry or increment the one with the same text."""

    async def get_all_entries(self) -> list[EntryRecord]:
        """Return entries, most recently updated first."""

    async def get_ranking(self) -> list[EntryRecord]:
        """Return entries by count, ties broken by most recent update."""


@dataclass
class EntryService:
    """Application service for posting and reading entries."""

    repository: EntryRepository
    broadcaster: Broadcaster

    async def post_entry(
        self, text: str, user_id: str | None = None, user_name: str | None = None
    ) -> EntryRecord:
        """Validate, store and broadcast a post."""
        if not text or not text.strip():
            raise EntryValidationError(TEXT_REQUIRED_MESSAGE)
        if not contains_keyword(text):
            raise EntryValidationError(KEYWORD_REQUIRED_MESSAGE)
        entry = await self.repository.create_or_update_entry(text, user_id, user_name)
        self.broadcaster.publish(ENTRY_CREATED_EVENT, entry.to_payload())
        return entry

    async def list_entries(self) -> list[EntryRecord]:
        """Return all entries for the list view."""
        return await self.repository.get_all_entries()

    async def ranking(self) -> list[EntryRecord]:
        """Return all entries for the ranking view."""
        return await self.repository.get_ranking()
