"""User-related business logic."""

from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from greeting_counter.domain.errors import UserValidationError
from greeting_counter.domain.models import UserRecord

NAME_REQUIRED_MESSAGE = "Validation error: Name is required"


class UserRepository(Protocol):
    """Persistence interface for user data."""

    async def create_user(self, user_id: str, name: str) -> UserRecord:
        """Create or replace the user with this id and return it."""

    async def get_user(self, user_id: str) -> UserRecord | None:
        """Return the user for an id, if present."""


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository

    async def register(self, name: str) -> UserRecord:
        """Register a display name under a freshly generated id."""
        if not name or not name.strip():
            raise UserValidationError(NAME_REQUIRED_MESSAGE)
        return await self.repository.create_user(str(uuid4()), name)

    async def get_user(self, user_id: str) -> UserRecord | None:
        """Return a registered user, if present."""
        return await self.repository.get_user(user_id)
