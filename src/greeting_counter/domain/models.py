"""Domain models for the greeting counter."""

from dataclasses import dataclass
from datetime import datetime


def _parse_timestamp(value: object) -> datetime:
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class UserRecord:
    """A named session identity without credentials."""

    id: str
    name: str
    created_at: datetime

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "UserRecord":
        """Parse the JSON shape returned by the API."""
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            created_at=_parse_timestamp(payload["createdAt"]),
        )

    def to_payload(self) -> dict[str, object]:
        """Return the JSON shape exposed to clients."""
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class EntryRecord:
    """A post deduplicated by exact text with its repeat count."""

    id: int
    text: str
    count: int
    created_at: datetime
    updated_at: datetime
    user_id: str | None
    user_name: str | None

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "EntryRecord":
        """Parse an entry from an API response or broadcast event."""
        return cls(
            id=int(payload["id"]),
            text=str(payload["text"]),
            count=int(payload["count"]),
            created_at=_parse_timestamp(payload["createdAt"]),
            updated_at=_parse_timestamp(payload["updatedAt"]),
            user_id=payload.get("userId"),
            user_name=payload.get("userName"),
        )

    def to_payload(self) -> dict[str, object]:
        """Return the JSON shape exposed to clients and broadcast events."""
        return {
            "id": self.id,
            "text": self.text,
            "count": self.count,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "userId": self.user_id,
            "userName": self.user_name,
        }
