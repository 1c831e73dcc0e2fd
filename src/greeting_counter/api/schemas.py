"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _string_or_none(value: object) -> str | None:
    return value if isinstance(value, str) else None


class CreateEntryRequest(BaseModel):
    """Body of POST /api/entries."""

    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    user_id: str | None = Field(default=None, alias="userId")
    user_name: str | None = Field(default=None, alias="userName")

    @field_validator("text", "user_id", "user_name", mode="before")
    @classmethod
    def _ignore_non_strings(cls, value: object) -> str | None:
        """Treat anything but a string as missing."""
        return _string_or_none(value)


class CreateUserRequest(BaseModel):
    """Body of POST /api/users."""

    name: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _ignore_non_strings(cls, value: object) -> str | None:
        """Treat anything but a string as missing."""
        return _string_or_none(value)
