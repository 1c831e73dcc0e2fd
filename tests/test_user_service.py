"""Tests for user service."""

import asyncio

import pytest

from greeting_counter.domain.errors import UserValidationError
from greeting_counter.services.users import NAME_REQUIRED_MESSAGE, UserService
from tests.conftest import InMemoryUserRepository


def test_register_generates_unique_ids() -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    first = asyncio.run(service.register("Alice"))
    second = asyncio.run(service.register("Alice"))

    assert first.name == "Alice"
    assert first.id != second.id
    assert set(repository.users) == {first.id, second.id}


@pytest.mark.parametrize("name", ["", "   "])
def test_register_rejects_blank_name(name: str) -> None:
    repository = InMemoryUserRepository()
    service = UserService(repository)

    with pytest.raises(UserValidationError, match=NAME_REQUIRED_MESSAGE):
        asyncio.run(service.register(name))

    assert repository.users == {}


def test_get_user_returns_none_for_unknown_id() -> None:
    service = UserService(InMemoryUserRepository())

    assert asyncio.run(service.get_user("nonexistent")) is None
