"""REST and WebSocket endpoints for entries and users."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, WebSocket, status
from fastapi.responses import JSONResponse

from greeting_counter.api.schemas import CreateEntryRequest, CreateUserRequest
from greeting_counter.domain.errors import EntryValidationError, UserValidationError

if TYPE_CHECKING:
    from greeting_counter.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

INTERNAL_ERROR_MESSAGE = "Internal server error"


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "message": message}
    )


def _internal_error() -> JSONResponse:
    return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


@router.post("/entries", response_model=None)
async def create_entry(
    payload: CreateEntryRequest, request: Request
) -> dict[str, object] | JSONResponse:
    """Post a text; repeats of an existing text bump its count."""
    container = _container(request)
    try:
        entry = await container.entry_service.post_entry(
            payload.text or "", payload.user_id, payload.user_name
        )
    except EntryValidationError as exc:
        return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception:
        logger.exception("Error creating entry")
        return _internal_error()
    return {
        "success": True,
        "message": "Entry saved successfully",
        "entry": entry.to_payload(),
    }


@router.get("/entries", response_model=None)
async def list_entries(request: Request) -> list[dict[str, object]] | JSONResponse:
    """Return every entry, most recently updated first."""
    try:
        entries = await _container(request).entry_service.list_entries()
    except Exception:
        logger.exception("Error fetching entries")
        return _internal_error()
    return [entry.to_payload() for entry in entries]


@router.get("/ranking", response_model=None)
async def ranking(request: Request) -> list[dict[str, object]] | JSONResponse:
    """Return every entry ordered by count."""
    try:
        entries = await _container(request).entry_service.ranking()
    except Exception:
        logger.exception("Error fetching ranking")
        return _internal_error()
    return [entry.to_payload() for entry in entries]


@router.post("/users", response_model=None)
async def create_user(
    payload: CreateUserRequest, request: Request
) -> dict[str, object] | JSONResponse:
    """Register a display name under a new id."""
    try:
        user = await _container(request).user_service.register(payload.name or "")
    except UserValidationError as exc:
        return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
    except Exception:
        logger.exception("Error creating user")
        return _internal_error()
    return {
        "success": True,
        "message": "User created successfully",
        "user": user.to_payload(),
    }


@router.get("/users/{user_id}", response_model=None)
async def get_user(user_id: str, request: Request) -> dict[str, object] | JSONResponse:
    """Look up a registered user."""
    try:
        user = await _container(request).user_service.get_user(user_id)
    except Exception:
        logger.exception("Error fetching user")
        return _internal_error()
    if user is None:
        return _failure(status.HTTP_404_NOT_FOUND, "User not found")
    return {"success": True, "message": "User found", "user": user.to_payload()}


@router.get("/health")
async def health(request: Request) -> dict[str, str]:
    """Simple health check endpoint."""
    title = _container(request).settings.app_title
    return {"status": "OK", "message": f"{title} API is running"}


@router.websocket("/ws")
async def entry_feed(websocket: WebSocket) -> None:
    """Stream entryCreated events to the connected client."""
    container: AppContainer = websocket.app.state.container
    hub = container.broadcast_hub
    subscription = await hub.connect(websocket)
    try:
        await subscription.serve()
    finally:
        hub.disconnect(subscription)
