"""HTTP client for the greeting counter REST API."""

from dataclasses import dataclass

import httpx

from greeting_counter.domain.models import EntryRecord, UserRecord

DEFAULT_TIMEOUT = 10


class ApiError(Exception):
    """Raised for any non-2xx API response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class CounterApiClient:
    """Greeting counter API client implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "CounterApiClient":
        """Create a client with a managed httpx session rooted at /api."""
        return cls(
            http_client=httpx.AsyncClient(
                base_url=f"{base_url.rstrip('/')}/api", timeout=DEFAULT_TIMEOUT
            )
        )

    async def create_entry(
        self, text: str, user_id: str | None = None, user_name: str | None = None
    ) -> EntryRecord:
        """Post a text and return the stored entry."""
        payload: dict[str, object] = {"text": text}
        if user_id is not None:
            payload["userId"] = user_id
        if user_name is not None:
            payload["userName"] = user_name
        data = await self._request("POST", "/entries", json=payload)
        return EntryRecord.from_payload(data["entry"])

    async def list_entries(self) -> list[EntryRecord]:
        """Return entries, most recently updated first."""
        data = await self._request("GET", "/entries")
        return [EntryRecord.from_payload(row) for row in data]

    async def get_ranking(self) -> list[EntryRecord]:
        """Return entries ordered by count."""
        data = await self._request("GET", "/ranking")
        return [EntryRecord.from_payload(row) for row in data]

    async def create_user(self, name: str) -> UserRecord:
        """Register a display name."""
        data = await self._request("POST", "/users", json={"name": name})
        return UserRecord.from_payload(data["user"])

    async def get_user(self, user_id: str) -> UserRecord:
        """Fetch a registered user; unknown ids raise ApiError with 404."""
        data = await self._request("GET", f"/users/{user_id}")
        return UserRecord.from_payload(data["user"])

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> object:  # type: ignore[no-untyped-def]
        response = await self.http_client.request(method, path, **kwargs)
        if response.is_success:
            return response.json()
        raise ApiError(response.status_code, _error_message(response))


def _error_message(response: httpx.Response) -> str:
    """Return the envelope message, falling back to the status line."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return f"HTTP {response.status_code}"
