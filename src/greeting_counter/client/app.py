"""Tab, session and live-update state for a greeting counter client."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from greeting_counter.client.api_client import ApiError, CounterApiClient
from greeting_counter.client.board import LIST_VIEW, RANKING_VIEW, EntryBoard
from greeting_counter.client.feed import FeedConnection, WebSocketFeed
from greeting_counter.client.session import SessionStore
from greeting_counter.domain.models import EntryRecord, UserRecord

logger = logging.getLogger(__name__)

POST_TAB = "post"
TABS = (POST_TAB, LIST_VIEW, RANKING_VIEW)

LOGIN_REQUIRED_MESSAGE = "ログインが必要です"
TEXT_REQUIRED_MESSAGE = "テキストを入力してください"
SAVED_MESSAGE = "保存されました！"
GENERIC_ERROR_MESSAGE = "エラーが発生しました"
LOGIN_ERROR_MESSAGE = "ユーザー作成中にエラーが発生しました"
FETCH_ERROR_MESSAGES = {
    LIST_VIEW: "データの取得に失敗しました",
    RANKING_VIEW: "ランキングの取得に失敗しました",
}


@dataclass
class PostResult:
    """Outcome shown under the post form."""

    ok: bool
    message: str


@dataclass
class CounterClientApp:
    """Client state machine over the post, list and ranking tabs.

    ``refresh_key`` goes up once per successful local post; a list or
    ranking view loaded under an older key is refetched in full the next
    time it is shown. Broadcast events are merged in place instead.
    """

    api: CounterApiClient
    session_store: SessionStore
    feed: FeedConnection
    tab: str = POST_TAB
    refresh_key: int = 0
    current_user: UserRecord | None = None
    connected: bool = False
    login_error: str = ""
    boards: dict[str, EntryBoard] = field(
        default_factory=lambda: {
            LIST_VIEW: EntryBoard(LIST_VIEW),
            RANKING_VIEW: EntryBoard(RANKING_VIEW),
        }
    )
    errors: dict[str, str] = field(
        default_factory=lambda: {LIST_VIEW: "", RANKING_VIEW: ""}
    )
    loaded_keys: dict[str, int | None] = field(
        default_factory=lambda: {LIST_VIEW: None, RANKING_VIEW: None}
    )

    def __post_init__(self) -> None:
        self.feed.subscribe(self.handle_event)

    @classmethod
    def create(cls, base_url: str, session_path: str | Path) -> "CounterClientApp":
        """Build a client whose REST calls and live feed share one httpx session."""
        api = CounterApiClient.create(base_url)
        return cls(
            api=api,
            session_store=SessionStore(Path(session_path)),
            feed=WebSocketFeed(api.http_client),
        )

    async def close(self) -> None:
        """Drop the feed connection and the HTTP session."""
        if self.connected:
            await self.feed.close()
            self.connected = False
        await self.api.close()

    async def start(self) -> UserRecord | None:
        """Restore the saved session and announce it on the feed."""
        user = self.session_store.load()
        if user is not None:
            self.current_user = user
            await self._join()
        return user

    async def login(self, name: str) -> UserRecord | None:
        """Register a display name and make it the current session."""
        trimmed = name.strip()
        if not trimmed:
            return None
        self.login_error = ""
        try:
            user = await self.api.create_user(trimmed)
        except ApiError as exc:
            self.login_error = exc.message
            return None
        except httpx.HTTPError:
            logger.exception("Error creating user")
            self.login_error = LOGIN_ERROR_MESSAGE
            return None
        self.current_user = user
        self.session_store.save(user)
        await self._join()
        return user

    async def logout(self) -> None:
        """Forget the session and drop the feed connection."""
        self.current_user = None
        self.session_store.clear()
        if self.connected:
            await self.feed.close()
            self.connected = False

    async def submit(self, text: str) -> PostResult:
        """Post a text as the current user."""
        if self.current_user is None:
            return PostResult(ok=False, message=LOGIN_REQUIRED_MESSAGE)
        trimmed = text.strip()
        if not trimmed:
            return PostResult(ok=False, message=TEXT_REQUIRED_MESSAGE)
        try:
            await self.api.create_entry(
                trimmed, self.current_user.id, self.current_user.name
            )
        except ApiError as exc:
            return PostResult(ok=False, message=exc.message)
        except httpx.HTTPError:
            logger.exception("Error creating entry")
            return PostResult(ok=False, message=GENERIC_ERROR_MESSAGE)
        self.refresh_key += 1
        return PostResult(ok=True, message=SAVED_MESSAGE)

    async def select_tab(self, tab: str) -> None:
        """Switch tabs, refetching a view that is stale for the refresh key."""
        if tab not in TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.tab = tab
        if tab != POST_TAB and self.loaded_keys[tab] != self.refresh_key:
            await self.load_view(tab)

    async def load_view(self, kind: str) -> bool:
        """Fetch a list or ranking view in full; failures become inline errors."""
        if not self.connected:
            await self.feed.connect()
            self.connected = True
        fetch = self.api.list_entries if kind == LIST_VIEW else self.api.get_ranking
        try:
            entries = await fetch()
        except (ApiError, httpx.HTTPError):
            logger.exception("Error fetching %s", kind)
            self.errors[kind] = FETCH_ERROR_MESSAGES[kind]
            return False
        self.boards[kind].replace_all(entries)
        self.errors[kind] = ""
        self.loaded_keys[kind] = self.refresh_key
        return True

    async def retry(self) -> bool:
        """Manually reload the visible list or ranking view."""
        if self.tab == POST_TAB:
            return True
        return await self.load_view(self.tab)

    def handle_event(self, message: dict[str, object]) -> EntryRecord | None:
        """Merge an entryCreated frame into both views."""
        if message.get("event") != "entryCreated":
            return None
        data = message.get("data")
        if not isinstance(data, dict):
            return None
        entry = EntryRecord.from_payload(data)
        for board in self.boards.values():
            board.merge(entry)
        return entry

    def entries(self, kind: str) -> list[EntryRecord]:
        """Return the current contents of a view."""
        return self.boards[kind].entries

    async def _join(self) -> None:
        if not self.connected:
            await self.feed.connect()
            self.connected = True
        user = self.current_user
        if user is not None:
            await self.feed.send(
                {"event": "join", "data": {"userId": user.id, "userName": user.name}}
            )
