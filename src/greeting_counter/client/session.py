"""Client-local persistence of the logged-in user."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from greeting_counter.domain.models import UserRecord

logger = logging.getLogger(__name__)


@dataclass
class SessionStore:
    """Keeps the current user in a JSON file between runs."""

    path: Path

    def load(self) -> UserRecord | None:
        """Return the saved user; unreadable data is discarded."""
        if not self.path.exists():
            return None
        try:
            return UserRecord.from_payload(json.loads(self.path.read_text("utf-8")))
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable session at %s", self.path)
            self.clear()
            return None

    def save(self, user: UserRecord) -> None:
        """Persist the user."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(user.to_payload(), ensure_ascii=False), encoding="utf-8"
        )

    def clear(self) -> None:
        """Forget the saved user."""
        self.path.unlink(missing_ok=True)
