"""Live-merged entry lists for the list and ranking views."""

from dataclasses import dataclass, field

from greeting_counter.domain.models import EntryRecord

LIST_VIEW = "list"
RANKING_VIEW = "ranking"


def _list_key(entry: EntryRecord) -> tuple:
    return (entry.updated_at,)


def _ranking_key(entry: EntryRecord) -> tuple:
    return (entry.count, entry.updated_at)


_SORT_KEYS = {LIST_VIEW: _list_key, RANKING_VIEW: _ranking_key}


@dataclass
class EntryBoard:
    """Entries for one view, kept sorted as broadcast events arrive."""

    kind: str
    entries: list[EntryRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.kind not in _SORT_KEYS:
            raise ValueError(f"Unknown board kind: {self.kind}")

    def replace_all(self, entries: list[EntryRecord]) -> None:
        """Take a full fetch as the new contents, in server order."""
        self.entries = list(entries)

    def merge(self, incoming: EntryRecord) -> None:
        """Replace the entry with the same text, or add it, then re-sort."""
        entries = list(self.entries)
        for index, entry in enumerate(entries):
            if entry.text == incoming.text:
                entries[index] = incoming
                break
        else:
            entries.append(incoming)
        self.entries = sorted(entries, key=_SORT_KEYS[self.kind], reverse=True)


def rank_label(rank: int) -> str:
    """Return the medal or ordinal shown beside a ranking row."""
    return {1: "🥇", 2: "🥈", 3: "🥉"}.get(rank, f"{rank}位")
