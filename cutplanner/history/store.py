"""History store: past calculations, newest first, persisted as one JSON document.

The store owns the entry list. Every mutation rewrites the whole document
through the injected backend. Persistence is best-effort: read failures start
an empty history and write failures are logged while the in-memory list keeps
the change.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from cutplanner.models.layout import HistoryEntry, NewHistoryEntry

logger = logging.getLogger(__name__)


def encode_entries(entries: list[HistoryEntry]) -> str:
    return json.dumps(
        [e.model_dump(mode="json", by_alias=True) for e in entries],
        ensure_ascii=False,
    )


def decode_entries(raw: str | None) -> list[HistoryEntry]:
    """Decode a persisted document, discarding whatever cannot be read."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Could not parse stored history: %s", e)
        return []
    if not isinstance(data, list):
        logger.error("Stored history is not a list (got %s)", type(data).__name__)
        return []

    entries: list[HistoryEntry] = []
    for item in data:
        try:
            entries.append(HistoryEntry.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping unreadable history entry: %s", e.errors()[:1])
    return entries


class HistoryBackend(Protocol):
    def load(self) -> list[HistoryEntry]: ...

    def save(self, entries: list[HistoryEntry]) -> None: ...


class JsonFileBackend:
    """Named key-value entry on disk: ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: Path, key: str = "layoutHistory") -> None:
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / f"{key}.json"

    def load(self) -> list[HistoryEntry]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            return decode_entries(f.read())

    def save(self, entries: list[HistoryEntry]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(encode_entries(entries))


class InMemoryBackend:
    """Keeps the serialized document in memory. Used by tests."""

    def __init__(self, raw: str | None = None) -> None:
        self.raw = raw
        self.writes = 0

    def load(self) -> list[HistoryEntry]:
        return decode_entries(self.raw)

    def save(self, entries: list[HistoryEntry]) -> None:
        self.raw = encode_entries(entries)
        self.writes += 1


def _now_iso() -> str:
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


class HistoryStore:
    def __init__(self, backend: HistoryBackend) -> None:
        self.backend = backend
        try:
            self._entries = backend.load()
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Could not read history, starting empty: %s", e)
            self._entries = []
        logger.debug("Loaded %d history entries", len(self._entries))

    @property
    def entries(self) -> list[HistoryEntry]:
        return list(self._entries)

    def get(self, entry_id: str) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def add(self, entry: NewHistoryEntry) -> HistoryEntry:
        """Stamp a fresh id and timestamp and put the entry at the head."""
        created = HistoryEntry(
            id=str(uuid.uuid4()),
            timestamp=_now_iso(),
            board=entry.board,
            pieces=entry.pieces,
            layout=entry.layout,
        )
        self._entries = [created, *self._entries]
        self._persist()
        logger.info("Recorded history entry %s", created.id)
        return created

    def update(self, entry: HistoryEntry) -> bool:
        """Replace the entry with the same id. Returns False if there is none."""
        if self.get(entry.id) is None:
            return False
        self._entries = [entry if e.id == entry.id else e for e in self._entries]
        self._persist()
        return True

    def remove(self, entry_id: str) -> bool:
        if self.get(entry_id) is None:
            return False
        self._entries = [e for e in self._entries if e.id != entry_id]
        self._persist()
        return True

    def clear(self) -> None:
        self._entries = []
        self._persist()

    def _persist(self) -> None:
        try:
            self.backend.save(self._entries)
        except OSError as e:
            logger.error("Could not save history: %s", e)


class EntrySummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    placed_count: int
    unplaced_count: int
    waste_pct: float


def summarize_entry(entry: HistoryEntry) -> EntrySummary:
    """Counts plus approximate waste; a zero-area board is all waste."""
    board_area = entry.board.area
    if board_area == 0:
        waste = 100.0
    else:
        used = sum(p.area for p in entry.layout.placed_pieces)
        waste = round((board_area - used) / board_area * 100, 2)
    return EntrySummary(
        placed_count=len(entry.layout.placed_pieces),
        unplaced_count=len(entry.layout.unplaced_pieces),
        waste_pct=waste,
    )


# Singleton
_store: HistoryStore | None = None


def get_history_store() -> HistoryStore:
    """Get or create the global HistoryStore singleton."""
    global _store
    if _store is None:
        from cutplanner.config import settings

        _store = HistoryStore(JsonFileBackend(settings.history_dir, settings.history_key))
    return _store
