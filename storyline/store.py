"""JSON document store.

All state is stored in flat JSON files under a configurable base directory,
one file per collection. There is no database or ORM — reads and writes go
through plain helper methods that load and dump JSON.

Directory layout:

    {base}/
      players.json        ← list of Player documents
      inventories.json    ← list of Inventory documents
      npcs.json           ← list of NPC documents
      player_events.json  ← append-only PlayerEvent stream
      npc_events.json     ← append-only NPCEvent stream

Documents are plain dicts keyed by their wire (camelCase) field names. The
store knows nothing about the models in `storyline.models`; it only enforces
unique keys on the entity collections and assigns an `id` to event documents.

Every public method takes the store lock, so `push()` is an atomic append
within a process.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

PLAYERS = "players"
INVENTORIES = "inventories"
NPCS = "npcs"
PLAYER_EVENTS = "player_events"
NPC_EVENTS = "npc_events"

COLLECTIONS = (PLAYERS, INVENTORIES, NPCS, PLAYER_EVENTS, NPC_EVENTS)

# collection → unique key field
UNIQUE_KEYS = {
    PLAYERS: "playerId",
    INVENTORIES: "playerId",
    NPCS: "npcId",
}

EVENT_COLLECTIONS = (PLAYER_EVENTS, NPC_EVENTS)

_MIN_TS = datetime.min.replace(tzinfo=timezone.utc)


class StoreError(RuntimeError):
    """Raised when the underlying files cannot be read or written."""


class DuplicateKeyError(StoreError):
    """Raised by create() when the unique key is already taken."""


def _sort_key(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            return _MIN_TS
    else:
        return _MIN_TS
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _matches(doc: dict[str, Any], filter: dict[str, Any] | None) -> bool:
    if not filter:
        return True
    return all(doc.get(k) == v for k, v in filter.items())


class DocumentStore:
    def __init__(self, base_path: Path) -> None:
        self._base = base_path
        self._base.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    @property
    def base_path(self) -> Path:
        return self._base

    # ------------------------------------------------------------------
    # Internal path helpers
    # ------------------------------------------------------------------

    def _path(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection {collection!r}")
        return self._base / f"{collection}.json"

    def _read_json(self, path: Path) -> Any:
        try:
            return json.loads(path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {path.name}: {e}") from e

    def _write_json(self, path: Path, data: Any) -> None:
        try:
            path.write_text(json.dumps(data, indent=2))
        except (OSError, TypeError) as e:
            raise StoreError(f"Cannot write {path.name}: {e}") from e

    def _load(self, collection: str) -> list[dict[str, Any]]:
        path = self._path(collection)
        if not path.exists():
            return []
        return self._read_json(path)

    def _save(self, collection: str, docs: list[dict[str, Any]]) -> None:
        self._write_json(self._path(collection), docs)

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def create(self, collection: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document and return the stored copy."""
        with self._lock:
            docs = self._load(collection)
            key = UNIQUE_KEYS.get(collection)
            if key is not None and any(d.get(key) == doc.get(key) for d in docs):
                raise DuplicateKeyError(f"{key} {doc.get(key)!r} already exists")
            stored = dict(doc)
            if collection in EVENT_COLLECTIONS and not stored.get("id"):
                stored["id"] = uuid.uuid4().hex
            docs.append(stored)
            self._save(collection, docs)
            return dict(stored)

    def find_one(self, collection: str, filter: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            for doc in self._load(collection):
                if _matches(doc, filter):
                    return doc
        return None

    def find_many(
        self,
        collection: str,
        filter: dict[str, Any] | None = None,
        *,
        sort_desc: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Return matching documents.

        With `sort_desc`, documents are ordered by that timestamp field, newest
        first; documents with equal timestamps come back most-recently-inserted
        first.
        """
        with self._lock:
            docs = [d for d in self._load(collection) if _matches(d, filter)]
        if sort_desc:
            docs = sorted(
                reversed(docs), key=lambda d: _sort_key(d.get(sort_desc)), reverse=True
            )
        if limit is not None:
            docs = docs[:limit]
        return docs

    def update_one(
        self, collection: str, filter: dict[str, Any], patch: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Shallow-merge `patch` into the first matching document."""
        with self._lock:
            docs = self._load(collection)
            for doc in docs:
                if _matches(doc, filter):
                    doc.update(patch)
                    self._save(collection, docs)
                    return dict(doc)
        return None

    def push(
        self, collection: str, filter: dict[str, Any], field: str, value: Any
    ) -> bool:
        """Append `value` to a list field of the first matching document."""
        with self._lock:
            docs = self._load(collection)
            for doc in docs:
                if _matches(doc, filter):
                    doc.setdefault(field, []).append(value)
                    self._save(collection, docs)
                    return True
        return False

    def upsert(
        self, collection: str, filter: dict[str, Any], doc: dict[str, Any]
    ) -> dict[str, Any]:
        """Replace the first matching document wholesale, or insert it."""
        stored = {**doc, **filter}
        with self._lock:
            docs = self._load(collection)
            for i, existing in enumerate(docs):
                if _matches(existing, filter):
                    docs[i] = stored
                    break
            else:
                docs.append(stored)
            self._save(collection, docs)
        return dict(stored)

    def delete_many(self, collection: str, filter: dict[str, Any] | None = None) -> int:
        """Remove matching documents. Returns how many were removed."""
        with self._lock:
            docs = self._load(collection)
            kept = [d for d in docs if not _matches(d, filter)]
            removed = len(docs) - len(kept)
            if removed:
                self._save(collection, kept)
        if removed:
            logger.debug("deleted %d doc(s) from %s", removed, collection)
        return removed
