"""Typed entity repository over the JSON document store.

Everything above this module works with the pydantic models from
`storyline.models`; everything below it works with plain dicts. Lookups by a
caller-assigned id return None when the record is absent — callers that need
the record raise NotFoundError themselves (see `require_player`/`require_npc`).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from storyline import store
from storyline.models import (
    NPC,
    Document,
    Inventory,
    Memory,
    NPCEvent,
    Player,
    PlayerEvent,
)
from storyline.store import DocumentStore

logger = logging.getLogger(__name__)


class NotFoundError(LookupError):
    """Raised when a referenced player or NPC does not exist."""


def _wire_patch(model: type[Document], fields: dict[str, Any]) -> dict[str, Any]:
    """Rename snake_case keys in `fields` to their wire aliases."""
    aliases = {name: info.alias or name for name, info in model.model_fields.items()}
    return {aliases.get(k, k): v for k, v in fields.items()}


class Storage:
    def __init__(self, base_path: Path) -> None:
        self._docs = DocumentStore(base_path)

    @property
    def docs(self) -> DocumentStore:
        return self._docs

    @property
    def base_path(self) -> Path:
        return self._docs.base_path

    def _update(
        self,
        model: type[Document],
        collection: str,
        key: str,
        key_value: str,
        fields: dict[str, Any],
    ) -> Any:
        existing = self._docs.find_one(collection, {key: key_value})
        if existing is None:
            return None
        patch = _wire_patch(model, fields)
        patch.pop(key, None)
        # Validate the merged document so a bad field never reaches disk
        merged = model.model_validate({**existing, **patch}).model_dump(mode="json", by_alias=True)
        # Keep explicit nulls so a patch can clear an optional field
        applied = {k: merged[k] for k in patch if k in merged}
        updated = self._docs.update_one(collection, {key: key_value}, applied)
        return model.model_validate(updated)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def create_player(self, player: Player) -> Player:
        return Player.model_validate(self._docs.create(store.PLAYERS, player.to_doc()))

    def get_player(self, player_id: str) -> Player | None:
        doc = self._docs.find_one(store.PLAYERS, {"playerId": player_id})
        return Player.model_validate(doc) if doc else None

    def require_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if player is None:
            raise NotFoundError(f"Player {player_id!r} not found")
        return player

    def update_player(self, player_id: str, fields: dict[str, Any]) -> Player | None:
        """Overwrite top-level player fields. Returns None if the player is missing."""
        return self._update(Player, store.PLAYERS, "playerId", player_id, fields)

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def get_inventory(self, player_id: str) -> Inventory:
        """Return the stored inventory, or an empty one (not persisted)."""
        doc = self._docs.find_one(store.INVENTORIES, {"playerId": player_id})
        if doc is None:
            return Inventory(player_id=player_id)
        return Inventory.model_validate(doc)

    def save_inventory(self, inventory: Inventory) -> Inventory:
        """Upsert the whole inventory. Last write wins; items are not merged."""
        doc = self._docs.upsert(
            store.INVENTORIES, {"playerId": inventory.player_id}, inventory.to_doc()
        )
        return Inventory.model_validate(doc)

    # ------------------------------------------------------------------
    # NPCs
    # ------------------------------------------------------------------

    def create_npc(self, npc: NPC) -> NPC:
        return NPC.model_validate(self._docs.create(store.NPCS, npc.to_doc()))

    def get_npc(self, npc_id: str) -> NPC | None:
        doc = self._docs.find_one(store.NPCS, {"npcId": npc_id})
        return NPC.model_validate(doc) if doc else None

    def require_npc(self, npc_id: str) -> NPC:
        npc = self.get_npc(npc_id)
        if npc is None:
            raise NotFoundError(f"NPC {npc_id!r} not found")
        return npc

    def list_npcs(self, limit: int | None = None) -> list[NPC]:
        return [NPC.model_validate(d) for d in self._docs.find_many(store.NPCS, limit=limit)]

    def update_npc(self, npc_id: str, fields: dict[str, Any]) -> NPC | None:
        """Overwrite top-level NPC fields. Returns None if the NPC is missing."""
        return self._update(NPC, store.NPCS, "npcId", npc_id, fields)

    def append_memory(self, npc_id: str, memory: Memory) -> bool:
        """Atomically append a memory. Returns False when the NPC doesn't exist."""
        return self._docs.push(store.NPCS, {"npcId": npc_id}, "memories", memory.to_doc())

    # ------------------------------------------------------------------
    # Event logs (append-only)
    # ------------------------------------------------------------------

    def add_player_event(self, event: PlayerEvent) -> PlayerEvent:
        doc = self._docs.create(store.PLAYER_EVENTS, event.to_doc())
        return PlayerEvent.model_validate(doc)

    def recent_player_events(self, player_id: str, limit: int) -> list[PlayerEvent]:
        """Most recent player events, newest first."""
        docs = self._docs.find_many(
            store.PLAYER_EVENTS, {"playerId": player_id}, sort_desc="timestamp", limit=limit
        )
        return [PlayerEvent.model_validate(d) for d in docs]

    def add_npc_event(self, event: NPCEvent) -> NPCEvent:
        doc = self._docs.create(store.NPC_EVENTS, event.to_doc())
        return NPCEvent.model_validate(doc)

    def recent_npc_events(self, npc_id: str, limit: int) -> list[NPCEvent]:
        """Most recent NPC events, newest first."""
        docs = self._docs.find_many(
            store.NPC_EVENTS, {"npcId": npc_id}, sort_desc="timestamp", limit=limit
        )
        return [NPCEvent.model_validate(d) for d in docs]
