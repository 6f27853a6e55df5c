"""State synchronisation — derive NPC mood and player money from the log tail.

Sync never runs on its own. Callers request it together with a direct update
(`update_npc(..., sync_from_logs=True)`), and the direct update is committed
first: a derived value overwrites a value the caller just set for the same
field.

Mood: the feeling of the newest of the 5 most recent NPC log entries.

Money: of the 5 most recent player log entries only the newest is consulted;
its `data.moneyChange` is added to `stats.money`. The id of that entry is kept
in `stats.lastMoneySyncId` so syncing again without a new entry adds nothing.
"""

from __future__ import annotations

import logging
from typing import Any

from storyline.models import NPC, Player, Stats
from storyline.storage import NotFoundError, Storage

logger = logging.getLogger(__name__)

SYNC_WINDOW = 5


def sync_npc_mood(storage: Storage, npc_id: str) -> NPC:
    npc = storage.require_npc(npc_id)
    logs = storage.recent_npc_events(npc_id, limit=SYNC_WINDOW)
    if not logs:
        return npc
    # The newest entry wins even without a feeling: mood is cleared
    updated = storage.update_npc(npc_id, {"mood": logs[0].feeling})
    if updated is None:
        raise NotFoundError(f"NPC {npc_id!r} not found")
    logger.info("npc %s mood synced to %r", npc_id, updated.mood)
    return updated


def _money_delta(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            logger.warning("ignoring non-integral moneyChange %r", value)
            return None
        return int(value)
    return value


def sync_player_money(storage: Storage, player_id: str) -> Player:
    player = storage.require_player(player_id)
    logs = storage.recent_player_events(player_id, limit=SYNC_WINDOW)
    if not logs:
        return player
    latest = logs[0]
    if latest.id is not None and latest.id == player.stats.last_money_sync_id:
        logger.debug("player %s already synced from %s", player_id, latest.id)
        return player
    delta = _money_delta(latest.data.money_change) if latest.data else None
    if not delta:
        return player
    stats = Stats(money=player.stats.money + delta, last_money_sync_id=latest.id)
    updated = storage.update_player(player_id, {"stats": stats.to_doc()})
    if updated is None:
        raise NotFoundError(f"Player {player_id!r} not found")
    logger.info("player %s money %+d -> %d", player_id, delta, updated.stats.money)
    return updated


def update_npc(
    storage: Storage, npc_id: str, fields: dict[str, Any], *, sync_from_logs: bool = False
) -> NPC:
    """Apply a direct update, then optionally re-derive mood from the log."""
    npc = storage.update_npc(npc_id, fields)
    if npc is None:
        raise NotFoundError(f"NPC {npc_id!r} not found")
    if sync_from_logs:
        npc = sync_npc_mood(storage, npc_id)
    return npc


def update_player(
    storage: Storage, player_id: str, fields: dict[str, Any], *, sync_from_logs: bool = False
) -> Player:
    """Apply a direct update, then optionally fold the latest moneyChange in."""
    stats = fields.get("stats")
    if isinstance(stats, dict) and "lastMoneySyncId" not in stats:
        # A caller rewriting stats must not make the last entry count twice
        current = storage.require_player(player_id)
        if current.stats.last_money_sync_id is not None:
            fields = {**fields, "stats": {**stats, "lastMoneySyncId": current.stats.last_money_sync_id}}
    player = storage.update_player(player_id, fields)
    if player is None:
        raise NotFoundError(f"Player {player_id!r} not found")
    if sync_from_logs:
        player = sync_player_money(storage, player_id)
    return player
