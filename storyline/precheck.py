"""Precheck — decides whether a proposed narrative turn may stand.

Rules (each runs unconditionally and adds at most one error):

  1. player      The player exists and has a location.
  2. advancing   The proposed summary doesn't repeat one of the player's
                 5 most recent log summaries (case-insensitive).
  3. npcs        Every NPC has personality traits, and every memory summary
                 appears inside one of the player's last 50 log summaries: an
                 NPC can't know what the player's log never recorded. All NPCs
                 are scanned regardless of location, up to a cap.
  4. new chars   Advisory only: latestEntry.data.characterIds names someone
                 who is neither a known NPC nor the player.
  5. drama       Some NPC is hostile (attitude not friendly/neutral) or has
                 conflictLevel >= 50, or some log entry in the 50-entry tail
                 matches a drama keyword, carries a charged feeling, or has
                 urgency > 70. No drama is an error.
  6. adherence   Both context and latestEntry.summary were supplied.

The store is read once up front; the rules themselves are pure functions over
that snapshot. Any failure while reading or evaluating aborts the whole check
and returns a single generic error, never a partial verdict.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from storyline.models import NPC, LatestEntry, Player, PlayerEvent, Verdict
from storyline.storage import Storage

logger = logging.getLogger(__name__)

RECENT_WINDOW = 5
HISTORY_WINDOW = 50
URGENCY_THRESHOLD = 70
CONFLICT_THRESHOLD = 50
DEFAULT_NPC_SCAN_LIMIT = 500

NON_HOSTILE_ATTITUDES = frozenset({"friendly", "neutral"})

# theme → trigger keywords, matched as case-insensitive substrings
DRAMA_THEMES: dict[str, tuple[str, ...]] = {
    "confrontation": ("argue", "yelled", "fight", "refuse"),
    "intrigue": ("tension", "secret", "betray"),
    "rivalry": ("rivalry", "competition", "alliance"),
}

_DRAMA_RE = re.compile(
    "|".join(re.escape(k) for keywords in DRAMA_THEMES.values() for k in keywords),
    re.IGNORECASE,
)

CHARGED_FEELINGS = frozenset({
    # negative
    "angry", "furious", "afraid", "scared", "anxious", "jealous", "betrayed",
    "resentful", "hostile", "suspicious", "desperate", "heartbroken", "ashamed",
    # positive
    "ecstatic", "elated", "thrilled", "euphoric", "triumphant", "infatuated",
})

ERR_PLAYER_MISSING = "Player not found"
ERR_PLAYER_LOCATION = "Player location is missing"
ERR_NOT_ADVANCING = "Story is not advancing: latest entry repeats a recent event"
ERR_NO_DRAMA = "No dramatic tension detected in NPCs or recent events"
ERR_INSTRUCTIONS = "Instructions not followed: context and latestEntry.summary are required"
ERR_SERVER = "Server error during precheck"

ACTIONS_ON_PASS = ["advance_story", "log_event"]
ACTIONS_ON_FAIL = ["revise_turn"]
ACTION_CREATE_NPC = "create_npc"


@dataclass
class Snapshot:
    player: Player | None
    npcs: list[NPC]
    recent: list[PlayerEvent]   # newest first, RECENT_WINDOW entries
    history: list[PlayerEvent]  # newest first, HISTORY_WINDOW entries


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def check_player(player: Player | None) -> str | None:
    if player is None:
        return ERR_PLAYER_MISSING
    if not player.location:
        return ERR_PLAYER_LOCATION
    return None


def is_story_advancing(latest: LatestEntry | None, recent: Iterable[PlayerEvent]) -> bool:
    if latest is None or not latest.summary:
        return False
    proposed = latest.summary.casefold()
    return all(e.summary.casefold() != proposed for e in recent)


def npc_violations(npcs: Iterable[NPC], history: list[PlayerEvent]) -> list[str]:
    """Describe each NPC that lacks personality or knows an unlogged event."""
    summaries = [e.summary for e in history]
    problems: list[str] = []
    for npc in npcs:
        if not npc.personality:
            problems.append(f"{npc.npc_id} has no personality")
        leaked = [
            m.summary for m in npc.memories
            if m.summary and not any(m.summary in s for s in summaries)
        ]
        if leaked:
            problems.append(f"{npc.npc_id} knows unlogged event {leaked[0]!r}")
    return problems


def has_new_characters(
    latest: LatestEntry | None, npc_ids: set[str], player_id: str
) -> bool:
    if latest is None or latest.data is None:
        return False
    ids = latest.data.character_ids or []
    return any(cid not in npc_ids and cid != player_id for cid in ids)


def is_hostile(npc: NPC) -> bool:
    return bool(npc.attitude_toward_player) and (
        npc.attitude_toward_player not in NON_HOSTILE_ATTITUDES
    )


def is_dramatic_event(event: PlayerEvent) -> bool:
    if _DRAMA_RE.search(event.summary):
        return True
    if event.feeling and event.feeling.lower() in CHARGED_FEELINGS:
        return True
    return event.urgency > URGENCY_THRESHOLD


def is_drama_present(npcs: Iterable[NPC], history: Iterable[PlayerEvent]) -> bool:
    if any(is_hostile(n) or n.conflict_level >= CONFLICT_THRESHOLD for n in npcs):
        return True
    return any(is_dramatic_event(e) for e in history)


def instructions_adhered(context: Any, latest: LatestEntry | None) -> bool:
    return bool(context) and latest is not None and bool(latest.summary)


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------

def load_snapshot(storage: Storage, player_id: str, npc_limit: int) -> Snapshot:
    player = storage.get_player(player_id)
    history = storage.recent_player_events(player_id, limit=HISTORY_WINDOW)
    return Snapshot(
        player=player,
        npcs=storage.list_npcs(limit=npc_limit),
        recent=history[:RECENT_WINDOW],
        history=history,
    )


def evaluate(
    snapshot: Snapshot, player_id: str, context: Any, latest: LatestEntry | None
) -> Verdict:
    errors: list[str] = []

    player_error = check_player(snapshot.player)
    if player_error:
        errors.append(player_error)

    advancing = is_story_advancing(latest, snapshot.recent)
    if not advancing:
        errors.append(ERR_NOT_ADVANCING)

    problems = npc_violations(snapshot.npcs, snapshot.history)
    if problems:
        errors.append("NPC individuality violated: " + "; ".join(problems))

    new_characters = has_new_characters(
        latest, {n.npc_id for n in snapshot.npcs}, player_id
    )

    drama = is_drama_present(snapshot.npcs, snapshot.history)
    if not drama:
        errors.append(ERR_NO_DRAMA)

    adhered = instructions_adhered(context, latest)
    if not adhered:
        errors.append(ERR_INSTRUCTIONS)

    consistent = not errors
    actions = list(ACTIONS_ON_PASS if consistent else ACTIONS_ON_FAIL)
    if new_characters:
        actions.append(ACTION_CREATE_NPC)

    return Verdict(
        summary="Precheck passed" if consistent else f"Precheck failed with {len(errors)} error(s)",
        logic_consistent=consistent,
        errors=errors,
        next_actions_allowed=actions,
        drama_present=drama,
        story_advancing=advancing,
        npc_individuality_maintained=not problems,
        new_characters_detected=new_characters,
        instructions_adhered=adhered,
    )


def server_error_verdict() -> Verdict:
    return Verdict(
        summary=ERR_SERVER,
        logic_consistent=False,
        errors=[ERR_SERVER],
    )


def precheck(
    storage: Storage,
    player_id: str,
    context: Any,
    latest_entry: LatestEntry | dict[str, Any] | None,
    *,
    npc_limit: int = DEFAULT_NPC_SCAN_LIMIT,
) -> Verdict:
    """Evaluate a proposed turn. Reads the store; never writes to it."""
    try:
        latest = (
            LatestEntry.model_validate(latest_entry)
            if isinstance(latest_entry, dict) else latest_entry
        )
        snapshot = load_snapshot(storage, player_id, npc_limit)
        verdict = evaluate(snapshot, player_id, context, latest)
    except Exception:
        logger.exception("precheck aborted for player %s", player_id)
        return server_error_verdict()
    logger.info(
        "precheck player=%s consistent=%s errors=%d",
        player_id, verdict.logic_consistent, len(verdict.errors),
    )
    return verdict
