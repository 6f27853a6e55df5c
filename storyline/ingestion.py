"""Event ingestion — writes narrative events to the player and NPC logs.

Per descriptor:
  1. Resolve the stored timestamp: now + timeDelta (see storyline.timeline).
  2. entityType "player" → append a PlayerEvent of type "event".
     entityType "npc"    → append an NPCEvent, then append the same fact as a
                           memory on the NPC document.
     anything else       → skipped; a batch never aborts on an unknown type.

The NPC log is the durable record and the memory list is a cache of it: when
the NPC document doesn't exist the memory append is a no-op but the log entry
is still written. Store failures propagate; entries already written in a batch
stay written.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from storyline.models import (
    EventData,
    EventDescriptor,
    Memory,
    NPCEvent,
    PlayerEvent,
    utcnow,
)
from storyline.storage import Storage
from storyline.timeline import apply_time_delta

logger = logging.getLogger(__name__)

LogEntry = PlayerEvent | NPCEvent

ENTITY_TYPES = ("player", "npc")


def log_player_event(
    storage: Storage,
    *,
    player_id: str,
    type: str,
    summary: str,
    feeling: str | None = None,
    data: EventData | dict[str, Any] | None = None,
    requires_player_input: bool | None = None,
    next_trigger: str | None = None,
    urgency: int = 0,
    timestamp: datetime | None = None,
) -> PlayerEvent:
    """Append one entry to a player's event log."""
    if not player_id or not type or not summary:
        raise ValueError("playerId, type, and summary required")
    event = PlayerEvent(
        player_id=player_id,
        type=type,
        summary=summary,
        feeling=feeling,
        data=data,
        requires_player_input=requires_player_input,
        next_trigger=next_trigger,
        urgency=urgency,
        timestamp=timestamp or utcnow(),
    )
    return storage.add_player_event(event)


def log_npc_event(
    storage: Storage,
    *,
    npc_id: str,
    summary: str,
    feeling: str | None = None,
    data: EventData | dict[str, Any] | None = None,
    timestamp: datetime | None = None,
) -> NPCEvent:
    """Append one entry to an NPC's event log and mirror it into its memories."""
    if not npc_id or not summary:
        raise ValueError("npcId and summary required")
    event = storage.add_npc_event(
        NPCEvent(
            npc_id=npc_id,
            summary=summary,
            feeling=feeling,
            data=data,
            timestamp=timestamp or utcnow(),
        )
    )
    memory = Memory(
        summary=event.summary,
        feeling=event.feeling,
        data=event.data,
        timestamp=event.timestamp,
    )
    if not storage.append_memory(npc_id, memory):
        logger.debug("npc %s not found; logged event %s without memory", npc_id, event.id)
    return event


def ingest_event(
    storage: Storage,
    descriptor: EventDescriptor,
    *,
    now: datetime | None = None,
) -> LogEntry | None:
    """Ingest one event. Returns the created log entry, or None if skipped."""
    timestamp = apply_time_delta(now or utcnow(), descriptor.time_delta)

    if descriptor.entity_type == "player":
        return log_player_event(
            storage,
            player_id=descriptor.entity_id,
            type="event",
            summary=descriptor.summary,
            feeling=descriptor.feeling,
            data=descriptor.data,
            requires_player_input=descriptor.requires_player_input,
            next_trigger=descriptor.next_trigger,
            urgency=descriptor.urgency,
            timestamp=timestamp,
        )

    if descriptor.entity_type == "npc":
        return log_npc_event(
            storage,
            npc_id=descriptor.entity_id,
            summary=descriptor.summary,
            feeling=descriptor.feeling,
            data=descriptor.data,
            timestamp=timestamp,
        )

    logger.debug("skipping event with unknown entityType %r", descriptor.entity_type)
    return None


def _recognized(raw: EventDescriptor | dict[str, Any]) -> EventDescriptor | None:
    entity_type = raw.entity_type if isinstance(raw, EventDescriptor) else raw.get("entityType")
    if entity_type not in ENTITY_TYPES:
        logger.debug("skipping event with unknown entityType %r", entity_type)
        return None
    descriptor = raw if isinstance(raw, EventDescriptor) else EventDescriptor.model_validate(raw)
    if not descriptor.entity_id or not descriptor.summary:
        raise ValueError("entityId and summary required")
    return descriptor


def ingest_batch(
    storage: Storage,
    descriptors: Iterable[EventDescriptor | dict[str, Any]],
    *,
    now: datetime | None = None,
) -> list[LogEntry]:
    """Ingest events in order and return the created entries in submission order.

    Raw wire dicts are accepted: entries with an unknown entityType are
    dropped whatever else they carry, and the rest are validated before
    anything is written. All entries in one batch are resolved against the
    same "now".
    """
    recognized = [d for d in (_recognized(raw) for raw in descriptors) if d is not None]
    base = now or utcnow()
    results: list[LogEntry] = []
    for descriptor in recognized:
        entry = ingest_event(storage, descriptor, now=base)
        if entry is not None:
            results.append(entry)
    logger.info("ingested %d event(s)", len(results))
    return results
