"""Core domain models.

All pipeline stages and storage functions operate on these types.
Pydantic is used for validation and serialisation at every data boundary.

Attributes are snake_case in Python; the stored and wire form uses the
camelCase names the game client sends (`playerId`, `attitudeTowardPlayer`,
...). Dump with `to_doc()` to get that form.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EntityType = Literal["player", "npc"]
TargetType = Literal["npc", "player"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Document(BaseModel):
    """Base for everything that is stored or sent over the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EventData(Document):
    """Open-ended payload attached to log entries and memories.

    Any key is accepted and preserved. Two keys carry meaning by convention:
    `moneyChange` is folded into the player's money on sync, and
    `characterIds` lists the characters a proposed turn involves.
    """

    model_config = ConfigDict(extra="allow")

    money_change: int | float | None = None
    character_ids: list[str] | None = None


# ---------------------------------------------------------------------------
# Player side
# ---------------------------------------------------------------------------

class Stats(Document):
    money: int = 0
    last_money_sync_id: str | None = None  # id of the log entry last folded into money


class Player(Document):
    player_id: str = Field(min_length=1)
    name: str | None = None
    location: str | None = None
    stats: Stats = Field(default_factory=Stats)


class InventoryItem(Document):
    name: str
    amount: int = 1


class Inventory(Document):
    player_id: str = Field(min_length=1)
    items: list[InventoryItem] = Field(default_factory=list)


class PlayerEvent(Document):
    """One entry in a player's append-only event log."""

    id: str | None = None
    player_id: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=utcnow)
    type: str = Field(min_length=1)
    summary: str = Field(min_length=1)
    feeling: str | None = None
    data: EventData | None = None
    requires_player_input: bool | None = None
    next_trigger: str | None = None
    urgency: int = 0


# ---------------------------------------------------------------------------
# NPC side
# ---------------------------------------------------------------------------

class Relationship(Document):
    target_id: str
    target_type: TargetType
    attitude: str | None = None
    public_attitude: str | None = None
    private_attitude: str | None = None
    revealed: bool = False  # False while the player hasn't learned the private side
    notes: str | None = None


class Memory(Document):
    timestamp: datetime = Field(default_factory=utcnow)
    summary: str | None = None
    feeling: str | None = None
    data: EventData | None = None
    intensity: int = Field(default=50, ge=0, le=100)


class NPC(Document):
    npc_id: str = Field(min_length=1)
    name: str | None = None
    location: str | None = None
    personality: list[str] = Field(default_factory=list)
    mood: str | None = None
    attitude_toward_player: str | None = None
    conflict_level: int = 0
    last_conflict_with_player: datetime | None = None
    relationships: list[Relationship] = Field(default_factory=list)
    memories: list[Memory] = Field(default_factory=list)
    description: str | None = None
    details: str | None = None
    bio: str | None = None
    state: dict[str, Any] | None = None


class NPCEvent(Document):
    """One entry in an NPC's event log. Mirrored by a Memory on the NPC."""

    id: str | None = None
    npc_id: str = Field(min_length=1)
    timestamp: datetime = Field(default_factory=utcnow)
    summary: str = Field(min_length=1)
    feeling: str | None = None
    data: EventData | None = None


# ---------------------------------------------------------------------------
# Ingestion & precheck boundary types
# ---------------------------------------------------------------------------

class EventDescriptor(Document):
    """One event submitted for ingestion.

    `entity_type` is kept as a plain string: values other than "player" and
    "npc" are skipped by the pipeline, not rejected.
    """

    entity_type: str
    entity_id: str = ""
    summary: str = ""
    feeling: str | None = None
    data: EventData | None = None
    time_delta: str | None = None
    requires_player_input: bool | None = None
    next_trigger: str | None = None
    urgency: int = 0


class LatestEntry(Document):
    """The proposed turn handed to precheck."""

    model_config = ConfigDict(extra="allow")

    summary: str | None = None
    feeling: str | None = None
    data: EventData | None = None


class Verdict(Document):
    summary: str
    logic_consistent: bool
    errors: list[str] = Field(default_factory=list)
    next_actions_allowed: list[str] = Field(default_factory=list)
    drama_present: bool = False
    story_advancing: bool = False
    npc_individuality_maintained: bool = False
    new_characters_detected: bool = False
    instructions_adhered: bool = False
