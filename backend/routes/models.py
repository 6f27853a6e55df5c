"""Pydantic request models for API endpoints.

Entity bodies (Player, NPC, Inventory) reuse the core models directly; the
ones here only exist at the HTTP boundary.
"""

from typing import Any

from storyline.models import Document, EventData, LatestEntry


class LogEventBody(Document):
    player_id: str = ""
    type: str = ""
    summary: str = ""
    feeling: str | None = None
    data: EventData | None = None
    requires_player_input: bool | None = None
    next_trigger: str | None = None
    urgency: int = 0


class LogNpcEventBody(Document):
    npc_id: str = ""
    summary: str = ""
    feeling: str | None = None
    data: EventData | None = None


class BatchEventsBody(Document):
    # Raw entries: unknown entity types are skipped before validation
    events: list[dict[str, Any]]


class PrecheckBody(Document):
    player_id: str
    context: Any = None
    latest_entry: LatestEntry | None = None
