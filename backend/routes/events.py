"""Event log endpoints: single player/NPC events, listing, and batch ingestion."""

from fastapi import APIRouter, HTTPException

from backend.state import get_storage
from storyline.config import get_config
from storyline.ingestion import ingest_batch, log_npc_event, log_player_event
from storyline.store import StoreError

from .models import BatchEventsBody, LogEventBody, LogNpcEventBody

router = APIRouter()


@router.post("/log-event")
async def log_event(body: LogEventBody):
    """Append one entry to a player's event log."""
    try:
        event = log_player_event(
            get_storage(),
            player_id=body.player_id,
            type=body.type,
            summary=body.summary,
            feeling=body.feeling,
            data=body.data,
            requires_player_input=body.requires_player_input,
            next_trigger=body.next_trigger,
            urgency=body.urgency,
        )
    except ValueError as e:
        raise HTTPException(400, str(e))
    return event.to_doc()


@router.get("/log-event/{player_id}")
async def list_events(player_id: str):
    """Most recent player events, newest first."""
    storage = get_storage()
    limit = get_config(storage.base_path)["event_list_limit"]
    logs = storage.recent_player_events(player_id, limit=limit)
    return {"logs": [e.to_doc() for e in logs]}


@router.post("/log-npc-event")
async def log_npc(body: LogNpcEventBody):
    """Append one entry to an NPC's event log and to the NPC's memories."""
    try:
        event = log_npc_event(
            get_storage(),
            npc_id=body.npc_id,
            summary=body.summary,
            feeling=body.feeling,
            data=body.data,
        )
    except ValueError as e:
        raise HTTPException(400, str(e))
    return event.to_doc()


@router.post("/log-batch-events")
async def log_batch_events(body: BatchEventsBody):
    """Ingest a list of player/NPC events; unknown entity types are skipped."""
    try:
        logs = ingest_batch(get_storage(), body.events)
    except ValueError as e:
        raise HTTPException(400, str(e))
    except StoreError as e:
        raise HTTPException(500, str(e))
    return {"success": True, "logs": [e.to_doc() for e in logs]}
