"""NPC endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from backend.state import get_storage
from storyline.models import NPC
from storyline.storage import NotFoundError
from storyline.store import DuplicateKeyError
from storyline.sync import update_npc

router = APIRouter()


@router.get("/npcs")
async def list_npcs():
    """List all NPCs."""
    return [npc.to_doc() for npc in get_storage().list_npcs()]


@router.post("/npc")
async def create_npc(body: NPC):
    """Create an NPC. The caller chooses the npcId."""
    try:
        npc = get_storage().create_npc(body)
    except DuplicateKeyError as e:
        raise HTTPException(409, str(e))
    return npc.to_doc()


@router.get("/npc/{npc_id}")
async def get_npc(npc_id: str):
    """Get a single NPC, memories included."""
    npc = get_storage().get_npc(npc_id)
    if not npc:
        raise HTTPException(404, "NPC not found")
    return npc.to_doc()


@router.patch("/npc/{npc_id}")
async def patch_npc(npc_id: str, body: dict):
    """Update NPC fields; with syncFromLogs, re-derive mood from the NPC log."""
    sync = body.pop("syncFromLogs", False) is True
    try:
        npc = update_npc(get_storage(), npc_id, body, sync_from_logs=sync)
    except NotFoundError:
        raise HTTPException(404, "NPC not found")
    except ValidationError as e:
        raise HTTPException(400, str(e))
    return npc.to_doc()
