"""Narrative precheck endpoint."""

from fastapi import APIRouter

from backend.state import get_storage
from storyline.config import get_config
from storyline.precheck import precheck, server_error_verdict
from storyline.store import StoreError

from .models import PrecheckBody

router = APIRouter()


@router.post("/precheck")
async def run_precheck(body: PrecheckBody):
    """Judge whether the proposed turn may stand. Never modifies stored state."""
    storage = get_storage()
    try:
        npc_limit = get_config(storage.base_path)["npc_scan_limit"]
    except StoreError:
        return server_error_verdict().to_doc()
    verdict = precheck(
        storage, body.player_id, body.context, body.latest_entry, npc_limit=npc_limit
    )
    return verdict.to_doc()
