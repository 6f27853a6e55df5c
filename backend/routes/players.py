"""Player and inventory endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from backend.state import get_storage
from storyline.models import Inventory, Player
from storyline.storage import NotFoundError
from storyline.store import DuplicateKeyError
from storyline.sync import update_player

router = APIRouter()


@router.post("/player")
async def create_player(body: Player):
    """Create a player. The caller chooses the playerId."""
    try:
        player = get_storage().create_player(body)
    except DuplicateKeyError as e:
        raise HTTPException(409, str(e))
    return player.to_doc()


@router.get("/player/{player_id}")
async def get_player(player_id: str):
    """Get a single player."""
    player = get_storage().get_player(player_id)
    if not player:
        raise HTTPException(404, "Player not found")
    return player.to_doc()


@router.patch("/player/{player_id}")
async def patch_player(player_id: str, body: dict):
    """Update player fields; with syncFromLogs, fold the latest moneyChange in."""
    sync = body.pop("syncFromLogs", False) is True
    try:
        player = update_player(get_storage(), player_id, body, sync_from_logs=sync)
    except NotFoundError:
        raise HTTPException(404, "Player not found")
    except ValidationError as e:
        raise HTTPException(400, str(e))
    return player.to_doc()


@router.post("/inventory")
async def save_inventory(body: Inventory):
    """Create or replace a player's inventory."""
    return get_storage().save_inventory(body).to_doc()


@router.get("/inventory/{player_id}")
async def get_inventory(player_id: str):
    """Get a player's inventory (empty if none saved)."""
    return get_storage().get_inventory(player_id).to_doc()
