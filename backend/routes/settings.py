"""Health check and settings endpoints."""

from fastapi import APIRouter, HTTPException

from backend.state import get_storage
from storyline.config import get_config, update_config

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get stored service settings."""
    return get_config(get_storage().base_path)


@router.patch("/settings")
async def update_settings(body: dict):
    """Update service settings (partial merge)."""
    try:
        return update_config(get_storage().base_path, body)
    except ValueError as e:
        raise HTTPException(400, str(e))
