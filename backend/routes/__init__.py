"""FastAPI API endpoints under /api.

Endpoint groups: settings/health, players + inventory, NPCs, event logs
(single, listing, batch), precheck.
"""

from fastapi import APIRouter

from .events import router as events_router
from .npcs import router as npcs_router
from .players import router as players_router
from .precheck import router as precheck_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(players_router)
router.include_router(npcs_router)
router.include_router(events_router)
router.include_router(precheck_router)
