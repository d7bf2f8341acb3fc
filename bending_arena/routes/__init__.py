"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, settings), roster (fighters, moves,
environments), battles (run one battle, get its log and summary).
"""

from fastapi import APIRouter

from .battles import router as battles_router
from .roster import router as roster_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(roster_router)
router.include_router(battles_router)
