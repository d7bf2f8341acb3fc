"""Health check and settings endpoints."""

from fastapi import APIRouter, HTTPException
from pydantic import ValidationError

from bending_arena import storage
from bending_arena.engine import BattleConfig

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get battle settings (turn limits, tie rules, conclusion templates)."""
    return storage.get_config()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update battle settings (partial merge). Rejects out-of-range values and non-string templates."""
    merged = storage.get_config()
    merged.update(body)
    try:
        BattleConfig.from_config(merged)
    except ValidationError as e:
        raise HTTPException(422, str(e))
    return storage.update_config(body)
