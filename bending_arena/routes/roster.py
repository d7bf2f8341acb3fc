"""Fighter, move and environment endpoints."""

from fastapi import APIRouter, HTTPException

from bending_arena import storage
from bending_arena.models import FighterTemplate

from .models import CreateFighter

router = APIRouter()


@router.get("/fighters")
async def list_fighters():
    """List all fighters (presets merged with user-created)."""
    return storage.list_fighters()


@router.post("/fighters", status_code=201)
async def create_fighter(body: CreateFighter):
    """Create a user fighter. The id is derived from the name."""
    fighter_id = storage.slugify(body.name)
    if storage.get_fighter(fighter_id):
        raise HTTPException(409, f"Fighter '{fighter_id}' already exists")
    known = storage.move_table()
    missing = [m for m in body.moves if m not in known]
    if missing:
        raise HTTPException(400, f"Unknown moves: {', '.join(missing)}")
    return storage.save_fighter(FighterTemplate(id=fighter_id, **body.model_dump()))


@router.get("/fighters/{fighter_id}")
async def get_fighter(fighter_id: str):
    """Get a single fighter by id."""
    fighter = storage.get_fighter(fighter_id)
    if not fighter:
        raise HTTPException(404, "Fighter not found")
    return fighter


@router.delete("/fighters/{fighter_id}")
async def delete_fighter(fighter_id: str):
    """Delete a user fighter (or remove a user override to reveal the preset)."""
    if not storage.delete_fighter(fighter_id):
        raise HTTPException(404, "Fighter not found")
    return {"ok": True}


@router.get("/moves")
async def list_moves():
    return storage.list_moves()


@router.get("/environments")
async def list_environments():
    return storage.list_environments()


@router.get("/environments/{environment_id}")
async def get_environment(environment_id: str):
    environment = storage.get_environment(environment_id)
    if not environment:
        raise HTTPException(404, "Environment not found")
    return environment
