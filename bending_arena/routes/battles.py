"""Battle simulation endpoint. Runs synchronously; nothing is persisted."""

from fastapi import APIRouter, HTTPException

from bending_arena.session import UnknownEntity, run_battle

from .models import BattleBody

router = APIRouter()


@router.post("/battles")
def create_battle(body: BattleBody):
    """Run a whole battle and return its event log and summary."""
    first, second = body.fighters
    try:
        loop = run_battle(first, second, body.environment, seed=body.seed, max_turns=body.max_turns)
    except UnknownEntity as e:
        raise HTTPException(404, str(e))
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {
        "events": [e.model_dump() for e in loop.state.log],
        "summary": loop.summary().model_dump(),
    }
