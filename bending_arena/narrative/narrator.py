"""Turn battle moments into prose: context -> filter chain -> substitution."""

import logging
import random
from collections.abc import Mapping, Sequence

from pydantic import BaseModel, Field

from bending_arena.ai.conditions import is_desperate_broken, is_low_hp
from bending_arena.models import BattleState, Fighter, Move, NarrativeContext, NarrativeVariant, TurnContext

from .filters import select_variant
from .render import render_with_defects

logger = logging.getLogger(__name__)

MOVE_FALLBACK = "{actorName} uses {moveName}."
OPENING_FALLBACK = "{actorName} and {targetName} square off at {environmentName}."

VariantPools = Mapping[str, Sequence[NarrativeVariant]]


class Narration(BaseModel):
    text: str
    reasons: list[str] = Field(default_factory=list)
    unresolved: list[str] = Field(default_factory=list)


class Narrator:
    """Holds the read-only beat pools and the battle's rng."""

    def __init__(self, pools: VariantPools | None, rng: random.Random):
        self.pools = pools or {}
        self.rng = rng

    def _narrate(
        self,
        beat: str,
        context: NarrativeContext,
        actor: Fighter,
        target: Fighter,
        fallback: str,
        extra: dict[str, str],
    ) -> Narration:
        pool = self.pools.get(beat, ())
        text, reasons = select_variant(pool, context, self.rng)
        if text is None:
            reasons.append(f"{beat}: no variants, bare description")
            text = fallback
        rendered, unresolved = render_with_defects(text, actor, target, extra)
        return Narration(text=rendered, reasons=list(reasons), unresolved=unresolved)

    def opening(self, state: BattleState, actor: Fighter, target: Fighter) -> Narration:
        context = NarrativeContext(
            turn=TurnContext(phase=state.phase),
            environment=state.environment,
        )
        extra = {"environmentName": state.environment.name}
        return self._narrate("opening", context, actor, target, OPENING_FALLBACK, extra)

    def move(
        self,
        state: BattleState,
        beat: str,
        move: Move,
        actor: Fighter,
        target: Fighter,
        *,
        hit: bool,
        crit: bool,
        humor: bool,
    ) -> Narration:
        context = NarrativeContext(
            turn=TurnContext(
                is_crit=crit,
                is_miss=not hit,
                humor_trigger=humor,
                low_hp=is_low_hp(actor) or is_desperate_broken(actor),
                phase=state.phase,
            ),
            environment=state.environment,
        )
        extra = {
            "moveName": move.name,
            "move": move.name,
            "environmentName": state.environment.name,
        }
        return self._narrate(beat, context, actor, target, MOVE_FALLBACK, extra)
