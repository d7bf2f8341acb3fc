"""Decision engine: vetoes, scoring, bias, pick.

  1. Vetoes: drop every move the condition evaluator rules out (unaffordable,
     desperation without the trigger). Vetoes run before scoring, so a
     zero-energy fighter is never even offered an energy-costing move.
  2. Threat: recomputed from the current state for this call only.
  3. Bias: resolved once from the table passed in by the caller.
  4. evaluate_moves ranks the survivors; the top entry wins.

No legal move left -> ExhaustedOptions; the turn loop decides between pass
and forfeit.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from bending_arena.models import BattleState, Fighter, Move, ThreatLevel

from .bias import BiasTable, resolve_bias
from .conditions import is_move_legal
from .scoring import DEFAULT_WEIGHTS, MoveEvaluation, ScoreWeights, ScoringContext, evaluate_moves
from .threat import analyze_threat, threat_score

logger = logging.getLogger(__name__)


class ExhaustedOptions(Exception):
    """Raised when a fighter has no legal move left."""

    def __init__(self, fighter_id: str):
        super().__init__(f"No legal move for fighter '{fighter_id}'")
        self.fighter_id = fighter_id


class Decision(BaseModel):
    move: Move
    evaluation: MoveEvaluation
    ranked: list[MoveEvaluation] = Field(default_factory=list)
    threat: ThreatLevel = ThreatLevel.LOW

    @property
    def reasons(self) -> list[str]:
        return [f"threat={self.threat.value}", *self.evaluation.reasons]


def legal_moves(state: BattleState, actor: Fighter, opponent: Fighter | None) -> list[Move]:
    return [m for m in state.moves_of(actor) if is_move_legal(m, actor, opponent, state)]


def choose_move(
    state: BattleState,
    actor_id: str,
    bias_table: BiasTable | None = None,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> Decision:
    actor = state.fighters[actor_id]
    opponent = state.opponent_of(actor_id)
    candidates = legal_moves(state, actor, opponent)
    if not candidates or opponent is None:
        raise ExhaustedOptions(actor_id)

    threat = analyze_threat(state, actor)
    ctx = ScoringContext(
        actor=actor,
        opponent=opponent,
        state=state,
        threat=threat,
        bias=resolve_bias(bias_table, actor_id),
        weights=weights,
    )
    ranked = evaluate_moves(candidates, ctx)
    best = ranked[0]
    logger.debug(
        "%s (threat=%s, score=%.0f) ranked: %s",
        actor_id,
        threat.value,
        threat_score(state, actor),
        ", ".join(f"{e.move.id}={e.score:.1f}" for e in ranked),
    )
    return Decision(move=best.move, evaluation=best, ranked=ranked, threat=threat)
