"""Move scoring calculators.

Each legal move gets four independent component scores, all on 0..100:

  damage     power weighted by effective accuracy (0 for defense moves)
  accuracy   effective hit chance (-20 while the actor is off balance)
  risk       inverse accuracy, plus penalties for high-risk tags, recoil,
             dropping below the safety HP margin, and finishers thrown
             before the opening exists
  strategic  tag-driven bonus relative to the actor's threat level

Combined score = w_damage*damage + w_accuracy*accuracy
                 - w_risk*risk + w_strategic*strategic

AiBias then shifts exactly one weight per field:
  overkill           +w_damage
  self_preservation  +w_risk       (risk is subtracted, so more caution)
  betrayal_risk      -w_strategic  (less invested in the plan)
  showboating        -w_accuracy   (flash over reliability)
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from bending_arena.models import AiBias, BattleState, Fighter, Move, ThreatLevel

from . import conditions

OFF_BALANCE_PENALTY = 20
SAFETY_MARGIN = 20  # percent of max HP
SAFETY_MARGIN_PENALTY = 30
HIGH_RISK_PENALTY = 15
PREMATURE_FINISHER_PENALTY = 20

DEFENSIVE_TAGS = ("defensive_stance", "utility_block")
EVASIVE_TAGS = ("evasive", "utility_reposition")


class ScoreWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    damage: float = 0.45
    accuracy: float = 0.15
    risk: float = 0.25
    strategic: float = 0.35

    def with_bias(self, bias: AiBias) -> ScoreWeights:
        return ScoreWeights(
            damage=self.damage + bias.overkill,
            accuracy=self.accuracy - bias.showboating,
            risk=self.risk + bias.self_preservation,
            strategic=self.strategic - bias.betrayal_risk,
        )


DEFAULT_WEIGHTS = ScoreWeights()


class ScoringContext(BaseModel):
    """Everything a calculator may look at. Built once per decision."""

    actor: Fighter
    opponent: Fighter
    state: BattleState
    threat: ThreatLevel = ThreatLevel.LOW
    bias: AiBias = Field(default_factory=AiBias)
    weights: ScoreWeights = DEFAULT_WEIGHTS


class MoveEvaluation(BaseModel):
    move: Move
    damage: float
    accuracy: float
    risk: float
    strategic: float
    score: float
    reasons: list[str] = Field(default_factory=list)


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


def _is_finisher(move: Move) -> bool:
    return move.kind == "finisher" or move.has_tag("requires_opening")


# ── Component calculators ────────────────────────────────


def accuracy_score(move: Move, ctx: ScoringContext) -> float:
    accuracy = move.accuracy
    if ctx.actor.flags.off_balance:
        accuracy -= OFF_BALANCE_PENALTY
    return _clamp(accuracy)


def damage_score(move: Move, ctx: ScoringContext) -> float:
    if move.kind == "defense":
        return 0.0
    return _clamp(move.power * accuracy_score(move, ctx) / 100)


def risk_score(move: Move, ctx: ScoringContext) -> float:
    risk = 100 - accuracy_score(move, ctx)
    if move.has_tag("highRisk"):
        risk += HIGH_RISK_PENALTY
    if move.recoil:
        risk += move.recoil * 2
    projected_hp = ctx.actor.hp - move.recoil
    if projected_hp < ctx.actor.max_hp * SAFETY_MARGIN / 100:
        risk += SAFETY_MARGIN_PENALTY
    if _is_finisher(move) and not conditions.is_finishing_window(ctx.actor, ctx.opponent, ctx.state):
        risk += PREMATURE_FINISHER_PENALTY
    return _clamp(risk)


def strategic_score(move: Move, ctx: ScoringContext) -> tuple[float, list[str]]:
    """Tag-driven bonus. Returns (score, reasons)."""
    score = 0.0
    reasons: list[str] = []

    if move.has_tag("debuff_disable"):
        if ctx.threat is ThreatLevel.HIGH:
            score += 40
            reasons.append("disable vs high threat")
        elif ctx.threat is ThreatLevel.MEDIUM:
            score += 15

    if move.kind == "defense" or any(move.has_tag(t) for t in DEFENSIVE_TAGS):
        if ctx.threat is ThreatLevel.HIGH:
            score += 30
            reasons.append("defend under high threat")
        elif ctx.threat is ThreatLevel.MEDIUM:
            score += 10

    if any(move.has_tag(t) for t in EVASIVE_TAGS) and ctx.threat is ThreatLevel.HIGH:
        score += 15

    if _is_finisher(move) and conditions.is_finishing_window(ctx.actor, ctx.opponent, ctx.state):
        score += 35
        reasons.append("finishing window")

    if move.has_tag("desperation"):
        score += 60
        reasons.append("desperation")

    if move.has_tag("environmental_manipulation") and ctx.state.environment.terrain:
        score += 10

    if move.kind == "offense" and conditions.is_in_control(ctx.actor, ctx.opponent, ctx.state):
        score += 10
        reasons.append("pressing advantage")

    return _clamp(score), reasons


# ── Combination ──────────────────────────────────────────


def score_move(move: Move, ctx: ScoringContext) -> MoveEvaluation:
    weights = ctx.weights.with_bias(ctx.bias)
    damage = damage_score(move, ctx)
    accuracy = accuracy_score(move, ctx)
    risk = risk_score(move, ctx)
    strategic, reasons = strategic_score(move, ctx)
    combined = (
        weights.damage * damage
        + weights.accuracy * accuracy
        - weights.risk * risk
        + weights.strategic * strategic
    )
    return MoveEvaluation(
        move=move,
        damage=damage,
        accuracy=accuracy,
        risk=risk,
        strategic=strategic,
        score=round(combined, 6),
        reasons=reasons,
    )


def evaluate_moves(moves: list[Move], ctx: ScoringContext) -> list[MoveEvaluation]:
    """Score every move and rank descending. Ties keep the original move order."""
    evaluations = [score_move(move, ctx) for move in moves]
    return sorted(evaluations, key=lambda e: -e.score)
