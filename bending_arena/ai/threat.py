"""Threat analyzer: coarse danger level for one fighter.

  health_percent = hp / max_hp * 100
  threat_score   = 100 - health_percent  (+20 if opponent's strongest move > 40)

Classification (fixed cutoffs, evaluated in order):
  HIGH    health <= 30, or health <= 50 and opponent max power >= 40
  MEDIUM  health <= 60
  LOW     otherwise

Recomputed from current state on every call; nothing is cached.
Missing inputs fail open to LOW.
"""

from bending_arena.models import BattleState, Fighter, ThreatLevel

HIGH_DAMAGE_THRESHOLD = 40
HIGH_DAMAGE_BONUS = 20

CRITICAL_HEALTH = 30
WOUNDED_HEALTH = 50
BRUISED_HEALTH = 60


def opponent_max_power(state: BattleState, fighter: Fighter) -> int:
    """Strongest base power among the opponent's legal moves (0 if none)."""
    opponent = state.opponent_of(fighter.id)
    if opponent is None:
        return 0
    return max((m.power for m in state.moves_of(opponent)), default=0)


def threat_score(state: BattleState | None, fighter: Fighter | None) -> float:
    if state is None or fighter is None:
        return 0.0
    score = 100 - fighter.hp_percent
    if opponent_max_power(state, fighter) > HIGH_DAMAGE_THRESHOLD:
        score += HIGH_DAMAGE_BONUS
    return score


def classify_threat(health_percent: float, opponent_power: int) -> ThreatLevel:
    if health_percent <= CRITICAL_HEALTH:
        return ThreatLevel.HIGH
    if health_percent <= WOUNDED_HEALTH and opponent_power >= HIGH_DAMAGE_THRESHOLD:
        return ThreatLevel.HIGH
    if health_percent <= BRUISED_HEALTH:
        return ThreatLevel.MEDIUM
    return ThreatLevel.LOW


def analyze_threat(state: BattleState | None, fighter: Fighter | None) -> ThreatLevel:
    """Threat level for `fighter` given the current battle state. Never raises."""
    if state is None or fighter is None:
        return ThreatLevel.LOW
    return classify_threat(fighter.hp_percent, opponent_max_power(state, fighter))
