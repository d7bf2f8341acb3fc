"""Battle phase progression and per-move beat classification."""

from bending_arena.models import BattleState, Environment, Fighter, Move

MID_TURN = 3
LATE_TURN = 8
MID_HEALTH = 60
LATE_HEALTH = 40

_PHASE_ORDER = ("early", "mid", "late")

TERRAIN_TAGS = ("environmental_manipulation", "terrain")


def phase_for(state: BattleState) -> str:
    """Phase implied by the current turn and HP; never earlier than the current one."""
    lowest = min((f.hp_percent for f in state.fighters.values()), default=100.0)
    if state.turn >= LATE_TURN or lowest < LATE_HEALTH:
        implied = "late"
    elif state.turn >= MID_TURN or lowest < MID_HEALTH:
        implied = "mid"
    else:
        implied = "early"
    return max(implied, state.phase, key=_PHASE_ORDER.index)


def classify_beat(move: Move, actor: Fighter, target: Fighter, environment: Environment) -> str:
    """Beat for a resolved move. Call after damage has been applied."""
    if target.is_down:
        return "finishing_move"
    if environment.terrain and any(move.has_tag(t) for t in TERRAIN_TAGS):
        return "terrain_interaction"
    if actor.hp_percent >= target.hp_percent:
        return "advantage_attack"
    return "disadvantage_attack"
