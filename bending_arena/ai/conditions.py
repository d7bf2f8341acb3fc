"""Condition evaluator: pure predicates over (character, opponent, state).

Every predicate shares one signature and fails closed: a missing character,
opponent or state yields False rather than an exception. None of them mutate
anything. The same predicates gate move legality and shape scoring in the
decision engine, and feed the narrator's desperate tag (low_hp or desperate_broken).

Thresholds:
  in_control         own HP > 50%, no crit just received, opponent stable/stressed
  desperate_broken   own HP < 30% or own mental state broken
  low_hp             own HP <= 30%
  desperation_ready  HP <= 10, energy >= 6, desperation not yet used
  finishing_window   opponent HP <= 25%
"""

from bending_arena.models import BattleState, Fighter, Move

CONTROL_HEALTH = 50
DESPERATE_HEALTH = 30
LOW_HEALTH = 30
FINISHING_HEALTH = 25

DESPERATION_MAX_HP = 10
DESPERATION_MIN_ENERGY = 6


def is_in_control(character, opponent, state=None) -> bool:
    if character is None or opponent is None:
        return False
    return (
        character.hp_percent > CONTROL_HEALTH
        and not character.flags.crit_received
        and opponent.mental_state in ("stable", "stressed")
    )


def is_desperate_broken(character, opponent=None, state=None) -> bool:
    if character is None:
        return False
    return character.hp_percent < DESPERATE_HEALTH or character.mental_state == "broken"


def is_low_hp(character, opponent=None, state=None) -> bool:
    if character is None:
        return False
    return character.hp_percent <= LOW_HEALTH


def can_trigger_desperation(character, opponent=None, state=None) -> bool:
    """HP <= 10 and energy >= 6 and the desperation move not yet spent."""
    if character is None:
        return False
    return (
        character.hp <= DESPERATION_MAX_HP
        and character.energy >= DESPERATION_MIN_ENERGY
        and not character.flags.used_desperation
    )


def is_finishing_window(character, opponent, state=None) -> bool:
    if character is None or opponent is None:
        return False
    return opponent.hp_percent <= FINISHING_HEALTH


# ── Move legality (vetoes applied before scoring) ────────


def can_afford(character: Fighter | None, move: Move) -> bool:
    if character is None:
        return False
    return move.energy_cost <= character.energy


def is_move_legal(
    move: Move, character: Fighter | None, opponent: Fighter | None, state: BattleState | None
) -> bool:
    """False when any veto applies: unaffordable, or a desperation move without the trigger."""
    if not can_afford(character, move):
        return False
    if move.has_tag("desperation") and not can_trigger_desperation(character, opponent, state):
        return False
    return True
