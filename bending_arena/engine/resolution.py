"""Applying a chosen move to both fighters.

  hit       randint(1, 100) <= accuracy (-20 off balance; the flag is spent)
  crit      10% (+10% precise); damage x1.5, sets target.crit_received
  damage    max(1, round(power * 0.3)); halved (min 1) into a guard, guard spent
  defense   no damage; sets actor.guarded
  disable   debuff_disable hit sets target.off_balance
  recoil    always paid by the actor, hit or miss
  stress    half the damage received, +20 on a received crit;
            thresholds 25/60/90 -> stressed/shaken/broken, never recovers

All randomness comes from the rng the caller passes in.
"""

import random

from pydantic import BaseModel

from bending_arena.models import MENTAL_STATE_ORDER, Fighter, Move

DAMAGE_FACTOR = 0.3
CRIT_CHANCE = 10
PRECISE_CRIT_BONUS = 10
CRIT_MULTIPLIER = 1.5
OFF_BALANCE_PENALTY = 20
CRIT_STRESS = 20
ENERGY_REGEN = 5

STRESS_THRESHOLDS = (
    (90, "broken"),
    (60, "shaken"),
    (25, "stressed"),
)


class MoveResult(BaseModel):
    hit: bool = False
    crit: bool = False
    damage: int = 0
    recoil: int = 0
    energy_spent: int = 0
    guarded: bool = False
    humor: bool = False
    mental_shift: str | None = None  # target's new mental state, if it changed


def base_damage(move: Move) -> int:
    return max(1, round(move.power * DAMAGE_FACTOR))


def mental_state_for(stress: float) -> str:
    for threshold, level in STRESS_THRESHOLDS:
        if stress >= threshold:
            return level
    return "stable"


def apply_stress(fighter: Fighter, damage: int, crit: bool) -> str | None:
    """Accumulate stress; return the new mental state if it got worse."""
    fighter.stress += damage / 2
    if crit:
        fighter.stress += CRIT_STRESS
    level = mental_state_for(fighter.stress)
    if MENTAL_STATE_ORDER.index(level) > MENTAL_STATE_ORDER.index(fighter.mental_state):
        fighter.mental_state = level
        return level
    return None


def roll_hit(move: Move, actor: Fighter, rng: random.Random) -> bool:
    accuracy = move.accuracy
    if actor.flags.off_balance:
        accuracy -= OFF_BALANCE_PENALTY
        actor.flags.off_balance = False
    return rng.randint(1, 100) <= accuracy


def roll_crit(move: Move, rng: random.Random) -> bool:
    chance = CRIT_CHANCE + (PRECISE_CRIT_BONUS if move.has_tag("precise") else 0)
    return rng.randint(1, 100) <= chance


def resolve_move(move: Move, actor: Fighter, target: Fighter, rng: random.Random) -> MoveResult:
    """Apply `move` from `actor` to `target`, mutating both. Returns the numbers."""
    result = MoveResult(energy_spent=move.energy_cost)
    actor.energy = max(0, actor.energy - move.energy_cost)
    actor.stats.moves_used += 1
    target.flags.crit_received = False

    result.hit = roll_hit(move, actor, rng)
    if not result.hit:
        actor.stats.moves_missed += 1
        result.humor = move.has_tag("unpredictable")
    elif move.kind == "defense":
        actor.flags.guarded = True
        result.guarded = True
    else:
        damage = base_damage(move)
        result.crit = roll_crit(move, rng)
        if result.crit:
            damage = round(damage * CRIT_MULTIPLIER)
            target.flags.crit_received = True
        if target.flags.guarded:
            damage = max(1, damage // 2)
            target.flags.guarded = False
        target.hp -= damage
        result.damage = damage
        actor.stats.hits_landed += 1
        actor.stats.damage_dealt += damage
        target.stats.damage_taken += damage
        if move.has_tag("debuff_disable"):
            target.flags.off_balance = True
        result.mental_shift = apply_stress(target, damage, result.crit)

    if move.recoil:
        actor.hp -= move.recoil
        actor.stats.damage_taken += move.recoil
        result.recoil = move.recoil
    return result


def regenerate(fighter: Fighter, amount: int = ENERGY_REGEN) -> None:
    fighter.energy = min(fighter.max_energy, fighter.energy + amount)
