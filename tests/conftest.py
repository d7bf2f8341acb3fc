"""Shared builders for battle-state tests.

The root conftest re-initialises storage for every test; these fixtures build
in-memory fighters and states that never touch storage at all.
"""

import pytest

from bending_arena.models import BattleState, Environment, Fighter, LoopStatus, Move

TEST_MOVES = [
    Move(id="jab", name="Jab", power=20, accuracy=95, energy_cost=0, tags=("melee_range",)),
    Move(id="strike", name="Strike", power=45, accuracy=80, energy_cost=10, tags=("melee_range", "precise")),
    Move(id="guard", name="Guard", power=0, accuracy=100, energy_cost=5, kind="defense",
         tags=("defensive_stance",)),
    Move(id="pin", name="Pin", power=30, accuracy=85, energy_cost=8, kind="utility",
         tags=("debuff_disable",)),
    Move(id="haymaker", name="Haymaker", power=80, accuracy=50, energy_cost=25, kind="finisher",
         tags=("requires_opening", "highRisk")),
    Move(id="last-stand", name="Last Stand", power=90, accuracy=90, energy_cost=6, kind="finisher",
         recoil=5, tags=("desperation",)),
]

ARENA = Environment(id="arena", name="The Arena", tags=("rocky", "open"), terrain=("loose boulders",))


class ScriptedRng:
    """Stand-in for random.Random: randint() replays a script, choice() takes the first item."""

    def __init__(self, rolls):
        self.rolls = list(rolls)

    def randint(self, a, b):
        return self.rolls.pop(0)

    def choice(self, seq):
        return seq[0]


@pytest.fixture
def moves() -> dict[str, Move]:
    return {m.id: m for m in TEST_MOVES}


@pytest.fixture
def arena() -> Environment:
    return ARENA


@pytest.fixture
def make_fighter():
    def _make(fighter_id="a", hp=100, energy=100, moves=None, **kwargs) -> Fighter:
        return Fighter(
            id=fighter_id,
            name=kwargs.pop("name", fighter_id.title()),
            hp=hp,
            max_hp=kwargs.pop("max_hp", 100),
            energy=energy,
            max_energy=kwargs.pop("max_energy", 100),
            moves=list(moves) if moves is not None else [m.id for m in TEST_MOVES],
            **kwargs,
        )
    return _make


@pytest.fixture
def make_state(moves, arena):
    def _make(*fighters: Fighter, environment=None, turn=0) -> BattleState:
        return BattleState(
            fighters={f.id: f for f in fighters},
            moves=moves,
            environment=environment or arena,
            turn=turn,
            status=LoopStatus.RUNNING,
        )
    return _make


@pytest.fixture
def scripted_rng():
    return ScriptedRng
