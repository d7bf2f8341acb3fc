"""Tests for bending_arena.models."""

import pytest
from pydantic import ValidationError

from bending_arena.models import (
    BattleOutcome,
    BattleState,
    Environment,
    Fighter,
    FighterTemplate,
    Move,
    ThreatLevel,
)


class TestMove:
    def test_frozen(self) -> None:
        move = Move(id="jab", name="Jab", power=10, accuracy=90)
        with pytest.raises(ValidationError):
            move.power = 99

    def test_accuracy_bounds(self) -> None:
        with pytest.raises(ValidationError):
            Move(id="x", name="X", power=10, accuracy=101)

    def test_invalid_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Move(id="x", name="X", power=10, accuracy=50, kind="taunt")

    def test_tags_from_list(self) -> None:
        move = Move.model_validate({"id": "x", "name": "X", "power": 1, "accuracy": 1, "tags": ["precise"]})
        assert move.tags == ("precise",)
        assert move.has_tag("precise")


class TestFighter:
    def test_from_template(self) -> None:
        template = FighterTemplate(id="toph", name="Toph", pronouns="she", max_hp=120, max_energy=80,
                                   moves=["earth-wave"])
        fighter = Fighter.from_template(template)
        assert fighter.hp == 120
        assert fighter.energy == 80
        assert fighter.mental_state == "stable"
        assert fighter.flags.used_desperation is False
        assert fighter.moves == ["earth-wave"]

    def test_hp_percent_and_down(self) -> None:
        fighter = Fighter(id="a", name="A", hp=30, max_hp=120, energy=0, max_energy=0)
        assert fighter.hp_percent == 25
        assert fighter.is_down is False
        fighter.hp = 0
        assert fighter.is_down is True


class TestBattleOutcome:
    def test_victory_needs_both_sides(self) -> None:
        with pytest.raises(ValidationError):
            BattleOutcome(kind="victory", winner_id="a")

    def test_draw_cannot_name_winner(self) -> None:
        with pytest.raises(ValidationError):
            BattleOutcome(kind="draw", winner_id="a", loser_id="b")

    def test_valid_kinds(self) -> None:
        assert BattleOutcome(kind="stalemate").winner_id is None
        assert BattleOutcome(kind="forfeit", winner_id="a", loser_id="b").loser_id == "b"


class TestBattleState:
    def _state(self) -> BattleState:
        return BattleState(
            fighters={
                "a": Fighter(id="a", name="A", hp=100, max_hp=100, energy=0, max_energy=0, moves=["jab", "gone"]),
                "b": Fighter(id="b", name="B", hp=100, max_hp=100, energy=0, max_energy=0),
            },
            moves={"jab": Move(id="jab", name="Jab", power=10, accuracy=90)},
            environment=Environment(id="field", name="Field"),
        )

    def test_flags_derive_from_outcome(self) -> None:
        state = self._state()
        assert state.battle_over is False
        state.outcome = BattleOutcome(kind="draw")
        assert state.battle_over and state.is_draw and not state.is_stalemate
        assert state.winner_id is None

    def test_opponent_of(self) -> None:
        state = self._state()
        assert state.opponent_of("a").id == "b"
        assert state.opponent_of("b").id == "a"

    def test_moves_of_skips_unknown_ids(self) -> None:
        state = self._state()
        assert [m.id for m in state.moves_of(state.fighters["a"])] == ["jab"]


class TestThreatLevel:
    def test_rank_order(self) -> None:
        assert ThreatLevel.LOW.rank < ThreatLevel.MEDIUM.rank < ThreatLevel.HIGH.rank
