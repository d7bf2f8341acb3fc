"""Tests for the battle loop state machine."""

import random

import pytest
from pydantic import ValidationError

from bending_arena.engine import loop as loop_module
from bending_arena.engine.loop import BattleConfig, BattleLoop, IllegalTransition, transition
from bending_arena.models import LoopStatus


def _bound(make_fighter, moves, arena, first, second, rng, **config):
    battle = BattleLoop(config=BattleConfig(**config), rng=rng)
    battle.bind(first, second, arena, moves)
    return battle


# ── Binding and transitions ──────────────────────────────────


def test_starts_idle_and_cannot_tick():
    battle = BattleLoop()
    assert battle.status is LoopStatus.IDLE
    with pytest.raises(IllegalTransition):
        battle.tick()


def test_bind_enters_running_with_opening(make_fighter, moves, arena):
    battle = BattleLoop(rng=random.Random(1))
    state = battle.bind(make_fighter("a"), make_fighter("b"), arena, moves)
    assert state.status is LoopStatus.RUNNING
    assert [e.type for e in state.log] == ["opening"]
    assert state.log[0].text == "A and B square off at The Arena."


def test_braced_name_is_not_a_render_defect(make_fighter, moves, arena):
    battle = BattleLoop(rng=random.Random(1))
    state = battle.bind(make_fighter("ghost", name="{Ghost}"), make_fighter("b"), arena, moves)
    assert "{Ghost}" in state.log[0].text
    assert state.metrics.render_defects == 0


def test_bind_twice_is_illegal(make_fighter, moves, arena):
    battle = BattleLoop(rng=random.Random(1))
    battle.bind(make_fighter("a"), make_fighter("b"), arena, moves)
    with pytest.raises(IllegalTransition):
        battle.bind(make_fighter("c"), make_fighter("d"), arena, moves)


def test_bind_rejects_unknown_moves(make_fighter, moves, arena):
    with pytest.raises(ValueError, match="unknown moves: nope"):
        BattleLoop().bind(make_fighter("a", moves=["jab", "nope"]), make_fighter("b"), arena, moves)


def test_bind_rejects_duplicate_ids(make_fighter, moves, arena):
    with pytest.raises(ValueError):
        BattleLoop().bind(make_fighter("a"), make_fighter("a"), arena, moves)


def test_transition_table(make_fighter, make_state):
    state = make_state(make_fighter("a"), make_fighter("b"))
    state.status = LoopStatus.COMPLETED
    with pytest.raises(IllegalTransition):
        transition(state, LoopStatus.RUNNING)


def test_faster_fighter_acts_first(make_fighter, moves, arena, scripted_rng):
    slow = make_fighter("slow", moves=["jab"], speed=10)
    fast = make_fighter("fast", moves=["jab"], speed=90)
    battle = _bound(make_fighter, moves, arena, slow, fast, scripted_rng([99, 99]))
    state = battle.tick()
    assert [e.actor_id for e in state.log if e.type == "move"] == ["fast", "slow"]


# ── Terminal conditions ──────────────────────────────────────


def test_knockout_victory(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", moves=["jab"], speed=60)
    b = make_fighter("b", hp=5, moves=["jab"], speed=50)
    battle = _bound(make_fighter, moves, arena, a, b, scripted_rng([1, 99]))
    summary = battle.run()

    assert summary.status is LoopStatus.COMPLETED
    assert summary.outcome == "victory"
    assert (summary.winner_id, summary.loser_id) == ("a", "b")
    # b was knocked out before its turn came
    assert [e.type for e in battle.state.log] == ["opening", "move", "terminal"]
    assert battle.state.log[1].beat == "finishing_move"


def test_double_knockout_is_draw(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", hp=4, energy=8, moves=["last-stand"], speed=60)
    b = make_fighter("b", hp=20, moves=["jab"], speed=50)
    battle = _bound(make_fighter, moves, arena, a, b, scripted_rng([1, 99]))
    summary = battle.run()

    state = battle.state
    assert state.fighters["a"].hp <= 0 and state.fighters["b"].hp <= 0
    assert summary.outcome == "draw"
    assert summary.is_draw is True
    assert summary.winner_id is None and summary.loser_id is None
    assert state.fighters["a"].flags.used_desperation is True
    assert [e.type for e in state.log] == ["opening", "desperation", "move", "terminal"]


def test_quiet_turns_stalemate(make_fighter, moves, arena):
    a = make_fighter("a", moves=["guard"])
    b = make_fighter("b", moves=["guard"])
    battle = _bound(make_fighter, moves, arena, a, b, random.Random(3), stalemate_turns=3)
    summary = battle.run()
    assert summary.status is LoopStatus.STALEMATE
    assert summary.is_stalemate is True
    assert summary.turn_count == 3


def test_turn_limit_is_stalemate_by_default(make_fighter, moves, arena):
    a = make_fighter("a", moves=["guard"])
    b = make_fighter("b", moves=["guard"])
    battle = _bound(make_fighter, moves, arena, a, b, random.Random(3), max_turns=4)
    summary = battle.run()
    assert summary.outcome == "stalemate"
    assert summary.turn_count == 4
    assert "turn limit" in battle.state.outcome.reason


def test_turn_limit_decision(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", moves=["jab"])
    b = make_fighter("b", moves=["guard"])
    battle = _bound(
        make_fighter, moves, arena, a, b, scripted_rng([1, 99, 1] * 3),
        max_turns=3, decide_on_timeout=True,
    )
    summary = battle.run()
    assert summary.outcome == "timeout"
    assert summary.winner_id == "a"
    assert summary.status is LoopStatus.COMPLETED


def test_turn_limit_decision_even_health_is_draw(make_fighter, moves, arena):
    a = make_fighter("a", moves=["guard"])
    b = make_fighter("b", moves=["guard"])
    battle = _bound(make_fighter, moves, arena, a, b, random.Random(3), max_turns=2, decide_on_timeout=True)
    assert battle.run().outcome == "draw"


def test_max_turns_always_respected(make_fighter, moves, arena):
    for seed in range(10):
        battle = _bound(
            make_fighter, moves, arena, make_fighter("a"), make_fighter("b"), random.Random(seed),
            max_turns=6,
        )
        summary = battle.run()
        assert summary.turn_count <= 6
        assert battle.state.battle_over


# ── Exhausted options ────────────────────────────────────────


def test_exhausted_fighter_passes(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", energy=0, moves=["strike"], speed=60)
    b = make_fighter("b", moves=["guard"], speed=50)
    battle = _bound(make_fighter, moves, arena, a, b, scripted_rng([1, 1]))
    state = battle.tick()
    assert state.status is LoopStatus.RUNNING
    passes = [e for e in state.log if e.type == "pass"]
    assert passes[0].actor_id == "a"
    assert "pass" in passes[0].reasons


def test_exhausted_fighter_forfeits_when_configured(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", energy=0, moves=["strike"], speed=60)
    b = make_fighter("b", moves=["guard"], speed=50)
    battle = _bound(make_fighter, moves, arena, a, b, scripted_rng([]), forfeit_on_exhaustion=True)
    summary = battle.run()
    assert summary.outcome == "forfeit"
    assert (summary.winner_id, summary.loser_id) == ("b", "a")
    assert summary.turn_count == 1


# ── Error containment ────────────────────────────────────────


def test_tick_error_aborts_and_rolls_back(make_fighter, moves, arena, monkeypatch):
    battle = _bound(
        make_fighter, moves, arena,
        make_fighter("a", moves=["jab"]), make_fighter("b", moves=["jab"]), random.Random(5),
    )
    committed = battle.tick()
    hp_after_first = {fid: f.hp for fid, f in committed.fighters.items()}
    log_length = len(committed.log)

    calls = []
    real = loop_module.resolve_move

    def flaky(*args, **kwargs):
        calls.append(1)
        if len(calls) == 2:
            raise RuntimeError("boom")
        return real(*args, **kwargs)

    monkeypatch.setattr(loop_module, "resolve_move", flaky)
    state = battle.tick()

    assert state.status is LoopStatus.ERROR_ABORTED
    assert state.outcome.kind == "aborted"
    assert state.turn == 1
    assert {fid: f.hp for fid, f in state.fighters.items()} == hp_after_first
    assert len(state.log) == log_length + 1
    assert state.log[-1].type == "error"
    assert state.metrics.error_count == 1
    assert "RuntimeError: boom" in state.error_log[0]

    with pytest.raises(IllegalTransition):
        battle.tick()


# ── Metrics and conclusions ──────────────────────────────────


def test_metrics_track_every_tick(make_fighter, moves, arena):
    battle = _bound(make_fighter, moves, arena, make_fighter("a"), make_fighter("b"), random.Random(11))
    summary = battle.run()
    state = battle.state
    assert summary.metrics.turn_count == state.turn
    assert summary.metrics.elapsed_ms >= 0
    counted: dict[str, int] = {}
    for event in state.log:
        counted[event.type] = counted.get(event.type, 0) + 1
    assert state.metrics.event_counts == counted


def test_conclusion_from_template(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", moves=["jab"], speed=60)
    b = make_fighter("b", hp=5, moves=["jab"])
    battle = _bound(
        make_fighter, moves, arena, a, b, scripted_rng([1, 99]),
        outcome_templates={"victory": "{{winner.name}} beats {{loser.name}} in {{turns}}."},
    )
    assert battle.run().conclusion == "A beats B in 1."


def test_broken_template_falls_back_to_plain(make_fighter, moves, arena, scripted_rng):
    a = make_fighter("a", moves=["jab"], speed=60)
    b = make_fighter("b", hp=5, moves=["jab"])
    battle = _bound(
        make_fighter, moves, arena, a, b, scripted_rng([1, 99]),
        outcome_templates={"victory": "{{> missing_partial}}"},
    )
    assert battle.run().conclusion == "A defeats B (victory)."


# ── BattleConfig ─────────────────────────────────────────────


def test_config_from_stored_dict():
    config = BattleConfig.from_config({"max_turns": 30, "unknown": 1}, seed=7, max_turns=None)
    assert config.max_turns == 30
    assert config.seed == 7


def test_config_ranges():
    with pytest.raises(ValidationError):
        BattleConfig(max_turns=0)
    with pytest.raises(ValidationError):
        BattleConfig(stalemate_turns=101)
