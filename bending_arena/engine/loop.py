"""Battle loop state machine.

States and the only legal transitions:

  IDLE ──bind()──> RUNNING ──tick()──> COMPLETED      victory, draw, forfeit, timeout
                                  ├──> STALEMATE      no HP change / turn limit
                                  └──> ERROR_ABORTED  anything raised inside a tick

Each tick plays on a deep copy of the committed state and only replaces it
when the whole turn succeeded. A failing tick leaves the last committed state
in place, records the error there and aborts the loop, so a half-played turn
is never visible to callers. Metrics are updated on every tick either way.

Per tick:
  1. turn += 1, phase recomputed (never regresses)
  2. fighters act in speed order (ties: bind order); a downed fighter, or
     one whose opponent is already down, does not act
  3. energy regenerates, the quiet-turn counter updates
  4. terminal checks, in order: double KO (draw), single KO (victory),
     quiet turns >= stalemate_turns (stalemate), turn >= max_turns
     (stalemate, or a decision on HP% when decide_on_timeout is set)
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Mapping

from pydantic import BaseModel, Field

from bending_arena.ai import BiasTable, ExhaustedOptions, choose_move
from bending_arena.models import (
    BattleOutcome,
    BattleState,
    BattleSummary,
    Environment,
    Fighter,
    FighterTemplate,
    LoopStatus,
    Move,
)
from bending_arena.narrative import Narrator, TemplateError, VariantPools, render, render_conclusion

from . import events
from .phases import classify_beat, phase_for
from .resolution import regenerate, resolve_move

logger = logging.getLogger(__name__)

DESPERATION_TEXT = "{actorName} has nothing left to lose and reaches for {moveName}!"
PASS_TEXT = "{actorName} has nothing left to throw and can only watch {targetName}."
FORFEIT_TEXT = "{actorName} is spent and yields to {targetName}."

TRANSITIONS: dict[LoopStatus, set[LoopStatus]] = {
    LoopStatus.IDLE: {LoopStatus.RUNNING},
    LoopStatus.RUNNING: {LoopStatus.COMPLETED, LoopStatus.STALEMATE, LoopStatus.ERROR_ABORTED},
}


class IllegalTransition(Exception):
    """Raised when the loop is asked to move between states it cannot."""


class BattleConfig(BaseModel):
    max_turns: int = Field(default=50, ge=1, le=1000)
    stalemate_turns: int = Field(default=20, ge=1, le=100)
    forfeit_on_exhaustion: bool = False
    decide_on_timeout: bool = False
    seed: int | None = None
    outcome_templates: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping, **overrides) -> BattleConfig:
        """Build from a stored config dict; None overrides are ignored."""
        fields = {k: v for k, v in config.items() if k in cls.model_fields}
        fields.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(fields)


def transition(state: BattleState, target: LoopStatus) -> None:
    if target not in TRANSITIONS.get(state.status, set()):
        raise IllegalTransition(f"{state.status.value} -> {target.value}")
    state.status = target


class BattleLoop:
    """One battle session. Not shared between threads."""

    def __init__(
        self,
        config: BattleConfig | None = None,
        bias_table: BiasTable | None = None,
        pools: VariantPools | None = None,
        rng: random.Random | None = None,
    ):
        self.config = config or BattleConfig()
        self.bias_table = bias_table or {}
        self.rng = rng or random.Random(self.config.seed)
        self.narrator = Narrator(pools, self.rng)
        self.state: BattleState | None = None
        self.order: list[str] = []

    @property
    def status(self) -> LoopStatus:
        return self.state.status if self.state is not None else LoopStatus.IDLE

    # ── Binding ──────────────────────────────────────────

    def bind(
        self,
        first: Fighter | FighterTemplate,
        second: Fighter | FighterTemplate,
        environment: Environment,
        moves: Mapping[str, Move],
    ) -> BattleState:
        """Seat both fighters and enter RUNNING. Raises ValueError on bad rosters."""
        if self.state is not None:
            raise IllegalTransition(f"{self.status.value} -> {LoopStatus.RUNNING.value}")

        fighters = [f if isinstance(f, Fighter) else Fighter.from_template(f) for f in (first, second)]
        if fighters[0].id == fighters[1].id:
            raise ValueError(f"Both fighters have id '{fighters[0].id}'")
        for fighter in fighters:
            missing = [mid for mid in fighter.moves if mid not in moves]
            if missing:
                raise ValueError(f"Fighter '{fighter.id}' references unknown moves: {', '.join(missing)}")

        state = BattleState(
            fighters={f.id: f for f in fighters},
            moves=dict(moves),
            environment=environment,
        )
        self.order = [f.id for _, f in sorted(enumerate(fighters), key=lambda p: (-p[1].speed, p[0]))]
        transition(state, LoopStatus.RUNNING)

        lead, other = (state.fighters[fid] for fid in self.order)
        narration = self.narrator.opening(state, lead, other)
        state.metrics.render_defects += len(narration.unresolved)
        events.record(
            state, "opening", narration.text,
            actor_id=lead.id, target_id=other.id, beat="opening", reasons=narration.reasons,
        )
        logger.info(
            "Battle bound: %s vs %s at %s (max_turns=%d)",
            fighters[0].id, fighters[1].id, environment.id, self.config.max_turns,
        )
        self.state = state
        return state

    # ── Ticking ──────────────────────────────────────────

    def tick(self) -> BattleState:
        """Play one full turn. Only legal while RUNNING."""
        if self.state is None or self.state.status is not LoopStatus.RUNNING:
            raise IllegalTransition(f"cannot tick while {self.status.value}")

        started = time.perf_counter()
        committed = self.state
        working = committed.model_copy(deep=True)
        try:
            self._play_turn(working)
            committed = working
        except Exception as e:
            logger.exception("Turn %d failed, aborting battle", committed.turn + 1)
            self._abort(committed, e)
        finally:
            committed.metrics.turn_count = committed.turn
            committed.metrics.elapsed_ms += (time.perf_counter() - started) * 1000
            self.state = committed
        return committed

    def run(self) -> BattleSummary:
        """Tick until the loop leaves RUNNING; max_turns guarantees it does."""
        while self.status is LoopStatus.RUNNING:
            self.tick()
        return self.summary()

    def _play_turn(self, state: BattleState) -> None:
        state.turn += 1
        state.phase = phase_for(state)
        hp_before = {fid: f.hp for fid, f in state.fighters.items()}

        for fid in self.order:
            actor = state.fighters[fid]
            target = state.opponent_of(fid)
            if actor.is_down or target is None or target.is_down:
                continue
            self._act(state, actor, target)
            if state.outcome is not None:
                break

        for fighter in state.fighters.values():
            regenerate(fighter)
        if all(f.hp == hp_before[fid] for fid, f in state.fighters.items()):
            state.quiet_turns += 1
        else:
            state.quiet_turns = 0
        self._check_terminal(state)

    def _act(self, state: BattleState, actor: Fighter, target: Fighter) -> None:
        try:
            decision = choose_move(state, actor.id, self.bias_table)
        except ExhaustedOptions:
            self._exhausted(state, actor, target)
            return

        move = decision.move
        if move.has_tag("desperation"):
            actor.flags.used_desperation = True
            events.record(
                state, "desperation", render(DESPERATION_TEXT, actor, target, {"moveName": move.name}),
                actor_id=actor.id, target_id=target.id, move_id=move.id,
            )

        result = resolve_move(move, actor, target, self.rng)
        beat = classify_beat(move, actor, target, state.environment)
        narration = self.narrator.move(
            state, beat, move, actor, target,
            hit=result.hit, crit=result.crit, humor=result.humor,
        )
        state.metrics.render_defects += len(narration.unresolved)
        events.record(
            state, "move", narration.text,
            actor_id=actor.id,
            target_id=target.id,
            move_id=move.id,
            beat=beat,
            outcome={
                "damage": result.damage,
                "hit": result.hit,
                "crit": result.crit,
                "energy_spent": result.energy_spent,
                "recoil": result.recoil,
                "actor_hp": actor.hp,
                "target_hp": target.hp,
            },
            reasons=decision.reasons + narration.reasons,
        )
        if result.mental_shift:
            events.record(
                state, "mental_state", f"{target.name} is {result.mental_shift}.",
                actor_id=target.id,
            )

    def _exhausted(self, state: BattleState, actor: Fighter, target: Fighter) -> None:
        if self.config.forfeit_on_exhaustion:
            events.record(
                state, "pass", render(FORFEIT_TEXT, actor, target),
                actor_id=actor.id, target_id=target.id, reasons=["no legal move", "forfeit"],
            )
            state.outcome = BattleOutcome(
                kind="forfeit", winner_id=target.id, loser_id=actor.id,
                reason=f"{actor.id} had no legal move",
            )
            return
        events.record(
            state, "pass", render(PASS_TEXT, actor, target),
            actor_id=actor.id, target_id=target.id, reasons=["no legal move", "pass"],
        )

    # ── Termination ──────────────────────────────────────

    def _classify(self, state: BattleState) -> BattleOutcome | None:
        first, second = (state.fighters[fid] for fid in self.order)
        if first.is_down and second.is_down:
            return BattleOutcome(kind="draw", reason="double knockout")
        if first.is_down or second.is_down:
            winner, loser = (second, first) if first.is_down else (first, second)
            return BattleOutcome(kind="victory", winner_id=winner.id, loser_id=loser.id, reason="knockout")
        if state.quiet_turns >= self.config.stalemate_turns:
            return BattleOutcome(kind="stalemate", reason=f"no HP change for {state.quiet_turns} turns")
        if state.turn >= self.config.max_turns:
            if not self.config.decide_on_timeout:
                return BattleOutcome(kind="stalemate", reason=f"turn limit {self.config.max_turns} reached")
            if first.hp_percent == second.hp_percent:
                return BattleOutcome(kind="draw", reason="turn limit reached, even on health")
            winner, loser = (first, second) if first.hp_percent > second.hp_percent else (second, first)
            return BattleOutcome(
                kind="timeout", winner_id=winner.id, loser_id=loser.id, reason="turn limit reached, decision"
            )
        return None

    def _check_terminal(self, state: BattleState) -> None:
        outcome = state.outcome or self._classify(state)
        if outcome is None:
            return
        state.outcome = outcome
        transition(state, LoopStatus.STALEMATE if outcome.kind == "stalemate" else LoopStatus.COMPLETED)
        events.record(state, "terminal", self._conclusion(state), reasons=[outcome.reason])
        logger.info(
            "Battle over after %d turns: %s (winner=%s)", state.turn, outcome.kind, outcome.winner_id
        )

    def _abort(self, state: BattleState, error: Exception) -> None:
        state.error_log.append(f"turn {state.turn + 1}: {type(error).__name__}: {error}")
        state.metrics.error_count += 1
        state.outcome = BattleOutcome(kind="aborted", reason=str(error))
        transition(state, LoopStatus.ERROR_ABORTED)
        events.record(state, "error", self._conclusion(state), reasons=[type(error).__name__])

    def _conclusion(self, state: BattleState) -> str:
        try:
            text = render_conclusion(state, self.config.outcome_templates)
        except TemplateError as e:
            logger.warning("Conclusion template failed for %s: %s", state.outcome.kind, e)
            text = ""
        return text or plain_conclusion(state)

    def summary(self) -> BattleSummary:
        state = self.state
        if state is None:
            return BattleSummary(status=LoopStatus.IDLE)
        terminal = next((e for e in reversed(state.log) if e.type in ("terminal", "error")), None)
        return BattleSummary(
            status=state.status,
            outcome=state.outcome.kind if state.outcome else None,
            winner_id=state.winner_id,
            loser_id=state.loser_id,
            is_draw=state.is_draw,
            is_stalemate=state.is_stalemate,
            turn_count=state.turn,
            final_hp={fid: f.hp for fid, f in state.fighters.items()},
            metrics=state.metrics,
            conclusion=terminal.text if terminal else "",
        )


def plain_conclusion(state: BattleState) -> str:
    outcome = state.outcome
    if outcome is None:
        return ""
    names = {fid: f.name for fid, f in state.fighters.items()}
    if outcome.kind in ("victory", "forfeit", "timeout"):
        return f"{names[outcome.winner_id]} defeats {names[outcome.loser_id]} ({outcome.kind})."
    if outcome.kind == "draw":
        return "The battle ends in a draw."
    if outcome.kind == "stalemate":
        return "Neither fighter can break through. Stalemate."
    return "The battle was cut short."


def simulate(
    first: Fighter | FighterTemplate,
    second: Fighter | FighterTemplate,
    environment: Environment,
    moves: Mapping[str, Move],
    config: BattleConfig | None = None,
    bias_table: BiasTable | None = None,
    pools: VariantPools | None = None,
    rng: random.Random | None = None,
) -> BattleLoop:
    """Bind and run a whole battle; returns the finished loop."""
    loop = BattleLoop(config=config, bias_table=bias_table, pools=pools, rng=rng)
    loop.bind(first, second, environment, moves)
    loop.run()
    return loop
