"""Core domain models.

All engine, AI and narrative functions operate on these types.
Pydantic is used for validation and serialisation at every data boundary
(roster files in, event log and summary out).

Moves, environments, bias entries and narrative variants are authoring data:
frozen once loaded and shared read-only. Fighters and BattleState are the
only mutable models, and only the battle loop mutates them.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

MentalState = Literal["stable", "stressed", "shaken", "broken"]

MENTAL_STATE_ORDER: tuple[str, ...] = ("stable", "stressed", "shaken", "broken")

Phase = Literal["early", "mid", "late"]

Beat = Literal[
    "opening",
    "advantage_attack",
    "disadvantage_attack",
    "terrain_interaction",
    "finishing_move",
]

BEATS: tuple[str, ...] = (
    "opening",
    "advantage_attack",
    "disadvantage_attack",
    "terrain_interaction",
    "finishing_move",
)

MoveKind = Literal["offense", "defense", "utility", "finisher"]

EventType = Literal[
    "opening",
    "move",
    "pass",
    "desperation",
    "mental_state",
    "terminal",
    "error",
]

OutcomeKind = Literal["victory", "draw", "stalemate", "forfeit", "timeout", "aborted"]


class ThreatLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _THREAT_RANK[self]


_THREAT_RANK = {ThreatLevel.LOW: 0, ThreatLevel.MEDIUM: 1, ThreatLevel.HIGH: 2}


class LoopStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STALEMATE = "stalemate"
    ERROR_ABORTED = "error_aborted"


# ── Authoring data (read-only) ───────────────────────────


class Move(BaseModel):
    """One technique. Shared by id across every fighter that knows it."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    power: int = Field(ge=0)
    accuracy: int = Field(ge=0, le=100)
    energy_cost: int = Field(default=0, ge=0)
    kind: MoveKind = "offense"
    recoil: int = Field(default=0, ge=0)
    tags: tuple[str, ...] = ()

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


class Environment(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    tags: tuple[str, ...] = ()
    terrain: tuple[str, ...] = ()  # free-text feature descriptors


class AiBias(BaseModel):
    """Per-character nudges on top of objective move scoring. Absent fields are 0."""

    model_config = ConfigDict(frozen=True)

    overkill: float = 0.0
    self_preservation: float = 0.0
    betrayal_risk: float = 0.0
    showboating: float = 0.0


class NarrativeVariant(BaseModel):
    """One candidate template for a beat. Phase applicability comes from tags."""

    model_config = ConfigDict(frozen=True)

    text: str
    tags: tuple[str, ...] = ()
    environment_tags: tuple[str, ...] = ()


class FighterTemplate(BaseModel):
    """Roster entry as authored. Converted to a Fighter when a battle binds."""

    id: str
    name: str
    pronouns: str = "they"
    max_hp: int = Field(default=100, gt=0)
    max_energy: int = Field(default=100, ge=0)
    speed: int = 50
    moves: list[str] = Field(default_factory=list)


# ── Battle session state (mutable, owned by the loop) ────


class FighterFlags(BaseModel):
    used_desperation: bool = False
    guarded: bool = False
    off_balance: bool = False
    crit_received: bool = False


class FighterStats(BaseModel):
    damage_dealt: int = 0
    damage_taken: int = 0
    hits_landed: int = 0
    moves_missed: int = 0
    moves_used: int = 0


class Fighter(BaseModel):
    id: str
    name: str
    hp: int
    max_hp: int = Field(gt=0)
    energy: int
    max_energy: int = Field(ge=0)
    mental_state: MentalState = "stable"
    stress: float = 0.0
    pronouns: str = "they"
    speed: int = 50
    moves: list[str] = Field(default_factory=list)  # move ids
    flags: FighterFlags = Field(default_factory=FighterFlags)
    stats: FighterStats = Field(default_factory=FighterStats)

    @classmethod
    def from_template(cls, template: FighterTemplate) -> Fighter:
        return cls(
            id=template.id,
            name=template.name,
            hp=template.max_hp,
            max_hp=template.max_hp,
            energy=template.max_energy,
            max_energy=template.max_energy,
            pronouns=template.pronouns,
            speed=template.speed,
            moves=list(template.moves),
        )

    @property
    def hp_percent(self) -> float:
        return self.hp / self.max_hp * 100

    @property
    def is_down(self) -> bool:
        return self.hp <= 0


class BattleOutcome(BaseModel):
    """Terminal classification. Its existence is what makes a battle 'over'."""

    model_config = ConfigDict(frozen=True)

    kind: OutcomeKind
    winner_id: str | None = None
    loser_id: str | None = None
    reason: str = ""

    @model_validator(mode="after")
    def _check_participants(self) -> BattleOutcome:
        decisive = self.kind in ("victory", "forfeit", "timeout")
        if decisive and (not self.winner_id or not self.loser_id):
            raise ValueError(f"{self.kind} outcome needs both winner_id and loser_id")
        if not decisive and (self.winner_id or self.loser_id):
            raise ValueError(f"{self.kind} outcome cannot name a winner or loser")
        return self


class BattleMetrics(BaseModel):
    turn_count: int = 0
    elapsed_ms: float = 0.0
    event_counts: dict[str, int] = Field(default_factory=dict)
    error_count: int = 0
    render_defects: int = 0


class BattleEvent(BaseModel):
    """One narrated beat in the outbound log."""

    id: str
    turn: int
    type: EventType
    actor_id: str | None = None
    target_id: str | None = None
    move_id: str | None = None
    beat: str | None = None
    outcome: dict[str, int | float | bool] = Field(default_factory=dict)
    text: str = ""
    reasons: list[str] = Field(default_factory=list)
    timestamp: float


class BattleState(BaseModel):
    fighters: dict[str, Fighter]
    moves: dict[str, Move]
    environment: Environment
    turn: int = 0
    phase: Phase = "early"
    status: LoopStatus = LoopStatus.IDLE
    outcome: BattleOutcome | None = None
    log: list[BattleEvent] = Field(default_factory=list)
    error_log: list[str] = Field(default_factory=list)
    metrics: BattleMetrics = Field(default_factory=BattleMetrics)
    quiet_turns: int = 0  # consecutive ticks with no HP change

    @property
    def battle_over(self) -> bool:
        return self.outcome is not None

    @property
    def is_draw(self) -> bool:
        return self.outcome is not None and self.outcome.kind == "draw"

    @property
    def is_stalemate(self) -> bool:
        return self.outcome is not None and self.outcome.kind == "stalemate"

    @property
    def winner_id(self) -> str | None:
        return self.outcome.winner_id if self.outcome else None

    @property
    def loser_id(self) -> str | None:
        return self.outcome.loser_id if self.outcome else None

    def opponent_of(self, fighter_id: str) -> Fighter | None:
        for fid, fighter in self.fighters.items():
            if fid != fighter_id:
                return fighter
        return None

    def moves_of(self, fighter: Fighter) -> list[Move]:
        """Resolve a fighter's move ids against the shared table, in authored order."""
        return [self.moves[mid] for mid in fighter.moves if mid in self.moves]


class BattleSummary(BaseModel):
    """Terminal record handed to presentation layers alongside the event log."""

    status: LoopStatus
    outcome: OutcomeKind | None = None
    winner_id: str | None = None
    loser_id: str | None = None
    is_draw: bool = False
    is_stalemate: bool = False
    turn_count: int = 0
    final_hp: dict[str, int] = Field(default_factory=dict)
    metrics: BattleMetrics = Field(default_factory=BattleMetrics)
    conclusion: str = ""


# ── Narrative selection context ──────────────────────────


class TurnContext(BaseModel):
    is_crit: bool = False
    is_miss: bool = False
    humor_trigger: bool = False
    low_hp: bool = False
    phase: Phase | None = None


class NarrativeContext(BaseModel):
    """Per-invocation selection input. `reasons` is a diagnostic trail only."""

    turn: TurnContext = Field(default_factory=TurnContext)
    environment: Environment | None = None
    reasons: list[str] = Field(default_factory=list)
