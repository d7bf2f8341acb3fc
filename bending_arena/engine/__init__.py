"""Battle engine: the turn loop and everything it applies per move.

  events      log entries with collision-free ids, per-type counters
  resolution  hit / crit / damage / recoil / flags / stress
  phases      early / mid / late, and the narrative beat of each move
  loop        BattleLoop state machine, BattleConfig, simulate()
"""

from .events import new_event_id, record  # noqa: F401
from .loop import (  # noqa: F401
    TRANSITIONS,
    BattleConfig,
    BattleLoop,
    IllegalTransition,
    plain_conclusion,
    simulate,
    transition,
)
from .phases import classify_beat, phase_for  # noqa: F401
from .resolution import MoveResult, apply_stress, base_damage, mental_state_for, resolve_move  # noqa: F401
