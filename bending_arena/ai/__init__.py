"""Heuristic move selection.

  bias        explicit per-character bias table (no global registry)
  threat      LOW / MEDIUM / HIGH from current HP and opponent power
  conditions  pure predicates shared with the narrative layer, plus move vetoes
  scoring     damage / accuracy / risk / strategic components, weights, bias
  decision    vetoes -> scoring -> top-ranked move, or ExhaustedOptions
"""

from .bias import BiasTable, NEUTRAL_BIAS, load_bias_table, resolve_bias  # noqa: F401
from .conditions import (  # noqa: F401
    can_afford,
    can_trigger_desperation,
    is_desperate_broken,
    is_finishing_window,
    is_in_control,
    is_low_hp,
    is_move_legal,
)
from .decision import Decision, ExhaustedOptions, choose_move, legal_moves  # noqa: F401
from .scoring import (  # noqa: F401
    DEFAULT_WEIGHTS,
    MoveEvaluation,
    ScoreWeights,
    ScoringContext,
    evaluate_moves,
    score_move,
)
from .threat import analyze_threat, classify_threat, threat_score  # noqa: F401
