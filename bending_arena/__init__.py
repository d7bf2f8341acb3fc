"""Bending Arena: scripted 1v1 battle simulation with narrated outcomes.

Two subsystems do the real work:

  ai/         heuristic decision engine (threat, conditions, move scoring, bias)
  narrative/  variant selection (ordered filter chain) + template substitution

engine/ drives both from a turn-by-turn state machine; storage/ loads the
static authoring data (roster, environments, bias table, variant pools).
"""

__version__ = "0.3.0"
