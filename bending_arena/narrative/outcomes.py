"""Handlebars rendering for battle conclusions."""

from collections.abc import Callable, Mapping
from typing import Any

import pybars

from bending_arena.models import BattleState

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class TemplateError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def _helper_upper(this, value):
    """{{upper name}} uppercases its argument."""
    return str(value).upper()


_HELPERS: dict[str, Callable] = {
    "upper": _helper_upper,
}


def render_template(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise TemplateError(f"Template error: {e}") from e


def _fighter_ctx(state: BattleState, fighter_id: str | None) -> dict[str, Any] | None:
    if fighter_id is None or fighter_id not in state.fighters:
        return None
    f = state.fighters[fighter_id]
    return {
        "id": f.id,
        "name": f.name,
        "hp": max(f.hp, 0),
        "max_hp": f.max_hp,
        "hp_percent": round(max(f.hp_percent, 0)),
        "mental_state": f.mental_state,
    }


def build_context(state: BattleState) -> dict[str, Any]:
    """Template variables for a finished battle.

    {{winner.name}}, {{loser.name}}, {{fighters}} (list, bind order),
    {{turns}}, {{environment.name}}, {{reason}}.
    """
    outcome = state.outcome
    ctx: dict[str, Any] = {
        "fighters": [_fighter_ctx(state, fid) for fid in state.fighters],
        "turns": state.turn,
        "environment": {"id": state.environment.id, "name": state.environment.name},
        "reason": outcome.reason if outcome else "",
    }
    if outcome is not None:
        winner = _fighter_ctx(state, outcome.winner_id)
        loser = _fighter_ctx(state, outcome.loser_id)
        if winner is not None:
            ctx["winner"] = winner
        if loser is not None:
            ctx["loser"] = loser
    return ctx


def render_conclusion(state: BattleState, templates: Mapping[str, str]) -> str:
    """Conclusion line for a finished battle; "" when no template exists for its kind."""
    if state.outcome is None:
        return ""
    template = templates.get(state.outcome.kind)
    if not template:
        return ""
    return render_template(template, build_context(state)).strip()
