"""Template substitution for narrative variants.

Placeholders (braces, no spaces):

  {actorName} {targetName} {opponentName}    display names ({actor} etc. too)
  {actor.s} {actor.subject} ...              pronouns: s/o/p/r or long forms
  {target.o} {opponent.p} ...                same for the other fighter
  {Actor.s}                                  capitalised root -> capitalised value
  {moveName} {environmentName} ...           caller-supplied extras

One left-to-right pass over the template. Values are never re-scanned, so a
name containing braces stays as typed. Anything that cannot be resolved is
left in place verbatim and logged as a warning; render_with_defects() also
returns the tokens it could not resolve.
"""

import logging
import re
from collections.abc import Mapping
from typing import Protocol

from .pronouns import pronoun

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{([A-Za-z]+(?:\.[A-Za-z]+)?)\}")

_ROLE_ALIASES = {"actor": "actor", "target": "target", "opponent": "target"}


class Named(Protocol):
    name: str
    pronouns: str


def _resolve(token: str, roles: dict[str, Named | None], extra: Mapping[str, str]) -> str | None:
    root, _, form = token.partition(".")
    role = _ROLE_ALIASES.get(root.lower())

    # Pronouns first
    if form:
        if role is None or roles.get(role) is None:
            return None
        value = pronoun(roles[role].pronouns, form)
        if value is None:
            return None
        return value.capitalize() if root[0].isupper() else value

    # Then names
    if role is not None and root == root.lower():
        fighter = roles.get(role)
        return fighter.name if fighter is not None else None
    if root.endswith("Name"):
        role = _ROLE_ALIASES.get(root[: -len("Name")])
        if role is not None and roles.get(role) is not None:
            return roles[role].name

    return extra.get(root)


def render_with_defects(
    template: str,
    actor: Named | None,
    target: Named | None = None,
    extra: Mapping[str, str] | None = None,
) -> tuple[str, list[str]]:
    """Render and return (text, unresolved placeholders from the template)."""
    roles = {"actor": actor, "target": target}
    extra = extra or {}
    unresolved: list[str] = []

    def substitute(match: re.Match) -> str:
        value = _resolve(match.group(1), roles, extra)
        if value is None:
            unresolved.append(match.group(0))
            return match.group(0)
        return str(value)

    text = PLACEHOLDER_RE.sub(substitute, template)
    if unresolved:
        logger.warning("Unresolved placeholders %s in %r", unresolved, template)
    return text, unresolved


def render(
    template: str,
    actor: Named | None,
    target: Named | None = None,
    extra: Mapping[str, str] | None = None,
) -> str:
    return render_with_defects(template, actor, target, extra)[0]
