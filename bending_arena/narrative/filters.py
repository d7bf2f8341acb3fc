"""Narrative filter chain: narrow a beat's variant pool to a usable set.

Filters run in FILTER_CHAIN order. Each takes (pool, context, reasons) and
returns a non-empty narrowed list (stop here) or None (try the next one):

  1. strict_context_filter  variants tagged with every active strict tag
                            (crit, miss, humor, desperate); all of them must
                            be present, not just one
  2. environment_filter     variants sharing an environment tag
  3. phase_filter           variants tagged with the current phase
  4. generic_filter         variants with no tags at all
  5. ultimate_fallback      the whole pool, if it has anything

Every filter appends one reason line whether or not it matched. The reasons
are diagnostics only. Selection within the surviving list is uniform random
from the caller's rng, so a fixed seed reproduces the pick.
"""

import logging
import random
from collections.abc import Callable, Sequence

from bending_arena.models import NarrativeContext, NarrativeVariant

logger = logging.getLogger(__name__)

Filter = Callable[
    [Sequence[NarrativeVariant], NarrativeContext, list[str]],
    list[NarrativeVariant] | None,
]


def strict_tags(context: NarrativeContext) -> list[str]:
    """Strict-context tags that are currently true, in fixed order."""
    turn = context.turn
    active = []
    if turn.is_crit:
        active.append("crit")
    if turn.is_miss:
        active.append("miss")
    if turn.humor_trigger:
        active.append("humor")
    if turn.low_hp:
        active.append("desperate")
    return active


def phase_tags(phase: str) -> tuple[str, str]:
    return phase.lower(), f"{phase.lower()}_phase"


# ── Filters ──────────────────────────────────────────────


def strict_context_filter(pool, context, reasons):
    active = strict_tags(context)
    if not active:
        reasons.append("strict: no strict tags active")
        return None
    matches = [v for v in pool if all(tag in v.tags for tag in active)]
    if not matches:
        reasons.append(f"strict: no variant tagged {'+'.join(active)}")
        return None
    reasons.append(f"strict: {len(matches)} variant(s) tagged {'+'.join(active)}")
    return matches


def environment_filter(pool, context, reasons):
    env = context.environment
    if env is None or not env.tags:
        reasons.append("environment: no environment tags")
        return None
    env_tags = set(env.tags)
    matches = [v for v in pool if env_tags.intersection(v.environment_tags)]
    if not matches:
        reasons.append(f"environment: nothing for {env.id}")
        return None
    reasons.append(f"environment: {len(matches)} variant(s) for {env.id}")
    return matches


def phase_filter(pool, context, reasons):
    phase = context.turn.phase
    if not phase:
        reasons.append("phase: no current phase")
        return None
    wanted = phase_tags(phase)
    matches = [v for v in pool if any(tag in v.tags for tag in wanted)]
    if not matches:
        reasons.append(f"phase: nothing tagged {phase}")
        return None
    reasons.append(f"phase: {len(matches)} variant(s) tagged {phase}")
    return matches


def generic_filter(pool, context, reasons):
    matches = [v for v in pool if not v.tags and not v.environment_tags]
    if not matches:
        reasons.append("generic: no untagged variants")
        return None
    reasons.append(f"generic: {len(matches)} untagged variant(s)")
    return matches


def ultimate_fallback(pool, context, reasons):
    if not pool:
        reasons.append("fallback: pool is empty")
        return None
    reasons.append(f"fallback: whole pool ({len(pool)})")
    return list(pool)


FILTER_CHAIN: tuple[Filter, ...] = (
    strict_context_filter,
    environment_filter,
    phase_filter,
    generic_filter,
    ultimate_fallback,
)


# ── Selection ────────────────────────────────────────────


def narrow(
    pool: Sequence[NarrativeVariant],
    context: NarrativeContext,
    chain: Sequence[Filter] = FILTER_CHAIN,
) -> list[NarrativeVariant]:
    """Run the chain; returns [] only when every filter declined (empty pool)."""
    for fn in chain:
        narrowed = fn(pool, context, context.reasons)
        if narrowed:
            return narrowed
    return []


def select_variant(
    pool: Sequence[NarrativeVariant],
    context: NarrativeContext,
    rng: random.Random,
) -> tuple[str | None, list[str]]:
    """Pick one variant text. (None, reasons) for an empty pool."""
    candidates = narrow(pool, context)
    if not candidates:
        return None, context.reasons
    choice = rng.choice(candidates)
    logger.debug("Variant chosen from %d candidate(s): %s", len(candidates), context.reasons)
    return choice.text, context.reasons
