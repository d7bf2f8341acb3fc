"""Per-character AI bias lookup.

The bias table is an explicit mapping passed into the decision engine as
configuration and resolved once per decision call. There is no module-level
registry: two battles with different tables never see each other's entries.
"""

from collections.abc import Mapping

from bending_arena.models import AiBias

BiasTable = Mapping[str, AiBias]

NEUTRAL_BIAS = AiBias()


def resolve_bias(table: BiasTable | None, character_id: str | None) -> AiBias:
    """Return the bias for a character, or the all-zero bias if absent."""
    if not table or not character_id:
        return NEUTRAL_BIAS
    return table.get(character_id, NEUTRAL_BIAS)


def load_bias_table(raw: Mapping[str, Mapping[str, float]]) -> dict[str, AiBias]:
    """Build a bias table from authored {character_id: {field: value}} records.

    Fields are each optional; unknown keys are ignored.
    """
    table: dict[str, AiBias] = {}
    for character_id, fields in raw.items():
        known = {k: v for k, v in fields.items() if k in AiBias.model_fields}
        table[character_id] = AiBias(**known)
    return table
