"""Pronoun sets keyed by a fighter's pronoun-set id."""

PRONOUN_SETS: dict[str, dict[str, str]] = {
    "he": {"subject": "he", "object": "him", "possessive": "his", "reflexive": "himself"},
    "she": {"subject": "she", "object": "her", "possessive": "her", "reflexive": "herself"},
    "they": {"subject": "they", "object": "them", "possessive": "their", "reflexive": "themselves"},
    "it": {"subject": "it", "object": "it", "possessive": "its", "reflexive": "itself"},
}

# {actor.s} is shorthand for {actor.subject}
SHORT_FORMS = {"s": "subject", "o": "object", "p": "possessive", "r": "reflexive"}


def pronoun(key: str | None, form: str) -> str | None:
    """Look up one pronoun form. None for an unknown set or form."""
    forms = PRONOUN_SETS.get(key or "")
    if forms is None:
        return None
    return forms.get(SHORT_FORMS.get(form, form))
