"""Narration: variant selection + template substitution.

  filters   ordered filter chain over a beat's variant pool
  pronouns  pronoun sets keyed by fighter pronoun id
  render    single-pass placeholder substitution
  outcomes  Handlebars battle conclusions (pybars)
  narrator  builds the NarrativeContext and ties the above together
"""

from .filters import (  # noqa: F401
    FILTER_CHAIN,
    environment_filter,
    generic_filter,
    narrow,
    phase_filter,
    select_variant,
    strict_context_filter,
    strict_tags,
    ultimate_fallback,
)
from .narrator import Narration, Narrator, VariantPools  # noqa: F401
from .outcomes import TemplateError, build_context, render_conclusion, render_template  # noqa: F401
from .pronouns import PRONOUN_SETS, pronoun  # noqa: F401
from .render import render, render_with_defects  # noqa: F401
