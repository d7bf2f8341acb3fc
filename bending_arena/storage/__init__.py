"""File-based JSON storage for static authoring data and settings.

Data layout:
  data/
    config.json          Battle settings (turn limits, tie rules, conclusion templates)
    fighters.json        User fighters (override presets by id)
    moves.json           User moves (override presets by id)
    environments.json    User environments (override presets by id)
    bias.json            User bias entries (replace presets per character)
    narrative/<beat>.json  Extra variants, appended to the preset pool
  presets/
    fighters.json, moves.json, environments.json, bias.json
    narrative/<beat>.json  opening, advantage_attack, disadvantage_attack,
                           terrain_interaction, finishing_move

Battles themselves are never persisted.

Config: get_config() returns defaults merged with stored values.
update_config() applies partial updates: outcome_templates merged
key-by-key, scalars overwritten.
"""

# Re-export all public symbols so `from bending_arena import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
    narrative_dir,
    preset_narrative_dir,
    presets_dir,
    read_json,
    slugify,
)

from .roster import (  # noqa: F401
    delete_fighter,
    get_bias_table,
    get_environment,
    get_fighter,
    get_move,
    list_environments,
    list_fighters,
    list_moves,
    move_table,
    save_fighter,
)

from .narrative import (  # noqa: F401
    get_pool,
    load_pools,
)

from .config import (  # noqa: F401
    DEFAULT_OUTCOME_TEMPLATES,
    get_config,
    update_config,
)
