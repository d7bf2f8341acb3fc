"""Run one battle from stored roster data and settings.

Shared by the API and the CLI. Looks everything up, builds the config from
settings plus per-call overrides, runs the loop to completion and returns it.
Nothing about the battle is written back to storage.
"""

import random

from bending_arena import storage
from bending_arena.engine import BattleConfig, BattleLoop, simulate


class UnknownEntity(LookupError):
    """A fighter or environment id that storage does not know."""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} '{entity_id}' not found")
        self.kind = kind
        self.entity_id = entity_id


def run_battle(
    first_id: str,
    second_id: str,
    environment_id: str,
    seed: int | None = None,
    max_turns: int | None = None,
) -> BattleLoop:
    first = storage.get_fighter(first_id)
    if first is None:
        raise UnknownEntity("Fighter", first_id)
    second = storage.get_fighter(second_id)
    if second is None:
        raise UnknownEntity("Fighter", second_id)
    environment = storage.get_environment(environment_id)
    if environment is None:
        raise UnknownEntity("Environment", environment_id)

    config = BattleConfig.from_config(storage.get_config(), seed=seed, max_turns=max_turns)
    return simulate(
        first,
        second,
        environment,
        storage.move_table(),
        config=config,
        bias_table=storage.get_bias_table(),
        pools=storage.load_pools(),
        rng=random.Random(config.seed),
    )
