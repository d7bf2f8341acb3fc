"""Event log entries and metrics bookkeeping."""

import itertools
import time
import uuid

from bending_arena.models import BattleEvent, BattleState

_sequence = itertools.count(1)


def new_event_id() -> str:
    """Millisecond timestamp + process-wide sequence + random suffix.

    Unique even for many calls inside the same millisecond.
    """
    return f"{int(time.time() * 1000)}-{next(_sequence)}-{uuid.uuid4().hex[:6]}"


def record(state: BattleState, event_type: str, text: str = "", **fields) -> BattleEvent:
    """Append one event to the log and bump its type counter."""
    event = BattleEvent(
        id=new_event_id(),
        turn=state.turn,
        type=event_type,
        text=text,
        timestamp=time.time(),
        **fields,
    )
    state.log.append(event)
    counts = state.metrics.event_counts
    counts[event_type] = counts.get(event_type, 0) + 1
    return event
