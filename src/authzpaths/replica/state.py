from __future__ import annotations

from enum import Enum


class ReplicaStates(str, Enum):
    EMPTY = "empty"
    SYNCED = "synced"
    STALE = "stale"


# a full image is the only way out of EMPTY or STALE
ALLOWED_TRANSITIONS = {
    ReplicaStates.EMPTY: {ReplicaStates.SYNCED, ReplicaStates.STALE},
    ReplicaStates.SYNCED: {ReplicaStates.SYNCED, ReplicaStates.STALE},
    ReplicaStates.STALE: {ReplicaStates.SYNCED, ReplicaStates.STALE},
}


def can_transition(from_state: ReplicaStates | str, to_state: ReplicaStates | str) -> bool:
    """Return True if a transition from from_state -> to_state is allowed."""
    f = ReplicaStates(from_state) if not isinstance(from_state, ReplicaStates) else from_state
    t = ReplicaStates(to_state) if not isinstance(to_state, ReplicaStates) else to_state
    return t in ALLOWED_TRANSITIONS.get(f, set())
