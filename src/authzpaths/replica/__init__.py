from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple

from authzpaths.schemas.update import PathChanges
from authzpaths.update import PathsUpdate
from authzpaths.utils.logger_util import get_logger, logging
logger = get_logger(__name__, logging.DEBUG)

from .state import ALLOWED_TRANSITIONS, ReplicaStates, can_transition

__all__ = ["ALLOWED_TRANSITIONS", "PathReplica", "ReplicaGapError", "ReplicaStates", "can_transition"]

CanonicalPath = Tuple[str, ...]


class ReplicaGapError(Exception):
    """Raised when a partial update does not directly follow the replica's state."""

    def __init__(self, expected: Optional[int], received: int, state: ReplicaStates):
        if expected is None:
            msg = f"replica is {state.value}; need a full image before partial update seq={received}"
        else:
            msg = f"expected update seq={expected}, got seq={received}; replica is now stale"
        super().__init__(msg)
        self.expected = expected
        self.received = received
        self.state = state


class PathReplica:
    """Consumer-side copy of the object -> paths mapping.

    Full images replace everything. Partial updates are applied only in strict
    sequence order; a gap marks the replica stale until the next full image.
    Not thread-safe: one consumer loop owns a replica.
    """

    def __init__(self):
        self._objects: Dict[str, Dict[CanonicalPath, None]] = {}
        self.last_sequence_number: Optional[int] = None
        self.state = ReplicaStates.EMPTY
        self.applied = 0

    @property
    def needs_full_image(self) -> bool:
        return self.state != ReplicaStates.SYNCED

    def _transition(self, to_state: ReplicaStates) -> None:
        if not can_transition(self.state, to_state):
            raise RuntimeError(f"illegal replica transition {self.state.value} -> {to_state.value}")
        if to_state != self.state:
            logger.debug("replica %s -> %s at seq=%s", self.state.value, to_state.value, self.last_sequence_number)
        self.state = to_state

    def apply(self, update: PathsUpdate) -> bool:
        """Apply one update; returns False for a re-delivered partial that is already applied."""
        seq = update.sequence_number
        if update.has_full_image:
            self._objects = {}
            for change in update.path_changes:
                self._apply_change(change)
            self.last_sequence_number = seq
            self.applied += 1
            self._transition(ReplicaStates.SYNCED)
            return True

        if self.state != ReplicaStates.SYNCED:
            raise ReplicaGapError(None, seq, self.state)
        if seq <= self.last_sequence_number:
            logger.debug("ignoring already applied update seq=%d (last=%d)", seq, self.last_sequence_number)
            return False
        expected = self.last_sequence_number + 1
        if seq > expected:
            self._transition(ReplicaStates.STALE)
            raise ReplicaGapError(expected, seq, self.state)
        for change in update.path_changes:
            self._apply_change(change)
        self.last_sequence_number = seq
        self.applied += 1
        return True

    def apply_encoded(self, data: bytes) -> PathsUpdate:
        update = PathsUpdate.decode(data)
        self.apply(update)
        return update

    def _apply_change(self, change: PathChanges) -> None:
        obj = change.authorizable_object_id
        if change.added_paths:
            paths = self._objects.setdefault(obj, {})
            for p in change.added_paths:
                paths[p] = None
        if change.removes_object:
            self._objects.pop(obj, None)
            return
        paths = self._objects.get(obj)
        if paths is None:
            return
        for p in change.removed_paths:
            paths.pop(p, None)
        if not paths:
            del self._objects[obj]

    def objects(self) -> Tuple[str, ...]:
        return tuple(self._objects)

    def paths_for(self, authorizable_object_id: str) -> Tuple[CanonicalPath, ...]:
        return tuple(self._objects.get(authorizable_object_id, ()))

    def paths(self) -> FrozenSet[CanonicalPath]:
        out = set()
        for paths in self._objects.values():
            out.update(paths)
        return frozenset(out)
