"""Update envelope: one unit of change in the authority's path stream.

An envelope is built on one thread::

    update = PathsUpdate.create(0, has_full_image=False)
    change = update.new_path_change("db.t1")
    change.add_path(normalize("hdfs:///warehouse/db/t1/p=2024"))
    change.remove_path(("warehouse", "db", "t1", "p=2023"))
    update.set_sequence_number(42)
    payload = update.encode()          # freezes the envelope

and read anywhere once frozen. ``PathsUpdate.decode(payload)`` gives back an
equal, frozen envelope.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

from authzpaths.codec import decode_update, encode_update
from authzpaths.interning import intern_path
from authzpaths.schemas.update import ALL_PATHS, MAX_SEQUENCE_NUMBER, PathChanges, PathsUpdateV1
from authzpaths.utils.logger_util import get_logger, logging
logger = get_logger(__name__, logging.DEBUG)


class FrozenUpdateError(RuntimeError):
    """Raised when a frozen (encoded or decoded) update is modified."""


@runtime_checkable
class Update(Protocol):
    """What a replication pipeline needs from any update it forwards."""

    @property
    def has_full_image(self) -> bool: ...

    @property
    def sequence_number(self) -> int: ...

    def set_sequence_number(self, sequence_number: int) -> None: ...

    def encode(self) -> bytes: ...


def _check_sequence_number(sequence_number: int) -> int:
    if isinstance(sequence_number, bool) or not isinstance(sequence_number, int):
        raise ValueError(f"sequence number must be an int, got {type(sequence_number).__name__}")
    if sequence_number < 0 or sequence_number > MAX_SEQUENCE_NUMBER:
        raise ValueError(f"sequence number {sequence_number} outside unsigned 64-bit range")
    return sequence_number


def _canonical(path: Sequence[str]) -> Tuple[str, ...]:
    if isinstance(path, str):
        raise TypeError("expected a sequence of path components, got a str; normalize() it first")
    components = tuple(path)
    if not components:
        raise ValueError("a canonical path needs at least one component")
    for c in components:
        if not isinstance(c, str) or not c:
            raise ValueError(f"invalid path component {c!r} in {components!r}")
    return intern_path(components)


class PathChangeBuilder:
    """Handle for appending paths to one change of an unfrozen update."""

    def __init__(self, owner: "PathsUpdate", authorizable_object_id: str):
        self._owner = owner
        self.authorizable_object_id = authorizable_object_id
        self._added: List[Tuple[str, ...]] = []
        self._removed: List[Tuple[str, ...]] = []

    @property
    def added_paths(self) -> Tuple[Tuple[str, ...], ...]:
        return tuple(self._added)

    @property
    def removed_paths(self) -> Tuple[Tuple[str, ...], ...]:
        return tuple(self._removed)

    def add_path(self, path: Sequence[str]) -> "PathChangeBuilder":
        self._owner._begin_change()
        self._added.append(_canonical(path))
        return self

    def remove_path(self, path: Sequence[str]) -> "PathChangeBuilder":
        self._owner._begin_change()
        self._removed.append(_canonical(path))
        return self

    def add_paths(self, paths: Iterable[Sequence[str]]) -> "PathChangeBuilder":
        for p in paths:
            self.add_path(p)
        return self

    def remove_paths(self, paths: Iterable[Sequence[str]]) -> "PathChangeBuilder":
        for p in paths:
            self.remove_path(p)
        return self

    def remove_all(self) -> "PathChangeBuilder":
        """Mark the object as deleted: every one of its paths goes away."""
        self._owner._begin_change()
        self._removed = [(ALL_PATHS,)]
        return self

    def to_model(self) -> PathChanges:
        return PathChanges(
            authorizable_object_id=self.authorizable_object_id,
            added_paths=tuple(self._added),
            removed_paths=tuple(self._removed),
        )


class PathsUpdate:
    """Sequence number, full-image flag and ordered per-object path changes.

    Mutable until :meth:`freeze` (or :meth:`encode`) is called; after that
    every mutator raises :class:`FrozenUpdateError`. Equality and hashing are
    structural, so a decoded update equals the one that was encoded.
    """

    def __init__(self, sequence_number: int = 0, has_full_image: bool = False):
        self._sequence_number = _check_sequence_number(sequence_number)
        self._has_full_image = bool(has_full_image)
        self._changes: List[PathChangeBuilder] = []
        self._frozen: Optional[PathsUpdateV1] = None
        # rebuilt lazily after each change while the update is being built
        self._model: Optional[PathsUpdateV1] = None

    @classmethod
    def create(cls, sequence_number: int = 0, has_full_image: bool = False) -> "PathsUpdate":
        return cls(sequence_number, has_full_image)

    @classmethod
    def from_model(cls, model: PathsUpdateV1) -> "PathsUpdate":
        update = cls(model.sequence_number, model.has_full_image)
        update._frozen = model
        return update

    @classmethod
    def decode(cls, data: bytes) -> "PathsUpdate":
        return cls.from_model(decode_update(data))

    @property
    def has_full_image(self) -> bool:
        return self._has_full_image

    @property
    def sequence_number(self) -> int:
        return self._sequence_number

    def set_sequence_number(self, sequence_number: int) -> None:
        checked = _check_sequence_number(sequence_number)
        self._begin_change()
        self._sequence_number = checked

    @property
    def is_frozen(self) -> bool:
        return self._frozen is not None

    @property
    def path_changes(self) -> Tuple[PathChanges, ...]:
        return self.to_model().path_changes

    def new_path_change(self, authorizable_object_id: str) -> PathChangeBuilder:
        self._begin_change()
        if not isinstance(authorizable_object_id, str) or not authorizable_object_id:
            raise ValueError("authorizable object id must be a non-empty string")
        change = PathChangeBuilder(self, authorizable_object_id)
        self._changes.append(change)
        return change

    def to_model(self) -> PathsUpdateV1:
        if self._frozen is not None:
            return self._frozen
        if self._model is None:
            self._model = PathsUpdateV1(
                has_full_image=self._has_full_image,
                sequence_number=self._sequence_number,
                path_changes=tuple(c.to_model() for c in self._changes),
            )
        return self._model

    def freeze(self) -> PathsUpdateV1:
        if self._frozen is None:
            self._frozen = self.to_model()
            self._changes = []
            self._model = None
            logger.debug(
                "froze update seq=%d full=%s changes=%d",
                self._sequence_number, self._has_full_image, len(self._frozen.path_changes),
            )
        return self._frozen

    def encode(self) -> bytes:
        return encode_update(self.freeze())

    def _begin_change(self) -> None:
        if self._frozen is not None:
            raise FrozenUpdateError(f"update seq={self._sequence_number} is frozen and can no longer change")
        self._model = None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, PathsUpdate):
            return NotImplemented
        return self.to_model() == other.to_model()

    def __hash__(self) -> int:
        return hash(self.to_model())

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(sequence_number={self._sequence_number}, "
            f"has_full_image={self._has_full_image}, path_changes={list(self.path_changes)!r})"
        )
