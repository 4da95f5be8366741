"""Ordered, resumable path-ownership updates for directory authorization.

The authority builds :class:`PathsUpdate` envelopes from paths canonicalized
by :func:`normalize`; consumers decode them and apply them in sequence order.
"""

from .codec import CodecError
from .paths import DFS_SCHEME, MalformedPathError, normalize, normalize_all
from .schemas.update import ALL_PATHS, PathChanges, PathsUpdateV1
from .update import FrozenUpdateError, PathChangeBuilder, PathsUpdate, Update

__all__ = [
    "ALL_PATHS",
    "CodecError",
    "DFS_SCHEME",
    "FrozenUpdateError",
    "MalformedPathError",
    "PathChangeBuilder",
    "PathChanges",
    "PathsUpdate",
    "PathsUpdateV1",
    "Update",
    "normalize",
    "normalize_all",
]
