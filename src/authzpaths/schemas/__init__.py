"""Wire models for path updates.

These models are strict and frozen: a decoded update cannot be changed, and
every path must have at least one non-empty component.
"""

from .update import ALL_PATHS, MAX_SEQUENCE_NUMBER, PathChanges, PathsUpdateV1

__all__ = ["ALL_PATHS", "MAX_SEQUENCE_NUMBER", "PathChanges", "PathsUpdateV1"]
