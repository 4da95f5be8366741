from __future__ import annotations

import threading
from typing import Dict, Iterable, Tuple

from authzpaths.utils.logger_util import get_logger, logging
logger = get_logger(__name__, logging.DEBUG)


class ComponentTable:
    """Canonicalization table for path components.

    Partition directories repeat the same segment names (``db``, ``p=2024``)
    across thousands of paths in a full image. Every component goes through
    :meth:`intern` so equal components share one ``str`` object.

    Lookups are lock-free; inserts take the lock so two threads interning the
    same new value agree on the stored object.
    """

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def intern(self, value: str) -> str:
        existing = self._values.get(value)
        if existing is not None:
            return existing
        with self._lock:
            return self._values.setdefault(value, value)

    def intern_path(self, components: Iterable[str]) -> Tuple[str, ...]:
        return tuple(self.intern(c) for c in components)

    def clear(self) -> None:
        with self._lock:
            size = len(self._values)
            self._values.clear()
        logger.debug("component table cleared (%d entries)", size)


# process-wide table shared by the normalizer, envelope builders and the codec
COMPONENTS = ComponentTable()


def intern_path(components: Iterable[str]) -> Tuple[str, ...]:
    return COMPONENTS.intern_path(components)
