"""Path normalization: raw path strings to canonical component tuples.

Accepted forms::

    hdfs://namenode:8020/warehouse/db/t1
    hdfs:///warehouse/db/t1
    /warehouse/db/t1          (scheme taken from the default filesystem)

A path with any other scheme is not applicable to this subsystem and
normalizes to ``None``. Everything that cannot be classified raises
:class:`MalformedPathError`.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote, unquote, urlsplit

from authzpaths import config
from authzpaths.interning import intern_path
from authzpaths.utils.logger_util import get_logger, logging
logger = get_logger(__name__, logging.DEBUG)

DFS_SCHEME = "hdfs"
SEPARATOR = "/"

CanonicalPath = Tuple[str, ...]

# characters left alone when encoding a raw path; everything else ('%', space,
# '?', '#', brackets, non-ascii) is percent-encoded before parsing
_PATH_SAFE = "/:@&=+$,;!~*'()"
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_SEPARATORS_RE = re.compile(r"/+")

# marker for "read the default scheme from configuration"
CONFIGURED = object()


class MalformedPathError(ValueError):
    """Raised when a raw path cannot be turned into a canonical path."""

    def __init__(self, message: str, path: object = None):
        super().__init__(message)
        self.message = message
        self.path = path


def _encode(raw: str) -> str:
    try:
        return quote(raw, safe=_PATH_SAFE)
    except UnicodeEncodeError as e:
        raise MalformedPathError(f"Unable to create URI from [{raw!r}]", raw) from e


def _check_scheme(encoded: str, raw: str) -> None:
    # urlsplit quietly treats a bad scheme as part of the path; reject it instead
    head = encoded.split(SEPARATOR, 1)[0]
    if ":" not in head:
        return
    candidate = head.split(":", 1)[0]
    if not candidate:
        raise MalformedPathError(f"Incomprehensible path [{raw}]: expected scheme name", raw)
    if not _SCHEME_RE.match(candidate):
        raise MalformedPathError(f"Incomprehensible path [{raw}]: illegal character in scheme name", raw)


def normalize(raw_path: Optional[str], default_scheme: object = CONFIGURED) -> Optional[CanonicalPath]:
    """Return the canonical component tuple for ``raw_path``.

    ``/a//b/c/`` becomes ``("a", "b", "c")``. Returns None when the resolved
    scheme is not ``hdfs``.

    ``default_scheme`` is used for paths without a scheme. Left unset it is
    read from :func:`authzpaths.config.default_scheme`; passing None means no
    default filesystem is available.

    Raises:
        MalformedPathError: empty input, unparsable input, no resolvable
            scheme, or an empty / root-only path.
    """
    if raw_path is None or not isinstance(raw_path, str):
        raise MalformedPathError("Input is empty", raw_path)
    if not raw_path.strip():
        raise MalformedPathError("Input is empty", raw_path)

    encoded = _encode(raw_path)
    _check_scheme(encoded, raw_path)
    try:
        parts = urlsplit(encoded)
    except ValueError as e:
        raise MalformedPathError(f"Incomprehensible path [{raw_path}]", raw_path) from e

    scheme = parts.scheme
    if not scheme:
        if default_scheme is CONFIGURED:
            default_scheme = config.default_scheme()
        if not default_scheme:
            raise MalformedPathError(
                f"Scheme is missing and could not be constructed from defaultURI={config.default_fs_uri()}",
                raw_path,
            )
        scheme = str(default_scheme)

    if scheme.lower() != DFS_SCHEME:
        logger.debug("skipping path with scheme %s: %s", scheme, raw_path)
        return None

    uri_path = unquote(parts.path)
    if not uri_path:
        raise MalformedPathError(f"Path is empty. uri={encoded}", raw_path)
    if not uri_path.startswith(SEPARATOR) or not uri_path[1:]:
        raise MalformedPathError(
            f"Path part of uri does not seem right, was expecting a non empty path: path = {uri_path}, uri={encoded}",
            raw_path,
        )

    components = [c for c in _SEPARATORS_RE.split(uri_path) if c]
    if not components:
        raise MalformedPathError(f"Path has no components: path = {uri_path}, uri={encoded}", raw_path)
    return intern_path(components)


def normalize_all(raw_paths: Iterable[Optional[str]], default_scheme: object = CONFIGURED) -> List[CanonicalPath]:
    """Normalize a batch of paths, dropping the ones that are not applicable.

    The first malformed path aborts the batch with :class:`MalformedPathError`.
    """
    out: List[CanonicalPath] = []
    skipped = 0
    for raw in raw_paths:
        canonical = normalize(raw, default_scheme)
        if canonical is None:
            skipped += 1
            continue
        out.append(canonical)
    if skipped:
        logger.debug("normalize_all skipped %d non-%s paths", skipped, DFS_SCHEME)
    return out
