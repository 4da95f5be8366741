"""Byte-level codec for path updates.

The byte format is opaque to callers: today it is the UTF-8 JSON form of
:class:`~authzpaths.schemas.update.PathsUpdateV1` with camelCase keys. All
failures surface as :class:`CodecError` with the underlying cause chained.
"""
from __future__ import annotations

from pydantic import ValidationError

from authzpaths.schemas.update import PathsUpdateV1
from authzpaths.utils.logger_util import get_logger, logging
logger = get_logger(__name__, logging.DEBUG)


class CodecError(Exception):
    """Raised when an update cannot be encoded or decoded."""


def encode_update(update: PathsUpdateV1) -> bytes:
    if not isinstance(update, PathsUpdateV1):
        raise CodecError(f"cannot encode {type(update).__name__}, expected PathsUpdateV1")
    try:
        return update.model_dump_json(by_alias=True).encode("utf-8")
    except ValueError as e:
        logger.debug("failed to encode update seq=%s", update.sequence_number, exc_info=True)
        raise CodecError(f"unable to encode update: {e}") from e


def decode_update(data: bytes) -> PathsUpdateV1:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise CodecError(f"cannot decode {type(data).__name__}, expected bytes")
    try:
        # strict: no "7" -> 7 or "yes" -> True coercion of wire values
        return PathsUpdateV1.model_validate_json(bytes(data), strict=True)
    except ValidationError as e:
        logger.debug("rejected update payload (%d bytes): %s", len(data), e.errors(include_url=False))
        raise CodecError(f"malformed update payload: {e.error_count()} error(s)") from e
