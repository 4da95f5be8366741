"""Process configuration read from the environment (and an optional .env file).

The only value the path normalizer needs is the scheme of the default
filesystem, the analogue of Hadoop's ``fs.defaultFS``. It is read-only after
start-up; callers that want a fixed value pass ``default_scheme`` explicitly.
"""
from __future__ import annotations

import os
from typing import Optional
from urllib.parse import urlsplit

import dotenv

dotenv.load_dotenv(".env")

DEFAULT_FS_ENV = "AUTHZPATHS_DEFAULT_FS"
# same fallback Hadoop uses when fs.defaultFS is unset
DEFAULT_FS_URI = "file:///"


def default_fs_uri() -> str:
    """Return the configured default filesystem URI."""
    return os.environ.get(DEFAULT_FS_ENV, DEFAULT_FS_URI).strip()


def default_scheme(fs_uri: Optional[str] = None) -> Optional[str]:
    """Return the scheme of ``fs_uri`` (or of the configured default filesystem).

    Returns None when the URI carries no scheme, e.g. ``AUTHZPATHS_DEFAULT_FS=/``.
    """
    uri = default_fs_uri() if fs_uri is None else fs_uri
    try:
        scheme = urlsplit(uri).scheme
    except ValueError:
        return None
    return scheme.lower() or None
