import os
import tempfile

import pytest

# tests/conftest.py

# keep test log files out of the working tree
if "AUTHZPATHS_LOG_DIR" not in os.environ:
    os.environ["AUTHZPATHS_LOG_DIR"] = tempfile.mkdtemp(prefix="authzpaths-log-")

from authzpaths import ALL_PATHS, PathsUpdate


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """
    Make sure a developer's .env or shell does not leak a default filesystem
    into tests; tests that need one set it explicitly.
    """
    monkeypatch.delenv("AUTHZPATHS_DEFAULT_FS", raising=False)
    yield


@pytest.fixture
def full_image():
    """seq=1 full image: the replica holds exactly /db/t1."""
    update = PathsUpdate.create(1, has_full_image=True)
    update.new_path_change(ALL_PATHS).add_path(["db", "t1"])
    return update


@pytest.fixture
def partition_update():
    """seq=2 partial update: partition p=2024 replaces p=2023 for t1."""
    update = PathsUpdate.create(2, has_full_image=False)
    change = update.new_path_change("t1")
    change.add_path(["db", "t1", "p=2024"])
    change.remove_path(["db", "t1", "p=2023"])
    return update
