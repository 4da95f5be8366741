"""Replay a short authority -> consumer exchange, or inspect encoded updates.

Usage (pythonic):
    from scripts.replay_updates import run_demo
    trace = run_demo(n_partitions=3)

The trace holds one entry per applied update:
{seq, full_image, bytes, changes, replica_paths, state}.

Usage (cli):
    python scripts/replay_updates.py                   # run the demo
    python scripts/replay_updates.py update1.json ...  # decode, apply in order
"""
from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, List

from authzpaths import ALL_PATHS, CodecError, PathsUpdate, normalize
from authzpaths.replica import PathReplica, ReplicaGapError
from authzpaths.utils.logger_util import get_logger, logging
logger = get_logger("replay_updates", logging.INFO)


def build_demo_updates(n_partitions: int = 2, nameservice: str = "hdfs://nn:8020") -> List[bytes]:
    """Encode a full image for db.t1 followed by one partial update per partition."""
    full = PathsUpdate.create(1, has_full_image=True)
    full.new_path_change(ALL_PATHS).add_path(normalize(f"{nameservice}/db/t1", "hdfs"))
    payloads = [full.encode()]

    for i in range(n_partitions):
        update = PathsUpdate.create(has_full_image=False)
        change = update.new_path_change("db.t1")
        change.add_path(normalize(f"{nameservice}/db/t1/p={2024 + i}", "hdfs"))
        change.remove_path(normalize(f"/db/t1/p={2023 + i}", "hdfs"))
        # assigned when the update is committed to the change log
        update.set_sequence_number(2 + i)
        payloads.append(update.encode())
    return payloads


def _record(update: PathsUpdate, payload: bytes, replica: PathReplica) -> Dict[str, Any]:
    return {
        "seq": update.sequence_number,
        "full_image": update.has_full_image,
        "bytes": len(payload),
        "changes": len(update.path_changes),
        "replica_paths": sorted("/" + "/".join(p) for p in replica.paths()),
        "state": replica.state.value,
    }


def replay(payloads: List[bytes], replica: PathReplica | None = None) -> List[Dict[str, Any]]:
    replica = replica or PathReplica()
    trace: List[Dict[str, Any]] = []
    for payload in payloads:
        try:
            update = replica.apply_encoded(payload)
        except ReplicaGapError as e:
            logger.warning("stopping replay: %s", e)
            trace.append({"error": str(e), "state": replica.state.value})
            break
        trace.append(_record(update, payload, replica))
    return trace


def run_demo(n_partitions: int = 2) -> List[Dict[str, Any]]:
    return replay(build_demo_updates(n_partitions))


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("files", nargs="*", type=Path, help="encoded update files, applied in the given order")
    args = parser.parse_args(argv)

    if not args.files:
        trace = run_demo()
    else:
        try:
            trace = replay([p.read_bytes() for p in args.files])
        except CodecError as e:
            logger.error("cannot decode update: %s", e)
            return 1
    print(json.dumps(trace, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
