import pytest

from authzpaths import ALL_PATHS, CodecError, PathsUpdate
from authzpaths.replica import PathReplica, ReplicaGapError, ReplicaStates, can_transition


def _partial(seq, obj="t1", added=(), removed=()):
    update = PathsUpdate.create(seq, has_full_image=False)
    change = update.new_path_change(obj)
    change.add_paths(added)
    change.remove_paths(removed)
    return update


def test_new_replica_needs_full_image():
    replica = PathReplica()
    assert replica.state == ReplicaStates.EMPTY
    assert replica.needs_full_image
    assert replica.paths() == frozenset()


def test_full_image_replaces_replica(full_image):
    replica = PathReplica()
    replica.apply(full_image)
    assert replica.paths() == {("db", "t1")}
    assert replica.paths_for(ALL_PATHS) == (("db", "t1"),)
    assert replica.last_sequence_number == 1
    assert replica.state == ReplicaStates.SYNCED


def test_partial_update_applies_in_order(full_image, partition_update):
    replica = PathReplica()
    replica.apply(full_image)
    replica.apply(partition_update)
    assert replica.paths() == {("db", "t1"), ("db", "t1", "p=2024")}
    assert ("db", "t1", "p=2023") not in replica.paths()
    assert replica.last_sequence_number == 2
    assert replica.applied == 2


def test_later_full_image_discards_prior_state(full_image, partition_update):
    replica = PathReplica()
    replica.apply(full_image)
    replica.apply(partition_update)
    snapshot = PathsUpdate.create(5, has_full_image=True)
    snapshot.new_path_change(ALL_PATHS).add_path(["db", "t9"])
    replica.apply(snapshot)
    assert replica.paths() == {("db", "t9")}
    assert replica.objects() == (ALL_PATHS,)
    assert replica.last_sequence_number == 5


def test_gap_marks_replica_stale(full_image):
    replica = PathReplica()
    replica.apply(full_image)
    with pytest.raises(ReplicaGapError) as exc:
        replica.apply(_partial(3, added=[["db", "t1", "p=1"]]))
    assert exc.value.expected == 2
    assert exc.value.received == 3
    assert replica.state == ReplicaStates.STALE
    assert replica.needs_full_image
    # the out-of-order update was not applied
    assert replica.paths() == {("db", "t1")}

    # even the "right" next update is refused until a full image arrives
    with pytest.raises(ReplicaGapError) as exc:
        replica.apply(_partial(2))
    assert exc.value.expected is None

    recovery = PathsUpdate.create(4, has_full_image=True)
    recovery.new_path_change(ALL_PATHS).add_path(["db", "t1"])
    replica.apply(recovery)
    assert replica.state == ReplicaStates.SYNCED
    replica.apply(_partial(5, added=[["db", "t1", "p=5"]]))
    assert ("db", "t1", "p=5") in replica.paths()


def test_partial_before_any_full_image_is_refused():
    replica = PathReplica()
    with pytest.raises(ReplicaGapError):
        replica.apply(_partial(1))
    assert replica.state == ReplicaStates.EMPTY


def test_redelivered_update_is_ignored(full_image, partition_update):
    replica = PathReplica()
    replica.apply(full_image)
    assert replica.apply(partition_update) is True
    replay = _partial(1, added=[["db", "t1", "p=old"]])
    assert replica.apply(partition_update) is False
    assert replica.apply(replay) is False
    assert replica.state == ReplicaStates.SYNCED
    assert replica.last_sequence_number == 2
    assert replica.applied == 2
    assert ("db", "t1", "p=old") not in replica.paths()
    assert replica.apply(_partial(3, added=[["db", "t1", "p=3"]])) is True


def test_truncated_full_image_leaves_replica_untouched(full_image):
    replica = PathReplica()
    replica.apply(full_image)
    payload = b'{"hasFullImage": true, "sequenceNumber": 5, "pathChangez": []}'
    with pytest.raises(CodecError):
        replica.apply_encoded(payload)
    assert replica.paths() == {("db", "t1")}
    assert replica.last_sequence_number == 1
    assert replica.state == ReplicaStates.SYNCED


def test_remove_all_drops_object(full_image):
    replica = PathReplica()
    replica.apply(full_image)
    replica.apply(_partial(2, obj="t2", added=[["db", "t2"], ["db", "t2", "p=1"]]))
    dropped = PathsUpdate.create(3)
    dropped.new_path_change("t2").remove_all()
    replica.apply(dropped)
    assert replica.paths_for("t2") == ()
    assert "t2" not in replica.objects()
    assert replica.paths() == {("db", "t1")}


def test_changes_in_one_update_apply_in_order(full_image):
    replica = PathReplica()
    replica.apply(full_image)
    update = PathsUpdate.create(2)
    update.new_path_change("t1").add_path(["db", "t1", "p=1"])
    update.new_path_change("t1").remove_path(["db", "t1", "p=1"]).add_path(["db", "t1", "p=2"])
    replica.apply(update)
    assert replica.paths_for("t1") == (("db", "t1", "p=2"),)


def test_apply_encoded(full_image, partition_update):
    replica = PathReplica()
    replica.apply_encoded(full_image.encode())
    decoded = replica.apply_encoded(partition_update.encode())
    assert decoded == partition_update
    assert replica.last_sequence_number == 2


def test_state_transitions():
    assert can_transition("empty", "synced")
    assert can_transition(ReplicaStates.SYNCED, ReplicaStates.STALE)
    assert can_transition("stale", "synced")
    assert not can_transition("synced", "empty")
    assert not can_transition(ReplicaStates.STALE, ReplicaStates.EMPTY)
