"""Tests for sync/merge.py - pure replica merge."""

import itertools

import pytest

from labhub.core.domain.instance import Phase, UpdateType
from labhub.core.models import ChangeEvent
from labhub.sync.merge import InstanceRecord, merge_event, records_from_snapshot


def added(instance) -> ChangeEvent:
    return ChangeEvent.from_instance(UpdateType.ADDED, instance)


def modified(instance) -> ChangeEvent:
    return ChangeEvent.from_instance(UpdateType.MODIFIED, instance)


def deleted(name: str, namespace: str = "tenant-tester", instance=None) -> ChangeEvent:
    return ChangeEvent(
        update_type=UpdateType.DELETED, namespace=namespace, name=name, instance=instance
    )


def names(records) -> list[str]:
    return [r.name for r in records]


class TestUpsert:
    """ADDED/MODIFIED handling."""

    def test_added_appends(self, make_instance):
        result = merge_event([], added(make_instance(name="a", phase=Phase.STARTING)))

        assert names(result.records) == ["a"]
        assert result.records[0].phase == Phase.STARTING
        assert result.changed is True
        assert result.notify is True

    def test_modified_replaces_in_place(self, make_instance):
        records = records_from_snapshot(
            [make_instance(name=n, phase=Phase.STARTING) for n in ("a", "b", "c")]
        )

        result = merge_event(records, modified(make_instance(name="b", phase=Phase.READY)))

        assert names(result.records) == ["a", "b", "c"]
        assert result.records[1].phase == Phase.READY
        assert result.records[1].index == 1
        assert result.changed is True
        assert result.notify is True

    def test_added_for_known_identity_replaces(self, make_instance):
        """Duplicate ADDED never creates a second record."""
        records = records_from_snapshot([make_instance(name="a", phase=Phase.STARTING)])

        result = merge_event(records, added(make_instance(name="a", phase=Phase.RUNNING)))

        assert names(result.records) == ["a"]
        assert result.records[0].phase == Phase.RUNNING

    def test_modified_for_unknown_identity_appends(self, make_instance):
        records = records_from_snapshot([make_instance(name="a")])

        result = merge_event(records, modified(make_instance(name="b")))

        assert names(result.records) == ["a", "b"]
        assert [r.index for r in result.records] == [0, 1]

    def test_same_name_other_namespace_is_distinct(self, make_instance):
        records = records_from_snapshot([make_instance(name="a", namespace="tenant-x")])

        result = merge_event(records, added(make_instance(name="a", namespace="tenant-y")))

        assert len(result.records) == 2

    def test_replay_is_idempotent(self, make_instance):
        event = modified(make_instance(name="a", phase=Phase.READY))

        once = merge_event([], event)
        twice = merge_event(once.records, event)

        assert twice.records == once.records
        assert twice.changed is False
        assert twice.notify is False

    def test_input_not_mutated(self, make_instance):
        records = records_from_snapshot([make_instance(name="a", phase=Phase.STARTING)])
        before = list(records)

        merge_event(records, modified(make_instance(name="a", phase=Phase.READY)))
        merge_event(records, added(make_instance(name="b")))
        merge_event(records, deleted("a"))

        assert records == before


class TestDelete:
    """DELETED handling."""

    def test_delete_removes_and_reindexes(self, make_instance):
        records = records_from_snapshot([make_instance(name=n) for n in ("a", "b", "c")])

        result = merge_event(records, deleted("a"))

        assert names(result.records) == ["b", "c"]
        assert [r.index for r in result.records] == [0, 1]
        assert result.changed is True

    def test_delete_without_snapshot_does_not_notify(self, make_instance):
        records = records_from_snapshot([make_instance(name="a")])

        result = merge_event(records, deleted("a"))

        assert result.records == []
        assert result.notify is False

    def test_delete_with_snapshot_notifies(self, make_instance):
        instance = make_instance(name="a", phase=Phase.OFF)
        records = records_from_snapshot([instance])

        result = merge_event(records, deleted("a", instance=instance))

        assert result.records == []
        assert result.notify is True

    def test_delete_with_mismatching_snapshot_still_removes(self, make_instance):
        """snapshot이 다른 instance를 가리켜도 삭제는 수행, 알림 없음."""
        records = records_from_snapshot([make_instance(name="a"), make_instance(name="b")])

        result = merge_event(records, deleted("a", instance=make_instance(name="zzz")))

        assert result.malformed is False
        assert names(result.records) == ["b"]
        assert result.records[0].index == 0
        assert result.changed is True
        assert result.notify is False

    def test_delete_absent_is_noop(self, make_instance):
        records = records_from_snapshot([make_instance(name="b")])
        late = make_instance(name="a")

        result = merge_event(records, deleted("a", instance=late))

        assert result.records == records
        assert result.changed is False
        assert result.notify is False


class TestMalformed:
    """Malformed events change nothing and do not notify."""

    @pytest.mark.parametrize("update_type", [UpdateType.ADDED, UpdateType.MODIFIED])
    def test_missing_snapshot(self, make_instance, update_type):
        records = records_from_snapshot([make_instance(name="a")])
        event = ChangeEvent(update_type=update_type, namespace="tenant-tester", name="a")

        result = merge_event(records, event)

        assert result.malformed is True
        assert result.records == records
        assert result.changed is False
        assert result.notify is False

    def test_identity_mismatch(self, make_instance):
        event = ChangeEvent(
            update_type=UpdateType.MODIFIED,
            namespace="tenant-tester",
            name="a",
            instance=make_instance(name="b"),
        )

        result = merge_event([], event)

        assert result.malformed is True
        assert result.records == []


class TestUniqueness:
    """At most one record per identity after any event sequence."""

    def test_permuted_sequences(self, make_instance):
        phases = [Phase.STARTING, Phase.READY]
        events = []
        for name, phase in itertools.product(("a", "b"), phases):
            events.append(added(make_instance(name=name, phase=phase)))
            events.append(modified(make_instance(name=name, phase=phase)))
            events.append(deleted(name))

        # Every permutation of a window keeps identities unique
        mixed = events[:3] + events[6:9]
        for window in itertools.permutations(mixed):
            records: list[InstanceRecord] = []
            for event in window:
                records = merge_event(records, event).records
            identities = [r.identity for r in records]
            assert len(identities) == len(set(identities))
            assert [r.index for r in records] == list(range(len(records)))


class TestEndToEnd:
    """added A → modified A → added B → deleted A → deleted A."""

    def test_scenario(self, make_instance):
        records: list[InstanceRecord] = []
        notified: list[str] = []

        def step(event):
            nonlocal records
            result = merge_event(records, event)
            records = result.records
            if result.notify:
                notified.append(event.name)
            return result

        step(added(make_instance(name="A", phase=Phase.STARTING)))
        assert [(r.name, r.phase) for r in records] == [("A", Phase.STARTING)]
        assert notified == ["A"]

        step(modified(make_instance(name="A", phase=Phase.RUNNING)))
        assert [(r.name, r.phase) for r in records] == [("A", Phase.RUNNING)]
        assert notified == ["A", "A"]

        step(added(make_instance(name="B", phase=Phase.STARTING)))
        assert [(r.name, r.phase) for r in records] == [
            ("A", Phase.RUNNING),
            ("B", Phase.STARTING),
        ]

        step(deleted("A"))
        assert [(r.name, r.phase) for r in records] == [("B", Phase.STARTING)]
        assert notified == ["A", "A", "B"]

        result = step(deleted("A"))
        assert result.changed is False
        assert [(r.name, r.phase) for r in records] == [("B", Phase.STARTING)]
        assert notified == ["A", "A", "B"]


class TestRecordsFromSnapshot:
    def test_preserves_order(self, make_instance):
        records = records_from_snapshot([make_instance(name=n) for n in ("c", "a", "b")])

        assert names(records) == ["c", "a", "b"]
        assert [r.index for r in records] == [0, 1, 2]

    def test_duplicates_collapse(self, make_instance):
        records = records_from_snapshot([
            make_instance(name="a", phase=Phase.STARTING),
            make_instance(name="b"),
            make_instance(name="a", phase=Phase.READY),
        ])

        assert names(records) == ["a", "b"]
        assert records[0].phase == Phase.READY
