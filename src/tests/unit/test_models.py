"""Tests for instance and change event models."""

import pytest

from labhub.core.domain.instance import Phase, UpdateType
from labhub.core.errors import MalformedEventError
from labhub.core.models import ChangeEvent, Instance, InstanceIdentity


class TestPhase:
    @pytest.mark.parametrize("value,expected", [
        ("Ready", Phase.READY),
        ("CreationLoopBackoff", Phase.CREATION_LOOP_BACKOFF),
        ("", Phase.UNKNOWN),
        (None, Phase.UNKNOWN),
        ("Hibernating", Phase.UNKNOWN),
    ])
    def test_parse(self, value, expected) -> None:
        assert Phase.parse(value) == expected

    def test_unknown_wire_phase_accepted(self) -> None:
        """알 수 없는 phase 값은 UNKNOWN으로 처리."""
        instance = Instance.model_validate({
            "metadata": {"name": "a", "namespace": "tenant-tester"},
            "spec": {"template": {"name": "t"}, "tenant": {"name": "tester"}},
            "status": {"phase": "Hibernating"},
        })
        assert instance.phase == Phase.UNKNOWN


class TestInstance:
    def test_identity(self, instance) -> None:
        assert instance.identity == InstanceIdentity(
            namespace="tenant-tester", name="kubernetes-0000"
        )
        assert str(instance.identity) == "tenant-tester/kubernetes-0000"

    def test_phase_without_status(self, instance) -> None:
        assert instance.phase == Phase.UNKNOWN

    def test_display_name_prefers_pretty_name(self, make_instance) -> None:
        assert make_instance(pretty_name="My Lab").display_name == "My Lab"
        assert make_instance().display_name == "kubernetes-0000"


class TestChangeEventCheck:
    def test_valid_event(self, instance) -> None:
        assert ChangeEvent.from_instance(UpdateType.ADDED, instance).check() == instance

    def test_delete_without_snapshot(self) -> None:
        event = ChangeEvent(update_type=UpdateType.DELETED, namespace="ns", name="a")
        assert event.check() is None

    def test_delete_with_mismatching_snapshot(self, instance) -> None:
        """DELETED는 snapshot 불일치여도 malformed 아님."""
        event = ChangeEvent(
            update_type=UpdateType.DELETED,
            namespace=instance.metadata.namespace,
            name="other",
            instance=instance,
        )
        assert event.check() is None
        assert event.snapshot() is None

    @pytest.mark.parametrize("update_type", [UpdateType.ADDED, UpdateType.MODIFIED])
    def test_missing_snapshot(self, update_type) -> None:
        event = ChangeEvent(update_type=update_type, namespace="ns", name="a")
        with pytest.raises(MalformedEventError):
            event.check()

    def test_identity_mismatch(self, instance) -> None:
        event = ChangeEvent(
            update_type=UpdateType.MODIFIED,
            namespace=instance.metadata.namespace,
            name="other",
            instance=instance,
        )
        with pytest.raises(MalformedEventError):
            event.check()

    def test_json_round_trip(self, instance) -> None:
        event = ChangeEvent.from_instance(UpdateType.MODIFIED, instance)
        assert ChangeEvent.model_validate_json(event.model_dump_json()) == event
