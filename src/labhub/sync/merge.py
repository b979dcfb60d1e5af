"""Event merge - 순수 함수로 replica 갱신.

Merging is kept apart from notification so it can be tested without any
display or notification dependency. Inputs are never mutated.

Invariants:
- at most one record per (namespace, name)
- records untouched by an event keep their relative order
- replaying an ADDED/MODIFIED event, or a DELETED event for an absent
  identity, leaves the collection unchanged
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from labhub.core.domain.instance import Phase, UpdateType
from labhub.core.errors import MalformedEventError
from labhub.core.models import ChangeEvent, Instance, InstanceIdentity


class InstanceRecord(BaseModel):
    """Replica entry for one instance.

    index is the display position, derived from the position in the
    collection.
    """

    namespace: str
    name: str
    instance: Instance
    index: int = 0

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_instance(cls, instance: Instance, index: int = 0) -> "InstanceRecord":
        return cls(
            namespace=instance.metadata.namespace,
            name=instance.metadata.name,
            instance=instance,
            index=index,
        )

    @property
    def identity(self) -> InstanceIdentity:
        return InstanceIdentity(namespace=self.namespace, name=self.name)

    @property
    def phase(self) -> Phase:
        return self.instance.phase


@dataclass(frozen=True)
class MergeResult:
    """Result of merging one event.

    Attributes:
        records: New collection (a fresh list, input untouched)
        changed: Collection differs from the input
        notify: A status notification is due for this event
        error: Why the event was skipped (malformed events only)
    """

    records: list[InstanceRecord]
    changed: bool
    notify: bool
    error: str | None = None

    @property
    def malformed(self) -> bool:
        return self.error is not None


def merge_event(records: Sequence[InstanceRecord], event: ChangeEvent) -> MergeResult:
    """Apply one change event to the replica.

    Cases:
    1. malformed ADDED/MODIFIED → unchanged, no notification
    2. DELETED → drop the identity (absent identity is a no-op); removed
       even when the snapshot is missing or mismatching
    3. ADDED/MODIFIED → replace in place, or append when first seen

    A notification is due only when the event carries a usable snapshot and
    the collection actually changed, so duplicate deliveries stay silent.
    """
    try:
        instance = event.check()
    except MalformedEventError as exc:
        return MergeResult(records=list(records), changed=False, notify=False, error=exc.message)

    identity = event.identity

    if event.update_type == UpdateType.DELETED:
        return _remove(records, identity, describable=instance is not None)
    if instance is None:
        # check() only lets DELETED events through without a snapshot
        return MergeResult(records=list(records), changed=False, notify=False)

    for position, record in enumerate(records):
        if record.identity != identity:
            continue
        if record.instance == instance:
            return MergeResult(records=list(records), changed=False, notify=False)
        updated = list(records)
        updated[position] = record.model_copy(update={"instance": instance})
        return MergeResult(records=updated, changed=True, notify=True)

    appended = [*records, InstanceRecord.from_instance(instance, index=len(records))]
    return MergeResult(records=appended, changed=True, notify=True)


def records_from_snapshot(instances: Iterable[Instance]) -> list[InstanceRecord]:
    """Build a replica from an authoritative snapshot.

    Duplicate identities collapse into one record: the first position is
    kept, the last snapshot wins.
    """
    positions: dict[InstanceIdentity, int] = {}
    records: list[InstanceRecord] = []
    for instance in instances:
        identity = instance.identity
        if identity in positions:
            records[positions[identity]] = InstanceRecord.from_instance(
                instance, index=positions[identity]
            )
            continue
        positions[identity] = len(records)
        records.append(InstanceRecord.from_instance(instance, index=len(records)))
    return records


def _remove(
    records: Sequence[InstanceRecord],
    identity: InstanceIdentity,
    describable: bool,
) -> MergeResult:
    kept = [r for r in records if r.identity != identity]
    changed = len(kept) != len(records)
    return MergeResult(
        records=_reindex(kept) if changed else list(records),
        changed=changed,
        notify=changed and describable,
    )


def _reindex(records: list[InstanceRecord]) -> list[InstanceRecord]:
    return [
        r if r.index == i else r.model_copy(update={"index": i})
        for i, r in enumerate(records)
    ]
