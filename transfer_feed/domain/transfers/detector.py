"""Change detection between consecutive transfer snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from .models import Snapshot, TransferRecord, build_snapshot


@dataclass(frozen=True, slots=True)
class Unchanged:
    snapshot: Snapshot


@dataclass(frozen=True, slots=True)
class Changed:
    records: tuple[TransferRecord, ...]
    snapshot: Snapshot
    has_new: bool = False
    has_updated: bool = False


ChangeResult = Union[Unchanged, Changed]


def detect_changes(previous: Snapshot, fetched: Sequence[TransferRecord]) -> ChangeResult:
    """Classify ``fetched`` against the previously observed snapshot.

    Only identity, ``status`` and ``updated_at`` are compared; other fields
    may differ without producing a change. A ``Changed`` result carries the
    full fetched sequence in its original order, not a delta.
    """
    snapshot = build_snapshot(fetched)

    has_new = any(transfer_id not in previous for transfer_id in snapshot)
    has_updated = any(
        _advanced(previous[transfer_id], record)
        for transfer_id, record in snapshot.items()
        if transfer_id in previous
    )

    if has_new or has_updated:
        return Changed(records=tuple(fetched), snapshot=snapshot, has_new=has_new, has_updated=has_updated)
    return Unchanged(snapshot=snapshot)


def _advanced(before: TransferRecord, after: TransferRecord) -> bool:
    return before.status != after.status or before.updated_at != after.updated_at
