"""Domain models for the live transfer feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Mapping, Optional

from .exceptions import EmptyAccountFilterError


class TransferStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class TrackedAccountSet:
    """Immutable set of account identifiers a feed session filters on."""

    account_ids: frozenset[str]

    def __post_init__(self) -> None:
        if not self.account_ids:
            raise EmptyAccountFilterError("at least one account id is required")

    @classmethod
    def from_ids(cls, account_ids: Iterable[str]) -> "TrackedAccountSet":
        cleaned = frozenset(item.strip() for item in account_ids if item and item.strip())
        return cls(cleaned)

    @classmethod
    def parse(cls, raw: Optional[str]) -> "TrackedAccountSet":
        """Build the set from a comma separated query parameter value."""
        return cls.from_ids((raw or "").split(","))

    def __contains__(self, account_id: object) -> bool:
        return account_id in self.account_ids

    def __len__(self) -> int:
        return len(self.account_ids)

    def sorted_ids(self) -> list[str]:
        return sorted(self.account_ids)


@dataclass(frozen=True, slots=True)
class TransferRecord:
    id: str
    from_account_id: str
    from_account_name: str
    to_account_id: str
    to_account_name: str
    amount: Optional[Decimal]
    type: str
    status: str
    label: Optional[str]
    description: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    tb_transfer_id: Optional[str]
    external_transaction_id: Optional[str]

    @property
    def known_status(self) -> Optional[TransferStatus]:
        try:
            return TransferStatus(self.status)
        except ValueError:
            return None


Snapshot = Mapping[str, TransferRecord]


def build_snapshot(records: Iterable[TransferRecord]) -> dict[str, TransferRecord]:
    return {record.id: record for record in records}
