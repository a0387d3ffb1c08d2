"""Snapshot fetcher: one bounded pull query per feed tick."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from transfer_feed.core.config import Settings, get_settings
from transfer_feed.infrastructure.database.repositories.transfer_repository import SqlTransferRepository
from transfer_feed.infrastructure.database.session import get_session_factory

from .models import TrackedAccountSet, TransferRecord, TransferStatus
from .repository import TransferRepository

logger = logging.getLogger(__name__)

DEFAULT_TRANSFER_TYPE = "payment"
DEFAULT_TRANSFER_STATUS = TransferStatus.DRAFT.value


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a single fetch; failures are values, not exceptions."""

    ok: bool
    records: tuple[TransferRecord, ...] = ()
    error: Optional[str] = None

    @classmethod
    def success(cls, records: Iterable[TransferRecord]) -> "FetchResult":
        return cls(ok=True, records=tuple(records))

    @classmethod
    def failure(cls, error: str) -> "FetchResult":
        return cls(ok=False, error=error)


class SnapshotFetcher(Protocol):
    async def fetch(self, accounts: TrackedAccountSet) -> FetchResult:
        ...


@dataclass(slots=True)
class TransferSnapshotFetcher:
    session_factory: Callable[[], AsyncSession]
    max_results: int = 50
    repository_factory: Callable[[AsyncSession], TransferRepository] = SqlTransferRepository

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TransferSnapshotFetcher":
        settings = settings or get_settings()
        return cls(session_factory=get_session_factory(), max_results=settings.feed.max_results)

    async def fetch(self, accounts: TrackedAccountSet) -> FetchResult:
        try:
            async with self.session_factory() as session:
                repository = self.repository_factory(session)
                rows = await repository.list_recent_for_accounts(accounts.sorted_ids(), self.max_results)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Transfer snapshot query failed for %d account(s): %s", len(accounts), exc)
            return FetchResult.failure(str(exc) or exc.__class__.__name__)
        return FetchResult.success(coerce_transfer_rows(rows))


def coerce_transfer_rows(rows: Iterable[Mapping[str, Any]]) -> list[TransferRecord]:
    records: list[TransferRecord] = []
    for row in rows:
        record = coerce_transfer_row(row)
        if record is not None:
            records.append(record)
    return records


def coerce_transfer_row(row: Mapping[str, Any]) -> Optional[TransferRecord]:
    """Map one store row onto a ``TransferRecord``, field by field.

    Unexpected field shapes fall back to safe defaults instead of failing the
    whole fetch. A missing or unreadable amount becomes ``None`` rather than
    zero, and a row without an identifier is dropped because it cannot be
    tracked between polls.
    """
    transfer_id = _link_id(row.get("id"))
    if not transfer_id:
        logger.warning("Skipping transfer row without an id: %r", dict(row))
        return None

    return TransferRecord(
        id=transfer_id,
        from_account_id=_link_id(row.get("from_account_id")),
        from_account_name=_text(row.get("from_account_name")),
        to_account_id=_link_id(row.get("to_account_id")),
        to_account_name=_text(row.get("to_account_name")),
        amount=_amount(row.get("amount"), transfer_id),
        type=_text(row.get("type")) or DEFAULT_TRANSFER_TYPE,
        status=_text(row.get("status")) or DEFAULT_TRANSFER_STATUS,
        label=_optional_text(row.get("label")),
        description=_optional_text(row.get("description")),
        created_at=_timestamp(row.get("created_at")),
        updated_at=_timestamp(row.get("updated_at")),
        tb_transfer_id=_optional_text(row.get("tb_transfer_id")),
        external_transaction_id=_optional_text(row.get("external_transaction_id")),
    )


def _link_id(value: Any) -> str:
    # record links may come back as {"tb": "account", "id": "abc"}
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, Mapping):
        table = value.get("tb")
        key = value.get("id")
        if isinstance(table, str) and isinstance(key, str):
            return f"{table}:{key}"
        if isinstance(key, str):
            return key
        return ""
    return str(value)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _optional_text(value: Any) -> Optional[str]:
    text = _text(value).strip()
    return text or None


def _amount(value: Any, transfer_id: str) -> Optional[Decimal]:
    amount: Optional[Decimal] = None
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)) and not isinstance(value, bool):
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            amount = None

    if amount is None or not amount.is_finite():
        logger.warning("Transfer %s has no usable amount (%r)", transfer_id, value)
        return None
    return amount


def _timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None
