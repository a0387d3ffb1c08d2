import asyncio
import os
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

import pytest

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECURITY__SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE__URL", "sqlite+aiosqlite:///:memory:")

from transfer_feed.domain.transfers import FetchResult, TrackedAccountSet, TransferRecord  # noqa: E402


def make_record(
    transfer_id: str,
    *,
    status: str = "draft",
    updated_at: Optional[datetime] = None,
    amount: Optional[Decimal] = Decimal("10.00"),
    label: Optional[str] = None,
    created_at: Optional[datetime] = None,
    tb_transfer_id: Optional[str] = None,
    external_transaction_id: Optional[str] = None,
) -> TransferRecord:
    return TransferRecord(
        id=transfer_id,
        from_account_id="account:a1",
        from_account_name="Checking",
        to_account_id="account:b2",
        to_account_name="Savings",
        amount=amount,
        type="payment",
        status=status,
        label=label,
        description=None,
        created_at=created_at or datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
        updated_at=updated_at,
        tb_transfer_id=tb_transfer_id,
        external_transaction_id=external_transaction_id,
    )


class ScriptedFetcher:
    """Returns queued results in order; an empty success once the queue runs dry."""

    def __init__(self, *results: FetchResult) -> None:
        self.results = list(results)
        self.calls = 0
        self.seen_accounts: list[TrackedAccountSet] = []
        self.on_call: Optional[Callable[[int], None]] = None

    async def fetch(self, accounts: TrackedAccountSet) -> FetchResult:
        self.calls += 1
        self.seen_accounts.append(accounts)
        if self.on_call is not None:
            self.on_call(self.calls)
        if self.results:
            return self.results.pop(0)
        return FetchResult.success([])


class FakeSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def accounts() -> TrackedAccountSet:
    return TrackedAccountSet.from_ids(["account:a1"])


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()
