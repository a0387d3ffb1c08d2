"""Tests for the transfer snapshot fetcher and row coercion."""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from transfer_feed.db.models import FinancialAccount, Transfer
from transfer_feed.domain.transfers import TrackedAccountSet, TransferSnapshotFetcher
from transfer_feed.domain.transfers.fetcher import coerce_transfer_row, coerce_transfer_rows
from transfer_feed.infrastructure.database.base import Base


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'transfers.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False)
    await engine.dispose()


async def _seed(factory, transfers):
    async with factory() as session:
        session.add_all(
            [
                FinancialAccount(id="account:a1", name="Checking"),
                FinancialAccount(id="account:b2", name="Savings"),
                FinancialAccount(id="account:c3", name="Holiday"),
                FinancialAccount(id="account:d4", name="Car"),
            ]
        )
        await session.flush()
        session.add_all(transfers)
        await session.commit()


BASE_TIME = datetime(2026, 10, 1, 9, 0)


def _transfer(transfer_id, source, destination, minutes, **kwargs):
    return Transfer(
        id=transfer_id,
        from_account_id=source,
        to_account_id=destination,
        amount=kwargs.pop("amount", Decimal("5.00")),
        status=kwargs.pop("status", "draft"),
        created_at=BASE_TIME + timedelta(minutes=minutes),
        **kwargs,
    )


class TestTransferSnapshotFetcher:
    @pytest.mark.asyncio
    async def test_filters_on_source_or_destination_newest_first(self, session_factory):
        await _seed(
            session_factory,
            [
                _transfer("t-out", "account:a1", "account:b2", 1),
                _transfer("t-in", "account:c3", "account:a1", 2),
                _transfer("t-other", "account:c3", "account:d4", 3),
            ],
        )
        fetcher = TransferSnapshotFetcher(session_factory=session_factory)

        result = await fetcher.fetch(TrackedAccountSet.from_ids(["account:a1"]))

        assert result.ok
        assert [record.id for record in result.records] == ["t-in", "t-out"]
        incoming = result.records[0]
        assert incoming.from_account_name == "Holiday"
        assert incoming.to_account_name == "Checking"
        assert incoming.amount == Decimal("5.00")

    @pytest.mark.asyncio
    async def test_correlation_ids_are_selected(self, session_factory):
        await _seed(
            session_factory,
            [
                _transfer(
                    "t1",
                    "account:a1",
                    "account:b2",
                    1,
                    tb_transfer_id="tb-9",
                    external_transaction_id="ext-7",
                ),
                _transfer("t2", "account:a1", "account:b2", 2),
            ],
        )
        fetcher = TransferSnapshotFetcher(session_factory=session_factory)

        result = await fetcher.fetch(TrackedAccountSet.from_ids(["account:a1"]))

        newest, oldest = result.records
        assert (newest.tb_transfer_id, newest.external_transaction_id) == (None, None)
        assert (oldest.tb_transfer_id, oldest.external_transaction_id) == ("tb-9", "ext-7")

    @pytest.mark.asyncio
    async def test_result_is_capped(self, session_factory):
        await _seed(
            session_factory,
            [_transfer(f"t{index:02d}", "account:a1", "account:b2", index) for index in range(8)],
        )
        fetcher = TransferSnapshotFetcher(session_factory=session_factory, max_results=5)

        result = await fetcher.fetch(TrackedAccountSet.from_ids(["account:b2"]))

        assert [record.id for record in result.records] == ["t07", "t06", "t05", "t04", "t03"]

    @pytest.mark.asyncio
    async def test_backend_error_becomes_failure_value(self, session_factory):
        class BrokenRepository:
            def __init__(self, session):
                self.session = session

            async def list_recent_for_accounts(self, account_ids, limit):
                raise OperationalError("SELECT", {}, Exception("database is locked"))

        fetcher = TransferSnapshotFetcher(session_factory=session_factory, repository_factory=BrokenRepository)

        result = await fetcher.fetch(TrackedAccountSet.from_ids(["account:a1"]))

        assert not result.ok
        assert result.records == ()
        assert "database is locked" in result.error


class TestCoerceTransferRow:
    def test_missing_amount_is_none_not_zero(self):
        record = coerce_transfer_row({"id": "t1", "amount": None})
        assert record.amount is None

    @pytest.mark.parametrize("raw", ["abc", float("nan"), True, {"value": 1}])
    def test_unreadable_amount_is_none(self, raw):
        assert coerce_transfer_row({"id": "t1", "amount": raw}).amount is None

    def test_numeric_amounts_become_decimals(self):
        assert coerce_transfer_row({"id": "t1", "amount": 12.5}).amount == Decimal("12.5")
        assert coerce_transfer_row({"id": "t1", "amount": "99.99"}).amount == Decimal("99.99")

    def test_defaults_for_missing_fields(self):
        record = coerce_transfer_row({"id": "t1"})
        assert record.type == "payment"
        assert record.status == "draft"
        assert record.from_account_id == ""
        assert record.label is None
        assert record.created_at is None

    def test_unknown_status_is_preserved(self):
        record = coerce_transfer_row({"id": "t1", "status": "reversed"})
        assert record.status == "reversed"
        assert record.known_status is None

    def test_record_links_are_flattened(self):
        record = coerce_transfer_row(
            {"id": {"tb": "transfer", "id": "x1"}, "from_account_id": {"tb": "account", "id": "a1"}}
        )
        assert record.id == "transfer:x1"
        assert record.from_account_id == "account:a1"

    def test_iso_timestamps_are_parsed(self):
        record = coerce_transfer_row({"id": "t1", "created_at": "2026-10-01T09:00:00Z", "updated_at": "soon"})
        assert record.created_at.year == 2026
        assert record.created_at.utcoffset() == timedelta(0)
        assert record.updated_at is None

    def test_rows_without_id_are_skipped(self):
        records = coerce_transfer_rows([{"id": ""}, {"status": "pending"}, {"id": "t1"}])
        assert [record.id for record in records] == ["t1"]

    def test_correlation_ids_are_kept(self):
        record = coerce_transfer_row({"id": "t1", "tb_transfer_id": " tb-9 ", "external_transaction_id": ""})
        assert record.tb_transfer_id == "tb-9"
        assert record.external_transaction_id is None
