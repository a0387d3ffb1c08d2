"""SQLAlchemy implementation for the transfer snapshot query"""

from __future__ import annotations

from typing import Any, Collection, Mapping, Sequence

from sqlalchemy import desc, or_, select
from sqlalchemy.orm import aliased

from transfer_feed.db.models import FinancialAccount, Transfer
from transfer_feed.domain.common import AsyncRepository


class SqlTransferRepository(AsyncRepository[Transfer]):
    async def list_recent_for_accounts(
        self,
        account_ids: Collection[str],
        limit: int,
    ) -> Sequence[Mapping[str, Any]]:
        """Newest transfers whose source or destination is one of ``account_ids``."""
        ids = list(account_ids)
        from_account = aliased(FinancialAccount)
        to_account = aliased(FinancialAccount)
        stmt = (
            select(
                Transfer.id,
                Transfer.amount,
                Transfer.type,
                Transfer.status,
                Transfer.label,
                Transfer.description,
                Transfer.from_account_id,
                from_account.name.label("from_account_name"),
                Transfer.to_account_id,
                to_account.name.label("to_account_name"),
                Transfer.created_at,
                Transfer.updated_at,
                Transfer.tb_transfer_id,
                Transfer.external_transaction_id,
            )
            .outerjoin(from_account, Transfer.from_account_id == from_account.id)
            .outerjoin(to_account, Transfer.to_account_id == to_account.id)
            .where(or_(Transfer.from_account_id.in_(ids), Transfer.to_account_id.in_(ids)))
            .order_by(desc(Transfer.created_at), desc(Transfer.id))
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.mappings().all()
