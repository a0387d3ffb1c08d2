"""Repository interface for the transfer store."""

from __future__ import annotations

from typing import Any, Collection, Mapping, Protocol, Sequence


class TransferRepository(Protocol):
    async def list_recent_for_accounts(
        self,
        account_ids: Collection[str],
        limit: int,
    ) -> Sequence[Mapping[str, Any]]:
        ...
