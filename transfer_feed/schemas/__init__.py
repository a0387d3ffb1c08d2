"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from transfer_feed.domain.transfers.models import TransferRecord


class TokenData(BaseModel):
    subject: str
    username: str
    role: str


class TransferPayload(BaseModel):
    """Client-facing shape of one transfer inside an ``update`` event."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_account_id: str = Field(alias="fromAccountId")
    from_account_name: str = Field(alias="fromAccountName")
    to_account_id: str = Field(alias="toAccountId")
    to_account_name: str = Field(alias="toAccountName")
    amount: Optional[Decimal]
    type: str
    status: str
    label: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    tb_transfer_id: Optional[str] = Field(default=None, alias="tbTransferId")
    external_transaction_id: Optional[str] = Field(default=None, alias="externalTransactionId")

    @classmethod
    def from_record(cls, record: TransferRecord) -> "TransferPayload":
        return cls(
            id=record.id,
            from_account_id=record.from_account_id,
            from_account_name=record.from_account_name,
            to_account_id=record.to_account_id,
            to_account_name=record.to_account_name,
            amount=record.amount,
            type=record.type,
            status=record.status,
            label=record.label,
            description=record.description,
            created_at=record.created_at,
            updated_at=record.updated_at,
            tb_transfer_id=record.tb_transfer_id,
            external_transaction_id=record.external_transaction_id,
        )


class FeedEvent(BaseModel):
    type: str


class ConnectedEvent(FeedEvent):
    type: Literal["connected"] = "connected"


class UpdateEvent(FeedEvent):
    type: Literal["update"] = "update"
    transfers: list[TransferPayload] = Field(default_factory=list)


class FeedSessionInfo(BaseModel):
    session_id: str
    subject: str
    account_ids: list[str]
    state: str
    ticks: int
    events_emitted: int
    fetch_failures: int
    consecutive_failures: int
    opened_at: datetime


class FeedStatsResponse(BaseModel):
    active_sessions: int
    sessions: list[FeedSessionInfo] = Field(default_factory=list)
