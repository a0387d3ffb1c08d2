"""SQLAlchemy ORM models."""
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from transfer_feed.infrastructure.database.base import Base


def generate_uuid() -> str:
    return str(uuid.uuid4())


class FinancialAccount(Base):
    __tablename__ = "accounts"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    owner_id = Column(String(64), index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Transfer(Base):
    __tablename__ = "transfers"

    id = Column(String(64), primary_key=True, default=generate_uuid)
    from_account_id = Column(String(64), ForeignKey("accounts.id"), nullable=False, index=True)
    to_account_id = Column(String(64), ForeignKey("accounts.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 2))
    type = Column(String(30), default="payment")
    status = Column(String(20), default="draft")
    label = Column(String(100))
    description = Column(Text)
    created_by = Column(String(64))
    tb_transfer_id = Column(String(100))
    external_transaction_id = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    from_account = relationship("FinancialAccount", foreign_keys=[from_account_id])
    to_account = relationship("FinancialAccount", foreign_keys=[to_account_id])
