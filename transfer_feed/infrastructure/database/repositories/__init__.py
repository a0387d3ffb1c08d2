"""SQLAlchemy-backed repository implementations."""

from .transfer_repository import SqlTransferRepository

__all__ = [
    "SqlTransferRepository",
]
