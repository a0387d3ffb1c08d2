"""Live transfer feed domain exports"""

from .detector import ChangeResult, Changed, Unchanged, detect_changes
from .exceptions import EmptyAccountFilterError, TransferFeedError
from .fetcher import FetchResult, SnapshotFetcher, TransferSnapshotFetcher
from .models import Snapshot, TrackedAccountSet, TransferRecord, TransferStatus

__all__ = [
    "ChangeResult",
    "Changed",
    "Unchanged",
    "detect_changes",
    "EmptyAccountFilterError",
    "TransferFeedError",
    "FetchResult",
    "SnapshotFetcher",
    "TransferSnapshotFetcher",
    "Snapshot",
    "TrackedAccountSet",
    "TransferRecord",
    "TransferStatus",
]
