"""Server-Sent Events framing for feed events."""

from __future__ import annotations

import json
from typing import Sequence

from transfer_feed.domain.transfers import TransferRecord
from transfer_feed.schemas import ConnectedEvent, FeedEvent, TransferPayload, UpdateEvent

# omitted from the frame when empty; everything else is always present
OPTIONAL_TRANSFER_FIELDS = ("label", "description", "updatedAt", "tbTransferId", "externalTransactionId")


def connected_event() -> ConnectedEvent:
    return ConnectedEvent()


def update_event(records: Sequence[TransferRecord]) -> UpdateEvent:
    return UpdateEvent(transfers=[TransferPayload.from_record(record) for record in records])


def event_payload(event: FeedEvent) -> dict:
    payload = event.model_dump(mode="json", by_alias=True)
    for transfer in payload.get("transfers", []):
        for key in OPTIONAL_TRANSFER_FIELDS:
            if transfer.get(key) is None:
                transfer.pop(key, None)
    return payload


def encode_event(event: FeedEvent) -> bytes:
    """Render one event as a single ``data:`` frame terminated by a blank line."""
    body = json.dumps(event_payload(event), separators=(",", ":"), ensure_ascii=False)
    return f"data: {body}\n\n".encode("utf-8")
