"""Per-connection polling session behind one live transfer stream."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from transfer_feed.core.config import Settings, get_settings
from transfer_feed.domain.transfers import (
    FetchResult,
    Snapshot,
    SnapshotFetcher,
    TrackedAccountSet,
    Unchanged,
    detect_changes,
)
from transfer_feed.schemas import FeedEvent, UpdateEvent

from .encoder import connected_event, update_event

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]
DisconnectProbe = Callable[[], Awaitable[bool]]


class FeedState(str, Enum):
    STARTING = "starting"
    POLLING = "polling"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class FeedConfig:
    poll_interval: float = 2.0

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "FeedConfig":
        settings = settings or get_settings()
        return cls(poll_interval=settings.feed.poll_interval_ms / 1000)


class FeedSession:
    """Emulates a push feed over a pull-only store for one subscriber.

    ``events()`` yields a ``connected`` event straight away and then, once per
    poll interval, fetches the tracked accounts' transfers and yields an
    ``update`` event whenever the change detector reports a change. Ticks run
    strictly one after another. ``cancel()`` stops the loop: the pending timer
    is cancelled immediately and no tick starts afterwards.
    """

    def __init__(
        self,
        accounts: TrackedAccountSet,
        fetcher: SnapshotFetcher,
        config: FeedConfig | None = None,
        *,
        session_id: Optional[str] = None,
        subject: str = "",
        sleep: Sleep = asyncio.sleep,
        is_disconnected: Optional[DisconnectProbe] = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.subject = subject
        self.accounts = accounts
        self.fetcher = fetcher
        self.config = config or FeedConfig()
        self.state = FeedState.STARTING
        self.snapshot: Snapshot = {}
        self.opened_at = datetime.now(timezone.utc)

        self.ticks = 0
        self.events_emitted = 0
        self.fetch_failures = 0
        self.consecutive_failures = 0

        self._sleep = sleep
        self._is_disconnected = is_disconnected
        self._cancelled = asyncio.Event()
        self._timer: Optional[asyncio.Future] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    async def events(self) -> AsyncIterator[FeedEvent]:
        if self.cancelled:
            return
        try:
            self.events_emitted += 1
            yield connected_event()
            if self.cancelled:
                return
            self.state = FeedState.POLLING
            logger.debug("Feed session %s polling every %.3fs", self.session_id, self.config.poll_interval)

            while await self._wait_for_tick():
                event = await self.tick()
                if event is not None:
                    self.events_emitted += 1
                    yield event
        finally:
            self.cancel()

    async def tick(self) -> Optional[UpdateEvent]:
        """Run one fetch and detect cycle and return the event to emit, if any."""
        if self.cancelled:
            return None

        self.ticks += 1
        try:
            result = await self.fetcher.fetch(self.accounts)
        except Exception as exc:  # pylint: disable=broad-except
            result = FetchResult.failure(str(exc) or exc.__class__.__name__)

        if self.cancelled:
            return None

        if not result.ok:
            self.fetch_failures += 1
            self.consecutive_failures += 1
            logger.warning(
                "Feed session %s tick %d fetch failed (%d in a row): %s",
                self.session_id,
                self.ticks,
                self.consecutive_failures,
                result.error,
            )
            return None

        self.consecutive_failures = 0
        change = detect_changes(self.snapshot, result.records)
        self.snapshot = change.snapshot
        if isinstance(change, Unchanged):
            return None

        logger.debug(
            "Feed session %s tick %d changed (new=%s updated=%s, %d transfers)",
            self.session_id,
            self.ticks,
            change.has_new,
            change.has_updated,
            len(change.records),
        )
        return update_event(change.records)

    def cancel(self) -> None:
        if self.state is FeedState.TERMINATED:
            return
        self.state = FeedState.TERMINATED
        self._cancelled.set()
        timer = self._timer
        if timer is not None and not timer.done():
            timer.cancel()
        self.snapshot = {}
        logger.info(
            "Feed session %s terminated after %d tick(s), %d event(s)",
            self.session_id,
            self.ticks,
            self.events_emitted,
        )

    async def _wait_for_tick(self) -> bool:
        if self.cancelled:
            return False

        self._timer = asyncio.ensure_future(self._sleep(self.config.poll_interval))
        try:
            await self._timer
        except asyncio.CancelledError:
            if not self.cancelled:
                raise
            return False
        finally:
            self._timer = None

        if self.cancelled:
            return False
        if self._is_disconnected is not None and await self._is_disconnected():
            logger.info("Feed session %s client disconnected", self.session_id)
            self.cancel()
            return False
        return True
