"""Registry of live transfer feed sessions and their SSE streams."""

from __future__ import annotations

import logging
from typing import AsyncIterator, Callable, Dict, Optional

from transfer_feed.domain.transfers import SnapshotFetcher, TrackedAccountSet, TransferSnapshotFetcher
from transfer_feed.schemas import FeedSessionInfo, FeedStatsResponse, TokenData

from .encoder import encode_event
from .session import DisconnectProbe, FeedConfig, FeedSession

logger = logging.getLogger(__name__)


class TransferFeedGateway:
    def __init__(
        self,
        fetcher_factory: Optional[Callable[[], SnapshotFetcher]] = None,
        config: Optional[FeedConfig] = None,
    ) -> None:
        self.sessions: Dict[str, FeedSession] = {}
        self._fetcher_factory = fetcher_factory or TransferSnapshotFetcher.from_settings
        self._fetcher: Optional[SnapshotFetcher] = None
        self._config = config

    @property
    def config(self) -> FeedConfig:
        if self._config is None:
            self._config = FeedConfig.from_settings()
        return self._config

    @property
    def fetcher(self) -> SnapshotFetcher:
        if self._fetcher is None:
            self._fetcher = self._fetcher_factory()
        return self._fetcher

    def open(
        self,
        principal: TokenData,
        accounts: TrackedAccountSet,
        *,
        is_disconnected: Optional[DisconnectProbe] = None,
    ) -> FeedSession:
        session = FeedSession(
            accounts,
            self.fetcher,
            self.config,
            subject=principal.subject,
            is_disconnected=is_disconnected,
        )
        logger.info(
            "Feed session %s opened by %s for %d account(s)",
            session.session_id,
            principal.username,
            len(accounts),
        )
        return session

    async def stream(self, session: FeedSession) -> AsyncIterator[bytes]:
        """Register ``session`` and yield its encoded frames until it ends.

        A session only shows up in ``sessions`` once its stream has started,
        so a response that is dropped before its body is sent leaves nothing
        behind.
        """
        try:
            self.sessions[session.session_id] = session
            async for event in session.events():
                yield encode_event(event)
        finally:
            self.release(session.session_id)

    def release(self, session_id: str) -> None:
        session = self.sessions.pop(session_id, None)
        if session is not None:
            session.cancel()

    def close_all(self) -> None:
        if self.sessions:
            logger.info("Closing %d live feed session(s)", len(self.sessions))
        for session_id in list(self.sessions.keys()):
            self.release(session_id)

    def stats(self) -> FeedStatsResponse:
        return FeedStatsResponse(
            active_sessions=len(self.sessions),
            sessions=[
                FeedSessionInfo(
                    session_id=session.session_id,
                    subject=session.subject,
                    account_ids=session.accounts.sorted_ids(),
                    state=session.state.value,
                    ticks=session.ticks,
                    events_emitted=session.events_emitted,
                    fetch_failures=session.fetch_failures,
                    consecutive_failures=session.consecutive_failures,
                    opened_at=session.opened_at,
                )
                for session in self.sessions.values()
            ],
        )


feed_gateway = TransferFeedGateway()


def get_feed_gateway() -> TransferFeedGateway:
    return feed_gateway
