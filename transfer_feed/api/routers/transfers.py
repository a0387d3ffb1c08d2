"""Live transfer feed endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse

from transfer_feed.core.security import get_current_admin, get_optional_principal
from transfer_feed.domain.transfers import EmptyAccountFilterError, TrackedAccountSet
from transfer_feed.schemas import FeedStatsResponse, TokenData
from transfer_feed.streaming import TransferFeedGateway, get_feed_gateway

logger = logging.getLogger(__name__)

router = APIRouter()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/live", summary="Live transfer feed (Server-Sent Events)")
async def live_transfers(
    request: Request,
    account_ids: Optional[str] = Query(default=None, alias="accountIds"),
    principal: Optional[TokenData] = Depends(get_optional_principal),
    feed_gateway: TransferFeedGateway = Depends(get_feed_gateway),
) -> StreamingResponse:
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        accounts = TrackedAccountSet.parse(account_ids)
    except EmptyAccountFilterError as exc:
        logger.debug("Rejected live feed request from %s: %s", principal.username, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing accountIds parameter") from exc

    session = feed_gateway.open(principal, accounts, is_disconnected=request.is_disconnected)
    return StreamingResponse(
        feed_gateway.stream(session),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.get("/live/sessions", response_model=FeedStatsResponse, summary="Live feed session health")
async def live_sessions(
    _: TokenData = Depends(get_current_admin),
    feed_gateway: TransferFeedGateway = Depends(get_feed_gateway),
) -> FeedStatsResponse:
    return feed_gateway.stats()
