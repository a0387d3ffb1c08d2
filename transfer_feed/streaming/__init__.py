"""Server-Sent Events delivery of the live transfer feed."""

from .gateway import TransferFeedGateway, feed_gateway, get_feed_gateway
from .session import FeedConfig, FeedSession, FeedState

__all__ = [
    "TransferFeedGateway",
    "feed_gateway",
    "get_feed_gateway",
    "FeedConfig",
    "FeedSession",
    "FeedState",
]
