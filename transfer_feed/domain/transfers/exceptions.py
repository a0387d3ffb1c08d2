"""Transfer feed domain specific exceptions."""


class TransferFeedError(Exception):
    """Base class for live transfer feed errors."""


class EmptyAccountFilterError(TransferFeedError, ValueError):
    """Raised when a subscription names no account identifiers."""
