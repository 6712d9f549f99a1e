"""
Error types for the auction engine.

Every failure an operation can report to its caller is an AuctionError
subclass, so the UI layer can catch one base type and display the message.
"""

from typing import Optional


class AuctionError(Exception):
    """Base class for all engine errors."""


class ValidationError(AuctionError):
    """Bad input shape or range. Always the caller's fault, never retried."""


class NotFound(AuctionError):
    """Unknown auction (or bid) id."""

    def __init__(self, auction_id):
        super().__init__(f"Auction {auction_id} not found")
        self.auction_id = auction_id


class AuctionClosed(AuctionError):
    """The auction is inactive or its bidding window has passed."""


class BidTooLow(AuctionError):
    """Bid amount below the auction's minimum bid."""

    def __init__(self, amount, minimum_bid):
        super().__init__(f"Bid {amount} is below the minimum bid {minimum_bid}")
        self.amount = amount
        self.minimum_bid = minimum_bid


class TooEarly(AuctionError):
    """Finalization requested before the auction deadline."""

    def __init__(self, auction_id, ends_at: int):
        super().__init__(f"Auction {auction_id} is still running (ends at {ends_at})")
        self.auction_id = auction_id
        self.ends_at = ends_at


class NotAuthenticated(AuctionError):
    """No wallet address is resolved for the current session."""

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


class ConnectionRejected(AuctionError):
    """The wallet collaborator declined or failed the connection."""


class BackendUnavailable(AuctionError):
    """
    The remote execution environment is unreachable or has no deployed
    auction contract.

    Attributes:
        suggestion: User-actionable fallback, filled in by the service facade
    """

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        self.suggestion = suggestion

    def __str__(self) -> str:
        base = super().__str__()
        if self.suggestion:
            return f"{base} ({self.suggestion})"
        return base


class StaleSnapshot(AuctionError):
    """The bid set changed between snapshot and close; recompute."""


class PersistenceWarning(UserWarning):
    """A write to the durable medium failed; the in-memory view is intact."""


__all__ = [
    "AuctionError",
    "ValidationError",
    "NotFound",
    "AuctionClosed",
    "BidTooLow",
    "TooEarly",
    "NotAuthenticated",
    "ConnectionRejected",
    "BackendUnavailable",
    "StaleSnapshot",
    "PersistenceWarning",
]
