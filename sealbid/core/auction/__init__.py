"""
Auction Module.

This module provides the sealed-bid auction lifecycle:
- Auction, bid and result records
- Repository over the persistent store
- Resolution engine (winner selection and finalization)
"""

from sealbid.core.auction.models import (
    Auction,
    Bid,
    Clock,
    FinalizationOutcome,
    FinalizationResult,
    ManualClock,
    Winner,
    MS_PER_HOUR,
    system_clock,
)

from sealbid.core.auction.repository import (
    AuctionRepository,
    DEMO_AUCTIONS,
)

from sealbid.core.auction.resolution import (
    ResolutionEngine,
    select_winning_bid,
)

__all__ = [
    # Records
    "Auction",
    "Bid",
    "Clock",
    "FinalizationOutcome",
    "FinalizationResult",
    "ManualClock",
    "Winner",
    "MS_PER_HOUR",
    "system_clock",
    # Repository
    "AuctionRepository",
    "DEMO_AUCTIONS",
    # Resolution
    "ResolutionEngine",
    "select_winning_bid",
]
