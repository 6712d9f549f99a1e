"""
Resolution - Sealed-bid winner selection and auction finalization.

Winner rule: highest amount. Equal amounts go to the bid placed first
(earliest placed_at, then lowest insertion sequence), so the result does
not depend on the order the store returns bids in.

Finalization is idempotent: once an auction is inactive its stored result
is returned as-is and never recomputed.
"""

from typing import Optional, Sequence

from sealbid.core.auction.models import (
    Bid,
    Clock,
    FinalizationOutcome,
    FinalizationResult,
)
from sealbid.core.auction.repository import AuctionRepository
from sealbid.core.errors import NotFound, StaleSnapshot, TooEarly
from sealbid.utils.logger import get_logger

logger = get_logger("resolution")

# Re-snapshots allowed when bids race the close
MAX_SNAPSHOT_ATTEMPTS = 5


def select_winning_bid(bids: Sequence[Bid]) -> Optional[Bid]:
    """
    Pick the winning bid.

    Returns:
        The highest bid (earliest on ties), or None for no bids
    """
    if not bids:
        return None
    return min(bids, key=lambda b: (-b.amount, b.placed_at, b.sequence))


class ResolutionEngine:
    """Finalizes auctions and publishes their results."""

    def __init__(self, repository: AuctionRepository, clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or repository.clock

    async def finalize(self, auction_id: int) -> FinalizationOutcome:
        """
        Finalize an auction after its deadline.

        Raises:
            NotFound: unknown auction
            TooEarly: deadline not reached
        """
        for attempt in range(MAX_SNAPSHOT_ATTEMPTS):
            auction = await self.repository.get_auction(auction_id)
            if auction is None:
                raise NotFound(auction_id)

            if not auction.active:
                return await self._published(auction_id)

            if self.clock() < auction.ends_at:
                raise TooEarly(auction_id, auction.ends_at)

            bids = await self.repository.list_bids(auction_id)
            winning = select_winning_bid(bids)
            result = None
            if winning is not None:
                result = FinalizationResult(
                    auction_id=auction_id,
                    winner=winning.bidder,
                    winning_amount=winning.amount,
                    bid_count=len(bids),
                    finalized_at=self.clock(),
                )

            try:
                closed = await self.repository.close_auction(
                    auction_id, result, expected_bid_count=len(bids)
                )
            except StaleSnapshot as e:
                logger.warning(f"Re-snapshotting auction {auction_id} (attempt {attempt + 1}): {e}")
                continue

            if not closed:
                return await self._published(auction_id)

            if result is None:
                logger.info(f"Auction {auction_id} closed with no bids")
            else:
                logger.info(f"Auction {auction_id} finalized: winner={result.winner[:10]}..., "
                            f"bids={result.bid_count}")
            return FinalizationOutcome(auction_id=auction_id, result=result)

        raise StaleSnapshot(f"Auction {auction_id} bid set kept changing during finalization")

    async def _published(self, auction_id: int) -> FinalizationOutcome:
        result = await self.repository.get_result(auction_id)
        return FinalizationOutcome(auction_id=auction_id, result=result)
