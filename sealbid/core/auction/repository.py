"""
Auction Repository - CRUD over auction, bid and result records.

Built on the PersistentStore. Store reads are served from memory and do
not yield to the event loop, so a precondition check followed by a write
sees no interleaved mutation until the write's durable phase.
"""

from typing import List, Optional

from sealbid.core.auction.models import (
    AUCTION_PREFIX,
    BID_PREFIX,
    MS_PER_HOUR,
    RESULT_PREFIX,
    Auction,
    Bid,
    Clock,
    FinalizationResult,
    auction_key,
    bid_prefix,
    result_key,
    system_clock,
)
from sealbid.core.errors import (
    AuctionClosed,
    BidTooLow,
    NotFound,
    StaleSnapshot,
    ValidationError,
)
from sealbid.core.storage import PersistentStore
from sealbid.utils.logger import get_logger
from sealbid.utils.validation import parse_auction_draft, parse_bid_draft

logger = get_logger("repository")


# =============================================================================
# Demo Data
# =============================================================================

# (id, item, description, started hours ago, ends in hours, min bid, creator, active)
DEMO_AUCTIONS = [
    (1, "Rare Vintage Painting",
     "Original painting from the 1950s in excellent condition",
     1.0, 1.0, 1000, "0x1234567890123456789012345678901234567890", True),
    (2, "Collectible Rolex Watch",
     "Vintage Rolex Submariner from 1970",
     2.0, 0.5, 5000, "0xabcdefabcdefabcdefabcdefabcdefabcdefabcdef", True),
    (3, "First Edition Book",
     'First edition of "War and Peace" by L.N. Tolstoy',
     3.0, -0.5, 2000, "0x9999999999999999999999999999999999999999", False),
]


class AuctionRepository:
    """
    Stores auctions, sealed bids and finalization results.

    Bids get one key each, so concurrent placements never overwrite
    each other.
    """

    def __init__(self, store: PersistentStore, clock: Clock = system_clock):
        self.store = store
        self.clock = clock
        self._last_auction_id = 0

    # =========================================================================
    # Auctions
    # =========================================================================

    async def create_auction(
        self,
        item_name: str,
        description: str,
        duration_hours: float,
        minimum_bid: float,
        creator: str,
    ) -> int:
        """
        Create a new active auction.

        Returns:
            The new auction id

        Raises:
            ValidationError: on empty text or non-positive duration/minimum bid
        """
        draft = parse_auction_draft(
            item_name=item_name,
            description=description,
            duration_hours=duration_hours,
            minimum_bid=minimum_bid,
            creator=creator,
        )

        now = self.clock()
        ends_at = now + int(round(draft.duration_hours * MS_PER_HOUR))
        if ends_at <= now:
            raise ValidationError("duration_hours: too short to produce an end time")

        auction = Auction(
            id=self._next_auction_id(now),
            item_name=draft.item_name,
            description=draft.description,
            created_at=now,
            ends_at=ends_at,
            minimum_bid=draft.minimum_bid,
            creator=draft.creator,
            active=True,
        )
        await self.store.set(auction_key(auction.id), auction.to_dict())

        logger.info(f"Auction {auction.id} created by {auction.creator[:10]}..., "
                    f"ends at {auction.ends_at}")
        return auction.id

    def _next_auction_id(self, now: int) -> int:
        candidate = max(now, self._last_auction_id + 1)
        while auction_key(candidate) in self.store:
            candidate += 1
        self._last_auction_id = candidate
        return candidate

    async def get_auction(self, auction_id: int) -> Optional[Auction]:
        data = await self.store.get(auction_key(auction_id))
        return Auction.from_dict(data) if data is not None else None

    async def list_auctions(self) -> List[Auction]:
        """All auctions, unordered. Callers filter by `active`."""
        return [Auction.from_dict(d) for d in await self.store.scan_prefix(AUCTION_PREFIX)]

    async def count_auctions(self) -> int:
        return len(self.store.keys(AUCTION_PREFIX))

    # =========================================================================
    # Bids
    # =========================================================================

    async def record_bid(self, auction_id: int, bidder: str, amount: float) -> str:
        """
        Record a sealed bid.

        Preconditions, checked in order:
            auction exists (NotFound), is active (AuctionClosed), deadline not
            reached (AuctionClosed), amount >= minimum bid (BidTooLow).

        Returns:
            The bid id
        """
        draft = parse_bid_draft(bidder, amount)

        auction = await self.get_auction(auction_id)
        if auction is None:
            raise NotFound(auction_id)
        if not auction.active:
            raise AuctionClosed(f"Auction {auction_id} is not active")

        now = self.clock()
        if now >= auction.ends_at:
            raise AuctionClosed(f"Auction {auction_id} ended at {auction.ends_at}")
        if draft.amount < auction.minimum_bid:
            raise BidTooLow(draft.amount, auction.minimum_bid)

        existing = self.store.keys(bid_prefix(auction_id))
        bid_id = f"{auction_id}_{draft.bidder}_{now}"
        key = BID_PREFIX + bid_id
        suffix = 1
        while key in self.store:
            key = f"{BID_PREFIX}{bid_id}_{suffix}"
            suffix += 1
        bid_id = key[len(BID_PREFIX):]

        bid = Bid(
            id=bid_id,
            auction_id=auction_id,
            bidder=draft.bidder,
            amount=draft.amount,
            placed_at=now,
            sequence=len(existing),
        )
        await self.store.set(key, bid.to_dict())

        logger.debug(f"Sealed bid {bid_id} recorded for auction {auction_id}")
        return bid_id

    async def list_bids(self, auction_id: int) -> List[Bid]:
        """Bids for one auction, oldest first. Internal to resolution."""
        bids = [Bid.from_dict(d) for d in await self.store.scan_prefix(bid_prefix(auction_id))]
        bids.sort(key=lambda b: (b.placed_at, b.sequence))
        return bids

    def bid_count(self, auction_id: int) -> int:
        return len(self.store.keys(bid_prefix(auction_id)))

    # =========================================================================
    # Results
    # =========================================================================

    async def get_result(self, auction_id: int) -> Optional[FinalizationResult]:
        data = await self.store.get(result_key(auction_id))
        return FinalizationResult.from_dict(data) if data is not None else None

    async def close_auction(
        self,
        auction_id: int,
        result: Optional[FinalizationResult],
        expected_bid_count: int,
    ) -> bool:
        """
        Compare-and-set close: deactivate and write the result only if the
        auction is still active and its bid set matches the snapshot.

        Returns:
            False if the auction was already closed

        Raises:
            NotFound: unknown auction
            StaleSnapshot: bids were added since the snapshot was taken
        """
        auction = await self.get_auction(auction_id)
        if auction is None:
            raise NotFound(auction_id)
        if not auction.active:
            return False
        if self.bid_count(auction_id) != expected_bid_count:
            raise StaleSnapshot(
                f"Auction {auction_id} has {self.bid_count(auction_id)} bids, "
                f"snapshot had {expected_bid_count}"
            )

        auction.active = False
        items = [(auction_key(auction_id), auction.to_dict())]
        if result is not None:
            items.append((result_key(auction_id), result.to_dict()))
        await self.store.set_many(items)
        return True

    # =========================================================================
    # Maintenance
    # =========================================================================

    async def seed_demo_auctions(self) -> int:
        """
        Create the sample auctions if the store holds none.

        Returns:
            Number of auctions created
        """
        if await self.count_auctions() > 0:
            return 0

        now = self.clock()
        items = []
        for auction_id, item, description, started, ends_in, min_bid, creator, active in DEMO_AUCTIONS:
            auction = Auction(
                id=auction_id,
                item_name=item,
                description=description,
                created_at=now - int(started * MS_PER_HOUR),
                ends_at=now + int(ends_in * MS_PER_HOUR),
                minimum_bid=min_bid,
                creator=creator,
                active=active,
            )
            items.append((auction_key(auction_id), auction.to_dict()))
        await self.store.set_many(items)

        logger.info(f"Seeded {len(items)} demo auctions")
        return len(items)

    async def clear(self) -> None:
        """Remove all auction, bid and result records."""
        for prefix in (AUCTION_PREFIX, BID_PREFIX, RESULT_PREFIX):
            await self.store.clear(prefix)
        self._last_auction_id = 0
        logger.info("Auction data cleared")
