"""
Auction Service - single entry point for UI and CLI callers.

Composes the session (who is acting) with the backend selected by the
session's network (where auctions live). Mutations require a connected
identity; queries do not. Bid amounts and bid lists are never returned.
"""

from typing import Dict, List, Optional

from sealbid.core.auction.models import (
    Auction,
    Clock,
    FinalizationOutcome,
    Winner,
    system_clock,
)
from sealbid.core.backend import AuctionBackend
from sealbid.core.errors import (
    AuctionClosed,
    BackendUnavailable,
    NotAuthenticated,
    NotFound,
)
from sealbid.core.session import Network, SessionManager
from sealbid.utils.logger import get_logger

logger = get_logger("service")

FALLBACK_SUGGESTION = "switch to the local network or demo mode"


class AuctionService:
    """
    Facade over session and backends.

    Args:
        session: SessionManager resolving the acting address
        backends: Backend per network (local -> demo, remote -> remote)
        clock: Millisecond clock for the bidding-window check
    """

    def __init__(
        self,
        session: SessionManager,
        backends: Dict[Network, AuctionBackend],
        clock: Clock = system_clock,
    ):
        missing = [n.value for n in Network if n not in backends]
        if missing:
            raise ValueError(f"No backend configured for network(s): {', '.join(missing)}")
        self.session = session
        self.backends = backends
        self.clock = clock

    @property
    def backend(self) -> AuctionBackend:
        """Backend for the session's current network."""
        return self.backends[self.session.network]

    def _require_address(self) -> str:
        address = self.session.current_address()
        if address is None:
            raise NotAuthenticated()
        return address

    def _enrich(self, error: BackendUnavailable) -> BackendUnavailable:
        if error.suggestion is None:
            error.suggestion = FALLBACK_SUGGESTION
        return error

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_auction(
        self,
        item_name: str,
        description: str,
        duration_hours: float,
        minimum_bid: float,
    ) -> int:
        """Create an auction owned by the connected address."""
        creator = self._require_address()
        try:
            return await self.backend.create_auction(
                item_name=item_name,
                description=description,
                duration_hours=duration_hours,
                minimum_bid=minimum_bid,
                creator=creator,
            )
        except BackendUnavailable as e:
            raise self._enrich(e)

    async def place_bid(self, auction_id: int, amount: float) -> str:
        """
        Place a sealed bid as the connected address.

        Returns:
            The bid id (never the amount)
        """
        bidder = self._require_address()
        try:
            auction = await self.backend.get_auction(auction_id)
            if auction is None:
                raise NotFound(auction_id)
            if not auction.is_open(self.clock()):
                raise AuctionClosed(f"Auction {auction_id} is no longer accepting bids")
            bid_id = await self.backend.place_bid(auction_id, bidder, amount)
        except BackendUnavailable as e:
            raise self._enrich(e)

        logger.info(f"Bid placed on auction {auction_id} by {bidder[:10]}...")
        return bid_id

    async def finalize(self, auction_id: int) -> FinalizationOutcome:
        """Close an auction after its deadline and publish the winner."""
        self._require_address()
        try:
            return await self.backend.finalize(auction_id)
        except BackendUnavailable as e:
            raise self._enrich(e)

    async def clear_demo_data(self) -> None:
        """Wipe local auction data. The remote backend is never touched."""
        await self.backends[Network.LOCAL].clear()

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_auction(self, auction_id: int) -> Optional[Auction]:
        try:
            return await self.backend.get_auction(auction_id)
        except BackendUnavailable as e:
            raise self._enrich(e)

    async def list_auctions(self, active_only: bool = False) -> List[Auction]:
        """Auctions ordered by creation time, newest first."""
        try:
            auctions = await self.backend.list_auctions()
        except BackendUnavailable as e:
            raise self._enrich(e)
        if active_only:
            auctions = [a for a in auctions if a.active]
        auctions.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return auctions

    async def auction_count(self) -> int:
        try:
            return await self.backend.auction_count()
        except BackendUnavailable as e:
            raise self._enrich(e)

    async def get_winner(self, auction_id: int) -> Optional[Winner]:
        """
        Winner announcement.

        Returns:
            None while the auction is running or if it closed without bids

        Raises:
            NotFound: unknown auction
        """
        try:
            auction = await self.backend.get_auction(auction_id)
            if auction is None:
                raise NotFound(auction_id)
            if auction.active:
                return None
            result = await self.backend.get_result(auction_id)
        except BackendUnavailable as e:
            raise self._enrich(e)
        return Winner.from_result(result) if result is not None else None

    async def am_i_winner(self, auction_id: int) -> bool:
        """Whether the connected address won. False when not connected."""
        address = self.session.current_address()
        if address is None:
            return False
        winner = await self.get_winner(auction_id)
        return winner is not None and winner.address.lower() == address.lower()
