"""
Demo backend: auctions held in the local persistent store.
"""

from typing import List, Optional

from sealbid.core.auction.models import Auction, FinalizationOutcome, FinalizationResult
from sealbid.core.auction.repository import AuctionRepository
from sealbid.core.auction.resolution import ResolutionEngine
from sealbid.core.backend.base import AuctionBackend
from sealbid.utils.logger import get_logger

logger = get_logger("backend.demo")


class DemoBackend(AuctionBackend):
    """Repository plus resolution engine over the local store."""

    name = "demo"

    def __init__(
        self,
        repository: AuctionRepository,
        engine: Optional[ResolutionEngine] = None,
        seed_demo_auctions: bool = True,
    ):
        self.repository = repository
        self.engine = engine or ResolutionEngine(repository)
        self.seed_demo_auctions = seed_demo_auctions

    async def initialize(self) -> None:
        if self.seed_demo_auctions:
            await self.repository.seed_demo_auctions()

    async def ping(self) -> None:
        return None

    async def create_auction(self, item_name, description, duration_hours, minimum_bid, creator) -> int:
        return await self.repository.create_auction(
            item_name=item_name,
            description=description,
            duration_hours=duration_hours,
            minimum_bid=minimum_bid,
            creator=creator,
        )

    async def place_bid(self, auction_id: int, bidder: str, amount: float) -> str:
        return await self.repository.record_bid(auction_id, bidder, amount)

    async def finalize(self, auction_id: int) -> FinalizationOutcome:
        return await self.engine.finalize(auction_id)

    async def clear(self) -> None:
        await self.repository.clear()

    async def get_auction(self, auction_id: int) -> Optional[Auction]:
        return await self.repository.get_auction(auction_id)

    async def list_auctions(self) -> List[Auction]:
        return await self.repository.list_auctions()

    async def get_result(self, auction_id: int) -> Optional[FinalizationResult]:
        return await self.repository.get_result(auction_id)

    async def auction_count(self) -> int:
        return await self.repository.count_auctions()
