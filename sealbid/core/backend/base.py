"""
Auction backend interface.

The service facade talks to exactly one backend at a time, chosen by the
session's network. Both variants expose the same operations and raise the
same AuctionError subclasses.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from sealbid.core.auction.models import Auction, FinalizationOutcome, FinalizationResult


class AuctionBackend(ABC):
    """Capability interface implemented by DemoBackend and RemoteBackend."""

    name: str = "backend"

    async def initialize(self) -> None:
        """Prepare the backend after the store is loaded."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise BackendUnavailable if the backend cannot serve requests."""

    # =========================================================================
    # Mutations
    # =========================================================================

    @abstractmethod
    async def create_auction(
        self,
        item_name: str,
        description: str,
        duration_hours: float,
        minimum_bid: float,
        creator: str,
    ) -> int:
        ...

    @abstractmethod
    async def place_bid(self, auction_id: int, bidder: str, amount: float) -> str:
        ...

    @abstractmethod
    async def finalize(self, auction_id: int) -> FinalizationOutcome:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    # =========================================================================
    # Queries
    # =========================================================================

    @abstractmethod
    async def get_auction(self, auction_id: int) -> Optional[Auction]:
        ...

    @abstractmethod
    async def list_auctions(self) -> List[Auction]:
        ...

    @abstractmethod
    async def get_result(self, auction_id: int) -> Optional[FinalizationResult]:
        ...

    @abstractmethod
    async def auction_count(self) -> int:
        ...
