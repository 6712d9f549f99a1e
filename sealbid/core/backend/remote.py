"""
Remote backend: auctions executed by a remote execution environment.

The transport is an external collaborator implementing
RemoteExecutionClient. Records cross the boundary as plain dicts shaped
like Auction.to_dict() / FinalizationResult.to_dict().
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from sealbid.core.auction.models import Auction, FinalizationOutcome, FinalizationResult
from sealbid.core.backend.base import AuctionBackend
from sealbid.core.errors import AuctionError, BackendUnavailable
from sealbid.utils.logger import get_logger
from sealbid.utils.validation import parse_auction_draft, parse_bid_draft

logger = get_logger("backend.remote")


@runtime_checkable
class RemoteExecutionClient(Protocol):
    """Transport to the remote auction contract."""

    async def ping(self) -> None: ...

    async def submit_auction_create(
        self,
        item_name: str,
        description: str,
        duration_hours: float,
        minimum_bid: float,
        creator: str,
    ) -> int: ...

    async def submit_bid(self, auction_id: int, bidder: str, amount: float) -> str: ...

    async def submit_finalize(self, auction_id: int) -> Optional[Dict[str, Any]]: ...

    async def query_auction(self, auction_id: int) -> Optional[Dict[str, Any]]: ...

    async def query_auctions(self) -> List[Dict[str, Any]]: ...

    async def query_result(self, auction_id: int) -> Optional[Dict[str, Any]]: ...


class RemoteBackend(AuctionBackend):
    """
    Delegates every operation to a RemoteExecutionClient.

    With no client configured the auction contract is considered not
    deployed and every operation raises BackendUnavailable.
    """

    name = "remote"

    def __init__(self, client: Optional[RemoteExecutionClient] = None, timeout: float = 10.0):
        self.client = client
        self.timeout = timeout

    async def _call(self, operation: str, make_call) -> Any:
        if self.client is None:
            raise BackendUnavailable("Auction contract is not deployed on the remote network")

        try:
            return await asyncio.wait_for(make_call(self.client), timeout=self.timeout)
        except AuctionError:
            raise
        except Exception as e:
            # Whatever the client raised, the remote cannot serve this call
            reason = str(e) or type(e).__name__
            logger.warning(f"Remote {operation} failed: {reason}")
            raise BackendUnavailable(f"Remote network unreachable during {operation}: {reason}") from e

    async def ping(self) -> None:
        await self._call("ping", lambda c: c.ping())

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_auction(self, item_name, description, duration_hours, minimum_bid, creator) -> int:
        draft = parse_auction_draft(
            item_name=item_name,
            description=description,
            duration_hours=duration_hours,
            minimum_bid=minimum_bid,
            creator=creator,
        )
        auction_id = await self._call("create", lambda c: c.submit_auction_create(
            draft.item_name, draft.description, draft.duration_hours, draft.minimum_bid, draft.creator,
        ))
        logger.info(f"Remote auction {auction_id} created")
        return int(auction_id)

    async def place_bid(self, auction_id: int, bidder: str, amount: float) -> str:
        draft = parse_bid_draft(bidder, amount)
        ack = await self._call("bid", lambda c: c.submit_bid(auction_id, draft.bidder, draft.amount))
        return str(ack)

    async def finalize(self, auction_id: int) -> FinalizationOutcome:
        data = await self._call("finalize", lambda c: c.submit_finalize(auction_id))
        result = FinalizationResult.from_dict(data) if data else None
        return FinalizationOutcome(auction_id=auction_id, result=result)

    async def clear(self) -> None:
        raise BackendUnavailable("Remote auction data cannot be cleared")

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_auction(self, auction_id: int) -> Optional[Auction]:
        data = await self._call("query", lambda c: c.query_auction(auction_id))
        return Auction.from_dict(data) if data else None

    async def list_auctions(self) -> List[Auction]:
        rows = await self._call("query", lambda c: c.query_auctions())
        return [Auction.from_dict(row) for row in rows]

    async def get_result(self, auction_id: int) -> Optional[FinalizationResult]:
        data = await self._call("query", lambda c: c.query_result(auction_id))
        return FinalizationResult.from_dict(data) if data else None

    async def auction_count(self) -> int:
        return len(await self.list_auctions())
