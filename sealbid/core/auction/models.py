"""
Auction records and their storage layout.

Records are plain dataclasses serialized to JSON dicts. Store keys:
    auction_<id>                          -> Auction
    bid_<auctionId>_<bidder>_<placedAt>   -> Bid (suffix _<n> on collision)
    result_<auctionId>                    -> FinalizationResult
"""

import time
from dataclasses import asdict, dataclass, field
from typing import Callable, Optional

# Millisecond wall clock, injectable for tests
Clock = Callable[[], int]

MS_PER_HOUR = 60 * 60 * 1000

AUCTION_PREFIX = "auction_"
BID_PREFIX = "bid_"
RESULT_PREFIX = "result_"


def system_clock() -> int:
    """Current time in integer milliseconds since the epoch."""
    return int(time.time() * 1000)


class ManualClock:
    """Clock that only moves when told to. Used by simulations and tests."""

    def __init__(self, start: int = 0):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now

    def advance_hours(self, hours: float) -> int:
        return self.advance(int(hours * MS_PER_HOUR))


def auction_key(auction_id: int) -> str:
    return f"{AUCTION_PREFIX}{auction_id}"


def bid_prefix(auction_id: int) -> str:
    return f"{BID_PREFIX}{auction_id}_"


def result_key(auction_id: int) -> str:
    return f"{RESULT_PREFIX}{auction_id}"


# =============================================================================
# Records
# =============================================================================


@dataclass
class Auction:
    """
    A timed auction.

    Attributes:
        id: Unique identifier (time-derived, collision-free)
        item_name: What is being sold
        description: Free text
        created_at: Start time (ms)
        ends_at: End time (ms), always > created_at
        minimum_bid: Smallest acceptable amount, > 0
        creator: Address that created the auction
        active: True until finalized
    """
    id: int
    item_name: str
    description: str
    created_at: int
    ends_at: int
    minimum_bid: float
    creator: str
    active: bool = True

    def is_open(self, now: int) -> bool:
        """Whether bids are accepted at time `now`."""
        return self.active and now < self.ends_at

    def has_ended(self, now: int) -> bool:
        return now >= self.ends_at

    def time_remaining(self, now: int) -> int:
        """Milliseconds until the deadline (0 once passed)."""
        return max(0, self.ends_at - now)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Auction":
        return cls(
            id=data["id"],
            item_name=data["item_name"],
            description=data["description"],
            created_at=data["created_at"],
            ends_at=data["ends_at"],
            minimum_bid=data["minimum_bid"],
            creator=data["creator"],
            active=data.get("active", True),
        )


@dataclass(frozen=True)
class Bid:
    """
    A sealed bid. Immutable once recorded.

    The amount is left out of repr so bids never leak it through logs.
    """
    id: str
    auction_id: int
    bidder: str
    amount: float = field(repr=False)
    placed_at: int = 0
    sequence: int = 0
    sealed: bool = True

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Bid":
        return cls(
            id=data["id"],
            auction_id=data["auction_id"],
            bidder=data["bidder"],
            amount=data["amount"],
            placed_at=data["placed_at"],
            sequence=data.get("sequence", 0),
            sealed=data.get("sealed", True),
        )


@dataclass(frozen=True)
class FinalizationResult:
    """The published outcome of an auction that received bids."""
    auction_id: int
    winner: str
    winning_amount: float
    bid_count: int
    finalized_at: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "FinalizationResult":
        return cls(
            auction_id=data["auction_id"],
            winner=data["winner"],
            winning_amount=data["winning_amount"],
            bid_count=data["bid_count"],
            finalized_at=data.get("finalized_at", 0),
        )


@dataclass(frozen=True)
class FinalizationOutcome:
    """What finalize() returns: a result, or no winner for a bid-less auction."""
    auction_id: int
    result: Optional[FinalizationResult] = None

    @property
    def has_winner(self) -> bool:
        return self.result is not None

    @property
    def winner(self) -> Optional[str]:
        return self.result.winner if self.result else None


@dataclass(frozen=True)
class Winner:
    """Public winner announcement."""
    address: str
    winning_amount: float

    @classmethod
    def from_result(cls, result: FinalizationResult) -> "Winner":
        return cls(address=result.winner, winning_amount=result.winning_amount)
