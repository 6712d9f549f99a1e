"""
Unit tests for winner selection and finalization.
"""

import asyncio

import pytest

from sealbid.core.auction import Bid, FinalizationOutcome, select_winning_bid
from sealbid.core.errors import NotFound, StaleSnapshot, TooEarly

CREATOR = "0x" + "11" * 20
ALICE = "0x" + "aa" * 20
BOB = "0x" + "bb" * 20
CAROL = "0x" + "cc" * 20


def make_bid(bidder, amount, placed_at=0, sequence=0):
    return Bid(id=f"1_{bidder}_{placed_at}", auction_id=1, bidder=bidder,
               amount=amount, placed_at=placed_at, sequence=sequence)


def create_vase(repository):
    return asyncio.run(repository.create_auction("Vase", "Ming vase", 1, 100, CREATOR))


class TestSelectWinningBid:
    """Tests for the pure winner rule."""

    def test_no_bids(self):
        assert select_winning_bid([]) is None

    def test_highest_amount_wins(self):
        bids = [make_bid(ALICE, 120), make_bid(BOB, 150, 1), make_bid(CAROL, 130, 2)]
        assert select_winning_bid(bids).bidder == BOB

    def test_tie_goes_to_earliest(self):
        bids = [make_bid(CAROL, 150, placed_at=20), make_bid(BOB, 150, placed_at=10)]
        assert select_winning_bid(bids).bidder == BOB

    def test_same_millisecond_tie_goes_to_lowest_sequence(self):
        bids = [make_bid(CAROL, 150, 10, sequence=2), make_bid(BOB, 150, 10, sequence=1)]
        assert select_winning_bid(bids).bidder == BOB

    def test_independent_of_input_order(self):
        bids = [make_bid(ALICE, 150, 5, 0), make_bid(BOB, 150, 5, 1), make_bid(CAROL, 90, 1, 2)]
        assert select_winning_bid(bids).bidder == select_winning_bid(bids[::-1]).bidder == ALICE


class TestFinalize:
    """Tests for the resolution engine."""

    def test_finalize_picks_winner(self, repository, engine, clock):
        auction_id = create_vase(repository)
        asyncio.run(repository.record_bid(auction_id, BOB, 120))
        clock.advance(1)
        asyncio.run(repository.record_bid(auction_id, CAROL, 150))
        clock.advance_hours(1)

        outcome = asyncio.run(engine.finalize(auction_id))

        assert isinstance(outcome, FinalizationOutcome)
        assert outcome.has_winner
        assert outcome.winner == CAROL
        assert outcome.result.winning_amount == 150
        assert outcome.result.bid_count == 2
        assert outcome.result.finalized_at == clock()
        assert not asyncio.run(repository.get_auction(auction_id)).active

    def test_finalize_without_bids(self, repository, engine, clock):
        auction_id = create_vase(repository)
        clock.advance_hours(2)

        outcome = asyncio.run(engine.finalize(auction_id))

        assert not outcome.has_winner
        assert outcome.winner is None
        assert not asyncio.run(repository.get_auction(auction_id)).active
        assert asyncio.run(repository.get_result(auction_id)) is None

    def test_too_early(self, repository, engine, clock):
        auction_id = create_vase(repository)
        clock.advance_hours(0.5)
        with pytest.raises(TooEarly):
            asyncio.run(engine.finalize(auction_id))
        assert asyncio.run(repository.get_auction(auction_id)).active

    def test_unknown_auction(self, engine):
        with pytest.raises(NotFound):
            asyncio.run(engine.finalize(12345))

    def test_idempotent(self, repository, engine, clock):
        """Second finalize returns the stored result, never a recomputation."""
        auction_id = create_vase(repository)
        asyncio.run(repository.record_bid(auction_id, BOB, 120))
        clock.advance_hours(1)
        first = asyncio.run(engine.finalize(auction_id))

        clock.advance(5000)
        second = asyncio.run(engine.finalize(auction_id))

        assert second == first
        assert second.result.finalized_at == first.result.finalized_at

    def test_seeded_closed_auction_has_no_winner(self, repository, engine):
        asyncio.run(repository.seed_demo_auctions())
        outcome = asyncio.run(engine.finalize(3))
        assert not outcome.has_winner

    def test_concurrent_finalize_single_result(self, repository, engine, clock):
        auction_id = create_vase(repository)
        asyncio.run(repository.record_bid(auction_id, BOB, 120))
        clock.advance_hours(1)

        async def scenario():
            return await asyncio.gather(*(engine.finalize(auction_id) for _ in range(5)))

        outcomes = asyncio.run(scenario())
        assert all(o == outcomes[0] for o in outcomes)
        assert outcomes[0].winner == BOB

    def test_stale_snapshot_is_recomputed(self, repository, engine, clock, monkeypatch):
        """A bid landing between snapshot and close is included in the result."""
        auction_id = create_vase(repository)
        asyncio.run(repository.record_bid(auction_id, BOB, 120))
        clock.advance_hours(1)

        original_list_bids = repository.list_bids
        calls = []

        async def list_bids_with_race(aid):
            bids = await original_list_bids(aid)
            if not calls:
                # Inject a late bid directly, bypassing the deadline check
                late = make_bid(CAROL, 500, placed_at=clock() - 1, sequence=1)
                await repository.store.set(f"bid_{aid}_late", late.to_dict())
            calls.append(aid)
            return bids

        monkeypatch.setattr(repository, "list_bids", list_bids_with_race)

        outcome = asyncio.run(engine.finalize(auction_id))

        assert len(calls) == 2
        assert outcome.winner == CAROL
        assert outcome.result.bid_count == 2

    def test_gives_up_when_bids_keep_changing(self, repository, engine, clock, monkeypatch):
        auction_id = create_vase(repository)
        clock.advance_hours(1)

        async def always_stale(*args, **kwargs):
            raise StaleSnapshot("bids changed")

        monkeypatch.setattr(repository, "close_auction", always_stale)

        with pytest.raises(StaleSnapshot):
            asyncio.run(engine.finalize(auction_id))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
