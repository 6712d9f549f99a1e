"""
Unit tests for input validation models.
"""

import pytest

from sealbid.core.errors import ValidationError
from sealbid.utils.validation import (
    AuctionDraft,
    BidDraft,
    parse_auction_draft,
    parse_bid_draft,
)

VALID = dict(
    item_name="Vase",
    description="Ming dynasty vase",
    duration_hours=1.5,
    minimum_bid=100.0,
    creator="0x" + "11" * 20,
)


class TestAuctionDraft:
    """Tests for auction creation input."""

    def test_valid_draft(self):
        draft = parse_auction_draft(**VALID)
        assert isinstance(draft, AuctionDraft)
        assert draft.item_name == "Vase"
        assert draft.duration_hours == 1.5

    def test_whitespace_is_stripped(self):
        draft = parse_auction_draft(**{**VALID, "item_name": "  Vase  "})
        assert draft.item_name == "Vase"

    def test_ints_accepted_for_numbers(self):
        draft = parse_auction_draft(**{**VALID, "duration_hours": 2, "minimum_bid": 100})
        assert draft.duration_hours == 2.0
        assert draft.minimum_bid == 100.0

    @pytest.mark.parametrize("field,value", [
        ("item_name", ""),
        ("item_name", "   "),
        ("description", ""),
        ("creator", ""),
        ("duration_hours", 0),
        ("duration_hours", -1),
        ("duration_hours", float("inf")),
        ("minimum_bid", 0),
        ("minimum_bid", -5),
        ("minimum_bid", float("nan")),
    ])
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError) as exc:
            parse_auction_draft(**{**VALID, field: value})
        assert field in str(exc.value)

    def test_numeric_strings_rejected(self):
        """No silent string-to-number coercion."""
        with pytest.raises(ValidationError):
            parse_auction_draft(**{**VALID, "minimum_bid": "100"})

    def test_draft_is_frozen(self):
        draft = parse_auction_draft(**VALID)
        with pytest.raises(Exception):
            draft.item_name = "Other"


class TestBidDraft:
    """Tests for bid input."""

    def test_valid_bid(self):
        draft = parse_bid_draft("0xabc", 150)
        assert isinstance(draft, BidDraft)
        assert draft.amount == 150.0

    def test_amount_must_be_numeric(self):
        with pytest.raises(ValidationError):
            parse_bid_draft("0xabc", "150")

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError):
            parse_bid_draft("0xabc", True)

    def test_empty_bidder_rejected(self):
        with pytest.raises(ValidationError):
            parse_bid_draft("", 150)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
