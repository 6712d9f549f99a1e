"""
Input Validation - shape and range checks for caller-supplied values.

Inputs are validated with pydantic models in strict mode (no silent
string-to-number coercion). Any pydantic failure is re-raised as the
engine's ValidationError with a readable summary.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from sealbid.core.errors import ValidationError

# =============================================================================
# Constants
# =============================================================================

MAX_ITEM_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 4096
MAX_ADDRESS_LENGTH = 256
MAX_DURATION_HOURS = 24 * 365


# =============================================================================
# Models
# =============================================================================


class AuctionDraft(BaseModel):
    """Validated parameters for a new auction."""

    model_config = ConfigDict(strict=True, str_strip_whitespace=True, frozen=True)

    item_name: str = Field(min_length=1, max_length=MAX_ITEM_NAME_LENGTH)
    description: str = Field(min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    duration_hours: float = Field(gt=0, le=MAX_DURATION_HOURS, allow_inf_nan=False)
    minimum_bid: float = Field(gt=0, allow_inf_nan=False)
    creator: str = Field(min_length=1, max_length=MAX_ADDRESS_LENGTH)


class BidDraft(BaseModel):
    """Validated parameters for a bid. Range checks against the auction happen later."""

    model_config = ConfigDict(strict=True, str_strip_whitespace=True, frozen=True)

    bidder: str = Field(min_length=1, max_length=MAX_ADDRESS_LENGTH)
    amount: float = Field(allow_inf_nan=False)


# =============================================================================
# Helpers
# =============================================================================


def summarize_errors(error: PydanticValidationError) -> str:
    """Flatten pydantic errors into 'field: message; ...'."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "input"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_auction_draft(**fields: Any) -> AuctionDraft:
    """
    Validate auction creation input.

    Raises:
        ValidationError: empty text, non-positive duration or minimum bid,
            or values of the wrong type
    """
    try:
        return AuctionDraft(**fields)
    except PydanticValidationError as e:
        raise ValidationError(summarize_errors(e)) from e


def parse_bid_draft(bidder: Any, amount: Any) -> BidDraft:
    """
    Validate bid input shape.

    Raises:
        ValidationError: missing bidder or non-numeric amount
    """
    try:
        return BidDraft(bidder=bidder, amount=amount)
    except PydanticValidationError as e:
        raise ValidationError(summarize_errors(e)) from e
