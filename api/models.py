"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


# ============================================================================
# Auction Models
# ============================================================================

class CreateAuctionRequest(BaseModel):
    """Request to create an auction."""
    title: str = Field(..., min_length=1, description="Auction title")
    created_by: str = Field(..., min_length=1, description="Celebrity account ID listing the item")
    starting_bid: Decimal = Field(..., description="Opening price")
    bid_increment: Decimal = Field(..., description="Minimum amount each bid must add")
    start_date: datetime
    end_date: datetime
    category: str = "Other"
    description: str = ""
    reserve_price: Optional[Decimal] = None
    buy_now_price: Optional[Decimal] = None

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Signed match jersey",
                "created_by": "celeb-42",
                "starting_bid": "1000",
                "bid_increment": "50",
                "start_date": "2025-01-01T12:00:00Z",
                "end_date": "2025-01-08T12:00:00Z",
                "category": "Sports",
                "description": "Worn in the final.",
                "reserve_price": None,
                "buy_now_price": None
            }
        }


class BidResponse(BaseModel):
    """Single accepted bid."""
    bidder_id: str
    bidder_display_name: str
    amount: Decimal
    accepted_at: datetime
    submission_id: Optional[str] = None


class AuctionSummaryResponse(BaseModel):
    """Auction as shown in listings."""
    auction_id: UUID
    title: str
    category: str
    current_high_bid: Decimal
    bid_count: int
    end_date: datetime
    is_live: bool


class AuctionListResponse(BaseModel):
    """Response for auction listing."""
    items: List[AuctionSummaryResponse]
    total_count: int


class AuctionDetailResponse(BaseModel):
    """Full auction state including its bid history in acceptance order."""
    auction_id: UUID
    title: str
    created_by: str
    category: str
    description: str
    starting_bid: Decimal
    bid_increment: Decimal
    current_high_bid: Decimal
    minimum_next_bid: Decimal
    bid_count: int
    top_bidder_id: Optional[str] = None
    start_date: datetime
    end_date: datetime
    created_at: datetime
    is_live: bool
    has_ended: bool
    reserve_price: Optional[Decimal] = None
    reserve_met: Optional[bool] = None
    buy_now_price: Optional[Decimal] = None
    bid_history: List[BidResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "auction_id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Signed match jersey",
                "created_by": "celeb-42",
                "category": "Sports",
                "description": "Worn in the final.",
                "starting_bid": "1000",
                "bid_increment": "50",
                "current_high_bid": "1050",
                "minimum_next_bid": "1100",
                "bid_count": 1,
                "top_bidder_id": "bidder-a",
                "start_date": "2025-01-01T12:00:00Z",
                "end_date": "2025-01-08T12:00:00Z",
                "created_at": "2025-01-01T11:00:00Z",
                "is_live": True,
                "has_ended": False,
                "reserve_price": None,
                "reserve_met": None,
                "buy_now_price": None,
                "bid_history": [
                    {
                        "bidder_id": "bidder-a",
                        "bidder_display_name": "Asha",
                        "amount": "1050",
                        "accepted_at": "2025-01-02T09:30:00Z",
                        "submission_id": "7f1c0b9e"
                    }
                ]
            }
        }


class BidHistoryResponse(BaseModel):
    """Read-only bid history for an auction."""
    auction_id: UUID
    bids: List[BidResponse]
    total_count: int


# ============================================================================
# Bid Models
# ============================================================================

class PlaceBidRequest(BaseModel):
    """Request to place a bid."""
    bidder_id: str = Field(..., min_length=1, description="Authorized bidder ID")
    bidder_display_name: str = Field(..., description="Name shown in the bid history")
    amount: Any = Field(..., description="Proposed bid amount, as a number or numeric string")
    submission_id: Optional[str] = Field(
        None,
        max_length=128,
        description="Client-generated idempotency key; resubmit with the same key after a timeout"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "bidder_id": "bidder-a",
                "bidder_display_name": "Asha",
                "amount": "1050",
                "submission_id": "7f1c0b9e"
            }
        }


class PlaceBidResponse(BaseModel):
    """Outcome of a bid placement attempt."""
    status: str  # "accepted" or "rejected"
    auction_id: UUID
    reason: Optional[str] = None  # RejectionReason value when rejected
    message: Optional[str] = None
    bid: Optional[BidResponse] = None
    current_high_bid: Optional[Decimal] = None
    minimum_acceptable: Optional[Decimal] = None
    bid_count: Optional[int] = None
    attempts: int
    replayed: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "status": "rejected",
                "auction_id": "123e4567-e89b-12d3-a456-426614174000",
                "reason": "BID_TOO_LOW",
                "message": "Bid must be at least 1100.",
                "bid": None,
                "current_high_bid": "1050",
                "minimum_acceptable": "1100",
                "bid_count": None,
                "attempts": 1,
                "replayed": False
            }
        }
