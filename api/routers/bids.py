"""
Bids API Endpoints.

Endpoint for placing a bid on an auction.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.dependencies import get_auction_store, get_bid_max_attempts
from api.models import PlaceBidRequest, PlaceBidResponse
from api.routers.auctions import bid_to_response, parse_auction_id
from domain.bid_validation import RejectionReason
from repositories.auction_store import AuctionStore
from services.bid_placement_service import BidPlacementResult, place_bid

router = APIRouter()

# HTTP status per rejection reason. The client must be able to tell
# "bid too low" (show minimum) from "someone else just bid" (refresh price)
# from "auction closed" (disable bidding).
_REJECTION_STATUS = {
    RejectionReason.INVALID_AMOUNT: 400,
    RejectionReason.BID_TOO_LOW: 400,
    RejectionReason.AUCTION_NOT_LIVE: 403,
    RejectionReason.AUCTION_NOT_FOUND: 404,
    RejectionReason.CONFLICT: 409,
    RejectionReason.STORE_UNAVAILABLE: 503,
}


def _result_to_response(result: BidPlacementResult) -> PlaceBidResponse:
    return PlaceBidResponse(
        status=result.status,
        auction_id=result.auction_id,
        reason=result.reason.value if result.reason is not None else None,
        message=result.message,
        bid=bid_to_response(result.bid) if result.bid is not None else None,
        current_high_bid=result.current_high_bid,
        minimum_acceptable=result.minimum_acceptable,
        bid_count=result.auction.bid_count if result.auction is not None else None,
        attempts=result.attempts,
        replayed=result.replayed,
    )


@router.post(
    "/auctions/{auction_id}/bids",
    response_model=PlaceBidResponse,
    status_code=201,
    summary="Place Bid",
    description="Place a bid. Concurrent bids are serialized by a conditional write on the auction record.",
    responses={
        400: {"model": PlaceBidResponse, "description": "INVALID_AMOUNT or BID_TOO_LOW"},
        403: {"model": PlaceBidResponse, "description": "AUCTION_NOT_LIVE"},
        404: {"model": PlaceBidResponse, "description": "AUCTION_NOT_FOUND"},
        409: {"model": PlaceBidResponse, "description": "CONFLICT (retry budget exhausted)"},
        503: {"model": PlaceBidResponse, "description": "STORE_UNAVAILABLE (outcome unknown)"},
    },
)
def place_auction_bid(
    auction_id: str,
    request: PlaceBidRequest,
    store: AuctionStore = Depends(get_auction_store),
    max_attempts: int = Depends(get_bid_max_attempts),
):
    """
    Place a bid on an auction.

    **Rules:**
    1. The auction must be live (start_date <= now <= end_date)
    2. The amount must be a positive amount in whole cents (at most 1000000000000);
       non-numeric or non-finite amounts are rejected with INVALID_AMOUNT
    3. The amount must be at least current_high_bid + bid_increment
    4. The current top bidder may raise their own bid

    **Concurrency:**
    If another bid commits between reading the price and writing, the bid is
    re-validated against the new price and retried automatically. If the retry
    budget runs out, the response is 409 CONFLICT: refresh and resubmit.

    **Idempotency:**
    Send a `submission_id`. If a request times out, resubmitting with the same
    `submission_id` returns the original bid instead of placing a second one.

    **Example request:**
    ```json
    {
      "bidder_id": "bidder-a",
      "bidder_display_name": "Asha",
      "amount": "1050",
      "submission_id": "7f1c0b9e"
    }
    ```
    """
    auction_uuid = parse_auction_id(auction_id)

    try:
        result = place_bid(
            store,
            auction_uuid,
            request.bidder_id,
            request.bidder_display_name,
            request.amount,
            submission_id=request.submission_id,
            max_attempts=max_attempts,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to place bid: {str(e)}"
        )

    response = _result_to_response(result)
    if result.accepted:
        status_code = 200 if result.replayed else 201
    else:
        if result.reason is None:
            raise HTTPException(status_code=500, detail="Rejected bid carries no reason")
        status_code = _REJECTION_STATUS[result.reason]

    return JSONResponse(status_code=status_code, content=response.model_dump(mode="json"))
