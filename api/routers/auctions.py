"""
Auctions API Endpoints.

Endpoints for creating auctions and reading auction state and bid history.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_auction_store
from api.models import (
    AuctionDetailResponse,
    AuctionListResponse,
    AuctionSummaryResponse,
    BidHistoryResponse,
    BidResponse,
    CreateAuctionRequest,
)
from domain.auction import Auction, Bid
from domain.time import parse_utc_datetime, utc_now
from repositories.auction_store import AuctionStore, StoreUnavailableError
from services.auction_service import (
    AuctionDraft,
    auction_status,
    create_auction,
    get_auction,
    get_bid_history,
    list_auctions,
)

router = APIRouter()


def parse_auction_id(auction_id: str) -> UUID:
    try:
        return UUID(auction_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid auction ID")


def bid_to_response(bid: Bid) -> BidResponse:
    return BidResponse(
        bidder_id=bid.bidder_id,
        bidder_display_name=bid.bidder_display_name,
        amount=bid.amount,
        accepted_at=bid.accepted_at,
        submission_id=bid.submission_id,
    )


def _auction_to_detail(auction: Auction, now: datetime) -> AuctionDetailResponse:
    status = auction_status(auction, now)
    return AuctionDetailResponse(
        auction_id=auction.auction_id,
        title=auction.title,
        created_by=auction.created_by,
        category=auction.category,
        description=auction.description,
        starting_bid=auction.starting_bid,
        bid_increment=auction.bid_increment,
        current_high_bid=auction.current_high_bid,
        minimum_next_bid=status.minimum_next_bid,
        bid_count=auction.bid_count,
        top_bidder_id=auction.top_bidder_id,
        start_date=auction.start_date,
        end_date=auction.end_date,
        created_at=auction.created_at,
        is_live=status.is_live,
        has_ended=status.has_ended,
        reserve_price=auction.reserve_price,
        reserve_met=auction.reserve_met,
        buy_now_price=auction.buy_now_price,
        bid_history=[bid_to_response(bid) for bid in auction.bid_history],
    )


@router.post(
    "/auctions",
    response_model=AuctionDetailResponse,
    status_code=201,
    summary="Create Auction",
    description="Create an auction with a starting bid, bid increment and bidding window."
)
def create_new_auction(
    request: CreateAuctionRequest,
    store: AuctionStore = Depends(get_auction_store),
):
    """
    Create a new auction.

    The caller is assumed to be an authorized celebrity account; role checks
    happen before this endpoint is reached.

    Naive timestamps are interpreted as UTC.
    """
    draft = AuctionDraft(
        title=request.title,
        created_by=request.created_by,
        starting_bid=request.starting_bid,
        bid_increment=request.bid_increment,
        start_date=parse_utc_datetime(request.start_date),
        end_date=parse_utc_datetime(request.end_date),
        category=request.category,
        description=request.description,
        reserve_price=request.reserve_price,
        buy_now_price=request.buy_now_price,
    )

    try:
        auction = create_auction(store, draft)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create auction: {str(e)}"
        )

    return _auction_to_detail(auction, utc_now())


@router.get(
    "/auctions",
    response_model=AuctionListResponse,
    summary="List Auctions",
    description="List auctions, newest first."
)
def list_all_auctions(
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of auctions to return"),
    store: AuctionStore = Depends(get_auction_store),
):
    try:
        auctions = list_auctions(store, limit=limit)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list auctions: {str(e)}"
        )

    now = utc_now()
    items = [
        AuctionSummaryResponse(
            auction_id=a.auction_id,
            title=a.title,
            category=a.category,
            current_high_bid=a.current_high_bid,
            bid_count=a.bid_count,
            end_date=a.end_date,
            is_live=auction_status(a, now).is_live,
        )
        for a in auctions
    ]
    return AuctionListResponse(items=items, total_count=len(items))


@router.get(
    "/auctions/{auction_id}",
    response_model=AuctionDetailResponse,
    summary="Get Auction",
    description="Fetch a single auction with its full bid history."
)
def get_auction_detail(auction_id: str, store: AuctionStore = Depends(get_auction_store)):
    auction_uuid = parse_auction_id(auction_id)

    try:
        auction = get_auction(store, auction_uuid)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch auction: {str(e)}"
        )

    if auction is None:
        raise HTTPException(status_code=404, detail=f"Auction not found: {auction_id}")

    return _auction_to_detail(auction, utc_now())


@router.get(
    "/auctions/{auction_id}/bids",
    response_model=BidHistoryResponse,
    summary="Get Bid History",
    description="Bid history in acceptance order. Entries are never modified or reordered."
)
def get_auction_bids(auction_id: str, store: AuctionStore = Depends(get_auction_store)):
    auction_uuid = parse_auction_id(auction_id)

    try:
        history = get_bid_history(store, auction_uuid)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch bid history: {str(e)}"
        )

    if history is None:
        raise HTTPException(status_code=404, detail=f"Auction not found: {auction_id}")

    return BidHistoryResponse(
        auction_id=auction_uuid,
        bids=[bid_to_response(bid) for bid in history],
        total_count=len(history),
    )
