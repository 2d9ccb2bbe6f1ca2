"""
Fire concurrent bids at one auction and report how the race resolved.

Each simulated bidder submits a single bid; amounts step up from the minimum
acceptable price so several bidders collide on the same price levels.

Usage:
  # Self-contained run against the in-memory store
  python scripts/simulate_bid_race.py --bidders 20

  # Against an existing Supabase auction
  python scripts/simulate_bid_race.py --backend supabase --auction-id <uuid> --bidders 10
"""

import argparse
import sys
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from decimal import Decimal
from pathlib import Path
from typing import List
from uuid import UUID

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.auction import check_history_consistency
from domain.time import utc_now
from repositories.auction_store import AuctionStore, InMemoryAuctionStore
from services.auction_service import AuctionDraft, create_auction
from services.bid_placement_service import DEFAULT_MAX_ATTEMPTS, BidPlacementResult, place_bid


def _prepare_store(args: argparse.Namespace) -> tuple[AuctionStore, UUID]:
    if args.backend == "supabase":
        if not args.auction_id:
            raise SystemExit("--auction-id is required with --backend supabase")
        from repositories.auction_repository import SupabaseAuctionStore

        return SupabaseAuctionStore(), UUID(args.auction_id)

    store = InMemoryAuctionStore()
    now = utc_now()
    auction = create_auction(
        store,
        AuctionDraft(
            title="Race simulation",
            created_by="simulator",
            starting_bid=Decimal("1000"),
            bid_increment=Decimal("50"),
            start_date=now - timedelta(minutes=1),
            end_date=now + timedelta(hours=1),
        ),
    )
    return store, auction.auction_id


def main() -> int:
    parser = argparse.ArgumentParser(description="Simulate concurrent bidding on one auction")
    parser.add_argument("--backend", choices=["memory", "supabase"], default="memory")
    parser.add_argument("--auction-id", help="Existing auction ID (supabase backend)")
    parser.add_argument("--bidders", type=int, default=20, help="Number of concurrent bidders (default: 20)")
    parser.add_argument(
        "--levels", type=int, default=5,
        help="Number of distinct price levels bidders spread over (default: 5)"
    )
    parser.add_argument(
        "--max-attempts", type=int, default=DEFAULT_MAX_ATTEMPTS,
        help=f"Retry budget per bid (default: {DEFAULT_MAX_ATTEMPTS})"
    )
    args = parser.parse_args()

    store, auction_id = _prepare_store(args)
    auction = store.get_auction(auction_id)
    if auction is None:
        print(f"Auction not found: {auction_id}", file=sys.stderr)
        return 1

    base = auction.minimum_next_bid
    amounts: List[Decimal] = [
        base + auction.bid_increment * (i % max(args.levels, 1)) for i in range(args.bidders)
    ]

    def submit(index: int) -> BidPlacementResult:
        return place_bid(
            store,
            auction_id,
            f"sim-bidder-{index}",
            f"Bidder {index}",
            amounts[index],
            max_attempts=args.max_attempts,
        )

    with ThreadPoolExecutor(max_workers=args.bidders) as pool:
        results = list(pool.map(submit, range(args.bidders)))

    outcomes = Counter(r.status if r.accepted else r.reason.value for r in results)
    final = store.get_auction(auction_id)
    if final is None:
        print(f"Auction not found after the race: {auction_id}", file=sys.stderr)
        return 1

    print("=" * 50)
    print("BID RACE SUMMARY")
    print("=" * 50)
    for outcome, count in sorted(outcomes.items()):
        print(f"{outcome:<20} {count}")
    print("-" * 50)
    print(f"Final high bid:    {final.current_high_bid}")
    print(f"Top bidder:        {final.top_bidder_id}")
    print(f"Bid count:         {final.bid_count}")
    print(f"Total attempts:    {sum(r.attempts for r in results)}")

    problems = check_history_consistency(final)
    if problems:
        print("\nHISTORY INCONSISTENT:")
        for problem in problems:
            print(f"  - {problem}")
        return 1

    print("History consistent: yes")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
