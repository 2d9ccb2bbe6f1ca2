"""
Check stored auctions for bid history inconsistencies.

Verifies, for each auction, that the bid history is strictly increasing by at
least the bid increment and that current_high_bid, top_bidder_id and bid_count
agree with the history.

Usage:
  python scripts/check_auction_consistency.py
  python scripts/check_auction_consistency.py --auction-id <uuid>
"""

import argparse
import sys
from pathlib import Path
from uuid import UUID

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.auction import check_history_consistency
from repositories.auction_repository import SupabaseAuctionStore


def main() -> int:
    parser = argparse.ArgumentParser(description="Check auction bid history consistency")
    parser.add_argument("--auction-id", help="Check a single auction")
    parser.add_argument("--limit", type=int, default=1000, help="Maximum auctions to check (default: 1000)")
    args = parser.parse_args()

    store = SupabaseAuctionStore()

    if args.auction_id:
        auction = store.get_auction(UUID(args.auction_id))
        if auction is None:
            print(f"Auction not found: {args.auction_id}", file=sys.stderr)
            return 1
        auctions = [auction]
    else:
        auctions = store.list_auctions(limit=args.limit)

    inconsistent = 0
    for auction in auctions:
        problems = check_history_consistency(auction)
        if problems:
            inconsistent += 1
            print(f"[FAIL] {auction.auction_id} ({auction.title})")
            for problem in problems:
                print(f"  - {problem}")

    print("=" * 50)
    print(f"Auctions checked:   {len(auctions)}")
    print(f"Inconsistent:       {inconsistent}")
    print("=" * 50)

    return 1 if inconsistent else 0


if __name__ == "__main__":
    sys.exit(main())
