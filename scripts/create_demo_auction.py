"""
Create a demo auction in Supabase for manual testing.

Usage:
  python scripts/create_demo_auction.py
  python scripts/create_demo_auction.py --title "Signed bat" --starting-bid 1000 --increment 50 --hours 48
"""

import argparse
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.time import utc_now
from repositories.auction_repository import SupabaseAuctionStore
from services.auction_service import AuctionDraft, create_auction


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a demo auction in Supabase")
    parser.add_argument("--title", default="Demo Charity Auction", help="Auction title")
    parser.add_argument("--created-by", default="demo-celebrity", help="Celebrity account ID")
    parser.add_argument("--starting-bid", default="1000", help="Starting bid (default: 1000)")
    parser.add_argument("--increment", default="50", help="Bid increment (default: 50)")
    parser.add_argument("--hours", type=int, default=24, help="Auction length in hours (default: 24)")
    parser.add_argument("--category", default="Other", help="Auction category")
    args = parser.parse_args()

    now = utc_now()
    draft = AuctionDraft(
        title=args.title,
        created_by=args.created_by,
        starting_bid=Decimal(args.starting_bid),
        bid_increment=Decimal(args.increment),
        start_date=now,
        end_date=now + timedelta(hours=args.hours),
        category=args.category,
        description="Created by create_demo_auction.py",
    )

    try:
        auction = create_auction(SupabaseAuctionStore(), draft, now=now)
    except ValueError as e:
        print(f"Invalid auction: {e}", file=sys.stderr)
        return 1

    print("=" * 50)
    print("DEMO AUCTION CREATED")
    print("=" * 50)
    print(f"Auction ID:        {auction.auction_id}")
    print(f"Title:             {auction.title}")
    print(f"Starting bid:      {auction.starting_bid}")
    print(f"Bid increment:     {auction.bid_increment}")
    print(f"Minimum next bid:  {auction.minimum_next_bid}")
    print(f"Ends at (UTC):     {auction.end_date.isoformat()}")
    print("=" * 50)
    return 0


if __name__ == "__main__":
    sys.exit(main())
