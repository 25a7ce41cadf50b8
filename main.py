"""
CLI: scrape → sort/filter → print + JSON dump.

Usage:
    booking-scraper "New York"                                  # cheapest first
    booking-scraper Paris --sort=distance --order=asc
    booking-scraper Rome --sort=rating --order=desc --discount-only
    booking-scraper Lisbon --check-in 2025-03-01 --check-out 2025-03-04 --adults 1
    booking-scraper --url "https://www.booking.com/searchresults.html?ss=Paris"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import date
from pathlib import Path

import config
from errors import ScraperError
from models import ListingFilters, ListingRecord, PropertyTarget, SearchQuery
from postprocess import filter_listings, sort_listings
from scraper import scrape_listings
from utils import get_logger

log = get_logger("main")

USAGE = (
    "Usage: booking-scraper <city> [--sort=price|distance|rating] "
    "[--order=asc|desc] [--discount-only]\n"
    'Example: booking-scraper "New York" --sort=price --order=asc --discount-only'
)


# ── CLI argument parsing ───────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="booking-scraper",
        description="Scrape Booking.com hotel listings for a city",
    )
    parser.add_argument("city", nargs="?", help="City to search")
    parser.add_argument(
        "--url",
        default=None,
        help="Scrape a Booking.com results/property URL instead of a city",
    )
    parser.add_argument(
        "--sort",
        choices=["price", "distance", "rating"],
        default="price",
        help="Sort key (default: price)",
    )
    parser.add_argument(
        "--order",
        choices=["asc", "desc"],
        default="asc",
        help="Sort order (default: asc)",
    )
    parser.add_argument(
        "--discount-only",
        action="store_true",
        help="Only keep listings showing a discount",
    )
    parser.add_argument("--check-in", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    parser.add_argument("--check-out", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    parser.add_argument("--adults", type=int, default=2)
    parser.add_argument(
        "--output",
        default=None,
        help=f"JSON output file (default: {config.OUTPUT_FILE})",
    )
    return parser


# ── Output ────────────────────────────────────────────────────────────────────

def format_listings(listings: list[ListingRecord], label: str) -> str:
    rule = "=" * 80
    lines = ["", rule, f"Found {len(listings)} hotels in {label}", rule, ""]
    for i, hotel in enumerate(listings, start=1):
        price = hotel.price
        if hotel.has_discount:
            price += f" (Original: {hotel.original_price})"
        lines += [
            f"{i}. {hotel.name}",
            f"   Price: {price}",
            f"   Rating: {hotel.rating} ({hotel.review_count} reviews)",
            f"   Distance: {hotel.distance_from_center}",
            f"   Address: {hotel.address}",
            f"   URL: {hotel.url}",
            "",
        ]
    return "\n".join(lines)


def write_results(listings: list[ListingRecord], path: str | Path) -> Path:
    path = Path(path)
    path.write_text(
        json.dumps([l.to_dict() for l in listings], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return path


# ── Main pipeline ─────────────────────────────────────────────────────────────

async def run(args: argparse.Namespace, settings: config.Settings) -> list[ListingRecord]:
    if args.url:
        target: SearchQuery | PropertyTarget = PropertyTarget(url=args.url)
    else:
        target = SearchQuery(
            city=args.city,
            check_in=args.check_in,
            check_out=args.check_out,
            adults=args.adults,
        )

    listings = await scrape_listings(target, settings)
    if args.discount_only:
        listings = filter_listings(listings, ListingFilters(only_with_discount=True))
    return sort_listings(listings, args.sort, args.order)


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)
    if not args.city and not args.url:
        print(USAGE)
        return 1

    settings = config.load_settings()
    try:
        listings = asyncio.run(run(args, settings))
    except ScraperError as exc:
        log.error("Scrape failed: %s", exc.message)
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    except Exception as exc:
        log.exception("Unexpected scrape failure")
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(format_listings(listings, args.city or args.url))
    path = write_results(listings, args.output or settings.output_file)
    print(f"Results saved to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
