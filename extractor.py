"""
Listing-card extractor for rendered Booking.com search results.

Works on the HTML snapshot taken from the page after cards have rendered,
so it never touches the network. Booking serves different markup to
different experiment cohorts, so every field is resolved through an
ordered list of selector strategies: structured ``data-testid`` markers
first, then the legacy class-based markup.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from errors import ExtractionError
from models import NA, NO_DISTANCE, NO_PRICE, ListingRecord
from utils import get_logger

log = get_logger("extractor")

BASE_URL = "https://www.booking.com"

# Card containers, most specific first
CARD_SELECTORS: tuple[str, ...] = (
    "[data-testid='property-card']",
    ".sr_property_block",
    "div[class*='bh-property-card']",
)


class FieldStrategy(NamedTuple):
    selector: str
    attr: Optional[str] = None  # None → element text


NAME = (
    FieldStrategy("[data-testid='title']"),
    FieldStrategy(".sr-hotel__name"),
    FieldStrategy(".bh-property-card__name"),
)
LINK = (
    FieldStrategy("a[data-testid='title-link']", "href"),
    FieldStrategy("a.hotel_name_link", "href"),
    FieldStrategy("a[href*='/hotel/']", "href"),
)
PRICE = (
    FieldStrategy("[data-testid='price-and-discounted-price']"),
    FieldStrategy(".bui-price-display__value"),
    FieldStrategy(".prco-valign-middle-helper"),
)
ORIGINAL_PRICE = (
    FieldStrategy("[data-testid='price-and-discounted-price'] span[style*='text-decoration']"),
    FieldStrategy(".bui-price-display__original"),
)
RATING = (
    FieldStrategy("[data-testid='review-score'] div[aria-label*='Scored']"),
    FieldStrategy(".bui-review-score__badge"),
    FieldStrategy(".review-score-badge"),
)
REVIEWS = (
    FieldStrategy("[data-testid='review-score'] div:nth-child(2)"),
    FieldStrategy(".bui-review-score__text"),
    FieldStrategy(".review-score-widget__subtext"),
)
DISTANCE = (
    FieldStrategy("[data-testid='distance']"),
    FieldStrategy(".distfromdest"),
)
ADDRESS = (
    FieldStrategy("[data-testid='address']"),
    FieldStrategy(".sr_card_address_line"),
    FieldStrategy(".address"),
)
IMAGE = (
    FieldStrategy("img[data-testid='image']", "src"),
    FieldStrategy("img.hotel_image", "src"),
    FieldStrategy(".sr_item_photo img", "src"),
)

_DIGITS_RE = re.compile(r"\d[\d,]*")
_DECIMAL_RE = re.compile(r"\d+(?:\.\d+)?")


# ── Field resolution ──────────────────────────────────────────────────────────

def _text(el: Tag) -> str:
    return " ".join(el.get_text(" ").split())


def resolve_field(card: Tag, strategies: tuple[FieldStrategy, ...]) -> str | None:
    """Return the first non-empty value produced by ``strategies``."""
    for strategy in strategies:
        el = card.select_one(strategy.selector)
        if el is None:
            continue
        value = _text(el) if strategy.attr is None else (el.get(strategy.attr) or "").strip()
        if value:
            return value
    return None


def parse_price(text: str | None) -> float:
    """'€ 1,234' → 1234.0; 0 when no digits."""
    match = _DIGITS_RE.search(text or "")
    if not match:
        return NO_PRICE
    return float(match.group(0).replace(",", ""))


def parse_distance(text: str | None) -> float:
    """'1.2 km from centre' → 1.2; 999 when no number."""
    match = _DECIMAL_RE.search(text or "")
    return float(match.group(0)) if match else NO_DISTANCE


def parse_review_count(text: str | None) -> str:
    match = _DIGITS_RE.search(text or "")
    return match.group(0) if match else NA


# ── Card → ListingRecord ──────────────────────────────────────────────────────

def parse_card(card: Tag, base_url: str = BASE_URL) -> ListingRecord | None:
    """Map one card to a ListingRecord, or None when it has no name."""
    name = resolve_field(card, NAME)
    if name is None:
        return None

    href = resolve_field(card, LINK)
    price = resolve_field(card, PRICE)
    original_price = resolve_field(card, ORIGINAL_PRICE)
    distance = resolve_field(card, DISTANCE)

    return ListingRecord(
        name=name,
        url=urljoin(base_url, href) if href else NA,
        price=price or NA,
        price_numeric=parse_price(price),
        original_price=original_price,
        has_discount=original_price is not None,
        rating=resolve_field(card, RATING) or NA,
        review_count=parse_review_count(resolve_field(card, REVIEWS)),
        distance_from_center=distance or NA,
        distance_numeric=parse_distance(distance),
        address=resolve_field(card, ADDRESS) or NA,
        image=resolve_field(card, IMAGE) or NA,
    )


def _parse_isolated(card: Tag, index: int, base_url: str) -> ListingRecord | None:
    try:
        return parse_card(card, base_url)
    except Exception as exc:
        raise ExtractionError(index, exc) from exc


def find_cards(soup: BeautifulSoup) -> list[Tag]:
    for selector in CARD_SELECTORS:
        cards = soup.select(selector)
        if cards:
            log.debug("Matched %d cards with %s", len(cards), selector)
            return cards
    return []


def extract_listings(html: str, base_url: str = BASE_URL) -> list[ListingRecord]:
    """Parse every listing card in ``html``.

    Cards without a name are dropped; a card that fails to parse is logged
    and skipped so the rest of the page still comes through.
    """
    soup = BeautifulSoup(html, "html.parser")
    cards = find_cards(soup)

    records: list[ListingRecord] = []
    dropped = 0
    for index, card in enumerate(cards):
        try:
            record = _parse_isolated(card, index, base_url)
        except ExtractionError as err:
            log.warning("Skipping card: %s", err.message)
            continue
        if record is None:
            dropped += 1
            continue
        records.append(record)

    log.info(
        "Extracted %d listings from %d cards (%d without a name)",
        len(records), len(cards), dropped,
    )
    return records
