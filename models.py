"""Dataclasses for the Booking.com scraping pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional

NA = "N/A"
NO_PRICE = 0.0
NO_DISTANCE = 999.0

DEFAULT_LEAD_DAYS = 7
DEFAULT_NIGHTS = 2


@dataclass
class ListingRecord:
    """One hotel card from a search results page."""

    name: str
    url: str = NA
    price: str = NA                     # raw display text
    price_numeric: float = NO_PRICE     # leading digit group of price
    original_price: Optional[str] = None  # strikethrough price, if shown
    has_discount: bool = False
    rating: str = NA                    # raw text, e.g. "8.4"
    review_count: str = NA              # raw digit group, e.g. "1,234"
    distance_from_center: str = NA
    distance_numeric: float = NO_DISTANCE
    address: str = NA
    image: str = NA

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys written to JSON."""
        return {
            "name": self.name,
            "url": self.url,
            "price": self.price,
            "priceNumeric": self.price_numeric,
            "originalPrice": self.original_price,
            "hasDiscount": self.has_discount,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "distanceFromCenter": self.distance_from_center,
            "distanceNumeric": self.distance_numeric,
            "address": self.address,
            "image": self.image,
        }


@dataclass
class SearchQuery:
    """City search target. Dates default to a 2-night stay one week out."""

    city: str
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: int = 2

    def resolved_dates(self, today: date | None = None) -> tuple[date, date]:
        today = today or date.today()
        check_in = self.check_in or today + timedelta(days=DEFAULT_LEAD_DAYS)
        check_out = self.check_out or check_in + timedelta(days=DEFAULT_NIGHTS)
        return check_in, check_out


@dataclass
class PropertyTarget:
    """A results or property page URL pasted by the caller."""

    url: str


@dataclass
class ListingFilters:
    """AND-combined predicates. ``None`` bounds impose no constraint."""

    min_price: Optional[float] = None
    max_price: Optional[float] = None
    max_distance: Optional[float] = None
    min_rating: Optional[float] = None
    only_with_discount: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ListingFilters:
        data = data or {}
        return cls(
            min_price=data.get("minPrice"),
            max_price=data.get("maxPrice"),
            max_distance=data.get("maxDistance"),
            min_rating=data.get("minRating"),
            only_with_discount=data.get("onlyWithDiscount") is True,
        )
