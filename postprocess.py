"""Sorting and filtering over extracted listings. Inputs are never mutated."""

from __future__ import annotations

import re
from typing import Any, Callable

from models import ListingFilters, ListingRecord

_LEADING_FLOAT_RE = re.compile(r"^\s*[-+]?\d+(?:\.\d+)?")


def parse_rating(record: ListingRecord) -> float | None:
    """Leading number of the rating text ('8.4' → 8.4); None when absent."""
    match = _LEADING_FLOAT_RE.match(record.rating or "")
    return float(match.group(0)) if match else None


def rating_value(record: ListingRecord) -> float:
    rating = parse_rating(record)
    return 0.0 if rating is None else rating


SORT_KEYS: dict[str, Callable[[ListingRecord], float]] = {
    "price": lambda r: r.price_numeric,
    "distance": lambda r: r.distance_numeric,
    "rating": rating_value,
}


def sort_listings(
    records: list[ListingRecord],
    sort_by: str = "price",
    order: str = "asc",
) -> list[ListingRecord]:
    """Stable sort by price, distance or rating.

    Any order other than "asc" sorts descending. An unknown key keeps the
    input order.
    """
    key = SORT_KEYS.get(sort_by)
    if key is None:
        return list(records)
    return sorted(records, key=key, reverse=order != "asc")


def _coerce(filters: ListingFilters | dict[str, Any] | None) -> ListingFilters:
    if isinstance(filters, ListingFilters):
        return filters
    return ListingFilters.from_dict(filters)


def filter_listings(
    records: list[ListingRecord],
    filters: ListingFilters | dict[str, Any] | None = None,
) -> list[ListingRecord]:
    """Keep records that satisfy every given bound (all bounds inclusive)."""
    f = _coerce(filters)

    def keep(r: ListingRecord) -> bool:
        if f.min_price is not None and r.price_numeric < f.min_price:
            return False
        if f.max_price is not None and r.price_numeric > f.max_price:
            return False
        if f.max_distance is not None and r.distance_numeric > f.max_distance:
            return False
        if f.min_rating is not None:
            rating = parse_rating(r)
            # unrated never satisfies a rating bound, even 0
            if rating is None or rating < f.min_rating:
                return False
        if f.only_with_discount and not r.has_discount:
            return False
        return True

    return [r for r in records if keep(r)]
