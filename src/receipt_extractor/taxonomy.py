"""Fixed category taxonomy and keyword matching."""

from __future__ import annotations

import re
from functools import cache

OTHER = "Other"

# Ordered: the first category whose keywords match wins, so more specific
# categories ("uber eats") sit before broader ones ("uber").
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Groceries",
        (
            "whole foods",
            "trader joe",
            "safeway",
            "kroger",
            "aldi",
            "publix",
            "wegmans",
            "instacart",
            "sprouts",
            "grocery",
            "groceries",
            "supermarket",
        ),
    ),
    (
        "Dining",
        (
            "uber eats",
            "doordash",
            "grubhub",
            "postmates",
            "starbucks",
            "chipotle",
            "mcdonald's",
            "mcdonalds",
            "restaurant",
            "cafe",
            "coffee",
            "pizza",
            "dining",
            "food",
        ),
    ),
    (
        "Gas & Fuel",
        ("shell", "chevron", "exxon", "mobil", "bp", "gas station", "fuel"),
    ),
    (
        "Transportation",
        ("uber", "lyft", "taxi", "parking", "transit", "metro", "toll", "rideshare"),
    ),
    (
        "Travel",
        (
            "airbnb",
            "expedia",
            "booking.com",
            "marriott",
            "hilton",
            "hotel",
            "airline",
            "airlines",
            "flight",
            "travel",
        ),
    ),
    (
        "Utilities",
        ("comcast", "xfinity", "verizon", "at&t", "t-mobile", "electric", "utility"),
    ),
    (
        "Subscriptions",
        ("netflix", "spotify", "hulu", "disney+", "patreon", "subscription"),
    ),
    (
        "Healthcare",
        ("cvs", "walgreens", "pharmacy", "clinic", "dental", "medical", "health"),
    ),
    (
        "Entertainment",
        ("ticketmaster", "fandango", "cinema", "movie", "theater", "concert", "steam"),
    ),
    (
        "Office Supplies",
        ("staples", "office depot", "officemax", "office supplies"),
    ),
    (
        "Shopping",
        (
            "amazon",
            "target",
            "walmart",
            "best buy",
            "costco",
            "ebay",
            "etsy",
            "ikea",
            "home depot",
            "shopping",
            "retail",
        ),
    ),
)

TAXONOMY: tuple[str, ...] = tuple(name for name, _ in CATEGORY_KEYWORDS)


@cache
def _keyword_pattern(keyword: str) -> re.Pattern[str]:
    # Lookarounds instead of \b so keywords ending in punctuation still match.
    return re.compile(rf"(?<![a-z0-9]){re.escape(keyword)}(?![a-z0-9])")


def match_category(*texts: str | None) -> str | None:
    """Return the first taxonomy category whose keywords occur in the texts."""
    haystack = " ".join(t for t in texts if t).lower()
    if not haystack:
        return None
    for category, keywords in CATEGORY_KEYWORDS:
        for keyword in keywords:
            if _keyword_pattern(keyword).search(haystack):
                return category
    return None


def canonical_category(label: str | None) -> str | None:
    """Map a free-text category label onto the taxonomy, or None."""
    if not label:
        return None
    cleaned = label.strip()
    for category in (*TAXONOMY, OTHER):
        if cleaned.lower() == category.lower():
            return category
    return match_category(cleaned)
