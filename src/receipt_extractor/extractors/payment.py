"""Payment method and card extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from receipt_extractor.extractors.base import Strategy, run_strategies
from receipt_extractor.extractors.markup import parse_html
from receipt_extractor.models import (
    ABSENT,
    ExtractionResult,
    Source,
    canonical_card_brand,
)

if TYPE_CHECKING:
    from receipt_extractor.text import MessageView


@dataclass(frozen=True)
class Payment:
    """Form of payment with the card network and last four digits if known."""

    form_of_payment: str
    card_type: str | None = None
    card_last4: str | None = None


_BRAND = (
    r"(?<![a-z])(?P<brand>visa|master\s?card|amex|american\s+express|discover"
    r"|diners(?:\s+club)?|jcb|union\s?pay)(?![a-z])"
)
# Runs of x, * or bullet glyphs, optionally grouped, then exactly four digits.
# The atomic group keeps long decorative lines ("*****") from backtracking.
_MASK = r"(?<![a-z0-9])(?>(?:(?:[*•●·]+|x{2,})[\s-]?)+)(?P<last4>\d{4})(?!\d)"
_CONNECTOR = (
    r"[^\S\n]*(?:(?:credit|debit|card|ending(?:\s+in)?|in|no\.?|number|acct"
    r"|account|[-:#(])[^\S\n]*)*"
)

BRAND_RE = re.compile(_BRAND, re.IGNORECASE)
BRAND_THEN_MASK_RE = re.compile(rf"{_BRAND}{_CONNECTOR}{_MASK}", re.IGNORECASE)
MASK_THEN_BRAND_RE = re.compile(
    rf"{_MASK}[^\S\n]*[(\-]?[^\S\n]*{_BRAND}", re.IGNORECASE
)
BRAND_ENDING_RE = re.compile(
    rf"{_BRAND}[^\S\n]*(?:(?:credit|debit|card)[^\S\n]*)*"
    r"(?:ending|ends)\s+(?:in|with)?\s*[:#]?\s*(?P<last4>\d{4})(?!\d)",
    re.IGNORECASE,
)
ACCOUNT_RE = re.compile(
    rf"^[^\S\n]*(?:account|acct|card)(?:\s+(?:number|no\.?|#))?\s*:\s*{_MASK}",
    re.IGNORECASE | re.MULTILINE,
)
_FOUR_DIGITS = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_CONTACTLESS = re.compile(r"\bcontactless\b", re.IGNORECASE)
_CASH = re.compile(r"\bcash\b(?!\s*back)", re.IGNORECASE)
_CARD_WORD = re.compile(r"\b(?:credit|debit)?\s*card\b", re.IGNORECASE)

PAYMENT_FIELDS = ("form_of_payment", "card_type", "card_last4")


def _card(brand: str, last4: str) -> Payment | None:
    canonical = canonical_card_brand(brand)
    if canonical is None:
        return None
    return Payment("Card", canonical, last4)


def _brand_with_digits(view: MessageView) -> Payment | None:
    for pattern in (BRAND_THEN_MASK_RE, MASK_THEN_BRAND_RE, BRAND_ENDING_RE):
        match = pattern.search(view.text)
        if match:
            return _card(match.group("brand"), match.group("last4"))
    return None


def _account_line(view: MessageView) -> Payment | None:
    match = ACCOUNT_RE.search(view.text)
    if not match:
        return None
    brand = BRAND_RE.search(view.text)
    if not brand:
        return None
    return _card(brand.group("brand"), match.group("last4"))


def _html_card_image(view: MessageView) -> Payment | None:
    if not view.html:
        return None
    for row in parse_html(view.html).rows:
        for index, cell in enumerate(row):
            for image in cell.images:
                brand = BRAND_RE.search(f"{image.src} {image.alt}")
                if not brand:
                    continue
                # The image's own cell, then the cells on either side.
                neighbours = [cell, *row[index + 1 : index + 2]]
                if index > 0:
                    neighbours.append(row[index - 1])
                for neighbour in neighbours:
                    digits = _FOUR_DIGITS.search(neighbour.text)
                    if digits:
                        return _card(brand.group("brand"), digits.group(1))
    return None


def _contactless(view: MessageView) -> Payment | None:
    if _CONTACTLESS.search(view.text):
        return Payment("Card")
    return None


def _cash(view: MessageView) -> Payment | None:
    text = view.text
    if not _CASH.search(text):
        return None
    if BRAND_RE.search(text) or _CARD_WORD.search(text):
        return None
    return Payment("Cash")


PAYMENT_STRATEGIES: tuple[Strategy[Payment], ...] = (
    Strategy("brand_digits", Source.REGEX, _brand_with_digits),
    Strategy("account_line", Source.REGEX, _account_line),
    Strategy("html_card_image", Source.HTML_LOGO, _html_card_image),
    Strategy("contactless", Source.INFERRED, _contactless),
    Strategy("cash", Source.INFERRED, _cash),
)


def extract_payment(view: MessageView) -> dict[str, ExtractionResult[str]]:
    """Extract form of payment, card network and last four digits."""
    result = run_strategies("payment", PAYMENT_STRATEGIES, view)
    payment = result.value
    if payment is None:
        return dict.fromkeys(PAYMENT_FIELDS, ABSENT)

    def tagged(value: str | None) -> ExtractionResult[str]:
        if value is None:
            return ABSENT
        return ExtractionResult(value, result.source, result.strategy)

    return {
        "form_of_payment": tagged(payment.form_of_payment),
        "card_type": tagged(payment.card_type),
        "card_last4": tagged(payment.card_last4),
    }
