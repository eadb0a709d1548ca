"""Total amount extraction."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from receipt_extractor.extractors.base import Strategy, run_strategies
from receipt_extractor.models import ExtractionResult, Source
from receipt_extractor.money import parse_amount

if TYPE_CHECKING:
    from decimal import Decimal

    from receipt_extractor.text import MessageView

# A currency-formatted number: either a symbol, or exactly two decimals.
_NUMBER = r"(?:\d{1,3}(?:,\d{3})+|\d+)"
MONEY = (
    rf"(?:\(\s*)?-?\s?(?:(?:[A-Z]{{1,3}})?[$£€]\s?-?\s?{_NUMBER}(?:\.\d{{2}})?"
    rf"|{_NUMBER}\.\d{{2}})(?:\s*\))?"
)

_MONEY_RE = re.compile(rf"(?<![\w.,]){MONEY}(?![\d,]|\.\d)")

# Filler between a label and its amount; a dash only as a spaced separator.
_GAP = r"(?:[^\d$£€(\n-]|-(?=\s)){0,20}"

_TOTAL_TENDER_RE = re.compile(
    rf"\btotal\s+tender(?:ed)?\b{_GAP}(?P<amount>{MONEY})",
    re.IGNORECASE,
)

_TOTAL_RE = re.compile(
    r"(?<!sub)(?<!sub )(?<!sub-)\b(?:grand\s+|order\s+|amount\s+)?total\b"
    r"(?!\s*(?:tax|discount|savings|saved|tender|items?|qty|quantity)\b)"
    rf"{_GAP}(?P<amount>{MONEY})",
    re.IGNORECASE,
)

_REFUND_RE = re.compile(r"\brefund(?:ed|s)?\b", re.IGNORECASE)


def plausible_total(amount: Decimal | None, text: str) -> Decimal | None:
    """Negative totals only make sense net of a refund."""
    if amount is None:
        return None
    if amount < 0 and not _REFUND_RE.search(text):
        return None
    return amount


def _accept(amount: Decimal | None, view: MessageView) -> Decimal | None:
    return plausible_total(amount, view.text)


def _total_tender(view: MessageView) -> Decimal | None:
    for match in _TOTAL_TENDER_RE.finditer(view.text):
        amount = _accept(parse_amount(match.group("amount")), view)
        if amount is not None:
            return amount
    return None


def _labelled_total(view: MessageView) -> Decimal | None:
    # The grand total is conventionally the last total-like figure.
    for match in reversed(list(_TOTAL_RE.finditer(view.text))):
        amount = _accept(parse_amount(match.group("amount")), view)
        if amount is not None:
            return amount
    return None


def _last_amount(view: MessageView) -> Decimal | None:
    for match in reversed(list(_MONEY_RE.finditer(view.text))):
        amount = _accept(parse_amount(match.group(0)), view)
        if amount is not None:
            return amount
    return None


AMOUNT_STRATEGIES: tuple[Strategy[Decimal], ...] = (
    Strategy("total_tender", Source.REGEX, _total_tender),
    Strategy("total_line", Source.REGEX, _labelled_total),
    Strategy("last_amount", Source.INFERRED, _last_amount),
)


def find_amounts(text: str) -> list[str]:
    """Return every currency-formatted number in the text, in order."""
    return [match.group(0).strip() for match in _MONEY_RE.finditer(text)]


def extract_total_amount(view: MessageView) -> ExtractionResult[Decimal]:
    """Extract the receipt total from a normalized message."""
    return run_strategies("total_amount", AMOUNT_STRATEGIES, view)
