"""Order, invoice and tracking number extraction."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from receipt_extractor.extractors.base import Strategy, run_strategies
from receipt_extractor.models import ExtractionResult, Source

if TYPE_CHECKING:
    from receipt_extractor.text import MessageView

_LABEL_TAIL = r"(?:\s+(?:number|no\.?|num|id))?\s*[:#]?\s*#?\s*"
_TOKEN = r"(?P<token>[A-Z0-9][A-Z0-9\-]{3,})\b"

ORDER_RE = re.compile(rf"\b(?:order|invoice){_LABEL_TAIL}{_TOKEN}", re.IGNORECASE)
TRACKING_RE = re.compile(rf"\btracking{_LABEL_TAIL}{_TOKEN}", re.IGNORECASE)


def _first_token(pattern: re.Pattern[str], text: str) -> str | None:
    for match in pattern.finditer(text):
        token = match.group("token").rstrip("-")
        # Label words such as "Order Total" or "Invoice Date" carry no digits.
        if any(ch.isdigit() for ch in token):
            return token
    return None


def _order_or_invoice(view: MessageView) -> str | None:
    return _first_token(ORDER_RE, view.text) or _first_token(ORDER_RE, view.subject)


def _tracking(view: MessageView) -> str | None:
    return _first_token(TRACKING_RE, view.text)


TRACKING_STRATEGIES: tuple[Strategy[str], ...] = (
    Strategy("order_invoice_label", Source.REGEX, _order_or_invoice),
    Strategy("tracking_label", Source.REGEX, _tracking),
)


def extract_tracking_number(view: MessageView) -> ExtractionResult[str]:
    """Extract an order, invoice or tracking identifier."""
    return run_strategies("tracking_number", TRACKING_STRATEGIES, view)
