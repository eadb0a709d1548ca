"""Run every deterministic field extractor over a message.

Each extractor tries its strategies in priority order and returns an
``ExtractionResult``; a miss is an absent result, never an exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from receipt_extractor.extractors.amount import extract_total_amount
from receipt_extractor.extractors.category import extract_category
from receipt_extractor.extractors.dates import extract_order_date
from receipt_extractor.extractors.payment import extract_payment
from receipt_extractor.extractors.tracking import extract_tracking_number
from receipt_extractor.extractors.vendor import extract_vendor

if TYPE_CHECKING:
    from receipt_extractor.models import ExtractionResult
    from receipt_extractor.text import MessageView


def extract_all(view: MessageView) -> dict[str, ExtractionResult[Any]]:
    """Run every deterministic extractor over a message view."""
    vendor = extract_vendor(view)
    return {
        "vendor": vendor,
        "total_amount": extract_total_amount(view),
        "order_date": extract_order_date(view),
        **extract_payment(view),
        "category": extract_category(view, vendor.value),
        "tracking_number": extract_tracking_number(view),
    }
