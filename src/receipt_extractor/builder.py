"""Receipt record assembly."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from receipt_extractor.models import ABSENT, FIELD_NAMES, ReceiptRecord
from receipt_extractor.taxonomy import OTHER

if TYPE_CHECKING:
    from collections.abc import Mapping

    from receipt_extractor.models import ExtractionResult, RawMessage


def build_record(
    raw: RawMessage, fields: Mapping[str, ExtractionResult[Any]]
) -> ReceiptRecord:
    """Assemble the canonical record from reconciled fields.

    Missing fields become None, ``vendor_name`` and ``amount`` mirror
    ``vendor`` and ``total_amount`` for older consumers, and the message
    metadata is passed through unchanged.
    """
    values = {name: fields.get(name, ABSENT).value for name in FIELD_NAMES}
    return ReceiptRecord(
        vendor=values["vendor"],
        vendor_name=values["vendor"],
        total_amount=values["total_amount"],
        amount=values["total_amount"],
        order_date=values["order_date"],
        form_of_payment=values["form_of_payment"],
        card_type=values["card_type"],
        card_last4=values["card_last4"],
        category=values["category"] or OTHER,
        tracking_number=values["tracking_number"],
        email_sender=raw.sender,
        subject=raw.subject,
        body_text=raw.text_body,
        body_html=raw.html_body,
        message_id=raw.message_id,
        received_at=raw.received_at,
    )
