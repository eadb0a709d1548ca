"""OCR fallback for messages whose bodies carry no receipt content."""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING, Protocol

from receipt_extractor.text import (
    DEFAULT_LOW_VALUE_THRESHOLD,
    html_to_text,
    is_low_value,
)

if TYPE_CHECKING:
    from receipt_extractor.models import Attachment, RawMessage

logger = logging.getLogger(__name__)

OCR_CONTENT_TYPES = ("image/", "application/pdf")


class OcrService(Protocol):
    """Protocol for text recognition backends.

    Returns the recognized text, or an empty string when nothing was found.
    """

    def extract_text(self, attachment: Attachment) -> str: ...


def needs_ocr(
    raw: RawMessage, *, low_value_threshold: int = DEFAULT_LOW_VALUE_THRESHOLD
) -> bool:
    """Whether both bodies are low-value and an OCR-able attachment exists."""
    if raw.ocr_text:
        return False
    if not is_low_value(raw.text_body, low_value_threshold):
        return False
    html_text = html_to_text(raw.html_body) if raw.html_body else ""
    if not is_low_value(html_text, low_value_threshold):
        return False
    return any(_is_ocr_candidate(att) for att in raw.attachments)


def apply_ocr_fallback(
    raw: RawMessage,
    service: OcrService,
    *,
    low_value_threshold: int = DEFAULT_LOW_VALUE_THRESHOLD,
) -> RawMessage:
    """Return the message with ``ocr_text`` filled in when it is needed.

    A failing attachment counts as empty text; OCR never fails the message.
    """
    if not needs_ocr(raw, low_value_threshold=low_value_threshold):
        return raw

    texts: list[str] = []
    for attachment in raw.attachments:
        if not _is_ocr_candidate(attachment):
            continue
        try:
            text = service.extract_text(attachment)
        except Exception:
            logger.warning(
                "OCR failed for attachment %s", attachment.filename, exc_info=True
            )
            continue
        if text and text.strip():
            texts.append(text.strip())

    if not texts:
        logger.info("OCR produced no text for message %s", raw.message_id)
        return raw
    return dataclasses.replace(raw, ocr_text="\n\n".join(texts))


def _is_ocr_candidate(attachment: Attachment) -> bool:
    content_type = attachment.content_type.lower()
    return any(content_type.startswith(prefix) for prefix in OCR_CONTENT_TYPES)
