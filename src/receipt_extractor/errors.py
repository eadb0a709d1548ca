"""Exceptions surfaced to callers of the extraction pipeline."""

from __future__ import annotations


class ReceiptExtractorError(Exception):
    """Base class for receipt-extractor failures."""


class PipelineError(ReceiptExtractorError):
    """Extraction failed unexpectedly; the message could not be processed."""

    def __init__(self, message_id: str | None) -> None:
        self.message_id = message_id
        super().__init__(f"Failed to process message {message_id or '<unknown>'}")


class PersistenceError(ReceiptExtractorError):
    """The receipt record could not be stored."""
