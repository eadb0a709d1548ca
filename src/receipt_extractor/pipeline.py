"""The extraction pipeline: one independent run per inbound message."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from receipt_extractor.builder import build_record
from receipt_extractor.categories import normalize_category
from receipt_extractor.errors import PipelineError
from receipt_extractor.extraction import (
    DEFAULT_MAX_BODY_CHARS,
    AgentCompletionClient,
    CompletionClient,
    ModelExtractor,
)
from receipt_extractor.extractors.fields import extract_all
from receipt_extractor.models import ModelFields, ProcessedReceipt
from receipt_extractor.reconcile import reconcile
from receipt_extractor.text import normalize_message

if TYPE_CHECKING:
    from receipt_extractor.config import PipelineConfig
    from receipt_extractor.models import RawMessage, ReceiptRecord

logger = logging.getLogger(__name__)


class ReceiptPipeline:
    """Turn a RawMessage into a ReceiptRecord.

    Deterministic extraction always runs first, so a record is produced even
    when the completion model is disabled, slow or failing. Accepts an
    optional completion client for dependency injection in tests.
    """

    def __init__(
        self, config: PipelineConfig, *, client: CompletionClient | None = None
    ) -> None:
        self.config = config
        self._model: ModelExtractor | None = None
        if client is None and config.model is not None:
            client = AgentCompletionClient(config.model)
        if client is not None:
            max_chars = (
                config.model.max_body_chars
                if config.model is not None
                else DEFAULT_MAX_BODY_CHARS
            )
            self._model = ModelExtractor(client, max_body_chars=max_chars)

    def run(self, raw: RawMessage) -> ProcessedReceipt:
        """Process one message, returning the record and its provenance.

        Raises PipelineError for any unexpected failure.
        """
        try:
            return self._run(raw)
        except Exception as exc:
            logger.exception("Extraction failed for message %s", raw.message_id)
            raise PipelineError(raw.message_id) from exc

    def process(self, raw: RawMessage) -> ReceiptRecord:
        """Process one message and return only the record."""
        return self.run(raw).record

    def _run(self, raw: RawMessage) -> ProcessedReceipt:
        view = normalize_message(
            raw, low_value_threshold=self.config.low_value_threshold
        )
        logger.debug(
            "Message %s: using %s body (%d chars)",
            raw.message_id,
            view.origin,
            len(view.text),
        )

        deterministic = extract_all(view)
        model_fields = self._model.extract(view) if self._model else ModelFields()

        fields = reconcile(model_fields, deterministic, text=view.text)
        fields["category"] = normalize_category(
            fields["category"], vendor=fields["vendor"].value, view=view
        )

        record = build_record(raw, fields)
        provenance = {name: result.source for name, result in fields.items()}
        logger.info(
            "Extracted message %s: vendor=%r total=%s category=%s",
            raw.message_id,
            record.vendor,
            record.total_amount,
            record.category,
        )
        return ProcessedReceipt(record=record, provenance=provenance)
