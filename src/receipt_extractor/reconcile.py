"""Per-field reconciliation of model and deterministic values."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from receipt_extractor.extractors.amount import plausible_total
from receipt_extractor.extractors.vendor import is_plausible_vendor
from receipt_extractor.models import ABSENT, FIELD_NAMES, ExtractionResult, Source

if TYPE_CHECKING:
    from collections.abc import Mapping

    from receipt_extractor.models import ModelFields

logger = logging.getLogger(__name__)


def _model_result(field: str, model: ModelFields, text: str) -> ExtractionResult[Any]:
    value = getattr(model, field)
    if value is None:
        return ABSENT
    if field == "vendor" and not is_plausible_vendor(value):
        logger.info("Discarding implausible model vendor %r", value)
        return ABSENT
    if field == "total_amount" and plausible_total(value, text) is None:
        logger.info("Discarding negative model total %s without a refund", value)
        return ABSENT
    return ExtractionResult(value, Source.MODEL, "model")


def _is_category_label(result: ExtractionResult[Any]) -> bool:
    return result.found and result.source is Source.REGEX and result.strategy == "label"


def reconcile(
    model: ModelFields,
    deterministic: Mapping[str, ExtractionResult[Any]],
    *,
    text: str = "",
) -> dict[str, ExtractionResult[Any]]:
    """Merge model and deterministic results field by field.

    The model value wins unless it is missing or implausible (a boilerplate
    vendor, a negative total with no refund in ``text``), in which case the
    deterministic value is used. An explicit ``Category:`` label in the body
    beats the model's category.
    """
    merged: dict[str, ExtractionResult[Any]] = {}
    for field in FIELD_NAMES:
        from_rules = deterministic.get(field, ABSENT)
        if field == "category" and _is_category_label(from_rules):
            merged[field] = from_rules
            continue
        from_model = _model_result(field, model, text)
        merged[field] = from_model if from_model.found else from_rules

    card_type, card_last4 = merged["card_type"], merged["card_last4"]
    card_known = card_type.found or card_last4.found
    form = merged["form_of_payment"]
    if card_known and not form.found:
        merged["form_of_payment"] = ExtractionResult(
            "Card", Source.INFERRED, "card_details"
        )
    elif form.source is Source.MODEL and form.value == "Cash" and any(
        r.found and r.source is not Source.MODEL for r in (card_type, card_last4)
    ):
        # Card digits found in the message outrank a model guess of cash.
        logger.debug(
            "Model reported Cash but the message shows card %s/%s",
            card_type.value,
            card_last4.value,
        )
        merged["form_of_payment"] = ExtractionResult(
            "Card", Source.INFERRED, "card_details"
        )

    logger.debug(
        "Reconciled sources: %s",
        {field: str(result.source) for field, result in merged.items()},
    )
    return merged
