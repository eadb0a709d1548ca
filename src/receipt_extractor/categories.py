"""Post-reconciliation category normalization onto the fixed taxonomy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from receipt_extractor.models import ExtractionResult, Source
from receipt_extractor.taxonomy import OTHER, canonical_category, match_category

if TYPE_CHECKING:
    from receipt_extractor.text import MessageView


def normalize_category(
    current: ExtractionResult[str], *, vendor: str | None, view: MessageView
) -> ExtractionResult[str]:
    """Re-derive the category from the final vendor, subject and body.

    An explicit ``Category:`` label is kept. Otherwise a keyword match
    overrides the current value; without one the current value is mapped
    onto the taxonomy, and anything unmappable becomes ``Other``.
    """
    if current.source is Source.REGEX and current.found:
        return current

    matched = match_category(vendor, view.subject, view.text)
    if matched is not None:
        if matched == current.value:
            return current
        return ExtractionResult(matched, Source.INFERRED, "keywords")

    canonical = canonical_category(current.value)
    if canonical is not None:
        if canonical == current.value:
            return current
        return ExtractionResult(canonical, current.source, current.strategy)

    return ExtractionResult(OTHER, Source.NONE, "fallback")
