"""Category extraction from labels and keyword inference."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from receipt_extractor.models import ExtractionResult, Source
from receipt_extractor.taxonomy import OTHER, canonical_category, match_category

if TYPE_CHECKING:
    from receipt_extractor.text import MessageView

_CATEGORY_LABEL = re.compile(
    r"^[^\S\n]*category\s*:\s*(?P<category>\S.*?)\s*$", re.IGNORECASE | re.MULTILINE
)


def extract_category(view: MessageView, vendor: str | None) -> ExtractionResult[str]:
    """Extract a taxonomy category, falling back to ``Other``.

    An explicit ``Category:`` label wins when it maps onto the taxonomy.
    Otherwise the vendor, subject and body are scanned for keywords.
    """
    for match in _CATEGORY_LABEL.finditer(view.text):
        labelled = canonical_category(match.group("category"))
        if labelled is not None:
            return ExtractionResult(labelled, Source.REGEX, "label")

    inferred = match_category(vendor, view.subject, view.text)
    if inferred is not None:
        return ExtractionResult(inferred, Source.INFERRED, "keywords")

    return ExtractionResult(OTHER, Source.NONE, "fallback")
