"""Order date extraction."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import TYPE_CHECKING

from receipt_extractor.extractors.base import Strategy, run_strategies
from receipt_extractor.models import ExtractionResult, Source

if TYPE_CHECKING:
    from receipt_extractor.text import MessageView

logger = logging.getLogger(__name__)

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MONTH_NAME = (
    r"(?P<month>jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?"
    r"|july?|aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?"
    r"|dec(?:ember)?)"
)
_MONTH_NAME_DATE = (
    rf"\b{_MONTH_NAME}\.?\s+(?P<day>\d{{1,2}})(?:st|nd|rd|th)?,?\s+(?P<year>\d{{4}})\b"
)
_NUMERIC_DATE = r"(?<![\d/])(?P<month>\d{1,2})/(?P<day>\d{1,2})/(?P<year>\d{4})\b"

MONTH_NAME_RE = re.compile(_MONTH_NAME_DATE, re.IGNORECASE)
NUMERIC_RE = re.compile(_NUMERIC_DATE)

_LABEL = r"(?:order|purchase|transaction|invoice|receipt)\s+date\s*:?\s*"
LABELLED_RE = re.compile(
    rf"{_LABEL}(?:{_MONTH_NAME_DATE}|{_NUMERIC_DATE.replace('?P<', '?P<n_')})",
    re.IGNORECASE,
)


def _to_date(year: str, month: int, day: str) -> date | None:
    try:
        return date(int(year), month, int(day))
    except ValueError:
        logger.debug("Invalid calendar date %s-%s-%s", year, month, day)
        return None


def _month_name_match(match: re.Match[str], prefix: str = "") -> date | None:
    month = MONTHS[match.group(f"{prefix}month")[:3].lower()]
    return _to_date(match.group(f"{prefix}year"), month, match.group(f"{prefix}day"))


def _numeric_match(match: re.Match[str], prefix: str = "") -> date | None:
    return _to_date(
        match.group(f"{prefix}year"),
        int(match.group(f"{prefix}month")),
        match.group(f"{prefix}day"),
    )


def parse_date_text(text: str) -> date | None:
    """Parse the first ``Month D, YYYY`` or ``MM/DD/YYYY`` date in a string."""
    match = MONTH_NAME_RE.search(text)
    if match:
        return _month_name_match(match)
    match = NUMERIC_RE.search(text)
    if match:
        return _numeric_match(match)
    return None


def _labelled(view: MessageView) -> date | None:
    for match in LABELLED_RE.finditer(view.text):
        if match.group("month"):
            parsed = _month_name_match(match)
        else:
            parsed = _numeric_match(match, prefix="n_")
        if parsed is not None:
            return parsed
    return None


def _month_name(view: MessageView) -> date | None:
    for match in MONTH_NAME_RE.finditer(view.text):
        parsed = _month_name_match(match)
        if parsed is not None:
            return parsed
    return None


def _numeric(view: MessageView) -> date | None:
    for match in NUMERIC_RE.finditer(view.text):
        parsed = _numeric_match(match)
        if parsed is not None:
            return parsed
    return None


DATE_STRATEGIES: tuple[Strategy[date], ...] = (
    Strategy("labelled_date", Source.REGEX, _labelled),
    Strategy("month_name", Source.REGEX, _month_name),
    Strategy("numeric", Source.REGEX, _numeric),
)


def extract_order_date(view: MessageView) -> ExtractionResult[date]:
    """Extract the order date from a normalized message."""
    return run_strategies("order_date", DATE_STRATEGIES, view)
