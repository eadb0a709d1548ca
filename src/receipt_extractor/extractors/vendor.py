"""Vendor name extraction."""

from __future__ import annotations

import re
from email.utils import parseaddr
from typing import TYPE_CHECKING

from receipt_extractor.extractors.base import Strategy, run_strategies
from receipt_extractor.extractors.markup import parse_html
from receipt_extractor.models import ExtractionResult, Source

if TYPE_CHECKING:
    from receipt_extractor.text import MessageView

# A brand name: up to four capitalized words, allowing "&" and a few joiners.
# Dots are only allowed inside a word (Amazon.com), never at its end.
_WORD = r"[A-Z0-9][\w&'’\-]*(?:\.[\w&'’\-]+)*"
_NAME = rf"(?P<vendor>{_WORD}(?:[^\S\n](?:&|and|of|the|{_WORD})){{0,3}})"

VENDOR_PHRASES: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "shopping_at",
        re.compile(rf"(?i:thank\s+you\s+for\s+shopping\s+(?:at|with))\s+{_NAME}"),
    ),
    ("purchase_from", re.compile(rf"(?i:purchase\s+from)\s+{_NAME}")),
    ("sold_by", re.compile(rf"(?i:sold\s+by)\s*:?\s+{_NAME}")),
    ("from", re.compile(rf"\b(?i:from)[^\S\n]+{_NAME}")),
)

_VENDOR_LABEL = re.compile(
    r"^(?:vendor|merchant)\s*:\s*(?P<vendor>\S.*?)\s*$", re.IGNORECASE | re.MULTILINE
)

_GENERIC_VENDOR = re.compile(
    r"^(?:thank\s*(?:s|you)|receipt|your\s+(?:order|receipt|purchase)|order|invoice"
    r"|payment|purchase|confirmation|customer|store|merchant|vendor|hello|hi|dear"
    r"|unknown|n/?a|none|null|noreply|no-reply)\b",
    re.IGNORECASE,
)

PUBLIC_MAIL_DOMAINS = frozenset(
    {
        "aol", "comcast", "fastmail", "gmail", "gmx", "googlemail", "hey",
        "hotmail", "icloud", "live", "mac", "me", "msn", "outlook",
        "proton", "protonmail", "yahoo", "yandex", "ymail", "zoho",
    }
)

# Second-level labels of multi-part public suffixes (example.co.uk).
_SUFFIX_LABELS = frozenset({"co", "com", "net", "org", "ac", "gov", "edu"})

_TRAILING_JUNK = re.compile(r"[\s.,;:!'’\-]+$")


def is_plausible_vendor(name: str | None) -> bool:
    """Reject vendor values that are boilerplate rather than a brand."""
    if not name:
        return False
    cleaned = name.strip()
    if len(cleaned) < 2 or len(cleaned) > 80:
        return False
    if not re.search(r"[A-Za-z]", cleaned):
        return False
    return not _GENERIC_VENDOR.match(cleaned)


def _clean_name(name: str) -> str:
    return _TRAILING_JUNK.sub("", name.strip())


def _from_phrases(view: MessageView) -> str | None:
    for _name, pattern in VENDOR_PHRASES:
        for match in pattern.finditer(view.text):
            candidate = _clean_name(match.group("vendor"))
            if is_plausible_vendor(candidate):
                return candidate
    return None


def _from_label(view: MessageView) -> str | None:
    for match in _VENDOR_LABEL.finditer(view.text):
        candidate = _clean_name(match.group("vendor"))
        if is_plausible_vendor(candidate):
            return candidate
    return None


def _from_logo(view: MessageView) -> str | None:
    if not view.html:
        return None
    for image in parse_html(view.html).images:
        if not image.alt or not image.looks_like_logo():
            continue
        candidate = _clean_name(re.sub(r"\s*logo\s*$", "", image.alt, flags=re.I))
        if is_plausible_vendor(candidate):
            return candidate
    return None


def vendor_from_sender(sender: str) -> str | None:
    """Title-cased second-level domain of a sender, skipping webmail."""
    _display, address = parseaddr(sender)
    if "@" not in address:
        return None
    domain = address.rsplit("@", 1)[1].lower()
    labels = [label for label in domain.split(".") if label]
    if len(labels) < 2:
        return None
    index = -2
    if len(labels) > 2 and labels[-2] in _SUFFIX_LABELS and len(labels[-1]) == 2:
        index = -3
    name = labels[index]
    if name in PUBLIC_MAIL_DOMAINS:
        return None
    return name.replace("-", " ").title()


def _from_sender(view: MessageView) -> str | None:
    return vendor_from_sender(view.sender)


VENDOR_STRATEGIES: tuple[Strategy[str], ...] = (
    Strategy("phrase", Source.REGEX, _from_phrases),
    Strategy("label", Source.REGEX, _from_label),
    Strategy("logo_alt", Source.HTML_LOGO, _from_logo),
    Strategy("sender_domain", Source.CONTEXTUAL, _from_sender),
)


def extract_vendor(view: MessageView) -> ExtractionResult[str]:
    """Extract the vendor name from a normalized message."""
    return run_strategies("vendor", VENDOR_STRATEGIES, view)
