"""Text normalization: the canonical text view fed to every extractor."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from receipt_extractor.models import RawMessage

logger = logging.getLogger(__name__)

DEFAULT_LOW_VALUE_THRESHOLD = 25

_BOILERPLATE = re.compile(
    r"sent from my (?:iphone|ipad|android|phone|mobile device|samsung[\w ]*)"
    r"|sent from (?:mail|outlook) for (?:windows|ios|android)[\w ]*"
    r"|get outlook for (?:ios|android)"
    r"|sent from yahoo mail[\w ]*"
    r"|sent via [\w ]+ app"
    r"|-+ ?(?:forwarded|original) message ?-+"
    r"|begin forwarded message:?",
    re.IGNORECASE,
)
_QUOTE_MARKERS = re.compile(r"^[ \t]*>+[ \t]?", re.MULTILINE)
_SIGNATURE_DELIMITER = re.compile(r"^-- ?$", re.MULTILINE)
_HORIZONTAL_WS = re.compile(r"[^\S\n]+")
_BLANK_RUNS = re.compile(r"\n{3,}")
_INVISIBLE = re.compile("[\u200b\u200c\u200d\u2060\ufeff\u00ad]")

_BLOCK_TAGS = frozenset(
    {
        "address", "article", "br", "div", "footer", "h1", "h2", "h3", "h4",
        "h5", "h6", "header", "hr", "li", "ol", "p", "section", "table",
        "tbody", "thead", "tr", "ul",
    }
)
_CELL_TAGS = frozenset({"td", "th"})
_SKIP_TAGS = frozenset({"script", "style", "head", "title", "noscript"})


@dataclass(frozen=True)
class MessageView:
    """Normalized view of a message shared by all extractors."""

    sender: str
    subject: str
    text: str
    html: str
    origin: str


def normalize_whitespace(text: str) -> str:
    """Unify line endings, collapse horizontal whitespace and blank runs."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _INVISIBLE.sub("", text).replace("\u00a0", " ")
    text = _HORIZONTAL_WS.sub(" ", text)
    lines = [line.strip() for line in text.split("\n")]
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()


def html_to_text(html: str) -> str:
    """Strip markup, scripts and styles from HTML, keeping line structure."""
    stripper = _HTMLTextExtractor()
    stripper.feed(html)
    stripper.close()
    return normalize_whitespace(stripper.get_text())


def is_low_value(
    text: str | None, threshold: int = DEFAULT_LOW_VALUE_THRESHOLD
) -> bool:
    """Whether a body is too sparse to hold receipt content.

    Quote markers, signature delimiters and client boilerplate such as
    "Sent from my iPhone" are removed before measuring.
    """
    if not text:
        return True
    residual = _QUOTE_MARKERS.sub("", text)
    residual = _SIGNATURE_DELIMITER.sub("", residual)
    residual = _BOILERPLATE.sub("", residual)
    residual = re.sub(r"\s+", " ", residual).strip()
    return len(residual) < threshold


def normalize_message(
    raw: RawMessage, *, low_value_threshold: int = DEFAULT_LOW_VALUE_THRESHOLD
) -> MessageView:
    """Pick the best body (plain text, then HTML, then OCR) and normalize it."""
    candidates = (
        ("text", raw.text_body),
        ("html", html_to_text(raw.html_body) if raw.html_body else ""),
        ("ocr", raw.ocr_text or ""),
    )

    text = ""
    origin = "none"
    for name, body in candidates:
        normalized = normalize_whitespace(body) if body else ""
        if not is_low_value(normalized, low_value_threshold):
            text = normalized
            origin = name
            break
        if normalized:
            logger.debug("Ignoring low-value %s body (%d chars)", name, len(normalized))

    return MessageView(
        sender=raw.sender.strip(),
        subject=normalize_whitespace(raw.subject),
        text=text,
        html=raw.html_body or "",
        origin=origin,
    )


class _HTMLTextExtractor(HTMLParser):
    """HTMLParser subclass that returns readable text from markup."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag in _SKIP_TAGS:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self._parts.append("\n")
        elif tag in _CELL_TAGS:
            self._parts.append(" ")

    def handle_endtag(self, tag: str) -> None:
        if tag in _SKIP_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in _BLOCK_TAGS:
            self._parts.append("\n")

    def handle_data(self, data: str) -> None:
        if not self._skip_depth:
            self._parts.append(data)

    def get_text(self) -> str:
        return "".join(self._parts)
