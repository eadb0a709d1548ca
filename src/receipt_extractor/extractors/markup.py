"""Image and table-cell scanning over raw receipt HTML."""

from __future__ import annotations

from dataclasses import dataclass, field
from html.parser import HTMLParser


@dataclass(frozen=True)
class Image:
    """An ``<img>`` tag's identifying attributes."""

    src: str
    alt: str
    hints: str

    def looks_like_logo(self) -> bool:
        return "logo" in f"{self.src} {self.alt} {self.hints}".lower()


@dataclass
class Cell:
    """A table cell's text and the images inside it."""

    parts: list[str] = field(default_factory=list)
    images: list[Image] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join("".join(self.parts).split())


@dataclass
class ParsedHtml:
    """Images in document order and table rows as lists of cells."""

    images: list[Image] = field(default_factory=list)
    rows: list[list[Cell]] = field(default_factory=list)


def parse_html(html: str) -> ParsedHtml:
    """Collect images and table rows from an HTML document."""
    parser = _ImageTableParser()
    parser.feed(html)
    parser.close()
    parser.flush_open_rows()
    return parser.result


class _ImageTableParser(HTMLParser):
    """HTMLParser subclass tracking images and (nested) table rows."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.result = ParsedHtml()
        self._rows: list[list[Cell]] = []
        self._cells: list[Cell] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "tr":
            self._rows.append([])
        elif tag in ("td", "th"):
            cell = Cell()
            if self._rows:
                self._rows[-1].append(cell)
            self._cells.append(cell)
        elif tag == "img":
            self._add_image(dict(attrs))

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, str | None]]
    ) -> None:
        if tag == "img":
            self._add_image(dict(attrs))

    def handle_endtag(self, tag: str) -> None:
        if tag == "tr" and self._rows:
            row = self._rows.pop()
            if row:
                self.result.rows.append(row)
        elif tag in ("td", "th") and self._cells:
            self._cells.pop()

    def handle_data(self, data: str) -> None:
        if self._cells:
            self._cells[-1].parts.append(data)

    def flush_open_rows(self) -> None:
        """Keep rows whose closing tag never arrived."""
        while self._rows:
            row = self._rows.pop()
            if row:
                self.result.rows.append(row)

    def _add_image(self, attrs: dict[str, str | None]) -> None:
        image = Image(
            src=attrs.get("src") or "",
            alt=(attrs.get("alt") or "").strip(),
            hints=" ".join(
                attrs.get(name) or "" for name in ("class", "id", "title", "name")
            ),
        )
        self.result.images.append(image)
        if self._cells:
            self._cells[-1].images.append(image)
