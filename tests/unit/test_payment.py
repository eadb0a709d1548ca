"""Tests for receipt_extractor.extractors.payment."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import pytest

from receipt_extractor.extractors.markup import parse_html
from receipt_extractor.extractors.payment import extract_payment
from receipt_extractor.models import Source

if TYPE_CHECKING:
    from collections.abc import Callable

    from receipt_extractor.text import MessageView

CARD_TABLE_HTML = """
<table>
  <tr><td>Payment method</td></tr>
  <tr>
    <td><img src="https://static.example.com/cards/mastercard.png" alt=""></td>
    <td>&bull;&bull;&bull;&bull; 5521</td>
  </tr>
</table>
"""


def _values(result: dict) -> tuple:
    return (
        result["form_of_payment"].value,
        result["card_type"].value,
        result["card_last4"].value,
    )


class TestBrandWithDigits:
    """A card brand next to a masked number."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Visa xxxxxxxxxx1234", ("Card", "Visa", "1234")),
            (
                "Paid with MasterCard ****-****-****-9876",
                ("Card", "MasterCard", "9876"),
            ),
            ("American Express •••• 1005", ("Card", "AMEX", "1005")),
            ("AMEX credit card ending in 3003", ("Card", "AMEX", "3003")),
            ("Card: **** 4444 (Discover)", ("Card", "Discover", "4444")),
            ("Diners Club ***2020", ("Card", "Diners", "2020")),
            ("JCB xx 7777", ("Card", "JCB", "7777")),
            ("Union Pay ****8888", ("Card", "UnionPay", "8888")),
        ],
    )
    def test_brands(
        self,
        make_view: Callable[..., MessageView],
        text: str,
        expected: tuple[str, str, str],
    ) -> None:
        result = extract_payment(make_view(text))
        assert _values(result) == expected
        assert result["card_type"].source is Source.REGEX

    def test_needs_exactly_four_digits(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        result = extract_payment(make_view("Visa ****12345"))
        assert result["card_last4"].value is None


class TestAccountLine:
    """An ``Account:`` line plus a brand elsewhere in the message."""

    def test_account_line(self, make_view: Callable[..., MessageView]) -> None:
        text = "Payment Type: VISA\nAccount: ************6789\nTotal $20.00"
        result = extract_payment(make_view(text))
        assert _values(result) == ("Card", "Visa", "6789")
        assert result["card_last4"].strategy == "account_line"

    def test_account_line_without_brand(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        result = extract_payment(make_view("Account: ************6789"))
        assert result["card_type"].value is None


class TestHtmlCardImage:
    """Card network logos in HTML tables."""

    def test_image_and_adjacent_cell(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        result = extract_payment(make_view("Payment method", html=CARD_TABLE_HTML))
        assert _values(result) == ("Card", "MasterCard", "5521")
        assert result["card_type"].source is Source.HTML_LOGO

    def test_text_match_wins(self, make_view: Callable[..., MessageView]) -> None:
        view = make_view("Visa ****1111", html=CARD_TABLE_HTML)
        assert _values(extract_payment(view)) == ("Card", "Visa", "1111")

    def test_parse_html_rows(self) -> None:
        parsed = parse_html(CARD_TABLE_HTML)
        assert len(parsed.rows) == 2
        assert parsed.rows[1][1].text == "•••• 5521"
        assert parsed.rows[1][0].images[0].src.endswith("mastercard.png")


class TestInferred:
    """Payment inferred from keywords alone."""

    def test_contactless(self, make_view: Callable[..., MessageView]) -> None:
        result = extract_payment(make_view("Contactless payment approved"))
        assert _values(result) == ("Card", None, None)
        assert result["form_of_payment"].source is Source.INFERRED
        assert not result["card_type"].found

    def test_cash(self, make_view: Callable[..., MessageView]) -> None:
        result = extract_payment(make_view("Cash $20.00\nChange $2.50"))
        assert _values(result) == ("Cash", None, None)

    def test_cash_back_is_not_cash(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        result = extract_payment(make_view("Paid by debit card. Cash back $20.00"))
        assert not result["form_of_payment"].found

    def test_nothing(self, make_view: Callable[..., MessageView]) -> None:
        result = extract_payment(make_view("Total $5.00"))
        assert _values(result) == (None, None, None)


class TestDecorativeLines:
    """Separator lines of mask glyphs without digits."""

    @pytest.mark.parametrize("glyph", ["*", "x", "•", "*-"])
    def test_long_separator_line_is_fast(
        self, make_view: Callable[..., MessageView], glyph: str
    ) -> None:
        text = "Thanks!\n" + glyph * 200 + "\nTotal $5.00\nVisa card"
        started = time.perf_counter()
        result = extract_payment(make_view(text))
        assert time.perf_counter() - started < 1.0
        assert not result["card_last4"].found

    def test_separator_line_before_masked_card(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        text = "*" * 60 + "\nVisa ****4242\n" + "*" * 60
        assert _values(extract_payment(make_view(text))) == ("Card", "Visa", "4242")
