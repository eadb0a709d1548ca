"""Tests for receipt_extractor.extractors.amount."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from receipt_extractor.extractors.amount import extract_total_amount
from receipt_extractor.models import Source

if TYPE_CHECKING:
    from collections.abc import Callable

    from receipt_extractor.text import MessageView


class TestExtractTotalAmount:
    """Tests for extract_total_amount."""

    def test_total_tender_beats_total_tax(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        view = make_view("Total Tender $45.00\nTotal Tax $3.00")
        result = extract_total_amount(view)
        assert result.value == Decimal("45.00")
        assert result.strategy == "total_tender"

    def test_total_tender_beats_later_total(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        view = make_view("Total $50.00\nTotal Tender $45.00\nChange Due $5.00")
        assert extract_total_amount(view).value == Decimal("45.00")

    def test_generic_total_skips_tax_and_discount(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        view = make_view(
            "Subtotal $40.00\nTotal Discount $2.00\nTotal $41.30\nTotal Tax $3.30"
        )
        result = extract_total_amount(view)
        assert result.value == Decimal("41.30")
        assert result.source is Source.REGEX
        assert result.strategy == "total_line"

    def test_last_total_line_wins(self, make_view: Callable[..., MessageView]) -> None:
        view = make_view("Order Total: $10.00\nShipping $5.00\nGrand Total: $15.00")
        assert extract_total_amount(view).value == Decimal("15.00")

    def test_thousands_separator(self, make_view: Callable[..., MessageView]) -> None:
        view = make_view("Total: $1,234.56")
        assert extract_total_amount(view).value == Decimal("1234.56")

    def test_dash_separator_is_not_a_sign(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        view = make_view("Total - $45.00")
        assert extract_total_amount(view).value == Decimal("45.00")

    def test_falls_back_to_last_amount(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        view = make_view("Coffee $4.50\nMuffin $3.25\nCharged $7.75 to your card")
        result = extract_total_amount(view)
        assert result.value == Decimal("7.75")
        assert result.source is Source.INFERRED
        assert result.strategy == "last_amount"

    def test_negative_only_with_refund(
        self, make_view: Callable[..., MessageView]
    ) -> None:
        refund = make_view("Your refund has been processed.\nTotal -$12.00")
        assert extract_total_amount(refund).value == Decimal("-12.00")

        sale = make_view("Credit applied ($12.00)\nTotal $30.00")
        assert extract_total_amount(sale).value == Decimal("30.00")

    @pytest.mark.parametrize("text", ["", "No amounts here", "Order 12345 qty 3"])
    def test_absent(self, make_view: Callable[..., MessageView], text: str) -> None:
        result = extract_total_amount(make_view(text))
        assert not result.found
        assert result.source is Source.NONE
