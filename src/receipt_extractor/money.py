"""Currency amount parsing and formatting."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

CENTS = Decimal("0.01")

# Matches the receipts.total_amount column, NUMERIC(14, 2).
AMOUNT_MAX_DIGITS = 14
MAX_AMOUNT = Decimal(10) ** (AMOUNT_MAX_DIGITS - 2) - CENTS

_CURRENCY_PREFIX = re.compile(r"^(?:USD|CAD|AUD|GBP|EUR|US|CA|A|C)(?=[$£€\d\s])")
_SYMBOLS = re.compile(r"[$£€¥\s ]")


def parse_amount(amount_str: str) -> Decimal | None:
    """Parse a currency string such as ``$1,234.56`` into a Decimal.

    Currency symbols, ISO prefixes and thousands separators are stripped.
    A leading minus sign or surrounding parentheses make the amount
    negative. The result is quantized to two fraction digits; amounts
    above ``MAX_AMOUNT`` are rejected.

    >>> parse_amount("$1,234.56")
    Decimal('1234.56')
    >>> parse_amount("($12.34)")
    Decimal('-12.34')
    """
    if not amount_str:
        return None

    cleaned = amount_str.strip()
    negative = False

    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1].strip()

    cleaned = _CURRENCY_PREFIX.sub("", cleaned.upper())
    cleaned = _SYMBOLS.sub("", cleaned)

    # "-$5.00" and "$-5.00" both leave a single leading minus here
    if cleaned.startswith("-"):
        negative = not negative
        cleaned = cleaned[1:]

    cleaned = cleaned.replace(",", "")
    if not re.fullmatch(r"\d+(?:\.\d+)?", cleaned):
        return None

    try:
        value = Decimal(cleaned).quantize(CENTS)
    except InvalidOperation:
        return None
    if value > MAX_AMOUNT:
        return None

    return -value if negative else value


def format_amount(amount: Decimal, symbol: str = "$") -> str:
    """Render an amount with a currency symbol and two fraction digits.

    >>> format_amount(Decimal("1234.5"))
    '$1,234.50'
    >>> format_amount(Decimal("-3"))
    '-$3.00'
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
