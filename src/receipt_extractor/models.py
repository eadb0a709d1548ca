"""Domain, extraction and record models for receipt extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, Generic, Literal, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from receipt_extractor.money import AMOUNT_MAX_DIGITS, parse_amount
from receipt_extractor.taxonomy import OTHER, TAXONOMY

T = TypeVar("T")

FormOfPayment = Literal["Card", "Cash"]
CardNetwork = Literal[
    "Visa", "MasterCard", "AMEX", "Discover", "Diners", "JCB", "UnionPay"
]

FIELD_NAMES = (
    "vendor",
    "total_amount",
    "order_date",
    "form_of_payment",
    "card_type",
    "card_last4",
    "category",
    "tracking_number",
)

_BRAND_ALIASES = {
    "visa": "Visa",
    "mastercard": "MasterCard",
    "master card": "MasterCard",
    "amex": "AMEX",
    "american express": "AMEX",
    "discover": "Discover",
    "diners": "Diners",
    "diners club": "Diners",
    "jcb": "JCB",
    "unionpay": "UnionPay",
    "union pay": "UnionPay",
}


def canonical_card_brand(name: str | None) -> str | None:
    """Map a card network mention onto the canonical short name."""
    if not name:
        return None
    key = re.sub(r"\s+", " ", name.strip().lower())
    return _BRAND_ALIASES.get(key)


class Source(StrEnum):
    """Where an extracted value came from."""

    MODEL = "model"
    REGEX = "regex"
    HTML_LOGO = "html-logo"
    CONTEXTUAL = "contextual"
    INFERRED = "inferred"
    NONE = "none"


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    """A single field value paired with its provenance."""

    value: T | None = None
    source: Source = Source.NONE
    strategy: str | None = None

    @property
    def found(self) -> bool:
        return self.value is not None


ABSENT: ExtractionResult[Any] = ExtractionResult()


@dataclass(frozen=True)
class Attachment:
    """An email attachment."""

    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class RawMessage:
    """An inbound email as handed over by the transport layer."""

    sender: str
    subject: str
    received_at: datetime
    text_body: str = ""
    html_body: str = ""
    ocr_text: str | None = None
    message_id: str | None = None
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)


class ModelFields(BaseModel):
    """Fields reported by the completion model.

    Values the model gets wrong (unparsable amounts, bad dates, unknown card
    networks) are coerced to None rather than rejected, so one bad field
    never discards the rest of the reply.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    vendor: str | None = Field(
        default=None, validation_alias=AliasChoices("vendor", "vendor_name")
    )
    total_amount: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("total_amount", "amount")
    )
    order_date: date | None = Field(
        default=None, validation_alias=AliasChoices("order_date", "date")
    )
    form_of_payment: FormOfPayment | None = None
    card_type: CardNetwork | None = None
    card_last4: str | None = None
    category: str | None = None
    tracking_number: str | None = None

    @field_validator("vendor", "category", "tracking_number", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, bool):
            return None
        text = str(value).strip()
        if not text or text.lower() in {"null", "none", "n/a", "unknown"}:
            return None
        return text

    @field_validator("total_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int | float | Decimal):
            return parse_amount(str(value))
        if isinstance(value, str):
            return parse_amount(value)
        return None

    @field_validator("order_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> date | None:
        if isinstance(value, date):
            return value
        if not isinstance(value, str) or not value.strip():
            return None
        # Imported lazily: the date extractor depends on this module.
        from receipt_extractor.extractors.dates import parse_date_text

        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return parse_date_text(value)

    @field_validator("form_of_payment", mode="before")
    @classmethod
    def _coerce_form(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        lowered = value.strip().lower()
        if lowered == "cash":
            return "Cash"
        if "card" in lowered or canonical_card_brand(lowered) or lowered in {
            "credit",
            "debit",
            "contactless",
        }:
            return "Card"
        return None

    @field_validator("card_type", mode="before")
    @classmethod
    def _coerce_brand(cls, value: Any) -> str | None:
        if not isinstance(value, str):
            return None
        return canonical_card_brand(value)

    @field_validator("card_last4", mode="before")
    @classmethod
    def _coerce_last4(cls, value: Any) -> str | None:
        if value is None or isinstance(value, bool):
            return None
        digits = re.sub(r"\D", "", str(value))
        if len(digits) < 4:
            return None
        return digits[-4:]


Amount = Annotated[Decimal, Field(max_digits=AMOUNT_MAX_DIGITS, decimal_places=2)]
Last4 = Annotated[str, Field(pattern=r"^\d{4}$")]


class ReceiptRecord(BaseModel):
    """Canonical receipt row handed to persistence.

    Every field is required so a record can never be built with a field
    omitted; unknown values are an explicit None.
    """

    model_config = ConfigDict(frozen=True)

    vendor: str | None
    vendor_name: str | None
    total_amount: Amount | None
    amount: Amount | None
    order_date: date | None
    form_of_payment: FormOfPayment | None
    card_type: CardNetwork | None
    card_last4: Last4 | None
    category: str
    tracking_number: str | None
    email_sender: str
    subject: str
    body_text: str
    body_html: str
    message_id: str | None
    received_at: datetime

    @field_validator("category")
    @classmethod
    def _category_in_taxonomy(cls, value: str) -> str:
        if value != OTHER and value not in TAXONOMY:
            msg = f"category {value!r} is not in the taxonomy"
            raise ValueError(msg)
        return value

    def to_row(self) -> dict[str, Any]:
        """Return the flat column/value mapping used for insertion."""
        return self.model_dump()


@dataclass(frozen=True)
class ProcessedReceipt:
    """A built record plus the source that won each field."""

    record: ReceiptRecord
    provenance: dict[str, Source]
