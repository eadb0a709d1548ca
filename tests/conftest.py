"""Shared test fixtures."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from receipt_extractor.config import ModelConfig, PipelineConfig
from receipt_extractor.models import RawMessage
from receipt_extractor.text import MessageView

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def received_at() -> datetime:
    return datetime(2025, 6, 15, 10, 30, 0, tzinfo=UTC)


@pytest.fixture
def make_view() -> Callable[..., MessageView]:
    """Build a MessageView directly, bypassing normalization."""

    def _make(
        text: str = "",
        *,
        html: str = "",
        sender: str = "orders@example.com",
        subject: str = "Your receipt",
    ) -> MessageView:
        return MessageView(
            sender=sender, subject=subject, text=text, html=html, origin="text"
        )

    return _make


@pytest.fixture
def sample_raw_message(received_at: datetime) -> RawMessage:
    """Provide a realistic plain-text receipt email."""
    return RawMessage(
        sender="Best Buy <no-reply@emailinfo.bestbuy.com>",
        subject="Your Best Buy order confirmation",
        received_at=received_at,
        message_id="<test-123@example.com>",
        text_body=(
            "Thank you for your purchase from Best Buy.\n"
            "Order #BBY01-806552913124\n"
            "Order Date: June 3, 2025\n"
            "\n"
            "USB-C Cable 1 $19.99\n"
            "Subtotal $19.99\n"
            "Total Tax $1.65\n"
            "Total $21.64\n"
            "\n"
            "Paid with Visa xxxxxxxxxxxx4242\n"
        ),
    )


@pytest.fixture
def model_config() -> ModelConfig:
    return ModelConfig(api_key="sk-ant-test-key")  # pragma: allowlist secret


@pytest.fixture
def pipeline_config(model_config: ModelConfig) -> PipelineConfig:
    return PipelineConfig(model=model_config)


@pytest.fixture
def completion_client() -> MagicMock:
    """A completion client replying with an empty JSON object."""
    client = MagicMock()
    client.complete.return_value = "{}"
    return client
