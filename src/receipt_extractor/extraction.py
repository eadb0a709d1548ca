"""LLM-backed field extraction using pydantic-ai."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.settings import ModelSettings

from receipt_extractor.models import ModelFields

if TYPE_CHECKING:
    from receipt_extractor.config import ModelConfig
    from receipt_extractor.text import MessageView

logger = logging.getLogger(__name__)

_INSTRUCTIONS = """\
You are a receipt data extractor. Read the email below, which contains or \
forwards a purchase receipt, and return ONLY a JSON object with exactly these \
keys:

- vendor: the business that sold the goods (e.g. "Amazon", not \
"no-reply@amazon.com" and not a greeting like "Thank you")
- total_amount: the final total charged, as a number (e.g. 42.99)
- order_date: the purchase date as YYYY-MM-DD, NOT the email send date
- form_of_payment: "Card" or "Cash"
- card_type: one of "Visa", "MasterCard", "AMEX", "Discover", "Diners", \
"JCB", "UnionPay"
- card_last4: the last four digits of the card, as a string
- category: a short spending category (e.g. "Groceries", "Dining")
- tracking_number: the order, invoice or tracking number

Set any field you cannot find to null. Do not add commentary.\
"""

DEFAULT_MAX_BODY_CHARS = 12_000

_FENCE = re.compile(r"```[A-Za-z]*\s*(.*?)```", re.DOTALL)


class CompletionClient(Protocol):
    """A text-in, text-out completion service."""

    def complete(self, prompt: str) -> str: ...


def create_extraction_agent(config: ModelConfig) -> Agent[None, str]:
    """Create a pydantic-ai Agent bound to the configured Anthropic model."""
    model = AnthropicModel(
        config.model, provider=AnthropicProvider(api_key=config.api_key)
    )
    return Agent(
        model,
        model_settings=ModelSettings(
            max_tokens=config.max_tokens, timeout=config.timeout
        ),
    )


class AgentCompletionClient:
    """CompletionClient backed by a pydantic-ai Agent.

    Accepts an optional agent for dependency injection in tests.
    """

    def __init__(
        self, config: ModelConfig, *, agent: Agent[None, str] | None = None
    ) -> None:
        self._agent = agent if agent is not None else create_extraction_agent(config)

    def complete(self, prompt: str) -> str:
        result: Any = self._agent.run_sync(prompt)
        return str(result.output)


class ModelExtractor:
    """Extract receipt fields with a single best-effort completion call."""

    def __init__(
        self,
        client: CompletionClient,
        *,
        max_body_chars: int = DEFAULT_MAX_BODY_CHARS,
    ) -> None:
        self.client = client
        self.max_body_chars = max_body_chars

    def extract(self, view: MessageView) -> ModelFields:
        """Return the fields the model reported, or no fields on any failure."""
        prompt = build_prompt(view, max_body_chars=self.max_body_chars)
        try:
            reply = self.client.complete(prompt)
        except Exception:
            logger.warning(
                "Model completion failed; using deterministic extraction only",
                exc_info=True,
            )
            return ModelFields()
        return parse_model_reply(reply)


def build_prompt(view: MessageView, *, max_body_chars: int) -> str:
    """Build the extraction prompt, truncating the body to the budget."""
    body = view.text or "(no body content)"
    if len(body) > max_body_chars:
        logger.debug("Truncating body from %d to %d chars", len(body), max_body_chars)
        body = body[:max_body_chars]

    parts = [
        _INSTRUCTIONS,
        "",
        f"Subject: {view.subject}",
        f"From: {view.sender}",
        "",
        "--- Email Body ---",
        body,
    ]
    return "\n".join(parts)


def parse_model_reply(reply: str) -> ModelFields:
    """Parse the JSON object out of a model reply.

    Markdown fences and surrounding prose are tolerated. A reply without a
    usable JSON object yields empty fields rather than an error.
    """
    candidate = _json_object_text(reply)
    if candidate is None:
        logger.warning("Model reply contained no JSON object")
        return ModelFields()
    try:
        return ModelFields.model_validate_json(candidate)
    except ValidationError:
        logger.warning("Model reply was not valid JSON", exc_info=True)
        return ModelFields()


def _json_object_text(reply: str) -> str | None:
    """Return the text between the first ``{`` and the last ``}``."""
    text = reply.strip()
    fenced = _FENCE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]
