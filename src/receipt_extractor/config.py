"""Configuration via environment variables.

Only entry points read the environment; the pipeline itself is handed a
``PipelineConfig``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from receipt_extractor.extraction import DEFAULT_MAX_BODY_CHARS
from receipt_extractor.text import DEFAULT_LOW_VALUE_THRESHOLD

load_dotenv()

DEFAULT_LLM_MODEL = "claude-haiku-4-5-20251001"


@dataclass(frozen=True)
class ModelConfig:
    """Completion model configuration."""

    api_key: str
    model: str = DEFAULT_LLM_MODEL
    timeout: float = 30.0
    max_body_chars: int = DEFAULT_MAX_BODY_CHARS
    max_tokens: int = 1024


@dataclass(frozen=True)
class PipelineConfig:
    """Extraction pipeline configuration.

    ``model`` is None when the pipeline runs on deterministic extraction only.
    """

    model: ModelConfig | None = None
    low_value_threshold: int = DEFAULT_LOW_VALUE_THRESHOLD


def get_database_url() -> str:
    """Return the DATABASE_URL from the environment."""
    url = os.environ.get("DATABASE_URL")
    if not url:
        msg = "DATABASE_URL environment variable is required"
        raise ValueError(msg)
    return url


def get_anthropic_api_key() -> str:
    """Return the ANTHROPIC_API_KEY from the environment."""
    key = os.environ.get("ANTHROPIC_API_KEY")
    if not key:
        msg = "ANTHROPIC_API_KEY environment variable is required"
        raise ValueError(msg)
    return key


def get_llm_model() -> str:
    """Return the LLM model identifier.

    Defaults to claude-haiku-4-5-20251001.
    """
    return os.environ.get("LLM_MODEL", DEFAULT_LLM_MODEL)


def _get_number(name: str, default: str, kind: type[int] | type[float]) -> float:
    raw = os.environ.get(name, default)
    try:
        value = kind(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValueError(msg) from None
    if value <= 0:
        msg = f"{name} must be positive, got {raw!r}"
        raise ValueError(msg)
    return value


def get_llm_timeout() -> float:
    """Return LLM_TIMEOUT in seconds (default 30)."""
    return float(_get_number("LLM_TIMEOUT", "30", float))


def get_max_body_chars() -> int:
    """Return LLM_MAX_BODY_CHARS, the prompt body budget (default 12000)."""
    return int(_get_number("LLM_MAX_BODY_CHARS", "12000", int))


def get_low_value_threshold() -> int:
    """Return LOW_VALUE_THRESHOLD in characters."""
    return int(
        _get_number("LOW_VALUE_THRESHOLD", str(DEFAULT_LOW_VALUE_THRESHOLD), int)
    )


def get_model_config() -> ModelConfig:
    """Build completion model configuration from environment variables.

    Required: ANTHROPIC_API_KEY
    Optional: LLM_MODEL, LLM_TIMEOUT, LLM_MAX_BODY_CHARS
    """
    return ModelConfig(
        api_key=get_anthropic_api_key(),
        model=get_llm_model(),
        timeout=get_llm_timeout(),
        max_body_chars=get_max_body_chars(),
    )


def get_pipeline_config(*, use_model: bool = True) -> PipelineConfig:
    """Build the pipeline configuration from environment variables."""
    return PipelineConfig(
        model=get_model_config() if use_model else None,
        low_value_threshold=get_low_value_threshold(),
    )
