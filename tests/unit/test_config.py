"""Tests for receipt_extractor.config."""

from __future__ import annotations

import pytest

from receipt_extractor.config import (
    DEFAULT_LLM_MODEL,
    ModelConfig,
    get_anthropic_api_key,
    get_database_url,
    get_llm_model,
    get_llm_timeout,
    get_low_value_threshold,
    get_max_body_chars,
    get_model_config,
    get_pipeline_config,
)


class TestGetDatabaseUrl:
    """Tests for get_database_url()."""

    def test_url_present(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql://localhost/receipts")
        assert get_database_url() == "postgresql://localhost/receipts"

    def test_url_missing_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        with pytest.raises(ValueError, match="DATABASE_URL"):
            get_database_url()


class TestGetAnthropicApiKey:
    """Tests for get_anthropic_api_key()."""

    def test_key_present(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test-key")
        assert get_anthropic_api_key() == "sk-ant-test-key"

    def test_key_missing_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            get_anthropic_api_key()


class TestGetLlmModel:
    """Tests for get_llm_model()."""

    def test_default_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LLM_MODEL", raising=False)
        assert get_llm_model() == "claude-haiku-4-5-20251001"

    def test_custom_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_MODEL", "claude-sonnet-4-20250514")
        assert get_llm_model() == "claude-sonnet-4-20250514"


class TestNumericSettings:
    """Tests for the numeric environment settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("LLM_TIMEOUT", "LLM_MAX_BODY_CHARS", "LOW_VALUE_THRESHOLD"):
            monkeypatch.delenv(name, raising=False)
        assert get_llm_timeout() == 30.0
        assert get_max_body_chars() == 12000
        assert get_low_value_threshold() == 25

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_TIMEOUT", "7.5")
        monkeypatch.setenv("LLM_MAX_BODY_CHARS", "4000")
        monkeypatch.setenv("LOW_VALUE_THRESHOLD", "40")
        assert get_llm_timeout() == 7.5
        assert get_max_body_chars() == 4000
        assert get_low_value_threshold() == 40

    def test_not_a_number_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="LLM_TIMEOUT must be a number"):
            get_llm_timeout()

    def test_non_positive_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LLM_MAX_BODY_CHARS", "0")
        with pytest.raises(ValueError, match="must be positive"):
            get_max_body_chars()


class TestGetModelConfig:
    """Tests for get_model_config() and get_pipeline_config()."""

    def test_model_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test-key")
        monkeypatch.delenv("LLM_MODEL", raising=False)
        monkeypatch.setenv("LLM_TIMEOUT", "10")
        monkeypatch.delenv("LLM_MAX_BODY_CHARS", raising=False)

        config = get_model_config()

        assert config == ModelConfig(
            api_key="sk-ant-test-key",  # pragma: allowlist secret
            model=DEFAULT_LLM_MODEL,
            timeout=10.0,
            max_body_chars=12000,
        )

    def test_config_is_frozen(self) -> None:
        config = ModelConfig(api_key="key")
        with pytest.raises(AttributeError):
            config.model = "other"  # type: ignore[misc]

    def test_pipeline_without_model(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.delenv("LOW_VALUE_THRESHOLD", raising=False)
        config = get_pipeline_config(use_model=False)
        assert config.model is None
        assert config.low_value_threshold == 25

    def test_pipeline_with_model_requires_key(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            get_pipeline_config()
