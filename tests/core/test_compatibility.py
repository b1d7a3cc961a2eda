"""Tests for the provider/mode/model compatibility tables."""

import logging

import pytest

from structured_chat.core.compatibility import (
    PROVIDER_SUPPORTED_MODES,
    PROVIDER_SUPPORTED_MODES_BY_MODEL,
    is_mode_supported,
    is_model_supported,
    validate_mode,
    validate_model,
)
from structured_chat.core.exceptions import (
    ConfigurationError,
    ModeError,
    UnsupportedModelError,
)
from structured_chat.mode import Mode
from structured_chat.utils.providers import Provider

UNSUPPORTED_PAIRS = [
    (provider, mode)
    for provider in Provider
    for mode in Mode
    if mode not in PROVIDER_SUPPORTED_MODES[provider]
]


def test_every_provider_has_entries():
    for provider in Provider:
        assert provider in PROVIDER_SUPPORTED_MODES
        assert provider in PROVIDER_SUPPORTED_MODES_BY_MODEL


def test_other_provider_supports_everything():
    for mode in Mode:
        assert is_mode_supported(Provider.OTHER, mode)
        assert is_model_supported(Provider.OTHER, mode, "any-local-model")


@pytest.mark.parametrize("provider,mode", UNSUPPORTED_PAIRS)
def test_unsupported_mode_raises(provider, mode):
    with pytest.raises(ModeError) as exc_info:
        validate_mode(provider, mode)

    assert isinstance(exc_info.value, ConfigurationError)
    assert exc_info.value.mode == mode.name
    assert exc_info.value.provider == provider.name


def test_unknown_provider_logs(caplog):
    with caplog.at_level(logging.INFO, logger="structured_chat"):
        validate_mode(Provider.OTHER, Mode.JSON_SCHEMA)

    assert "Unknown provider" in caplog.text


def test_openai_bypasses_model_check():
    # JSON is restricted to a handful of models, but OpenAI is never checked.
    assert is_model_supported(Provider.OPENAI, Mode.JSON, "gpt-4o")
    validate_model(Provider.OPENAI, Mode.JSON, "gpt-4o")


def test_wildcard_accepts_any_model():
    assert is_model_supported(Provider.ANTHROPIC, Mode.TOOLS, "claude-3-opus")
    assert is_model_supported(Provider.TOGETHER, Mode.MD_JSON, "whatever")


def test_listed_model_accepted():
    validate_model(
        Provider.TOGETHER, Mode.TOOLS, "togethercomputer/CodeLlama-34b-Instruct"
    )
    validate_model(
        Provider.ANYSCALE, Mode.JSON_SCHEMA, "mistralai/Mistral-7B-Instruct-v0.1"
    )


def test_unlisted_model_rejected():
    with pytest.raises(UnsupportedModelError) as exc_info:
        validate_model(Provider.ANYSCALE, Mode.TOOLS, "meta-llama/Llama-2-70b")

    assert exc_info.value.model == "meta-llama/Llama-2-70b"
    assert "not supported by provider ANYSCALE in mode TOOLS" in str(exc_info.value)


def test_mode_without_model_entry_supports_nothing():
    assert is_mode_supported(Provider.TOGETHER, Mode.JSON)
    assert not is_model_supported(
        Provider.TOGETHER, Mode.JSON, "mistralai/Mixtral-8x7B-Instruct-v0.1"
    )
