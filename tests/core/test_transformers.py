"""Tests for the params transformer registry."""

import copy

import pytest

from structured_chat.core.exceptions import ConfigurationError
from structured_chat.core.transformers import (
    TransformerRegistry,
    register_params_transformer,
    remove_additional_properties,
    transformer_registry,
)
from structured_chat.mode import Mode
from structured_chat.utils.providers import Provider


def _tools_params():
    return {
        "model": "m",
        "messages": [],
        "tools": [
            {
                "type": "function",
                "function": {
                    "name": "User",
                    "parameters": {
                        "type": "object",
                        "properties": {"name": {"type": "string"}},
                        "additionalProperties": False,
                    },
                },
            }
        ],
    }


def _json_schema_params():
    return {
        "model": "m",
        "messages": [],
        "response_format": {
            "type": "json_object",
            "schema": {"type": "object", "additionalProperties": False},
        },
    }


@pytest.mark.parametrize("provider", [Provider.ANYSCALE, Provider.TOGETHER])
@pytest.mark.parametrize("mode", [Mode.TOOLS, Mode.JSON_SCHEMA])
def test_builtin_transformers_registered(provider, mode):
    assert transformer_registry.get(provider, mode) is remove_additional_properties


@pytest.mark.parametrize("provider", [Provider.OPENAI, Provider.ANTHROPIC, Provider.OTHER])
def test_no_transformer_is_identity(provider):
    params = _tools_params()
    assert transformer_registry.get(provider, Mode.TOOLS) is None
    assert transformer_registry.apply(provider, Mode.TOOLS, params) is params


def test_remove_additional_properties_tools():
    params = _tools_params()
    original = copy.deepcopy(params)

    result = transformer_registry.apply(Provider.TOGETHER, Mode.TOOLS, params)

    assert "additionalProperties" not in result["tools"][0]["function"]["parameters"]
    # Input is left untouched
    assert params == original


def test_remove_additional_properties_json_schema():
    params = _json_schema_params()

    result = transformer_registry.apply(Provider.ANYSCALE, Mode.JSON_SCHEMA, params)

    assert result["response_format"]["schema"] == {"type": "object"}
    assert "additionalProperties" in params["response_format"]["schema"]


def test_registry_rejects_duplicates():
    registry = TransformerRegistry()
    registry.register(Provider.OTHER, Mode.JSON, lambda p: p)

    with pytest.raises(ConfigurationError, match="already registered"):
        registry.register(Provider.OTHER, Mode.JSON, lambda p: p)


def test_register_decorator():
    @register_params_transformer(Provider.ANTHROPIC, Mode.MD_JSON)
    def add_flag(params):
        return {**params, "flag": True}

    try:
        assert transformer_registry.is_registered(Provider.ANTHROPIC, Mode.MD_JSON)
        result = transformer_registry.apply(
            Provider.ANTHROPIC, Mode.MD_JSON, {"messages": []}
        )
        assert result == {"messages": [], "flag": True}
    finally:
        transformer_registry.unregister(Provider.ANTHROPIC, Mode.MD_JSON)


def test_list_transformers():
    keys = transformer_registry.list_transformers()
    assert (Provider.TOGETHER, Mode.TOOLS) in keys
    assert (Provider.ANYSCALE, Mode.JSON_SCHEMA) in keys
