"""Provider/mode/model compatibility tables.

Consulted before any request is sent: the mode is checked once when the
client is built, the model on every call since it is request scoped.
"""

from __future__ import annotations

import logging

from ..mode import Mode
from ..utils.providers import Provider
from .exceptions import ModeError, UnsupportedModelError

logger = logging.getLogger("structured_chat.compatibility")

WILDCARD = "*"

PROVIDER_SUPPORTED_MODES: dict[Provider, list[Mode]] = {
    Provider.OTHER: [
        Mode.FUNCTIONS,
        Mode.TOOLS,
        Mode.JSON,
        Mode.MD_JSON,
        Mode.JSON_SCHEMA,
    ],
    Provider.OPENAI: [Mode.FUNCTIONS, Mode.TOOLS, Mode.JSON, Mode.MD_JSON],
    Provider.ANYSCALE: [Mode.TOOLS, Mode.JSON, Mode.JSON_SCHEMA, Mode.MD_JSON],
    Provider.TOGETHER: [Mode.TOOLS, Mode.JSON, Mode.JSON_SCHEMA, Mode.MD_JSON],
    Provider.ANTHROPIC: [Mode.MD_JSON, Mode.TOOLS],
}

_ANYSCALE_MODELS = [
    "mistralai/Mistral-7B-Instruct-v0.1",
    "mistralai/Mixtral-8x7B-Instruct-v0.1",
]

_TOGETHER_MODELS = [
    "mistralai/Mixtral-8x7B-Instruct-v0.1",
    "mistralai/Mistral-7B-Instruct-v0.1",
    "togethercomputer/CodeLlama-34b-Instruct",
]

PROVIDER_SUPPORTED_MODES_BY_MODEL: dict[Provider, dict[Mode, list[str]]] = {
    Provider.OTHER: {mode: [WILDCARD] for mode in Mode},
    Provider.OPENAI: {
        Mode.FUNCTIONS: [WILDCARD],
        Mode.TOOLS: [WILDCARD],
        Mode.JSON: [
            "gpt-3.5-turbo-1106",
            "gpt-4-1106-preview",
            "gpt-4-0125-preview",
            "gpt-4-turbo-preview",
        ],
        Mode.MD_JSON: [WILDCARD],
    },
    Provider.ANYSCALE: {
        Mode.MD_JSON: [WILDCARD],
        Mode.JSON_SCHEMA: _ANYSCALE_MODELS,
        Mode.TOOLS: _ANYSCALE_MODELS,
    },
    Provider.TOGETHER: {
        Mode.MD_JSON: [WILDCARD],
        Mode.JSON_SCHEMA: _TOGETHER_MODELS,
        Mode.TOOLS: _TOGETHER_MODELS,
    },
    Provider.ANTHROPIC: {
        Mode.MD_JSON: [WILDCARD],
        Mode.TOOLS: [WILDCARD],
    },
}


def is_mode_supported(provider: Provider, mode: Mode) -> bool:
    return mode in PROVIDER_SUPPORTED_MODES.get(provider, [])


def is_model_supported(provider: Provider, mode: Mode, model: str | None) -> bool:
    """Check whether ``model`` may be used with ``provider`` in ``mode``.

    OpenAI is always treated as compatible. A (provider, mode) pair without a
    model entry supports no models.
    """
    if provider == Provider.OPENAI:
        return True

    supported = PROVIDER_SUPPORTED_MODES_BY_MODEL.get(provider, {}).get(mode, [])
    return WILDCARD in supported or model in supported


def validate_mode(provider: Provider, mode: Mode) -> None:
    """Raise ``ModeError`` if ``provider`` can't serve ``mode`` at all."""
    if provider == Provider.OTHER:
        logger.info("Unknown provider - can't validate options.")

    if not is_mode_supported(provider, mode):
        raise ModeError(
            mode=mode.name,
            provider=provider.name,
            valid_modes=[m.name for m in PROVIDER_SUPPORTED_MODES.get(provider, [])],
        )


def validate_model(provider: Provider, mode: Mode, model: str | None) -> None:
    """Raise ``UnsupportedModelError`` if ``model`` isn't usable in ``mode``."""
    if not is_model_supported(provider, mode, model):
        raise UnsupportedModelError(
            model=str(model), provider=provider.name, mode=mode.name
        )
