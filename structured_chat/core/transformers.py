"""Provider specific request rewrites.

Maps (Provider, Mode) tuples to pure functions that take the request kwargs
built for a mode and return the shape a given provider expects.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

from ..mode import Mode
from ..utils.providers import Provider
from .exceptions import ConfigurationError

ParamsTransformer = Callable[[dict[str, Any]], dict[str, Any]]


class TransformerRegistry:
    """Registry of params transformers keyed by (provider, mode).

    Example:
        >>> registry.register(Provider.TOGETHER, Mode.TOOLS, strip_keys)
        >>> kwargs = registry.apply(Provider.TOGETHER, Mode.TOOLS, kwargs)
    """

    def __init__(self) -> None:
        self._transformers: dict[tuple[Provider, Mode], ParamsTransformer] = {}

    def register(
        self,
        provider: Provider,
        mode: Mode,
        transformer: ParamsTransformer,
    ) -> None:
        """Register a transformer for a provider and mode.

        Raises:
            ConfigurationError: If a transformer is already registered
        """
        key = (provider, mode)
        if key in self._transformers:
            raise ConfigurationError(f"Transformer for {key} is already registered")
        self._transformers[key] = transformer

    def unregister(self, provider: Provider, mode: Mode) -> None:
        self._transformers.pop((provider, mode), None)

    def get(self, provider: Provider, mode: Mode) -> ParamsTransformer | None:
        return self._transformers.get((provider, mode))

    def apply(
        self, provider: Provider, mode: Mode, kwargs: dict[str, Any]
    ) -> dict[str, Any]:
        """Run the registered transformer, or return ``kwargs`` untouched."""
        transformer = self.get(provider, mode)
        if transformer is None:
            return kwargs
        return transformer(kwargs)

    def is_registered(self, provider: Provider, mode: Mode) -> bool:
        return (provider, mode) in self._transformers

    def list_transformers(self) -> list[tuple[Provider, Mode]]:
        return sorted(self._transformers, key=lambda k: (k[0].value, k[1].value))


# Global registry instance
transformer_registry = TransformerRegistry()


def register_params_transformer(provider: Provider, *modes: Mode):
    """Decorator to register a function as the transformer for ``modes``."""

    def decorator(func: ParamsTransformer) -> ParamsTransformer:
        for mode in modes:
            transformer_registry.register(provider, mode, func)
        return func

    return decorator


@register_params_transformer(Provider.ANYSCALE, Mode.TOOLS, Mode.JSON_SCHEMA)
@register_params_transformer(Provider.TOGETHER, Mode.TOOLS, Mode.JSON_SCHEMA)
def remove_additional_properties(params: dict[str, Any]) -> dict[str, Any]:
    """Drop ``additionalProperties`` from the schema, which these hosts reject."""
    params = copy.deepcopy(params)

    response_format = params.get("response_format")
    if isinstance(response_format, dict) and isinstance(
        response_format.get("schema"), dict
    ):
        response_format["schema"].pop("additionalProperties", None)

    for tool in params.get("tools") or []:
        parameters = tool.get("function", {}).get("parameters")
        if isinstance(parameters, dict):
            parameters.pop("additionalProperties", None)

    return params
