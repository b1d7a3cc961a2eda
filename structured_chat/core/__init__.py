"""Core infrastructure - compatibility tables, transformers and the completion loops."""

from .compatibility import (
    PROVIDER_SUPPORTED_MODES,
    PROVIDER_SUPPORTED_MODES_BY_MODEL,
    is_mode_supported,
    is_model_supported,
    validate_mode,
    validate_model,
)
from .transformers import (
    TransformerRegistry,
    register_params_transformer,
    transformer_registry,
)

__all__ = [
    "PROVIDER_SUPPORTED_MODES",
    "PROVIDER_SUPPORTED_MODES_BY_MODEL",
    "TransformerRegistry",
    "is_mode_supported",
    "is_model_supported",
    "register_params_transformer",
    "transformer_registry",
    "validate_mode",
    "validate_model",
]
