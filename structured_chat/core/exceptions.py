from __future__ import annotations

from typing import Any


class StructuredChatError(Exception):
    """Base exception for all structured_chat errors."""

    pass


class ConfigurationError(StructuredChatError):
    """Exception raised for configuration-related errors.

    These are raised before any request reaches the transport and are never
    retried.
    """

    pass


class ModeError(ConfigurationError):
    """Exception raised when a mode is not supported by the detected provider."""

    def __init__(
        self,
        mode: str,
        provider: str,
        valid_modes: list[str],
        *args: Any,
        **kwargs: Any,
    ):
        self.mode = mode
        self.provider = provider
        self.valid_modes = valid_modes
        message = (
            f"Mode {mode} is not supported by provider {provider}. "
            f"Valid modes: {', '.join(valid_modes)}"
        )
        super().__init__(message, *args, **kwargs)


class UnsupportedModelError(ConfigurationError):
    """Exception raised when a model can't be used with the provider and mode."""

    def __init__(
        self,
        model: str,
        provider: str,
        mode: str,
        *args: Any,
        **kwargs: Any,
    ):
        self.model = model
        self.provider = provider
        self.mode = mode
        message = f"Model {model} is not supported by provider {provider} in mode {mode}"
        super().__init__(message, *args, **kwargs)


class ClientError(ConfigurationError):
    """Exception raised when the wrapped client can't make completion calls."""

    pass


class ResponseParsingError(ValueError, StructuredChatError):
    """Exception raised when the completion payload is not well-formed JSON.

    Parsing failures count against the same retry budget as validation
    failures, but no correction message is generated for them.

    Note: This exception inherits from both ValueError and StructuredChatError
    so callers catching ValueError keep working.

    Attributes:
        mode: The mode being used when parsing failed
        raw_response: The raw payload that failed to parse (if available)
    """

    def __init__(
        self,
        message: str,
        *args: Any,
        mode: str | None = None,
        raw_response: Any | None = None,
        **kwargs: Any,
    ):
        self.mode = mode
        self.raw_response = raw_response
        context = f" (mode: {mode})" if mode else ""
        super().__init__(f"{message}{context}", *args, **kwargs)


class IncompleteOutputException(ResponseParsingError):
    """Exception raised when the output was cut off by the max tokens limit."""

    def __init__(
        self,
        *args: Any,
        last_completion: Any | None = None,
        message: str = "The output is incomplete due to a max_tokens length limit.",
        **kwargs: Any,
    ):
        self.last_completion = last_completion
        super().__init__(message, *args, **kwargs)
