from .mode import Mode
from .client import AsyncInstructor, Instructor, from_openai
from .core.exceptions import (
    ClientError,
    ConfigurationError,
    IncompleteOutputException,
    ModeError,
    ResponseParsingError,
    StructuredChatError,
    UnsupportedModelError,
)
from .dsl import CompletionMeta, Partial, ResponseModel
from .utils.providers import Provider

__all__ = [
    "Instructor",
    "AsyncInstructor",
    "from_openai",
    "Mode",
    "Provider",
    "ResponseModel",
    "CompletionMeta",
    "Partial",
    "StructuredChatError",
    "ConfigurationError",
    "ModeError",
    "UnsupportedModelError",
    "ClientError",
    "ResponseParsingError",
    "IncompleteOutputException",
]
