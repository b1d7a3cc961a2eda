from .partial import Partial, partial_model
from .response_model import CompletionMeta, ResponseModel

__all__ = ["CompletionMeta", "Partial", "ResponseModel", "partial_model"]
