from .request import build_request
from .response import extract_payload, format_validation_error, parse_payload

__all__ = ["build_request", "extract_payload", "format_validation_error", "parse_payload"]
