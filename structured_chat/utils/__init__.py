from .log import DebugGatedLogger, get_logger
from .providers import Provider, get_provider

__all__ = ["DebugGatedLogger", "Provider", "get_logger", "get_provider"]
