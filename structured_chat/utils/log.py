from __future__ import annotations

import logging


class DebugGatedLogger(logging.LoggerAdapter):
    """Logger adapter that drops debug records unless ``debug`` is on.

    Records at info and above always reach the wrapped logger; handlers and
    levels beyond that are left to the application's logging configuration.
    """

    def __init__(self, logger: logging.Logger, debug: bool = False) -> None:
        super().__init__(logger, {})
        self.debug_enabled = debug

    def isEnabledFor(self, level: int) -> bool:
        if level <= logging.DEBUG and not self.debug_enabled:
            return False
        return super().isEnabledFor(level)


def get_logger(debug: bool = False) -> DebugGatedLogger:
    return DebugGatedLogger(logging.getLogger("structured_chat"), debug)
