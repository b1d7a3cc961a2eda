"""Streaming completions as a sequence of partial models.

One transport call, no retries, no validation gate: every time the
accumulated payload parses to something new, a partial model is yielded.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Generator
from typing import TYPE_CHECKING, Any, Union

from pydantic import BaseModel

from ..dsl.partial import build_partial, parse_partial_json, partial_model
from ..dsl.response_model import ResponseModel, attach_meta
from ..mode import Mode
from ..processing.response import extract_chunk_text, extract_usage

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("structured_chat.stream")

Logger = Union[logging.Logger, logging.LoggerAdapter]


class PartialAccumulator:
    """Folds stream chunks into progressively more complete partial models."""

    def __init__(self, response_model: ResponseModel[Any], mode: Mode) -> None:
        self.partial_cls = partial_model(response_model.schema)
        self.mode = mode
        self.text = ""
        self.usage: Any | None = None
        self.latest: BaseModel | None = None
        self._last_data: Any = None

    def feed(self, chunk: Any) -> BaseModel | None:
        """Consume one chunk; return a new partial if the object changed."""
        usage = extract_usage(chunk)
        if usage is not None:
            self.usage = usage

        fragment = extract_chunk_text(chunk, self.mode)
        if not fragment:
            return None
        self.text += fragment

        data = parse_partial_json(self.text)
        if not isinstance(data, dict) or data == self._last_data:
            return None
        self._last_data = data

        self.latest = attach_meta(build_partial(self.partial_cls, data), self.usage)
        return self.latest

    def finish(self) -> None:
        # Usage usually arrives on a trailing chunk with no choices.
        if self.latest is not None and self.usage is not None:
            attach_meta(self.latest, self.usage)


def stream_sync(
    func: Callable[..., Any],
    response_model: ResponseModel[Any],
    mode: Mode,
    kwargs: dict[str, Any],
    log: Logger = logger,
) -> Generator[BaseModel, None, None]:
    """Yield partial models from a blocking streaming call.

    The transport is only called once the first value is requested.
    """
    accumulator = PartialAccumulator(response_model, mode)

    response = func(**{**kwargs, "stream": True})
    log.debug(f"raw stream completion response: {response}")

    for chunk in response:
        partial = accumulator.feed(chunk)
        if partial is not None:
            yield partial
    accumulator.finish()


async def stream_async(
    func: Callable[..., Awaitable[Any]],
    response_model: ResponseModel[Any],
    mode: Mode,
    kwargs: dict[str, Any],
    log: Logger = logger,
) -> AsyncGenerator[BaseModel, None]:
    """Async twin of ``stream_sync``."""
    accumulator = PartialAccumulator(response_model, mode)

    response = await func(**{**kwargs, "stream": True})
    log.debug(f"raw stream completion response: {response}")

    async for chunk in response:
        partial = accumulator.feed(chunk)
        if partial is not None:
            yield partial
    accumulator.finish()
