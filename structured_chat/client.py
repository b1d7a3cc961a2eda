from __future__ import annotations

import inspect
from collections.abc import AsyncGenerator, Generator
from typing import Any, Callable, TypeVar, overload

import openai
from pydantic import BaseModel
from tenacity import AsyncRetrying, Retrying

from .core.compatibility import validate_mode, validate_model
from .core.exceptions import ClientError
from .core.retry import MAX_RETRIES_DEFAULT, retry_async, retry_sync
from .core.stream import stream_async, stream_sync
from .core.transformers import transformer_registry
from .dsl.response_model import ResponseModel
from .mode import Mode
from .processing.request import build_request
from .utils.log import get_logger
from .utils.providers import Provider, get_provider

T = TypeVar("T", bound=BaseModel)


def _completion_create(client: Any) -> Callable[..., Any]:
    create = getattr(
        getattr(getattr(client, "chat", None), "completions", None), "create", None
    )
    if not callable(create):
        raise ClientError(
            "Unsupported client type: expected a client exposing chat.completions.create"
        )
    return create


def _forward(name: str) -> property:
    return property(
        lambda self: getattr(self.client, name),
        doc=f"The wrapped client's ``{name}``.",
    )


class _Completions:
    def __init__(self, instructor: Instructor) -> None:
        self._instructor = instructor

    def create(self, **kwargs: Any) -> Any:
        """Typed when ``response_model`` is given, the client's own call otherwise."""
        return self._instructor._dispatch(**kwargs)


class _AsyncCompletions(_Completions):
    async def create(self, **kwargs: Any) -> Any:
        return await self._instructor._dispatch(**kwargs)


class _Chat:
    def __init__(self, completions: _Completions) -> None:
        self.completions = completions


class Instructor:
    """Wraps an OpenAI-compatible client so completions come back as models.

    Provider and mode are fixed for the lifetime of the instance. Anything not
    defined here is read from the wrapped client.
    """

    client: Any
    mode: Mode
    provider: Provider
    debug: bool

    def __init__(
        self,
        client: Any,
        mode: Mode = Mode.TOOLS,
        debug: bool = False,
    ) -> None:
        self.client = client
        self.mode = mode
        self.debug = debug
        self.logger = get_logger(debug)

        base_url = getattr(client, "base_url", None)
        self.provider = get_provider(str(base_url) if base_url is not None else None)

        self.create_fn = _completion_create(client)
        validate_mode(self.provider, self.mode)
        self.chat = _Chat(self._completions_cls()(self))

    def _completions_cls(self) -> type[_Completions]:
        return _Completions

    models = _forward("models")
    embeddings = _forward("embeddings")
    files = _forward("files")
    images = _forward("images")
    audio = _forward("audio")
    moderations = _forward("moderations")
    base_url = _forward("base_url")
    api_key = _forward("api_key")

    def __getattr__(self, attr: str) -> Any:
        if attr == "client":
            raise AttributeError(attr)
        return getattr(self.client, attr)

    def _prepare(
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        kwargs: dict[str, Any],
    ) -> tuple[ResponseModel[T], dict[str, Any]]:
        validate_model(self.provider, self.mode, kwargs.get("model"))

        model = ResponseModel.from_model(response_model)
        new_kwargs = build_request(model, self.mode, messages=messages, **kwargs)
        new_kwargs = transformer_registry.apply(self.provider, self.mode, new_kwargs)
        return model, new_kwargs

    def _warn_streaming_retries(self, max_retries: Any) -> None:
        if max_retries:
            self.logger.warning("max_retries is not supported for streaming completions")

    def _dispatch(
        self,
        response_model: ResponseModel[T] | type[T] | None = None,
        max_retries: int | Retrying = MAX_RETRIES_DEFAULT,
        **kwargs: Any,
    ) -> Any:
        if response_model is None:
            return self.create_raw(**kwargs)
        if kwargs.pop("stream", False):
            self._warn_streaming_retries(max_retries)
            return self.create_partial(response_model=response_model, **kwargs)
        return self.create(
            response_model=response_model, max_retries=max_retries, **kwargs
        )

    def create(
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        max_retries: int | Retrying = MAX_RETRIES_DEFAULT,
        **kwargs: Any,
    ) -> T:
        """Return a validated ``response_model`` instance.

        Validation failures are fed back to the model as a correction and
        retried up to ``max_retries`` times; the last error is raised as-is.
        """
        model, _ = self.create_with_completion(
            response_model=response_model,
            messages=messages,
            max_retries=max_retries,
            **kwargs,
        )
        return model

    def create_with_completion(
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        max_retries: int | Retrying = MAX_RETRIES_DEFAULT,
        **kwargs: Any,
    ) -> tuple[T, Any]:
        kwargs.pop("stream", None)
        model, new_kwargs = self._prepare(response_model, messages, kwargs)
        return retry_sync(
            func=self.create_fn,
            response_model=model,
            mode=self.mode,
            kwargs=new_kwargs,
            max_retries=max_retries,
            log=self.logger,
        )

    def create_partial(
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        **kwargs: Any,
    ) -> Generator[T, None, None]:
        """Stream progressively filled partial ``response_model`` instances."""
        self._warn_streaming_retries(kwargs.pop("max_retries", None))
        kwargs.pop("stream", None)
        model, new_kwargs = self._prepare(
            response_model, messages, {**kwargs, "stream": True}
        )
        return stream_sync(
            func=self.create_fn,
            response_model=model,
            mode=self.mode,
            kwargs=new_kwargs,
            log=self.logger,
        )

    def create_raw(self, **kwargs: Any) -> Any:
        """Call the wrapped client unchanged and return its native result."""
        validate_model(self.provider, self.mode, kwargs.get("model"))
        return self.create_fn(**kwargs)


class AsyncInstructor(Instructor):
    """``Instructor`` for clients whose completion call is a coroutine."""

    def _completions_cls(self) -> type[_Completions]:
        return _AsyncCompletions

    async def _dispatch(  # type: ignore[override]
        self,
        response_model: ResponseModel[T] | type[T] | None = None,
        max_retries: int | AsyncRetrying = MAX_RETRIES_DEFAULT,
        **kwargs: Any,
    ) -> Any:
        if response_model is None:
            return await self.create_raw(**kwargs)
        if kwargs.pop("stream", False):
            self._warn_streaming_retries(max_retries)
            return self.create_partial(response_model=response_model, **kwargs)
        return await self.create(
            response_model=response_model, max_retries=max_retries, **kwargs
        )

    async def create(  # type: ignore[override]
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        max_retries: int | AsyncRetrying = MAX_RETRIES_DEFAULT,
        **kwargs: Any,
    ) -> T:
        model, _ = await self.create_with_completion(
            response_model=response_model,
            messages=messages,
            max_retries=max_retries,
            **kwargs,
        )
        return model

    async def create_with_completion(  # type: ignore[override]
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        max_retries: int | AsyncRetrying = MAX_RETRIES_DEFAULT,
        **kwargs: Any,
    ) -> tuple[T, Any]:
        kwargs.pop("stream", None)
        model, new_kwargs = self._prepare(response_model, messages, kwargs)
        return await retry_async(
            func=self.create_fn,
            response_model=model,
            mode=self.mode,
            kwargs=new_kwargs,
            max_retries=max_retries,
            log=self.logger,
        )

    def create_partial(  # type: ignore[override]
        self,
        response_model: ResponseModel[T] | type[T],
        messages: list[dict[str, Any]],
        **kwargs: Any,
    ) -> AsyncGenerator[T, None]:
        self._warn_streaming_retries(kwargs.pop("max_retries", None))
        kwargs.pop("stream", None)
        model, new_kwargs = self._prepare(
            response_model, messages, {**kwargs, "stream": True}
        )
        return stream_async(
            func=self.create_fn,
            response_model=model,
            mode=self.mode,
            kwargs=new_kwargs,
            log=self.logger,
        )

    async def create_raw(self, **kwargs: Any) -> Any:  # type: ignore[override]
        validate_model(self.provider, self.mode, kwargs.get("model"))
        return await self.create_fn(**kwargs)


def is_async(func: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(func)


@overload
def from_openai(
    client: openai.OpenAI,
    mode: Mode = Mode.TOOLS,
    debug: bool = False,
) -> Instructor: ...


@overload
def from_openai(
    client: openai.AsyncOpenAI,
    mode: Mode = Mode.TOOLS,
    debug: bool = False,
) -> AsyncInstructor: ...


def from_openai(
    client: Any,
    mode: Mode = Mode.TOOLS,
    debug: bool = False,
) -> Instructor | AsyncInstructor:
    """Create an Instructor instance from an OpenAI-compatible client.

    Args:
        client: An ``openai.OpenAI`` / ``openai.AsyncOpenAI`` instance, or any
            object exposing ``chat.completions.create``
        mode: The extraction mode (defaults to Mode.TOOLS)
        debug: Whether to emit debug-level log records

    Returns:
        An AsyncInstructor when the completion call is a coroutine, otherwise
        an Instructor

    Raises:
        ClientError: If the client has no ``chat.completions.create``
        ModeError: If the detected provider does not support ``mode``

    Examples:
        >>> import openai
        >>> from structured_chat import Mode, from_openai
        >>>
        >>> client = from_openai(openai.OpenAI(), mode=Mode.TOOLS)
    """
    if isinstance(client, openai.AsyncOpenAI) or is_async(_completion_create(client)):
        return AsyncInstructor(client=client, mode=mode, debug=debug)
    return Instructor(client=client, mode=mode, debug=debug)
