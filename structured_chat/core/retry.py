"""Retry-validate-repair loop for non-streaming completions.

Each call walks Calling -> Parsing -> Validating and either returns the
validated model or, while budget remains, goes round again. Only validation
failures add a correction message to the next request; parse and transport
failures resend the request as it stands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar, Union

from pydantic import BaseModel, ValidationError
from tenacity import AsyncRetrying, Retrying, stop_after_attempt

from ..dsl.response_model import ResponseModel, attach_meta
from ..mode import Mode
from ..processing.response import (
    extract_payload,
    extract_usage,
    format_validation_error,
    parse_payload,
)
from .exceptions import ResponseParsingError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("structured_chat.retry")

T_Model = TypeVar("T_Model", bound=BaseModel)

MAX_RETRIES_DEFAULT = 0
REPAIR_PREFIX = "Please correct the function call; errors encountered:\n "

Logger = Union[logging.Logger, logging.LoggerAdapter]


@dataclass
class AttemptState:
    """Per-call loop state; never shared between calls."""

    attempts: int = 0
    last_message: dict[str, Any] | None = None
    validation_issues: str = ""

    def resolve_kwargs(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Build the kwargs for the next call without touching ``kwargs``."""
        if not self.validation_issues:
            return {**kwargs, "stream": False}

        messages = [*kwargs["messages"]]
        if self.last_message is not None:
            messages.append(self.last_message)
        messages.append(
            {
                "role": "user",
                "content": f"{REPAIR_PREFIX}{self.validation_issues}",
            }
        )
        return {**kwargs, "messages": messages, "stream": False}


def initialize_retrying(
    max_retries: int | Retrying | AsyncRetrying, is_async: bool = False
) -> Retrying | AsyncRetrying:
    """Turn a retry count into a tenacity controller.

    ``max_retries`` counts retries, so the loop makes ``max_retries + 1``
    calls. The last error is re-raised as-is once the budget is spent.
    """
    if isinstance(max_retries, int):
        retrying_cls = AsyncRetrying if is_async else Retrying
        return retrying_cls(stop=stop_after_attempt(max_retries + 1), reraise=True)
    return max_retries


def process_completion(
    completion: Any,
    response_model: ResponseModel[T_Model],
    mode: Mode,
    state: AttemptState,
    log: Logger = logger,
) -> T_Model:
    """Parse and validate one completion, recording repair state on failure."""
    payload = extract_payload(completion, mode)

    try:
        data = parse_payload(completion, payload, mode)
    except ResponseParsingError:
        log.error(f"failed to parse completion {payload!r} mode: {mode.name}")
        raise

    try:
        model = response_model.schema.model_validate(data)
    except ValidationError as e:
        state.last_message = {"role": "assistant", "content": payload}
        state.validation_issues = format_validation_error(e)
        raise

    log.debug(f"{response_model.name} Completion validation: success")
    return attach_meta(model, extract_usage(completion))


def _record_failure(
    state: AttemptState,
    response_model: ResponseModel[Any],
    max_attempts: int | None,
    log: Logger,
) -> None:
    if max_attempts is not None and state.attempts + 1 >= max_attempts:
        log.debug(
            f"response model: {response_model.name} - Max attempts reached: {state.attempts}"
        )
        log.error(
            f"response model: {response_model.name} - Validation issues: {state.validation_issues}"
        )
    else:
        log.warning(
            f"response model: {response_model.name} - Validation issues: {state.validation_issues}"
        )


def _max_attempts(retrying: Retrying | AsyncRetrying) -> int | None:
    return getattr(retrying.stop, "max_attempt_number", None)


def retry_sync(
    func: Callable[..., Any],
    response_model: ResponseModel[T_Model],
    mode: Mode,
    kwargs: dict[str, Any],
    max_retries: int | Retrying = MAX_RETRIES_DEFAULT,
    log: Logger = logger,
) -> tuple[T_Model, Any]:
    """Run the standard loop against a blocking transport.

    Args:
        func: The transport's completion call
        response_model: Target schema to validate against
        mode: Extraction mode the request was built for
        kwargs: Transport kwargs from the request builder
        max_retries: Retries after the first attempt, or a Retrying instance
        log: Logger used for diagnostics

    Returns:
        The validated model and the completion it came from

    Raises:
        The last transport, parsing or validation error once retries run out
    """
    retrying = initialize_retrying(max_retries)
    max_attempts = _max_attempts(retrying)
    state = AttemptState()

    for attempt in retrying:  # type: ignore[union-attr]
        with attempt:
            state.attempts = attempt.retry_state.attempt_number - 1
            if state.attempts:
                log.debug(
                    f"response model: {response_model.name} - Retrying, attempt: {state.attempts}"
                )
            resolved = state.resolve_kwargs(kwargs)

            try:
                try:
                    completion = func(**resolved)
                except Exception as e:
                    log.error(
                        f"Error making completion call - mode: {mode.name} | "
                        f"with params: {resolved} raw error: {e}"
                    )
                    raise
                log.debug(f"raw standard completion response: {completion}")

                model = process_completion(
                    completion, response_model, mode, state, log=log
                )
            except Exception:
                _record_failure(state, response_model, max_attempts, log)
                raise
            return model, completion

    raise RuntimeError("Retry loop finished without a result")  # pragma: no cover


async def retry_async(
    func: Callable[..., Awaitable[Any]],
    response_model: ResponseModel[T_Model],
    mode: Mode,
    kwargs: dict[str, Any],
    max_retries: int | AsyncRetrying = MAX_RETRIES_DEFAULT,
    log: Logger = logger,
) -> tuple[T_Model, Any]:
    """Async twin of ``retry_sync``; attempts still run one after another."""
    retrying = initialize_retrying(max_retries, is_async=True)
    max_attempts = _max_attempts(retrying)
    state = AttemptState()

    async for attempt in retrying:  # type: ignore[union-attr]
        with attempt:
            state.attempts = attempt.retry_state.attempt_number - 1
            if state.attempts:
                log.debug(
                    f"response model: {response_model.name} - Retrying, attempt: {state.attempts}"
                )
            resolved = state.resolve_kwargs(kwargs)

            try:
                try:
                    completion = await func(**resolved)
                except Exception as e:
                    log.error(
                        f"Error making completion call - mode: {mode.name} | "
                        f"with params: {resolved} raw error: {e}"
                    )
                    raise
                log.debug(f"raw standard completion response: {completion}")

                model = process_completion(
                    completion, response_model, mode, state, log=log
                )
            except Exception:
                _record_failure(state, response_model, max_attempts, log)
                raise
            return model, completion

    raise RuntimeError("Retry loop finished without a result")  # pragma: no cover
