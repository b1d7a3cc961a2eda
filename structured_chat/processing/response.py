"""Pull the structured payload out of completions and stream chunks."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from ..core.exceptions import IncompleteOutputException, ResponseParsingError
from ..mode import Mode

logger = logging.getLogger("structured_chat.response")

_CODEBLOCK_RE = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


def extract_json_from_codeblock(content: str) -> str:
    """Return the body of a ```json block, or the outermost {...} span."""
    match = _CODEBLOCK_RE.search(content)
    if match:
        return match.group(1)

    first, last = content.find("{"), content.rfind("}")
    if first != -1 and last > first:
        return content[first : last + 1]
    return content


def extract_payload(completion: Any, mode: Mode) -> str:
    """Return the assistant's structured payload as text.

    Tool call arguments win over function call arguments, which win over the
    message content.
    """
    message = completion.choices[0].message

    tool_calls = getattr(message, "tool_calls", None)
    if tool_calls:
        return tool_calls[0].function.arguments or ""

    function_call = getattr(message, "function_call", None)
    if function_call is not None:
        return function_call.arguments or ""

    content = message.content or ""
    if mode in Mode.json_modes():
        return extract_json_from_codeblock(content)
    return content


def parse_payload(completion: Any, payload: str, mode: Mode) -> Any:
    """Decode the payload, raising ``ResponseParsingError`` when malformed."""
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        finish_reason = getattr(completion.choices[0], "finish_reason", None)
        if finish_reason == "length":
            raise IncompleteOutputException(
                last_completion=completion, mode=mode.name, raw_response=payload
            ) from e
        raise ResponseParsingError(
            f"Failed to parse completion payload: {e}",
            mode=mode.name,
            raw_response=payload,
        ) from e


def format_validation_error(error: ValidationError) -> str:
    """Render a pydantic error as one human readable line per issue."""
    issues = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail.get("loc", ()))
        issue = detail.get("msg", "Invalid value")
        issues.append(f'{issue} at "{location}"' if location else issue)
    return "Validation error: " + "; ".join(issues)


def extract_chunk_text(chunk: Any, mode: Mode) -> str:
    """Return the payload fragment carried by one stream chunk."""
    if not getattr(chunk, "choices", None):
        return ""

    delta = chunk.choices[0].delta
    if mode in Mode.json_modes():
        return delta.content or ""

    tool_calls = getattr(delta, "tool_calls", None)
    if tool_calls:
        function = tool_calls[0].function
        return (function.arguments if function else None) or ""

    function_call = getattr(delta, "function_call", None)
    if function_call is not None:
        return function_call.arguments or ""

    return ""


def extract_usage(response: Any) -> Any | None:
    return getattr(response, "usage", None)
