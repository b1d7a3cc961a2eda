"""Turn a response model and the caller's kwargs into transport kwargs."""

from __future__ import annotations

import copy
import json
from textwrap import dedent
from typing import Any, Callable

from ..mode import Mode
from ..dsl.response_model import ResponseModel

RequestHandler = Callable[[ResponseModel, dict[str, Any]], dict[str, Any]]


def handle_functions(
    response_model: ResponseModel, new_kwargs: dict[str, Any]
) -> dict[str, Any]:
    """Handle FUNCTIONS mode."""
    schema = response_model.openai_schema
    new_kwargs["functions"] = [schema]
    new_kwargs["function_call"] = {"name": schema["name"]}
    return new_kwargs


def handle_tools(
    response_model: ResponseModel, new_kwargs: dict[str, Any]
) -> dict[str, Any]:
    """Handle TOOLS mode."""
    schema = response_model.openai_schema
    new_kwargs["tools"] = [
        {
            "type": "function",
            "function": schema,
        }
    ]
    new_kwargs["tool_choice"] = {
        "type": "function",
        "function": {"name": schema["name"]},
    }
    return new_kwargs


def _schema_instruction(response_model: ResponseModel) -> str:
    return dedent(
        f"""
        As a genius expert, your task is to understand the content and provide
        the parsed objects in json that match the following json_schema:\n

        {json.dumps(response_model.json_schema, indent=2, ensure_ascii=False)}

        Make sure to return an instance of the JSON, not the schema itself
        """
    )


def _handle_json_modes(
    response_model: ResponseModel, new_kwargs: dict[str, Any], mode: Mode
) -> dict[str, Any]:
    """Common handler for JSON-based modes."""
    message = _schema_instruction(response_model)

    if mode == Mode.JSON:
        new_kwargs["response_format"] = {"type": "json_object"}
    elif mode == Mode.JSON_SCHEMA:
        new_kwargs["response_format"] = {
            "type": "json_object",
            "schema": response_model.json_schema,
        }
    elif mode == Mode.MD_JSON:
        new_kwargs["messages"].append(
            {
                "role": "user",
                "content": "Return the correct JSON response within a ```json codeblock. not the JSON_SCHEMA",
            },
        )

    # Add or update system message
    messages = new_kwargs["messages"]
    if not messages or messages[0]["role"] != "system":
        messages.insert(
            0,
            {
                "role": "system",
                "content": message,
            },
        )
    elif isinstance(messages[0].get("content"), str):
        messages[0]["content"] += f"\n\n{message}"
    elif isinstance(messages[0].get("content"), list):
        messages[0]["content"][0]["text"] += f"\n\n{message}"
    else:
        raise ValueError(
            "Invalid message format, must be a string or a list of messages"
        )

    return new_kwargs


def handle_json(
    response_model: ResponseModel, new_kwargs: dict[str, Any]
) -> dict[str, Any]:
    return _handle_json_modes(response_model, new_kwargs, Mode.JSON)


def handle_json_schema(
    response_model: ResponseModel, new_kwargs: dict[str, Any]
) -> dict[str, Any]:
    return _handle_json_modes(response_model, new_kwargs, Mode.JSON_SCHEMA)


def handle_md_json(
    response_model: ResponseModel, new_kwargs: dict[str, Any]
) -> dict[str, Any]:
    return _handle_json_modes(response_model, new_kwargs, Mode.MD_JSON)


MODE_HANDLERS: dict[Mode, RequestHandler] = {
    Mode.FUNCTIONS: handle_functions,
    Mode.TOOLS: handle_tools,
    Mode.JSON: handle_json,
    Mode.JSON_SCHEMA: handle_json_schema,
    Mode.MD_JSON: handle_md_json,
}


def build_request(
    response_model: ResponseModel,
    mode: Mode,
    **kwargs: Any,
) -> dict[str, Any]:
    """Build the transport kwargs for ``mode``.

    The caller's kwargs, including ``stream``, are kept. Messages are deep
    copied so the caller's list is never modified.
    """
    new_kwargs = dict(kwargs)
    new_kwargs["messages"] = copy.deepcopy(list(kwargs.get("messages") or []))
    new_kwargs.setdefault("stream", False)

    handler = MODE_HANDLERS.get(mode)
    if handler is None:
        raise ValueError(f"Invalid patch mode: {mode}")
    return handler(response_model, new_kwargs)
