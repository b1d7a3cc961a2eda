from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest
from openai.types.chat import ChatCompletion, ChatCompletionChunk

OPENAI_URL = "https://api.openai.com/v1"

USAGE = {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}


def _completion(
    content: str | None = None,
    tool_arguments: str | dict[str, Any] | None = None,
    function_arguments: str | dict[str, Any] | None = None,
    finish_reason: str = "stop",
    usage: dict[str, int] | None = USAGE,
    name: str = "User",
) -> ChatCompletion:
    if isinstance(tool_arguments, dict):
        tool_arguments = json.dumps(tool_arguments)
    if isinstance(function_arguments, dict):
        function_arguments = json.dumps(function_arguments)

    message: dict[str, Any] = {"role": "assistant", "content": content}
    if tool_arguments is not None:
        message["tool_calls"] = [
            {
                "id": "call_1",
                "type": "function",
                "function": {"name": name, "arguments": tool_arguments},
            }
        ]
    if function_arguments is not None:
        message["function_call"] = {"name": name, "arguments": function_arguments}

    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion",
            "created": 0,
            "model": "gpt-4o",
            "choices": [
                {
                    "index": 0,
                    "finish_reason": finish_reason,
                    "logprobs": None,
                    "message": message,
                }
            ],
            "usage": usage,
        }
    )


def _chunk(
    content: str | None = None,
    tool_arguments: str | None = None,
    usage: dict[str, int] | None = None,
) -> ChatCompletionChunk:
    choices: list[dict[str, Any]] = []
    if content is not None or tool_arguments is not None:
        delta: dict[str, Any] = {}
        if content is not None:
            delta["content"] = content
        if tool_arguments is not None:
            delta["tool_calls"] = [
                {"index": 0, "function": {"arguments": tool_arguments}}
            ]
        choices.append({"index": 0, "delta": delta, "finish_reason": None})

    return ChatCompletionChunk.model_validate(
        {
            "id": "chatcmpl-test",
            "object": "chat.completion.chunk",
            "created": 0,
            "model": "gpt-4o",
            "choices": choices,
            "usage": usage,
        }
    )


def _client(create: Any, base_url: str | None = OPENAI_URL) -> SimpleNamespace:
    return SimpleNamespace(
        base_url=base_url,
        models=SimpleNamespace(list=Mock(return_value=["gpt-4o"])),
        chat=SimpleNamespace(completions=SimpleNamespace(create=create)),
    )


async def _agen(items: list[Any]):
    for item in items:
        yield item


@pytest.fixture
def make_completion():
    return _completion


@pytest.fixture
def make_chunk():
    return _chunk


@pytest.fixture
def make_client():
    """Fake transport whose completion call returns ``responses`` in order."""

    def factory(responses: list[Any], base_url: str | None = OPENAI_URL):
        return _client(Mock(side_effect=responses), base_url=base_url)

    return factory


@pytest.fixture
def make_async_client():
    def factory(responses: list[Any], base_url: str | None = OPENAI_URL):
        return _client(AsyncMock(side_effect=responses), base_url=base_url)

    return factory


@pytest.fixture
def async_stream():
    """Wrap chunks in an async iterator like the SDK's AsyncStream."""
    return _agen
