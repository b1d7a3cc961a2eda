"""Tests for provider detection from the transport base URL."""

import pytest

from structured_chat.utils.providers import Provider, get_provider


@pytest.mark.parametrize(
    "base_url,expected",
    [
        ("https://api.openai.com/v1", Provider.OPENAI),
        ("https://api.endpoints.anyscale.com/v1", Provider.ANYSCALE),
        ("https://api.together.xyz/v1", Provider.TOGETHER),
        ("https://api.anthropic.com/v1/", Provider.ANTHROPIC),
        ("http://localhost:11434/v1", Provider.OTHER),
        ("", Provider.OTHER),
        (None, Provider.OTHER),
    ],
)
def test_get_provider(base_url, expected):
    assert get_provider(base_url) == expected


def test_first_match_wins():
    """A URL mentioning several hosts resolves in the fixed priority order."""
    url = "https://api.together.xyz/proxy?upstream=api.openai.com"
    assert get_provider(url) == Provider.TOGETHER

    url = "https://api.endpoints.anyscale.com/proxy?upstream=api.together.xyz"
    assert get_provider(url) == Provider.ANYSCALE


def test_non_string_is_other():
    assert get_provider(42) == Provider.OTHER  # type: ignore[arg-type]
