from __future__ import annotations

from enum import Enum


class Provider(Enum):
    """Vendors we can recognise behind an OpenAI-compatible endpoint."""

    OPENAI = "openai"
    ANYSCALE = "anyscale"
    TOGETHER = "together"
    ANTHROPIC = "anthropic"
    OTHER = "other"


# Checked in order, first match wins.
PROVIDER_URLS: list[tuple[str, Provider]] = [
    ("api.endpoints.anyscale", Provider.ANYSCALE),
    ("api.together.xyz", Provider.TOGETHER),
    ("api.openai.com", Provider.OPENAI),
    ("api.anthropic.com", Provider.ANTHROPIC),
]


def get_provider(base_url: str | None) -> Provider:
    """Classify a transport base URL into a known provider.

    Anything we don't recognise, including a missing URL, is ``Provider.OTHER``.
    """
    if not isinstance(base_url, str):
        return Provider.OTHER

    for fragment, provider in PROVIDER_URLS:
        if fragment in base_url:
            return provider
    return Provider.OTHER
