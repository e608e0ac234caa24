from __future__ import annotations

from archfolio.config import settings
from archfolio.errors import ProviderNotConfiguredError
from archfolio.providers.base import LayoutProvider, MapProvider
from archfolio.providers.gemini_provider import GeminiProvider
from archfolio.providers.openai_provider import OpenAILayoutProvider


def _get_gemini() -> GeminiProvider:
    if not settings.gemini_api_key:
        raise ProviderNotConfiguredError("ARCHFOLIO_GEMINI_API_KEY is not set")
    return GeminiProvider(api_key=settings.gemini_api_key)


def _get_openai() -> OpenAILayoutProvider:
    if not settings.openai_api_key:
        raise ProviderNotConfiguredError("ARCHFOLIO_OPENAI_API_KEY is not set")
    return OpenAILayoutProvider(api_key=settings.openai_api_key)


def get_layout_provider(name: str | None = None) -> LayoutProvider:
    name = (name or settings.layout_provider).strip().lower()
    if name == "gemini":
        return _get_gemini()
    if name == "openai":
        return _get_openai()
    raise ProviderNotConfiguredError(f"unknown layout provider {name!r}")


def get_map_provider() -> MapProvider:
    # Only Gemini exposes an image model here.
    return _get_gemini()
