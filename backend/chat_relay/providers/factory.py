from __future__ import annotations

from typing import Optional

from chat_relay.core.config import SUPPORTED_PROVIDERS, Settings, get_settings
from chat_relay.providers.base import ChatProvider
from chat_relay.providers.gemini_provider import GeminiProvider
from chat_relay.providers.huggingface_provider import HuggingFaceProvider
from chat_relay.providers.openai_provider import OpenAIProvider


def resolve_provider_name(provider_name: Optional[str], settings: Settings) -> str:
    name = (provider_name or settings.llm_provider).strip().lower()
    if name not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unsupported LLM provider: {name!r}. "
            "Use 'openai', 'gemini', or 'huggingface'."
        )
    return name


def is_provider_configured(settings: Optional[Settings] = None) -> bool:
    """True when the selected provider has an API key."""
    settings = settings or get_settings()
    return bool(settings.provider_api_key())


def get_provider(
    provider_name: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> ChatProvider:
    """Return the chat provider for the given name (default: configured provider)."""
    settings = settings or get_settings()
    name = resolve_provider_name(provider_name, settings)

    if name == "openai":
        return OpenAIProvider(settings)
    if name == "gemini":
        return GeminiProvider(settings)
    return HuggingFaceProvider(settings)
