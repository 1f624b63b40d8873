import pytest

from chat_relay.core.config import Settings, get_settings

_PROVIDER_ENV_VARS = (
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
    "HF_API_TOKEN",
    "CHAT_RELAY_OPENAI_API_KEY",
    "CHAT_RELAY_GEMINI_API_KEY",
    "CHAT_RELAY_HUGGINGFACE_API_KEY",
    "CHAT_RELAY_LLM_PROVIDER",
    "CHAT_RELAY_FALLBACK_ENABLED",
    "CHAT_RELAY_ENVIRONMENT",
    "CHAT_RELAY_REQUIRE_API_KEY",
    "CHAT_RELAY_PORT",
    "PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate every test from provider keys in the developer's environment."""
    for var in _PROVIDER_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="sk-test", environment="production")
