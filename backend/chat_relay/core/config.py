from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root (parent of backend/) for .env loading when running from backend/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

DEFAULT_SYSTEM_PROMPT = """You are "She Deserves AI", a compassionate and knowledgeable virtual assistant dedicated to guiding girls and women through menstrual health, hygiene, and emotional wellbeing.

Your role:
- Provide accurate, helpful information about menstrual health, hygiene products, and emotional wellness
- Be empathetic, supportive, and non-judgmental
- Use simple, clear language that's easy to understand
- Encourage healthy habits and self-care
- NEVER prescribe medication or provide medical diagnoses
- Always recommend consulting a healthcare provider for serious concerns
- Respect cultural sensitivities around menstruation

Keep responses concise (2-4 paragraphs), friendly, and actionable."""

SUPPORTED_PROVIDERS: tuple[str, ...] = ("openai", "gemini", "huggingface")


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.
    """

    # Core app settings
    app_name: str = Field(default="chat_relay")
    assistant_name: str = Field(default="She Deserves AI")
    environment: str = Field(default="production")  # development | staging | production
    debug: bool = Field(default=False)

    # HTTP server
    api_prefix: str = Field(default="/api")
    host: str = Field(default="0.0.0.0")
    port: int = Field(
        default=3001,
        validation_alias=AliasChoices("CHAT_RELAY_PORT", "PORT"),
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser.",
    )

    # Observability
    log_level: str = Field(default="INFO")

    # Chat pipeline
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT)
    history_limit: int = Field(
        default=10,
        ge=0,
        description="Number of most recent history messages forwarded to the provider.",
    )
    max_message_chars: int = Field(default=4000, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=400, ge=1)
    presence_penalty: float = Field(default=0.1)
    frequency_penalty: float = Field(default=0.1)
    empty_reply_text: str = Field(
        default="I'm sorry, I couldn't generate a response. Please try again.",
    )

    # LLM provider selection ("openai" | "gemini" | "huggingface")
    llm_provider: str = Field(
        default="openai",
        description="Provider that answers /api/chat requests.",
    )
    fallback_enabled: bool = Field(
        default=False,
        description="Answer with the keyword responder when the provider is unconfigured or fails.",
    )
    require_api_key: bool = Field(
        default=False,
        description="Refuse to start when the selected provider has no API key.",
    )

    # OpenAI
    openai_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CHAT_RELAY_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_model: str = Field(default="gpt-4o-mini")
    openai_timeout_seconds: int = Field(default=60)

    # Gemini
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CHAT_RELAY_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    gemini_model: str = Field(default="gemini-2.5-flash")
    gemini_timeout_seconds: int = Field(default=60)

    # Hugging Face Inference API (OpenAI-compatible router)
    huggingface_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CHAT_RELAY_HUGGINGFACE_API_KEY", "HF_API_TOKEN"),
    )
    huggingface_model: str = Field(default="meta-llama/Llama-3.1-8B-Instruct")
    huggingface_base_url: str = Field(default="https://router.huggingface.co/v1")
    huggingface_timeout_seconds: int = Field(default=60)
    huggingface_max_retries: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="CHAT_RELAY_",
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    def provider_api_key(self, provider_name: Optional[str] = None) -> Optional[str]:
        """Return the API key configured for the given (or selected) provider."""
        name = (provider_name or self.llm_provider).strip().lower()
        return {
            "openai": self.openai_api_key,
            "gemini": self.gemini_api_key,
            "huggingface": self.huggingface_api_key,
        }.get(name)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return a cached settings instance for use as a dependency.
    """
    return Settings()
