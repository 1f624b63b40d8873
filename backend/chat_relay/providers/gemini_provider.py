from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from google.genai import errors as genai_errors

from chat_relay.core.config import Settings, get_settings
from chat_relay.providers.base import ChatProvider, ProviderReply
from chat_relay.providers.errors import ErrorKind, ProviderError, kind_from_status
from chat_relay.schemas.chat import ChatMessage, ChatUsage

logger = logging.getLogger(__name__)

# Gemini calls the assistant side of the conversation "model".
_GEMINI_ROLES: Dict[str, str] = {"user": "user", "assistant": "model"}


def classify_gemini_error(exc: Exception) -> ProviderError:
    """Translate a google-genai exception into a ProviderError."""
    status_code: Optional[int] = None
    if isinstance(exc, genai_errors.APIError):
        status_code = exc.code
        text = f"{exc.status or ''} {exc.message or ''}".lower()
        if "api key not valid" in text or "api_key_invalid" in text:
            kind = ErrorKind.AUTHENTICATION
        elif status_code == 429 and "quota" in text:
            kind = ErrorKind.QUOTA_EXCEEDED
        else:
            kind = kind_from_status(status_code)
    elif isinstance(exc, (httpx.TransportError, TimeoutError)):
        kind = ErrorKind.UNAVAILABLE
    else:
        kind = ErrorKind.UNKNOWN
    return ProviderError(
        kind,
        str(exc),
        provider=GeminiProvider.name,
        status_code=status_code,
    )


def to_gemini_contents(messages: Sequence[ChatMessage]) -> List[Dict[str, Any]]:
    return [
        {"role": _GEMINI_ROLES[m.role], "parts": [{"text": m.content}]}
        for m in messages
    ]


class GeminiProvider(ChatProvider):
    name = "gemini"

    def __init__(self, settings: Optional[Settings] = None, client: Any = None) -> None:
        self._settings = settings or get_settings()
        if client is not None:
            self._client = client
            return
        api_key = self._settings.gemini_api_key
        if not api_key:
            raise ProviderError(
                ErrorKind.CONFIGURATION,
                "Gemini API key is required. Set GEMINI_API_KEY or CHAT_RELAY_GEMINI_API_KEY.",
                provider=self.name,
            )
        from google import genai
        self._client = genai.Client(
            api_key=api_key,
            http_options={"timeout": self._settings.gemini_timeout_seconds * 1000},
        )

    @property
    def model(self) -> str:
        return self._settings.gemini_model

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> ProviderReply:
        config = {
            "system_instruction": system_prompt,
            "temperature": self._settings.temperature,
            "max_output_tokens": max_output_tokens or self._settings.max_output_tokens,
        }
        logger.info("Gemini request: model=%s contents=%s", self.model, len(messages))
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=to_gemini_contents(messages),
                config=config,
            )
        except (genai_errors.APIError, httpx.TransportError, TimeoutError) as exc:
            raise classify_gemini_error(exc) from exc

        text = response.text if response is not None else None
        return ProviderReply(
            text=text or "",
            model=self.model,
            usage=_usage_from(getattr(response, "usage_metadata", None)),
        )


def _usage_from(metadata: Any) -> Optional[ChatUsage]:
    if metadata is None:
        return None
    return ChatUsage(
        prompt_tokens=getattr(metadata, "prompt_token_count", None),
        completion_tokens=getattr(metadata, "candidates_token_count", None),
        total_tokens=getattr(metadata, "total_token_count", None),
    )
