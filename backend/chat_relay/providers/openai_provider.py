from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import openai
from openai import AsyncOpenAI

from chat_relay.core.config import Settings, get_settings
from chat_relay.providers.base import ChatProvider, ProviderReply, as_role_content
from chat_relay.providers.errors import ErrorKind, ProviderError, kind_from_status
from chat_relay.schemas.chat import ChatMessage, ChatUsage


logger = logging.getLogger(__name__)


def classify_openai_error(exc: Exception) -> ProviderError:
    """Translate an openai SDK exception into a ProviderError."""
    code = getattr(exc, "code", None)
    status_code = getattr(exc, "status_code", None)

    if isinstance(exc, (openai.APITimeoutError, openai.APIConnectionError)):
        kind = ErrorKind.UNAVAILABLE
    elif code == "invalid_api_key" or isinstance(exc, openai.AuthenticationError):
        kind = ErrorKind.AUTHENTICATION
    elif code == "insufficient_quota":
        kind = ErrorKind.QUOTA_EXCEEDED
    elif isinstance(exc, openai.APIStatusError):
        kind = kind_from_status(status_code)
    else:
        kind = ErrorKind.UNKNOWN

    return ProviderError(
        kind,
        str(exc),
        provider=OpenAIProvider.name,
        status_code=status_code,
    )


def _usage_from(response: Any) -> Optional[ChatUsage]:
    usage = getattr(response, "usage", None)
    if usage is None:
        return None
    return ChatUsage(
        prompt_tokens=getattr(usage, "prompt_tokens", None),
        completion_tokens=getattr(usage, "completion_tokens", None),
        total_tokens=getattr(usage, "total_tokens", None),
    )


class OpenAIProvider(ChatProvider):
    """
    Chat provider that calls the OpenAI Chat Completions API.

    The system prompt is sent as the first message, followed by the
    client's history and the new user message.
    """

    name = "openai"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._settings = settings or get_settings()
        if client is not None:
            self._client = client
        else:
            api_key = self._settings.openai_api_key
            if not api_key:
                raise ProviderError(
                    ErrorKind.CONFIGURATION,
                    "OpenAI API key is required when using OpenAI provider. "
                    "Set OPENAI_API_KEY or CHAT_RELAY_OPENAI_API_KEY.",
                    provider=self.name,
                )
            self._client = AsyncOpenAI(
                api_key=api_key,
                timeout=float(self._settings.openai_timeout_seconds),
            )

    @property
    def model(self) -> str:
        return self._settings.openai_model

    async def close(self) -> None:
        await self._client.close()

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> ProviderReply:
        max_tokens = max_output_tokens or self._settings.max_output_tokens
        payload = [{"role": "system", "content": system_prompt}, *as_role_content(messages)]

        logger.info(
            "OpenAI request: model=%s messages=%s max_tokens=%s",
            self.model,
            len(payload),
            max_tokens,
        )
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=payload,
                max_tokens=max_tokens,
                temperature=self._settings.temperature,
                presence_penalty=self._settings.presence_penalty,
                frequency_penalty=self._settings.frequency_penalty,
            )
        except openai.OpenAIError as exc:
            raise classify_openai_error(exc) from exc

        content = response.choices[0].message.content if response.choices else None
        response_model = getattr(response, "model", None) or self.model
        return ProviderReply(
            text=content or "",
            model=response_model,
            usage=_usage_from(response),
        )
