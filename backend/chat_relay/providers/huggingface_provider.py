from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import httpx
from pydantic import ValidationError

from chat_relay.core.config import Settings, get_settings
from chat_relay.providers.base import ChatProvider, ProviderReply, as_role_content
from chat_relay.providers.errors import ErrorKind, ProviderError, kind_from_status
from chat_relay.schemas.chat import ChatMessage, ChatUsage

logger = logging.getLogger(__name__)

# 503 is what the Inference API returns while a cold model is loading.
_RETRYABLE_STATUS: frozenset[int] = frozenset({502, 503, 504})


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return str(error.get("message") or error)
        if error:
            return str(error)
    return str(body)[:300]


def classify_huggingface_error(exc: Exception) -> ProviderError:
    """Translate an httpx failure from the Inference API into a ProviderError."""
    status_code: Optional[int] = None
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        kind = kind_from_status(status_code)
        message = _error_text(exc.response)
    elif isinstance(exc, httpx.TransportError):
        kind = ErrorKind.UNAVAILABLE
        message = str(exc) or type(exc).__name__
    else:
        kind = ErrorKind.UNKNOWN
        message = str(exc)
    return ProviderError(
        kind,
        message,
        provider=HuggingFaceProvider.name,
        status_code=status_code,
    )


class HuggingFaceProvider(ChatProvider):
    """Chat provider for the Hugging Face Inference API (OpenAI-compatible router)."""

    name = "huggingface"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: httpx.AsyncClient | None = None,
        backoff_base_seconds: float = 1.0,
    ) -> None:
        self._settings = settings or get_settings()
        api_key = self._settings.huggingface_api_key
        if not api_key:
            raise ProviderError(
                ErrorKind.CONFIGURATION,
                "Hugging Face API token is required. Set HF_API_TOKEN or "
                "CHAT_RELAY_HUGGINGFACE_API_KEY.",
                provider=self.name,
            )
        self._backoff_base_seconds = backoff_base_seconds
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.huggingface_base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(
                connect=10.0,
                read=float(self._settings.huggingface_timeout_seconds),
                write=10.0,
                pool=10.0,
            ),
        )

    @property
    def model(self) -> str:
        return self._settings.huggingface_model

    async def close(self) -> None:
        await self._client.aclose()

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> ProviderReply:
        max_retries = self._settings.huggingface_max_retries
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                *as_role_content(messages),
            ],
            "max_tokens": max_output_tokens or self._settings.max_output_tokens,
            "temperature": self._settings.temperature,
            "stream": False,
        }
        last_error: Exception | None = None
        for attempt in range(1, max_retries + 1):
            try:
                logger.info(
                    "Hugging Face request: model=%s attempt=%s/%s",
                    self.model,
                    attempt,
                    max_retries,
                )
                response = await self._client.post("/chat/completions", json=payload)
                response.raise_for_status()
                return self._parse(response)
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code not in _RETRYABLE_STATUS:
                    raise classify_huggingface_error(exc) from exc
                last_error = exc
            except httpx.TransportError as exc:
                last_error = exc
            logger.warning(
                "Hugging Face request failed: attempt=%s/%s error=%s",
                attempt,
                max_retries,
                last_error,
            )
            if attempt < max_retries:
                await asyncio.sleep(self._backoff_base_seconds * (2 ** (attempt - 1)))
        assert last_error is not None
        raise classify_huggingface_error(last_error) from last_error

    def _malformed(self, response: httpx.Response, reason: str) -> ProviderError:
        return ProviderError(
            ErrorKind.UNKNOWN,
            f"Malformed chat completion: {reason}",
            provider=self.name,
            status_code=response.status_code,
        )

    def _parse(self, response: httpx.Response) -> ProviderReply:
        try:
            data = response.json()
        except ValueError as exc:
            raise self._malformed(response, "body is not JSON") from exc
        if not isinstance(data, dict):
            raise self._malformed(response, f"unexpected body type {type(data).__name__}")

        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise self._malformed(response, "'choices' is not a list")
        content: Any = ""
        if choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            if not isinstance(message, dict):
                raise self._malformed(response, "'message' is not an object")
            content = message.get("content") or ""
        if not isinstance(content, str):
            raise self._malformed(response, "'content' is not a string")

        usage: Optional[ChatUsage] = None
        usage_raw = data.get("usage")
        if isinstance(usage_raw, dict):
            try:
                usage = ChatUsage.model_validate(usage_raw)
            except ValidationError:
                logger.debug("Ignoring malformed usage block: %s", usage_raw)

        model = data.get("model")
        return ProviderReply(
            text=content,
            model=model if isinstance(model, str) and model else self.model,
            usage=usage,
        )
