from __future__ import annotations

import logging
from typing import Callable, List, Optional

from chat_relay.core.config import Settings, get_settings
from chat_relay.core.logging_config import preview
from chat_relay.providers.base import ChatProvider, ProviderReply
from chat_relay.providers.errors import ErrorKind, ProviderError
from chat_relay.providers.factory import get_provider
from chat_relay.schemas.chat import ChatMessage, ChatRequest, ChatResponse
from chat_relay.services.fallback import fallback_reply


logger = logging.getLogger(__name__)

PING_PROMPT_TEMPLATE = "Say 'Hello from {assistant_name}!'"
PING_MAX_TOKENS = 50

ProviderFactory = Callable[[Settings], ChatProvider]


class ChatRequestError(ValueError):
    """The inbound chat request is unusable; maps to HTTP 400."""


def trim_history(history: List[ChatMessage], limit: int) -> List[ChatMessage]:
    """Keep only the ``limit`` most recent turns."""
    if limit <= 0:
        return []
    return list(history[-limit:])


class ChatService:
    """
    Connects an inbound chat request to the configured provider and back.

    The provider is created on first use so that the service can start (and
    report its health) without an API key. Route handlers stay thin: they
    only translate ChatRequestError / ProviderError into HTTP responses.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider_factory: Optional[ProviderFactory] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._provider_factory: ProviderFactory = provider_factory or (
            lambda s: get_provider(settings=s)
        )
        self._provider: Optional[ChatProvider] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def _get_provider(self) -> ChatProvider:
        if self._provider is None:
            try:
                self._provider = self._provider_factory(self._settings)
            except ValueError as exc:
                raise ProviderError(ErrorKind.CONFIGURATION, str(exc)) from exc
            logger.info(
                "Chat provider ready: provider=%s model=%s",
                self._provider.name,
                self._provider.model,
            )
        return self._provider

    async def close(self) -> None:
        if self._provider is not None:
            await self._provider.close()
            self._provider = None

    def _validate_message(self, request: ChatRequest) -> str:
        if request.message is None:
            raise ChatRequestError("Valid message is required")
        message = request.message.strip()
        if not message:
            raise ChatRequestError("Message cannot be empty")
        limit = self._settings.max_message_chars
        if len(message) > limit:
            raise ChatRequestError(f"Message is too long (max {limit} characters)")
        return message

    def build_messages(self, request: ChatRequest, message: str) -> List[ChatMessage]:
        history = trim_history(request.history, self._settings.history_limit)
        return [*history, ChatMessage(role="user", content=message)]

    def _fallback(self, message: str, reason: ProviderError) -> ChatResponse:
        logger.warning(
            "Answering from fallback responder: kind=%s provider=%s",
            reason.kind.value,
            reason.provider,
        )
        return ChatResponse(response=fallback_reply(message), source="fallback")

    async def handle(self, request: ChatRequest) -> ChatResponse:
        """
        Run the chat pipeline for one request.

        Raises ChatRequestError for unusable input and ProviderError when the
        provider fails and the fallback responder is disabled.
        """
        message = self._validate_message(request)
        messages = self.build_messages(request, message)
        logger.info(
            "Processing message: %r (history=%s)",
            preview(message),
            len(messages) - 1,
        )

        try:
            provider = self._get_provider()
            reply = await provider.complete(
                messages,
                system_prompt=self._settings.system_prompt,
            )
        except ProviderError as exc:
            logger.error("Chat provider error: %r", exc)
            if self._settings.fallback_enabled:
                return self._fallback(message, exc)
            raise

        return self._to_response(provider, reply)

    def _to_response(self, provider: ChatProvider, reply: ProviderReply) -> ChatResponse:
        text = reply.text.strip() or self._settings.empty_reply_text
        logger.info("Response generated (%s chars)", len(text))
        return ChatResponse(
            response=text,
            source="provider",
            provider=provider.name,
            model=reply.model,
            usage=reply.usage,
        )

    async def ping(self) -> ProviderReply:
        """Send a fixed greeting to verify the provider connection."""
        provider = self._get_provider()
        prompt = PING_PROMPT_TEMPLATE.format(assistant_name=self._settings.assistant_name)
        return await provider.complete(
            [ChatMessage(role="user", content=prompt)],
            system_prompt=self._settings.system_prompt,
            max_output_tokens=PING_MAX_TOKENS,
        )

