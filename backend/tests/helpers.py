import asyncio
from typing import List, Optional, Sequence

from httpx import ASGITransport, AsyncClient

from chat_relay.api.chat import get_chat_service
from chat_relay.main import create_app
from chat_relay.providers.base import ChatProvider, ProviderReply
from chat_relay.providers.errors import ProviderError
from chat_relay.schemas.chat import ChatMessage, ChatUsage
from chat_relay.services.chat_service import ChatService


class FakeProvider(ChatProvider):
    """Records calls and returns a canned reply or raises a canned error."""

    name = "fake"

    def __init__(
        self,
        reply: str = "Stay hydrated and rest.",
        error: Optional[ProviderError] = None,
    ) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []
        self.closed = False

    @property
    def model(self) -> str:
        return "fake-model"

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> ProviderReply:
        self.calls.append(
            {
                "messages": list(messages),
                "system_prompt": system_prompt,
                "max_output_tokens": max_output_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return ProviderReply(
            text=self.reply,
            model=self.model,
            usage=ChatUsage(prompt_tokens=12, completion_tokens=5, total_tokens=17),
        )

    async def close(self) -> None:
        self.closed = True


def build_app(service: Optional[ChatService] = None):
    app = create_app()
    if service is not None:
        app.dependency_overrides[get_chat_service] = lambda: service
    return app


def send(app, method: str, url: str, raise_app_exceptions: bool = True, **kwargs):
    async def _send():
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.request(method, url, **kwargs)

    return asyncio.run(_send())
