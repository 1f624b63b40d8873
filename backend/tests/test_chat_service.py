"""Chat pipeline behaviour independent of HTTP."""
import asyncio

import pytest

from chat_relay.core.config import Settings
from chat_relay.providers.errors import ErrorKind, ProviderError
from chat_relay.schemas.chat import ChatMessage, ChatRequest
from chat_relay.services.chat_service import ChatRequestError, ChatService, trim_history
from helpers import FakeProvider


def _turns(n):
    return [
        ChatMessage(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}")
        for i in range(n)
    ]


def test_trim_history_keeps_most_recent():
    trimmed = trim_history(_turns(15), 10)
    assert len(trimmed) == 10
    assert trimmed[0].content == "turn 5"
    assert trimmed[-1].content == "turn 14"


def test_trim_history_shorter_than_limit():
    assert len(trim_history(_turns(3), 10)) == 3


def test_trim_history_zero_limit():
    assert trim_history(_turns(3), 0) == []


def test_handle_sends_system_prompt_separately():
    provider = FakeProvider()
    settings = Settings(openai_api_key="sk-test", system_prompt="Be kind.")
    service = ChatService(settings, provider_factory=lambda s: provider)

    asyncio.run(service.handle(ChatRequest(message="hello")))

    call = provider.calls[0]
    assert call["system_prompt"] == "Be kind."
    assert all(m.role != "system" for m in call["messages"])


def test_handle_replaces_empty_reply():
    provider = FakeProvider(reply="   ")
    settings = Settings(openai_api_key="sk-test")
    service = ChatService(settings, provider_factory=lambda s: provider)

    result = asyncio.run(service.handle(ChatRequest(message="hello")))

    assert result.response == settings.empty_reply_text


def test_handle_reraises_provider_error_without_fallback():
    error = ProviderError(ErrorKind.RATE_LIMITED, "429")
    service = ChatService(
        Settings(openai_api_key="sk-test"),
        provider_factory=lambda s: FakeProvider(error=error),
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(service.handle(ChatRequest(message="hello")))

    assert excinfo.value.kind is ErrorKind.RATE_LIMITED


def test_handle_rejects_missing_message():
    service = ChatService(Settings(), provider_factory=lambda s: FakeProvider())
    with pytest.raises(ChatRequestError):
        asyncio.run(service.handle(ChatRequest()))


def test_unsupported_provider_is_configuration_error():
    service = ChatService(Settings(llm_provider="cohere"))

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(service.handle(ChatRequest(message="hello")))

    assert excinfo.value.kind is ErrorKind.CONFIGURATION
    assert "Unsupported LLM provider" in excinfo.value.message


def test_provider_created_once_and_closed():
    created = []

    def factory(settings):
        provider = FakeProvider()
        created.append(provider)
        return provider

    service = ChatService(Settings(openai_api_key="sk-test"), provider_factory=factory)

    async def _run():
        await service.handle(ChatRequest(message="one"))
        await service.handle(ChatRequest(message="two"))
        await service.close()

    asyncio.run(_run())

    assert len(created) == 1
    assert created[0].closed is True


def test_request_drops_invalid_history_entries():
    request = ChatRequest.model_validate(
        {
            "message": "hi",
            "history": [
                {"role": "user", "content": "ok"},
                {"role": "assistant", "content": "   "},
                {"role": "tool", "content": "x"},
                {"content": "no role"},
                None,
            ],
        }
    )
    assert [m.content for m in request.history] == ["ok"]


def test_concurrent_first_requests_share_one_provider():
    created = []

    def factory(settings):
        provider = FakeProvider()
        created.append(provider)
        return provider

    service = ChatService(Settings(openai_api_key="sk-test"), provider_factory=factory)

    async def _run():
        await asyncio.gather(
            *(service.handle(ChatRequest(message=f"hello {i}")) for i in range(5))
        )

    asyncio.run(_run())

    assert len(created) == 1
    assert len(created[0].calls) == 5
