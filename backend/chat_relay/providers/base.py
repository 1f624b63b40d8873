from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from chat_relay.schemas.chat import ChatMessage, ChatUsage


@dataclass
class ProviderReply:
    text: str
    model: str
    usage: Optional[ChatUsage] = None


class ChatProvider(ABC):
    """
    Interface for LLM providers that answer chat messages.

    Implementations (OpenAI, Gemini, Hugging Face) own the wire format,
    the HTTP/SDK call and the translation of upstream failures into
    ProviderError. Nothing provider-specific leaves ``complete``.
    """

    name: str = ""

    @property
    @abstractmethod
    def model(self) -> str:
        """Model identifier requests are sent to."""

    @abstractmethod
    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        system_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> ProviderReply:
        """
        Send the conversation and return the model's reply.

        ``messages`` is the trimmed history followed by the new user
        message. The system prompt is passed separately because each
        provider places it differently in its payload.
        """
        ...

    async def close(self) -> None:
        """Release network resources held by the provider."""
        return None


def as_role_content(messages: Sequence[ChatMessage]) -> list[Dict[str, str]]:
    """Render messages in the OpenAI-style ``{role, content}`` shape."""
    return [{"role": m.role, "content": m.content} for m in messages]
