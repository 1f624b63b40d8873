import logging
from datetime import datetime, timezone
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, constr, field_validator

logger = logging.getLogger(__name__)

ChatRole = Literal["user", "assistant"]
ReplySource = Literal["provider", "fallback"]


class ChatMessage(BaseModel):
    """
    One turn of conversation history as sent by the client.
    """

    role: ChatRole
    content: constr(strip_whitespace=True, min_length=1)


class ChatRequest(BaseModel):
    """
    Body of POST /api/chat.

    ``message`` must be a string; emptiness is checked by the chat service so
    that the client receives a specific error. ``history`` is accepted in any
    shape: anything that is not a list becomes empty, and entries that are not
    valid user/assistant turns are dropped.
    """

    message: Optional[str] = Field(default=None, description="The user's new message.")
    history: List[ChatMessage] = Field(
        default_factory=list,
        description="Previous turns, oldest first. Only the most recent turns are forwarded.",
    )

    @field_validator("history", mode="before")
    @classmethod
    def _keep_valid_turns(cls, value: Any) -> List[ChatMessage]:
        if not isinstance(value, list):
            return []
        turns: List[ChatMessage] = []
        dropped = 0
        for item in value:
            try:
                turns.append(ChatMessage.model_validate(item))
            except ValidationError:
                dropped += 1
        if dropped:
            logger.debug("Dropped %s malformed history entries", dropped)
        return turns


class ChatUsage(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatResponse(BaseModel):
    response: str
    source: ReplySource = "provider"
    provider: Optional[str] = None
    model: Optional[str] = None
    usage: Optional[ChatUsage] = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
