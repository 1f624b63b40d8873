import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from chat_relay.providers.errors import ProviderError
from chat_relay.schemas.chat import ChatRequest, ChatResponse, ErrorResponse
from chat_relay.services.chat_service import ChatService


logger = logging.getLogger(__name__)

router = APIRouter()

# Single shared instance so the provider client is reused across requests.
_service: ChatService | None = None


def get_chat_service() -> ChatService:
    global _service
    if _service is None:
        _service = ChatService()
    return _service


async def shutdown_chat_service() -> None:
    global _service
    if _service is not None:
        await _service.close()
        _service = None


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    summary="Send a message to the assistant",
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def chat(
    payload: ChatRequest,
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Forward the message and the most recent history to the configured provider.

    Validation and provider failures are raised as ChatRequestError /
    ProviderError and rendered by the app's error handlers.
    """
    return await service.handle(payload)


@router.get("/test", summary="Check the provider connection")
async def test_connection(
    service: ChatService = Depends(get_chat_service),
):
    try:
        reply = await service.ping()
    except Exception as exc:
        logger.exception("Provider connection test failed")
        error = exc.message if isinstance(exc, ProviderError) else "Provider connection test failed"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": error},
        )
    return {
        "success": True,
        "message": f"{service.settings.llm_provider} connection successful",
        "provider": service.settings.llm_provider,
        "response": reply.text.strip(),
    }
