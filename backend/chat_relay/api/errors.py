from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chat_relay.core.config import get_settings
from chat_relay.providers.errors import ErrorKind, ProviderError
from chat_relay.services.chat_service import ChatRequestError

logger = logging.getLogger(__name__)

# Public status code and message per failure category. Upstream details are
# only exposed in development.
ERROR_RESPONSES: Dict[ErrorKind, Tuple[int, str]] = {
    ErrorKind.CONFIGURATION: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Server configuration error. Please contact support.",
    ),
    ErrorKind.AUTHENTICATION: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "API authentication failed. Please contact support.",
    ),
    ErrorKind.RATE_LIMITED: (
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests. Please wait a moment and try again.",
    ),
    ErrorKind.QUOTA_EXCEEDED: (
        status.HTTP_402_PAYMENT_REQUIRED,
        "API quota exceeded. Please try again later.",
    ),
    ErrorKind.BAD_REQUEST: (
        status.HTTP_502_BAD_GATEWAY,
        "The AI service rejected the request.",
    ),
    ErrorKind.UNAVAILABLE: (
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "AI service temporarily unavailable. Please try again in a moment.",
    ),
    ErrorKind.UNKNOWN: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Something went wrong. Please try again.",
    ),
}

AVAILABLE_ENDPOINTS = ["/health", "/api/chat", "/api/test"]


def error_body(message: str, details: Optional[str] = None) -> dict:
    body: dict = {"error": message}
    if details and get_settings().is_development:
        body["details"] = details
    return body


def classify_provider_error(exc: ProviderError) -> Tuple[int, str]:
    """Map a ProviderError to the HTTP status and public message sent to clients."""
    return ERROR_RESPONSES.get(exc.kind, ERROR_RESPONSES[ErrorKind.UNKNOWN])


async def _provider_error_handler(request: Request, exc: ProviderError) -> JSONResponse:
    status_code, message = classify_provider_error(exc)
    return JSONResponse(status_code=status_code, content=error_body(message, exc.message))


async def _chat_request_error_handler(request: Request, exc: ChatRequestError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(str(exc)),
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    details = first.get("msg") if isinstance(first, dict) else None
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Valid message is required", details),
    )


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "Endpoint not found",
                "availableEndpoints": AVAILABLE_ENDPOINTS,
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Server error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Attach JSON error handlers that keep every error body in the
    ``{"error": ..., "details": ...}`` shape.
    """
    app.add_exception_handler(ProviderError, _provider_error_handler)
    app.add_exception_handler(ChatRequestError, _chat_request_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
