from fastapi import APIRouter, FastAPI

from chat_relay.core.config import get_settings

from . import chat, health


def get_api_router() -> APIRouter:
    """
    Aggregate and return the prefixed API router.
    """
    api_router = APIRouter()

    api_router.include_router(
        chat.router,
        prefix="",
        tags=["chat"],
    )

    return api_router


def register_routes(app: FastAPI) -> None:
    """
    Attach all routes to the FastAPI application.

    Health and the banner live at the root so platform probes can reach
    them without knowing the API prefix.
    """
    settings = get_settings()
    app.include_router(health.router)
    app.include_router(get_api_router(), prefix=settings.api_prefix)
