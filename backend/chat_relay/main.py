"""
Single entrypoint for the chat relay service.

Run from backend directory: uvicorn chat_relay.main:app --reload
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay import __version__
from chat_relay.api import register_routes
from chat_relay.api.chat import shutdown_chat_service
from chat_relay.api.errors import register_error_handlers
from chat_relay.core.config import get_settings
from chat_relay.core.logging_config import configure_logging
from chat_relay.providers import is_provider_configured


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        "%s server starting: provider=%s api_key_configured=%s fallback=%s",
        settings.assistant_name,
        settings.llm_provider,
        is_provider_configured(settings),
        settings.fallback_enabled,
    )
    yield
    await shutdown_chat_service()
    logger.info("Shutting down gracefully")


def check_provider_key() -> None:
    """Warn (or refuse to start, when required) if the provider has no API key."""
    settings = get_settings()
    if is_provider_configured(settings):
        return
    if settings.require_api_key:
        raise RuntimeError(
            f"API key for provider {settings.llm_provider!r} is missing from environment variables"
        )
    logger.warning(
        "No API key configured for provider %s; /api/chat will %s",
        settings.llm_provider,
        "use the fallback responder" if settings.fallback_enabled else "return 500",
    )


def create_app() -> FastAPI:
    """
    Application factory for the FastAPI app.
    """
    configure_logging()
    check_provider_key()
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.assistant_name} API",
        description=(
            "Backend that relays chat messages, with recent history, to a "
            "generative-AI provider (OpenAI, Gemini or Hugging Face)."
        ),
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    register_routes(app)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chat_relay.main:app",
        host=get_settings().host,
        port=get_settings().port,
        reload=False,
    )
