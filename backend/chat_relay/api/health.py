from datetime import datetime, timezone

from fastapi import APIRouter

from chat_relay import __version__
from chat_relay.core.config import get_settings
from chat_relay.providers import is_provider_configured


router = APIRouter()


@router.get("/", summary="Service banner", tags=["health"])
async def root() -> dict:
    settings = get_settings()
    return {
        "message": f"{settings.assistant_name} API",
        "status": "running",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "chat": f"{settings.api_prefix}/chat (POST)",
            "test": f"{settings.api_prefix}/test",
        },
    }


@router.get("/health", summary="Service health check", tags=["health"])
async def health_check() -> dict:
    """
    Lightweight health check for readiness / liveness probes.

    Never calls the provider; ``apiKeyConfigured`` only reports whether a key is set.
    """
    settings = get_settings()

    return {
        "status": "ok",
        "message": f"{settings.assistant_name} API is running",
        "service": settings.app_name,
        "environment": settings.environment,
        "provider": settings.llm_provider,
        "apiKeyConfigured": is_provider_configured(settings),
        "fallbackEnabled": settings.fallback_enabled,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
