import logging
import sys
from typing import Optional

from chat_relay.core.config import get_settings


_configured = False


def configure_logging(level_override: Optional[str] = None) -> None:
    """
    Configure structured logging for the service.

    This is idempotent and safe to call multiple times.
    """
    global _configured

    if _configured:
        return

    settings = get_settings()
    log_level = (level_override or settings.log_level).upper()

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )

    # SDK loggers echo request payloads at INFO/DEBUG; keep them quiet.
    for noisy_logger in ("uvicorn.access", "httpx", "openai", "google_genai"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    _configured = True


def preview(text: str, limit: int = 50) -> str:
    """Shorten user or model text for log lines."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
