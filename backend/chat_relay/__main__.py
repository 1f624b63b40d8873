"""
Allow running as: python -m chat_relay

Delegates to the application factory in main.py.
"""
import uvicorn

from chat_relay.core.config import get_settings
from chat_relay.main import create_app


def main() -> None:
    settings = get_settings()
    app = create_app()
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        reload=False,
        workers=1,
    )


if __name__ == "__main__":
    main()
