"""
Entrypoint to run the backend server.

From project root: cd backend && uvicorn chat_relay.main:app --reload
Or: cd backend && python main.py
"""
if __name__ == "__main__":
    import uvicorn

    from chat_relay.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "chat_relay.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )
