import pytest

from chat_relay.core.config import Settings
from chat_relay.main import create_app
from helpers import build_app, send


def test_health_ok():
    response = send(build_app(), "GET", "/health")
    assert response.status_code == 200
    body = response.json()
    assert body.get("status") == "ok"
    assert "service" in body
    assert "environment" in body
    assert "timestamp" in body


def test_health_reports_missing_api_key():
    body = send(build_app(), "GET", "/health").json()
    assert body["provider"] == "openai"
    assert body["apiKeyConfigured"] is False
    assert body["fallbackEnabled"] is False


def test_health_reports_configured_api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    body = send(build_app(), "GET", "/health").json()
    assert body["apiKeyConfigured"] is True


def test_health_follows_selected_provider(monkeypatch):
    monkeypatch.setenv("CHAT_RELAY_LLM_PROVIDER", "gemini")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    body = send(build_app(), "GET", "/health").json()
    assert body["provider"] == "gemini"
    assert body["apiKeyConfigured"] is False


def test_root_banner_lists_endpoints():
    response = send(build_app(), "GET", "/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "running"
    assert body["endpoints"]["health"] == "/health"
    assert body["endpoints"]["chat"] == "/api/chat (POST)"


def test_unknown_route_returns_json_404():
    response = send(build_app(), "GET", "/does-not-exist")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Endpoint not found"
    assert "/api/chat" in body["availableEndpoints"]


def test_health_is_not_under_api_prefix():
    assert send(build_app(), "GET", "/api/health").status_code == 404


def test_create_app_refuses_to_start_without_required_key(monkeypatch):
    monkeypatch.setenv("CHAT_RELAY_REQUIRE_API_KEY", "true")
    with pytest.raises(RuntimeError, match="missing"):
        create_app()


def test_create_app_starts_with_required_key_present(monkeypatch):
    monkeypatch.setenv("CHAT_RELAY_REQUIRE_API_KEY", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    assert send(create_app(), "GET", "/health").status_code == 200


def test_plain_port_env_is_honoured(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    assert Settings().port == 8080


def test_default_port():
    assert Settings().port == 3001
