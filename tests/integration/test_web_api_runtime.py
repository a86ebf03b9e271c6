from __future__ import annotations

import pytest
from fastapi.routing import APIRoute

from apps.web_api import main as web_api_main
from gated_auth.config.settings import Settings

REQUIRED_ENV = {
    "DATABASE_URL": "sqlite+aiosqlite:///./runtime-test.db",
    "INVITE_KEY": "open-sesame",
    "AUTH_TOKEN_SECRET": "runtime-signing-secret-32-characters",
    "PUBLIC_DOMAIN": "example.org",
}


def _set_required_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)


def test_create_app_exposes_login_and_signup_form_routes(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _set_required_env(monkeypatch)

    app = web_api_main.create_app(settings=Settings(_env_file=None))

    routes = {
        (route.path, method)
        for route in app.routes
        if isinstance(route, APIRoute)
        for method in route.methods
    }
    assert ("/login", "POST") in routes
    assert ("/signup", "POST") in routes


def test_run_asgi_server_uses_factory_mode(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def _fake_run(app: str, **kwargs: object) -> None:
        captured["app"] = app
        captured.update(kwargs)

    monkeypatch.setattr(web_api_main.uvicorn, "run", _fake_run)

    web_api_main.run_asgi_server(host="127.0.0.1", port=8123)

    assert captured == {
        "app": "apps.web_api.main:create_app",
        "host": "127.0.0.1",
        "port": 8123,
        "factory": True,
    }
