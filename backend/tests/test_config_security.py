"""
Security config guard tests.

Validates that production/staging environments fail fast when the auth
screen would run against the in-memory development gateway or send
credentials to a non-https gateway, while development stays permissive.
"""
from __future__ import annotations

import importlib

import pytest


def _cfg():
    from backend.web import config as cfg  # type: ignore

    return importlib.reload(cfg)


@pytest.mark.parametrize("env", ["prod", "production", "staging", "STAGE"])
def test_memory_gateway_guard_prod_raises(monkeypatch: pytest.MonkeyPatch, env: str):
    """In prod-like env, the in-memory gateway must abort startup."""
    monkeypatch.setenv("HELPBUDDY_ENV", env)
    monkeypatch.setenv("AUTH_GATEWAY", "memory")

    with pytest.raises(SystemExit):
        _cfg().ensure_secure_config_on_startup()


def test_missing_gateway_url_prod_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HELPBUDDY_ENV", "prod")
    monkeypatch.setenv("AUTH_GATEWAY", "http")

    with pytest.raises(SystemExit):
        _cfg().ensure_secure_config_on_startup()


def test_plain_http_gateway_url_prod_raises(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HELPBUDDY_ENV", "prod")
    monkeypatch.setenv("AUTH_GATEWAY_URL", "http://auth.internal/api")

    with pytest.raises(SystemExit):
        _cfg().ensure_secure_config_on_startup()


def test_https_gateway_prod_allows(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HELPBUDDY_ENV", "prod")
    monkeypatch.setenv("AUTH_GATEWAY_URL", "https://auth.helpbuddy.example/api")

    cfg = _cfg()
    cfg.ensure_secure_config_on_startup()
    assert cfg.gateway_kind() == "http"


def test_dev_allows_memory_gateway(monkeypatch: pytest.MonkeyPatch):
    """In dev env, the in-memory gateway is tolerated for local setups."""
    monkeypatch.setenv("HELPBUDDY_ENV", "dev")

    cfg = _cfg()
    cfg.ensure_secure_config_on_startup()
    assert cfg.gateway_kind() == "memory"


def test_numeric_settings_fall_back_on_garbage(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SCREEN_TTL_SECONDS", "soon")
    monkeypatch.setenv("AUTH_GATEWAY_TIMEOUT", "-3")
    cfg = _cfg()
    assert cfg.screen_ttl_seconds() == 1800
    assert cfg.gateway_timeout_seconds() == 10.0

    monkeypatch.setenv("SCREEN_TTL_SECONDS", "60")
    monkeypatch.setenv("AUTH_GATEWAY_TIMEOUT", "2.5")
    assert cfg.screen_ttl_seconds() == 60
    assert cfg.gateway_timeout_seconds() == 2.5


@pytest.mark.parametrize(
    "raw,expected",
    [(None, "/"), ("/dashboard", "/dashboard"), ("//evil.example", "/"), ("https://evil.example", "/")],
)
def test_home_path_only_accepts_local_paths(monkeypatch: pytest.MonkeyPatch, raw, expected):
    if raw is not None:
        monkeypatch.setenv("HOME_PATH", raw)
    assert _cfg().home_path() == expected


def test_app_wiring_uses_http_gateway_when_url_set(monkeypatch: pytest.MonkeyPatch):
    from backend.identity_access.gateway import HttpAuthGateway
    from backend.web import main

    monkeypatch.setenv("AUTH_GATEWAY_URL", "https://auth.example/api")
    monkeypatch.setenv("AUTH_GATEWAY_TIMEOUT", "3")
    monkeypatch.setenv("AVATAR_CHOICES", "thrivesprite:owl:Owl")
    main.configure_app_state(main.app)

    gw = main.app.state.auth_gateway
    assert isinstance(gw, HttpAuthGateway)
    assert gw.cfg.login_endpoint == "https://auth.example/api/login"
    assert gw.cfg.timeout_seconds == 3.0
    assert [c.label for c in main.app.state.avatar_choices] == ["Owl"]
