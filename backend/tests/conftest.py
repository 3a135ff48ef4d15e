"""
Pytest configuration for backend tests.

Why: Force AnyIO to use the asyncio backend to avoid sandbox restrictions
that can affect the Trio backend (e.g., socketpair permission errors), and
give every test a fresh app wiring (screen store, gateway) so state never
leaks between tests.
"""
from __future__ import annotations

from pathlib import Path
import sys

import pytest

# Ensure the repository root is importable (`backend.*`) without installation.
REPO_ROOT = Path(__file__).resolve().parents[2]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from backend.identity_access.domain import AuthResult  # noqa: E402


class FakeGateway:
    """Auth Gateway double recording every call.

    `login_result` / `register_result` may be an AuthResult or an exception
    instance (raised when called).
    """

    def __init__(self, *, login_result=None, register_result=None, on_call=None) -> None:
        self.login_result = login_result or AuthResult.ok()
        self.register_result = register_result or AuthResult.ok()
        self.on_call = on_call
        self.login_calls: list[tuple[str, str]] = []
        self.register_calls: list[tuple[str, str, str, str]] = []

    async def login(self, username: str, password: str) -> AuthResult:
        self.login_calls.append((username, password))
        return await self._answer(self.login_result)

    async def register(self, username: str, role: str, password: str, avatar_ref: str) -> AuthResult:
        self.register_calls.append((username, role, password, avatar_ref))
        return await self._answer(self.register_result)

    async def _answer(self, result):
        if self.on_call is not None:
            await self.on_call()
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Clear env-driven toggles that may leak from the developer shell.

    Behavior:
        - Default to dev semantics unless a test opts into prod explicitly.
        - Default to the in-memory gateway (no AUTH_GATEWAY_URL).
    """
    for var in (
        "HELPBUDDY_ENV",
        "HELPBUDDY_TRUST_PROXY",
        "AUTH_GATEWAY",
        "AUTH_GATEWAY_URL",
        "AUTH_GATEWAY_TIMEOUT",
        "AVATAR_CHOICES",
        "SCREEN_TTL_SECONDS",
        "HOME_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_app_state(_clear_env_toggles):
    """Rebuild `main.app.state` per test (fresh screen store and gateway)."""
    from backend.web import main

    main.SETTINGS.override_environment(None)
    main.configure_app_state(main.app)
    yield


@pytest.fixture
def fake_gateway(monkeypatch: pytest.MonkeyPatch) -> FakeGateway:
    """Install a FakeGateway on the app; tests tweak its results."""
    from backend.web import main

    gw = FakeGateway()
    monkeypatch.setattr(main.app.state, "auth_gateway", gw, raising=False)
    return gw
