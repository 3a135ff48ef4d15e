"""
Auth UI sign-up flow tests.

Covers POST /auth/submit in sign-up mode and POST /auth/avatar:
- students detour through the avatar picker before `register` is called,
- parents/educators register directly without an avatar,
- avatar selection registers once and navigates or re-renders the form.
"""

import json
import re

import httpx
import pytest
from httpx import ASGITransport

from backend.identity_access.domain import AuthResult
from backend.web import main


pytestmark = pytest.mark.anyio("asyncio")

HX = {"HX-Request": "true"}


def _extract_csrf(html: str) -> str | None:
    m = re.search(r'name="csrf_token"\s+value="([^"]+)"', html)
    return m.group(1) if m else None


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=ASGITransport(app=main.app), base_url="https://test")


def _toasts(response: httpx.Response) -> list[dict]:
    raw = response.headers.get("HX-Trigger")
    if not raw:
        return []
    value = json.loads(raw)["showMessage"]
    return value if isinstance(value, list) else [value]


async def _signup_screen(client: httpx.AsyncClient) -> str:
    page = await client.get("/auth")
    csrf = _extract_csrf(page.text)
    r = await client.post("/auth/mode", data={"csrf_token": csrf, "mode": "signup"}, headers=HX)
    assert r.status_code == 200
    return csrf


@pytest.mark.anyio
async def test_student_signup_shows_avatar_picker_without_calling_register(fake_gateway):
    async with _client() as client:
        csrf = await _signup_screen(client)
        r = await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "kim", "password": "pw", "role": "student"},
            headers=HX,
        )

    assert r.status_code == 200
    assert fake_gateway.register_calls == []
    assert _toasts(r) == []
    assert "Choose your ThriveSprite" in r.text
    assert 'name="avatar_ref"' in r.text
    assert 'value="thrivesprite:sunny"' in r.text
    assert 'data-phase="awaiting_avatar"' in r.text
    # The credential form is replaced by the picker
    assert 'id="auth-form"' not in r.text


@pytest.mark.anyio
async def test_avatar_selection_registers_student_and_navigates(fake_gateway):
    async with _client() as client:
        csrf = await _signup_screen(client)
        await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "kim", "password": "pw", "role": "student"},
            headers=HX,
        )
        r = await client.post("/auth/avatar", data={"csrf_token": csrf, "avatar_ref": "thrivesprite:comet"}, headers=HX)

        assert r.status_code == 204
        assert r.headers.get("HX-Redirect") == "/"
        home = await client.get("/")

    assert fake_gateway.register_calls == [("kim", "student", "pw", "thrivesprite:comet")]
    assert "Account created successfully! 🎉" in home.text


@pytest.mark.anyio
async def test_avatar_selection_failure_hides_picker_and_shows_error(fake_gateway):
    fake_gateway.register_result = AuthResult.failed("Username already taken")
    async with _client() as client:
        csrf = await _signup_screen(client)
        await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "kim", "password": "pw", "role": "student"},
            headers=HX,
        )
        r = await client.post("/auth/avatar", data={"csrf_token": csrf, "avatar_ref": "thrivesprite:comet"}, headers=HX)

    assert r.status_code == 200
    assert _toasts(r) == [{"message": "Username already taken", "type": "error"}]
    assert "Choose your ThriveSprite" not in r.text
    assert 'id="signup-username"' in r.text
    assert 'value="kim"' in r.text
    assert len(fake_gateway.register_calls) == 1


@pytest.mark.anyio
async def test_empty_avatar_keeps_picker(fake_gateway):
    async with _client() as client:
        csrf = await _signup_screen(client)
        await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "kim", "password": "pw", "role": "student"},
            headers=HX,
        )
        r = await client.post("/auth/avatar", data={"csrf_token": csrf, "avatar_ref": ""}, headers=HX)

    assert r.status_code == 200
    assert "Choose your ThriveSprite" in r.text
    assert _toasts(r) == [{"message": "Please choose an avatar.", "type": "error"}]
    assert fake_gateway.register_calls == []


@pytest.mark.anyio
async def test_avatar_without_pending_detour_is_conflict(fake_gateway):
    async with _client() as client:
        csrf = await _signup_screen(client)
        r = await client.post("/auth/avatar", data={"csrf_token": csrf, "avatar_ref": "thrivesprite:comet"}, headers=HX)

    assert r.status_code == 409
    assert r.json() == {"error": "invalid_transition"}
    assert fake_gateway.register_calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("role", ["parent", "educator"])
async def test_parent_and_educator_register_directly(fake_gateway, role: str):
    async with _client() as client:
        csrf = await _signup_screen(client)
        r = await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "sam", "password": "pw", "role": role},
            headers=HX,
        )

    assert r.status_code == 204
    assert fake_gateway.register_calls == [("sam", role, "pw", "")]


@pytest.mark.anyio
async def test_signup_with_unknown_role_is_rejected(fake_gateway):
    async with _client() as client:
        csrf = await _signup_screen(client)
        r = await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "sam", "password": "pw", "role": "admin"},
            headers=HX,
        )

    assert r.status_code == 400
    assert r.json() == {"error": "invalid_role"}
    assert fake_gateway.register_calls == []


@pytest.mark.anyio
async def test_signup_failure_uses_fallback_message(fake_gateway):
    fake_gateway.register_result = AuthResult(success=False, error=None)
    async with _client() as client:
        csrf = await _signup_screen(client)
        r = await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "sam", "password": "pw", "role": "parent"},
            headers=HX,
        )

    assert _toasts(r) == [{"message": "Sign-up failed", "type": "error"}]
    assert "Create Account" in r.text


@pytest.mark.anyio
async def test_in_memory_gateway_register_then_login_roundtrip():
    async with _client() as client:
        csrf = await _signup_screen(client)
        r = await client.post(
            "/auth/submit",
            data={"csrf_token": csrf, "username": "Robin", "password": "pw", "role": "educator"},
            headers=HX,
        )
        assert r.status_code == 204

        page = await client.get("/auth")
        r = await client.post(
            "/auth/submit",
            data={"csrf_token": _extract_csrf(page.text), "username": "robin", "password": "pw"},
            headers=HX,
        )

    assert r.status_code == 204
    user = main.app.state.auth_gateway.get_user("robin")
    assert user is not None and user.role == "educator" and user.avatar_ref == ""


@pytest.mark.anyio
async def test_plain_form_avatar_flow_without_htmx(fake_gateway):
    async with _client() as client:
        page = await client.get("/auth")
        csrf = _extract_csrf(page.text)
        await client.post("/auth/mode", data={"csrf_token": csrf, "mode": "signup"})
        picker = await client.post(
            "/auth/submit", data={"csrf_token": csrf, "username": "kim", "password": "pw", "role": "student"}
        )
        assert "<!DOCTYPE html>" in picker.text
        assert "Choose your ThriveSprite" in picker.text
        assert _extract_csrf(picker.text) == csrf

        r = await client.post(
            "/auth/avatar", data={"csrf_token": csrf, "avatar_ref": "thrivesprite:leafy"}, follow_redirects=False
        )

    assert r.status_code == 303
    assert fake_gateway.register_calls == [("kim", "student", "pw", "thrivesprite:leafy")]
