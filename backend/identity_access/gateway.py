"""
Auth Gateway adapters: the screen's only way to log users in or create accounts.

Why: Keep the web layer independent from the concrete authentication
service. The FastAPI adapter talks to the `AuthGateway` protocol; this module
provides the HTTP client used in deployments and an in-memory variant for
local development and tests.

Security: Never log credentials. Neither adapter issues sessions or tokens;
that stays with the external service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Protocol
import hashlib
import hmac
import logging
import secrets

import httpx

from .domain import AuthResult, normalize_role, requires_avatar


logger = logging.getLogger("helpbuddy.identity_access")


class AuthGatewayError(RuntimeError):
    """Raised when the gateway cannot produce a structured result (transport, 5xx, bad body)."""


class AuthGateway(Protocol):
    async def login(self, username: str, password: str) -> AuthResult: ...

    async def register(self, username: str, role: str, password: str, avatar_ref: str) -> AuthResult: ...


@dataclass(frozen=True)
class GatewayConfig:
    base_url: str  # e.g., https://auth.helpbuddy.example/api
    timeout_seconds: float = 10.0

    @property
    def login_endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/login"

    @property
    def register_endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/register"


def _error_text(body: dict) -> Optional[str]:
    for key in ("error", "detail", "message"):
        value = body.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


class HttpAuthGateway:
    """Forward login/register calls to the Auth Gateway over HTTP.

    Behavior:
        - POSTs JSON to `{base}/login` and `{base}/register`.
        - 2xx with `{"success": true}` → `AuthResult.ok()`; any other 2xx/4xx
          JSON body → failed result carrying `error`/`detail`.
        - Transport errors, 5xx and non-JSON bodies raise `AuthGatewayError`.
    """

    def __init__(self, cfg: GatewayConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.cfg = cfg
        # Injected transport lets tests answer without a network (httpx.MockTransport).
        self._transport = transport

    async def login(self, username: str, password: str) -> AuthResult:
        payload = {"username": username, "password": password}
        return await self._post(self.cfg.login_endpoint, payload)

    async def register(self, username: str, role: str, password: str, avatar_ref: str) -> AuthResult:
        payload = {
            "username": username,
            "password": password,
            "role": role,
            "avatar_url": avatar_ref or None,
        }
        return await self._post(self.cfg.register_endpoint, payload)

    async def _post(self, url: str, payload: Dict[str, object]) -> AuthResult:
        try:
            async with httpx.AsyncClient(timeout=self.cfg.timeout_seconds, transport=self._transport) as client:
                resp = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise AuthGatewayError("gateway_unreachable") from exc

        if resp.status_code >= 500:
            raise AuthGatewayError(f"gateway_status_{resp.status_code}")
        try:
            body = resp.json()
        except ValueError as exc:
            raise AuthGatewayError("gateway_invalid_body") from exc
        if not isinstance(body, dict):
            raise AuthGatewayError("gateway_invalid_body")

        if 200 <= resp.status_code < 300 and body.get("success") is True:
            return AuthResult.ok()
        logger.info("Auth gateway rejected request", extra={"status": resp.status_code})
        return AuthResult.failed(_error_text(body))


@dataclass
class UserRecord:
    username: str
    role: str
    avatar_ref: str
    salt: bytes
    password_hash: bytes


_PBKDF2_ROUNDS = 120_000


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ROUNDS)


class InMemoryAuthGateway:
    """Development gateway keeping accounts in process memory.

    Not for production: the startup guard refuses it in prod-like envs.
    Usernames are compared case-insensitively.
    """

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}

    def get_user(self, username: str) -> Optional[UserRecord]:
        return self._users.get(username.strip().lower())

    async def register(self, username: str, role: str, password: str, avatar_ref: str) -> AuthResult:
        key = (username or "").strip().lower()
        if not key or not password:
            return AuthResult.failed("Username and password are required")
        canonical_role = normalize_role(role)
        if canonical_role is None:
            return AuthResult.failed("Unknown role")
        if requires_avatar(canonical_role) and not avatar_ref:
            return AuthResult.failed("Please choose an avatar")
        if key in self._users:
            return AuthResult.failed("Username already taken")
        salt = secrets.token_bytes(16)
        self._users[key] = UserRecord(
            username=username.strip(),
            role=canonical_role,
            avatar_ref=avatar_ref if requires_avatar(canonical_role) else "",
            salt=salt,
            password_hash=_hash_password(password, salt),
        )
        logger.info("Registered account", extra={"role": canonical_role})
        return AuthResult.ok()

    async def login(self, username: str, password: str) -> AuthResult:
        rec = self.get_user(username or "")
        if rec is None or not hmac.compare_digest(rec.password_hash, _hash_password(password or "", rec.salt)):
            return AuthResult.failed("Invalid username or password")
        return AuthResult.ok()


__all__ = [
    "AuthGateway",
    "AuthGatewayError",
    "GatewayConfig",
    "HttpAuthGateway",
    "InMemoryAuthGateway",
    "UserRecord",
]
