"""
Configuration and startup security checks for Help Buddy.

Why: The auth screen must never run against the in-memory development
gateway, or send credentials over plain HTTP, in a real deployment. This
module provides a single guard that enforces those constraints without
burdening local development.

Permissions: The caller needs no special privileges. The functions simply
read environment variables; the guard raises `SystemExit` on fatal
misconfiguration.
"""
from __future__ import annotations

import os


def is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def gateway_kind() -> str:
    """Return the configured gateway implementation: "http" or "memory".

    Defaults to "http" when AUTH_GATEWAY_URL is set, otherwise "memory".
    """
    raw = (os.getenv("AUTH_GATEWAY") or "").strip().lower()
    if raw in {"http", "memory"}:
        return raw
    return "http" if (os.getenv("AUTH_GATEWAY_URL") or "").strip() else "memory"


def _int_env(name: str, default: int) -> int:
    try:
        value = int((os.getenv(name) or "").strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _float_env(name: str, default: float) -> float:
    try:
        value = float((os.getenv(name) or "").strip())
    except ValueError:
        return default
    return value if value > 0 else default


def screen_ttl_seconds() -> int:
    return _int_env("SCREEN_TTL_SECONDS", 1800)


def gateway_timeout_seconds() -> float:
    return _float_env("AUTH_GATEWAY_TIMEOUT", 10.0)


def home_path() -> str:
    value = (os.getenv("HOME_PATH") or "/").strip()
    return value if value.startswith("/") and not value.startswith("//") else "/"


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Intent: Abort process startup when obviously insecure settings are detected
    in production/staging. Development remains permissive for convenience.

    Checks:
    - The in-memory development gateway must not be selected.
    - AUTH_GATEWAY_URL must be set and use https.
    """

    env = os.getenv("HELPBUDDY_ENV", "dev")
    if not is_prod_like(env):
        return  # dev/test remain permissive

    # 1) No in-memory accounts in production
    if gateway_kind() == "memory":
        raise SystemExit(
            "Refusing to start: AUTH_GATEWAY=memory (or AUTH_GATEWAY_URL unset) is not allowed in production/staging."
        )

    # 2) Credentials travel to the gateway; require TLS
    url = (os.getenv("AUTH_GATEWAY_URL") or "").strip()
    if not url:
        raise SystemExit("Refusing to start: AUTH_GATEWAY_URL must be set in production/staging.")
    if not url.lower().startswith("https://"):
        raise SystemExit(
            "Refusing to start: AUTH_GATEWAY_URL must use https in production (got a non-https URL)."
        )
