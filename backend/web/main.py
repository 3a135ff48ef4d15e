"Help Buddy web"
from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote
import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from backend.identity_access.gateway import (
    AuthGateway,
    GatewayConfig,
    HttpAuthGateway,
    InMemoryAuthGateway,
)
from backend.web import config as _cfg
from backend.web.auth_utils import FLASH_COOKIE_NAME, THEME_COOKIE_NAME
from backend.web.components import Layout, THEMES, parse_avatar_choices
from backend.web.effects import Toast
from backend.web.routes.auth import auth_router
from backend.web.routes.theme import theme_router
from backend.web.screens import ScreenStore


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest to avoid contaminating test env.
    - Allow explicit opt-out via HELPBUDDY_ENABLE_DOTENV (default true
      outside pytest).
    """
    import sys
    if "pytest" in sys.modules or os.getenv("PYTEST_CURRENT_TEST"):
        return False
    flag = (os.getenv("HELPBUDDY_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    from dotenv import load_dotenv

    load_dotenv()

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

# --- App & Settings Setup -------------------------------------------------------


class AppSettings:
    def __init__(self) -> None:
        self._env_override: str | None = None

    @property
    def environment(self) -> str:
        if self._env_override is not None:
            return self._env_override
        return os.getenv("HELPBUDDY_ENV", "dev").lower()

    def override_environment(self, env: str | None) -> None:
        """Override environment for tests (e.g., "prod"), or reset with None."""
        self._env_override = env


logger = logging.getLogger("helpbuddy.web")
SETTINGS = AppSettings()

app = FastAPI(title="Help Buddy", description="Connecting students, parents and educators", version="0.1.0")

static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

# --- Gateway & Screen Wiring ----------------------------------------------------


def load_gateway_config() -> GatewayConfig:
    base_url = (os.getenv("AUTH_GATEWAY_URL") or "").strip()
    return GatewayConfig(base_url=base_url, timeout_seconds=_cfg.gateway_timeout_seconds())


def build_auth_gateway() -> AuthGateway:
    kind = _cfg.gateway_kind()
    if kind == "http":
        cfg = load_gateway_config()
        logger.info("Using HTTP auth gateway at %s", cfg.base_url)
        return HttpAuthGateway(cfg)
    logger.warning("Using in-memory auth gateway (development only)")
    return InMemoryAuthGateway()


def configure_app_state(target: FastAPI) -> None:
    """(Re)build shared wiring on `app.state`; tests call this to reset state."""
    target.state.settings = SETTINGS
    target.state.auth_gateway = build_auth_gateway()
    target.state.screen_store = ScreenStore(ttl_seconds=_cfg.screen_ttl_seconds())
    target.state.avatar_choices = parse_avatar_choices(os.getenv("AVATAR_CHOICES"))
    target.state.home_path = _cfg.home_path()


configure_app_state(app)

app.include_router(auth_router)
app.include_router(theme_router)

# --- Security Headers Middleware ----------------------------------------------

HTMX_ORIGIN = "https://unpkg.com"


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    prod_like = _cfg.is_prod_like(SETTINGS.environment)
    if prod_like:
        # No inline scripts in production; styles stay external as well.
        csp = (
            f"default-src 'self'; script-src 'self' {HTMX_ORIGIN}; style-src 'self'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
        )
    else:
        csp = (
            f"default-src 'self'; script-src 'self' 'unsafe-inline' {HTMX_ORIGIN}; style-src 'self' 'unsafe-inline'; "
            "img-src 'self' data:; font-src 'self' data:; connect-src 'self';"
        )
    response.headers.setdefault("Content-Security-Policy", csp)
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    if prod_like:
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    # HSTS: always on (dev = prod)
    response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
    return response


# --- Pages ----------------------------------------------------------------------


def _theme(request: Request) -> str:
    value = request.cookies.get(THEME_COOKIE_NAME)
    return value if value in THEMES else "light"


@app.get("/", response_class=HTMLResponse)
async def home(request: Request):
    """Application home: navigation target after login or sign-up.

    Shows the pending flash toast (if any) exactly once.
    """
    flash = request.cookies.get(FLASH_COOKIE_NAME)
    toasts = [Toast("success", unquote(flash))] if flash else []
    content = """
    <div class="container home">
        <h1>Welcome to Help Buddy</h1>
        <p>Help Buddy connects students, parents and educators.</p>
        <p><a class="btn btn-primary" href="/auth">Login or sign up</a></p>
    </div>
    """
    layout = Layout(title="Home", content=content, theme=_theme(request), toasts=toasts, current_path="/")
    body = layout.render_fragment() if request.headers.get("HX-Request") else layout.render()
    response = HTMLResponse(content=body, headers={"Cache-Control": "private, no-store"})
    if flash:
        response.delete_cookie(FLASH_COOKIE_NAME, path="/")
    return response


@app.get("/health")
async def health_check():
    # Minimal health endpoint used by orchestrators and tests.
    return JSONResponse({"status": "healthy"}, headers={"Cache-Control": "private, no-store"})
