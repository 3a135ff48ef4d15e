"""
Auth screen FastAPI routes (router-only module).

Why:
    Keep the login/sign-up endpoints in a dedicated router. The handlers are
    thin adapters: they load the screen state, apply form input, run the
    `AuthFlow`, and translate its effects into HTTP.

HTTP semantics:
    - HTMX requests receive the `#auth-card` fragment; toasts travel in the
      `HX-Trigger` header (`showMessage`), navigation as `204 + HX-Redirect`.
    - Plain form posts receive the full page (toasts inline) or `303` to home.
    - A success toast survives navigation via the short-lived flash cookie.

Shared wiring lives on `request.app.state` (see `main.py`): `screen_store`,
`auth_gateway`, `avatar_choices`, `home_path`, `settings`.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote
import logging

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response

from backend.web.auth_flow import SERVER_ERROR, AuthFlow, AuthScreenState, InvalidTransition, SubmissionInProgress
from backend.web.auth_utils import FLASH_COOKIE_NAME, SCREEN_COOKIE_NAME, THEME_COOKIE_NAME, cookie_opts
from backend.web.components import AuthScreen, Layout, THEMES
from backend.web.effects import RequestEffects
from backend.web.routes.security import csrf_token_matches, is_same_origin


auth_router = APIRouter(tags=["Auth"])  # explicit paths, no prefix
logger = logging.getLogger("helpbuddy.web.auth")

SCREEN_EXPIRED = "Your session expired. Please try again."
MAX_FLASH_LEN = 200


def _no_store_headers() -> dict[str, str]:
    return {"Cache-Control": "private, no-store", "Vary": "HX-Request"}


ERROR_MESSAGES = {
    "csrf_violation": "Your session is no longer valid. Please reload the page.",
    "invalid_mode": "Unknown form mode.",
    "invalid_role": "Please choose student, parent or educator.",
    "invalid_transition": "This step is no longer available. Please try again.",
    "request_in_progress": "Please wait, your request is still being processed.",
}


def _error_response(request: Request, error: str, status_code: int) -> JSONResponse:
    """JSON error body; HTMX callers also get a toast via `HX-Trigger`.

    htmx does not swap 4xx bodies but still fires `HX-Trigger` events, so the
    header is what the user sees.
    """
    headers = _no_store_headers()
    if _is_htmx(request):
        effects = RequestEffects()
        effects.show_error(ERROR_MESSAGES.get(error, SERVER_ERROR))
        headers["HX-Trigger"] = effects.hx_trigger()
    return JSONResponse({"error": error}, status_code=status_code, headers=headers)


def _is_htmx(request: Request) -> bool:
    return bool(request.headers.get("HX-Request"))


def _theme(request: Request) -> str:
    value = request.cookies.get(THEME_COOKIE_NAME)
    return value if value in THEMES else "light"


def _environment(request: Request) -> str:
    settings = getattr(request.app.state, "settings", None)
    return getattr(settings, "environment", "dev")


def _set_screen_cookie(request: Request, response: Response, state: AuthScreenState) -> None:
    opts = cookie_opts(_environment(request))
    response.set_cookie(
        key=SCREEN_COOKIE_NAME,
        value=state.screen_id,
        httponly=True,
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=request.app.state.screen_store.ttl_seconds,
    )


def _flow(request: Request, state: AuthScreenState, effects: RequestEffects) -> AuthFlow:
    return AuthFlow(
        state,
        gateway=request.app.state.auth_gateway,
        navigator=effects,
        notifier=effects,
        home_path=request.app.state.home_path,
    )


async def _read_form(request: Request) -> dict[str, str]:
    form = await request.form()
    # Only plain string fields are meaningful here; ignore uploads.
    return {key: value for key, value in form.items() if isinstance(value, str)}


def _apply_credentials(flow: AuthFlow, form: dict[str, str]) -> None:
    flow.update_credentials(username=form.get("username"), password=form.get("password"))


def _load_screen(request: Request) -> Optional[AuthScreenState]:
    return request.app.state.screen_store.get(request.cookies.get(SCREEN_COOKIE_NAME))


def _render_screen(
    request: Request,
    state: AuthScreenState,
    effects: RequestEffects | None = None,
    *,
    status_code: int = 200,
) -> Response:
    """Render the screen for the current request (fragment or full page).

    Behavior:
        - When the flow navigated, discard the screen (credentials included),
          expire the screen cookie, keep the success toast in the flash
          cookie and redirect (HX-Redirect for HTMX, 303 otherwise).
        - Otherwise render the card fragment (HTMX) or the full Layout and
          refresh the screen cookie.
    """
    effects = effects or RequestEffects()
    headers = _no_store_headers()
    opts = cookie_opts(_environment(request))

    if effects.redirect_to:
        request.app.state.screen_store.discard(state.screen_id)
        if _is_htmx(request):
            headers["HX-Redirect"] = effects.redirect_to
            response: Response = Response(status_code=204, headers=headers)
        else:
            response = RedirectResponse(url=effects.redirect_to, status_code=303, headers=headers)
        response.delete_cookie(SCREEN_COOKIE_NAME, path="/")
        success = next((t for t in effects.toasts if t.kind == "success"), None)
        if success:
            response.set_cookie(
                key=FLASH_COOKIE_NAME,
                value=quote(success.message[:MAX_FLASH_LEN]),
                httponly=True,
                secure=opts["secure"],
                samesite=opts["samesite"],
                path="/",
                max_age=60,
            )
        return response

    screen = AuthScreen(state, avatar_choices=request.app.state.avatar_choices)
    if _is_htmx(request):
        trigger = effects.hx_trigger()
        if trigger:
            headers["HX-Trigger"] = trigger
        response = HTMLResponse(content=screen.render_card(), status_code=status_code, headers=headers)
    else:
        title = "Login" if state.is_login else "Sign Up"
        layout = Layout(
            title=title,
            content=screen.render(),
            theme=_theme(request),
            toasts=effects.toasts,
            current_path="/auth",
        )
        response = HTMLResponse(content=layout.render(), status_code=status_code, headers=headers)
    _set_screen_cookie(request, response, state)
    return response


def _flow_response(request: Request, state: AuthScreenState, effects: RequestEffects) -> Response:
    """Render the outcome of a gateway call.

    A screen discarded while the call was pending (reset, expiry) is not
    rendered and its cookie is not refreshed: the browser already holds the
    replacement screen.
    """
    if not state.mounted:
        logger.info("Dropped response for a discarded screen")
        headers = _no_store_headers()
        headers["HX-Reswap"] = "none"
        return Response(status_code=204, headers=headers)
    return _render_screen(request, state, effects)


async def _prepare_post(request: Request) -> tuple[Optional[AuthScreenState], dict[str, str], Optional[Response]]:
    """Common guard for POST handlers.

    Returns (state, form, early_response). An early response is returned for
    cross-origin requests (403), unknown/expired screens (fresh screen; 409 for plain posts, 200 for
    HTMX so the new card and its CSRF token are swapped in) and CSRF
    mismatches (403).
    """
    if not is_same_origin(request):
        logger.warning("Rejected cross-origin auth request to %s", request.url.path)
        return None, {}, _error_response(request, "csrf_violation", 403)
    state = _load_screen(request)
    if state is None:
        fresh = request.app.state.screen_store.create()
        effects = RequestEffects()
        effects.show_error(SCREEN_EXPIRED)
        status_code = 200 if _is_htmx(request) else 409
        return None, {}, _render_screen(request, fresh, effects, status_code=status_code)
    form = await _read_form(request)
    provided = request.headers.get("X-CSRF-Token") or form.get("csrf_token")
    if not csrf_token_matches(state.csrf_token, provided):
        logger.warning("CSRF token mismatch on %s", request.url.path)
        return None, {}, _error_response(request, "csrf_violation", 403)
    return state, form, None


@auth_router.get("/auth")
async def auth_screen(request: Request):
    """Render the login/sign-up screen.

    Behavior:
        - Reuses the screen identified by the cookie (typed values survive a
          reload) or creates a fresh one.
        - Sets `Cache-Control: private, no-store`; the page may carry typed
          credentials.
    Permissions:
        Public.
    """
    state = _load_screen(request) or request.app.state.screen_store.create()
    return _render_screen(request, state)


@auth_router.post("/auth/mode")
async def auth_switch_mode(request: Request):
    """Switch between the login and sign-up tabs; typed credentials are kept."""
    state, form, early = await _prepare_post(request)
    if early is not None:
        return early
    flow = _flow(request, state, RequestEffects())
    _apply_credentials(flow, form)
    try:
        flow.switch_mode(form.get("mode", ""))
    except ValueError:
        return _error_response(request, "invalid_mode", 400)
    return _render_screen(request, state)


@auth_router.post("/auth/password-visibility")
async def auth_toggle_password(request: Request):
    """Toggle masked/plain display of the password. The value is untouched."""
    state, form, early = await _prepare_post(request)
    if early is not None:
        return early
    flow = _flow(request, state, RequestEffects())
    _apply_credentials(flow, form)
    flow.toggle_password()
    return _render_screen(request, state)


@auth_router.post("/auth/role")
async def auth_set_role(request: Request):
    """Change the sign-up role (student, parent, educator)."""
    state, form, early = await _prepare_post(request)
    if early is not None:
        return early
    flow = _flow(request, state, RequestEffects())
    _apply_credentials(flow, form)
    try:
        flow.set_role(form.get("role", ""))
    except ValueError:
        return _error_response(request, "invalid_role", 400)
    return _render_screen(request, state)


@auth_router.post("/auth/submit")
async def auth_submit(request: Request):
    """Submit the active form.

    Behavior:
        - Login: calls `login(username, password)`.
        - Sign-up as student without avatar: shows the avatar picker, no call.
        - Sign-up otherwise: calls `register(...)`.
        - Success navigates to home; failures re-render with one toast.
    Errors:
        400 invalid_role, 403 csrf_violation, 409 request_in_progress.
    """
    state, form, early = await _prepare_post(request)
    if early is not None:
        return early
    if state.loading:
        # Leave the pending attempt's inputs alone.
        logger.info("Ignored duplicate submission for a pending screen")
        return _error_response(request, "request_in_progress", 409)
    effects = RequestEffects()
    flow = _flow(request, state, effects)
    _apply_credentials(flow, form)
    if not state.is_login and "role" in form:
        try:
            flow.set_role(form["role"])
        except ValueError:
            return _error_response(request, "invalid_role", 400)
    try:
        await flow.submit()
    except SubmissionInProgress:
        logger.info("Ignored duplicate submission for a pending screen")
        return _error_response(request, "request_in_progress", 409)
    except InvalidTransition:
        return _error_response(request, "invalid_transition", 409)
    return _flow_response(request, state, effects)


@auth_router.post("/auth/avatar")
async def auth_select_avatar(request: Request):
    """Store the chosen avatar and immediately re-attempt registration."""
    state, form, early = await _prepare_post(request)
    if early is not None:
        return early
    effects = RequestEffects()
    flow = _flow(request, state, effects)
    try:
        await flow.select_avatar(form.get("avatar_ref", ""))
    except SubmissionInProgress:
        logger.info("Ignored avatar selection while registration is pending")
        return _error_response(request, "request_in_progress", 409)
    except InvalidTransition:
        return _error_response(request, "invalid_transition", 409)
    return _flow_response(request, state, effects)


@auth_router.post("/auth/reset")
async def auth_reset(request: Request):
    """Discard the current screen (typed values included) and start over.

    A gateway call still pending for the old screen is not actioned when it
    resolves.
    """
    state, _form, early = await _prepare_post(request)
    if early is not None:
        return early
    store = request.app.state.screen_store
    store.discard(state.screen_id)
    return _render_screen(request, store.create())
