"""
Theme toggle route.

Flips the light/dark theme cookie and sends the browser back to the page it
came from. Independent from the auth flow: it never reads or writes screen
state.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, RedirectResponse

from backend.web.auth_utils import THEME_COOKIE_NAME, cookie_opts, is_inapp_path
from backend.web.components import THEMES, other_theme
from backend.web.routes.security import is_same_origin


theme_router = APIRouter(tags=["Theme"])

THEME_COOKIE_MAX_AGE = 60 * 60 * 24 * 365


@theme_router.post("/theme/toggle")
async def theme_toggle(request: Request):
    """Flip the theme cookie and redirect (303) to an in-app `return_to` path.

    Security:
        Same-origin only. External or malformed `return_to` values fall back
        to "/" to prevent open redirects.
    """
    if not is_same_origin(request):
        return JSONResponse({"error": "csrf_violation"}, status_code=403, headers={"Cache-Control": "private, no-store"})
    form = await request.form()
    return_to = form.get("return_to")
    target = return_to if is_inapp_path(return_to) else "/"

    current = request.cookies.get(THEME_COOKIE_NAME)
    new_theme = other_theme(current if current in THEMES else "light")
    settings = getattr(request.app.state, "settings", None)
    opts = cookie_opts(getattr(settings, "environment", "dev"))

    response = RedirectResponse(url=target, status_code=303, headers={"Cache-Control": "private, no-store"})
    response.set_cookie(
        key=THEME_COOKIE_NAME,
        value=new_theme,
        httponly=True,  # the theme is applied server-side via data-theme
        secure=opts["secure"],
        samesite=opts["samesite"],
        path="/",
        max_age=THEME_COOKIE_MAX_AGE,
    )
    return response
