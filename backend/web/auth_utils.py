"""
Shared authentication utilities.

Why:
    Avoid duplicating cookie policy and redirect validation across modules
    (main app, auth router, theme router).

Design:
    The helpers are framework-agnostic and pure: callers decide where the
    environment and the raw values come from.
"""

from __future__ import annotations

import re


SCREEN_COOKIE_NAME = "helpbuddy_screen"
FLASH_COOKIE_NAME = "helpbuddy_flash"
THEME_COOKIE_NAME = "helpbuddy_theme"

# Allowed in-app redirect paths: absolute, no "//", no "..".
INAPP_PATH_PATTERN = re.compile(r"^(?!.*//)(?!.*\.\.)/[A-Za-z0-9._\-/]*$")
MAX_INAPP_REDIRECT_LEN = 256


def cookie_opts(environment: str) -> dict:
    """Return hardened cookie flags (dev = prod).

    Returns a mapping with keys:
      - secure: True
      - samesite: "lax"
    """
    # Lax keeps the cookie on top-level navigations (redirect to home after
    # login) while still blocking cross-site POSTs.
    return {"secure": True, "samesite": "lax"}


def is_inapp_path(value: object) -> bool:
    """Return True for absolute in-app paths like "/" or "/auth"."""
    if not isinstance(value, str) or not value or len(value) > MAX_INAPP_REDIRECT_LEN:
        return False
    return bool(INAPP_PATH_PATTERN.match(value))
