"""
Identity domain constants and simple helpers.

Why:
- Centralize the account roles to avoid drift between the gateway adapters
  and the web layer.
- Keep the result shape returned by the Auth Gateway in one place so the
  screen never inspects anything beyond `success` and `error`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({"student", "parent", "educator"})
DEFAULT_ROLE = "student"

# Display order for the role selector.
ROLE_LABELS = (
    ("student", "Student"),
    ("parent", "Parent"),
    ("educator", "Educator"),
)


@dataclass(frozen=True)
class AuthResult:
    success: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "AuthResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str | None) -> "AuthResult":
        return cls(success=False, error=error or None)


def normalize_role(value: object) -> str | None:
    """Return the canonical role for `value` or None if it is not allowed.

    Accepts surrounding whitespace and any letter case ("  Parent ").
    """
    if not isinstance(value, str):
        return None
    role = value.strip().lower()
    return role if role in ALLOWED_ROLES else None


def requires_avatar(role: str) -> bool:
    """Students pick an avatar before their account is created."""
    return role == "student"


__all__ = ["ALLOWED_ROLES", "DEFAULT_ROLE", "ROLE_LABELS", "AuthResult", "normalize_role", "requires_avatar"]
