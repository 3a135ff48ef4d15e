"""
In-memory store for auth screen state.

Why: Keep form state (including the typed password) server-side and opaque
to the client. The browser only carries an opaque screen id cookie.

Lifecycle: a screen is created on first visit, discarded on navigation,
explicit reset, or expiry. Discarding marks the state unmounted so an
in-flight gateway call for it is not actioned afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import time

from backend.web.auth_flow import AuthScreenState


def _now() -> int:
    return int(time.time())


@dataclass
class ScreenRecord:
    state: AuthScreenState
    expires_at: int


class ScreenStore:
    """Screens keyed by id. Expired screens are swept on every `create()`
    and, at most once per `sweep_interval` seconds, on `get()`.
    """

    def __init__(self, *, ttl_seconds: int = 1800, sweep_interval: int = 60):
        self.ttl_seconds = ttl_seconds
        self.sweep_interval = sweep_interval
        self._data: Dict[str, ScreenRecord] = {}
        self._next_sweep = _now() + sweep_interval

    def sweep_expired(self) -> int:
        """Discard every expired screen; returns how many were dropped."""
        now = _now()
        expired = [sid for sid, rec in self._data.items() if rec.expires_at < now]
        for sid in expired:
            self.discard(sid)
        self._next_sweep = now + self.sweep_interval
        return len(expired)

    def create(self) -> AuthScreenState:
        self.sweep_expired()
        state = AuthScreenState()
        self._data[state.screen_id] = ScreenRecord(state=state, expires_at=_now() + self.ttl_seconds)
        return state

    def get(self, screen_id: Optional[str]) -> Optional[AuthScreenState]:
        if _now() >= self._next_sweep:
            self.sweep_expired()
        if not screen_id:
            return None
        rec = self._data.get(screen_id)
        if not rec:
            return None
        if rec.expires_at < _now():
            self.discard(screen_id)
            return None
        # Sliding expiry: every interaction keeps the screen alive.
        rec.expires_at = _now() + self.ttl_seconds
        return rec.state

    def discard(self, screen_id: str) -> None:
        rec = self._data.pop(screen_id, None)
        if rec:
            rec.state.mounted = False
            rec.state.password = ""

    def __len__(self) -> int:
        return len(self._data)
