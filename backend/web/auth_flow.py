"""
Auth screen state machine (framework-agnostic).

Why:
    The login/sign-up screen has one asynchronous step (the Auth Gateway call)
    and one detour (students pick an avatar before their account is created).
    Modelling the submission flow explicitly keeps every transition and its
    side effects enumerable and testable without HTTP.

Flow:
    IDLE -> SUBMITTING -> NAVIGATED            (success)
    IDLE -> SUBMITTING -> IDLE                 (failure, one toast)
    IDLE -> AWAITING_AVATAR -> SUBMITTING -> NAVIGATED | IDLE

Capabilities:
    Navigation and notifications are injected (`Navigator`, `Notifier`), the
    gateway too. The flow never touches HTTP objects.

Liveness:
    `AuthScreenState.mounted` turns False once the screen is discarded. Every
    post-await step checks it, so a late gateway answer for a discarded screen
    neither navigates nor notifies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol
import logging
import secrets

from backend.identity_access.domain import DEFAULT_ROLE, AuthResult, normalize_role, requires_avatar
from backend.identity_access.gateway import AuthGateway


logger = logging.getLogger("helpbuddy.auth_flow")

LOGIN_SUCCESS = "Login successful! 🎉"
SIGNUP_SUCCESS = "Account created successfully! 🎉"
LOGIN_FAILED = "Login failed"
SIGNUP_FAILED = "Sign-up failed"
SERVER_ERROR = "Server error"
MISSING_CREDENTIALS = "Please enter your username and password."
MISSING_AVATAR = "Please choose an avatar."


class SubmissionPhase(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    AWAITING_AVATAR = "awaiting_avatar"
    NAVIGATED = "navigated"


class Navigator(Protocol):
    def navigate_to(self, path: str) -> None: ...


class Notifier(Protocol):
    def show_success(self, text: str) -> None: ...

    def show_error(self, text: str) -> None: ...


class InvalidTransition(RuntimeError):
    """Raised when an event does not apply to the current phase."""


class SubmissionInProgress(RuntimeError):
    """Raised when a gateway call is already outstanding for this screen."""


@dataclass
class AuthScreenState:
    screen_id: str = field(default_factory=lambda: secrets.token_urlsafe(24))
    csrf_token: str = field(default_factory=lambda: secrets.token_urlsafe(24))
    username: str = ""
    password: str = ""
    role: str = DEFAULT_ROLE
    is_login: bool = True
    show_password: bool = False
    loading: bool = False
    show_avatar_picker: bool = False
    selected_avatar: str = ""
    phase: SubmissionPhase = SubmissionPhase.IDLE
    mounted: bool = True

    @property
    def mode(self) -> str:
        return "login" if self.is_login else "signup"

    def __repr__(self) -> str:
        # Keep the password out of logs and tracebacks.
        return (
            f"AuthScreenState(screen_id={self.screen_id!r}, mode={self.mode!r}, role={self.role!r}, "
            f"phase={self.phase.value!r}, loading={self.loading}, mounted={self.mounted})"
        )


class AuthFlow:
    """Drive one auth screen through its submission flow.

    Parameters:
        state: The screen's mutable state (owned by the screen store).
        gateway: Auth Gateway used for `login`/`register`.
        navigator: Receives `navigate_to(home_path)` on success.
        notifier: Receives exactly one toast per finished attempt.
        home_path: Navigation target after success.
    """

    def __init__(
        self,
        state: AuthScreenState,
        *,
        gateway: AuthGateway,
        navigator: Navigator,
        notifier: Notifier,
        home_path: str = "/",
    ) -> None:
        self.state = state
        self.gateway = gateway
        self.navigator = navigator
        self.notifier = notifier
        self.home_path = home_path

    # --- Pure view-state transitions --------------------------------------

    def update_credentials(self, *, username: str | None = None, password: str | None = None) -> None:
        """Store typed values; `None` leaves a field untouched."""
        if username is not None:
            self.state.username = username
        if password is not None:
            self.state.password = password

    def switch_mode(self, mode: str) -> None:
        if mode not in ("login", "signup"):
            raise ValueError("invalid_mode")
        self.state.is_login = mode == "login"

    def toggle_password(self) -> None:
        self.state.show_password = not self.state.show_password

    def set_role(self, role: str) -> None:
        canonical = normalize_role(role)
        if canonical is None:
            raise ValueError("invalid_role")
        # The avatar survives role changes; the requirement is checked at submit time.
        self.state.role = canonical

    # --- Submission ---------------------------------------------------------

    async def submit(self) -> SubmissionPhase:
        """Handle a form submission in the current mode.

        Returns the phase after the attempt. Raises `SubmissionInProgress`
        when a call is already outstanding.
        """
        s = self.state
        if s.loading:
            raise SubmissionInProgress("request_in_progress")
        if s.phase is SubmissionPhase.NAVIGATED:
            raise InvalidTransition("screen_navigated")
        if not s.username.strip() or not s.password:
            self.notifier.show_error(MISSING_CREDENTIALS)
            return s.phase

        if s.is_login:
            return await self._run(self._login, success_text=LOGIN_SUCCESS, failure_text=LOGIN_FAILED)

        if requires_avatar(s.role) and not s.selected_avatar:
            # Not an error: the avatar picker replaces the form until a choice is made.
            s.show_avatar_picker = True
            s.phase = SubmissionPhase.AWAITING_AVATAR
            logger.debug("Avatar required before registration (role=%s)", s.role)
            return s.phase

        avatar_ref = s.selected_avatar if requires_avatar(s.role) else ""
        return await self._run(
            lambda: self._register(avatar_ref),
            success_text=SIGNUP_SUCCESS,
            failure_text=SIGNUP_FAILED,
        )

    async def select_avatar(self, avatar_ref: str) -> SubmissionPhase:
        """Store the chosen avatar and immediately re-attempt registration.

        The picker is hidden afterwards regardless of the outcome. An empty
        reference keeps the picker open and produces one error toast.
        """
        s = self.state
        if s.loading:
            raise SubmissionInProgress("request_in_progress")
        if s.phase is not SubmissionPhase.AWAITING_AVATAR:
            raise InvalidTransition("avatar_not_requested")
        ref = (avatar_ref or "").strip()
        if not ref:
            self.notifier.show_error(MISSING_AVATAR)
            return s.phase

        s.selected_avatar = ref
        try:
            return await self._run(
                lambda: self._register(ref),
                success_text=SIGNUP_SUCCESS,
                failure_text=SIGNUP_FAILED,
            )
        finally:
            s.show_avatar_picker = False

    async def _login(self) -> AuthResult:
        return await self.gateway.login(self.state.username, self.state.password)

    async def _register(self, avatar_ref: str) -> AuthResult:
        s = self.state
        return await self.gateway.register(s.username, s.role, s.password, avatar_ref)

    async def _run(self, call, *, success_text: str, failure_text: str) -> SubmissionPhase:
        s = self.state
        s.loading = True
        s.phase = SubmissionPhase.SUBMITTING
        try:
            result = await call()
            if not s.mounted:
                logger.info("Discarding auth result for unmounted screen")
            elif result.success:
                s.phase = SubmissionPhase.NAVIGATED
                self.notifier.show_success(success_text)
                self.navigator.navigate_to(self.home_path)
            else:
                self.notifier.show_error(result.error or failure_text)
        except Exception:
            logger.exception("Authentication error")
            if s.mounted:
                self.notifier.show_error(SERVER_ERROR)
        finally:
            s.loading = False
            if s.phase is SubmissionPhase.SUBMITTING:
                s.phase = SubmissionPhase.IDLE
        return s.phase


__all__ = [
    "AuthFlow",
    "AuthScreenState",
    "InvalidTransition",
    "Navigator",
    "Notifier",
    "SubmissionInProgress",
    "SubmissionPhase",
]
