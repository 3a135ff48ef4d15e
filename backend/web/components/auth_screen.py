"""
Auth screen component: login / sign-up card with tabs, role selector and
the avatar picker detour for students.

Why:
    One component renders every view state of the screen so the full-page
    render and the HTMX fragment (`#auth-card`) can never drift apart.
Behavior:
    - Exactly one form is rendered: login or sign-up (from `state.is_login`).
    - When `state.show_avatar_picker` is set, the picker replaces the card.
    - Typed username/password are rendered back so switching tabs or toggling
      password visibility keeps them.
"""

from typing import Iterable

from backend.identity_access.domain import ROLE_LABELS, requires_avatar

from .avatar_picker import AvatarChoice, AvatarPicker
from .base import Component
from .forms import PasswordField, SelectField, SubmitButton, TextInputField


AUTH_CARD_ID = "auth-card"


class AuthScreen(Component):
    def __init__(self, state, *, avatar_choices: Iterable[AvatarChoice]) -> None:
        self.state = state
        self.avatar_choices = list(avatar_choices)

    def render(self) -> str:
        return (
            '<div class="auth-screen">'
            '<header class="auth-header text-center">'
            '<h1 class="auth-title">Help Buddy</h1>'
            '<p class="auth-subtitle text-muted">Connecting students, parents and educators</p>'
            "</header>"
            f"{self.render_card()}"
            '<p class="auth-footnote text-center text-muted">Secure system with password authentication</p>'
            "</div>"
        )

    def render_card(self) -> str:
        """Render the swappable `#auth-card` slot (HTMX target)."""
        s = self.state
        if s.show_avatar_picker:
            inner = AvatarPicker(
                self.avatar_choices,
                csrf_token=s.csrf_token,
                selected=s.selected_avatar,
                disabled=s.loading,
            ).render()
        else:
            title = "Login" if s.is_login else "Sign Up"
            form = self._render_login_form() if s.is_login else self._render_signup_form()
            inner = (
                '<section class="card auth-card">'
                f'<h2 class="card-title text-center">{title}</h2>'
                f"{self._render_tabs()}"
                f"{form}"
                "</section>"
            )
        return f'<div id="{AUTH_CARD_ID}" class="auth-card-slot" data-phase="{self.escape(s.phase.value)}">{inner}</div>'

    def _render_tabs(self) -> str:
        tabs = []
        for mode, label, icon in (("login", "Login", "↪"), ("signup", "Sign Up", "＋")):
            active = (mode == "login") == self.state.is_login
            attrs = self.attributes(
                type="submit",
                form="auth-form",
                name="mode",
                value=mode,
                formaction="/auth/mode",
                formnovalidate=True,
                role="tab",
                id=f"tab-{mode}",
                aria_selected="true" if active else "false",
                aria_controls="auth-form",
                class_=self.classes("tab", **{"tab--active": active}),
                hx_include="#auth-form",
                **self.htmx_swap("/auth/mode", f"#{AUTH_CARD_ID}"),
            )
            tabs.append(f'<button {attrs}><span aria-hidden="true">{icon}</span> {label}</button>')
        return f'<div class="tabs" role="tablist" aria-label="Login or sign up">{"".join(tabs)}</div>'

    def _form_open(self) -> str:
        attrs = self.attributes(
            id="auth-form",
            method="post",
            action="/auth/submit",
            class_="auth-form",
            role="tabpanel",
            aria_labelledby=f"tab-{self.state.mode}",
            data_mode=self.state.mode,
            **self.htmx_swap("/auth/submit", f"#{AUTH_CARD_ID}"),
            hx_disabled_elt="find button[data-action='submit']",
        )
        return f'<form {attrs}><input type="hidden" name="csrf_token" value="{self.escape(self.state.csrf_token)}">'

    def _render_login_form(self) -> str:
        s = self.state
        username = TextInputField("username", "Username", required=True).render(
            value=s.username,
            autocomplete="username",
            placeholder="Your username",
            class_="form-input",
        )
        password = PasswordField("password", "Password", required=True).render(
            value=s.password,
            visible=s.show_password,
            autocomplete="current-password",
            placeholder="Your password",
            class_="form-input",
        )
        submit = SubmitButton(
            "Sign In",
            loading_label="Signing in...",
            is_loading=s.loading,
            data_action="submit",
        )
        return f"{self._form_open()}{username}{password}<div class=\"form-actions\">{submit.render()}</div></form>"

    def _render_signup_form(self) -> str:
        s = self.state
        username = TextInputField("signup-username", "Username", name="username", required=True).render(
            value=s.username,
            autocomplete="username",
            placeholder="Choose a unique name",
            class_="form-input",
        )
        password = PasswordField("signup-password", "Password", name="password", required=True).render(
            value=s.password,
            visible=s.show_password,
            autocomplete="new-password",
            placeholder="Create a secure password",
            class_="form-input",
        )
        role = SelectField("role", "You are:").render(
            options=ROLE_LABELS,
            selected=s.role,
            class_="form-input",
            hx_post="/auth/role",
            hx_trigger="change",
        )
        label = "Choose ThriveSprite" if requires_avatar(s.role) else "Create Account"
        submit = SubmitButton(
            label,
            loading_label="Creating account...",
            is_loading=s.loading,
            data_action="submit",
        )
        return f"{self._form_open()}{username}{password}{role}<div class=\"form-actions\">{submit.render()}</div></form>"
