"""
Theme toggle button (light/dark).

Independent from the auth flow: it only flips the theme cookie and
redirects back to the page it was clicked on.
"""

from .base import Component


THEMES = ("light", "dark")


def other_theme(theme: str) -> str:
    return "light" if theme == "dark" else "dark"


class ThemeToggle(Component):
    def __init__(self, theme: str = "light", return_to: str = "/") -> None:
        self.theme = theme if theme in THEMES else "light"
        self.return_to = return_to

    def render(self) -> str:
        target = other_theme(self.theme)
        icon = "☀️" if self.theme == "dark" else "🌙"
        button_attrs = self.attributes(
            type="submit",
            class_="btn btn-ghost theme-toggle__button",
            aria_label=f"Switch to {target} theme",
            title=f"Switch to {target} theme",
        )
        return (
            '<form method="post" action="/theme/toggle" class="theme-toggle">'
            f'<input type="hidden" name="return_to" value="{self.escape(self.return_to)}">'
            f'<button {button_attrs}><span aria-hidden="true">{icon}</span></button>'
            "</form>"
        )
