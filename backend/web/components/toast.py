"""
Toast notifications (transient, auto-dismissing).

Server-rendered toasts are used for full-page responses; HTMX responses
carry the same messages in an `HX-Trigger` header and the client script
renders them into the same region.
"""

from typing import Iterable

from .base import Component


class ToastRegion(Component):
    """The fixed live region that holds toasts."""

    def __init__(self, toasts: Iterable = ()) -> None:
        self.toasts = list(toasts)

    def render(self) -> str:
        items = "".join(self._render_toast(t.kind, t.message) for t in self.toasts)
        return (
            '<div id="toast-region" class="toast-region" role="status" aria-live="polite" aria-atomic="false">'
            f"{items}"
            "</div>"
        )

    def _render_toast(self, kind: str, message: str) -> str:
        role = "alert" if kind == "error" else "status"
        attrs = self.attributes(
            class_=self.classes("toast", f"toast--{kind}"),
            role=role,
            data_autodismiss="4000",
        )
        return f"<div {attrs}>{self.escape(message)}</div>"
