"""
Per-request side effects for the auth screen: notifications and navigation.

Why:
    The screen flow must not reach for global toast or router singletons.
    Route handlers create one `RequestEffects` per request and pass it to the
    flow as both `Navigator` and `Notifier`; afterwards they translate the
    collected effects into HTTP (HX-Trigger, HX-Redirect, 303, flash cookie).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
import json


@dataclass(frozen=True)
class Toast:
    kind: str  # "success" | "error"
    message: str

    def as_payload(self) -> dict[str, str]:
        return {"message": self.message, "type": self.kind}


@dataclass
class RequestEffects:
    toasts: List[Toast] = field(default_factory=list)
    redirect_to: Optional[str] = None

    # Notifier
    def show_success(self, text: str) -> None:
        self.toasts.append(Toast("success", text))

    def show_error(self, text: str) -> None:
        self.toasts.append(Toast("error", text))

    # Navigator
    def navigate_to(self, path: str) -> None:
        self.redirect_to = path

    def hx_trigger(self) -> Optional[str]:
        """Return the `HX-Trigger` header value for collected toasts, if any.

        A single toast is sent as an object, several as a list, matching what
        the client script accepts for `showMessage`.
        """
        if not self.toasts:
            return None
        payloads = [t.as_payload() for t in self.toasts]
        value: object = payloads[0] if len(payloads) == 1 else payloads
        # ASCII-only JSON: header values must stay latin-1 safe.
        return json.dumps({"showMessage": value})


__all__ = ["Toast", "RequestEffects"]
