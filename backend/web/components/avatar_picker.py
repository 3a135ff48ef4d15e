"""
Avatar picker ("ThriveSprite") for student sign-up.

Shown in place of the credential form until the student picks an avatar.
Each choice is a submit button carrying its opaque `avatar_ref`; the server
stores the choice and immediately re-attempts registration.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .base import Component


@dataclass(frozen=True)
class AvatarChoice:
    ref: str
    label: str
    glyph: str = ""

    @property
    def is_image(self) -> bool:
        return self.ref.startswith(("/", "https://", "http://"))


DEFAULT_AVATAR_CHOICES = (
    AvatarChoice("thrivesprite:sunny", "Sunny", "🌞"),
    AvatarChoice("thrivesprite:leafy", "Leafy", "🌱"),
    AvatarChoice("thrivesprite:bubbles", "Bubbles", "🫧"),
    AvatarChoice("thrivesprite:comet", "Comet", "☄️"),
    AvatarChoice("thrivesprite:pebble", "Pebble", "🪨"),
    AvatarChoice("thrivesprite:breeze", "Breeze", "🍃"),
)


def parse_avatar_choices(raw: Optional[str]) -> List[AvatarChoice]:
    """Parse AVATAR_CHOICES (`ref:label,ref:label`) into choices.

    Behavior:
        - The label is everything after the last ':', unless that part starts
          with a digit or '/' (a port or URL path): then the whole entry is
          the ref and doubles as label.
        - Empty entries are ignored; an empty result falls back to the defaults.
    """
    if not raw:
        return list(DEFAULT_AVATAR_CHOICES)
    choices: List[AvatarChoice] = []
    for part in str(raw).split(","):
        item = part.strip()
        if not item:
            continue
        ref, sep, label = item.rpartition(":")
        if not sep or not ref or not label or label[0].isdigit() or label.startswith("/"):
            ref, label = item, item
        choices.append(AvatarChoice(ref=ref.strip(), label=label.strip() or ref.strip()))
    return choices or list(DEFAULT_AVATAR_CHOICES)


class AvatarPicker(Component):
    def __init__(
        self,
        choices: Iterable[AvatarChoice],
        *,
        csrf_token: str,
        selected: str = "",
        disabled: bool = False,
    ) -> None:
        self.choices = list(choices)
        self.csrf_token = csrf_token
        self.selected = selected
        self.disabled = disabled

    def render(self) -> str:
        buttons = "".join(self._render_choice(c) for c in self.choices)
        form_attrs = self.attributes(
            method="post",
            action="/auth/avatar",
            class_="avatar-picker__grid",
            hx_disabled_elt="find button",
            **self.htmx_swap("/auth/avatar", "#auth-card"),
        )
        return (
            '<section class="card avatar-picker" aria-labelledby="avatar-picker-title">'
            '<h2 id="avatar-picker-title" class="card-title text-center">Choose your ThriveSprite</h2>'
            '<p class="text-center text-muted">Pick a buddy to finish creating your account.</p>'
            f"<form {form_attrs}>"
            f'<input type="hidden" name="csrf_token" value="{self.escape(self.csrf_token)}">'
            f"{buttons}"
            "</form>"
            "</section>"
        )

    def _render_choice(self, choice: AvatarChoice) -> str:
        attrs = self.attributes(
            type="submit",
            name="avatar_ref",
            value=choice.ref,
            class_=self.classes("avatar-choice", **{"avatar-choice--selected": choice.ref == self.selected}),
            disabled=self.disabled,
            aria_label=f"Choose {choice.label}",
        )
        if choice.is_image:
            visual = f'<img src="{self.escape(choice.ref)}" alt="" class="avatar-choice__image">'
        else:
            visual = f'<span class="avatar-choice__glyph" aria-hidden="true">{self.escape(choice.glyph or choice.label[:1])}</span>'
        return f'<button {attrs}>{visual}<span class="avatar-choice__label">{self.escape(choice.label)}</span></button>'
