"""
Submit button component.

Keeps handling of loading labels and disabled state consistent.
"""

from typing import Optional

from ..base import Component


class SubmitButton(Component):
    """Primary form action button.

    While `is_loading` is set the button shows `loading_label` and stays
    disabled. HTMX additionally disables it client-side for the duration of
    the request (`hx-disabled-elt` on the form).
    """

    def __init__(
        self,
        label: str,
        *,
        loading_label: str = "Saving...",
        is_loading: bool = False,
        disabled: bool = False,
        data_action: Optional[str] = None,
    ) -> None:
        self.label = label
        self.loading_label = loading_label
        self.is_loading = is_loading
        self.disabled = disabled
        self.data_action = data_action

    def render(self) -> str:
        label = self.loading_label if self.is_loading else self.label
        attrs = self.attributes(
            type="submit",
            class_="btn btn-primary btn-block",
            disabled=self.disabled or self.is_loading,
            data_action=self.data_action,
            data_loading_label=self.loading_label,
            aria_busy="true" if self.is_loading else None,
        )
        return (
            f"<button {attrs}>"
            f'<span class="btn-label">{self.escape(label)}</span>'
            f'<span class="btn-label--loading" aria-hidden="true">{self.escape(self.loading_label)}</span>'
            "</button>"
        )
