"""
Form field components.

These small components keep markup consistent across the login and sign-up
forms: label, input slot, help and error text.
"""

from typing import Iterable, Optional, Tuple

from ..base import Component


class FormField(Component):
    """Wrapper that renders label, input slot, help, and error text.

    `field_id` is the element id; `name` defaults to it. The login and
    sign-up forms share field names but need distinct ids on one page.
    """

    def __init__(
        self,
        field_id: str,
        label: str,
        *,
        name: Optional[str] = None,
        required: bool = False,
        help_text: Optional[str] = None,
        error_text: Optional[str] = None,
        state: str = "default",
    ) -> None:
        self.field_id = field_id
        self.name = name or field_id
        self.label = label
        self.required = required
        self.help_text = help_text
        self.error_text = error_text
        self.state = state

    def render(self, input_html: str) -> str:
        state_class = f" form-field--{self.state}" if self.state != "default" else ""
        required_marker = (
            '<span class="form-required" aria-hidden="true">*</span>'
            if self.required
            else ""
        )
        help_html = (
            f'<p class="form-help" id="{self.field_id}-help">{self.escape(self.help_text)}</p>'
            if self.help_text
            else ""
        )
        error_html = (
            f'<p class="form-error" role="alert" id="{self.field_id}-error">{self.escape(self.error_text)}</p>'
            if self.error_text
            else ""
        )

        label_attrs = self.attributes(
            for_=self.field_id,
            class_="form-label",
        )

        return (
            f'<div class="form-field{state_class}">'
            f"<label {label_attrs}>"
            f"{self.escape(self.label)}{required_marker}"
            "</label>"
            f"{input_html}"
            f"{help_html}"
            f"{error_html}"
            "</div>"
        )

    def _input_attrs(self, **attrs) -> str:
        return self.attributes(
            id=self.field_id,
            name=self.name,
            required=self.required,
            aria_describedby=f"{self.field_id}-help" if self.help_text else None,
            aria_invalid="true" if self.error_text else "false",
            **attrs,
        )


class TextInputField(FormField):
    """Single-line text input field with consistent wrapper and labeling.

    Parameters:
        field_id: Id attribute for the input (name defaults to it).
        label: Visible label text.
        required: Whether the field is required (native browser check).

    Behavior:
        - Renders <input> with appropriate ARIA attributes.
        - Wraps input using FormField to provide consistent structure.
    """

    def render(
        self,
        *,
        value: str = "",
        input_type: str = "text",
        autocomplete: Optional[str] = None,
        placeholder: Optional[str] = None,
        **attrs: str,
    ) -> str:
        input_attrs = self._input_attrs(
            type=input_type,
            value=value,
            autocomplete=autocomplete,
            placeholder=placeholder,
            **attrs,
        )
        return super().render(f"<input {input_attrs}>")


class PasswordField(FormField):
    """Password input with a visibility toggle button.

    The toggle posts to `toggle_url` and only changes how the value is shown
    (`type="password"` vs `type="text"`); the value itself is rendered as-is.
    """

    def render(
        self,
        *,
        value: str = "",
        visible: bool = False,
        toggle_url: str = "/auth/password-visibility",
        autocomplete: Optional[str] = None,
        placeholder: Optional[str] = None,
        **attrs: str,
    ) -> str:
        input_attrs = self._input_attrs(
            type="text" if visible else "password",
            value=value,
            autocomplete=autocomplete,
            placeholder=placeholder,
            **attrs,
        )
        toggle_label = "Hide password" if visible else "Show password"
        toggle_attrs = self.attributes(
            type="submit",
            class_="btn btn-ghost password-toggle",
            formaction=toggle_url,
            formnovalidate=True,
            hx_post=toggle_url,
            aria_pressed="true" if visible else "false",
            aria_label=toggle_label,
            data_action="toggle-password",
        )
        icon = "🙈" if visible else "👁"
        input_html = (
            '<div class="password-input">'
            f"<input {input_attrs}>"
            f'<button {toggle_attrs}><span aria-hidden="true">{icon}</span></button>'
            "</div>"
        )
        return super().render(input_html)


class SelectField(FormField):
    """Single choice <select> rendered from (value, label) pairs."""

    def render(self, *, options: Iterable[Tuple[str, str]], selected: Optional[str] = None, **attrs: str) -> str:
        option_html = []
        for value, label in options:
            opt_attrs = self.attributes(value=value, selected=(value == selected))
            option_html.append(f"<option {opt_attrs}>{self.escape(label)}</option>")
        select_attrs = self._input_attrs(**attrs)
        return super().render(f"<select {select_attrs}>{''.join(option_html)}</select>")
