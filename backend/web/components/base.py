"""
Component base for the Help Buddy screens.

Components are plain objects whose `render()` returns an HTML string. Every
dynamic value goes through `escape()` or `attributes()`, so markup built from
user input (typed usernames, avatar labels) cannot inject HTML.
"""

from typing import Any, Dict, Optional
import html


class Component:
    def render(self) -> str:
        raise NotImplementedError("Subclasses must implement render()")

    @staticmethod
    def escape(text: Optional[str]) -> str:
        """Escape `text` for element content or attribute values; None renders empty."""
        return html.escape(str(text)) if text is not None else ""

    @staticmethod
    def classes(*names: str, **toggles: bool) -> str:
        """Join CSS class names, adding each keyword name whose flag is truthy.

        >>> Component.classes("tab", **{"tab--active": True})
        'tab tab--active'
        """
        parts = [name for name in names if name]
        parts.extend(name for name, on in toggles.items() if on)
        return " ".join(parts)

    @staticmethod
    def htmx_swap(url: str, target: str) -> Dict[str, str]:
        """Attributes for a POST that replaces `target` with the response."""
        return {"hx_post": url, "hx_target": target, "hx_swap": "outerHTML"}

    @staticmethod
    def _attr_name(key: str) -> str:
        # class_ -> class, for_ -> for; hx_post -> hx-post
        return key[:-1] if key.endswith("_") else key.replace("_", "-")

    @classmethod
    def attributes(cls, **attrs: Any) -> str:
        """Render keyword arguments as HTML attributes.

        True renders a bare boolean attribute; False and None are omitted.

        >>> Component.attributes(id="username", hx_post="/auth/submit", required=True)
        'id="username" hx-post="/auth/submit" required'
        """
        rendered = []
        for key, value in attrs.items():
            if value is None or value is False:
                continue
            name = cls._attr_name(key)
            rendered.append(name if value is True else f'{name}="{html.escape(str(value))}"')
        return " ".join(rendered)
