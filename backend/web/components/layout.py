"""
Layout Component for Help Buddy

Main layout wrapper that combines the page content, theme toggle and toast
region into a complete HTML page.
"""

from typing import Iterable, Optional

from .base import Component
from .theme_toggle import ThemeToggle
from .toast import ToastRegion


HTMX_SRC = "https://unpkg.com/htmx.org@1.9.12"


class Layout(Component):
    """Main layout component that assembles the complete page"""

    def __init__(
        self,
        title: str,
        content: str,
        *,
        theme: str = "light",
        toasts: Optional[Iterable] = None,
        current_path: str = "/",
    ):
        """
        Args:
            title: Page title (will be escaped)
            content: Main content HTML (pre-rendered components)
            theme: "light" or "dark"; sets `data-theme` on <html>
            toasts: Notifications rendered into the toast region
            current_path: Current URL path, used as theme toggle return target
        """
        self.title = title
        self.content = content
        self.theme = theme
        self.toasts = list(toasts or [])
        self.current_path = current_path

    def render(self) -> str:
        """Render the complete HTML document."""
        toggle_html = ThemeToggle(self.theme, return_to=self.current_path).render()
        return f"""<!DOCTYPE html>
<html lang="en" data-theme="{self.escape(self.theme)}">
<head>
    {self._render_head()}
</head>
<body>
    <a href="#main-content" class="skip-link">Skip to main content</a>

    <div class="theme-toggle-slot">
        {toggle_html}
    </div>

    {ToastRegion(self.toasts).render()}

    <main id="main-content" class="main-content" role="main">
        {self.content}
    </main>
</body>
</html>"""

    def render_fragment(self) -> str:
        """Return the HTMX fragment: main content plus an out-of-band toast region.

        Why:
            HTMX swaps target `#main-content`; the toast region lives outside
            of it and must be replaced out-of-band so server-rendered toasts
            still appear.
        """
        toast_html = ToastRegion(self.toasts).render().replace(
            'id="toast-region"', 'id="toast-region" hx-swap-oob="true"', 1
        )
        return f"{self.content}{toast_html}"

    def _render_head(self) -> str:
        """Render the HTML head section"""
        return f"""
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="description" content="Help Buddy - connecting students, parents and educators">

    <title>{self.escape(self.title)} - Help Buddy</title>

    <link rel="stylesheet" href="/static/css/helpbuddy.css?v=1">

    <!-- HTMX for progressive enhancement; every form also works without it -->
    <script src="{HTMX_SRC}"></script>
    <script src="/static/js/helpbuddy.js?v=1" defer></script>
    """
