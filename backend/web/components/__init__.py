# Help Buddy Component System
# Pure Python Components for HTML generation

from .base import Component
from .layout import Layout
from .forms import FormField, TextInputField, PasswordField, SelectField, SubmitButton
from .auth_screen import AuthScreen, AUTH_CARD_ID
from .avatar_picker import AvatarChoice, AvatarPicker, DEFAULT_AVATAR_CHOICES, parse_avatar_choices
from .theme_toggle import ThemeToggle, THEMES, other_theme
from .toast import ToastRegion

__all__ = [
    "Component",
    "Layout",
    "FormField",
    "TextInputField",
    "PasswordField",
    "SelectField",
    "SubmitButton",
    "AuthScreen",
    "AUTH_CARD_ID",
    "AvatarChoice",
    "AvatarPicker",
    "DEFAULT_AVATAR_CHOICES",
    "parse_avatar_choices",
    "ThemeToggle",
    "THEMES",
    "other_theme",
    "ToastRegion",
]
