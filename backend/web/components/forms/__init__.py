"""
Form components for Help Buddy.

Provides the building blocks (FormField wrappers, password input with
visibility toggle, select, SubmitButton) used by the auth screen.
"""

from .fields import FormField, TextInputField, PasswordField, SelectField
from .submit import SubmitButton

__all__ = [
    "FormField",
    "TextInputField",
    "PasswordField",
    "SelectField",
    "SubmitButton",
]
