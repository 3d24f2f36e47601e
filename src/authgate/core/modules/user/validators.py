import re

from authgate.errors import ValidationError
from authgate.utils import is_phone

USERNAME_RE = re.compile(r"^[\w.-]{3,32}$")
# Handles assigned at signup, never selectable through a profile update
RESERVED_USERNAME_RE = re.compile(r"^user\d+$", re.IGNORECASE)


def default_username(phone: str) -> str:
    return f"user{phone.lstrip('+')}"


def validate_phone(phone: str) -> None:
    if not is_phone(phone):
        raise ValidationError("Invalid phone number")


def validate_username(username: str) -> None:
    """Validate username: 3-32 word characters, dots or hyphens."""
    if not USERNAME_RE.fullmatch(username):
        raise ValidationError("Username must be 3-32 letters, digits, '_', '.' or '-'")
    if RESERVED_USERNAME_RE.fullmatch(username):
        raise ValidationError("Usernames of the form 'user<digits>' are reserved")


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 8 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")
