from __future__ import annotations

import re
from typing import Any


EMAIL_MIN_LENGTH = 3
EMAIL_MAX_LENGTH = 320
PASSWORD_MIN_LENGTH = 8

_WHITESPACE = (" ", "\t", "\n", "\r")


def validate_email(email: Any) -> str | None:
    """Return an error message, or None when the email is acceptable.

    Checks are split based; no regex runs over the raw address.
    """
    if not isinstance(email, str) or not EMAIL_MIN_LENGTH <= len(email) <= EMAIL_MAX_LENGTH:
        return "Invalid email format"

    parts = email.split("@")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return "Invalid email format"

    local, domain = parts
    if any(ch in local or ch in domain for ch in _WHITESPACE):
        return "Invalid email format"

    labels = domain.split(".")
    if len(labels) < 2 or any(not label for label in labels):
        return "Invalid email format"
    return None


def validate_password(password: Any) -> str | None:
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    if not re.search(r"[A-Z]", password):
        return "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return "Password must contain at least one lowercase letter"
    if not re.search(r"[0-9]", password):
        return "Password must contain at least one number"
    return None


def validate_required(value: Any, field_name: str) -> str | None:
    if value is None or value == "":
        return f"{field_name} is required"
    return None


def gather_validation_errors(**checks: str | None) -> list[dict[str, str]]:
    """Collect failed checks as ``[{"field": ..., "message": ...}]``."""
    return [
        {"field": field, "message": message}
        for field, message in checks.items()
        if message is not None
    ]
