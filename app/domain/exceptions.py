from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base for domain errors carrying a machine readable code."""

    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, *, code: str | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details


class ValidationError(DomainError):
    """Malformed or missing input."""

    default_code = "VALIDATION_ERROR"


class ConflictError(DomainError):
    """Email already taken or registered with another provider."""

    default_code = "CONFLICT"


class AuthenticationError(DomainError):
    """Bad credentials or token."""

    default_code = "UNAUTHENTICATED"


class AuthorizationError(DomainError):
    """Identity exists but is not allowed to proceed."""

    default_code = "FORBIDDEN"


class NotFoundError(DomainError):
    """Single use token did not match or has expired."""

    default_code = "INVALID_TOKEN"


class FederationError(DomainError):
    """Third party identity assertion was rejected."""

    default_code = "FEDERATION_FAILED"


class InternalError(DomainError):
    """Unexpected failure, details stay in the logs."""

    default_code = "INTERNAL_ERROR"


class ConfigurationError(RuntimeError):
    """Mandatory settings are missing or invalid."""
