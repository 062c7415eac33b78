from __future__ import annotations

from app.application.dto.auth import VerifyEmailInput, VerifyEmailOutput
from app.application.ports.identity_store_port import IdentityStorePort
from app.domain.exceptions import NotFoundError, ValidationError

from .auth_common import unexpected_failures


class VerifyEmailUseCase:
    def __init__(self, *, identity_store: IdentityStorePort):
        self._identity_store = identity_store

    def execute(self, command: VerifyEmailInput) -> VerifyEmailOutput:
        if not command.token:
            raise ValidationError("Verification token is required", code="MISSING_TOKEN")

        with unexpected_failures(
            code="VERIFICATION_FAILED",
            message="Failed to verify email",
            operation="verification",
        ):
            identity = self._identity_store.consume_verification_token(token=command.token)

        if identity is None:
            raise NotFoundError("Verification token is invalid or expired", code="INVALID_TOKEN")
        return VerifyEmailOutput(email=identity.email, message="Email verified successfully")
