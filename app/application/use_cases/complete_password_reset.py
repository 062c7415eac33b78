from __future__ import annotations

import logging

from app.application.dto.auth import CompletePasswordResetInput, MessageOutput
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.domain.exceptions import NotFoundError, ValidationError
from app.domain.services.credentials_policy import (
    gather_validation_errors,
    validate_password,
    validate_required,
)

from .auth_common import unexpected_failures


logger = logging.getLogger(__name__)


class CompletePasswordResetUseCase:
    """Replace the password hash of the identity holding a live reset token.

    Outstanding refresh tokens of that identity stay valid.
    """

    def __init__(self, *, identity_store: IdentityStorePort, password_hasher: PasswordHasherPort):
        self._identity_store = identity_store
        self._password_hasher = password_hasher

    def execute(self, command: CompletePasswordResetInput) -> MessageOutput:
        errors = gather_validation_errors(
            token=validate_required(command.token, "Token"),
            newPassword=validate_password(command.new_password),
        )
        if errors:
            raise ValidationError("Invalid input data", details=errors)

        with unexpected_failures(
            code="RESET_FAILED",
            message="Failed to reset password",
            operation="reset_complete",
        ):
            password_hash = self._password_hasher.hash(command.new_password)
            identity = self._identity_store.consume_password_reset_token(
                token=command.token,
                password_hash=password_hash,
            )

        if identity is None:
            raise NotFoundError("Reset token is invalid or expired", code="INVALID_TOKEN")
        logger.info("auth: password_reset identity_id=%s", identity.id)
        return MessageOutput(message="Password reset successfully")
