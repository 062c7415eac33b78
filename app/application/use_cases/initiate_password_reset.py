from __future__ import annotations

from app.application.dto.auth import InitiatePasswordResetInput, MessageOutput
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.mail_port import MailPort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import ValidationError
from app.domain.services.credentials_policy import validate_email

from .auth_common import clean_email, dispatch_best_effort, unexpected_failures


RESET_REQUESTED_MESSAGE = "If the email exists, a password reset link has been sent."


class InitiatePasswordResetUseCase:
    def __init__(
        self,
        *,
        identity_store: IdentityStorePort,
        token_port: TokenPort,
        mail_port: MailPort,
    ):
        self._identity_store = identity_store
        self._token_port = token_port
        self._mail_port = mail_port

    def execute(self, command: InitiatePasswordResetInput) -> MessageOutput:
        email = clean_email(command.email) if isinstance(command.email, str) else command.email
        error = validate_email(email)
        if error:
            raise ValidationError(error)

        with unexpected_failures(
            code="RESET_FAILED",
            message="Failed to initiate password reset",
            operation="reset_initiate",
        ):
            reset_token = self._token_port.generate_opaque_token()
            matched = self._identity_store.issue_password_reset_token(email=email, token=reset_token)

        if matched:
            dispatch_best_effort(
                self._mail_port.dispatch_password_reset,
                kind="password_reset",
                recipient=email,
                token=reset_token,
            )
        return MessageOutput(message=RESET_REQUESTED_MESSAGE)
