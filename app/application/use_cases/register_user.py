from __future__ import annotations

import logging

from app.application.dto.auth import RegisterUserInput, RegisterUserOutput
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.mail_port import MailPort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import ConflictError, ValidationError
from app.domain.services.credentials_policy import (
    gather_validation_errors,
    validate_email,
    validate_password,
)

from .auth_common import build_auth_user_output, clean_email, dispatch_best_effort, unexpected_failures


logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        identity_store: IdentityStorePort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
        mail_port: MailPort,
    ):
        self._identity_store = identity_store
        self._password_hasher = password_hasher
        self._token_port = token_port
        self._mail_port = mail_port

    def execute(self, command: RegisterUserInput) -> RegisterUserOutput:
        email = clean_email(command.email) if isinstance(command.email, str) else command.email
        errors = gather_validation_errors(
            email=validate_email(email),
            password=validate_password(command.password),
        )
        if errors:
            raise ValidationError("Invalid input data", details=errors)

        with unexpected_failures(
            code="REGISTRATION_FAILED",
            message="Failed to create account",
            operation="registration",
        ):
            if self._identity_store.find_by_email(email=email) is not None:
                raise ConflictError(
                    "An account with this email already exists",
                    code="EMAIL_TAKEN",
                )

            password_hash = self._password_hasher.hash(command.password)
            verification_token = self._token_port.generate_opaque_token()
            identity = self._identity_store.create_email_identity(
                email=email,
                password_hash=password_hash,
                verification_token=verification_token,
            )
            logger.info("auth: registered identity_id=%s provider=email", identity.id)

        dispatch_best_effort(
            self._mail_port.dispatch_verification,
            kind="verification",
            recipient=identity.email,
            token=verification_token,
        )
        return RegisterUserOutput(
            user=build_auth_user_output(identity),
            message="Registration successful. Please check your email to verify your account.",
        )
