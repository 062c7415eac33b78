from __future__ import annotations

from app.application.dto.auth import AuthTokensOutput, LoginLocalInput
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.password_hasher_port import PasswordHasherPort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import AuthenticationError, AuthorizationError, ValidationError
from app.domain.services.credentials_policy import (
    gather_validation_errors,
    validate_email,
    validate_required,
)

from .auth_common import clean_email, issue_tokens, unexpected_failures


def _invalid_credentials() -> AuthenticationError:
    return AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")


class LoginLocalUseCase:
    def __init__(
        self,
        *,
        identity_store: IdentityStorePort,
        password_hasher: PasswordHasherPort,
        token_port: TokenPort,
    ):
        self._identity_store = identity_store
        self._password_hasher = password_hasher
        self._token_port = token_port

    def execute(self, command: LoginLocalInput) -> AuthTokensOutput:
        email = clean_email(command.email) if isinstance(command.email, str) else command.email
        errors = gather_validation_errors(
            email=validate_email(email),
            password=validate_required(command.password, "Password"),
        )
        if errors:
            raise ValidationError("Invalid input data", details=errors)

        with unexpected_failures(code="LOGIN_FAILED", message="Failed to authenticate", operation="login"):
            identity = self._identity_store.find_by_email(email=email)
            if identity is None or identity.auth_provider != "email" or not identity.password_hash:
                raise _invalid_credentials()

            if not self._password_hasher.verify(command.password, identity.password_hash):
                raise _invalid_credentials()

            if not identity.is_active:
                raise AuthorizationError("Your account has been disabled", code="ACCOUNT_DISABLED")

            self._identity_store.update_last_login(identity_id=identity.id)
            return issue_tokens(
                identity=identity,
                identity_store=self._identity_store,
                token_port=self._token_port,
            )
