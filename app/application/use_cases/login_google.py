from __future__ import annotations

import logging

from app.application.dto.auth import AuthTokensOutput, LoginGoogleInput
from app.application.ports.google_oauth_port import GoogleOauthPort
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import AuthorizationError, ConflictError, FederationError, ValidationError

from .auth_common import issue_tokens, unexpected_failures


logger = logging.getLogger(__name__)


class LoginGoogleUseCase:
    def __init__(
        self,
        *,
        identity_store: IdentityStorePort,
        google_oauth_port: GoogleOauthPort,
        token_port: TokenPort,
    ):
        self._identity_store = identity_store
        self._google_oauth_port = google_oauth_port
        self._token_port = token_port

    def execute(self, command: LoginGoogleInput) -> AuthTokensOutput:
        if not command.id_token:
            raise ValidationError("Google ID token is required", code="MISSING_TOKEN")

        with unexpected_failures(
            code="GOOGLE_LOGIN_FAILED",
            message="Failed to authenticate with Google",
            operation="google_login",
        ):
            try:
                claims = self._google_oauth_port.verify_id_token(id_token=command.id_token)
            except FederationError as exc:
                raise FederationError(exc.message, code="GOOGLE_LOGIN_FAILED") from exc

            identity = self._identity_store.find_by_federated_id(federated_id=claims.federated_id)
            if identity is None:
                identity = self._identity_store.find_by_email(email=claims.email)
                if identity is not None and identity.auth_provider == "email":
                    raise ConflictError(
                        "An account with this email already exists. Please login with email and password.",
                        code="EMAIL_EXISTS",
                    )
                if identity is None:
                    identity = self._identity_store.create_federated_identity(
                        email=claims.email,
                        federated_id=claims.federated_id,
                    )
                    logger.info("auth: registered identity_id=%s provider=google", identity.id)

            if not identity.is_active:
                raise AuthorizationError("Your account has been disabled", code="ACCOUNT_DISABLED")

            self._identity_store.update_last_login(identity_id=identity.id)
            return issue_tokens(
                identity=identity,
                identity_store=self._identity_store,
                token_port=self._token_port,
            )
