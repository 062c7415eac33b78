from __future__ import annotations

from app.application.dto.auth import RefreshSessionInput, RefreshSessionOutput
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.token_port import TokenPort
from app.domain.exceptions import AuthenticationError, ValidationError

from .auth_common import issue_tokens, unexpected_failures, utcnow


def _invalid_refresh_token() -> AuthenticationError:
    return AuthenticationError("Refresh token is invalid or expired", code="INVALID_REFRESH_TOKEN")


class RefreshSessionUseCase:
    def __init__(self, *, identity_store: IdentityStorePort, token_port: TokenPort):
        self._identity_store = identity_store
        self._token_port = token_port

    def execute(self, command: RefreshSessionInput) -> RefreshSessionOutput:
        token = command.refresh_token.strip() if command.refresh_token else ""
        if not token:
            raise ValidationError("Refresh token is required", code="MISSING_TOKEN")

        with unexpected_failures(code="REFRESH_FAILED", message="Failed to refresh token", operation="refresh"):
            record = self._identity_store.find_refresh_token(token=token)
            if record is None or record.revoked or record.expires_at <= utcnow():
                raise _invalid_refresh_token()

            identity = self._identity_store.find_by_id(identity_id=record.identity_id)
            if identity is None or not identity.is_active:
                raise AuthenticationError("User not found or inactive", code="INVALID_USER")

            # Only the caller that flips the revoked flag may continue.
            if not self._identity_store.revoke_refresh_token(token=token):
                raise _invalid_refresh_token()

            tokens = issue_tokens(
                identity=identity,
                identity_store=self._identity_store,
                token_port=self._token_port,
            )
        return RefreshSessionOutput(access_token=tokens.access_token, refresh_token=tokens.refresh_token)
