from __future__ import annotations

from google.auth.transport import requests
from google.oauth2 import id_token

from app.application.dto.auth import FederatedIdentityClaims
from app.application.ports.google_oauth_port import GoogleOauthPort
from app.domain.exceptions import FederationError


class GoogleOidcClient(GoogleOauthPort):
    def __init__(self, *, client_id: str):
        self._client_id = client_id

    def verify_id_token(self, *, id_token: str) -> FederatedIdentityClaims:
        if not self._client_id:
            raise FederationError("Google identity bridge not configured")
        try:
            payload = id_token_verify(token=id_token, audience=self._client_id)
        except Exception as exc:  # noqa: BLE001
            raise FederationError(f"Google verification failed: {exc}") from exc

        email = payload.get("email")
        subject = payload.get("sub")
        if not email or not subject:
            raise FederationError("Google verification failed: missing required claims")

        email_verified_raw = payload.get("email_verified", False)
        email_verified = bool(email_verified_raw)
        if isinstance(email_verified_raw, str):
            email_verified = email_verified_raw.lower() == "true"

        return FederatedIdentityClaims(
            federated_id=str(subject),
            email=str(email),
            email_verified=email_verified,
            given_name=_optional_str(payload, "given_name"),
            family_name=_optional_str(payload, "family_name"),
            picture=_optional_str(payload, "picture"),
        )


def _optional_str(payload: dict, key: str) -> str | None:
    value = payload.get(key)
    return value if isinstance(value, str) else None


def id_token_verify(*, token: str, audience: str) -> dict:
    request = requests.Request()
    return id_token.verify_oauth2_token(token, request, audience)
