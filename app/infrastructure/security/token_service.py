from __future__ import annotations

import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt
from jwt.algorithms import HMACAlgorithm
from jwt.utils import base64url_encode

from app.application.dto.auth import IssuedRefreshToken
from app.application.ports.token_port import TokenPort


logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
# Only the signature and expiry decide validity.
DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": True,
    "verify_aud": False,
    "verify_iss": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_sub": False,
    "verify_jti": False,
}
OPAQUE_TOKEN_BYTES = 48


class JwtTokenService(TokenPort):
    """Compact HS256 tokens signed with a single configured key.

    The algorithm is fixed here and never taken from the token header.
    """

    def __init__(
        self,
        *,
        primary_key: str,
        access_ttl_hours: int,
        refresh_ttl_hours: int,
    ):
        self._primary_key = primary_key
        self._access_ttl_hours = access_ttl_hours
        self._refresh_ttl_hours = refresh_ttl_hours
        self._hmac = HMACAlgorithm(HMACAlgorithm.SHA256)
        self._signing_key = self._hmac.prepare_key(primary_key)

    def issue(self, payload: dict[str, Any]) -> str:
        return jwt.encode(payload, self._primary_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> dict[str, Any] | None:
        if not isinstance(token, str) or token.count(".") != 2:
            return None

        signing_input, _, signature = token.rpartition(".")
        expected = base64url_encode(self._hmac.sign(signing_input.encode("utf-8"), self._signing_key))
        if not hmac.compare_digest(expected, signature.encode("utf-8")):
            return None

        try:
            payload = jwt.decode(
                token,
                self._primary_key,
                algorithms=[ALGORITHM],
                options=DECODE_OPTIONS,
            )
        except jwt.PyJWTError as exc:
            logger.debug("token_service: rejected reason=%s", type(exc).__name__)
            return None
        if not isinstance(payload, dict):
            return None
        return payload

    def create_access_token(self, *, identity_id: str, email: str | None, now: datetime) -> str:
        exp = now + timedelta(hours=self._access_ttl_hours)
        return self.issue(
            {
                "sub": identity_id,
                "email": email,
                "iat": int(now.timestamp()),
                "exp": int(exp.timestamp()),
                "typ": "access",
            }
        )

    def create_refresh_token(self, *, identity_id: str, now: datetime) -> IssuedRefreshToken:
        exp = now + timedelta(hours=self._refresh_ttl_hours)
        token = self.issue(
            {
                "sub": identity_id,
                "iat": int(now.timestamp()),
                "exp": int(exp.timestamp()),
                "typ": "refresh",
                # Two refreshes within the same second must not collide.
                "jti": uuid4().hex,
            }
        )
        return IssuedRefreshToken(token=token, expires_at=exp)

    def generate_opaque_token(self) -> str:
        return secrets.token_urlsafe(OPAQUE_TOKEN_BYTES)

    def extract_user_id(self, token: str) -> str | None:
        payload = self.verify(token)
        if payload is None:
            return None
        return payload.get("sub")
