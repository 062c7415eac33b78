from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator

from app.application.dto.auth import AuthTokensOutput, AuthUserOutput
from app.application.ports.identity_store_port import IdentityStorePort
from app.application.ports.token_port import TokenPort
from app.domain.entities.identity import Identity
from app.domain.exceptions import DomainError, InternalError


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_email(email: str) -> str:
    # Stored as typed; the store compares lowercase.
    return email.strip()


def build_auth_user_output(identity: Identity) -> AuthUserOutput:
    return AuthUserOutput(
        user_id=identity.id,
        email=identity.email,
        email_verified=identity.email_verified,
    )


def issue_tokens(
    *,
    identity: Identity,
    identity_store: IdentityStorePort,
    token_port: TokenPort,
) -> AuthTokensOutput:
    now = utcnow()
    access_token = token_port.create_access_token(
        identity_id=identity.id,
        email=identity.email,
        now=now,
    )
    refresh = token_port.create_refresh_token(identity_id=identity.id, now=now)
    identity_store.store_refresh_token(
        identity_id=identity.id,
        token=refresh.token,
        expires_at=refresh.expires_at,
    )
    return AuthTokensOutput(
        user=build_auth_user_output(identity),
        access_token=access_token,
        refresh_token=refresh.token,
    )


def dispatch_best_effort(send: Callable[..., bool], *, kind: str, recipient: str, token: str) -> bool:
    """Send a transactional mail; a failure is logged and never propagated."""
    try:
        sent = send(recipient=recipient, token=token)
    except Exception:  # noqa: BLE001
        logger.warning("auth: mail_dispatch_failed kind=%s", kind, exc_info=True)
        return False
    if not sent:
        logger.warning("auth: mail_not_sent kind=%s", kind)
    return bool(sent)


@contextmanager
def unexpected_failures(*, code: str, message: str, operation: str) -> Iterator[None]:
    try:
        yield
    except DomainError:
        raise
    except Exception as exc:
        logger.exception("auth: %s_failed", operation)
        raise InternalError(message, code=code) from exc
