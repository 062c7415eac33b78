from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException

from app.application.ports.token_port import TokenPort
from app.application.use_cases.complete_password_reset import CompletePasswordResetUseCase
from app.application.use_cases.initiate_password_reset import InitiatePasswordResetUseCase
from app.application.use_cases.login_google import LoginGoogleUseCase
from app.application.use_cases.login_local import LoginLocalUseCase
from app.application.use_cases.logout_session import LogoutSessionUseCase
from app.application.use_cases.refresh_session import RefreshSessionUseCase
from app.application.use_cases.register_user import RegisterUserUseCase
from app.application.use_cases.verify_email import VerifyEmailUseCase
from app.domain.entities.identity import AuthenticatedIdentity
from app.domain.exceptions import AuthenticationError
from app.infrastructure.clients.google_oidc_client import GoogleOidcClient
from app.infrastructure.clients.mail_dispatcher import MailDispatcher, MailDispatcherSettings
from app.infrastructure.db.engine import get_engine
from app.infrastructure.db.repositories.identity_repository import SqlIdentityRepository
from app.infrastructure.security.password_hasher import PasswordHasher
from app.infrastructure.security.token_service import JwtTokenService
from app.shared.config import get_settings


BEARER_PREFIX = "Bearer "


def get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn, settings.db_pool_min, settings.db_pool_max)


def _get_identity_repository() -> SqlIdentityRepository:
    return SqlIdentityRepository(get_db_engine())


@lru_cache(maxsize=1)
def _get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@lru_cache(maxsize=1)
def get_token_service() -> JwtTokenService:
    settings = get_settings()
    if not settings.cipher_primary_key:
        raise HTTPException(status_code=500, detail="CIPHER_PRIMARY_KEY is required.")
    return JwtTokenService(
        primary_key=settings.cipher_primary_key,
        access_ttl_hours=settings.token_lifespan_hours,
        refresh_ttl_hours=settings.refresh_lifespan_hours,
    )


@lru_cache(maxsize=1)
def _get_google_oauth_client() -> GoogleOidcClient:
    settings = get_settings()
    return GoogleOidcClient(client_id=settings.google_client_id)


@lru_cache(maxsize=1)
def _get_mail_dispatcher() -> MailDispatcher:
    settings = get_settings()
    return MailDispatcher(
        MailDispatcherSettings(
            mode=settings.mail_mode,
            portal_origin=settings.portal_origin,
            sender=settings.mail_sender,
            api_url=settings.mail_api_url,
            api_key=settings.mail_api_key,
            timeout_seconds=settings.mail_timeout_seconds,
        )
    )


def get_register_user_use_case() -> RegisterUserUseCase:
    return RegisterUserUseCase(
        identity_store=_get_identity_repository(),
        password_hasher=_get_password_hasher(),
        token_port=get_token_service(),
        mail_port=_get_mail_dispatcher(),
    )


def get_login_local_use_case() -> LoginLocalUseCase:
    return LoginLocalUseCase(
        identity_store=_get_identity_repository(),
        password_hasher=_get_password_hasher(),
        token_port=get_token_service(),
    )


def get_login_google_use_case() -> LoginGoogleUseCase:
    return LoginGoogleUseCase(
        identity_store=_get_identity_repository(),
        google_oauth_port=_get_google_oauth_client(),
        token_port=get_token_service(),
    )


def get_verify_email_use_case() -> VerifyEmailUseCase:
    return VerifyEmailUseCase(identity_store=_get_identity_repository())


def get_refresh_session_use_case() -> RefreshSessionUseCase:
    return RefreshSessionUseCase(
        identity_store=_get_identity_repository(),
        token_port=get_token_service(),
    )


def get_initiate_password_reset_use_case() -> InitiatePasswordResetUseCase:
    return InitiatePasswordResetUseCase(
        identity_store=_get_identity_repository(),
        token_port=get_token_service(),
        mail_port=_get_mail_dispatcher(),
    )


def get_complete_password_reset_use_case() -> CompletePasswordResetUseCase:
    return CompletePasswordResetUseCase(
        identity_store=_get_identity_repository(),
        password_hasher=_get_password_hasher(),
    )


def get_logout_session_use_case() -> LogoutSessionUseCase:
    return LogoutSessionUseCase(identity_store=_get_identity_repository())


def _decode_identity(token: str, token_service: TokenPort) -> AuthenticatedIdentity | None:
    payload = token_service.verify(token)
    if payload is None or payload.get("typ") != "access" or not payload.get("sub"):
        return None
    return AuthenticatedIdentity(user_id=str(payload["sub"]), email=payload.get("email"))


def get_authenticated_identity(
    authorization: str | None = Header(default=None),
    token_service: TokenPort = Depends(get_token_service),
) -> AuthenticatedIdentity:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError(
            "Authentication required - missing or invalid token",
            code="MISSING_CREDENTIALS",
        )
    token = authorization[len(BEARER_PREFIX):].strip()

    try:
        identity = _decode_identity(token, token_service)
    except Exception as exc:
        raise AuthenticationError(
            "Failed to verify authentication token",
            code="TOKEN_VERIFICATION_FAILED",
        ) from exc

    if identity is None:
        raise AuthenticationError("Token is invalid or expired", code="INVALID_TOKEN")
    return identity


def get_optional_identity(
    authorization: str | None = Header(default=None),
    token_service: TokenPort = Depends(get_token_service),
) -> AuthenticatedIdentity | None:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    try:
        return _decode_identity(authorization[len(BEARER_PREFIX):].strip(), token_service)
    except Exception:  # noqa: BLE001
        return None
