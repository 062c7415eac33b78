from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AuthUserOutput:
    user_id: str
    email: str
    email_verified: bool


@dataclass(frozen=True)
class RegisterUserInput:
    email: str | None
    password: str | None


@dataclass(frozen=True)
class RegisterUserOutput:
    user: AuthUserOutput
    message: str


@dataclass(frozen=True)
class LoginLocalInput:
    email: str | None
    password: str | None


@dataclass(frozen=True)
class LoginGoogleInput:
    id_token: str | None


@dataclass(frozen=True)
class AuthTokensOutput:
    user: AuthUserOutput
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class VerifyEmailInput:
    token: str | None


@dataclass(frozen=True)
class VerifyEmailOutput:
    email: str
    message: str


@dataclass(frozen=True)
class RefreshSessionInput:
    refresh_token: str | None


@dataclass(frozen=True)
class RefreshSessionOutput:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class InitiatePasswordResetInput:
    email: str | None


@dataclass(frozen=True)
class CompletePasswordResetInput:
    token: str | None
    new_password: str | None


@dataclass(frozen=True)
class LogoutInput:
    refresh_token: str | None


@dataclass(frozen=True)
class MessageOutput:
    message: str


@dataclass(frozen=True)
class IssuedRefreshToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class FederatedIdentityClaims:
    federated_id: str
    email: str
    email_verified: bool
    given_name: str | None
    family_name: str | None
    picture: str | None
