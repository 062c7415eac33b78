from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = True
    data: T


class RegisterRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class GoogleLoginRequest(CamelModel):
    id_token: str | None = None


class RefreshTokenRequest(CamelModel):
    refresh_token: str | None = None


class PasswordResetInitiateRequest(CamelModel):
    email: str | None = None


class PasswordResetCompleteRequest(CamelModel):
    token: str | None = None
    new_password: str | None = None


class LogoutRequest(CamelModel):
    refresh_token: str | None = None


class AuthUserResponse(CamelModel):
    user_id: str
    email: str
    email_verified: bool


class RegisterData(AuthUserResponse):
    message: str


class AuthTokenData(CamelModel):
    access_token: str
    refresh_token: str
    user: AuthUserResponse


class RefreshTokenData(CamelModel):
    access_token: str
    refresh_token: str


class VerifyEmailData(CamelModel):
    message: str
    email: str


class MessageData(CamelModel):
    message: str


class AuthenticatedIdentityData(CamelModel):
    user_id: str
    email: str | None
