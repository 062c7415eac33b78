from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


AuthProvider = Literal["email", "google"]


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    password_hash: str | None
    auth_provider: AuthProvider
    federated_id: str | None
    email_verified: bool
    is_active: bool
    is_deleted: bool
    last_login: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class RefreshTokenRecord:
    id: str
    identity_id: str
    expires_at: datetime
    revoked: bool
    created_at: datetime


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: str
    email: str | None
