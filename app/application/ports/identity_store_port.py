from __future__ import annotations

from datetime import datetime
from typing import Protocol

from app.domain.entities.identity import Identity, RefreshTokenRecord


class IdentityStorePort(Protocol):
    def find_by_email(self, *, email: str) -> Identity | None:
        ...

    def find_by_federated_id(self, *, federated_id: str) -> Identity | None:
        ...

    def find_by_id(self, *, identity_id: str) -> Identity | None:
        ...

    def create_email_identity(
        self,
        *,
        email: str,
        password_hash: str,
        verification_token: str,
    ) -> Identity:
        ...

    def create_federated_identity(self, *, email: str, federated_id: str) -> Identity:
        ...

    def consume_verification_token(self, *, token: str) -> Identity | None:
        ...

    def update_last_login(self, *, identity_id: str) -> None:
        ...

    def store_refresh_token(self, *, identity_id: str, token: str, expires_at: datetime) -> None:
        ...

    def find_refresh_token(self, *, token: str) -> RefreshTokenRecord | None:
        ...

    def revoke_refresh_token(self, *, token: str) -> bool:
        ...

    def issue_password_reset_token(self, *, email: str, token: str) -> bool:
        ...

    def consume_password_reset_token(self, *, token: str, password_hash: str) -> Identity | None:
        ...
