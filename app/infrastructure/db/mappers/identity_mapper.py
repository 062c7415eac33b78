from __future__ import annotations

from typing import Any, Mapping

from app.domain.entities.identity import Identity, RefreshTokenRecord


def _as_str(value: Any) -> str:
    return str(value)


def map_row_to_identity(row: Mapping[str, Any]) -> Identity:
    return Identity(
        id=_as_str(row["id"]),
        email=row["email"],
        password_hash=row.get("password_hash"),
        auth_provider=row["auth_provider"],
        federated_id=row.get("google_id"),
        email_verified=bool(row["email_verified"]),
        is_active=bool(row["is_active"]),
        is_deleted=bool(row.get("is_deleted", False)),
        last_login=row.get("last_login"),
        created_at=row["created_at"],
    )


def map_row_to_refresh_token(row: Mapping[str, Any]) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        id=_as_str(row["id"]),
        identity_id=_as_str(row["user_id"]),
        expires_at=row["expires_at"],
        revoked=bool(row["revoked"]),
        created_at=row["created_at"],
    )
