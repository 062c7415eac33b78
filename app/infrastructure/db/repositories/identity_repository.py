from __future__ import annotations

import hashlib
from datetime import datetime
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.application.ports.identity_store_port import IdentityStorePort
from app.domain.exceptions import ConflictError
from app.infrastructure.db.mappers.identity_mapper import map_row_to_identity, map_row_to_refresh_token


_IDENTITY_COLUMNS = """
    id, email, password_hash, auth_provider, google_id,
    email_verified, is_active, is_deleted, last_login, created_at
"""


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SqlIdentityRepository(IdentityStorePort):
    """Identity and refresh token persistence.

    Single use tokens are consumed with one conditional UPDATE so that two
    concurrent requests presenting the same token cannot both match.
    """

    def __init__(self, engine):
        self._engine = engine

    def find_by_email(self, *, email: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM public.users
            WHERE lower(email) = :email
              AND is_deleted = false
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)

    def find_by_federated_id(self, *, federated_id: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM public.users
            WHERE google_id = :google_id
              AND is_deleted = false
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"google_id": federated_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)

    def find_by_id(self, *, identity_id: str):
        sql = f"""
            SELECT {_IDENTITY_COLUMNS}
            FROM public.users
            WHERE id = :identity_id
              AND is_deleted = false
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"identity_id": identity_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)

    def create_email_identity(self, *, email: str, password_hash: str, verification_token: str):
        sql = f"""
            INSERT INTO public.users (
                id, email, password_hash, auth_provider,
                verification_token, verification_token_expires
            ) VALUES (
                :id, :email, :password_hash, 'email',
                :verification_token, now() + interval '24 hours'
            )
            RETURNING {_IDENTITY_COLUMNS}
        """
        params = {
            "id": str(uuid4()),
            "email": email,
            "password_hash": password_hash,
            "verification_token": verification_token,
        }
        return self._insert_identity(sql, params)

    def create_federated_identity(self, *, email: str, federated_id: str):
        sql = f"""
            INSERT INTO public.users (
                id, email, google_id, auth_provider, email_verified
            ) VALUES (
                :id, :email, :google_id, 'google', true
            )
            RETURNING {_IDENTITY_COLUMNS}
        """
        params = {
            "id": str(uuid4()),
            "email": email,
            "google_id": federated_id,
        }
        return self._insert_identity(sql, params)

    def _insert_identity(self, sql: str, params: dict):
        try:
            with self._engine.begin() as conn:
                row = conn.execute(text(sql), params).mappings().one()
        except IntegrityError as exc:
            raise ConflictError(
                "An account with this email already exists",
                code="EMAIL_TAKEN",
            ) from exc
        return map_row_to_identity(row)

    def consume_verification_token(self, *, token: str):
        sql = f"""
            UPDATE public.users
            SET email_verified = true,
                verification_token = NULL,
                verification_token_expires = NULL
            WHERE verification_token = :token
              AND verification_token_expires > now()
              AND is_deleted = false
            RETURNING {_IDENTITY_COLUMNS}
        """
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), {"token": token}).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)

    def update_last_login(self, *, identity_id: str) -> None:
        sql = """
            UPDATE public.users
            SET last_login = now()
            WHERE id = :identity_id
        """
        with self._engine.begin() as conn:
            conn.execute(text(sql), {"identity_id": identity_id})

    def store_refresh_token(self, *, identity_id: str, token: str, expires_at: datetime) -> None:
        sql = """
            INSERT INTO public.refresh_tokens (
                id, user_id, token_hash, expires_at
            ) VALUES (
                :id, :user_id, :token_hash, :expires_at
            )
        """
        params = {
            "id": str(uuid4()),
            "user_id": identity_id,
            "token_hash": hash_refresh_token(token),
            "expires_at": expires_at,
        }
        with self._engine.begin() as conn:
            conn.execute(text(sql), params)

    def find_refresh_token(self, *, token: str):
        sql = """
            SELECT id, user_id, expires_at, revoked, created_at
            FROM public.refresh_tokens
            WHERE token_hash = :token_hash
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"token_hash": hash_refresh_token(token)}).mappings().first()
        if row is None:
            return None
        return map_row_to_refresh_token(row)

    def revoke_refresh_token(self, *, token: str) -> bool:
        sql = """
            UPDATE public.refresh_tokens
            SET revoked = true
            WHERE token_hash = :token_hash
              AND revoked = false
        """
        with self._engine.begin() as conn:
            result = conn.execute(text(sql), {"token_hash": hash_refresh_token(token)})
        return result.rowcount == 1

    def issue_password_reset_token(self, *, email: str, token: str) -> bool:
        sql = """
            UPDATE public.users
            SET reset_password_token = :token,
                reset_password_expires = now() + interval '1 hour'
            WHERE lower(email) = :email
              AND is_deleted = false
            RETURNING id
        """
        with self._engine.begin() as conn:
            row = conn.execute(text(sql), {"email": email.lower(), "token": token}).first()
        return row is not None

    def consume_password_reset_token(self, *, token: str, password_hash: str):
        sql = f"""
            UPDATE public.users
            SET password_hash = :password_hash,
                reset_password_token = NULL,
                reset_password_expires = NULL
            WHERE reset_password_token = :token
              AND reset_password_expires > now()
              AND is_deleted = false
            RETURNING {_IDENTITY_COLUMNS}
        """
        with self._engine.begin() as conn:
            row = conn.execute(
                text(sql),
                {"token": token, "password_hash": password_hash},
            ).mappings().first()
        if row is None:
            return None
        return map_row_to_identity(row)
