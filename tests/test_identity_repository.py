from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import unittest
from uuid import UUID, uuid4

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError

from app.infrastructure.db.engine import Base
from app.infrastructure.db.mappers.identity_mapper import map_row_to_identity, map_row_to_refresh_token
from app.infrastructure.db.models import identity as identity_models  # noqa: F401
from app.infrastructure.db.repositories.identity_repository import hash_refresh_token


REPOSITORY_PATH = "app/infrastructure/db/repositories/identity_repository.py"


class IdentityRepositoryTests(unittest.TestCase):
    def setUp(self):
        self.source = Path(REPOSITORY_PATH).read_text(encoding="utf-8")

    def test_mapper_maps_identity_row(self):
        created_at = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        row = {
            "id": UUID("8f14e45f-ceea-467f-a0e6-6d8b2b1c4a01"),
            "email": "Alice@example.com",
            "password_hash": None,
            "auth_provider": "google",
            "google_id": "google-sub-1",
            "email_verified": True,
            "is_active": True,
            "is_deleted": False,
            "last_login": None,
            "created_at": created_at,
        }

        identity = map_row_to_identity(row)

        self.assertEqual(identity.id, "8f14e45f-ceea-467f-a0e6-6d8b2b1c4a01")
        self.assertEqual(identity.federated_id, "google-sub-1")
        self.assertEqual(identity.auth_provider, "google")
        self.assertIsNone(identity.password_hash)
        self.assertEqual(identity.created_at, created_at)

    def test_mapper_maps_refresh_token_row(self):
        row = {
            "id": UUID("8f14e45f-ceea-467f-a0e6-6d8b2b1c4a02"),
            "user_id": UUID("8f14e45f-ceea-467f-a0e6-6d8b2b1c4a01"),
            "expires_at": datetime(2026, 4, 1, tzinfo=timezone.utc),
            "revoked": False,
            "created_at": datetime(2026, 3, 1, tzinfo=timezone.utc),
        }

        record = map_row_to_refresh_token(row)

        self.assertEqual(record.identity_id, "8f14e45f-ceea-467f-a0e6-6d8b2b1c4a01")
        self.assertFalse(record.revoked)

    def test_refresh_tokens_are_stored_as_sha256_digest(self):
        digest = hash_refresh_token("abc")

        self.assertEqual(digest, "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad")
        self.assertIn('"token_hash": hash_refresh_token(token)', self.source)

    def test_lookups_skip_soft_deleted_rows_and_compare_lowercase(self):
        self.assertIn("WHERE lower(email) = :email", self.source)
        self.assertGreaterEqual(self.source.count("AND is_deleted = false"), 6)
        self.assertIn('{"email": email.lower()}', self.source)

    def test_single_use_tokens_are_consumed_by_one_conditional_update(self):
        self.assertIn("WHERE verification_token = :token\n              AND verification_token_expires > now()", self.source)
        self.assertIn("WHERE reset_password_token = :token\n              AND reset_password_expires > now()", self.source)
        self.assertIn("verification_token = NULL", self.source)
        self.assertIn("reset_password_token = NULL", self.source)

    def test_token_expiry_windows(self):
        self.assertIn("now() + interval '24 hours'", self.source)
        self.assertIn("now() + interval '1 hour'", self.source)

    def test_refresh_revocation_only_flips_unrevoked_rows(self):
        self.assertIn("AND revoked = false", self.source)
        self.assertIn("return result.rowcount == 1", self.source)

    def test_models_describe_users_and_refresh_tokens(self):
        refresh_tokens = Base.metadata.tables["public.refresh_tokens"]

        self.assertTrue(refresh_tokens.c.token_hash.unique)
        foreign_key = next(iter(refresh_tokens.c.user_id.foreign_keys))
        self.assertEqual(foreign_key.target_fullname, "public.users.id")

    def test_identity_uniqueness_ignores_soft_deleted_rows(self):
        users = Base.metadata.tables["public.users"]
        indexes = {index.name: index for index in users.indexes}

        self.assertFalse(users.c.google_id.unique)
        for name in ("uq_users_email_active", "uq_users_google_id_active"):
            self.assertTrue(indexes[name].unique)
            self.assertIsNotNone(indexes[name].dialect_options["postgresql"]["where"])

    def test_google_id_of_soft_deleted_identity_can_be_reused(self):
        engine = create_engine("sqlite://").execution_options(schema_translate_map={"public": None})
        Base.metadata.create_all(engine)
        users = Base.metadata.tables["public.users"]
        created_at = datetime(2026, 3, 1, tzinfo=timezone.utc)

        with engine.begin() as conn:
            conn.execute(users.insert(), [_user_row("deleted@example.com", is_deleted=True, created_at=created_at)])
            conn.execute(users.insert(), [_user_row("live@example.com", is_deleted=False, created_at=created_at)])
            with self.assertRaises(IntegrityError):
                conn.execute(users.insert(), [_user_row("other@example.com", is_deleted=False, created_at=created_at)])


def _user_row(email: str, *, is_deleted: bool, created_at: datetime) -> dict:
    return {
        "id": uuid4(),
        "email": email,
        "auth_provider": "google",
        "google_id": "google-sub-1",
        "email_verified": True,
        "is_active": True,
        "is_deleted": is_deleted,
        "created_at": created_at,
    }


if __name__ == "__main__":
    unittest.main()
