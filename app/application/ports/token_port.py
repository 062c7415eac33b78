from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from app.application.dto.auth import IssuedRefreshToken


class TokenPort(Protocol):
    def issue(self, payload: dict[str, Any]) -> str:
        ...

    def verify(self, token: str) -> dict[str, Any] | None:
        ...

    def create_access_token(self, *, identity_id: str, email: str | None, now: datetime) -> str:
        ...

    def create_refresh_token(self, *, identity_id: str, now: datetime) -> IssuedRefreshToken:
        ...

    def generate_opaque_token(self) -> str:
        ...
