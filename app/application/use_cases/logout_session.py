from __future__ import annotations

import logging

from app.application.dto.auth import LogoutInput, MessageOutput
from app.application.ports.identity_store_port import IdentityStorePort


logger = logging.getLogger(__name__)


class LogoutSessionUseCase:
    def __init__(self, *, identity_store: IdentityStorePort):
        self._identity_store = identity_store

    def execute(self, command: LogoutInput) -> MessageOutput:
        if command.refresh_token:
            try:
                self._identity_store.revoke_refresh_token(token=command.refresh_token)
            except Exception:  # noqa: BLE001
                logger.exception("auth: logout_revoke_failed")
        return MessageOutput(message="Logged out successfully")
