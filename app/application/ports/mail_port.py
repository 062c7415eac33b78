from __future__ import annotations

from typing import Protocol


class MailPort(Protocol):
    def dispatch_verification(self, *, recipient: str, token: str) -> bool:
        ...

    def dispatch_password_reset(self, *, recipient: str, token: str) -> bool:
        ...
