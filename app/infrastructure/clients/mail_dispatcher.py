from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from app.application.ports.mail_port import MailPort


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailDispatcherSettings:
    mode: str
    portal_origin: str
    sender: str
    api_url: str
    api_key: str
    timeout_seconds: float


class MailDispatcher(MailPort):
    """Transactional mail for verification and password reset links.

    Modes:
        - console: log the link (development)
        - http: POST a JSON message to the configured mail API
    """

    def __init__(self, settings: MailDispatcherSettings, *, transport: httpx.BaseTransport | None = None):
        self._settings = settings
        self._transport = transport
        self._mode = settings.mode
        if self._mode == "http" and not (settings.api_url and settings.api_key):
            logger.warning("mail_dispatcher: http_not_configured falling_back=console")
            self._mode = "console"

    @property
    def mode(self) -> str:
        return self._mode

    def dispatch_verification(self, *, recipient: str, token: str) -> bool:
        link = self._build_link("/verify-email", token)
        return self._send(
            to=recipient,
            subject="Verify your Every.music account",
            text=(
                "Welcome to Every.music!\n\n"
                f"Verify your email address by opening this link: {link}\n\n"
                "This link expires in 24 hours. If you didn't create an account, please ignore this email."
            ),
        )

    def dispatch_password_reset(self, *, recipient: str, token: str) -> bool:
        link = self._build_link("/reset-password", token)
        return self._send(
            to=recipient,
            subject="Reset your Every.music password",
            text=(
                "We received a request to reset your password.\n\n"
                f"Set a new password by opening this link: {link}\n\n"
                "This link expires in 1 hour. If you didn't request this, please ignore this email."
            ),
        )

    def _build_link(self, path: str, token: str) -> str:
        origin = self._settings.portal_origin.rstrip("/")
        return f"{origin}{path}?{urlencode({'token': token})}"

    def _send(self, *, to: str, subject: str, text: str) -> bool:
        if self._mode == "console":
            logger.info("mail_dispatcher: console to=%s subject=%s\n%s", to, subject, text)
            return True
        if self._mode != "http":
            logger.error("mail_dispatcher: unknown_mode mode=%s", self._mode)
            return False

        try:
            with httpx.Client(timeout=self._settings.timeout_seconds, transport=self._transport) as client:
                response = client.post(
                    self._settings.api_url,
                    headers={"Authorization": f"Bearer {self._settings.api_key}"},
                    json={
                        "from": self._settings.sender,
                        "to": [to],
                        "subject": subject,
                        "text": text,
                    },
                )
        except httpx.HTTPError as exc:
            logger.warning("mail_dispatcher: request_failed to=%s error=%s", to, exc)
            return False

        if response.status_code >= 400:
            logger.warning(
                "mail_dispatcher: rejected to=%s status=%s body=%s",
                to,
                response.status_code,
                response.text[:200],
            )
            return False
        return True
