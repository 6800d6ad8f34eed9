from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage

from prgate_core.errors import ExternalCallFailure
from prgate_core.models import NotificationMessage
from prgate_core.notify.base import BaseNotifier

logger = logging.getLogger(__name__)


class SMTPNotifier(BaseNotifier):
    """Sends notifications through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 25,
        sender: str = "noreply@localhost",
        user: str | None = None,
        password: str | None = None,
        timeout: float = 10,
    ):
        self._host = host
        self._port = port
        self._sender = sender
        self._user = user
        self._password = password
        self._timeout = timeout

    def send(self, notification: NotificationMessage) -> None:
        if not notification.recipients:
            raise ExternalCallFailure("send notification", "no recipient and no admin_email configured")

        msg = EmailMessage()
        msg["Subject"] = notification.subject
        msg["From"] = self._sender
        msg["To"] = ", ".join(notification.recipients)
        if notification.cc:
            msg["Cc"] = ", ".join(notification.cc)
        msg.set_content(notification.body)

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                if self._user and self._password:
                    server.starttls()
                    server.login(self._user, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise ExternalCallFailure("send notification", f"{type(e).__name__}: {e}") from e

        logger.info("Notification sent: %s -> %s", notification.subject, notification.recipients)
