"""Notifier that only logs — the default when no mail server is configured."""

from __future__ import annotations

import logging

from prgate_core.models import NotificationMessage
from prgate_core.notify.base import BaseNotifier

logger = logging.getLogger(__name__)


class NoOpNotifier(BaseNotifier):
    def send(self, notification: NotificationMessage) -> None:
        logger.info(
            "Notification not sent (no notifier configured): %s -> %s", notification.subject, notification.recipients
        )
