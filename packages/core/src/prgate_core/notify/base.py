"""Failure notifications sent to the contributor who triggered a validation.

Delivery is pluggable: build_notification() composes the message the same way
for every backend, and BaseNotifier subclasses only implement send().
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from prgate_core.models import NotificationMessage, PullRequestEvent, StatusHistoryEntry


class BaseNotifier(ABC):
    @abstractmethod
    def send(self, notification: NotificationMessage) -> None:
        """Deliver one notification. Raises ExternalCallFailure on delivery errors."""


def format_status_history(history: list[StatusHistoryEntry]) -> str:
    """Render third-party statuses as a plain-text appendix, or "" when there are none."""
    if not history:
        return ""
    items = [
        f"Description: {h.description}\n"
        f"State: {h.state}\n"
        f"Date: {h.created_at}\n"
        f"Details: {h.target_url}\n"
        for h in history
    ]
    return "\n\nExternal Service Status history: \n" + "\n".join(items)


def build_notification(
    event: PullRequestEvent,
    message: str,
    history: list[StatusHistoryEntry],
    recipient: str | None,
    config: dict,
) -> NotificationMessage:
    """Compose the failure mail; falls back to the admin address when no recipient is known."""
    admin = config.get("admin_email")
    recipients = [recipient] if recipient else ([admin] if admin else [])
    body = (
        f"There was a problem validating pull request {event.pull_request_url}\n\n"
        + message
        + format_status_history(history)
    )
    return NotificationMessage(
        recipients=recipients,
        subject=f"[{config['mail_subject_prefix']}][Validation Error] {event.repository_full_name}",
        body=body,
        cc=[admin] if admin else [],
    )
