"""Exception types shared across prgate.

A failed validation ("failure" status) is a normal business outcome and is
never represented by an exception. These types cover operational faults only.
"""

from __future__ import annotations


class PrgateError(Exception):
    """Base class for all prgate errors."""


class ExternalCallFailure(PrgateError):
    """A forge, store or mail call failed (network error, non-2xx, timeout).

    ``step`` names the pipeline step that made the call so the pipeline can
    log where it stopped.
    """

    def __init__(self, step: str, message: str):
        super().__init__(f"{step}: {message}")
        self.step = step


class UnhandledEventKind(PrgateError):
    """The dispatcher received a webhook event type it does not handle."""

    def __init__(self, event_name: str):
        super().__init__(f"received unhandled github event: {event_name}")
        self.event_name = event_name
