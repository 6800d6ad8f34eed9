"""Webhook event dispatch.

The HTTP layer that receives webhooks passes the ``X-GitHub-Event`` header
value and the decoded JSON payload to dispatch_event(). Service-specific
follow-up actions are registered as hooks at startup, keyed by event and
action (e.g. ``pull_request`` + ``opened``), either in code or through the
``prgate.hooks`` entry-point group.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from importlib.metadata import entry_points

from prgate_core.config import service_base_url
from prgate_core.errors import UnhandledEventKind
from prgate_core.models import EventAction, PullRequestEvent
from prgate_core.pipeline import ValidationResult, run_validation

logger = logging.getLogger(__name__)

Hook = Callable[[dict], None]

HOOK_ENTRY_POINT_GROUP = "prgate.hooks"


class EventKind(str, Enum):
    PULL_REQUEST = "pull_request"
    STATUS = "status"


class HookRegistry:
    def __init__(self):
        self._hooks: dict[tuple[str, str], list[Hook]] = {}

    def register(self, event: str, action: str, hook: Hook) -> None:
        self._hooks.setdefault((event, action), []).append(hook)

    def hook(self, event: str, action: str):
        """Decorator form of register()."""

        def decorator(fn: Hook) -> Hook:
            self.register(event, action, fn)
            return fn

        return decorator

    def discover_from_entry_points(self, group: str = HOOK_ENTRY_POINT_GROUP) -> int:
        """Register hooks published under the ``prgate.hooks`` entry-point group.

        Entry-point names are ``<event>.<action>``, e.g.::

            [project.entry-points."prgate.hooks"]
            "pull_request.opened" = "mypkg.hooks:announce"

        Entries with a malformed name or that fail to import are logged and
        skipped. Returns the number of hooks registered.
        """
        registered = 0
        for ep in entry_points(group=group):
            event, sep, action = ep.name.partition(".")
            if not sep or not event or not action:
                logger.warning("ignoring hook entry point %r: name must be <event>.<action>", ep.name)
                continue
            try:
                hook = ep.load()
            except Exception as e:
                logger.warning("hook entry point %r failed to load (%s): %s", ep.name, type(e).__name__, e)
                continue
            self.register(event, action, hook)
            registered += 1
        return registered

    def run(self, event: str, action: str, payload: dict) -> None:
        for hook in self._hooks.get((event, action), []):
            name = getattr(hook, "__name__", repr(hook))
            logger.info("invoking hook %s for %s_%s", name, event, action)
            try:
                hook(payload)
            except Exception as e:
                # never affects the verdict
                logger.warning("hook %s failed (%s): %s", name, type(e).__name__, e)


def dispatch_event(
    event_name: str,
    payload: dict,
    *,
    forge,
    authority,
    recorder,
    notifier,
    config: dict,
    hooks: HookRegistry | None = None,
) -> ValidationResult | None:
    """Route one webhook delivery to its handler.

    Returns the ValidationResult for pull request events and None for
    everything else. Unknown event kinds are logged and ignored.
    """
    try:
        kind = EventKind(event_name)
    except ValueError:
        logger.error("%s", UnhandledEventKind(event_name))
        return None

    if kind is EventKind.STATUS:
        handle_status_event(payload, config)
        return None

    event = PullRequestEvent.from_payload(payload)
    result = run_validation(event, forge, authority, recorder, notifier, config)
    if hooks is not None and event.action is not EventAction.CLOSED:
        hooks.run(kind.value, payload.get("action", ""), payload)
    return result


def handle_status_event(payload: dict, config: dict) -> bool:
    """Log a status change and return True when another service reported it.

    Third-party statuses are currently only logged; the pull request is not
    re-evaluated.
    """
    target_url = payload.get("target_url") or ""
    logger.info("processing repo status update with target_url: %s", target_url)
    third_party = not target_url.lower().startswith(service_base_url(config).lower())
    if third_party:
        logger.info("status on %s was set by a third party (%s)", payload.get("sha", "?"), payload.get("context", "?"))
    return third_party
