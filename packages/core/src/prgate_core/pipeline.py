"""Pull-request validation pipeline.

One webhook event is processed start to finish:

    Received → CommitsFetched → Evaluated → HistoryFetched → Recorded → Reported
             → NotifiedOnFailure? → CommentedOnOpen? → Done

Steps never retry. When an external call fails the error is logged and the
pipeline stops where it is; steps already completed (a posted status, a
persisted audit record) are not undone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from prgate_core.config import details_url, service_base_url
from prgate_core.errors import ExternalCallFailure
from prgate_core.evaluator import ClaLookup, CommitterEvaluator, DeduplicationFilter
from prgate_core.models import Classification, EventAction, PullRequestEvent, StatusReport, Verdict
from prgate_core.notify.base import BaseNotifier, build_notification
from prgate_core.utils.issue_ref import find_issue_reference, issue_link
from prgate_core.verdict import compose_message, derive_state, truncate_description

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    RECEIVED = "received"
    COMMITS_FETCHED = "commits_fetched"
    EVALUATED = "evaluated"
    HISTORY_FETCHED = "history_fetched"
    RECORDED = "recorded"
    REPORTED = "reported"
    NOTIFIED = "notified"
    COMMENTED = "commented"
    DONE = "done"


class Recorder(Protocol):
    def record(self, classification: dict, *, repo: str, pr_number: int, head_sha: str, state: str) -> str: ...


@dataclass
class ValidationResult:
    """What happened to one event — returned so callers can log or display it."""

    event: PullRequestEvent
    stage: Stage = Stage.RECEIVED
    classification: Classification | None = None
    state: str | None = None
    message: str | None = None
    verdict: Verdict | None = None
    failed_step: str | None = None
    notified: list[str] = field(default_factory=list)
    comment: str | None = None

    @property
    def completed(self) -> bool:
        return self.stage is Stage.DONE


def run_validation(
    event: PullRequestEvent,
    forge,
    authority: ClaLookup,
    recorder: Recorder,
    notifier: BaseNotifier,
    config: dict,
) -> ValidationResult:
    """Validate every committer of a pull request and report the verdict to the forge.

    Never raises for operational faults: a failed step is logged and reflected
    in ``ValidationResult.failed_step``.
    """
    prefix = event.log_prefix
    result = ValidationResult(event=event)
    logger.info("%s NEW %s %s", prefix, event.html_url, event.action.value)

    # Closing a pull request is not revalidated.
    if event.action is EventAction.CLOSED:
        result.stage = Stage.DONE
        return result

    try:
        _advance(result, forge, authority, recorder, notifier, config)
    except ExternalCallFailure as e:
        result.failed_step = e.step
        logger.error("%s stopped after %s: %s", prefix, result.stage.value, e)
    return result


def _advance(result: ValidationResult, forge, authority, recorder, notifier, config: dict) -> None:
    event = result.event
    prefix = event.log_prefix

    commits = forge.get_commits(event)
    result.stage = Stage.COMMITS_FETCHED
    logger.info("%s commits url %s number of commits: %d", prefix, event.commits_url, len(commits))

    classification = Classification()
    result.classification = classification
    evaluator = CommitterEvaluator(authority, classification)
    dedupe = DeduplicationFilter()
    for commit in commits:
        if dedupe.should_evaluate(commit.committer.email):
            evaluator.evaluate(commit)
        logger.info(
            "%s listed committer in commit %s: %s <%s>",
            prefix,
            commit.sha[:7],
            commit.committer.name,
            commit.committer.email,
        )
    result.stage = Stage.EVALUATED

    result.state = derive_state(classification)
    result.message = compose_message(classification, config["messages"])

    head = commits[-1] if commits else None
    if head is not None:
        classification.status_history = forge.get_status_history(event, head.sha, service_base_url(config))
    result.stage = Stage.HISTORY_FETCHED

    audit_key = recorder.record(
        classification.to_dict(),
        repo=event.repository_full_name,
        pr_number=event.number,
        head_sha=head.sha if head else "",
        state=result.state,
    )
    result.verdict = Verdict(state=result.state, message=truncate_description(result.message), audit_key=audit_key)
    result.stage = Stage.RECORDED

    if head is None:
        logger.warning("%s has no commits; no status reported", prefix)
    else:
        forge.set_commit_status(
            event,
            StatusReport(
                target_url=event.statuses_url.replace("{sha}", head.sha),
                sha=head.sha,
                state=result.verdict.state,
                detail_url=details_url(config, audit_key),
                context=config["status_context"],
                description=result.verdict.message,
            ),
        )
    result.stage = Stage.REPORTED

    if result.state == "failure":
        _notify_failure(result, forge, notifier, config)
        result.stage = Stage.NOTIFIED

    if event.action is EventAction.OPENED:
        _comment_issue_link(result, forge, config)
        result.stage = Stage.COMMENTED

    result.stage = Stage.DONE


def _notify_failure(result: ValidationResult, forge, notifier: BaseNotifier, config: dict) -> None:
    event = result.event
    recipient = None
    if event.sender_login:
        try:
            recipient = forge.get_user_email(event.sender_login)
        except ExternalCallFailure as e:
            # An unresolvable sender falls back to the admin address.
            logger.warning("%s could not resolve sender %s: %s", event.log_prefix, event.sender_login, e)

    notification = build_notification(event, result.message, result.classification.status_history, recipient, config)
    notifier.send(notification)
    result.notified = notification.recipients


def _comment_issue_link(result: ValidationResult, forge, config: dict) -> None:
    event = result.event
    logger.info("%s looking for issue reference in: %s", event.log_prefix, event.title)
    issue_id = find_issue_reference(event.title)
    if issue_id is None:
        return

    organization = event.organization or config["bug_tracker_org"]
    body = "Issue tracker reference:\n" + issue_link(config["bug_tracker_url"], organization, issue_id)
    forge.add_comment(event, body)
    result.comment = body
