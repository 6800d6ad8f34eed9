"""validate command — run CLA/signoff validation for one webhook delivery."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from prgate_core.cla import ClaAuthority
from prgate_core.dispatch import HookRegistry, dispatch_event
from prgate_core.gh.forge import GitHubForge
from prgate_core.models import Bucket
from prgate_core.notify.noop import NoOpNotifier
from prgate_core.notify.smtp import SMTPNotifier
from prgate_core.pipeline import ValidationResult
from prgate_cli.recorder import AuditRecorder

console = Console()

_STATE_STYLE = {"success": "green", "failure": "red"}


def _build_notifier(config: dict):
    if config.get("notifier") == "smtp":
        return SMTPNotifier(
            host=config["smtp_host"],
            port=config["smtp_port"],
            sender=config["mail_from"],
            user=config.get("smtp_user"),
            password=config.get("smtp_password"),
            timeout=config["request_timeout"],
        )
    return NoOpNotifier()


def _print_result(result: ValidationResult) -> None:
    event = result.event
    console.print(f"\n[bold]{event.repository_full_name}#{event.number}[/bold] ({event.action.value})")

    if result.classification is not None:
        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Bucket", width=20)
        table.add_column("Committers")
        for bucket in Bucket:
            ids = result.classification[bucket]
            if ids:
                table.add_row(bucket.value, ", ".join(ids))
        console.print(table)

    if result.state is not None:
        style = _STATE_STYLE.get(result.state, "white")
        console.print(f"State: [{style}]{result.state}[/{style}]")
    if result.verdict is not None:
        console.print(f"Audit key: {result.verdict.audit_key}")
        console.print(f"Description: {result.verdict.message}")
    if result.comment:
        console.print(f"Comment posted: {result.comment.splitlines()[-1]}")
    if result.failed_step:
        console.print(f"[red]Stopped at {result.stage.value}: {result.failed_step} failed.[/red]")


@click.command("validate")
@click.option(
    "--event",
    "event_name",
    default="pull_request",
    show_default=True,
    envvar="GITHUB_EVENT_NAME",
    help="Webhook event type, as sent in the X-GitHub-Event header.",
)
@click.option(
    "--payload",
    "payload_file",
    type=click.File("r"),
    default="-",
    envvar="GITHUB_EVENT_PATH",
    help="Webhook JSON payload file. Defaults to stdin.",
)
@click.option("--cla-service-url", default=None, help="CLA service base URL. Overrides config file.")
@click.pass_context
def validate_cmd(ctx, event_name: str, payload_file, cla_service_url: str | None):
    """Validate the pull request in a webhook payload and report a commit status.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token with repo:status scope (or use gh CLI)
    """
    config = ctx.obj["config"]
    if cla_service_url:
        config["cla_service_url"] = cla_service_url

    try:
        payload = json.load(payload_file)
    except json.JSONDecodeError as e:
        raise click.UsageError(f"Payload is not valid JSON: {e}")

    if event_name == "pull_request":
        if not config.get("github_token"):
            raise click.UsageError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")
        if not config.get("cla_service_url"):
            raise click.UsageError(
                "cla_service_url is not configured. Set it in .prgate.yml or pass --cla-service-url."
            )

    forge = GitHubForge(
        config.get("github_token"),
        base_url=config["github_endpoint_url"],
        timeout=config["request_timeout"],
    )
    hooks = HookRegistry()
    hooks.discover_from_entry_points()
    result = dispatch_event(
        event_name,
        payload,
        forge=forge,
        authority=ClaAuthority(config.get("cla_service_url") or "", timeout=config["request_timeout"]),
        recorder=AuditRecorder(ctx.obj["store"]),
        notifier=_build_notifier(config),
        config=config,
        hooks=hooks,
    )

    if result is None:
        console.print(f"[yellow]No validation performed for '{event_name}' event.[/yellow]")
        return

    _print_result(result)
    if result.failed_step:
        ctx.exit(1)
