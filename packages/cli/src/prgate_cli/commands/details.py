"""details command — show the audit record behind a reported status."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prgate_store.base import StoreError

console = Console()

# Display order and labels for the persisted classification buckets.
_BUCKET_LABELS = (
    ("valid_cla", "Valid CLA"),
    ("invalid_cla", "Missing CLA"),
    ("unknown_cla", "Unknown CLA"),
    ("valid_signed_off", "Valid Signed-off-by"),
    ("invalid_signed_off", "Mismatched Signed-off-by"),
    ("unknown_signed_off", "Missing Signed-off-by"),
)


@click.command("details")
@click.argument("key")
@click.pass_context
def details_cmd(ctx, key: str):
    """Show the committer classification and status history stored under KEY."""
    store = ctx.obj.get("store") if ctx.obj else None
    try:
        record = store.get(key) if store is not None else None
    except StoreError as e:
        raise click.ClickException(str(e))

    if record is None:
        console.print(f"[yellow]No audit record found for {key}.[/yellow]")
        ctx.exit(1)

    style = "green" if record.state == "success" else "red"
    console.print(
        f"[bold]{record.repo}#{record.pr_number}[/bold] @ {record.head_sha[:7]}  "
        f"[{style}]{record.state}[/{style}]  {record.recorded_at[:19].replace('T', ' ')}"
    )

    table = Table(title="Committers", show_header=True, header_style="bold cyan")
    table.add_column("Check", width=26)
    table.add_column("Identities")
    for field_name, label in _BUCKET_LABELS:
        ids = record.classification.get(field_name) or []
        table.add_row(label, ", ".join(ids) if ids else "—")
    console.print(table)

    history = record.classification.get("status_history") or []
    if not history:
        return

    history_table = Table(title="External Service Status history", show_header=True, header_style="bold cyan")
    history_table.add_column("Description", max_width=40)
    history_table.add_column("State", width=10)
    history_table.add_column("Date", width=20)
    history_table.add_column("Details")
    for h in history:
        history_table.add_row(
            h.get("description", ""),
            h.get("state", ""),
            h.get("created_at", "")[:19].replace("T", " "),
            h.get("target_url", ""),
        )
    console.print(history_table)
