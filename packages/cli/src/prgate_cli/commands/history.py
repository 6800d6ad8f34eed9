"""history command — list audit records for a repository."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("history")
@click.option("--repo", required=True, help="GitHub repository (owner/name).")
@click.option("--pr", "pr_number", type=int, default=None, help="Filter by PR number.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of records to show.")
@click.pass_context
def history_cmd(ctx, repo: str, pr_number: int | None, limit: int):
    """List past validations for a repository, most recent first.

    Use `prgate details KEY` to inspect one of them.
    """
    from prgate_store.noop import NoOpStore

    store = ctx.obj.get("store") if ctx.obj else None
    if store is None or isinstance(store, NoOpStore):
        raise click.UsageError(
            "No store configured. Add 'store: json', 'store: sqlite' or 'store: gist' to .prgate.yml."
        )

    records = store.list_records(repo, pr_number=pr_number)
    if not records:
        console.print("[yellow]No audit records found.[/yellow]")
        return

    records = list(reversed(records))[:limit]

    table = Table(title=f"Validation History — {repo}", show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", width=6)
    table.add_column("SHA", width=8)
    table.add_column("State", width=9)
    table.add_column("Key", no_wrap=True)
    table.add_column("Recorded At", width=20)

    for r in records:
        style = "green" if r.state == "success" else "red"
        table.add_row(
            f"#{r.pr_number}",
            r.head_sha[:7],
            f"[{style}]{r.state}[/{style}]",
            r.key,
            r.recorded_at[:19].replace("T", " "),
        )

    console.print(table)
