"""CLI entry point for prgate.

Commands:
  validate — run CLA/signoff validation for one webhook delivery
  details  — show the audit record behind a reported status
  history  — list audit records for a repository
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prgate_cli.commands.details import details_cmd
from prgate_cli.commands.history import history_cmd
from prgate_cli.commands.validate import validate_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured store from .prgate.yml settings.

    Store selection hierarchy:
      store: json   → JSONFileStore (store_path or .prgate.json)
      store: sqlite → SQLiteStore   (store_path or .prgate.db)
      store: gist   → GistStore     (requires gist_id and github_token)
      (default)     → NoOpStore     (records are not kept)
    """
    from prgate_store.noop import NoOpStore

    store_type = config.get("store", "noop")

    if store_type == "json":
        from prgate_store.jsonfile import JSONFileStore

        return JSONFileStore(path=config.get("store_path", ".prgate.json"))

    if store_type == "sqlite":
        from prgate_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path", ".prgate.db"))

    if store_type == "gist":
        from prgate_store.gist import GistStore

        gist_id = config.get("gist_id")
        token = config.get("github_token")
        if not gist_id or not token:
            console.print("[yellow]GistStore requires gist_id and a GitHub token. Falling back to no store.[/yellow]")
            return NoOpStore()
        return GistStore(gist_id=gist_id, token=token)

    return NoOpStore()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prgate"),
    prog_name="prgate",
)
@click.option(
    "--config",
    "config_path",
    default=".prgate.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRGATE_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Validate pull requests against CLA and Signed-off-by policy."""
    from prgate_cli.auth import resolve_github_token
    from prgate_core.config import load_config

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(validate_cmd)
main.add_command(details_cmd)
main.add_command(history_cmd)
