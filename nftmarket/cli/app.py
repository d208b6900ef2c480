"""Main Typer application — imports and registers all CLI commands.

Entry point: ``nftmarket`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from nftmarket.cli.commands.demo import demo_cmd
from nftmarket.cli.commands.inspect_cmd import (
    history_cmd,
    listings_cmd,
    proceeds_cmd,
    verify_cmd,
)
from nftmarket.config import config

app = typer.Typer(
    name="nftmarket",
    help="nftmarket: fixed-price NFT marketplace ledger.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def _configure(
    log_level: str = typer.Option(
        None, "--log-level", help="Override NFTMARKET_LOG_LEVEL for this invocation."
    ),
) -> None:
    """Install Rich logging at the configured level."""
    level = (log_level or config.log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=config.debug, show_path=config.debug)],
        force=True,
    )


# Register subcommands
app.command(name="demo", help="Run the reference scenario with in-memory collaborators.")(demo_cmd)
app.command(name="listings", help="Show active listings from the journal.")(listings_cmd)
app.command(name="proceeds", help="Show proceeds owed to sellers.")(proceeds_cmd)
app.command(name="history", help="Show the operation journal.")(history_cmd)
app.command(name="verify", help="Verify journal integrity and custody.")(verify_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
