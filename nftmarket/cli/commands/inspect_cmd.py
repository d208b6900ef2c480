"""Read-only journal inspection: ``listings``, ``proceeds``, ``history``, ``verify``.

Each command rebuilds marketplace state by replaying the journal.  None of
them writes to it.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from nftmarket.collaborators import InMemoryPaymentRail
from nftmarket.config import config
from nftmarket.core import (
    CustodyMismatchError,
    EventJournal,
    JournalIntegrityError,
    MarketplaceLedger,
)
from nftmarket.monitor.renderer import MarketRenderer

console = Console()

_JOURNAL_OPTION = typer.Option(
    None,
    "--journal",
    "-j",
    help="Path to the journal SQLite database (defaults to NFTMARKET_JOURNAL_PATH).",
)


def _open_journal(journal_db: str | None) -> EventJournal:
    path = Path(journal_db) if journal_db else config.journal_path
    if not path.exists():
        console.print(f"[bold red]Journal not found:[/bold red] {path}")
        console.print("[dim]Create one first with: nftmarket demo[/dim]")
        raise typer.Exit(code=1)
    return EventJournal(path)


def _replay(journal: EventJournal) -> MarketplaceLedger:
    try:
        return MarketplaceLedger(
            config.marketplace_address, InMemoryPaymentRail(), journal=journal
        )
    except JournalIntegrityError as exc:
        console.print(f"[bold red]Journal integrity failure:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def _renderer() -> MarketRenderer:
    return MarketRenderer(
        console=console,
        decimals=config.currency_decimals,
        symbol=config.currency_symbol,
    )


def listings_cmd(journal_db: str | None = _JOURNAL_OPTION) -> None:
    """Show active listings rebuilt from the journal."""
    ledger = _replay(_open_journal(journal_db))
    console.print(_renderer().render_listings(ledger.active_listings()))


def proceeds_cmd(
    account: str = typer.Argument(None, help="Show only this seller's balance."),
    journal_db: str | None = _JOURNAL_OPTION,
) -> None:
    """Show proceeds owed to sellers."""
    ledger = _replay(_open_journal(journal_db))
    if account:
        balances = {account: ledger.get_proceeds(account)}
    else:
        balances = ledger.proceeds_snapshot()
    console.print(_renderer().render_proceeds(balances))


def history_cmd(
    collection: str = typer.Option(None, "--collection", "-c", help="Filter by collection."),
    token_id: int = typer.Option(None, "--token", "-t", help="Filter by token id."),
    journal_db: str | None = _JOURNAL_OPTION,
) -> None:
    """Show committed operations in journal order."""
    journal = _open_journal(journal_db)
    if collection is not None and token_id is not None:
        entries = journal.entries_for(collection, token_id)
    else:
        entries = journal.entries()
        if collection is not None:
            entries = [e for e in entries if e.collection == collection]
    console.print(_renderer().render_journal(entries))


def verify_cmd(journal_db: str | None = _JOURNAL_OPTION) -> None:
    """Verify journal hash-chain integrity and custody balance."""
    journal = _open_journal(journal_db)
    renderer = _renderer()

    try:
        journal.verify_chain()
    except JournalIntegrityError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        renderer.print_verification(False, False, len(journal))
        raise typer.Exit(code=1) from exc

    ledger = _replay(journal)
    try:
        custody_valid = ledger.verify_custody()
    except CustodyMismatchError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        custody_valid = False

    renderer.print_verification(True, custody_valid, len(journal))
    if not custody_valid:
        raise typer.Exit(code=1)
