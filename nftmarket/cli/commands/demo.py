"""``nftmarket demo`` — run a list / failed buy / buy / withdraw scenario.

Wires the ledger to in-memory collaborators, journals every committed
operation, and renders marketplace state after each step.
"""

from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from nftmarket.collaborators import InMemoryPaymentRail, InMemoryTokenRegistry
from nftmarket.config import config
from nftmarket.core import EventJournal, MarketplaceGateway, MarketplaceLedger
from nftmarket.models.events import MarketEventBase
from nftmarket.models.results import Err
from nftmarket.monitor.renderer import MarketRenderer

console = Console()

DEMO_COLLECTION = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
DEMO_SELLER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
DEMO_BUYER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
DEMO_PRICE = 100_000_000_000_000_000  # 0.1 ETH


def _reset_journal(path: Path) -> None:
    for suffix in ("", "-wal", "-shm"):
        candidate = path.with_name(path.name + suffix)
        if candidate.exists():
            candidate.unlink()


def demo_cmd(
    delay: float = typer.Option(
        0.3,
        "--delay",
        "-d",
        help="Delay in seconds between steps for visual effect.",
    ),
    journal_db: str = typer.Option(
        ".nftmarket/demo-journal.db",
        "--journal",
        "-j",
        help="Path to the demo journal SQLite database.",
    ),
    keep: bool = typer.Option(
        False,
        "--keep",
        help="Keep an existing demo journal instead of starting fresh.",
    ),
) -> None:
    """Run the reference marketplace scenario against in-memory collaborators."""
    journal_path = Path(journal_db)
    if not keep:
        if config.is_production and journal_path.exists():
            console.print(
                f"[bold red]Refusing to reset {journal_path} in production.[/bold red]"
            )
            console.print("[dim]Pass --keep to append to it instead.[/dim]")
            raise typer.Exit(code=1)
        _reset_journal(journal_path)

    renderer = MarketRenderer(
        console=console,
        decimals=config.currency_decimals,
        symbol=config.currency_symbol,
    )
    nft = InMemoryTokenRegistry(DEMO_COLLECTION)
    rail = InMemoryPaymentRail()
    ledger = MarketplaceLedger(
        config.marketplace_address,
        rail,
        registries={DEMO_COLLECTION: nft},
        journal=EventJournal(journal_path),
    )
    gateway = MarketplaceGateway(ledger)

    def _show_event(event: MarketEventBase) -> None:
        console.print(renderer.render_event(event))

    ledger.dispatcher.subscribe(_show_event)

    console.print()
    console.print(
        Panel(
            "[bold]nftmarket demo[/bold]\n\n"
            "Mint, list, attempt an underpriced buy, buy, then withdraw proceeds.",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    token_id = nft.mint(DEMO_SELLER)
    nft.approve(DEMO_SELLER, ledger.address, token_id)
    console.print(f"[bold]Minted[/bold] {DEMO_COLLECTION}#{token_id} to {DEMO_SELLER}")

    steps = [
        (
            "Seller lists the token",
            lambda: gateway.list_item(DEMO_COLLECTION, token_id, DEMO_PRICE, DEMO_SELLER),
        ),
        (
            "Buyer offers half the price",
            lambda: gateway.buy_item(
                DEMO_COLLECTION, token_id, DEMO_PRICE // 2, DEMO_BUYER
            ),
        ),
        (
            "Buyer pays the listed price",
            lambda: gateway.buy_item(DEMO_COLLECTION, token_id, DEMO_PRICE, DEMO_BUYER),
        ),
        ("Seller withdraws proceeds", lambda: gateway.withdraw_proceeds(DEMO_SELLER)),
    ]

    for title, step in steps:
        console.print(f"\n[cyan]>>>[/cyan] [bold]{title}[/bold]")
        time.sleep(delay)
        result = step()
        if isinstance(result, Err):
            console.print(f"[yellow]Rejected:[/yellow] {result.kind}: {result.error.message}")
        renderer.print_state(ledger.active_listings(), ledger.proceeds_snapshot())

    journal = EventJournal(journal_path)
    chain_valid = journal.verify_chain()
    custody_valid = ledger.verify_custody()
    renderer.print_verification(chain_valid, custody_valid, len(journal))

    console.print(
        Panel(
            "\n".join([
                "[bold green]Demo Complete![/bold green]",
                "",
                f"[bold]Token owner:[/bold]   {nft.owner_of(token_id)}",
                f"[bold]Seller paid:[/bold]   {rail.balance_of(DEMO_SELLER)}",
                f"[bold]Journal:[/bold]       {journal_path}",
            ]),
            title="[bold]Demo Summary[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
