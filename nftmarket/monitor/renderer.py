"""Rich terminal renderer for marketplace state.

Turns listings, proceeds balances, journal entries and events into Rich
renderables.  Amounts are shown both in smallest units and in whole currency.

Color scheme
------------
- cyan     : list_item / ItemListed
- yellow   : update_listing_price
- dim      : cancel_listing / ItemCanceled
- green    : buy_item / ItemBought
- magenta  : withdraw_proceeds
"""

from __future__ import annotations

from decimal import Decimal, localcontext

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nftmarket.models.events import EventKind, MarketEventBase
from nftmarket.models.journal import JournalEntry, OperationKind
from nftmarket.models.listing import Listing, ListingKey

_OPERATION_STYLES: dict[OperationKind, str] = {
    OperationKind.LIST_ITEM: "cyan",
    OperationKind.UPDATE_LISTING_PRICE: "yellow",
    OperationKind.CANCEL_LISTING: "dim",
    OperationKind.BUY_ITEM: "bold green",
    OperationKind.WITHDRAW_PROCEEDS: "magenta",
}

_EVENT_STYLES: dict[EventKind, str] = {
    EventKind.ITEM_LISTED: "cyan",
    EventKind.ITEM_CANCELED: "dim",
    EventKind.ITEM_BOUGHT: "bold green",
}


def format_amount(amount: int, decimals: int = 18, symbol: str = "ETH") -> str:
    """Render smallest units as a whole-currency string.

    >>> format_amount(100000000000000000)
    '0.1 ETH'
    >>> format_amount(0)
    '0 ETH'
    """
    with localcontext() as ctx:
        ctx.prec = 100
        value = Decimal(amount).scaleb(-decimals)
        text = format(value.normalize(), "f") if amount else "0"
    return f"{text} {symbol}"


class MarketRenderer:
    """Renders marketplace state as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    decimals, symbol:
        Currency display settings.
    """

    def __init__(
        self,
        console: Console | None = None,
        decimals: int = 18,
        symbol: str = "ETH",
    ) -> None:
        self.console = console or Console()
        self.decimals = decimals
        self.symbol = symbol

    def _amount(self, amount: int) -> str:
        return format_amount(amount, self.decimals, self.symbol)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def render_listings(self, listings: list[tuple[ListingKey, Listing]]) -> Table:
        """Build a table of active listings."""
        table = Table(title="Active Listings", header_style="bold cyan", expand=True)
        table.add_column("Collection", style="cyan")
        table.add_column("Token", justify="right")
        table.add_column("Seller")
        table.add_column("Price (units)", justify="right")
        table.add_column("Price", justify="right", style="green")

        for key, listing in listings:
            table.add_row(
                key.collection,
                str(key.token_id),
                listing.seller,
                str(listing.price),
                self._amount(listing.price),
            )
        if not listings:
            table.add_row("[dim]none[/dim]", "", "", "", "")
        return table

    def render_proceeds(self, proceeds: dict[str, int]) -> Table:
        """Build a table of outstanding proceeds balances."""
        table = Table(title="Proceeds", header_style="bold cyan", expand=True)
        table.add_column("Seller")
        table.add_column("Owed (units)", justify="right")
        table.add_column("Owed", justify="right", style="magenta")

        for seller, amount in sorted(proceeds.items()):
            table.add_row(seller, str(amount), self._amount(amount))
        if not proceeds:
            table.add_row("[dim]none[/dim]", "", "")
        return table

    def render_journal(self, entries: list[JournalEntry]) -> Table:
        """Build a table of journal entries, oldest first."""
        table = Table(title="Operation Journal", header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", justify="right")
        table.add_column("Operation")
        table.add_column("Token")
        table.add_column("Actor")
        table.add_column("Counterparty")
        table.add_column("Price", justify="right")
        table.add_column("Amount", justify="right")
        table.add_column("Hash", style="dim")

        for index, entry in enumerate(entries, start=1):
            style = _OPERATION_STYLES.get(entry.operation, "")
            token = (
                f"{entry.collection}#{entry.token_id}"
                if entry.token_id is not None
                else ""
            )
            table.add_row(
                str(index),
                Text(entry.operation.value, style=style),
                token,
                entry.actor,
                entry.counterparty,
                self._amount(entry.price) if entry.price else "",
                self._amount(entry.amount) if entry.amount else "",
                entry.entry_hash[:12],
            )
        return table

    def render_event(self, event: MarketEventBase) -> Text:
        """One-line description of an event."""
        style = _EVENT_STYLES.get(event.event_kind, "")
        parts = [f"{event.event_kind.value}", f"{event.collection}#{event.token_id}"]
        for field in ("seller", "buyer"):
            value = getattr(event, field, None)
            if value:
                parts.append(f"{field}={value}")
        price = getattr(event, "price", None)
        if price is not None:
            parts.append(f"price={self._amount(price)}")
        return Text("  ".join(parts), style=style)

    # ------------------------------------------------------------------
    # Printing
    # ------------------------------------------------------------------

    def print_state(
        self, listings: list[tuple[ListingKey, Listing]], proceeds: dict[str, int]
    ) -> None:
        self.console.print(self.render_listings(listings))
        self.console.print(self.render_proceeds(proceeds))

    def print_verification(self, chain_valid: bool, custody_valid: bool, entries: int) -> None:
        """Print a verification summary panel."""
        chain = "[green]valid[/green]" if chain_valid else "[bold red]BROKEN[/bold red]"
        custody = (
            "[green]balanced[/green]" if custody_valid else "[bold red]MISMATCH[/bold red]"
        )
        border = "green" if chain_valid and custody_valid else "red"
        self.console.print(
            Panel(
                f"[bold]Entries:[/bold] {entries}  |  "
                f"[bold]Chain:[/bold] {chain}  |  [bold]Custody:[/bold] {custody}",
                title="[bold]Journal Verification[/bold]",
                border_style=border,
                padding=(1, 2),
            )
        )
