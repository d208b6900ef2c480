"""Unit tests for the MarketRenderer and amount formatting."""

from __future__ import annotations

import pytest
from rich.console import Console
from rich.table import Table
from rich.text import Text

from nftmarket.models import (
    ItemBought,
    JournalEntry,
    Listing,
    ListingKey,
    OperationKind,
)
from nftmarket.monitor.renderer import MarketRenderer, _OPERATION_STYLES, format_amount


def _render(renderable) -> str:
    console = Console(record=True, width=160)
    console.print(renderable)
    return console.export_text()


class TestFormatAmount:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (0, "0 ETH"),
            (100_000_000_000_000_000, "0.1 ETH"),
            (10**18, "1 ETH"),
            (1, "0.000000000000000001 ETH"),
            (2 * 10**18 + 5 * 10**17, "2.5 ETH"),
        ],
    )
    def test_eighteen_decimals(self, amount, expected):
        assert format_amount(amount) == expected

    def test_custom_currency(self):
        assert format_amount(1_500_000, decimals=6, symbol="USDC") == "1.5 USDC"

    def test_huge_amount_is_exact(self):
        text = format_amount(2**256 - 1)
        assert text.replace(".", "") == f"{2**256 - 1} ETH"


class TestMarketRenderer:
    @pytest.fixture
    def renderer(self) -> MarketRenderer:
        return MarketRenderer(console=Console(record=True, width=160))

    def test_every_operation_has_a_style(self):
        assert set(_OPERATION_STYLES) == set(OperationKind)

    def test_listings_table(self, renderer):
        table = renderer.render_listings(
            [(ListingKey("0xNft", 3), Listing(price=10**17, seller="0xalice"))]
        )
        assert isinstance(table, Table)
        text = _render(table)
        assert "0xNft" in text and "0xalice" in text
        assert "0.1 ETH" in text

    def test_empty_tables(self, renderer):
        assert "none" in _render(renderer.render_listings([]))
        assert "none" in _render(renderer.render_proceeds({}))

    def test_proceeds_table(self, renderer):
        text = _render(renderer.render_proceeds({"0xalice": 10**18}))
        assert "0xalice" in text
        assert "1 ETH" in text

    def test_journal_table(self, renderer):
        entry = JournalEntry(
            operation=OperationKind.WITHDRAW_PROCEEDS,
            actor="0xalice",
            amount=10**17,
            entry_hash="ab" * 32,
        )
        text = _render(renderer.render_journal([entry]))
        assert "withdraw_proceeds" in text
        assert "abababababab" in text

    def test_event_line(self, renderer):
        event = ItemBought(buyer="0xbob", collection="0xNft", token_id=0, price=10**17)
        line = renderer.render_event(event)
        assert isinstance(line, Text)
        assert "ItemBought" in line.plain
        assert "buyer=0xbob" in line.plain
        assert "0.1 ETH" in line.plain

    def test_verification_panel(self, renderer):
        renderer.print_verification(True, False, 4)
        text = renderer.console.export_text()
        assert "valid" in text
        assert "MISMATCH" in text
