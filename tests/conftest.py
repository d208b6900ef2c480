"""Shared test fixtures for nftmarket."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from nftmarket.collaborators import InMemoryPaymentRail, InMemoryTokenRegistry
from nftmarket.core import EventJournal, MarketplaceGateway, MarketplaceLedger
from nftmarket.models.events import MarketEventBase

MARKET = "0xMarketplace"
COLLECTION = "0xBasicNft"
SELLER = "0xDeployer"
BUYER = "0xUser"
PLAYER = "0xPlayer"
PRICE = 100_000_000_000_000_000  # 0.1 ETH in wei


@pytest.fixture
def nft() -> InMemoryTokenRegistry:
    """A registry with token 0 minted to SELLER and approved for MARKET."""
    registry = InMemoryTokenRegistry(COLLECTION)
    token_id = registry.mint(SELLER)
    registry.approve(SELLER, MARKET, token_id)
    return registry


@pytest.fixture
def rail() -> InMemoryPaymentRail:
    return InMemoryPaymentRail()


@pytest.fixture
def journal(tmp_path: Path) -> EventJournal:
    """Provide a fresh EventJournal backed by a temp SQLite database."""
    return EventJournal(tmp_path / "journal.db")


@pytest.fixture
def ledger(nft: InMemoryTokenRegistry, rail: InMemoryPaymentRail) -> MarketplaceLedger:
    """An unjournaled ledger wired to the test registry and rail."""
    return MarketplaceLedger(MARKET, rail, registries={COLLECTION: nft})


@pytest.fixture
def journaled_ledger(
    nft: InMemoryTokenRegistry, rail: InMemoryPaymentRail, journal: EventJournal
) -> MarketplaceLedger:
    return MarketplaceLedger(MARKET, rail, registries={COLLECTION: nft}, journal=journal)


@pytest.fixture
def listed(ledger: MarketplaceLedger) -> MarketplaceLedger:
    """The ledger with token 0 listed by SELLER at PRICE."""
    ledger.list_item(COLLECTION, 0, PRICE, SELLER)
    return ledger


@pytest.fixture
def gateway(ledger: MarketplaceLedger) -> MarketplaceGateway:
    return MarketplaceGateway(ledger)


@pytest.fixture
def events(ledger: MarketplaceLedger) -> list[MarketEventBase]:
    """Collects every event the ledger publishes."""
    seen: list[MarketEventBase] = []
    ledger.dispatcher.subscribe(seen.append)
    return seen


@pytest.fixture
def make_ledger(
    rail: InMemoryPaymentRail,
) -> Callable[..., MarketplaceLedger]:
    """Factory fixture: build a ledger over arbitrary registries."""

    def _factory(**overrides: Any) -> MarketplaceLedger:
        defaults: dict[str, Any] = {"registries": {}}
        defaults.update(overrides)
        return MarketplaceLedger(MARKET, rail, **defaults)

    return _factory
