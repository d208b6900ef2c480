"""Ledger core: state machine, guard, journal, dispatch and gateway."""

from nftmarket.core.dispatcher import EventDispatcher
from nftmarket.core.errors import (
    CustodyMismatchError,
    JournalIntegrityError,
    MarketplaceRevert,
)
from nftmarket.core.gateway import MarketplaceGateway
from nftmarket.core.guard import OperationGuard
from nftmarket.core.journal import EventJournal
from nftmarket.core.ledger import MarketplaceLedger

__all__ = [
    "CustodyMismatchError",
    "EventDispatcher",
    "EventJournal",
    "JournalIntegrityError",
    "MarketplaceGateway",
    "MarketplaceLedger",
    "MarketplaceRevert",
    "OperationGuard",
]
