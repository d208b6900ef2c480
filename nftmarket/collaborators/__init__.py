"""External collaborators consumed by the ledger, with in-memory defaults."""

from nftmarket.collaborators.payments import InMemoryPaymentRail, PaymentRail
from nftmarket.collaborators.registry import (
    InMemoryTokenRegistry,
    TokenNotFoundError,
    TokenRegistry,
    TokenTransferError,
)

__all__ = [
    "PaymentRail",
    "InMemoryPaymentRail",
    "TokenRegistry",
    "InMemoryTokenRegistry",
    "TokenNotFoundError",
    "TokenTransferError",
]
