"""Exceptions raised inside the ledger.

``MarketplaceRevert`` is the only exception a rejected operation raises.  It
wraps one typed ``MarketError`` so the gateway can turn it back into data.
"""

from __future__ import annotations

from nftmarket.models.errors import MarketError


class MarketplaceRevert(RuntimeError):
    """Raised when a ledger operation is rejected; no state change survives."""

    def __init__(self, error: MarketError) -> None:
        self.error = error
        super().__init__(f"{error.kind}: {error.message}")

    @property
    def kind(self) -> str:
        return self.error.kind


class JournalIntegrityError(RuntimeError):
    """Raised when the journal hash chain is broken."""


class CustodyMismatchError(RuntimeError):
    """Raised when held currency no longer equals the sum of proceeds."""
