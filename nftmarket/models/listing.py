"""Listing model and the zero-price sentinel.

A listing is keyed by ``(collection, token_id)``.  A price of ``0`` means
"not listed": the ledger never stores a zero-price listing, and a read of an
absent key returns ``Listing.absent()``.  There is no separate existence
flag, so a legitimate zero-price sale cannot be expressed.
"""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class ListingKey(NamedTuple):
    """Composite key identifying one token within one collection."""

    collection: str
    token_id: int

    def __str__(self) -> str:
        return f"{self.collection}#{self.token_id}"


class Listing(BaseModel):
    """An active fixed-price sale offer.

    Examples
    --------
    >>> Listing(price=100, seller="0xabc").is_active
    True
    >>> Listing.absent().price
    0
    """

    model_config = ConfigDict(frozen=True)

    price: int = Field(default=0, ge=0)  # smallest currency unit
    seller: str = ZERO_ADDRESS

    @classmethod
    def absent(cls) -> Listing:
        """Return the sentinel read for a key with no active listing."""
        return cls(price=0, seller=ZERO_ADDRESS)

    @property
    def is_active(self) -> bool:
        """Whether this listing represents a live offer (price above zero)."""
        return self.price > 0
