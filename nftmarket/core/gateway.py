"""MarketplaceGateway — result-returning API surface over the ledger.

Inside the library a rejected operation raises ``MarketplaceRevert``.  At the
boundary the gateway turns every call into an ``OperationResult``: ``Ok``
with the operation's value, or ``Err`` with the typed error.  Only
``MarketplaceRevert`` is converted; anything else is a defect and propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from nftmarket.core.errors import MarketplaceRevert
from nftmarket.core.ledger import MarketplaceLedger
from nftmarket.models.listing import Listing
from nftmarket.models.results import Err, Ok

logger = logging.getLogger(__name__)


class MarketplaceGateway:
    """Caller-facing facade.

    Examples
    --------
    >>> result = gateway.buy_item("0xDogie", 0, payment=10**17, caller="0xbob")
    >>> if not result.is_ok:
    ...     print(result.kind)
    """

    def __init__(self, ledger: MarketplaceLedger) -> None:
        self._ledger = ledger

    @property
    def ledger(self) -> MarketplaceLedger:
        return self._ledger

    def list_item(self, collection: str, token_id: int, price: int, caller: str) -> Ok | Err:
        return self._call(self._ledger.list_item, collection, token_id, price, caller)

    def cancel_listing(self, collection: str, token_id: int, caller: str) -> Ok | Err:
        return self._call(self._ledger.cancel_listing, collection, token_id, caller)

    def update_listing_price(
        self, collection: str, token_id: int, new_price: int, caller: str
    ) -> Ok | Err:
        return self._call(
            self._ledger.update_listing_price, collection, token_id, new_price, caller
        )

    def buy_item(self, collection: str, token_id: int, payment: int, caller: str) -> Ok | Err:
        return self._call(self._ledger.buy_item, collection, token_id, payment, caller)

    def withdraw_proceeds(self, caller: str) -> Ok | Err:
        return self._call(self._ledger.withdraw_proceeds, caller)

    def get_listing(self, collection: str, token_id: int) -> Listing:
        return self._ledger.get_listing(collection, token_id)

    def get_proceeds(self, seller: str) -> int:
        return self._ledger.get_proceeds(seller)

    @staticmethod
    def _call(operation: Callable[..., Any], *args: Any) -> Ok | Err:
        try:
            return Ok(value=operation(*args))
        except MarketplaceRevert as exc:
            logger.debug("%s returned %s.", operation.__name__, exc.kind)
            return Err(error=exc.error)
