"""Marketplace ledger — fixed-price listings and pull-payment proceeds.

The ledger owns two maps:

- ``(collection, token_id) -> Listing``; a price of 0 means "not listed".
- ``seller -> proceeds``; currency owed to sellers, held until withdrawn.

Every mutating operation:

1. runs under the global lock and the re-entry guard (``OperationGuard``);
2. checks its preconditions in a fixed order, each failing with one typed
   ``MarketplaceRevert``;
3. finalizes all local state *before* any external call (token transfer or
   currency payout), so a hook fired by that call observes settled state
   and cannot re-enter;
4. restores local state and leaves no journal entry if anything fails;
5. publishes its event only after it has committed.

Tokens are never escrowed: a listed token stays with its owner, and the
marketplace relies on the owner's standing transfer approval.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from contextlib import AbstractContextManager, nullcontext
from typing import NoReturn

from nftmarket.collaborators.payments import PaymentRail
from nftmarket.collaborators.registry import TokenNotFoundError, TokenRegistry
from nftmarket.core.dispatcher import EventDispatcher
from nftmarket.core.errors import CustodyMismatchError, MarketplaceRevert
from nftmarket.core.guard import OperationGuard
from nftmarket.core.journal import EventJournal
from nftmarket.models.errors import (
    AlreadyListed,
    MarketError,
    NftNotListed,
    NoProceeds,
    NotApprovedForMarketplace,
    NotOwner,
    PriceMustBeAboveZero,
    PriceNotMet,
    TokenTransferFailed,
    TransferFailed,
    UnknownCollection,
)
from nftmarket.models.events import ItemBought, ItemCanceled, ItemListed, MarketEventBase
from nftmarket.models.journal import JournalEntry, OperationKind
from nftmarket.models.listing import Listing, ListingKey

logger = logging.getLogger(__name__)


class MarketplaceLedger:
    """Listing/settlement state machine with custody bookkeeping.

    Parameters
    ----------
    address:
        The marketplace's own identity.  Owners must approve this identity
        on the token registry before listing.
    payments:
        Rail used to pay out withdrawn proceeds.
    registries:
        Token registry per collection identifier.  More can be added later
        with ``register_collection``.
    journal:
        Optional operation journal.  When given, it is verified and replayed
        on construction and every committed operation is appended to it.
    dispatcher:
        Event dispatcher; a private one is created when omitted.
    """

    def __init__(
        self,
        address: str,
        payments: PaymentRail,
        *,
        registries: Mapping[str, TokenRegistry] | None = None,
        journal: EventJournal | None = None,
        dispatcher: EventDispatcher | None = None,
    ) -> None:
        self.address = address
        self._payments = payments
        self._registries: dict[str, TokenRegistry] = dict(registries or {})
        self._journal = journal
        self.dispatcher = dispatcher or EventDispatcher()
        self._guard = OperationGuard()

        self._listings: dict[ListingKey, Listing] = {}
        self._proceeds: dict[str, int] = {}
        self._custody = 0

        if journal is not None:
            journal.verify_chain()
            self._replay(journal.entries())

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def register_collection(self, collection: str, registry: TokenRegistry) -> None:
        """Make *registry* the ownership authority for *collection*."""
        with self._guard.lock:
            self._registries[collection] = registry
        logger.info("Registered collection %s.", collection)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def list_item(
        self, collection: str, token_id: int, price: int, caller: str
    ) -> ItemListed:
        """List a token the caller owns at a fixed *price*.

        Checks, in order: not already listed, caller owns the token,
        price above zero, marketplace approved for the token.
        """
        with self._guard.lock:
            with self._guard.enter("list_item"):
                event = self._list_item(ListingKey(collection, token_id), price, caller)
            self._publish(event)
        return event

    def cancel_listing(self, collection: str, token_id: int, caller: str) -> ItemCanceled:
        """Remove the caller's listing.  The token never moves."""
        with self._guard.lock:
            with self._guard.enter("cancel_listing"):
                event = self._cancel_listing(ListingKey(collection, token_id), caller)
            self._publish(event)
        return event

    def update_listing_price(
        self, collection: str, token_id: int, new_price: int, caller: str
    ) -> ItemListed:
        """Raise the price of the caller's listing.

        A new price that is not strictly above the current one is rejected
        as ``PriceMustBeAboveZero``.
        """
        with self._guard.lock:
            with self._guard.enter("update_listing_price"):
                event = self._update_listing_price(
                    ListingKey(collection, token_id), new_price, caller
                )
            self._publish(event)
        return event

    def buy_item(
        self, collection: str, token_id: int, payment: int, caller: str
    ) -> ItemBought:
        """Buy a listed token with *payment*.

        The full payment, overpayment included, is credited to the seller.
        No change is returned.
        """
        with self._guard.lock:
            with self._guard.enter("buy_item"):
                event = self._buy_item(ListingKey(collection, token_id), payment, caller)
            self._publish(event)
        return event

    def withdraw_proceeds(self, caller: str) -> int:
        """Pay the caller's whole proceeds balance out and return the amount."""
        with self._guard.lock:
            with self._guard.enter("withdraw_proceeds"):
                return self._withdraw_proceeds(caller)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def get_listing(self, collection: str, token_id: int) -> Listing:
        """Return the listing for a token, or the zero-price sentinel."""
        with self._guard.lock:
            return self._listing(ListingKey(collection, token_id))

    def get_proceeds(self, seller: str) -> int:
        """Return the proceeds owed to *seller* (0 when none)."""
        with self._guard.lock:
            return self._proceeds.get(seller, 0)

    def active_listings(self) -> list[tuple[ListingKey, Listing]]:
        """Return all active listings sorted by collection and token id."""
        with self._guard.lock:
            return sorted(self._listings.items())

    def proceeds_snapshot(self) -> dict[str, int]:
        """Return a copy of every non-zero proceeds balance."""
        with self._guard.lock:
            return dict(self._proceeds)

    @property
    def custody_balance(self) -> int:
        """Currency held on behalf of sellers."""
        with self._guard.lock:
            return self._custody

    def verify_custody(self) -> bool:
        """Check that held currency equals the sum of all proceeds.

        Returns True, or raises ``CustodyMismatchError``.
        """
        with self._guard.lock:
            owed = sum(self._proceeds.values())
            if owed != self._custody:
                raise CustodyMismatchError(
                    f"custody {self._custody} does not match owed proceeds {owed}"
                )
        return True

    # ------------------------------------------------------------------
    # Operation bodies (called under the guard)
    # ------------------------------------------------------------------

    def _list_item(self, key: ListingKey, price: int, caller: str) -> ItemListed:
        if self._listing(key).is_active:
            self._revert(AlreadyListed(collection=key.collection, token_id=key.token_id))
        registry = self._registry(key.collection)
        self._require_owner(registry, key, caller)
        if price <= 0:
            self._revert(
                PriceMustBeAboveZero(
                    collection=key.collection, token_id=key.token_id, price=price
                )
            )
        if registry.get_approved(key.token_id) != self.address:
            self._revert(
                NotApprovedForMarketplace(collection=key.collection, token_id=key.token_id)
            )

        self._commit(
            JournalEntry(
                operation=OperationKind.LIST_ITEM,
                collection=key.collection,
                token_id=key.token_id,
                actor=caller,
                price=price,
            )
        )
        self._listings[key] = Listing(price=price, seller=caller)

        logger.info("Listed %s at %d by %s.", key, price, caller)
        return ItemListed(
            seller=caller, collection=key.collection, token_id=key.token_id, price=price
        )

    def _cancel_listing(self, key: ListingKey, caller: str) -> ItemCanceled:
        registry = self._registry(key.collection)
        self._require_owner(registry, key, caller)
        self._require_listed(key)

        self._commit(
            JournalEntry(
                operation=OperationKind.CANCEL_LISTING,
                collection=key.collection,
                token_id=key.token_id,
                actor=caller,
            )
        )
        del self._listings[key]

        logger.info("Canceled listing %s by %s.", key, caller)
        return ItemCanceled(seller=caller, collection=key.collection, token_id=key.token_id)

    def _update_listing_price(
        self, key: ListingKey, new_price: int, caller: str
    ) -> ItemListed:
        registry = self._registry(key.collection)
        self._require_owner(registry, key, caller)
        listing = self._require_listed(key)
        # Reported as PriceMustBeAboveZero although the bound is the current price.
        if new_price <= listing.price:
            self._revert(
                PriceMustBeAboveZero(
                    collection=key.collection, token_id=key.token_id, price=new_price
                )
            )

        self._commit(
            JournalEntry(
                operation=OperationKind.UPDATE_LISTING_PRICE,
                collection=key.collection,
                token_id=key.token_id,
                actor=caller,
                price=new_price,
            )
        )
        self._listings[key] = listing.model_copy(update={"price": new_price})

        logger.info("Updated %s price %d -> %d.", key, listing.price, new_price)
        return ItemListed(
            seller=caller, collection=key.collection, token_id=key.token_id, price=new_price
        )

    def _buy_item(self, key: ListingKey, payment: int, caller: str) -> ItemBought:
        listing = self._require_listed(key)
        if payment < listing.price:
            self._revert(
                PriceNotMet(
                    collection=key.collection,
                    token_id=key.token_id,
                    price=listing.price,
                    payment=payment,
                )
            )
        registry = self._registry(key.collection)

        seller = listing.seller
        previous_proceeds = self._proceeds.get(seller)
        previous_custody = self._custody
        entry = JournalEntry(
            operation=OperationKind.BUY_ITEM,
            collection=key.collection,
            token_id=key.token_id,
            actor=caller,
            counterparty=seller,
            price=listing.price,
            amount=payment,
        )
        try:
            with self._journaled(entry):
                self._proceeds[seller] = (previous_proceeds or 0) + payment
                self._custody += payment
                del self._listings[key]
                self._transfer_token(registry, key, seller, caller)
        except BaseException:
            self._listings[key] = listing
            if previous_proceeds is None:
                self._proceeds.pop(seller, None)
            else:
                self._proceeds[seller] = previous_proceeds
            self._custody = previous_custody
            logger.warning("Rolled back purchase of %s by %s.", key, caller)
            raise

        logger.info(
            "Sold %s from %s to %s for %d (listed at %d).",
            key,
            seller,
            caller,
            payment,
            listing.price,
        )
        return ItemBought(
            buyer=caller, collection=key.collection, token_id=key.token_id, price=listing.price
        )

    def _withdraw_proceeds(self, caller: str) -> int:
        amount = self._proceeds.get(caller, 0)
        if amount <= 0:
            self._revert(NoProceeds(account=caller))

        entry = JournalEntry(
            operation=OperationKind.WITHDRAW_PROCEEDS, actor=caller, amount=amount
        )
        previous_custody = self._custody
        try:
            with self._journaled(entry):
                del self._proceeds[caller]
                self._custody -= amount
                self._pay(caller, amount)
        except BaseException:
            self._proceeds[caller] = amount
            self._custody = previous_custody
            logger.warning("Restored proceeds of %s after failed payout.", caller)
            raise

        logger.info("Paid %d in proceeds to %s.", amount, caller)
        return amount

    # ------------------------------------------------------------------
    # External calls
    # ------------------------------------------------------------------

    def _transfer_token(
        self, registry: TokenRegistry, key: ListingKey, seller: str, buyer: str
    ) -> None:
        try:
            registry.safe_transfer_from(seller, buyer, key.token_id, operator=self.address)
        except MarketplaceRevert:
            raise
        except Exception as exc:
            raise MarketplaceRevert(
                TokenTransferFailed(
                    collection=key.collection,
                    token_id=key.token_id,
                    seller=seller,
                    buyer=buyer,
                    reason=str(exc),
                )
            ) from exc

    def _pay(self, recipient: str, amount: int) -> None:
        failure = TransferFailed(account=recipient, amount=amount)
        try:
            succeeded = self._payments.pay(recipient, amount)
        except Exception as exc:
            raise MarketplaceRevert(failure) from exc
        if not succeeded:
            raise MarketplaceRevert(failure)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _listing(self, key: ListingKey) -> Listing:
        return self._listings.get(key) or Listing.absent()

    def _registry(self, collection: str) -> TokenRegistry:
        registry = self._registries.get(collection)
        if registry is None:
            self._revert(UnknownCollection(collection=collection))
        return registry

    def _require_owner(self, registry: TokenRegistry, key: ListingKey, caller: str) -> None:
        try:
            owner = registry.owner_of(key.token_id)
        except TokenNotFoundError:
            owner = None
        if owner != caller:
            self._revert(
                NotOwner(collection=key.collection, token_id=key.token_id, caller=caller)
            )

    def _require_listed(self, key: ListingKey) -> Listing:
        listing = self._listing(key)
        if not listing.is_active:
            self._revert(NftNotListed(collection=key.collection, token_id=key.token_id))
        return listing

    def _revert(self, error: MarketError) -> NoReturn:
        logger.warning(
            "Rejected %s: %s (%s).",
            self._guard.active_operation or "operation",
            error.kind,
            error.message,
        )
        raise MarketplaceRevert(error)

    def _journaled(self, entry: JournalEntry) -> AbstractContextManager[JournalEntry]:
        """Open a journal write that commits only if the block succeeds."""
        if self._journal is None:
            return nullcontext(entry)
        return self._journal.record(entry)

    def _commit(self, entry: JournalEntry) -> None:
        if self._journal is not None:
            self._journal.append(entry)

    def _publish(self, event: MarketEventBase) -> None:
        self.dispatcher.publish(event)

    # ------------------------------------------------------------------
    # Journal replay
    # ------------------------------------------------------------------

    def _replay(self, entries: Iterable[JournalEntry]) -> None:
        """Rebuild listings, proceeds and custody from committed entries."""
        count = 0
        for entry in entries:
            self._apply(entry)
            count += 1
        if count:
            logger.info(
                "Replayed %d journal entr%s: %d listing(s), custody %d.",
                count,
                "y" if count == 1 else "ies",
                len(self._listings),
                self._custody,
            )

    def _apply(self, entry: JournalEntry) -> None:
        op = entry.operation
        if op in (OperationKind.LIST_ITEM, OperationKind.UPDATE_LISTING_PRICE):
            key = ListingKey(entry.collection, entry.token_id)
            seller = entry.actor
            if op == OperationKind.UPDATE_LISTING_PRICE and key in self._listings:
                seller = self._listings[key].seller
            self._listings[key] = Listing(price=entry.price, seller=seller)
        elif op == OperationKind.CANCEL_LISTING:
            self._listings.pop(ListingKey(entry.collection, entry.token_id), None)
        elif op == OperationKind.BUY_ITEM:
            self._listings.pop(ListingKey(entry.collection, entry.token_id), None)
            self._proceeds[entry.counterparty] = (
                self._proceeds.get(entry.counterparty, 0) + entry.amount
            )
            self._custody += entry.amount
        elif op == OperationKind.WITHDRAW_PROCEEDS:
            self._proceeds.pop(entry.actor, None)
            self._custody -= entry.amount
