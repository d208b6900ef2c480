"""Tests for EventDispatcher — fan-out, filtering, failure isolation."""

from __future__ import annotations

from nftmarket.core import EventDispatcher
from nftmarket.models import EventKind, ItemBought, ItemCanceled, ItemListed


def _listed() -> ItemListed:
    return ItemListed(seller="0xs", collection="0xc", token_id=0, price=1)


class TestEventDispatcher:
    def test_delivers_to_all_subscribers(self):
        dispatcher = EventDispatcher()
        a, b = [], []
        dispatcher.subscribe(a.append)
        dispatcher.subscribe(b.append)
        event = _listed()
        assert dispatcher.publish(event) == 2
        assert a == [event] and b == [event]

    def test_kind_filter(self):
        dispatcher = EventDispatcher()
        bought = []
        dispatcher.subscribe(bought.append, kind=EventKind.ITEM_BOUGHT)
        dispatcher.publish(_listed())
        dispatcher.publish(ItemCanceled(seller="0xs", collection="0xc", token_id=0))
        event = ItemBought(buyer="0xb", collection="0xc", token_id=0, price=1)
        dispatcher.publish(event)
        assert bought == [event]

    def test_failing_subscriber_does_not_block_others(self):
        dispatcher = EventDispatcher()
        seen = []

        def boom(event):
            raise ValueError("subscriber bug")

        dispatcher.subscribe(boom)
        dispatcher.subscribe(seen.append)
        assert dispatcher.publish(_listed()) == 1
        assert len(seen) == 1

    def test_duplicate_subscription_ignored(self):
        dispatcher = EventDispatcher()
        seen = []
        dispatcher.subscribe(seen.append)
        handler = seen.append
        dispatcher.subscribe(handler)
        assert dispatcher.subscriber_count == 1

    def test_unsubscribe(self):
        dispatcher = EventDispatcher()
        seen = []
        handler = seen.append
        dispatcher.subscribe(handler)
        dispatcher.unsubscribe(handler)
        dispatcher.unsubscribe(handler)
        dispatcher.publish(_listed())
        assert seen == []

    def test_no_subscribers(self):
        assert EventDispatcher().publish(_listed()) == 0


class TestLedgerPublishing:
    def test_failing_subscriber_does_not_undo_operation(self, ledger):
        def boom(event):
            raise RuntimeError("observer crashed")

        ledger.dispatcher.subscribe(boom)
        ledger.list_item("0xBasicNft", 0, 10, "0xDeployer")
        assert ledger.get_listing("0xBasicNft", 0).price == 10

    def test_subscriber_may_read_and_act(self, ledger):
        """Events are published after the guard is released."""
        reads = []

        def on_listed(event):
            reads.append(ledger.get_listing(event.collection, event.token_id).price)
            if event.price == 10:
                ledger.update_listing_price(event.collection, event.token_id, 20, event.seller)

        ledger.dispatcher.subscribe(on_listed, kind=EventKind.ITEM_LISTED)
        ledger.list_item("0xBasicNft", 0, 10, "0xDeployer")
        assert reads == [10, 20]
        assert ledger.get_listing("0xBasicNft", 0).price == 20
