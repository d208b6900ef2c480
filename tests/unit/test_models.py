"""Tests for data models — listing sentinel, events, errors, results."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from nftmarket.models import (
    ZERO_ADDRESS,
    AlreadyListed,
    Err,
    EventKind,
    ItemBought,
    ItemListed,
    JournalEntry,
    Listing,
    ListingKey,
    MarketEvent,
    NoProceeds,
    Ok,
    OperationKind,
    OperationResult,
    PriceNotMet,
)
from nftmarket.models.errors import market_error_adapter


class TestListing:
    def test_absent_is_zero_sentinel(self):
        listing = Listing.absent()
        assert listing.price == 0
        assert listing.seller == ZERO_ADDRESS
        assert listing.is_active is False

    def test_positive_price_is_active(self):
        assert Listing(price=1, seller="0xa").is_active is True

    def test_frozen(self):
        listing = Listing(price=5, seller="0xa")
        with pytest.raises(ValidationError):
            listing.price = 6

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Listing(price=-1, seller="0xa")

    def test_holds_256_bit_prices(self):
        price = 2**256 - 1
        assert Listing(price=price, seller="0xa").price == price

    def test_key_str_and_ordering(self):
        a = ListingKey("0xA", 2)
        b = ListingKey("0xA", 10)
        assert str(a) == "0xA#2"
        assert sorted([b, a]) == [a, b]


class TestEvents:
    def test_kinds_are_fixed(self):
        event = ItemListed(seller="0xs", collection="0xc", token_id=0, price=10)
        assert event.event_kind == EventKind.ITEM_LISTED
        assert event.event_id

    def test_discriminated_union_round_trip(self):
        bought = ItemBought(buyer="0xb", collection="0xc", token_id=3, price=7)
        adapter = TypeAdapter(MarketEvent)
        parsed = adapter.validate_json(bought.model_dump_json())
        assert isinstance(parsed, ItemBought)
        assert parsed.buyer == "0xb"


class TestErrors:
    def test_carries_identifying_fields(self):
        error = PriceNotMet(collection="0xc", token_id=0, price=100, payment=50)
        assert error.kind == "PriceNotMet"
        assert "50" in error.message and "100" in error.message

    def test_union_dispatches_on_kind(self):
        parsed = market_error_adapter.validate_python(
            {"kind": "AlreadyListed", "collection": "0xc", "token_id": 1}
        )
        assert isinstance(parsed, AlreadyListed)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            market_error_adapter.validate_python({"kind": "Nope"})


class TestResults:
    def test_ok(self):
        result = Ok(value=3)
        assert result.is_ok
        assert result.status == "ok"

    def test_err_kind_shortcut(self):
        result = Err(error=NoProceeds(account="0xa"))
        assert not result.is_ok
        assert result.kind == "NoProceeds"

    def test_union_parses_err(self):
        adapter = TypeAdapter(OperationResult)
        parsed = adapter.validate_python(
            {"status": "err", "error": {"kind": "NoProceeds", "account": "0xa"}}
        )
        assert isinstance(parsed, Err)
        assert isinstance(parsed.error, NoProceeds)


class TestJournalEntry:
    def test_defaults(self):
        entry = JournalEntry(operation=OperationKind.WITHDRAW_PROCEEDS, actor="0xa")
        assert entry.token_id is None
        assert entry.entry_hash == ""
        assert entry.previous_entry_hash == ""
