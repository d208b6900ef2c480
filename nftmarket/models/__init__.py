"""nftmarket data models — all Pydantic v2, all frozen (immutable)."""

from nftmarket.models.errors import (
    AlreadyListed,
    MarketError,
    MarketErrorBase,
    NftNotListed,
    NoProceeds,
    NotApprovedForMarketplace,
    NotOwner,
    PriceMustBeAboveZero,
    PriceNotMet,
    ReentrantCall,
    TokenTransferFailed,
    TransferFailed,
    UnknownCollection,
)
from nftmarket.models.events import (
    EventKind,
    ItemBought,
    ItemCanceled,
    ItemListed,
    MarketEvent,
    MarketEventBase,
)
from nftmarket.models.journal import JournalEntry, OperationKind
from nftmarket.models.listing import ZERO_ADDRESS, Listing, ListingKey
from nftmarket.models.results import Err, Ok, OperationResult

__all__ = [
    # listing
    "ZERO_ADDRESS",
    "Listing",
    "ListingKey",
    # events
    "EventKind",
    "MarketEventBase",
    "MarketEvent",
    "ItemListed",
    "ItemCanceled",
    "ItemBought",
    # errors
    "MarketErrorBase",
    "MarketError",
    "PriceMustBeAboveZero",
    "NotApprovedForMarketplace",
    "AlreadyListed",
    "NotOwner",
    "NftNotListed",
    "PriceNotMet",
    "NoProceeds",
    "TransferFailed",
    "ReentrantCall",
    "TokenTransferFailed",
    "UnknownCollection",
    # results
    "Ok",
    "Err",
    "OperationResult",
    # journal
    "OperationKind",
    "JournalEntry",
]
