"""Typed marketplace error kinds.

Each failure the ledger can report is a frozen model with a ``kind`` literal
and the identifying parameters of the rejected operation.  Together they form
the ``MarketError`` discriminated union, which is what ``Err`` results carry
at the API surface and what ``MarketplaceRevert`` wraps inside the library.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class MarketErrorBase(BaseModel):
    """Common behavior for all error kinds."""

    model_config = ConfigDict(frozen=True)

    kind: str

    @property
    def message(self) -> str:
        return self.kind


class PriceMustBeAboveZero(MarketErrorBase):
    """Listing price was zero, or a price update did not raise the price."""

    kind: Literal["PriceMustBeAboveZero"] = "PriceMustBeAboveZero"
    collection: str
    token_id: int
    price: int

    @property
    def message(self) -> str:
        return f"price {self.price} rejected for {self.collection}#{self.token_id}"


class NotApprovedForMarketplace(MarketErrorBase):
    kind: Literal["NotApprovedForMarketplace"] = "NotApprovedForMarketplace"
    collection: str
    token_id: int

    @property
    def message(self) -> str:
        return f"marketplace is not approved for {self.collection}#{self.token_id}"


class AlreadyListed(MarketErrorBase):
    kind: Literal["AlreadyListed"] = "AlreadyListed"
    collection: str
    token_id: int

    @property
    def message(self) -> str:
        return f"{self.collection}#{self.token_id} is already listed"


class NotOwner(MarketErrorBase):
    kind: Literal["NotOwner"] = "NotOwner"
    collection: str
    token_id: int
    caller: str

    @property
    def message(self) -> str:
        return f"{self.caller} does not own {self.collection}#{self.token_id}"


class NftNotListed(MarketErrorBase):
    kind: Literal["NftNotListed"] = "NftNotListed"
    collection: str
    token_id: int

    @property
    def message(self) -> str:
        return f"{self.collection}#{self.token_id} is not listed"


class PriceNotMet(MarketErrorBase):
    """Payment below the listed price.  Carries both amounts."""

    kind: Literal["PriceNotMet"] = "PriceNotMet"
    collection: str
    token_id: int
    price: int
    payment: int

    @property
    def message(self) -> str:
        return (
            f"payment {self.payment} below listed price {self.price} "
            f"for {self.collection}#{self.token_id}"
        )


class NoProceeds(MarketErrorBase):
    kind: Literal["NoProceeds"] = "NoProceeds"
    account: str

    @property
    def message(self) -> str:
        return f"{self.account} has no proceeds to withdraw"


class TransferFailed(MarketErrorBase):
    """Currency payout failed; the proceeds balance was left untouched."""

    kind: Literal["TransferFailed"] = "TransferFailed"
    account: str
    amount: int

    @property
    def message(self) -> str:
        return f"payout of {self.amount} to {self.account} failed"


class ReentrantCall(MarketErrorBase):
    """A mutating operation was attempted while another was in progress."""

    kind: Literal["ReentrantCall"] = "ReentrantCall"
    operation: str
    active_operation: str

    @property
    def message(self) -> str:
        return f"{self.operation} re-entered during {self.active_operation}"


class TokenTransferFailed(MarketErrorBase):
    """The token registry refused to move a sold token to its buyer."""

    kind: Literal["TokenTransferFailed"] = "TokenTransferFailed"
    collection: str
    token_id: int
    seller: str
    buyer: str
    reason: str = ""

    @property
    def message(self) -> str:
        return (
            f"transfer of {self.collection}#{self.token_id} from {self.seller} "
            f"to {self.buyer} failed: {self.reason}"
        )


class UnknownCollection(MarketErrorBase):
    kind: Literal["UnknownCollection"] = "UnknownCollection"
    collection: str

    @property
    def message(self) -> str:
        return f"no token registry known for collection {self.collection}"


MarketError = Annotated[
    Union[
        PriceMustBeAboveZero,
        NotApprovedForMarketplace,
        AlreadyListed,
        NotOwner,
        NftNotListed,
        PriceNotMet,
        NoProceeds,
        TransferFailed,
        ReentrantCall,
        TokenTransferFailed,
        UnknownCollection,
    ],
    Field(discriminator="kind"),
]

market_error_adapter: TypeAdapter[MarketError] = TypeAdapter(MarketError)
