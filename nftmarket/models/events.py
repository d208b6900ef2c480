"""Marketplace events published to off-chain observers.

Every committed listing, cancellation, price update and sale produces exactly
one frozen event.  A price update is published as ``ItemListed`` carrying the
new price; observers see it as a relist, not a distinct event kind.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """The three observable marketplace events."""

    ITEM_LISTED = "ItemListed"
    ITEM_CANCELED = "ItemCanceled"
    ITEM_BOUGHT = "ItemBought"


class MarketEventBase(BaseModel):
    """Fields shared by every marketplace event."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_kind: EventKind
    collection: str
    token_id: int
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class ItemListed(MarketEventBase):
    """A token was listed, or its listing price was raised."""

    event_kind: Literal[EventKind.ITEM_LISTED] = EventKind.ITEM_LISTED
    seller: str
    price: int


class ItemCanceled(MarketEventBase):
    """A listing was withdrawn by the token owner."""

    event_kind: Literal[EventKind.ITEM_CANCELED] = EventKind.ITEM_CANCELED
    seller: str


class ItemBought(MarketEventBase):
    """A listing was settled.  ``price`` is the listed price, not the payment."""

    event_kind: Literal[EventKind.ITEM_BOUGHT] = EventKind.ITEM_BOUGHT
    buyer: str
    price: int


MarketEvent = Annotated[
    Union[ItemListed, ItemCanceled, ItemBought],
    Field(discriminator="event_kind"),
]
