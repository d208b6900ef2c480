"""Operation journal entry model (append-only, hash-chained).

The journal is the durable record of every committed ledger operation.  The
in-memory listing and proceeds maps are a projection of it: replaying the
journal in order rebuilds them exactly.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OperationKind(str, Enum):
    """Committed, state-changing ledger operations."""

    LIST_ITEM = "list_item"
    CANCEL_LISTING = "cancel_listing"
    UPDATE_LISTING_PRICE = "update_listing_price"
    BUY_ITEM = "buy_item"
    WITHDRAW_PROCEEDS = "withdraw_proceeds"


class JournalEntry(BaseModel):
    """A single committed operation.

    Field use per operation:

    - ``list_item`` / ``update_listing_price``: ``actor`` is the seller,
      ``price`` the (new) listed price.
    - ``cancel_listing``: ``actor`` is the owner who canceled.
    - ``buy_item``: ``actor`` is the buyer, ``counterparty`` the seller,
      ``price`` the listed price and ``amount`` the full payment credited.
    - ``withdraw_proceeds``: ``actor`` is the payee, ``amount`` the payout.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    operation: OperationKind
    collection: str = ""
    token_id: int | None = None
    actor: str
    counterparty: str = ""
    price: int = 0
    amount: int = 0
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    previous_entry_hash: str = ""  # SHA-256 of the previous entry
    entry_hash: str = ""  # computed on append, seals this entry
