"""Token registry collaborator — who owns a token, who may move it.

The ledger never holds tokens.  It asks the registry of a collection who owns
a token and whether the marketplace is approved to move it, and on sale asks
the registry to move it from seller to buyer.

``TokenRegistry`` is the Protocol the ledger depends on.
``InMemoryTokenRegistry`` is an ERC-721 style reference implementation used by
the demo, the tests and local setups.  Its receiver hooks fire during a
transfer, which is exactly the re-entry surface the ledger guards against.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from nftmarket.models.listing import ZERO_ADDRESS

logger = logging.getLogger(__name__)

ReceiverHook = Callable[[str, str, int], None]


class TokenNotFoundError(LookupError):
    """Raised when a token id has never been minted."""


class TokenTransferError(RuntimeError):
    """Raised when a registry refuses a transfer or approval."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class TokenRegistry(Protocol):
    """Ownership registry for one collection."""

    def owner_of(self, token_id: int) -> str:
        """Return the current owner; raise ``TokenNotFoundError`` if unminted."""
        ...

    def get_approved(self, token_id: int) -> str | None:
        """Return the identity approved to move *token_id*, if any."""
        ...

    def safe_transfer_from(
        self, sender: str, recipient: str, token_id: int, *, operator: str
    ) -> None:
        """Move *token_id* from *sender* to *recipient* on behalf of *operator*.

        May invoke a receiver hook registered for *recipient*.  Raises on
        failure, leaving ownership unchanged.
        """
        ...


# ---------------------------------------------------------------------------
# In-memory implementation
# ---------------------------------------------------------------------------


class InMemoryTokenRegistry:
    """Minimal ERC-721 style registry.

    Parameters
    ----------
    collection:
        Identifier of the collection this registry serves.

    Examples
    --------
    >>> nft = InMemoryTokenRegistry("0xDogie")
    >>> nft.mint("0xalice")
    0
    >>> nft.owner_of(0)
    '0xalice'
    """

    def __init__(self, collection: str) -> None:
        self.collection = collection
        self._owners: dict[int, str] = {}
        self._approvals: dict[int, str] = {}
        self._hooks: dict[str, ReceiverHook] = {}
        self._next_token_id = 0

    @property
    def token_counter(self) -> int:
        return self._next_token_id

    def mint(self, owner: str) -> int:
        """Mint the next sequential token id to *owner*."""
        token_id = self._next_token_id
        self._owners[token_id] = owner
        self._next_token_id += 1
        logger.debug("Minted %s#%d to %s.", self.collection, token_id, owner)
        return token_id

    def owner_of(self, token_id: int) -> str:
        try:
            return self._owners[token_id]
        except KeyError:
            raise TokenNotFoundError(
                f"{self.collection}#{token_id} does not exist"
            ) from None

    def get_approved(self, token_id: int) -> str | None:
        self.owner_of(token_id)
        return self._approvals.get(token_id)

    def approve(self, caller: str, approved: str | None, token_id: int) -> None:
        """Approve *approved* to move *token_id*; ``None`` clears the approval."""
        if self.owner_of(token_id) != caller:
            raise TokenTransferError(
                f"{caller} cannot approve {self.collection}#{token_id}: not owner"
            )
        if approved is None:
            self._approvals.pop(token_id, None)
        else:
            self._approvals[token_id] = approved

    def on_received(self, identity: str, hook: ReceiverHook | None) -> None:
        """Register (or clear) a hook fired when *identity* receives a token.

        The hook is called as ``hook(operator, sender, token_id)`` after the
        ownership move.  If it raises, the move is undone and the exception
        propagates to the transfer's caller.
        """
        if hook is None:
            self._hooks.pop(identity, None)
        else:
            self._hooks[identity] = hook

    def safe_transfer_from(
        self, sender: str, recipient: str, token_id: int, *, operator: str
    ) -> None:
        owner = self.owner_of(token_id)
        if owner != sender:
            raise TokenTransferError(
                f"{self.collection}#{token_id} is owned by {owner}, not {sender}"
            )
        if operator != owner and self._approvals.get(token_id) != operator:
            raise TokenTransferError(
                f"{operator} is not approved for {self.collection}#{token_id}"
            )
        if recipient == ZERO_ADDRESS:
            raise TokenTransferError("cannot transfer to the zero address")

        previous_approval = self._approvals.pop(token_id, None)
        self._owners[token_id] = recipient

        hook = self._hooks.get(recipient)
        if hook is not None:
            try:
                hook(operator, sender, token_id)
            except BaseException:
                self._owners[token_id] = owner
                if previous_approval is not None:
                    self._approvals[token_id] = previous_approval
                raise

        logger.debug(
            "Transferred %s#%d from %s to %s.",
            self.collection,
            token_id,
            sender,
            recipient,
        )
