"""Currency transfer collaborator — "pay identity X amount Y".

``PaymentRail`` is the Protocol the ledger pays withdrawals through.  A rail
reports failure either by returning ``False`` or by raising; the ledger treats
both as ``TransferFailed`` and restores the payee's balance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

PaymentHook = Callable[[int], None]


@runtime_checkable
class PaymentRail(Protocol):
    """Outbound currency transfer primitive."""

    def pay(self, recipient: str, amount: int) -> bool:
        """Send *amount* to *recipient*.  Return ``True`` on success."""
        ...


class InMemoryPaymentRail:
    """Payment rail that credits in-memory wallet balances.

    Identities can be marked as rejecting payments, and a payee hook can be
    registered to run on receipt (the re-entry surface for withdrawals).
    """

    def __init__(self) -> None:
        self.balances: dict[str, int] = {}
        self._rejecting: set[str] = set()
        self._hooks: dict[str, PaymentHook] = {}

    def reject(self, identity: str) -> None:
        """Make every payment to *identity* fail."""
        self._rejecting.add(identity)

    def accept(self, identity: str) -> None:
        self._rejecting.discard(identity)

    def on_payment(self, identity: str, hook: PaymentHook | None) -> None:
        """Register (or clear) a hook called with the amount on receipt.

        If the hook raises, the credit is undone and the exception propagates.
        """
        if hook is None:
            self._hooks.pop(identity, None)
        else:
            self._hooks[identity] = hook

    def balance_of(self, identity: str) -> int:
        return self.balances.get(identity, 0)

    @property
    def total_paid(self) -> int:
        return sum(self.balances.values())

    def pay(self, recipient: str, amount: int) -> bool:
        if recipient in self._rejecting:
            logger.warning("Payment of %d to %s rejected by payee.", amount, recipient)
            return False

        self.balances[recipient] = self.balances.get(recipient, 0) + amount
        hook = self._hooks.get(recipient)
        if hook is not None:
            try:
                hook(amount)
            except BaseException:
                self.balances[recipient] -= amount
                raise
        return True
