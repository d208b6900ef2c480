"""Serialization lock and re-entry guard for ledger operations.

One ``OperationGuard`` protects one ledger:

- ``guard.lock`` is a re-entrant lock held by every read and every
  operation, so the ledger is linearizable across threads.
- ``guard.enter(name)`` additionally marks a mutating operation as active.
  While it is active, any other ``enter`` fails with ``ReentrantCall``.
  Because the lock is held for the whole operation, a second ``enter`` can
  only come from the same thread, i.e. from a hook fired by an external
  transfer.  Other threads simply wait on the lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from nftmarket.core.errors import MarketplaceRevert
from nftmarket.models.errors import ReentrantCall

logger = logging.getLogger(__name__)


class OperationGuard:
    """Global lock plus an explicit non-reentrancy flag."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._active: str | None = None

    @property
    def active_operation(self) -> str | None:
        """Name of the mutating operation in progress, if any."""
        return self._active

    @contextmanager
    def enter(self, operation: str) -> Iterator[None]:
        """Run *operation* exclusively; reject nested mutating calls."""
        with self.lock:
            if self._active is not None:
                logger.warning(
                    "Rejected re-entrant %s during %s.", operation, self._active
                )
                raise MarketplaceRevert(
                    ReentrantCall(operation=operation, active_operation=self._active)
                )
            self._active = operation
            try:
                yield
            finally:
                self._active = None
