"""Tests for OperationGuard — the re-entry flag around mutating operations."""

from __future__ import annotations

import pytest

from nftmarket.core import MarketplaceRevert, OperationGuard
from nftmarket.models import ReentrantCall


class TestOperationGuard:
    def test_marks_active_operation(self):
        guard = OperationGuard()
        assert guard.active_operation is None
        with guard.enter("buy_item"):
            assert guard.active_operation == "buy_item"
        assert guard.active_operation is None

    def test_nested_enter_rejected(self):
        guard = OperationGuard()
        with guard.enter("buy_item"):
            with pytest.raises(MarketplaceRevert) as exc_info:
                with guard.enter("withdraw_proceeds"):
                    pass
            assert guard.active_operation == "buy_item"
        error = exc_info.value.error
        assert isinstance(error, ReentrantCall)
        assert (error.operation, error.active_operation) == (
            "withdraw_proceeds",
            "buy_item",
        )

    def test_flag_cleared_after_exception(self):
        guard = OperationGuard()
        with pytest.raises(ValueError):
            with guard.enter("list_item"):
                raise ValueError("boom")
        assert guard.active_operation is None
        with guard.enter("list_item"):
            pass

    def test_lock_is_reentrant(self):
        guard = OperationGuard()
        with guard.lock:
            with guard.enter("cancel_listing"):
                with guard.lock:
                    assert guard.active_operation == "cancel_listing"
