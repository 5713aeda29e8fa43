"""Test state reconciliation"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from starkshield import (
    AccountIdentity,
    ShieldedAccountState,
    StateReconciler,
    StateRefreshFailed,
)


@pytest.fixture
def public_key():
    return AccountIdentity(3).public_key


def make_ledger(projection):
    ledger = MagicMock()
    ledger.get_account_state = AsyncMock(return_value=projection)
    return ledger


class TestStateReconciler:
    """Test StateReconciler.refresh"""

    def test_initial_state_is_zero(self, public_key):
        reconciler = StateReconciler(make_ledger({}), public_key, 18)
        assert reconciler.state == ShieldedAccountState(0, 0, 0)

    @pytest.mark.asyncio
    async def test_scales_by_token_decimals(self, public_key):
        ledger = make_ledger({"balance": 7, "pending": 2, "nonce": 4})
        reconciler = StateReconciler(ledger, public_key, 18)

        state = await reconciler.refresh()

        assert state.current_balance == 7 * 10**18
        assert state.pending_balance == 2 * 10**18
        assert state.nonce == 4
        ledger.get_account_state.assert_awaited_once_with(public_key)

    @pytest.mark.asyncio
    async def test_six_decimals(self, public_key):
        reconciler = StateReconciler(make_ledger({"balance": 3}), public_key, 6)
        state = await reconciler.refresh()
        assert state.current_balance == 3_000_000

    @pytest.mark.asyncio
    async def test_null_fields_are_zero(self, public_key):
        ledger = make_ledger({"balance": None, "pending": None, "nonce": None})
        reconciler = StateReconciler(ledger, public_key, 18)
        state = await reconciler.refresh()
        assert state == ShieldedAccountState(0, 0, 0)

    @pytest.mark.asyncio
    async def test_attribute_projection_and_missing_fields(self, public_key):
        ledger = make_ledger(SimpleNamespace(balance="0x10"))
        reconciler = StateReconciler(ledger, public_key, 0)
        state = await reconciler.refresh()
        assert state == ShieldedAccountState(16, 0, 0)

    @pytest.mark.asyncio
    async def test_failed_query_keeps_previous_state(self, public_key):
        ledger = make_ledger({"balance": 9, "pending": 1, "nonce": 2})
        reconciler = StateReconciler(ledger, public_key, 18)
        previous = await reconciler.refresh()

        ledger.get_account_state.side_effect = ConnectionError("node unreachable")
        with pytest.raises(StateRefreshFailed, match="node unreachable") as exc_info:
            await reconciler.refresh()

        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert reconciler.state == previous

    @pytest.mark.asyncio
    async def test_negative_field_never_partially_applied(self, public_key):
        ledger = make_ledger({"balance": 9, "pending": 1, "nonce": 2})
        reconciler = StateReconciler(ledger, public_key, 18)
        previous = await reconciler.refresh()

        ledger.get_account_state.return_value = {"balance": 50, "pending": -1}
        with pytest.raises(StateRefreshFailed, match="negative pending"):
            await reconciler.refresh()

        assert reconciler.state == previous

    def test_state_is_snapshot(self, public_key):
        reconciler = StateReconciler(make_ledger({}), public_key, 18)
        first = reconciler.state
        assert first is not reconciler.state
        with pytest.raises(AttributeError):
            first.current_balance = 10

    def test_negative_decimals_rejected(self, public_key):
        with pytest.raises(ValueError):
            StateReconciler(make_ledger({}), public_key, -1)

    def test_to_dict(self):
        state = ShieldedAccountState(1, 2, 3)
        assert state.to_dict() == {
            "current_balance": 1,
            "pending_balance": 2,
            "nonce": 3,
        }
