"""Test the starknet-py adapters (skipped without the starknet extra)"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

pytest.importorskip("starknet_py")

from starknet_py.hash.selector import get_selector_from_name

from starkshield import SEPOLIA, Call
from starkshield.starknet_client import (
    StarknetBackend,
    StarknetChainReader,
    to_starknet_call,
)


def test_to_starknet_call():
    call = Call(SEPOLIA.shielded_contract, "fund", [1, "2", "0x3"])
    converted = to_starknet_call(call)

    assert converted.to_addr == int(SEPOLIA.shielded_contract, 16)
    assert converted.selector == get_selector_from_name("fund")
    assert converted.calldata == [1, 2, 3]


class TestStarknetBackend:
    """Test StarknetBackend"""

    @pytest.fixture
    def account(self):
        account = MagicMock()
        account.address = 0x0123ABC
        account.execute_v3 = AsyncMock(
            return_value=SimpleNamespace(transaction_hash=0xFEED)
        )
        account.client.wait_for_tx = AsyncMock()
        return account

    def test_address_is_unpadded(self, account):
        assert StarknetBackend(account).address == "0x123abc"

    @pytest.mark.asyncio
    async def test_execute(self, account):
        backend = StarknetBackend(account)
        calls = [
            Call(SEPOLIA.token_address, "approve", ["1", "2", "0"]),
            Call(SEPOLIA.shielded_contract, "fund", [5]),
        ]

        tx = await backend.execute(calls)

        assert tx == "0xfeed"
        kwargs = account.execute_v3.await_args.kwargs
        assert kwargs["auto_estimate"] is True
        selectors = [call.selector for call in kwargs["calls"]]
        assert selectors == [
            get_selector_from_name("approve"),
            get_selector_from_name("fund"),
        ]

    @pytest.mark.asyncio
    async def test_wait(self, account):
        await StarknetBackend(account).wait_for_transaction("0xfeed")
        account.client.wait_for_tx.assert_awaited_once_with(0xFEED)


class TestStarknetChainReader:
    """Test StarknetChainReader"""

    @pytest.mark.asyncio
    async def test_call_contract(self):
        client = MagicMock()
        client.call_contract = AsyncMock(return_value=[5, 0])
        reader = StarknetChainReader(client)

        result = await reader.call_contract(
            SEPOLIA.token_address, "balanceOf", ["0x123abc"]
        )

        assert result == [5, 0]
        call = client.call_contract.await_args.args[0]
        assert call.to_addr == int(SEPOLIA.token_address, 16)
        assert call.selector == get_selector_from_name("balanceOf")
        assert call.calldata == [0x123ABC]
        assert client.call_contract.await_args.kwargs["block_number"] == "latest"
