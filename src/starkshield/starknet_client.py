"""
Starknet interaction for starkshield

Execution backend and contract reader built on starknet-py:
- Converting calls to starknet-py calls
- Submitting multi-call transactions and waiting for acceptance
- Read-only contract calls

Requires the ``starknet`` extra.
"""

import logging
from typing import Sequence

from starknet_py.hash.selector import get_selector_from_name
from starknet_py.net.account.account import Account
from starknet_py.net.client import Client
from starknet_py.net.client_models import Call as StarknetCall
from starknet_py.net.full_node_client import FullNodeClient

from .address import normalize
from .types import Call
from .utils import Felt, to_int

logger = logging.getLogger(__name__)


def to_starknet_call(call: Call) -> StarknetCall:
    """Convert a call to the starknet-py representation"""
    return StarknetCall(
        to_addr=normalize(call.contract_address).to_int(),
        selector=get_selector_from_name(call.entrypoint),
        calldata=call.felts(),
    )


class StarknetBackend:
    """
    Execution backend for a starknet-py account

    ``address`` is reported exactly as ``hex(account.address)`` renders it,
    without zero padding, since that is the string the transaction is
    signed under.
    """

    def __init__(self, account: Account, auto_estimate: bool = True):
        """
        Args:
            account: Deployed account that signs the transactions
            auto_estimate: Let starknet-py estimate resource bounds
        """
        self.account = account
        self.auto_estimate = auto_estimate

    @property
    def address(self) -> str:
        return hex(self.account.address)

    async def execute(self, calls: Sequence[Call]) -> str:
        """
        Submit calls as one transaction

        Returns:
            Transaction hash as hex
        """
        response = await self.account.execute_v3(
            calls=[to_starknet_call(call) for call in calls],
            auto_estimate=self.auto_estimate,
        )
        transaction_hash = hex(response.transaction_hash)
        logger.debug("Executed %d call(s): %s", len(calls), transaction_hash)
        return transaction_hash

    async def wait_for_transaction(self, transaction_id: str) -> None:
        await self.account.client.wait_for_tx(int(transaction_id, 16))


class StarknetChainReader:
    """Read-only contract calls through a starknet-py client"""

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_url(cls, node_url: str) -> "StarknetChainReader":
        """
        Create a reader for an RPC endpoint

        Args:
            node_url: Starknet JSON-RPC endpoint
        """
        return cls(FullNodeClient(node_url=node_url))

    async def call_contract(
        self, address: str, entrypoint: str, args: Sequence[Felt]
    ) -> Sequence[Felt]:
        call = StarknetCall(
            to_addr=normalize(address).to_int(),
            selector=get_selector_from_name(entrypoint),
            calldata=[to_int(arg) for arg in args],
        )
        return await self.client.call_contract(call, block_number="latest")