"""Shared fixtures: collaborators faked with AsyncMock"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from starkshield import SEPOLIA, Call, OperationKind, ShieldedAccountClient
from starkshield.curve import GENERATOR

# Executor address exactly as the wallet reports it: no zero padding
EXECUTOR_RAW = "0x0123abc"
# Same account, padded and upper-cased
OWNER_PADDED = "0x" + "0123ABC".rjust(64, "0")

OWNER_SECRET = 0x1234
TRANSACTION_ID = "0xfeed"

GENERATOR_HEX = f"0x{GENERATOR[0]:064x}{GENERATOR[1]:064x}"

CONTRACT_FELT = str(int(SEPOLIA.shielded_contract, 16))


def fund_descriptor(amount, spender=CONTRACT_FELT):
    """Descriptor shaped like the proof SDK's fund operation"""
    primary = Call(SEPOLIA.shielded_contract, "fund", [1, 2, amount])
    return SimpleNamespace(
        approve={
            "contractAddress": SEPOLIA.token_address,
            "entrypoint": "approve",
            "calldata": [spender, str(amount), "0"],
        },
        to_calldata=lambda: primary,
    )


@pytest.fixture
def proof_builder():
    async def build(kind, *, sender, amount=None, counterparty=None, destination=None):
        if kind is OperationKind.FUND:
            return fund_descriptor(amount)
        # Other operations hand back a bare calldata list
        return [1, 2, amount or 0]

    builder = MagicMock()
    builder.build = AsyncMock(side_effect=build)
    return builder


@pytest.fixture
def backend():
    backend = MagicMock()
    backend.address = EXECUTOR_RAW
    backend.execute = AsyncMock(return_value=TRANSACTION_ID)
    backend.wait_for_transaction = AsyncMock(return_value=None)
    return backend


@pytest.fixture
def ledger():
    ledger = MagicMock()
    # 0.01 token per shielded unit
    ledger.get_exchange_rate = AsyncMock(side_effect=lambda amount: amount // 10**16)
    ledger.get_account_state = AsyncMock(
        return_value={"balance": 100, "pending": 5, "nonce": 3}
    )
    return ledger


@pytest.fixture
def client(proof_builder, backend, ledger):
    return ShieldedAccountClient(
        owner_address=OWNER_PADDED,
        private_key=OWNER_SECRET,
        network=SEPOLIA,
        proof_builder=proof_builder,
        backend=backend,
        ledger=ledger,
    )
