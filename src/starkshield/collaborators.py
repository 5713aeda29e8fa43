"""
Interfaces the client depends on, and normalization of what they return

Proof construction, transaction execution and ledger queries live outside
this package. Whatever shape a proof builder hands back is turned into a
``BuiltOperation`` here, so the client only ever sees ``Call`` objects.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Sequence, Tuple

from .types import Call, OperationKind
from .utils import Felt

if TYPE_CHECKING:
    from .identity import PublicKey


class ProofBuilder(Protocol):
    """Builds operation descriptors with embedded proofs"""

    async def build(
        self,
        kind: OperationKind,
        *,
        sender: str,
        amount: Optional[int] = None,
        counterparty: Optional["PublicKey"] = None,
        destination: Optional[str] = None,
    ) -> Any:
        """
        Must bind the proof to exactly the ``sender`` string given,
        including its padding.
        """
        ...


class ExecutionBackend(Protocol):
    """Signs and submits multi-call transactions"""

    @property
    def address(self) -> str:
        """Address the transactions are signed with, as the wallet reports it"""
        ...

    async def execute(self, calls: Sequence[Call]) -> str:
        """Submit calls atomically, returning the transaction id"""
        ...

    async def wait_for_transaction(self, transaction_id: str) -> None:
        ...


class LedgerQuery(Protocol):
    """Reads the shielded ledger"""

    async def get_account_state(self, public_key: "PublicKey") -> Any:
        """Object or mapping with ``balance``, ``pending`` and ``nonce``"""
        ...

    async def get_exchange_rate(self, token_amount: int) -> int:
        """Convert a public token amount to shielded units"""
        ...


class ChainReader(Protocol):
    """Generic read-only contract calls"""

    async def call_contract(
        self, address: str, entrypoint: str, args: Sequence[Felt]
    ) -> Sequence[Felt]:
        ...


class IdentityDecoder(Protocol):
    """Resolves compact identity strings to public key coordinates"""

    def decode(self, compact: str) -> Tuple[int, int]:
        ...


@dataclass(frozen=True)
class BuiltOperation:
    """Calls produced by the proof builder for one operation"""

    primary: Call
    approval: Optional[Call] = None


def _field(source: Any, *names: str) -> Any:
    for name in names:
        if isinstance(source, Mapping):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return None


def to_call(
    value: Any,
    default_contract: str,
    default_entrypoint: str,
) -> Call:
    """
    Normalize a call-like value to a ``Call``

    Accepts a ``Call``, a mapping or object with contract address /
    entrypoint / calldata fields (camelCase or snake_case), or a bare
    calldata sequence, which is addressed to the defaults.

    Raises:
        TypeError: If the value has none of these shapes
    """
    if isinstance(value, Call):
        return value

    if isinstance(value, (list, tuple)):
        return Call(default_contract, default_entrypoint, tuple(value))

    calldata = _field(value, "calldata")
    if calldata is None:
        raise TypeError(f"Cannot read a call from {type(value).__name__}")
    if not isinstance(calldata, (list, tuple)):
        raise TypeError("Call calldata must be a sequence")

    contract = _field(value, "contractAddress", "contract_address", "to_addr")
    entrypoint = _field(value, "entrypoint", "entry_point")
    if isinstance(contract, int):
        contract = hex(contract)
    return Call(
        contract or default_contract,
        entrypoint or default_entrypoint,
        tuple(calldata),
    )


def normalize_descriptor(
    descriptor: Any,
    contract_address: str,
    entrypoint: str,
    token_address: Optional[str] = None,
) -> BuiltOperation:
    """
    Turn a proof builder result into a ``BuiltOperation``

    The primary call comes from ``to_calldata()`` when the descriptor has
    one, otherwise from the descriptor itself. An ``approve`` field, when
    present, becomes the approval call; a bare approval calldata list is
    addressed to ``token_address``.
    """
    if isinstance(descriptor, BuiltOperation):
        return descriptor

    approval_raw = _field(descriptor, "approve", "approval")
    approval = None
    if approval_raw is not None:
        approval = to_call(approval_raw, token_address or contract_address, "approve")

    render = getattr(descriptor, "to_calldata", None)
    primary_raw = render() if callable(render) else descriptor
    primary = to_call(primary_raw, contract_address, entrypoint)
    return BuiltOperation(primary=primary, approval=approval)
