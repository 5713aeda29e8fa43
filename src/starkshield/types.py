"""Type definitions for starkshield"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterator, Optional, Union

from .errors import AmountInvalid
from .utils import Felt, to_int

logger = logging.getLogger(__name__)


def require_positive(amount: int) -> None:
    """
    Raises:
        AmountInvalid: If amount is not a positive integer
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise AmountInvalid(f"Amount must be an integer, got {type(amount).__name__}")
    if amount <= 0:
        raise AmountInvalid("Amount must be positive")


class OperationKind(Enum):
    """Shielded account operation"""

    FUND = "fund"
    TRANSFER = "transfer"
    ROLLOVER = "rollover"
    WITHDRAW = "withdraw"


class OperationStage(Enum):
    """Progress of a single operation"""

    REQUESTED = "requested"
    VALIDATED = "validated"
    PROOF_BUILT = "proof_built"
    CALLDATA_VERIFIED = "calldata_verified"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    ERROR = "error"


@dataclass(frozen=True)
class Call:
    """A single contract call"""

    contract_address: str
    entrypoint: str
    calldata: tuple[Felt, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but store a tuple so calls stay hashable
        object.__setattr__(self, "calldata", tuple(self.calldata))

    def felts(self) -> list[int]:
        """Calldata with every element parsed to an int"""
        return [to_int(value) for value in self.calldata]

    def with_slot(self, index: int, value: Felt) -> "Call":
        """Copy of this call with one calldata slot replaced"""
        calldata = list(self.calldata)
        calldata[index] = value
        return replace(self, calldata=tuple(calldata))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape wallets and RPC nodes expect"""
        return {
            "contractAddress": self.contract_address,
            "entrypoint": self.entrypoint,
            "calldata": [str(value) for value in self.calldata],
        }


@dataclass(frozen=True)
class CallBundle:
    """Ordered calls submitted together, all-or-nothing"""

    calls: tuple[Call, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "calls", tuple(self.calls))
        if not self.calls:
            raise ValueError("A call bundle needs at least one call")

    def __iter__(self) -> Iterator[Call]:
        return iter(self.calls)

    def __len__(self) -> int:
        return len(self.calls)

    @classmethod
    def of(cls, *calls: Optional[Call]) -> "CallBundle":
        """Bundle the given calls in order, skipping None"""
        return cls(tuple(call for call in calls if call is not None))


@dataclass
class OperationTrace:
    """Stage history of the most recent operation"""

    kind: OperationKind
    stage: OperationStage = OperationStage.REQUESTED
    transaction_id: Optional[str] = None
    error: Optional[str] = None
    history: list[OperationStage] = field(
        default_factory=lambda: [OperationStage.REQUESTED]
    )

    def advance(self, stage: OperationStage) -> None:
        self.stage = stage
        self.history.append(stage)
        logger.debug("%s: %s", self.kind.value, stage.value)

    def fail(self, error: BaseException) -> None:
        self.error = str(error)
        self.advance(OperationStage.ERROR)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary"""
        return {
            "kind": self.kind.value,
            "stage": self.stage.value,
            "transaction_id": self.transaction_id,
            "error": self.error,
            "history": [stage.value for stage in self.history],
        }


@dataclass(frozen=True)
class Fund:
    """Move public tokens into the shielded balance"""

    amount: int

    def validate(self) -> None:
        require_positive(self.amount)


@dataclass(frozen=True)
class Transfer:
    """Send shielded value to another public key"""

    recipient: str
    amount: int

    def validate(self) -> None:
        require_positive(self.amount)


@dataclass(frozen=True)
class Rollover:
    """Move the pending balance into the current balance"""

    def validate(self) -> None:
        pass


@dataclass(frozen=True)
class Withdraw:
    """Move shielded value back to a public address"""

    amount: int
    destination: Optional[str] = None

    def validate(self) -> None:
        require_positive(self.amount)


Operation = Union[Fund, Transfer, Rollover, Withdraw]
