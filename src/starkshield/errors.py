"""Error taxonomy for shielded account operations"""

from typing import Optional


class ShieldError(Exception):
    """
    Base class for every error raised by the client

    The operation name is attached at the public operation boundary, so
    ``str(error)`` reads ``"fund: <cause>"``.
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class InvalidKey(ShieldError, ValueError):
    """Private scalar or public key is malformed or out of range"""

    def __init__(
        self,
        message: str,
        reason: Optional[str] = None,
        operation: Optional[str] = None,
    ):
        super().__init__(message, operation)
        self.reason = reason


class InvalidAddress(ShieldError, ValueError):
    """Address is empty or not a hex felt"""


class AmountInvalid(ShieldError, ValueError):
    """Amount is zero or negative"""


class AmountOverflow(ShieldError, ValueError):
    """Shielded amount does not fit the proof system's integer domain"""


class IdentityMismatch(ShieldError):
    """Executor address differs from the owner address"""


class InsufficientBalance(ShieldError):
    """Requested amount exceeds the known balance"""


class SpenderMismatch(ShieldError):
    """Approval call spender could not be repaired"""


class ProofConstructionFailed(ShieldError):
    """Proof builder (or the rate query feeding it) failed"""


class SubmissionFailed(ShieldError):
    """Execution backend rejected or lost the transaction"""


class StateRefreshFailed(ShieldError):
    """Ledger state query failed; the cached state was kept"""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        transaction_id: Optional[str] = None,
    ):
        super().__init__(message, operation)
        # Set when the refresh followed a transaction that did go through
        self.transaction_id = transaction_id


# Known rejection texts from the chain and what they usually mean
_HINTS = {
    "NotOwner": "the signing account is not the account the proof was bound to, "
    "or the approval authorized the wrong spender",
    "EcPoint": "the public key is not a point on the curve",
}


def with_hint(cause: str) -> str:
    """Append a diagnostic hint to a known chain rejection message"""
    for marker, hint in _HINTS.items():
        if marker in cause:
            return f"{cause} ({hint})"
    return cause
