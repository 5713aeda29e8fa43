"""
starkshield - Shielded account client for Starknet

Move value between a public token balance and an amount-hidden balance,
and between shielded accounts, with zero-knowledge proofs bound to the
signing account.
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Export main API
from .address import CanonicalAddress, normalize, same_address
from .calldata import CalldataIntegrityGuard
from .client import MAX_SHIELDED_AMOUNT, ShieldedAccountClient
from .collaborators import (
    BuiltOperation,
    ChainReader,
    ExecutionBackend,
    IdentityDecoder,
    LedgerQuery,
    ProofBuilder,
)
from .errors import (
    AmountInvalid,
    AmountOverflow,
    IdentityMismatch,
    InsufficientBalance,
    InvalidAddress,
    InvalidKey,
    ProofConstructionFailed,
    ShieldError,
    SpenderMismatch,
    StateRefreshFailed,
    SubmissionFailed,
)
from .identity import AccountIdentity, PublicKey, parse_recipient_key
from .networks import MAINNET, SEPOLIA, NetworkConfig, get_network_config
from .state import ShieldedAccountState, StateReconciler
from .types import (
    Call,
    CallBundle,
    Fund,
    Operation,
    OperationKind,
    OperationStage,
    OperationTrace,
    Rollover,
    Transfer,
    Withdraw,
)

__all__ = [
    # Main client
    "ShieldedAccountClient",
    "MAX_SHIELDED_AMOUNT",
    # Components
    "AccountIdentity",
    "PublicKey",
    "CanonicalAddress",
    "CalldataIntegrityGuard",
    "StateReconciler",
    "ShieldedAccountState",
    # Types
    "Call",
    "CallBundle",
    "Operation",
    "Fund",
    "Transfer",
    "Rollover",
    "Withdraw",
    "OperationKind",
    "OperationStage",
    "OperationTrace",
    "BuiltOperation",
    # Collaborators
    "ProofBuilder",
    "ExecutionBackend",
    "LedgerQuery",
    "ChainReader",
    "IdentityDecoder",
    # Networks
    "NetworkConfig",
    "SEPOLIA",
    "MAINNET",
    "get_network_config",
    # Errors
    "ShieldError",
    "InvalidKey",
    "InvalidAddress",
    "AmountInvalid",
    "AmountOverflow",
    "IdentityMismatch",
    "InsufficientBalance",
    "SpenderMismatch",
    "ProofConstructionFailed",
    "SubmissionFailed",
    "StateRefreshFailed",
    # Utilities
    "normalize",
    "same_address",
    "parse_recipient_key",
    # Module info
    "__version__",
]
