"""Cached shielded account state and its refresh from the ledger"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping

from .collaborators import LedgerQuery
from .errors import StateRefreshFailed
from .identity import PublicKey
from .utils import to_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShieldedAccountState:
    """
    Last confirmed ledger snapshot, in display units

    Balances are ledger units scaled by ``10**decimals`` of the token.
    """

    current_balance: int = 0
    pending_balance: int = 0
    nonce: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary"""
        return {
            "current_balance": self.current_balance,
            "pending_balance": self.pending_balance,
            "nonce": self.nonce,
        }


def _read(source: Any, name: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def _non_negative(source: Any, name: str) -> int:
    raw = _read(source, name)
    if raw is None:
        return 0
    value = to_int(raw)
    if value < 0:
        raise ValueError(f"Ledger reported negative {name}: {value}")
    return value


class StateReconciler:
    """
    Pulls the owner's account projection from the ledger

    The only writer of the cached state. A failed refresh leaves the
    previous snapshot in place.
    """

    def __init__(self, ledger: LedgerQuery, public_key: PublicKey, decimals: int):
        """
        Args:
            ledger: Ledger query collaborator
            public_key: Owner's public key
            decimals: Token decimals used to scale ledger units
        """
        if decimals < 0:
            raise ValueError("Token decimals must be non-negative")
        self.ledger = ledger
        self.public_key = public_key
        self.scale = 10**decimals
        self._state = ShieldedAccountState()

    @property
    def state(self) -> ShieldedAccountState:
        return replace(self._state)

    async def refresh(self) -> ShieldedAccountState:
        """
        Query the ledger and replace the cached state

        Returns:
            The new snapshot

        Raises:
            StateRefreshFailed: If the query fails or returns unusable fields
        """
        try:
            projection = await self.ledger.get_account_state(self.public_key)
            snapshot = ShieldedAccountState(
                current_balance=_non_negative(projection, "balance") * self.scale,
                pending_balance=_non_negative(projection, "pending") * self.scale,
                nonce=_non_negative(projection, "nonce"),
            )
        except Exception as exc:
            logger.error("Failed to refresh account state: %s", exc)
            raise StateRefreshFailed(
                f"Failed to refresh account state: {exc}"
            ) from exc

        self._state = snapshot
        logger.debug(
            "Account state refreshed: current=%d pending=%d nonce=%d",
            snapshot.current_balance,
            snapshot.pending_balance,
            snapshot.nonce,
        )
        return replace(snapshot)
