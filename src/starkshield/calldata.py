"""
Spender check for approval calls

Proof builders render the spender address into the approval calldata by
way of an integer, which loses leading zero bytes whenever the address is
handled in a non-canonical form. An approval carrying the wrong spender
makes the following shielding call fail with an ownership error, so the
first data slot is checked against the canonical contract address and
rewritten when it disagrees.
"""

import logging
from typing import Optional

from .address import CanonicalAddress, normalize
from .errors import InvalidAddress, SpenderMismatch
from .types import Call
from .utils import to_int

logger = logging.getLogger(__name__)

SPENDER_SLOT = 0


class CalldataIntegrityGuard:
    """Detects and repairs a wrong spender in an approval call"""

    def __init__(self, expected_spender: str):
        """
        Args:
            expected_spender: Contract that must be authorized to spend
        """
        self.expected_spender: CanonicalAddress = normalize(expected_spender)

    def decode_spender(self, call: Call) -> Optional[CanonicalAddress]:
        """Canonical spender from the first data slot, or None if unreadable"""
        if len(call.calldata) <= SPENDER_SLOT:
            return None
        try:
            return normalize(to_int(call.calldata[SPENDER_SLOT]))
        except (ValueError, InvalidAddress):
            return None

    def inspect(self, call: Call) -> bool:
        """
        Check an approval call's spender

        Returns:
            True when the spender differs from the expected one (or cannot
            be decoded)
        """
        spender = self.decode_spender(call)
        if spender is None:
            return True
        return spender.lower() != self.expected_spender.lower()

    def repair(self, call: Call) -> Call:
        """
        Return the call with its spender slot set to the expected spender

        The slot is written as the decimal form of the full canonical
        address. Calls that already match are returned unchanged.
        """
        if not call.calldata or not self.inspect(call):
            return call

        logger.warning(
            "Approval spender mismatch: got %s, expected %s; patching calldata",
            self.decode_spender(call),
            self.expected_spender,
        )
        return call.with_slot(SPENDER_SLOT, self.expected_spender.to_felt_string())

    def verify(self, call: Call) -> Call:
        """
        Repair the call and confirm the result

        Raises:
            SpenderMismatch: If the call has no data slot or still disagrees
                after repair
        """
        repaired = self.repair(call)
        if self.inspect(repaired):
            raise SpenderMismatch(
                f"Approval call spender could not be set to {self.expected_spender}"
            )
        return repaired
