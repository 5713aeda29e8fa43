"""Canonical fixed-width form for Starknet addresses"""

from typing import Union

from .errors import InvalidAddress

HEX_DIGITS = 64
CANONICAL_LENGTH = 2 + HEX_DIGITS

_HEX_CHARS = frozenset("0123456789abcdef")


class CanonicalAddress(str):
    """
    Address string of exactly 66 characters: ``0x`` + 64 lowercase hex digits

    Only ``normalize`` builds these. Converting an address to an integer and
    back drops leading zero bytes, so any comparison or call construction
    must go through this form.
    """

    __slots__ = ()

    def to_int(self) -> int:
        return int(self, 16)

    def to_felt_string(self) -> str:
        """Decimal form, as used in raw calldata"""
        return str(int(self, 16))


def normalize(address: Union[str, int, CanonicalAddress]) -> CanonicalAddress:
    """
    Normalize an address to its canonical 66-character form

    Args:
        address: Hex string (with or without 0x prefix) or integer

    Returns:
        Canonical address

    Raises:
        InvalidAddress: On empty, negative, non-hex or oversized input
    """
    if isinstance(address, CanonicalAddress):
        return address

    if isinstance(address, int) and not isinstance(address, bool):
        if address < 0:
            raise InvalidAddress(f"Address must be non-negative, got {address}")
        payload = format(address, "x")
    elif isinstance(address, str):
        payload = address.strip().lower()
        if payload.startswith("0x"):
            payload = payload[2:]
        if not payload:
            raise InvalidAddress("Address must not be empty")
        if not set(payload) <= _HEX_CHARS:
            raise InvalidAddress(f"Address is not hex: {address!r}")
    else:
        raise InvalidAddress(f"Invalid address type: {type(address).__name__}")

    if len(payload) > HEX_DIGITS:
        raise InvalidAddress(
            f"Address has {len(payload)} hex digits, maximum is {HEX_DIGITS}"
        )

    return CanonicalAddress("0x" + payload.rjust(HEX_DIGITS, "0"))


def same_address(a: Union[str, int], b: Union[str, int]) -> bool:
    """Compare two addresses regardless of case or zero padding"""
    return normalize(a) == normalize(b)
