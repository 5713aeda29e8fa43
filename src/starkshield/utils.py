"""Utility functions"""

from typing import Sequence, Union

Felt = Union[int, str]

UINT128_SHIFT = 128


def to_int(value: Felt) -> int:
    """
    Parse a field element from an int, a hex string or a decimal string

    Args:
        value: 123, "123" or "0x7b"

    Returns:
        Integer value

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool):
        raise ValueError("Booleans are not field elements")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("0x"):
            return int(text, 16)
        return int(text, 10)
    raise ValueError(f"Cannot parse field element from {type(value).__name__}")


def strip_hex_prefix(hex_str: str) -> str:
    """
    Remove a leading 0x

    Args:
        hex_str: Hex string (with or without 0x prefix)

    Returns:
        Hex digits only
    """
    if hex_str[:2].lower() == "0x":
        return hex_str[2:]
    return hex_str


def uint256_from_halves(result: Sequence[Felt]) -> int:
    """
    Recombine a Uint256 returned as ``[low, high]`` 128-bit halves

    A missing high half counts as zero.
    """
    if not result:
        raise ValueError("Empty Uint256 result")
    low = to_int(result[0])
    high = to_int(result[1]) if len(result) > 1 else 0
    return low + (high << UINT128_SHIFT)


def format_units(amount: int, decimals: int) -> str:
    """Render a base-unit amount as a decimal string for log lines"""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    if decimals == 0:
        return f"{sign}{whole}"
    return f"{sign}{whole}.{frac:0{decimals}d}"
