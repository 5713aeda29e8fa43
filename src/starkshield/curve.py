"""
Stark curve parameters and affine point arithmetic

y^2 = x^3 + ALPHA*x + BETA over the field of size FIELD_PRIME.
Only what key derivation needs: scalar multiplication of a point.
"""

from typing import Optional, Tuple

FIELD_PRIME = 2**251 + 17 * 2**192 + 1

ALPHA = 1
BETA = 0x6F21413EFBE40DE150E596D72F7A8C5609AD26C15C915C1F4CDFCB99CEE9E89

# Curve order N; valid private scalars lie in [1, N)
CURVE_ORDER = 3618502788666131213697322783095070105526743751716087489154079457884512865583

GENERATOR = (
    0x1EF15C18599971B7BECED415A40F0C7DEACFD9B0D1819E03D723D8BC943CFCA,
    0x5668060AA49730B7BE4801DF46EC62DE53ECD11ABE43A32873000C36E8DC1F,
)

# None is the point at infinity
Point = Optional[Tuple[int, int]]


def _inverse(value: int) -> int:
    return pow(value, FIELD_PRIME - 2, FIELD_PRIME)


def is_on_curve(point: Point) -> bool:
    """Check the curve equation (the point at infinity counts as on-curve)"""
    if point is None:
        return True
    x, y = point
    return (y * y - (x * x * x + ALPHA * x + BETA)) % FIELD_PRIME == 0


def point_double(point: Point) -> Point:
    if point is None:
        return None
    x, y = point
    if y == 0:
        return None
    slope = (3 * x * x + ALPHA) * _inverse(2 * y) % FIELD_PRIME
    x3 = (slope * slope - 2 * x) % FIELD_PRIME
    y3 = (slope * (x - x3) - y) % FIELD_PRIME
    return (x3, y3)


def point_add(p1: Point, p2: Point) -> Point:
    if p1 is None:
        return p2
    if p2 is None:
        return p1

    x1, y1 = p1
    x2, y2 = p2
    if x1 == x2:
        if (y1 + y2) % FIELD_PRIME == 0:
            return None
        return point_double(p1)

    slope = (y2 - y1) * _inverse(x2 - x1) % FIELD_PRIME
    x3 = (slope * slope - x1 - x2) % FIELD_PRIME
    y3 = (slope * (x1 - x3) - y1) % FIELD_PRIME
    return (x3, y3)


def scalar_mult(scalar: int, point: Point = GENERATOR) -> Point:
    """
    Multiply a point by a scalar (double-and-add)

    Args:
        scalar: Non-negative multiplier
        point: Base point, the generator by default

    Returns:
        Resulting point, or None for the point at infinity
    """
    if scalar < 0:
        raise ValueError("Scalar must be non-negative")

    result: Point = None
    addend = point
    while scalar:
        if scalar & 1:
            result = point_add(result, addend)
        addend = point_double(addend)
        scalar >>= 1
    return result
