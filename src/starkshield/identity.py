"""
Owner identity: private scalar validation and public key derivation

Also parses recipient public keys given either as explicit coordinates or
as a compact encoded identity string.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Union

import base58

from .curve import CURVE_ORDER, FIELD_PRIME, is_on_curve, scalar_mult
from .errors import InvalidKey
from .utils import strip_hex_prefix

if TYPE_CHECKING:
    from .collaborators import IdentityDecoder

logger = logging.getLogger(__name__)

COORDINATE_HEX_DIGITS = 64
FULL_KEY_HEX_DIGITS = 2 * COORDINATE_HEX_DIGITS
COMPRESSED_KEY_HEX_DIGITS = 66

REASON_MISSING = "missing"
REASON_UNPARSABLE = "unparsable"
REASON_TOO_SMALL = "too small"
REASON_OUT_OF_RANGE = "out of range on the curve"
REASON_COMPRESSED = "compressed point"
REASON_INCOMPLETE = "incomplete key"
REASON_NOT_ON_CURVE = "not on curve"


@dataclass(frozen=True)
class PublicKey:
    """Public key as a pair of field elements"""

    x: int
    y: int

    def __post_init__(self) -> None:
        for name, value in (("x", self.x), ("y", self.y)):
            if not 0 <= value < FIELD_PRIME:
                raise InvalidKey(
                    f"Public key {name}-coordinate is outside the field",
                    reason=REASON_NOT_ON_CURVE,
                )
        if not is_on_curve((self.x, self.y)):
            raise InvalidKey(
                "Public key is not a point on the Stark curve",
                reason=REASON_NOT_ON_CURVE,
            )

    def to_hex(self) -> str:
        """Serialize as 0x<x:64 hex><y:64 hex>"""
        return f"0x{self.x:064x}{self.y:064x}"

    def as_felts(self) -> list[int]:
        return [self.x, self.y]

    @classmethod
    def from_hex(cls, key: str) -> "PublicKey":
        """
        Parse the explicit two-coordinate hex form

        Hex digits are case-insensitive; ``to_hex`` always emits lower case,
        so a round trip matches the input only after case-folding. A string
        of the right length is accepted only if it encodes a point on the
        curve.

        Args:
            key: 0x followed by exactly 128 hex characters

        Raises:
            InvalidKey: With a length-specific message for compressed (66)
                or single-coordinate (64) inputs
        """
        payload = strip_hex_prefix(key.strip())
        length = len(payload)

        if length == COMPRESSED_KEY_HEX_DIGITS:
            raise InvalidKey(
                "compressed point not supported here, "
                "provide full coordinates or compact form",
                reason=REASON_COMPRESSED,
            )
        if length == COORDINATE_HEX_DIGITS:
            raise InvalidKey(
                "incomplete key, missing one coordinate",
                reason=REASON_INCOMPLETE,
            )
        if length != FULL_KEY_HEX_DIGITS:
            raise InvalidKey(
                f"Invalid public key length: expected {FULL_KEY_HEX_DIGITS} hex "
                f"characters (x then y), got {length}",
                reason=REASON_UNPARSABLE,
            )

        try:
            x = int(payload[:COORDINATE_HEX_DIGITS], 16)
            y = int(payload[COORDINATE_HEX_DIGITS:], 16)
        except ValueError:
            raise InvalidKey(
                "Public key contains non-hex characters", reason=REASON_UNPARSABLE
            ) from None
        return cls(x, y)

    @classmethod
    def coerce(cls, value: Any) -> "PublicKey":
        """Build from a PublicKey, an (x, y) pair, a mapping or an object with x/y"""
        if isinstance(value, cls):
            return value
        if not (
            isinstance(value, dict)
            or (isinstance(value, (tuple, list)) and len(value) == 2)
            or (hasattr(value, "x") and hasattr(value, "y"))
        ):
            raise InvalidKey(
                f"Cannot read a public key from {type(value).__name__}",
                reason=REASON_UNPARSABLE,
            )

        try:
            if isinstance(value, dict):
                x, y = value["x"], value["y"]
            elif isinstance(value, (tuple, list)):
                x, y = value
            else:
                x, y = value.x, value.y
            coordinates = (_coordinate(x), _coordinate(y))
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidKey(
                f"Cannot read public key coordinates: {exc!r}",
                reason=REASON_UNPARSABLE,
            ) from exc
        return cls(*coordinates)


def _coordinate(value: Union[int, str]) -> int:
    if isinstance(value, int):
        return value
    text = str(value)
    return int(text, 16) if text.lower().startswith("0x") else int(text)


def parse_private_key(secret: Union[int, str, None]) -> int:
    """
    Parse and range-check a private scalar

    Args:
        secret: Integer, 0x-prefixed hex string or decimal string

    Returns:
        Scalar s with 1 <= s < CURVE_ORDER

    Raises:
        InvalidKey: reason is "too small" for s < 1 and
            "out of range on the curve" for s >= CURVE_ORDER
    """
    if secret is None or (isinstance(secret, str) and not secret.strip()):
        raise InvalidKey("Private key is required", reason=REASON_MISSING)

    if isinstance(secret, bool):
        raise InvalidKey("Private key must be an integer", reason=REASON_UNPARSABLE)

    if isinstance(secret, int):
        scalar = secret
    elif isinstance(secret, str):
        text = secret.strip()
        try:
            scalar = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
        except ValueError:
            raise InvalidKey(
                "Private key is not a valid hex or decimal scalar",
                reason=REASON_UNPARSABLE,
            ) from None
    else:
        raise InvalidKey(
            f"Invalid private key type: {type(secret).__name__}",
            reason=REASON_UNPARSABLE,
        )

    if scalar < 1:
        raise InvalidKey(
            "Private key is too small, must be >= 1", reason=REASON_TOO_SMALL
        )
    if scalar >= CURVE_ORDER:
        raise InvalidKey(
            "Private key is out of range on the curve, must be below the curve order",
            reason=REASON_OUT_OF_RANGE,
        )
    return scalar


class AccountIdentity:
    """
    Owner's private scalar and the public key derived from it

    Immutable once constructed. The scalar is validated before any
    derivation happens.
    """

    __slots__ = ("_secret", "_public_key")

    def __init__(self, secret: Union[int, str]):
        scalar = parse_private_key(secret)
        point = scalar_mult(scalar)
        if point is None:
            raise InvalidKey(
                "Private key maps to the point at infinity",
                reason=REASON_OUT_OF_RANGE,
            )
        object.__setattr__(self, "_secret", scalar)
        object.__setattr__(self, "_public_key", PublicKey(*point))
        logger.debug("Derived public key %s", self._public_key.to_hex()[:18])

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("AccountIdentity is immutable")

    def __repr__(self) -> str:
        return f"AccountIdentity(public_key={self._public_key.to_hex()[:18]}...)"

    @property
    def public_key(self) -> PublicKey:
        return self._public_key

    @property
    def secret(self) -> int:
        return self._secret

    def derive_public_representation(self) -> PublicKey:
        """Public key as two field elements (see ``PublicKey.to_hex``)"""
        return self._public_key

    @classmethod
    def generate(cls) -> "AccountIdentity":
        """Create an identity from a fresh random scalar in [1, N)"""
        return cls(secrets.randbelow(CURVE_ORDER - 1) + 1)


def is_compact_identity(text: str) -> bool:
    """
    Check that a string looks like a compact (base58) identity

    Args:
        text: Candidate compact identity

    Returns:
        True if it decodes as non-empty base58
    """
    try:
        return len(base58.b58decode(text)) > 0
    except ValueError:
        return False


def parse_recipient_key(
    text: str,
    decoder: Optional["IdentityDecoder"] = None,
) -> PublicKey:
    """
    Parse a recipient public key

    Args:
        text: Either a compact identity string (no 0x prefix) or
            0x + 128 hex characters (x then y)
        decoder: Resolves compact identities to coordinates

    Returns:
        Recipient public key

    Raises:
        InvalidKey: On any malformed input, with a distinct message for
            compressed and single-coordinate hex keys
    """
    if not text or not text.strip():
        raise InvalidKey("Recipient public key is empty", reason=REASON_MISSING)

    trimmed = text.strip()
    if trimmed[:2].lower() == "0x":
        return PublicKey.from_hex(trimmed)

    if not is_compact_identity(trimmed):
        raise InvalidKey(
            "Recipient key is neither 0x-prefixed hex nor a compact identity",
            reason=REASON_UNPARSABLE,
        )
    if decoder is None:
        raise InvalidKey(
            "Compact identity given but no identity decoder is configured",
            reason=REASON_UNPARSABLE,
        )

    try:
        decoded = decoder.decode(trimmed)
    except InvalidKey:
        raise
    except Exception as exc:
        raise InvalidKey(
            f"Failed to decode compact identity: {exc}", reason=REASON_UNPARSABLE
        ) from exc
    return PublicKey.coerce(decoded)
