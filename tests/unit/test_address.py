"""Test address canonicalization"""

import pytest

from starkshield import InvalidAddress, normalize, same_address
from starkshield.address import CanonicalAddress


class TestNormalize:
    """Test normalize"""

    def test_pads_to_66_characters(self):
        assert normalize("0x123") == "0x" + "0" * 61 + "123"

    def test_adds_prefix(self):
        assert normalize("abc") == normalize("0xabc")

    def test_lowercases(self):
        assert normalize("0xABCdef") == normalize("0xabcdef")

    def test_accepts_int(self):
        assert normalize(0xB4CCA3) == normalize("0x00b4cca3")

    def test_idempotent_and_fixed_width(self):
        """Test normalize(normalize(x)) == normalize(x)"""
        inputs = [
            "0x1",
            "1",
            "0x00b4cca30f0f641e01140c1c388f55641f1c3fe5515484e622b6cb91d8cee585",
            "0XB4CCA30F",
            "  0x42  ",
            "f" * 64,
            0,
            2**251,
        ]
        for value in inputs:
            once = normalize(value)
            assert normalize(once) == once
            assert len(once) == 66
            assert isinstance(once, CanonicalAddress)

    def test_leading_zero_bytes_survive_int_round_trip(self):
        address = "0x00b4cca30f0f641e01140c1c388f55641f1c3fe5515484e622b6cb91d8cee585"
        assert normalize(int(address, 16)) == address

    def test_felt_string(self):
        canonical = normalize("0x0ff")
        assert canonical.to_felt_string() == "255"
        assert canonical.to_int() == 255

    def test_invalid_addresses(self):
        invalid = ["", "0x", "   ", "0xnothex", "0x" + "1" * 65, -1, None, 1.5]
        for value in invalid:
            with pytest.raises(InvalidAddress):
                normalize(value)

    def test_empty_message(self):
        with pytest.raises(InvalidAddress, match="must not be empty"):
            normalize("")

    def test_invalid_address_is_value_error(self):
        with pytest.raises(ValueError):
            normalize("")


def test_same_address_ignores_case_and_padding():
    assert same_address("0x0123abc", "0x" + "0123ABC".rjust(64, "0"))
    assert not same_address("0x123", "0x124")
