import pytest

from r1cs_core.errors import FieldOverflowError
from r1cs_core.field import decode_uint, encode_uint, field_width

from container_bytes import BN128_PRIME


def test_field_width_rounds_to_whole_limbs():
    assert field_width(BN128_PRIME) == 32
    assert field_width(2**64 - 59) == 8
    assert field_width(2**64 + 13) == 16
    with pytest.raises(ValueError):
        field_width(1)


def test_encode_is_little_endian_fixed_width():
    assert encode_uint(1, 4) == b"\x01\x00\x00\x00"
    assert encode_uint(0x0102, 8) == b"\x02\x01" + b"\x00" * 6
    assert len(encode_uint(BN128_PRIME, 32)) == 32
    assert encode_uint(2**256 - 1, 32) == b"\xff" * 32


@pytest.mark.parametrize("value, n8", [(2**32, 4), (2**256, 32), (-1, 8), (1, 0)])
def test_encode_rejects_values_that_do_not_fit(value, n8):
    with pytest.raises(FieldOverflowError):
        encode_uint(value, n8)


def test_decode_reads_exact_width():
    assert decode_uint(BN128_PRIME.to_bytes(32, "little"), 32) == BN128_PRIME
    assert decode_uint(b"", 0) == 0
    with pytest.raises(ValueError):
        decode_uint(b"\x00\x00", 4)
