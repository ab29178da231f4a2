"""Fixed-width little-endian codec for field elements and integer fields."""
from __future__ import annotations

from .errors import FieldOverflowError


def field_width(prime: int) -> int:
    """Default byte width for elements of the field: whole 64-bit limbs."""
    if prime <= 1:
        raise ValueError(f"Invalid prime {prime}")
    return ((prime.bit_length() - 1) // 64 + 1) * 8


def encode_uint(value: int, n8: int) -> bytes:
    """Encode ``value`` as exactly ``n8`` little-endian bytes.

    Raises FieldOverflowError when the value is negative or does not fit;
    nothing is ever truncated.
    """
    if value < 0 or value.bit_length() > 8 * n8:
        raise FieldOverflowError(f"Value {value} does not fit in {n8} bytes")
    return value.to_bytes(n8, "little")


def decode_uint(buf: bytes, n8: int) -> int:
    if len(buf) != n8:
        raise ValueError(f"Expected {n8} bytes, got {len(buf)}")
    return int.from_bytes(buf, "little")
