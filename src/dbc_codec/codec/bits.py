"""Bit-level helpers for little-endian (Intel) payload bitstreams.

A payload is read as one contiguous little-endian integer: bit ``n`` of the
stream is bit ``n % 8`` of byte ``n // 8``.
"""

from __future__ import annotations

import math

MAX_BIT_LENGTH = 64


def bit_mask(bit_length: int) -> int:
    """Mask covering the lowest ``bit_length`` bits."""
    return (1 << bit_length) - 1


def byte_span(bit_length: int) -> int:
    """Number of bytes needed to hold ``bit_length`` bits."""
    return (bit_length + 7) // 8


def extract_bits(data: bytes | bytearray, start_bit: int, bit_length: int) -> int:
    """Read ``bit_length`` bits starting at ``start_bit`` as an unsigned int.

    The caller guarantees that the buffer covers the requested bits.
    """
    first = start_bit // 8
    last = (start_bit + bit_length - 1) // 8
    chunk = int.from_bytes(data[first:last + 1], byteorder="little")
    return (chunk >> (start_bit % 8)) & bit_mask(bit_length)


def insert_bits(buffer: bytearray, start_bit: int, bit_length: int, raw: int) -> None:
    """OR the low ``bit_length`` bits of ``raw`` into ``buffer`` at ``start_bit``.

    Bits outside ``[start_bit, start_bit + bit_length)`` are left untouched.
    """
    raw &= bit_mask(bit_length)
    first = start_bit // 8
    last = (start_bit + bit_length - 1) // 8
    shifted = raw << (start_bit % 8)
    for i, byte in enumerate(shifted.to_bytes(last - first + 1, byteorder="little")):
        buffer[first + i] |= byte


def to_signed(raw: int, bit_length: int) -> int:
    """Interpret ``raw`` as a two's-complement number of ``bit_length`` bits."""
    if raw & (1 << (bit_length - 1)):
        return raw - (1 << bit_length)
    return raw


def to_twos_complement(value: int, bit_length: int) -> int:
    """Bit pattern of a (possibly negative) int within ``bit_length`` bits."""
    return value & bit_mask(bit_length)


def raw_range(bit_length: int, is_signed: bool) -> tuple[int, int]:
    """Smallest and largest raw integer representable in ``bit_length`` bits."""
    if is_signed:
        return -(1 << (bit_length - 1)), (1 << (bit_length - 1)) - 1
    return 0, bit_mask(bit_length)


def round_half_away(x: float) -> int:
    """Round a finite float to the nearest integer, ties away from zero."""
    magnitude = abs(x)
    n = math.floor(magnitude)
    # magnitude - n is exact for every finite double
    if magnitude - n >= 0.5:
        n += 1
    return n if x >= 0 else -n
