"""Signal encode/decode between payload bytes and physical values.

All functions are pure: signal definitions are read, never modified, and
every call returns a fresh result.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping

from dbc_codec.codec.bits import (
    byte_span,
    extract_bits,
    insert_bits,
    raw_range,
    round_half_away,
    to_signed,
    to_twos_complement,
)
from dbc_codec.errors import BufferTooShortError, ValueOutOfRangeError

if TYPE_CHECKING:
    from dbc_codec.definitions.message import MessageDefinition
    from dbc_codec.definitions.signal import SignalDefinition


@dataclass(frozen=True)
class DecodedSignal:
    """A decoded signal with its physical value and display form."""

    name: str
    value: float
    unit: str
    raw_value: int
    formatted: str
    in_range: bool = True

    def __str__(self) -> str:
        return f"{self.name}={self.formatted}"


def format_value(value: float, unit: str, precision: int = 2) -> str:
    """Render a physical value with fixed decimals and its unit."""
    text = f"{value:.{precision}f}"
    return f"{text} {unit}" if unit else text


def _check_buffer(data: bytes | bytearray, signal: SignalDefinition) -> None:
    available = len(data) * 8
    if signal.end_bit > available:
        raise BufferTooShortError(
            f"{signal.name}: needs {signal.end_bit} bits, buffer has {available}",
            required_bits=signal.end_bit,
            available_bits=available,
        )


def decode_raw(data: bytes | bytearray, signal: SignalDefinition) -> int:
    """Extract the raw integer of a signal, sign-extended if signed."""
    _check_buffer(data, signal)
    raw = extract_bits(data, signal.start_bit, signal.bit_length)
    if signal.is_signed:
        raw = to_signed(raw, signal.bit_length)
    return raw


def decode(data: bytes | bytearray, signal: SignalDefinition) -> float:
    """Decode a signal's physical value from payload bytes.

    The value is not clamped to the signal's [minimum, maximum].

    Raises:
        BufferTooShortError: If the payload does not cover the signal's bits.
    """
    return decode_raw(data, signal) * signal.factor + signal.offset


def decode_signal(
    data: bytes | bytearray,
    signal: SignalDefinition,
    precision: int = 2,
) -> DecodedSignal:
    """Decode a signal into a DecodedSignal with range flag and display text."""
    raw = decode_raw(data, signal)
    value = raw * signal.factor + signal.offset
    return DecodedSignal(
        name=signal.name,
        value=value,
        unit=signal.unit,
        raw_value=raw,
        formatted=format_value(value, signal.unit, precision),
        in_range=signal.in_range(value),
    )


def encode_raw(value: float, signal: SignalDefinition) -> int:
    """Convert a physical value to the signal's unsigned bit pattern.

    Raises:
        ValueOutOfRangeError: If the value is not finite or its raw integer
            does not fit in the signal's bit width.
    """
    scaled = (value - signal.offset) / signal.factor
    if not math.isfinite(scaled):
        raise ValueOutOfRangeError(
            f"{signal.name}: cannot encode non-finite value {value!r}",
            value=value,
            bit_length=signal.bit_length,
        )

    raw = round_half_away(scaled)
    low, high = raw_range(signal.bit_length, signal.is_signed)
    if not (low <= raw <= high):
        raise ValueOutOfRangeError(
            f"{signal.name}: value {value} (raw {raw}) does not fit in "
            f"{signal.bit_length} {'signed' if signal.is_signed else 'unsigned'} bits",
            value=value,
            raw=raw,
            bit_length=signal.bit_length,
        )
    return to_twos_complement(raw, signal.bit_length)


def encode(value: float, signal: SignalDefinition) -> bytes:
    """Encode a physical value into a bit-aligned fragment.

    The fragment is just wide enough for ``bit_length`` bits, with the
    signal's LSB at bit 0. Use merge_fragment() to place it in a frame.
    """
    raw = encode_raw(value, signal)
    return raw.to_bytes(byte_span(signal.bit_length), byteorder="little")


def merge_fragment(
    buffer: bytearray,
    fragment: bytes | bytearray,
    signal: SignalDefinition,
) -> None:
    """OR an encode() fragment into ``buffer`` at the signal's start bit.

    Only the signal's own bits are written; they are expected to be zero.
    """
    _check_buffer(buffer, signal)
    raw = int.from_bytes(fragment, byteorder="little")
    insert_bits(buffer, signal.start_bit, signal.bit_length, raw)


def encode_message(
    message: MessageDefinition,
    values: Mapping[str, float],
    strict: bool = True,
) -> bytes:
    """Pack several physical values into a payload of ``message.length`` bytes.

    Signals missing from ``values`` are left as zero bits. Names unknown to
    the message raise KeyError when ``strict``, otherwise they are skipped.
    """
    buffer = bytearray(message.length)
    for name, value in values.items():
        signal = message.get_signal(name)
        if signal is None:
            if strict:
                raise KeyError(f"{message.name} has no signal {name!r}")
            continue
        merge_fragment(buffer, encode(value, signal), signal)
    return bytes(buffer)


def decode_message(message: MessageDefinition, data: bytes | bytearray) -> dict[str, float]:
    """Decode every signal of a message."""
    return {signal.name: decode(data, signal) for signal in message.signals}
