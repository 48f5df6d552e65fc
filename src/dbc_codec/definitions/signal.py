"""Signal definitions parsed from a CAN database."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from dbc_codec.codec.bits import MAX_BIT_LENGTH, raw_range
from dbc_codec.errors import DefinitionError

_MULTIPLEXER = re.compile(r"(M|m\d+M?)?")


@dataclass(frozen=True)
class SignalDefinition:
    """Location and scaling of one signal within a CAN message.

    Signals are addressed with Intel (little-endian) bit numbering: the
    start_bit is the position of the signal's LSB in the payload bitstream.
    Physical values are ``raw * factor + offset``. ``minimum`` and
    ``maximum`` are advisory and never used to clamp decoded values.
    """

    name: str
    start_bit: int
    bit_length: int
    is_signed: bool = False
    factor: float = 1.0
    offset: float = 0.0
    minimum: float = 0.0
    maximum: float = 0.0
    unit: str = ""
    receiver: str = ""
    message_name: str = ""
    message_id: int = 0
    multiplexer: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise DefinitionError("signal name must be a non-empty string")
        if self.start_bit < 0:
            raise DefinitionError(f"{self.name}: start_bit must be non-negative, got {self.start_bit}")
        if not (1 <= self.bit_length <= MAX_BIT_LENGTH):
            raise DefinitionError(
                f"{self.name}: bit_length must be 1-{MAX_BIT_LENGTH}, got {self.bit_length}"
            )
        if self.factor == 0:
            raise DefinitionError(f"{self.name}: factor must not be zero")
        if self.minimum > self.maximum:
            raise DefinitionError(
                f"{self.name}: minimum {self.minimum} exceeds maximum {self.maximum}"
            )
        if not _MULTIPLEXER.fullmatch(self.multiplexer):
            raise DefinitionError(
                f"{self.name}: bad multiplexer indicator {self.multiplexer!r}"
            )

    @property
    def end_bit(self) -> int:
        """First bit position after the signal (exclusive end)."""
        return self.start_bit + self.bit_length

    @property
    def raw_min(self) -> int:
        return raw_range(self.bit_length, self.is_signed)[0]

    @property
    def raw_max(self) -> int:
        return raw_range(self.bit_length, self.is_signed)[1]

    @property
    def signal_id(self) -> str:
        """Registry-wide identifier, ``<message>.<signal>``."""
        return f"{self.message_name}.{self.name}"

    @property
    def is_multiplexed(self) -> bool:
        """True for signals only present for one multiplexer value."""
        return self.multiplexer.startswith("m")

    @property
    def is_multiplexer(self) -> bool:
        """True for the message's top-level multiplexer switch (``M``)."""
        return self.multiplexer == "M"

    @property
    def multiplexer_id(self) -> Optional[int]:
        """Switch value selecting this signal, None for plain signals."""
        if not self.is_multiplexed:
            return None
        return int(self.multiplexer[1:].rstrip("M"))

    def in_range(self, value: float) -> bool:
        """Check a physical value against the declared [minimum, maximum].

        A range of [0, 0] is the DBC convention for "unspecified" and
        accepts everything.
        """
        if self.minimum == 0 and self.maximum == 0:
            return True
        return self.minimum <= value <= self.maximum

    def overlaps(self, other: SignalDefinition) -> bool:
        """True if the two signals share any bit."""
        return self.start_bit < other.end_bit and other.start_bit < self.end_bit
