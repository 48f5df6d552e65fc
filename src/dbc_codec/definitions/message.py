"""Message definitions parsed from a CAN database."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from dbc_codec.core.frame import CAN_EXT_ID_MAX, CAN_STD_ID_MAX, CANFD_MAX_DLC
from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.errors import DefinitionError

# DBC files mark extended identifiers by setting bit 31 of the message id
DBC_EXTENDED_FLAG = 0x80000000


@dataclass(frozen=True)
class MessageDefinition:
    """Definition of a complete CAN message.

    A message maps a frame identifier to an ordered set of non-overlapping
    signals. ``frame_id`` is kept exactly as written in the database.
    """

    frame_id: int
    name: str
    length: int = 8
    sender: str = ""
    signals: tuple[SignalDefinition, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.name:
            raise DefinitionError("message name must be a non-empty string")
        if self.frame_id < 0:
            raise DefinitionError(f"{self.name}: frame_id must be non-negative")
        if not (0 <= self.length <= CANFD_MAX_DLC):
            raise DefinitionError(
                f"{self.name}: length must be 0-{CANFD_MAX_DLC} bytes, got {self.length}"
            )
        if not isinstance(self.signals, tuple):
            object.__setattr__(self, "signals", tuple(self.signals))

        seen: list[SignalDefinition] = []
        for signal in self.signals:
            check_signal_fits(self, signal, seen)
            seen.append(signal)

    @property
    def can_id(self) -> int:
        """Identifier as it appears on the bus (DBC flag bit removed)."""
        return self.frame_id & CAN_EXT_ID_MAX

    @property
    def is_extended(self) -> bool:
        return bool(self.frame_id & DBC_EXTENDED_FLAG) or self.can_id > CAN_STD_ID_MAX

    @property
    def signal_names(self) -> list[str]:
        return [s.name for s in self.signals]

    @property
    def bit_length_total(self) -> int:
        """Payload size in bits."""
        return self.length * 8

    def get_signal(self, name: str) -> Optional[SignalDefinition]:
        """Get a signal by name."""
        for signal in self.signals:
            if signal.name == name:
                return signal
        return None


def check_signal_fits(
    message: MessageDefinition,
    signal: SignalDefinition,
    existing: list[SignalDefinition] | tuple[SignalDefinition, ...],
) -> None:
    """Raise DefinitionError if ``signal`` cannot join ``message``.

    The signal must fit in the payload, its name must be unique and, unless
    either signal is multiplexed, it must not share bits with ``existing``.
    """
    if signal.end_bit > message.bit_length_total:
        raise DefinitionError(
            f"{message.name}.{signal.name}: bits {signal.start_bit}-{signal.end_bit - 1} "
            f"exceed {message.length}-byte payload"
        )
    for other in existing:
        if other.name == signal.name:
            raise DefinitionError(f"{message.name}: duplicate signal {signal.name}")
        if (
            not signal.is_multiplexed
            and not other.is_multiplexed
            and signal.overlaps(other)
        ):
            raise DefinitionError(
                f"{message.name}.{signal.name}: overlaps signal {other.name}"
            )
