"""Frame decoding against a definition registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from dbc_codec.codec.codec import DecodedSignal, decode_signal
from dbc_codec.config import CodecConfig
from dbc_codec.core.frame import CANFrame
from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.errors import BufferTooShortError
from dbc_codec.registry.registry import Registry

logger = logging.getLogger(__name__)


@dataclass
class DecodedMessage:
    """A received frame decoded into its message's signals."""

    frame_id: int
    name: str
    timestamp: float
    signals: dict[str, DecodedSignal] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    raw_data: bytes = field(default_factory=bytes)
    multiplexer_value: Optional[int] = None
    inactive: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def get(self, signal_name: str) -> Optional[DecodedSignal]:
        """Get a decoded signal by name."""
        return self.signals.get(signal_name)

    def values(self) -> dict[str, float]:
        return {name: s.value for name, s in self.signals.items()}

    def __str__(self) -> str:
        sig_str = " | ".join(str(s) for s in self.signals.values())
        return f"{self.name}[{self.frame_id:#x}]: {sig_str}"


class FrameDecoder:
    """Transforms received frames into decoded signal values.

    The decoder only reads from the registry; reloading the registry takes
    effect on the next frame. A signal the payload is too short for is
    reported in DecodedMessage.errors while the other signals still decode.

    In a multiplexed message only the signals selected by the ``M`` switch
    value are decoded; the rest are listed in DecodedMessage.inactive.
    """

    def __init__(self, registry: Registry, config: Optional[CodecConfig] = None) -> None:
        self._registry = registry
        self._config = config or CodecConfig()
        self._unknown_ids: set[int] = set()
        self._error_count = 0

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def unknown_ids(self) -> set[int]:
        """Set of arbitration IDs seen without a definition."""
        return self._unknown_ids.copy()

    @property
    def error_count(self) -> int:
        """Number of signals that failed to decode so far."""
        return self._error_count

    def decode_frame(self, frame: CANFrame) -> Optional[DecodedMessage]:
        """Decode a frame using its registered message definition.

        Returns None if no definition matches the frame's ID.
        """
        message = self._registry.find_for_frame(frame)
        if message is None:
            self._unknown_ids.add(frame.arbitration_id)
            return None

        decoded = DecodedMessage(
            frame_id=message.frame_id,
            name=message.name,
            timestamp=frame.timestamp,
            raw_data=frame.data,
        )
        switch = next((s for s in message.signals if s.is_multiplexer), None)
        if switch is None:
            for signal in message.signals:
                self._decode_into(decoded, frame, signal)
            return decoded

        multiplexed = []
        for signal in message.signals:
            if signal.is_multiplexed:
                multiplexed.append(signal)
            else:
                self._decode_into(decoded, frame, signal)

        switch_signal = decoded.signals.get(switch.name)
        if switch_signal is not None:
            decoded.multiplexer_value = switch_signal.raw_value
        for signal in multiplexed:
            if signal.multiplexer_id == decoded.multiplexer_value:
                self._decode_into(decoded, frame, signal)
            else:
                decoded.inactive.append(signal.name)

        return decoded

    def _decode_into(self, decoded: DecodedMessage, frame: CANFrame, signal: SignalDefinition) -> None:
        try:
            decoded.signals[signal.name] = decode_signal(
                frame.data, signal, self._config.display_precision
            )
        except BufferTooShortError as exc:
            logger.debug("Cannot decode %s from %r: %s", signal.signal_id, frame, exc)
            decoded.errors[signal.name] = str(exc)
            self._error_count += 1

    def decode_batch(self, frames: Iterable[CANFrame]) -> list[DecodedMessage]:
        """Decode multiple frames, skipping unknown IDs."""
        results = []
        for frame in frames:
            decoded = self.decode_frame(frame)
            if decoded is not None:
                results.append(decoded)
        return results

    def describe(self, frame: CANFrame) -> str:
        """One-line decoded summary of a frame, empty for unknown IDs."""
        decoded = self.decode_frame(frame)
        return str(decoded) if decoded is not None else ""

    def clear_unknown(self) -> None:
        """Clear the set of unknown IDs."""
        self._unknown_ids.clear()
