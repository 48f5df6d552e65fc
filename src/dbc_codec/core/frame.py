"""CAN frame representation at the transport boundary."""

from dataclasses import dataclass, field
import time

CAN_STD_ID_MAX = 0x7FF          # 11-bit
CAN_EXT_ID_MAX = 0x1FFFFFFF     # 29-bit
CAN_CLASSIC_MAX_DLC = 8
CANFD_MAX_DLC = 64


@dataclass(frozen=True)
class CANFrame:
    """Represents a single classic CAN or CAN-FD frame.

    Attributes:
        arbitration_id: 11-bit (standard) or 29-bit (extended) message identifier.
        data: Payload bytes (0-64 bytes, more than 8 only for CAN-FD).
        timestamp: Time when the frame was transmitted/received (seconds since epoch).
        is_extended_id: True if using 29-bit extended identifier.
        is_remote_frame: True if this is a remote transmission request (RTR).
    """

    arbitration_id: int
    data: bytes = field(default_factory=bytes)
    timestamp: float = field(default_factory=time.time)
    is_extended_id: bool = False
    is_remote_frame: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

        if len(self.data) > CANFD_MAX_DLC:
            raise ValueError(
                f"CAN frame data cannot exceed {CANFD_MAX_DLC} bytes, got {len(self.data)}"
            )

        if self.is_extended_id:
            if not (0 <= self.arbitration_id <= CAN_EXT_ID_MAX):
                raise ValueError(
                    f"Extended arbitration ID must be 0-0x1FFFFFFF, got {self.arbitration_id:#x}"
                )
        else:
            if not (0 <= self.arbitration_id <= CAN_STD_ID_MAX):
                raise ValueError(
                    f"Standard arbitration ID must be 0-0x7FF, got {self.arbitration_id:#x}"
                )

    @property
    def dlc(self) -> int:
        """Payload length in bytes."""
        return len(self.data)

    @property
    def is_fd(self) -> bool:
        """True if the payload only fits a CAN-FD frame."""
        return len(self.data) > CAN_CLASSIC_MAX_DLC

    def hex_data(self) -> str:
        """Return data as a hex string."""
        return self.data.hex().upper()

    @classmethod
    def from_hex(
        cls,
        arbitration_id: int,
        hex_str: str,
        is_extended_id: bool = False,
    ) -> "CANFrame":
        """Build a frame from a hex payload string.

        Whitespace and an optional ``0x`` prefix are allowed.
        """
        s = "".join(hex_str.split()).lower()
        if s.startswith("0x"):
            s = s[2:]
        if len(s) % 2 != 0:
            raise ValueError(f"Hex string must have even length, got {len(s)}")
        return cls(
            arbitration_id=arbitration_id,
            data=bytes.fromhex(s),
            is_extended_id=is_extended_id,
        )

    def __repr__(self) -> str:
        id_str = f"{self.arbitration_id:#05x}" if not self.is_extended_id else f"{self.arbitration_id:#010x}"
        return (
            f"CANFrame(id={id_str}, data={self.hex_data()}, "
            f"dlc={self.dlc}, ts={self.timestamp:.6f})"
        )
