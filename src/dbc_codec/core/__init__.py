"""Frame types shared with the CAN transport."""

from dbc_codec.core.frame import CANFrame

__all__ = ["CANFrame"]
