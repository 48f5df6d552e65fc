"""Message and signal definitions."""

from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.definitions.message import MessageDefinition
from dbc_codec.definitions.samples import sample_bms_messages

__all__ = ["SignalDefinition", "MessageDefinition", "sample_bms_messages"]
