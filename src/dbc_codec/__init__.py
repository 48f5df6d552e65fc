"""dbc-codec - CAN database parsing and signal encoding/decoding."""

__version__ = "0.1.0"

from dbc_codec.codec.codec import (
    DecodedSignal,
    decode,
    decode_message,
    decode_raw,
    decode_signal,
    encode,
    encode_message,
    encode_raw,
    merge_fragment,
)
from dbc_codec.config import CodecConfig
from dbc_codec.core.frame import CANFrame
from dbc_codec.decoder.decoder import DecodedMessage, FrameDecoder
from dbc_codec.definitions.message import MessageDefinition
from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.errors import (
    BufferTooShortError,
    DbcCodecError,
    DefinitionError,
    MalformedLineError,
    SourceUnreadableError,
    ValueOutOfRangeError,
)
from dbc_codec.parser.parser import DbcParser, ParseResult, load_file, parse_lines, parse_string
from dbc_codec.registry.registry import Registry, load_registry

__all__ = [
    "BufferTooShortError",
    "CANFrame",
    "CodecConfig",
    "DbcCodecError",
    "DbcParser",
    "DecodedMessage",
    "DecodedSignal",
    "DefinitionError",
    "FrameDecoder",
    "MalformedLineError",
    "MessageDefinition",
    "ParseResult",
    "Registry",
    "SignalDefinition",
    "SourceUnreadableError",
    "ValueOutOfRangeError",
    "decode",
    "decode_message",
    "decode_raw",
    "decode_signal",
    "encode",
    "encode_message",
    "encode_raw",
    "load_file",
    "load_registry",
    "merge_fragment",
    "parse_lines",
    "parse_string",
]
