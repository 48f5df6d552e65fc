"""Frame decoding components."""

from dbc_codec.decoder.decoder import DecodedMessage, FrameDecoder

__all__ = ["DecodedMessage", "FrameDecoder"]
