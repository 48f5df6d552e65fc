"""Signal codec: bit extraction, scaling and packing."""

from dbc_codec.codec.codec import DecodedSignal, decode, decode_signal, encode, merge_fragment

__all__ = ["DecodedSignal", "decode", "decode_signal", "encode", "merge_fragment"]
