"""DBC text parsing."""

from dbc_codec.parser.grammar import LineKind, LineMatch, recognize
from dbc_codec.parser.parser import DbcParser, MalformedLine, ParseResult

__all__ = ["DbcParser", "LineKind", "LineMatch", "MalformedLine", "ParseResult", "recognize"]
