"""DBC database parser.

Builds message and signal definitions from recognized lines. A line that
cannot be turned into a valid definition is skipped and reported in the
ParseResult; it never aborts the parse.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, Optional

from dbc_codec.config import CodecConfig
from dbc_codec.definitions.message import MessageDefinition, check_signal_fits
from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.errors import DefinitionError, MalformedLineError, SourceUnreadableError
from dbc_codec.parser.grammar import LineKind, LineMatch, recognize

logger = logging.getLogger(__name__)

_RECEIVER_SPLIT = re.compile(r"[\s,;]+")


@dataclass(frozen=True)
class MalformedLine:
    """A skipped line and the reason it was rejected."""

    line_number: int
    text: str
    reason: str


@dataclass
class ParseResult:
    """Everything a parse produced, in source order."""

    messages: list[MessageDefinition] = field(default_factory=list)
    message_comments: dict[int, str] = field(default_factory=dict)
    signal_comments: dict[str, str] = field(default_factory=dict)
    malformed: list[MalformedLine] = field(default_factory=list)
    ignored_count: int = 0

    @property
    def malformed_count(self) -> int:
        return len(self.malformed)

    def comment_for(self, frame_id: int, signal_name: Optional[str] = None) -> Optional[str]:
        """Comment attached to a message, or to one of its signals."""
        if signal_name is None:
            return self.message_comments.get(frame_id)
        return self.signal_comments.get(f"{frame_id}.{signal_name}")


def _parse_int(text: str, what: str) -> int:
    try:
        if text.lower().startswith("0x"):
            value = int(text, 16)
        else:
            value = int(text)
    except ValueError:
        raise MalformedLineError(f"bad {what} {text!r}") from None
    if value < 0:
        raise MalformedLineError(f"negative {what} {text!r}")
    return value


def _parse_float(text: str, what: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise MalformedLineError(f"bad {what} {text!r}") from None
    if not math.isfinite(value):
        raise MalformedLineError(f"non-finite {what} {text!r}")
    return value


class _OpenMessage:
    """Message header whose signals are still being collected."""

    def __init__(self, header: MessageDefinition) -> None:
        self.header = header
        self.signals: list[SignalDefinition] = []

    def add(self, signal: SignalDefinition) -> None:
        check_signal_fits(self.header, signal, self.signals)
        self.signals.append(signal)

    def close(self) -> MessageDefinition:
        return replace(self.header, signals=tuple(self.signals))


class DbcParser:
    """Parses DBC text into message definitions.

    Recognized statements are message headers (BO_), signals (SG_) and
    message/signal comments (CM_). Other lines such as node lists, value
    tables and attributes carry no decode information and are ignored.
    """

    def __init__(self, config: Optional[CodecConfig] = None) -> None:
        self._config = config or CodecConfig()

    def parse_lines(self, lines: Iterable[str]) -> ParseResult:
        """Parse a sequence of text lines.

        ``lines`` may be an open text file; an OSError raised while reading
        it is reported as SourceUnreadableError.
        """
        result = ParseResult()
        current: Optional[_OpenMessage] = None

        try:
            for line_number, line in enumerate(lines, start=1):
                current = self._parse_line(result, current, line_number, line)
        except OSError as exc:
            name = getattr(lines, "name", None)
            raise SourceUnreadableError(
                f"Cannot read database: {exc}",
                path=None if name is None else str(name),
                original_error=exc,
            ) from exc

        if current is not None:
            result.messages.append(current.close())

        logger.info(
            "Parsed %d messages (%d malformed lines skipped)",
            len(result.messages),
            len(result.malformed),
        )
        return result

    def _parse_line(
        self,
        result: ParseResult,
        current: Optional[_OpenMessage],
        line_number: int,
        line: str,
    ) -> Optional[_OpenMessage]:
        """Apply one line to ``result``; returns the message still open after it."""
        match = recognize(line)
        starts_message = match.kind is LineKind.MESSAGE or (
            match.kind is LineKind.MALFORMED and match.get("statement") == "BO_"
        )
        if starts_message and current is not None:
            result.messages.append(current.close())
            current = None

        try:
            if match.kind is LineKind.MESSAGE:
                current = _OpenMessage(self._build_message(match))
            elif match.kind is LineKind.SIGNAL:
                if current is None:
                    raise MalformedLineError("signal outside of a message")
                current.add(self._build_signal(match, current.header))
            elif match.kind is LineKind.MESSAGE_COMMENT:
                frame_id = _parse_int(match.get("frame_id"), "message id")
                result.message_comments[frame_id] = match.get("text")
            elif match.kind is LineKind.SIGNAL_COMMENT:
                frame_id = _parse_int(match.get("frame_id"), "message id")
                key = f"{frame_id}.{match.get('signal')}"
                result.signal_comments[key] = match.get("text")
            elif match.kind is LineKind.MALFORMED:
                raise MalformedLineError("statement does not match its grammar")
            else:
                result.ignored_count += 1
        except (MalformedLineError, DefinitionError) as exc:
            logger.warning("Skipping line %d: %s (%s)", line_number, exc, match.text)
            result.malformed.append(MalformedLine(line_number, match.text, str(exc)))

        return current

    def parse_string(self, text: str) -> ParseResult:
        """Parse database text held in memory."""
        return self.parse_lines(text.splitlines())

    def parse_file(self, path: Path | str) -> ParseResult:
        """Read and parse a database file.

        Raises:
            SourceUnreadableError: If the file cannot be opened or read.
        """
        path = Path(path)
        try:
            with open(path, encoding=self._config.encoding, errors="replace") as f:
                text = f.read()
        except (OSError, LookupError) as exc:
            raise SourceUnreadableError(
                f"Cannot read database {path}: {exc}",
                path=str(path),
                original_error=exc,
            ) from exc

        logger.info("Loading database %s", path)
        return self.parse_string(text)

    def _build_message(self, match: LineMatch) -> MessageDefinition:
        return MessageDefinition(
            frame_id=_parse_int(match.get("frame_id"), "message id"),
            name=match.get("name"),
            length=_parse_int(match.get("length"), "message length"),
            sender=match.get("sender"),
        )

    def _build_signal(self, match: LineMatch, header: MessageDefinition) -> SignalDefinition:
        if match.get("byte_order") == "0":
            raise MalformedLineError("big-endian (Motorola) signals are not supported")

        start_bit = int(match.get("start"))
        separator = match.get("separator")
        if separator == "|":
            bit_length = int(match.get("size"))
        elif separator == "-":
            end_bit = int(match.get("size"))
            if end_bit < start_bit:
                raise MalformedLineError(f"bit range {start_bit}-{end_bit} is reversed")
            bit_length = end_bit - start_bit + 1
        else:
            bit_length = 1

        receivers = [r for r in _RECEIVER_SPLIT.split(match.get("receivers")) if r]

        return SignalDefinition(
            name=match.get("name"),
            start_bit=start_bit,
            bit_length=bit_length,
            is_signed=match.get("sign") == "-",
            factor=_parse_float(match.get("factor"), "factor"),
            offset=_parse_float(match.get("offset"), "offset"),
            minimum=_parse_float(match.get("minimum"), "minimum"),
            maximum=_parse_float(match.get("maximum"), "maximum"),
            unit=match.get("unit"),
            receiver=receivers[0] if receivers else "",
            message_name=header.name,
            message_id=header.frame_id,
            multiplexer=match.get("multiplexer"),
        )


def parse_lines(lines: Iterable[str], config: Optional[CodecConfig] = None) -> ParseResult:
    return DbcParser(config).parse_lines(lines)


def parse_string(text: str, config: Optional[CodecConfig] = None) -> ParseResult:
    return DbcParser(config).parse_string(text)


def load_file(path: Path | str, config: Optional[CodecConfig] = None) -> ParseResult:
    """Read and parse a database file; see DbcParser.parse_file."""
    return DbcParser(config).parse_file(path)
