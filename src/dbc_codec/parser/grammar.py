"""Line recognizer for the DBC text grammar.

recognize() classifies one line and captures its fields as raw strings.
It never converts numbers; that happens when the parser builds definitions,
so a bad number rejects only the line it appears on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


class LineKind(Enum):
    """Statement kinds the parser acts on."""

    MESSAGE = "message"
    SIGNAL = "signal"
    MESSAGE_COMMENT = "message_comment"
    SIGNAL_COMMENT = "signal_comment"
    MALFORMED = "malformed"
    UNRECOGNIZED = "unrecognized"


# BO_ 2552620276 BMS_SOC_INFO: 8 BMS
MESSAGE_RE = re.compile(
    r"^BO_\s+(?P<frame_id>\S+)\s+(?P<name>\w+)\s*:\s*(?P<length>\S+)"
    r"(?:\s+(?P<sender>\w+))?\s*;?$"
)

# SG_ SOC : 0|8@1+ (1,0) [0|100] "%" VCU
# SG_ Mode M : 0-3@1+ (1,0) [0,15] "" VCU,DASH
SIGNAL_RE = re.compile(
    r"^SG_\s+(?P<name>\w+)\s*(?P<multiplexer>M|m\d+M?)?\s*:\s*"
    r"(?P<start>\d+)(?:(?P<separator>[|-])(?P<size>\d+))?\s*"
    r"@(?P<byte_order>[01])(?P<sign>[+-])\s*"
    r"\((?P<factor>[^,()]*),(?P<offset>[^()]*)\)\s*"
    r"\[(?P<minimum>[^|,\[\]]*)[|,](?P<maximum>[^\[\]]*)\]\s*"
    r"\"(?P<unit>[^\"]*)\"\s*(?P<receivers>.*)$"
)

# CM_ BO_ 2552620276 "State of charge frame";
MESSAGE_COMMENT_RE = re.compile(
    r"^CM_\s+BO_\s+(?P<frame_id>\S+)\s+\"(?P<text>[^\"]*)(?:\"\s*;?)?"
)

# CM_ SG_ 2552620276 SOC "State of charge";
SIGNAL_COMMENT_RE = re.compile(
    r"^CM_\s+SG_\s+(?P<frame_id>\S+)\s+(?P<signal>\w+)\s+\"(?P<text>[^\"]*)(?:\"\s*;?)?"
)

_GRAMMARS: tuple[tuple[LineKind, re.Pattern[str]], ...] = (
    (LineKind.MESSAGE, MESSAGE_RE),
    (LineKind.SIGNAL, SIGNAL_RE),
    (LineKind.MESSAGE_COMMENT, MESSAGE_COMMENT_RE),
    (LineKind.SIGNAL_COMMENT, SIGNAL_COMMENT_RE),
)

# Lines starting like a statement we act on but failing its grammar
_KEYWORDS = re.compile(r"^(BO_|SG_|CM_\s+(?:BO_|SG_))\s")


@dataclass(frozen=True)
class LineMatch:
    """Result of recognizing a single line."""

    kind: LineKind
    text: str
    fields: dict[str, str] = field(default_factory=dict)

    def get(self, name: str, default: str = "") -> str:
        value = self.fields.get(name)
        return default if value is None else value


def recognize(line: str) -> LineMatch:
    """Classify one line of database text."""
    text = line.strip()
    if not text or text.startswith("//"):
        return LineMatch(LineKind.UNRECOGNIZED, text)

    for kind, pattern in _GRAMMARS:
        match = pattern.match(text)
        if match:
            fields = {k: v for k, v in match.groupdict().items() if v is not None}
            return LineMatch(kind, text, fields)

    keyword = _KEYWORDS.match(text)
    if keyword:
        return LineMatch(LineKind.MALFORMED, text, {"statement": keyword.group(1)})
    return LineMatch(LineKind.UNRECOGNIZED, text)
