"""Definition registry: indexed, atomically replaceable message lookup."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Mapping, Optional

from dbc_codec.config import CodecConfig
from dbc_codec.definitions.message import DBC_EXTENDED_FLAG, MessageDefinition
from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.parser.parser import DbcParser, ParseResult

if TYPE_CHECKING:
    from dbc_codec.core.frame import CANFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """One complete, never-mutated view of a loaded database."""

    messages: tuple[MessageDefinition, ...] = ()
    by_id: Mapping[int, MessageDefinition] = field(default_factory=dict)
    by_name: Mapping[str, MessageDefinition] = field(default_factory=dict)
    message_comments: Mapping[int, str] = field(default_factory=dict)
    signal_comments: Mapping[str, str] = field(default_factory=dict)


def _build_snapshot(
    messages: Iterable[MessageDefinition],
    message_comments: Optional[Mapping[int, str]],
    signal_comments: Optional[Mapping[str, str]],
) -> _Snapshot:
    by_id: dict[int, MessageDefinition] = {}
    by_name: dict[str, MessageDefinition] = {}

    for message in messages:
        # A later definition replaces any earlier one sharing its id or name
        for stale in (by_id.get(message.frame_id), by_name.get(message.name)):
            if stale is not None and stale is not message:
                logger.warning(
                    "Message %s (%#x) replaces earlier definition %s (%#x)",
                    message.name, message.frame_id, stale.name, stale.frame_id,
                )
                by_id.pop(stale.frame_id, None)
                by_name.pop(stale.name, None)
        by_id[message.frame_id] = message
        by_name[message.name] = message

    return _Snapshot(
        messages=tuple(by_id.values()),
        by_id=by_id,
        by_name=by_name,
        message_comments=dict(message_comments or {}),
        signal_comments=dict(signal_comments or {}),
    )


class Registry:
    """Lookup of message definitions by id and by name.

    The registry holds a single immutable snapshot. register() builds a
    complete replacement and swaps it in one assignment, so concurrent
    readers see either the previous database or the new one, never a mix.
    Writers are serialized by a lock; readers never block.
    """

    def __init__(
        self,
        messages: Optional[Iterable[MessageDefinition]] = None,
        config: Optional[CodecConfig] = None,
    ) -> None:
        self._config = config or CodecConfig()
        self._write_lock = threading.Lock()
        self._snapshot = _Snapshot()
        if messages is not None:
            self.register(messages)

    @property
    def messages(self) -> tuple[MessageDefinition, ...]:
        """Registered messages in registration order.

        A message that replaced an earlier duplicate sits at the position of
        its own (later) definition.
        """
        return self._snapshot.messages

    @property
    def registered_ids(self) -> set[int]:
        return set(self._snapshot.by_id.keys())

    def __len__(self) -> int:
        return len(self._snapshot.messages)

    def __iter__(self) -> Iterator[MessageDefinition]:
        return iter(self._snapshot.messages)

    def __contains__(self, frame_id: object) -> bool:
        return frame_id in self._snapshot.by_id

    def register(
        self,
        messages: Iterable[MessageDefinition],
        message_comments: Optional[Mapping[int, str]] = None,
        signal_comments: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Replace the registry contents with ``messages``."""
        snapshot = _build_snapshot(messages, message_comments, signal_comments)
        with self._write_lock:
            self._snapshot = snapshot
        logger.info("Registered %d messages", len(snapshot.messages))

    def load(self, result: ParseResult) -> None:
        """Register a parse result together with its comments."""
        self.register(result.messages, result.message_comments, result.signal_comments)

    def clear(self) -> None:
        """Unload the current database."""
        with self._write_lock:
            self._snapshot = _Snapshot()
        logger.info("Registry cleared")

    def by_id(self, frame_id: int) -> Optional[MessageDefinition]:
        return self._snapshot.by_id.get(frame_id)

    def by_name(self, name: str) -> Optional[MessageDefinition]:
        return self._snapshot.by_name.get(name)

    def find_for_frame(self, frame: CANFrame) -> Optional[MessageDefinition]:
        """Find the definition for a received frame.

        Extended frames also match ids stored with the DBC extended flag.
        """
        snapshot = self._snapshot
        message = snapshot.by_id.get(frame.arbitration_id)
        if message is None and frame.is_extended_id:
            message = snapshot.by_id.get(frame.arbitration_id | DBC_EXTENDED_FLAG)
        return message

    def filter(
        self,
        predicate: Callable[[MessageDefinition], bool],
    ) -> list[MessageDefinition]:
        """Messages for which ``predicate`` is true, in ``messages`` order."""
        return [m for m in self._snapshot.messages if predicate(m)]

    def get_signal(self, signal_id: str) -> Optional[SignalDefinition]:
        """Look up a signal by ``<message>.<signal>``."""
        message_name, _, signal_name = signal_id.partition(".")
        message = self.by_name(message_name)
        if message is None or not signal_name:
            return None
        return message.get_signal(signal_name)

    def is_bms_message(self, message: MessageDefinition) -> bool:
        """True if the message belongs to the battery-management subsystem."""
        name = message.name.upper()
        if any(name.startswith(p.upper()) for p in self._config.bms_prefixes):
            return True
        sender = message.sender.upper()
        return any(sender == n.upper() for n in self._config.bms_nodes)

    def bms_messages(self) -> list[MessageDefinition]:
        return self.filter(self.is_bms_message)

    def bms_signals(self) -> list[SignalDefinition]:
        """All signals carried by battery-management messages."""
        return [s for m in self.bms_messages() for s in m.signals]

    def comment_for(self, frame_id: int, signal_name: Optional[str] = None) -> Optional[str]:
        snapshot = self._snapshot
        if signal_name is None:
            return snapshot.message_comments.get(frame_id)
        return snapshot.signal_comments.get(f"{frame_id}.{signal_name}")


def load_registry(
    path: Path | str,
    registry: Optional[Registry] = None,
    config: Optional[CodecConfig] = None,
) -> Registry:
    """Parse a database file and register it.

    An existing registry is only replaced once the whole file parsed; if the
    file cannot be read, the registry keeps its previous contents.
    """
    result = DbcParser(config).parse_file(path)
    if registry is None:
        registry = Registry(config=config)
    registry.load(result)
    return registry
