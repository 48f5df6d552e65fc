"""Exception types raised by the parser, registry and codec."""

from __future__ import annotations

from typing import Optional


class DbcCodecError(Exception):
    """Base exception for all dbc_codec errors."""


class SourceUnreadableError(DbcCodecError, FileNotFoundError):
    """The database source could not be opened or read.

    Attributes:
        path: Path of the source that failed.
        original_error: The underlying OS error.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.original_error = original_error

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class MalformedLineError(DbcCodecError, ValueError):
    """A single database line matched a statement keyword but could not be built."""


class DefinitionError(DbcCodecError, ValueError):
    """A signal or message definition holds invalid values."""


class BufferTooShortError(DbcCodecError, ValueError):
    """The byte buffer does not cover the bits a signal occupies."""

    def __init__(self, message: str, *, required_bits: int, available_bits: int) -> None:
        super().__init__(message)
        self.required_bits = required_bits
        self.available_bits = available_bits


class ValueOutOfRangeError(DbcCodecError, ValueError):
    """A physical value cannot be represented in the signal's bit width."""

    def __init__(
        self,
        message: str,
        *,
        value: float,
        raw: Optional[int] = None,
        bit_length: int = 0,
    ) -> None:
        super().__init__(message)
        self.value = value
        self.raw = raw
        self.bit_length = bit_length
