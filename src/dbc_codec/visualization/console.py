"""Console rendering of databases and decoded frames using Rich."""

from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dbc_codec.core.frame import CANFrame
from dbc_codec.decoder.decoder import DecodedMessage
from dbc_codec.definitions.message import MessageDefinition
from dbc_codec.definitions.signal import SignalDefinition
from dbc_codec.parser.parser import ParseResult


def _format_number(value: float) -> str:
    return f"{value:g}"


class ConsoleVisualizer:
    """Renders CAN database content and decoded values to the console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def print_frame(self, frame: CANFrame) -> None:
        """Print a single CAN frame."""
        id_str = f"{frame.arbitration_id:#010x}" if frame.is_extended_id else f"{frame.arbitration_id:#05x}"
        data_str = " ".join(f"{b:02X}" for b in frame.data)

        self.console.print(
            f"[cyan]{id_str}[/cyan] "
            f"[dim]DLC={frame.dlc}[/dim] "
            f"[green]{data_str}[/green]"
        )

    def print_decoded(self, message: DecodedMessage) -> None:
        """Print a decoded message as a table of signals."""
        table = Table(title=f"{message.name} [{message.frame_id:#x}]")

        table.add_column("Signal", style="cyan")
        table.add_column("Raw", justify="right")
        table.add_column("Value", justify="right")
        table.add_column("Range")

        for signal in message.signals.values():
            table.add_row(
                signal.name,
                str(signal.raw_value),
                signal.formatted,
                "[green]ok[/green]" if signal.in_range else "[yellow]out of range[/yellow]",
            )
        for name, error in message.errors.items():
            table.add_row(name, "-", "-", f"[red]{escape(error)}[/red]")
        for name in message.inactive:
            table.add_row(name, "-", "-", "[dim]inactive[/dim]")

        self.console.print(table)

    def print_messages_table(self, messages: Iterable[MessageDefinition]) -> None:
        """Print a table of message definitions."""
        table = Table(title="Messages")

        table.add_column("ID", style="cyan")
        table.add_column("Name")
        table.add_column("Length", justify="right")
        table.add_column("Sender")
        table.add_column("Signals", justify="right")

        for message in messages:
            table.add_row(
                f"{message.frame_id:#x}",
                message.name,
                str(message.length),
                message.sender or "-",
                str(len(message.signals)),
            )

        self.console.print(table)

    def print_signals_table(self, signals: Iterable[SignalDefinition], title: str = "Signals") -> None:
        """Print a table of signal definitions."""
        table = Table(title=title)

        table.add_column("Message", style="cyan")
        table.add_column("Signal")
        table.add_column("Bits", justify="right")
        table.add_column("Sign")
        table.add_column("Factor", justify="right")
        table.add_column("Offset", justify="right")
        table.add_column("Range")
        table.add_column("Unit")
        table.add_column("Receiver")

        for signal in signals:
            table.add_row(
                signal.message_name,
                signal.name,
                f"{signal.start_bit}|{signal.bit_length}",
                "-" if signal.is_signed else "+",
                _format_number(signal.factor),
                _format_number(signal.offset),
                f"[{_format_number(signal.minimum)}, {_format_number(signal.maximum)}]",
                signal.unit,
                signal.receiver or "-",
            )

        self.console.print(table)

    def print_parse_report(self, result: ParseResult) -> None:
        """Print a summary of a parse, with malformed lines as warnings."""
        signal_count = sum(len(m.signals) for m in result.messages)
        panel = Panel(
            f"Messages: {len(result.messages)}\n"
            f"Signals: {signal_count}\n"
            f"Comments: {len(result.message_comments) + len(result.signal_comments)}\n"
            f"Ignored lines: {result.ignored_count}\n"
            f"Malformed lines: {result.malformed_count}",
            title="Parse Report",
        )
        self.console.print(panel)

        for entry in result.malformed:
            self.console.print(
                f"[yellow]WARNING[/yellow] line {entry.line_number}: "
                f"{escape(entry.reason)} [dim]{escape(entry.text)}[/dim]",
                highlight=False,
            )
