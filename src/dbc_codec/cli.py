"""Command-line interface for dbc-codec."""

import logging
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from dbc_codec import __version__
from dbc_codec.codec.codec import encode_message
from dbc_codec.config import CodecConfig
from dbc_codec.core.frame import CAN_EXT_ID_MAX, CAN_STD_ID_MAX, CANFrame
from dbc_codec.decoder.decoder import FrameDecoder
from dbc_codec.definitions.message import DBC_EXTENDED_FLAG, MessageDefinition
from dbc_codec.definitions.samples import sample_bms_messages
from dbc_codec.errors import DbcCodecError
from dbc_codec.parser.parser import DbcParser, ParseResult
from dbc_codec.registry.registry import Registry
from dbc_codec.visualization.console import ConsoleVisualizer


console = Console()


def _parse_number(text: str) -> int:
    try:
        return int(text, 0)
    except ValueError:
        raise click.BadParameter(f"not an integer: {text!r}") from None


def _load(ctx: click.Context, dbc_file: str) -> tuple[Registry, ParseResult]:
    config: CodecConfig = ctx.obj["config"]
    try:
        result = DbcParser(config).parse_file(dbc_file)
    except DbcCodecError as exc:
        raise click.ClickException(str(exc)) from exc
    registry = Registry(config=config)
    registry.load(result)
    return registry, result


def _frame_for(message: MessageDefinition, data: bytes) -> CANFrame:
    return CANFrame(
        arbitration_id=message.can_id,
        data=data,
        is_extended_id=message.is_extended,
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--encoding", default="utf-8", show_default=True, help="Database text encoding")
@click.pass_context
def main(ctx: click.Context, verbose: bool, encoding: str) -> None:
    """dbc-codec - CAN database parsing and signal encoding/decoding."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = CodecConfig(encoding=encoding)


@main.command()
@click.argument("dbc_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--signals/--no-signals", default=True, help="List signal definitions")
@click.pass_context
def show(ctx: click.Context, dbc_file: str, signals: bool) -> None:
    """Show the messages and signals of a database."""
    registry, result = _load(ctx, dbc_file)
    visualizer = ConsoleVisualizer(console)

    visualizer.print_parse_report(result)
    visualizer.print_messages_table(registry.messages)
    if signals:
        visualizer.print_signals_table(s for m in registry.messages for s in m.signals)


@main.command()
@click.argument("dbc_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("frame_id")
@click.argument("hex_data")
@click.option("--extended/--standard", default=None, help="Frame id format (default: from id)")
@click.pass_context
def decode(
    ctx: click.Context,
    dbc_file: str,
    frame_id: str,
    hex_data: str,
    extended: Optional[bool],
) -> None:
    """Decode a payload received with FRAME_ID."""
    registry, _ = _load(ctx, dbc_file)
    arbitration_id = _parse_number(frame_id)
    if arbitration_id & DBC_EXTENDED_FLAG:
        arbitration_id &= CAN_EXT_ID_MAX
        extended = True
    if extended is None:
        extended = arbitration_id > CAN_STD_ID_MAX

    try:
        frame = CANFrame.from_hex(arbitration_id, hex_data, is_extended_id=extended)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    decoder = FrameDecoder(registry, ctx.obj["config"])
    decoded = decoder.decode_frame(frame)
    if decoded is None:
        raise click.ClickException(f"No message defined for id {arbitration_id:#x}")

    ConsoleVisualizer(console).print_decoded(decoded)
    if not decoded.ok:
        ctx.exit(1)


@main.command()
@click.argument("dbc_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("message_name")
@click.argument("assignments", nargs=-1)
@click.pass_context
def encode(ctx: click.Context, dbc_file: str, message_name: str, assignments: tuple[str, ...]) -> None:
    """Encode NAME=VALUE signal assignments into a MESSAGE_NAME payload."""
    registry, _ = _load(ctx, dbc_file)
    message = registry.by_name(message_name)
    if message is None:
        raise click.ClickException(f"No message named {message_name!r}")

    values: dict[str, float] = {}
    for assignment in assignments:
        name, sep, value = assignment.partition("=")
        if not sep:
            raise click.BadParameter(f"expected NAME=VALUE, got {assignment!r}")
        try:
            values[name] = float(value)
        except ValueError:
            raise click.BadParameter(f"not a number: {value!r}") from None

    try:
        payload = encode_message(message, values)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0])) from exc
    except DbcCodecError as exc:
        raise click.ClickException(str(exc)) from exc

    ConsoleVisualizer(console).print_frame(_frame_for(message, payload))
    click.echo(payload.hex().upper())


@main.command()
@click.argument("dbc_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def bms(ctx: click.Context, dbc_file: str) -> None:
    """List battery-management signals."""
    registry, _ = _load(ctx, dbc_file)
    signals = registry.bms_signals()
    if not signals:
        console.print("[yellow]No battery-management messages found[/yellow]")
        return
    ConsoleVisualizer(console).print_signals_table(signals, title="BMS Signals")


@main.command()
@click.pass_context
def demo(ctx: click.Context) -> None:
    """Run a decode/encode walk-through on the built-in BMS database."""
    config: CodecConfig = ctx.obj["config"]
    visualizer = ConsoleVisualizer(console)

    console.print("[bold cyan]dbc-codec Demo[/bold cyan]\n")

    console.print("[bold]1. Registering sample BMS database[/bold]")
    registry = Registry(sample_bms_messages(), config=config)
    visualizer.print_messages_table(registry.messages)

    console.print("[bold]2. Encoding frames[/bold]")
    payloads = {
        "BMS_SOC_INFO": {"SOC": 87, "SOH": 96},
        "BMS_CELL_VOLTAGES": {f"CellVoltage_{i}": 2.0 + i * 0.1 for i in range(1, 5)},
        "BMS_TEMPERATURE": {"TempSensor_1": -12, "TempSensor_2": 25, "TempSensor_3": 31, "TempSensor_4": 40},
    }
    frames = []
    for name, values in payloads.items():
        message = registry.by_name(name)
        frame = _frame_for(message, encode_message(message, values))
        visualizer.print_frame(frame)
        frames.append(frame)

    console.print("\n[bold]3. Decoding frames[/bold]")
    decoder = FrameDecoder(registry, config)
    for decoded in decoder.decode_batch(frames):
        visualizer.print_decoded(decoded)

    console.print("\n[green]Demo complete![/green]")


if __name__ == "__main__":
    main()
