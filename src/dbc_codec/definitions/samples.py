"""Built-in battery-management database used for demos and testing."""

from __future__ import annotations

from dbc_codec.definitions.message import MessageDefinition
from dbc_codec.definitions.signal import SignalDefinition


def _message(frame_id: int, name: str, signals: list[dict]) -> MessageDefinition:
    return MessageDefinition(
        frame_id=frame_id,
        name=name,
        length=8,
        sender="BMS",
        signals=tuple(
            SignalDefinition(message_name=name, message_id=frame_id, receiver="VCU", **s)
            for s in signals
        ),
    )


def sample_bms_messages() -> list[MessageDefinition]:
    """Return a small BMS database: SOC/SOH, cell voltages, temperatures, status."""
    soc = _message(0x1806E8F4, "BMS_SOC_INFO", [
        dict(name="SOC", start_bit=0, bit_length=8, maximum=100.0, unit="%"),
        dict(name="SOH", start_bit=8, bit_length=8, maximum=255.0, unit="%"),
    ])

    voltages = _message(0x1806E6F4, "BMS_CELL_VOLTAGES", [
        dict(
            name=f"CellVoltage_{i + 1}",
            start_bit=16 + i * 8,
            bit_length=8,
            factor=0.01,
            maximum=5.0,
            unit="V",
        )
        for i in range(4)
    ])

    temperatures = _message(0x1806E7F4, "BMS_TEMPERATURE", [
        dict(
            name=f"TempSensor_{i + 1}",
            start_bit=16 + i * 8,
            bit_length=8,
            is_signed=True,
            minimum=-40.0,
            maximum=125.0,
            unit="°C",
        )
        for i in range(4)
    ])

    status = _message(0x1806E5F4, "BMS_STATUS", [
        dict(name="BMS_Status", start_bit=0, bit_length=8, maximum=255.0),
    ])

    return [soc, voltages, temperatures, status]
