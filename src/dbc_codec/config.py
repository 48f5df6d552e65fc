"""Runtime configuration shared by the parser, registry and decoder."""

from dataclasses import dataclass


@dataclass
class CodecConfig:
    """Configuration for loading databases and presenting decoded values."""

    encoding: str = "utf-8"
    display_precision: int = 2
    bms_prefixes: tuple[str, ...] = ("BMS",)
    bms_nodes: tuple[str, ...] = ("BMS",)

    def __post_init__(self) -> None:
        if self.display_precision < 0:
            raise ValueError(
                f"display_precision must be non-negative, got {self.display_precision}"
            )
