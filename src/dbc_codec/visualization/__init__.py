"""Visualization components."""

from dbc_codec.visualization.console import ConsoleVisualizer

__all__ = ["ConsoleVisualizer"]
