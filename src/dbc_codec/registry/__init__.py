"""Definition registry."""

from dbc_codec.registry.registry import Registry, load_registry

__all__ = ["Registry", "load_registry"]
