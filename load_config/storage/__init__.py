"""Structured configuration codecs and file persistence."""

from .persistence import (
    TOML_WRITE_AVAILABLE,
    YAML_AVAILABLE,
    CodecError,
    ConfigPersistence,
    ConfigPersistenceError,
    deserialize_data,
    serialize_data,
)

__all__ = [
    "CodecError",
    "ConfigPersistence",
    "ConfigPersistenceError",
    "TOML_WRITE_AVAILABLE",
    "YAML_AVAILABLE",
    "deserialize_data",
    "serialize_data",
]
