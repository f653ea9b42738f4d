"""Typed configuration loading from ordered, layered sources.

Merges defaults, environment variables and JSON, TOML or YAML files into a
pydantic settings model. Earlier sources take precedence over later ones, and
a default configuration file can be written when loading fails.
"""

from .errors import ConfigurationError
from .loader.file import FileAccessError, FileFormatError, FileLoadError, FormatError
from .manager import (
    ConfigLoader,
    DefaultConfigGeneratedError,
    DefaultConfigGenerationFailedError,
    DeserializationError,
    LoadError,
    SourceResolutionError,
    load_config,
)
from .models.schemas import (
    ConfigFormat,
    DefaultSource,
    EnvSource,
    Source,
    SourceFile,
)
from .storage.persistence import CodecError, ConfigPersistenceError

__version__ = "1.2.1"

__all__ = [
    "CodecError",
    "ConfigFormat",
    "ConfigLoader",
    "ConfigPersistenceError",
    "ConfigurationError",
    "DefaultConfigGeneratedError",
    "DefaultConfigGenerationFailedError",
    "DefaultSource",
    "DeserializationError",
    "EnvSource",
    "FileAccessError",
    "FileFormatError",
    "FileLoadError",
    "FormatError",
    "LoadError",
    "Source",
    "SourceFile",
    "SourceResolutionError",
    "load_config",
]
