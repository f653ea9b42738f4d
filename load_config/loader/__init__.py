"""Configuration loader package.

This package provides loaders for the individual configuration sources and a
merger that combines them with source precedence:
- Defaults of the settings model
- Environment variables, optionally prefixed and nested
- JSON, TOML and YAML files
"""

from .env import EnvironmentLoader
from .file import (
    FileAccessError,
    FileFormatError,
    FileLoader,
    FileLoadError,
    FormatError,
)
from .merger import ConfigurationMerger, deep_merge

__all__ = [
    "ConfigurationMerger",
    "EnvironmentLoader",
    "FileAccessError",
    "FileFormatError",
    "FileLoadError",
    "FileLoader",
    "FormatError",
    "deep_merge",
]
