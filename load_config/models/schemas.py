"""Configuration source descriptors and model capabilities.

This module defines the data types shared by the loaders, providing:
- The supported structured file formats
- The closed set of configuration sources (default, environment, file)
- The capability protocol a caller's settings model must satisfy
- Merge history records for diagnostics
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable

from pydantic import Secret, SecretBytes, SecretStr, TypeAdapter

# =============================================================================
# Formats
# =============================================================================


class ConfigFormat(str, Enum):
    """Structured configuration file format enumeration."""

    JSON = "json"
    TOML = "toml"
    YAML = "yaml"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ConfigFormat":
        """Detect the format from a file extension.

        Args:
            path: File path

        Returns:
            Detected format

        Raises:
            ValueError: If the extension is not a supported format
        """
        suffix = Path(path).suffix.lower()

        format_map = {
            ".json": cls.JSON,
            ".toml": cls.TOML,
            ".yaml": cls.YAML,
            ".yml": cls.YAML,
        }

        if suffix in format_map:
            return format_map[suffix]

        raise ValueError(f"Unsupported file format: {suffix or path}")


# =============================================================================
# Sources
# =============================================================================


@dataclass(frozen=True)
class DefaultSource:
    """The settings model's default value."""


@dataclass(frozen=True)
class EnvSource:
    """Process environment variables.

    Attributes:
        prefix: Only variables starting with this prefix are read; it is
            stripped before the name is mapped to a field
        nested_separator: Separator addressing nested fields, so that
            ``DATABASE__HOST`` maps to ``database.host``
    """

    prefix: str = ""
    nested_separator: str = "__"


@dataclass(frozen=True)
class SourceFile:
    """Structured configuration file of a given format.

    The path does not need to exist; a missing file contributes nothing.
    """

    format: ConfigFormat
    path: Path

    def __post_init__(self):
        object.__setattr__(self, "format", ConfigFormat(self.format))
        object.__setattr__(self, "path", Path(self.path))

    @classmethod
    def json(cls, path: Union[str, Path]) -> "SourceFile":
        return cls(ConfigFormat.JSON, Path(path))

    @classmethod
    def toml(cls, path: Union[str, Path]) -> "SourceFile":
        return cls(ConfigFormat.TOML, Path(path))

    @classmethod
    def yaml(cls, path: Union[str, Path]) -> "SourceFile":
        return cls(ConfigFormat.YAML, Path(path))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceFile":
        """Create a file source with the format detected from the extension."""
        return cls(ConfigFormat.from_path(path), Path(path))

    def __str__(self) -> str:
        return f"{self.format.value} file {self.path}"


Source = Union[DefaultSource, EnvSource, SourceFile]


class Absent:
    """Marker for a source that contributes nothing."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = Absent()


def describe_source(source: Source) -> str:
    """Human readable name of a source for logs and error messages."""
    if isinstance(source, DefaultSource):
        return "defaults"
    if isinstance(source, EnvSource):
        return f"environment (prefix={source.prefix!r})"
    if isinstance(source, SourceFile):
        return str(source)
    raise TypeError(f"Unknown configuration source: {source!r}")


# =============================================================================
# Settings model capabilities
# =============================================================================


@runtime_checkable
class ConfigModel(Protocol):
    """Capabilities required from a caller's settings model.

    Pydantic models satisfy this protocol. A model may additionally define a
    ``default()`` classmethod when some of its fields are required, to
    provide the template written to a generated default file.
    """

    @classmethod
    def model_validate(cls, obj: Any) -> "ConfigModel": ...

    def model_dump(
        self, *, mode: str = "python", by_alias: bool = False, round_trip: bool = False
    ) -> dict[str, Any]: ...


_JSON_TREE = TypeAdapter(dict[str, Any])


def construct_default(model: type[ConfigModel]) -> ConfigModel:
    """Construct the default value of a settings model.

    Args:
        model: Settings model class

    Returns:
        The model's ``default()`` if it defines one, otherwise ``model()``

    Raises:
        pydantic.ValidationError: If the model has required fields and no
            ``default()``
    """
    factory = getattr(model, "default", None)
    if callable(factory):
        return factory()
    return model()


def _reveal_secrets(data: Any) -> Any:
    if isinstance(data, (Secret, SecretStr, SecretBytes)):
        return data.get_secret_value()
    if isinstance(data, dict):
        return {k: _reveal_secrets(v) for k, v in data.items()}
    if isinstance(data, (list, tuple, set, frozenset)):
        return [_reveal_secrets(v) for v in data]
    return data


def dump_model(value: ConfigModel) -> dict[str, Any]:
    """Serialize a settings model instance to a structured tree.

    The tree is keyed by alias and carries the real value of secret fields,
    so that validating it again yields an equal model.
    """
    tree = value.model_dump(mode="python", by_alias=True, round_trip=True)
    return _JSON_TREE.dump_python(_reveal_secrets(tree), mode="json")


# =============================================================================
# Merge diagnostics
# =============================================================================


@dataclass
class MergeRecord:
    """Record of one source taking part in a merge."""

    source: Source
    absent: bool
    keys: list[str] = field(default_factory=list)
    priority: Optional[int] = None
