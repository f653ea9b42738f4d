"""Structured configuration codecs and default file persistence.

Provides stateless conversion between raw text and structured trees for the
supported formats, and atomic writing of a settings model's default value.
JSON is always available; YAML needs PyYAML and TOML writing needs tomli-w.
"""

import contextlib
import json
import logging
import os
import tempfile
import tomllib
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

try:
    import yaml

    YAML_AVAILABLE = True
except ImportError:
    YAML_AVAILABLE = False
    yaml = None

try:
    import tomli_w

    TOML_WRITE_AVAILABLE = True
except ImportError:
    TOML_WRITE_AVAILABLE = False
    tomli_w = None

from ..errors import ConfigurationError
from ..models.schemas import ConfigFormat, ConfigModel, construct_default, dump_model


class CodecError(ConfigurationError):
    """Exception raised when text cannot be converted to or from a format."""

    pass


class ConfigPersistenceError(ConfigurationError):
    """Exception raised when a configuration file cannot be written."""

    pass


def _require_yaml() -> None:
    if not YAML_AVAILABLE:
        raise CodecError(
            "YAML format requested but PyYAML is not installed. "
            "Install with: pip install load-config[yaml]"
        )


def _strip_nulls(data: Any) -> Any:
    """Drop ``None`` values, which TOML cannot represent."""
    if isinstance(data, dict):
        return {k: _strip_nulls(v) for k, v in data.items() if v is not None}
    if isinstance(data, list):
        return [_strip_nulls(v) for v in data if v is not None]
    return data


def serialize_data(data: dict[str, Any], format: ConfigFormat) -> str:
    """Serialize a structured tree to the specified format.

    Args:
        data: Data to serialize
        format: Target format

    Returns:
        Serialized data as string

    Raises:
        CodecError: If serialization fails or the format is not installed
    """
    format = ConfigFormat(format)

    if format == ConfigFormat.YAML:
        _require_yaml()
    elif format == ConfigFormat.TOML and not TOML_WRITE_AVAILABLE:
        raise CodecError(
            "TOML output requested but tomli-w is not installed. "
            "Install with: pip install load-config[toml]"
        )

    try:
        if format == ConfigFormat.JSON:
            return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        elif format == ConfigFormat.YAML:
            return yaml.safe_dump(
                data, default_flow_style=False, allow_unicode=True, sort_keys=False
            )
        elif format == ConfigFormat.TOML:
            return tomli_w.dumps(_strip_nulls(data))
        else:
            raise CodecError(f"Unsupported format: {format}")

    except CodecError:
        raise
    except Exception as e:
        raise CodecError(f"Failed to serialize data as {format.value}: {e}") from e


def deserialize_data(content: str, format: ConfigFormat) -> dict[str, Any]:
    """Parse text of the specified format into a structured tree.

    Args:
        content: Content to parse
        format: Source format

    Returns:
        Parsed mapping; an empty YAML document yields an empty mapping

    Raises:
        CodecError: If parsing fails, the top level is not a mapping, or the
            format is not installed
    """
    format = ConfigFormat(format)

    if format == ConfigFormat.YAML:
        _require_yaml()

    try:
        if format == ConfigFormat.JSON:
            data = json.loads(content)
        elif format == ConfigFormat.YAML:
            data = yaml.safe_load(content)
            if data is None:
                data = {}
        elif format == ConfigFormat.TOML:
            data = tomllib.loads(content)
        else:
            raise CodecError(f"Unsupported format: {format}")

    except CodecError:
        raise
    except Exception as e:
        raise CodecError(f"Failed to parse {format.value} content: {e}") from e

    if not isinstance(data, dict):
        raise CodecError(
            f"Top-level {format.value} value must be a mapping, "
            f"got: {type(data).__name__}"
        )
    return data


class ConfigPersistence:
    """Writes configuration files.

    Provides:
    - Serialization of a settings model's default value
    - Atomic writes that replace any existing file
    - Creation of missing parent directories
    """

    def __init__(
        self, encoding: str = "utf-8", logger: Optional[logging.Logger] = None
    ):
        """Initialize persistence manager.

        Args:
            encoding: File encoding to use
            logger: Logger instance (creates one if not provided)
        """
        self.encoding = encoding
        self.logger = logger or logging.getLogger(__name__)

    def _atomic_write(self, file_path: Path, content: str) -> None:
        """Perform atomic write operation.

        Args:
            file_path: Target file path
            content: Content to write

        Raises:
            ConfigPersistenceError: If write operation fails
        """
        temp_path: Optional[Path] = None
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)

            # Create temporary file in the same directory as target
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=file_path.parent,
                prefix=f".{file_path.name}.",
                suffix=".tmp",
                delete=False,
                encoding=self.encoding,
            ) as temp_file:
                temp_path = Path(temp_file.name)
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())

            temp_path.replace(file_path)
            self.logger.debug(f"Atomic write completed: {file_path}")

        except (OSError, UnicodeError) as e:
            if temp_path is not None and temp_path.exists():
                with contextlib.suppress(OSError):
                    temp_path.unlink()

            raise ConfigPersistenceError(
                f"Saving config file {file_path} failed with: {e}"
            ) from e

    def save_config(
        self,
        data: dict[str, Any],
        file_path: Union[str, Path],
        format: Optional[ConfigFormat] = None,
    ) -> Path:
        """Save a structured tree to a file, replacing any existing file.

        Args:
            data: Configuration data to save
            file_path: Path to save configuration
            format: File format (detected from the extension if None)

        Returns:
            The written path

        Raises:
            CodecError: If serialization fails
            ConfigPersistenceError: If writing fails
        """
        file_path = Path(file_path)
        if format is None:
            try:
                format = ConfigFormat.from_path(file_path)
            except ValueError as e:
                raise CodecError(str(e)) from e

        content = serialize_data(data, format)
        self._atomic_write(file_path, content)

        self.logger.info(f"Configuration saved successfully: {file_path}")
        return file_path

    def write_default(
        self,
        model: type[ConfigModel],
        file_path: Union[str, Path],
        format: ConfigFormat,
    ) -> Path:
        """Write the default value of a settings model to a file.

        Args:
            model: Settings model class
            file_path: Target path, overwritten if it exists
            format: Output format

        Returns:
            The written path

        Raises:
            CodecError: If the default cannot be constructed or serialized
            ConfigPersistenceError: If writing fails
        """
        try:
            default = construct_default(model)
        except ValidationError as e:
            raise CodecError(
                f"Constructing the default {model.__name__} failed with: {e}"
            ) from e

        return self.save_config(dump_model(default), file_path, format)
