"""File-based configuration loader.

Resolves file sources in JSON, TOML or YAML into structured trees. A file
that does not exist contributes nothing; a file that exists but cannot be
read or parsed is an error.
"""

import logging
from pathlib import Path
from typing import Any, Union

from ..errors import ConfigurationError
from ..models.schemas import ABSENT, Absent, ConfigFormat, SourceFile
from ..storage.persistence import CodecError, deserialize_data

logger = logging.getLogger(__name__)


class FileLoadError(ConfigurationError):
    """Exception raised when an existing file cannot be read."""

    def __init__(self, message: str, path: Path):
        super().__init__(message)
        self.path = path


class FormatError(ConfigurationError):
    """Exception raised when file content is invalid for its format."""

    def __init__(self, message: str, path: Path, format: ConfigFormat):
        super().__init__(message)
        self.path = path
        self.format = format


FileAccessError = FileLoadError
FileFormatError = FormatError


class FileLoader:
    """Configuration file loader for JSON, TOML and YAML.

    Every call reads the file afresh; nothing is cached between calls.
    """

    def __init__(self, encoding: str = "utf-8"):
        """Initialize the file loader.

        Args:
            encoding: File encoding to use
        """
        self.encoding = encoding

    def resolve(self, source: SourceFile) -> Union[dict[str, Any], Absent]:
        """Resolve a file source.

        Args:
            source: File source to resolve

        Returns:
            Parsed configuration mapping, or ``ABSENT`` if the file does not exist

        Raises:
            FileLoadError: If the path exists but cannot be read
            FormatError: If the content does not parse as the source's format
        """
        return self.load_file(source.path, source.format)

    def load_file(
        self, file_path: Union[str, Path], format: ConfigFormat
    ) -> Union[dict[str, Any], Absent]:
        """Load configuration from a single file.

        Args:
            file_path: Path to configuration file
            format: File format

        Returns:
            Configuration dictionary, or ``ABSENT`` if the file does not exist

        Raises:
            FileLoadError: If the path exists but cannot be read
            FormatError: If the content does not parse as ``format``
        """
        path = Path(file_path)
        format = ConfigFormat(format)

        try:
            if not path.exists():
                logger.debug(f"Configuration file not found, skipping: {path}")
                return ABSENT

            if not path.is_file():
                raise FileLoadError(f"Path is not a file: {path}", path)

            raw = path.read_bytes()
        except OSError as e:
            raise FileLoadError(f"Failed to read file {path}: {e}", path) from e

        try:
            content = raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise FormatError(
                f"Failed to decode {path} as {self.encoding}: {e}", path, format
            ) from e

        try:
            config = deserialize_data(content, format)
        except CodecError as e:
            raise FormatError(
                f"Invalid {format.value} in {path}: {e}", path, format
            ) from e

        logger.info(f"Loaded configuration from {path} ({format.value})")
        return config
