"""Main configuration loading module.

Runs the merge over an ordered list of sources, validates the result into the
caller's settings model and, when validation fails, optionally writes a
default configuration file for the operator to edit.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Generic, NoReturn, Optional, TypeVar

from pydantic import ValidationError

from .errors import ConfigurationError
from .loader.file import FileLoadError, FormatError
from .loader.merger import ConfigurationMerger
from .models.schemas import ConfigFormat, ConfigModel, Source, SourceFile
from .storage.persistence import CodecError, ConfigPersistence, ConfigPersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=ConfigModel)


class LoadError(ConfigurationError):
    """Base exception for a failed ``load`` call."""

    pass


class SourceResolutionError(LoadError):
    """A source could not be resolved; the cause is a file error."""

    def __init__(self, source_error: ConfigurationError):
        super().__init__(f"Loading config failed with: {source_error}")
        self.source_error = source_error


class DeserializationError(LoadError):
    """The merged configuration does not validate against the settings model."""

    def __init__(self, validation_error: ValidationError):
        super().__init__(f"Loading config failed with: {validation_error}")
        self.validation_error = validation_error


class DefaultConfigGeneratedError(DeserializationError):
    """Validation failed and a default configuration file was written.

    The operator is expected to edit the file and run again; the call that
    wrote it never returns a configuration.
    """

    def __init__(
        self, validation_error: ValidationError, path: Path, format: ConfigFormat
    ):
        super().__init__(validation_error)
        self.args = (
            f"Loading config failed; created default config file at \"{path}\": "
            f"{validation_error}",
        )
        self.path = path
        self.format = format


class DefaultConfigGenerationFailedError(DeserializationError):
    """Validation failed and writing the default configuration file failed too."""

    def __init__(
        self,
        validation_error: ValidationError,
        write_error: ConfigurationError,
        path: Path,
    ):
        super().__init__(validation_error)
        self.args = (
            f"Loading config failed with: {validation_error}\n"
            f"Creating default config file at \"{path}\" failed with: {write_error}",
        )
        self.write_error = write_error
        self.path = path


class ConfigLoader(Generic[T]):
    """Loads a settings model from ordered configuration sources.

    Each ``load`` call reads the environment and files afresh and keeps no
    state for later calls.
    """

    def __init__(self, model: type[T], encoding: str = "utf-8"):
        """Initialize the configuration loader.

        Args:
            model: Settings model class (a pydantic model)
            encoding: Encoding of configuration files, read and written
        """
        self.model = model
        self.encoding = encoding

    def load(
        self,
        sources: Sequence[Source],
        fallback: Optional[SourceFile] = None,
    ) -> T:
        """Load the configuration, preferring earlier sources.

        Args:
            sources: Sources ordered from highest to lowest priority
            fallback: File to write the default configuration to if the merged
                configuration does not validate; overwritten if it exists

        Returns:
            Validated settings model instance

        Raises:
            SourceResolutionError: If a file source exists but cannot be read
                or parsed
            DeserializationError: If validation fails and there is no fallback
            DefaultConfigGeneratedError: If validation fails and the default
                file was written
            DefaultConfigGenerationFailedError: If validation fails and the
                default file could not be written
        """
        merger = ConfigurationMerger(self.model, encoding=self.encoding)

        try:
            merged = merger.merge(sources)
            config = self.model.model_validate(merged)
        except (FileLoadError, FormatError) as e:
            logger.error(f"Loading config failed with: {e}")
            raise SourceResolutionError(e) from e
        except ValidationError as e:
            # Raised by validation, or by a default source whose model has
            # required fields and no default()
            logger.error(f"Loading config failed with: {e}")
            if fallback is None:
                raise DeserializationError(e) from e
            self._generate_default(e, fallback)

        logger.debug(f"Loaded {config!r}.")
        return config

    def _generate_default(
        self, validation_error: ValidationError, fallback: SourceFile
    ) -> NoReturn:
        """Write the default configuration file and raise the matching signal."""
        persistence = ConfigPersistence(encoding=self.encoding, logger=logger)

        try:
            persistence.write_default(self.model, fallback.path, fallback.format)
        except (CodecError, ConfigPersistenceError) as e:
            logger.error(
                f"Creating default config file at \"{fallback.path}\" failed with: {e}"
            )
            raise DefaultConfigGenerationFailedError(
                validation_error, e, fallback.path
            ) from e

        logger.warning(
            f"Created default config file at \"{fallback.path}\". "
            "Edit it and run again."
        )
        raise DefaultConfigGeneratedError(
            validation_error, fallback.path, fallback.format
        ) from validation_error


def load_config(
    model: type[T],
    sources: Sequence[Source],
    fallback: Optional[SourceFile] = None,
    *,
    encoding: str = "utf-8",
) -> T:
    """Load a settings model from sources, preferring earlier sources.

    See ``ConfigLoader.load`` for the arguments and errors.
    """
    return ConfigLoader(model, encoding=encoding).load(sources, fallback)
