"""Configuration merger with source precedence.

Resolves an ordered list of configuration sources and deep-merges their
structured trees. The first source in the list has the highest priority: a
field it sets is never overwritten by a later source, while fields it leaves
unset fall through to the next one.
"""

import copy
import logging
from collections.abc import Sequence
from typing import Any, Optional, Union

from ..models.schemas import (
    ABSENT,
    Absent,
    ConfigModel,
    DefaultSource,
    EnvSource,
    MergeRecord,
    Source,
    SourceFile,
    construct_default,
    describe_source,
    dump_model,
)
from .env import EnvironmentLoader
from .file import FileLoader

logger = logging.getLogger(__name__)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Mappings present on both sides are merged recursively; any other value in
    ``override`` replaces the one in ``base`` wholesale. Neither input is
    modified.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result


class ConfigurationMerger:
    """Resolves configuration sources and merges them by precedence.

    Supports:
    - Default, environment and file sources
    - Missing files contributing nothing
    - A history of the sources taking part in the last merges
    """

    def __init__(
        self, model: Optional[type[ConfigModel]] = None, encoding: str = "utf-8"
    ):
        """Initialize the configuration merger.

        Args:
            model: Settings model class, needed by default sources and used to
                select environment variables
            encoding: File encoding used by file sources
        """
        self.model = model
        self.file_loader = FileLoader(encoding=encoding)
        self._merge_history: list[MergeRecord] = []

    def resolve(self, source: Source) -> Union[dict[str, Any], Absent]:
        """Produce the structured tree of a single source.

        Args:
            source: Source to resolve

        Returns:
            Structured tree, or ``ABSENT`` if the source contributes nothing

        Raises:
            FileLoadError: If a file exists but cannot be read
            FormatError: If a file does not parse as its format
            TypeError: If the source is not a known source type, or a default
                source is used without a model
        """
        if isinstance(source, DefaultSource):
            if self.model is None:
                raise TypeError("A default source requires a settings model")
            return dump_model(construct_default(self.model))

        if isinstance(source, EnvSource):
            return EnvironmentLoader.from_source(source, self.model).load_environment()

        if isinstance(source, SourceFile):
            return self.file_loader.resolve(source)

        raise TypeError(f"Unknown configuration source: {source!r}")

    def merge(self, sources: Sequence[Source]) -> dict[str, Any]:
        """Resolve and merge sources, earlier sources taking precedence.

        Args:
            sources: Sources ordered from highest to lowest priority

        Returns:
            Merged configuration dictionary; empty if every source is absent

        Raises:
            FileLoadError: If a file source exists but cannot be read
            FormatError: If a file source does not parse as its format
        """
        resolved = []
        for priority, source in enumerate(sources):
            tree = self.resolve(source)
            logger.debug(
                f"Resolved {describe_source(source)}: "
                f"{'absent' if tree is ABSENT else f'{len(tree)} keys'}"
            )
            resolved.append((priority, source, tree))

        result: dict[str, Any] = {}

        # Lowest priority first, so that higher priority leaves overwrite
        for priority, source, tree in reversed(resolved):
            if tree is ABSENT:
                self._merge_history.append(
                    MergeRecord(source=source, absent=True, priority=priority)
                )
                continue

            result = self.merge_two(result, tree)
            self._merge_history.append(
                MergeRecord(
                    source=source, absent=False, keys=list(tree), priority=priority
                )
            )

        contributing = [s for _, s, t in resolved if t is not ABSENT]
        logger.info(
            f"Merged {len(contributing)} of {len(resolved)} configuration sources: "
            f"{[describe_source(s) for s in contributing]}"
        )
        return result

    def merge_two(
        self, base: dict[str, Any], override: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge two configuration dictionaries, override taking precedence."""
        return deep_merge(base, override)

    def get_merge_history(self) -> list[MergeRecord]:
        """Get the history of merged sources, lowest priority first.

        Returns:
            List of merge records
        """
        return copy.deepcopy(self._merge_history)

    def clear_history(self):
        """Clear the merge history."""
        self._merge_history.clear()
