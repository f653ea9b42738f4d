"""Environment variable configuration loader.

Supports loading configuration from environment variables with prefix
filtering and nested structure support.
"""

import json
import logging
import os
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from ..models.schemas import EnvSource

logger = logging.getLogger(__name__)


def model_field_keys(model: Optional[type]) -> Optional[dict[str, str]]:
    """Map lower-cased top-level field names and aliases to validation keys.

    A field is validated under its alias when it has one, so both its name
    and its alias map to the alias.

    Returns None when there is no model, meaning every key is accepted.
    """
    if model is None:
        return None

    fields = getattr(model, "model_fields", None)
    if fields is None:
        return None

    keys = {}
    for name, info in fields.items():
        alias = getattr(info, "alias", None)
        key = alias or name
        keys[name.lower()] = key
        if alias:
            keys[alias.lower()] = key
    return keys


def model_field_names(model: Optional[type]) -> Optional[set[str]]:
    """Lower-cased top-level field names and aliases of a settings model."""
    keys = model_field_keys(model)
    return set(keys) if keys is not None else None


class EnvironmentLoader:
    """Environment variable configuration loader.

    Supports:
    - Prefix filtering, with the prefix stripped from keys
    - Nested dictionary structure from a separator (``A__B`` -> ``a.b``)
    - Restriction to the top-level fields of a settings model
    - JSON values for list and mapping fields
    """

    def __init__(
        self,
        prefix: str = "",
        nested_separator: str = "__",
        field_names: Optional[Iterable[str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        field_keys: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the environment loader.

        Args:
            prefix: Prefix for environment variables
            nested_separator: Separator for nested keys
            field_names: Accepted top-level keys (None accepts all)
            environ: Environment mapping to read (defaults to ``os.environ``,
                read at load time)
            field_keys: Accepted top-level keys mapped to the key they are
                stored under; takes the place of ``field_names``
        """
        if not nested_separator:
            raise ValueError("nested_separator must not be empty")

        self.prefix = prefix
        self.nested_separator = nested_separator
        if field_keys is not None:
            self.field_keys = {k.lower(): v for k, v in field_keys.items()}
        elif field_names is not None:
            self.field_keys = {name.lower(): name.lower() for name in field_names}
        else:
            self.field_keys = None
        self.field_names = set(self.field_keys) if self.field_keys is not None else None
        self._environ = environ

    @classmethod
    def from_source(
        cls, source: EnvSource, model: Optional[type] = None
    ) -> "EnvironmentLoader":
        """Create a loader for an environment source and settings model."""
        return cls(
            prefix=source.prefix,
            nested_separator=source.nested_separator,
            field_keys=model_field_keys(model),
        )

    def load_environment(self) -> dict[str, Any]:
        """Load configuration from environment variables.

        Returns:
            Configuration dictionary with nested structure, possibly empty
        """
        environ = self._environ if self._environ is not None else os.environ
        config: dict[str, Any] = {}
        loaded = 0

        # Sorted so that a flat key and a nested key for the same name resolve
        # the same way on every call
        for env_key in sorted(environ):
            if not env_key.startswith(self.prefix):
                continue

            segments = self._env_key_to_segments(env_key)
            if not segments:
                continue

            if self.field_keys is not None:
                if segments[0] not in self.field_keys:
                    continue
                segments[0] = self.field_keys[segments[0]]

            value = self._convert_value(environ[env_key])
            self._set_nested_value(config, segments, value)
            loaded += 1

            logger.debug(f"Loaded env var: {env_key} -> {'.'.join(segments)}")

        logger.debug(f"Loaded {loaded} environment variables")
        return config

    def _env_key_to_segments(self, env_key: str) -> list[str]:
        """Convert environment variable name to config key segments."""
        remainder = env_key[len(self.prefix) :]
        return [p.lower() for p in remainder.split(self.nested_separator) if p]

    def _convert_value(self, value: str) -> Any:
        """Convert a raw value.

        Values stay strings, which pydantic coerces to the field type, except
        JSON arrays and objects, which become lists and dicts.
        """
        stripped = value.strip()
        if stripped.startswith(("{", "[")):
            try:
                return json.loads(stripped)
            except json.JSONDecodeError:
                pass
        return value

    def _set_nested_value(
        self, config: dict[str, Any], segments: list[str], value: Any
    ) -> None:
        """Set a nested value in the configuration dictionary."""
        current = config

        # Navigate to the parent of the target key
        for k in segments[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]

        leaf = segments[-1]
        if isinstance(current.get(leaf), dict) and not isinstance(value, dict):
            # A nested variable already populated this key
            return
        current[leaf] = value
