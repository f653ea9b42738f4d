"""Tests for environment variable configuration loader.

Tests prefix filtering, nested structure support, and field selection.
"""

import os

import pytest
from pydantic import BaseModel, Field

from load_config.loader.env import (
    EnvironmentLoader,
    model_field_keys,
    model_field_names,
)
from load_config.models.schemas import EnvSource


class Settings(BaseModel):
    name: str = "app"
    database: dict = Field(default_factory=dict)
    api_key: str = Field(default="", alias="apikey")


class CamelSettings(BaseModel):
    name: str = "app"
    api_key: str = Field(default="", alias="apiKey")


class TestEnvironmentLoader:
    """Test cases for EnvironmentLoader class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.loader = EnvironmentLoader(prefix="LCTEST_")
        # Save original environment
        self.original_env = os.environ.copy()

    def teardown_method(self):
        """Clean up after tests."""
        # Restore original environment
        os.environ.clear()
        os.environ.update(self.original_env)

    def test_init_with_defaults(self):
        """Test EnvironmentLoader initialization with defaults."""
        loader = EnvironmentLoader()
        assert loader.prefix == ""
        assert loader.nested_separator == "__"
        assert loader.field_names is None

    def test_init_with_custom_params(self):
        """Test EnvironmentLoader initialization with custom parameters."""
        loader = EnvironmentLoader(
            prefix="MYAPP_", nested_separator="___", field_names=["Name"]
        )
        assert loader.prefix == "MYAPP_"
        assert loader.nested_separator == "___"
        assert loader.field_names == {"name"}

    def test_init_rejects_empty_separator(self):
        """Test that an empty nested separator is rejected."""
        with pytest.raises(ValueError):
            EnvironmentLoader(nested_separator="")

    def test_env_key_to_segments(self):
        """Test conversion from environment key to config key segments."""
        assert self.loader._env_key_to_segments("LCTEST_DATABASE_HOST") == [
            "database_host"
        ]
        assert self.loader._env_key_to_segments("LCTEST_APP__FEATURES__VISION") == [
            "app",
            "features",
            "vision",
        ]

    def test_convert_value_keeps_strings(self):
        """Test that scalar values are left for the model to coerce."""
        assert self.loader._convert_value("42") == "42"
        assert self.loader._convert_value("true") == "true"
        assert self.loader._convert_value("a,b") == "a,b"

    def test_convert_value_json(self):
        """Test that JSON arrays and objects are parsed."""
        assert self.loader._convert_value('{"key": "value"}') == {"key": "value"}
        assert self.loader._convert_value(" [1, 2, 3] ") == [1, 2, 3]

    def test_convert_value_invalid_json(self):
        """Test that text that only looks like JSON stays a string."""
        assert self.loader._convert_value("[not json") == "[not json"

    def test_load_environment_with_prefix(self):
        """Test loading only prefixed variables."""
        os.environ["LCTEST_NAME"] = "svc"
        os.environ["LCTEST_DATABASE__HOST"] = "db.local"
        os.environ["LCTEST_DATABASE__PORT"] = "5432"
        os.environ["OTHER_NAME"] = "ignored"

        config = self.loader.load_environment()

        assert config == {
            "name": "svc",
            "database": {"host": "db.local", "port": "5432"},
        }

    def test_load_environment_empty(self):
        """Test that no matching variables give an empty mapping."""
        loader = EnvironmentLoader(prefix="LCTEST_", environ={"OTHER": "1"})
        assert loader.load_environment() == {}

    def test_load_environment_reads_at_call_time(self):
        """Test that the environment is read afresh on every call."""
        os.environ["LCTEST_NAME"] = "first"
        assert self.loader.load_environment() == {"name": "first"}

        os.environ["LCTEST_NAME"] = "second"
        assert self.loader.load_environment() == {"name": "second"}

    def test_load_environment_field_filter(self):
        """Test that only known top-level fields are read."""
        loader = EnvironmentLoader(
            field_names=["name", "database"],
            environ={
                "NAME": "svc",
                "DATABASE__HOST": "db.local",
                "PATH": "/usr/bin",
                "HOME": "/root",
            },
        )

        assert loader.load_environment() == {
            "name": "svc",
            "database": {"host": "db.local"},
        }

    def test_nested_variable_wins_over_flat(self):
        """Test that a nested variable and a flat one resolve deterministically."""
        loader = EnvironmentLoader(
            environ={"DATABASE": "flat", "DATABASE__HOST": "db.local"}
        )
        assert loader.load_environment() == {"database": {"host": "db.local"}}

    def test_prefix_only_variable_ignored(self):
        """Test that a variable named exactly as the prefix is skipped."""
        loader = EnvironmentLoader(prefix="LCTEST_", environ={"LCTEST_": "x"})
        assert loader.load_environment() == {}

    def test_from_source(self):
        """Test creating a loader from a source and a model."""
        loader = EnvironmentLoader.from_source(
            EnvSource(prefix="APP_", nested_separator="."), Settings
        )
        assert loader.prefix == "APP_"
        assert loader.nested_separator == "."
        assert loader.field_names == {"name", "database", "api_key", "apikey"}


class TestModelFieldNames:
    """Test cases for model_field_names."""

    def test_without_model(self):
        """Test that no model accepts every key."""
        assert model_field_names(None) is None

    def test_non_pydantic_model(self):
        """Test that a class without fields accepts every key."""
        assert model_field_names(dict) is None

    def test_includes_aliases(self):
        """Test that aliases are included."""
        assert "apikey" in model_field_names(Settings)

    def test_field_keys_map_to_alias(self):
        """Test that a field name and its alias both map to the alias."""
        assert model_field_keys(CamelSettings) == {
            "name": "name",
            "api_key": "apiKey",
            "apikey": "apiKey",
        }

    def test_env_stored_under_alias(self):
        """Test that variables for aliased fields validate into the model."""
        loader = EnvironmentLoader(
            prefix="LCTEST_",
            field_keys=model_field_keys(CamelSettings),
            environ={"LCTEST_API_KEY": "secret", "LCTEST_NAME": "svc"},
        )

        tree = loader.load_environment()

        assert tree == {"apiKey": "secret", "name": "svc"}
        assert CamelSettings.model_validate(tree).api_key == "secret"
