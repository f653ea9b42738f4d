"""Tests for configuration source descriptors and model capabilities."""

from pathlib import Path

import pytest
from pydantic import BaseModel, Field, SecretBytes, SecretStr

from load_config.models.schemas import (
    ABSENT,
    Absent,
    ConfigFormat,
    ConfigModel,
    DefaultSource,
    EnvSource,
    SourceFile,
    construct_default,
    describe_source,
    dump_model,
)


class PlainSettings(BaseModel):
    name: str = "plain"
    port: int = 8080


class TemplateSettings(BaseModel):
    token: str
    retries: int = 3

    @classmethod
    def default(cls) -> "TemplateSettings":
        return cls(token="changeme")


class AliasedSettings(BaseModel):
    server_name: str = Field(default="plain", alias="serverName")
    port: int = 8080


class SecretSettings(BaseModel):
    password: SecretStr = SecretStr("hunter2")
    blob: SecretBytes = SecretBytes(b"raw")
    nested: dict[str, SecretStr] = Field(
        default_factory=lambda: {"api": SecretStr("k")}
    )


class TestConfigFormat:
    """Test cases for ConfigFormat enum."""

    def test_format_values(self):
        """Test format enum values."""
        assert ConfigFormat.JSON.value == "json"
        assert ConfigFormat.TOML.value == "toml"
        assert ConfigFormat.YAML.value == "yaml"

    def test_from_path(self):
        """Test detecting the format from the extension."""
        assert ConfigFormat.from_path("config.json") == ConfigFormat.JSON
        assert ConfigFormat.from_path("config.toml") == ConfigFormat.TOML
        assert ConfigFormat.from_path("config.yaml") == ConfigFormat.YAML
        assert ConfigFormat.from_path(Path("CONFIG.YML")) == ConfigFormat.YAML

    def test_from_path_unsupported(self):
        """Test detection of an unsupported extension."""
        with pytest.raises(ValueError):
            ConfigFormat.from_path("config.ini")


class TestSources:
    """Test cases for the source descriptors."""

    def test_source_file_constructors(self):
        """Test the per-format constructors."""
        expected = SourceFile(ConfigFormat.JSON, Path("a.json"))
        assert SourceFile.json("a.json") == expected
        assert SourceFile.toml("a.toml").format == ConfigFormat.TOML
        assert SourceFile.yaml("a.yaml").format == ConfigFormat.YAML

    def test_source_file_coerces_fields(self):
        """Test that strings are accepted for format and path."""
        source = SourceFile("toml", "conf/app.toml")
        assert source.format is ConfigFormat.TOML
        assert source.path == Path("conf/app.toml")

    def test_source_file_from_path(self):
        """Test creating a file source from its extension."""
        assert SourceFile.from_path("app.yml") == SourceFile.yaml("app.yml")

    def test_env_source_defaults(self):
        """Test EnvSource defaults."""
        source = EnvSource()
        assert source.prefix == ""
        assert source.nested_separator == "__"

    def test_sources_are_hashable(self):
        """Test that sources are immutable values."""
        sources = {DefaultSource(), EnvSource("APP_"), SourceFile.json("a.json")}
        assert len(sources) == 3

    def test_describe_source(self):
        """Test human readable source names."""
        assert describe_source(DefaultSource()) == "defaults"
        assert "APP_" in describe_source(EnvSource(prefix="APP_"))
        assert describe_source(SourceFile.json("a.json")) == "json file a.json"

    def test_describe_unknown_source(self):
        """Test that unknown source types are rejected."""
        with pytest.raises(TypeError):
            describe_source("config.json")

    def test_absent_marker(self):
        """Test the absent marker."""
        assert Absent() is ABSENT
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"


class TestModelCapabilities:
    """Test cases for settings model capabilities."""

    def test_construct_default_without_factory(self):
        """Test that models without default() are constructed without arguments."""
        assert construct_default(PlainSettings) == PlainSettings()

    def test_construct_default_with_factory(self):
        """Test that a default() classmethod is preferred."""
        default = construct_default(TemplateSettings)
        assert default.token == "changeme"
        assert default.retries == 3

    def test_pydantic_model_satisfies_protocol(self):
        """Test that pydantic models satisfy the capability protocol."""
        assert isinstance(PlainSettings(), ConfigModel)

    def test_dump_model_uses_aliases(self):
        """Test that the dumped tree is keyed the way the model validates."""
        tree = dump_model(AliasedSettings())

        assert tree == {"serverName": "plain", "port": 8080}
        assert AliasedSettings.model_validate(tree) == AliasedSettings()

    def test_dump_model_reveals_secrets(self):
        """Test that secret fields are dumped with their real values."""
        tree = dump_model(SecretSettings())

        assert tree == {"password": "hunter2", "blob": "raw", "nested": {"api": "k"}}
        assert SecretSettings.model_validate(tree) == SecretSettings()
