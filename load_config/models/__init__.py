"""Configuration source descriptors and model capabilities."""

from .schemas import (
    ABSENT,
    Absent,
    ConfigFormat,
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

__all__ = [
    "ABSENT",
    "Absent",
    "ConfigFormat",
    "ConfigModel",
    "DefaultSource",
    "EnvSource",
    "MergeRecord",
    "Source",
    "SourceFile",
    "construct_default",
    "describe_source",
    "dump_model",
]
