"""Command line inspection of merged configuration.

Prints the merged configuration of the given sources as JSON. Sources are
given in priority order, highest first:

    python -m load_config --env MYAPP_ --toml config.toml --json defaults.json
    python -m load_config --model myapp.settings:Settings --env --default \\
        --generate-default toml:config.toml
"""

import argparse
import importlib
import json
import logging
import sys
from typing import Any, Optional

from .errors import ConfigurationError
from .loader.merger import ConfigurationMerger
from .manager import ConfigLoader
from .models.schemas import ConfigFormat, DefaultSource, EnvSource, SourceFile


class _AppendSource(argparse.Action):
    """Append a source to the shared, order-preserving source list."""

    def __init__(self, option_strings, dest, kind, **kwargs):
        self.kind = kind
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        sources = list(getattr(namespace, self.dest, None) or [])

        if self.kind == "default":
            source = DefaultSource()
        elif self.kind == "env":
            source = EnvSource(prefix=values or "")
        else:
            source = SourceFile(ConfigFormat(self.kind), values)

        sources.append(source)
        setattr(namespace, self.dest, sources)


def _import_model(spec: str) -> type:
    """Import a settings model from ``module:ClassName``."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise argparse.ArgumentTypeError(
            f"Model must be given as module:ClassName, got: {spec}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise argparse.ArgumentTypeError(f"Cannot import {module_name}: {e}")

    try:
        return getattr(module, attr)
    except AttributeError:
        raise argparse.ArgumentTypeError(f"{module_name} has no attribute {attr}")


def _parse_fallback(value: str) -> SourceFile:
    """Parse ``format:path`` into a file source."""
    format_name, sep, path = value.partition(":")
    if not sep or not path:
        raise argparse.ArgumentTypeError(
            f"Fallback must be given as format:path, got: {value}"
        )

    try:
        return SourceFile(ConfigFormat(format_name.lower()), path)
    except ValueError:
        choices = ", ".join(f.value for f in ConfigFormat)
        raise argparse.ArgumentTypeError(
            f"Unknown format {format_name!r}, expected one of: {choices}"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="load_config",
        description="Merge configuration sources and print the result as JSON. "
        "Sources given first take precedence.",
    )

    sources = parser.add_argument_group("sources (highest priority first)")
    for format in ConfigFormat:
        sources.add_argument(
            f"--{format.value}",
            dest="sources",
            action=_AppendSource,
            kind=format.value,
            metavar="PATH",
            help=f"{format.value.upper()} file, skipped if it does not exist",
        )
    sources.add_argument(
        "--env",
        dest="sources",
        action=_AppendSource,
        kind="env",
        nargs="?",
        metavar="PREFIX",
        help="environment variables, optionally limited to a prefix",
    )
    sources.add_argument(
        "--default",
        dest="sources",
        action=_AppendSource,
        kind="default",
        nargs=0,
        help="defaults of the settings model (requires --model)",
    )

    parser.add_argument(
        "--model",
        type=_import_model,
        metavar="MODULE:CLASS",
        help="pydantic settings model to validate the merged configuration with",
    )
    parser.add_argument(
        "--generate-default",
        type=_parse_fallback,
        metavar="FORMAT:PATH",
        help="write the model's default configuration here if validation fails",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    sources = args.sources or []
    if args.model is None:
        if any(isinstance(s, DefaultSource) for s in sources):
            parser.error("--default requires --model")
        if args.generate_default is not None:
            parser.error("--generate-default requires --model")

    try:
        if args.model is None:
            result: Any = ConfigurationMerger().merge(sources)
        else:
            config = ConfigLoader(args.model).load(sources, args.generate_default)
            result = config.model_dump(mode="json")
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
