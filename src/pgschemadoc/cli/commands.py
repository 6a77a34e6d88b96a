"""Command-line entry point: extract one namespace and write the requested outputs."""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence

from pgschemadoc.config import ExtractConfig
from pgschemadoc.errors import SchemaDocError
from pgschemadoc.introspect import Schema, extract_schema
from pgschemadoc.render import (
    JsonRenderer,
    MarkdownOptions,
    MarkdownRenderer,
    PumlOptions,
    PumlRenderer,
)

logger = logging.getLogger(__name__)

STDOUT = "-"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pgschemadoc",
        description="Document a Postgres schema as PlantUML, JSON and Markdown"
    )

    # Source
    parser.add_argument("--postgres", help="Postgres URL (default: $PGSCHEMADOC_DATABASE_URL)")
    parser.add_argument("--config", help="Path to YAML configuration file")
    parser.add_argument("--namespace", help="Schema namespace to document (default: public)")
    parser.add_argument("--exclude", action="append", default=None,
                        help="Table to exclude (repeatable, exact match)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Per-query timeout in seconds")

    # Outputs
    parser.add_argument("--puml", help="PUML output file ('-' for stdout)")
    parser.add_argument("--json", help="JSON output file ('-' for stdout)")
    parser.add_argument("--md", help="Markdown output file ('-' for stdout)")

    parser.add_argument("--puml-skip-columns", action="store_true",
                        help="Skip columns in PUML output")
    parser.add_argument("--puml-include-types", action="store_true",
                        help="Include data types in PUML output")
    parser.add_argument("--md-template", help="Jinja2 template for Markdown output")

    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        default=None, help="Log level (default: WARNING)")
    return parser


def load_config(args: argparse.Namespace) -> ExtractConfig:
    """Combine YAML / environment configuration with CLI flags."""
    overrides = {
        "database_url": args.postgres,
        "namespace": args.namespace,
        "exclude": args.exclude,
        "query_timeout": args.timeout,
        "markdown_template": args.md_template,
    }
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}

    if args.config:
        return ExtractConfig.from_yaml(args.config, **overrides)

    return ExtractConfig.from_env(**overrides)


def configure_logging(level: str, fmt: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=fmt,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def build_outputs(
    args: argparse.Namespace,
    config: ExtractConfig
) -> list[tuple[str, Callable[[Schema], str]]]:
    """Pair each requested destination with the renderer that fills it."""
    outputs = []
    if args.puml:
        renderer = PumlRenderer(PumlOptions(
            include_columns=not args.puml_skip_columns,
            include_data_types=args.puml_include_types,
        ))
        outputs.append((args.puml, renderer.render))
    if args.json:
        outputs.append((args.json, JsonRenderer().render))
    if args.md:
        if config.markdown_template:
            options = MarkdownOptions.from_file(config.markdown_template)
        else:
            options = MarkdownOptions()
        outputs.append((args.md, MarkdownRenderer(options).render))

    for destination, _ in outputs:
        check_destination(destination)
    return outputs


def check_destination(destination: str) -> None:
    """Fail before extraction if a file destination cannot be written."""
    if destination == STDOUT:
        return
    parent = Path(destination).parent
    if not parent.is_dir():
        raise FileNotFoundError(f"Output directory not found: {parent}")
    if Path(destination).is_dir():
        raise IsADirectoryError(f"Output path is a directory: {destination}")


def write_output(destination: str, content: str) -> None:
    """Write content to a file, or to stdout when destination is '-'."""
    if destination == STDOUT:
        sys.stdout.write(content)
        sys.stdout.flush()
        return
    Path(destination).write_text(content, encoding="utf-8")
    logger.info(f"Wrote {destination}")


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level or "WARNING", "%(levelname)s: %(message)s")

    try:
        config = load_config(args)
        configure_logging(config.logging.level, config.logging.format)

        # Renderers and destinations are checked before extraction
        outputs = build_outputs(args, config)
        schema = asyncio.run(extract_schema(config))

        for destination, render in outputs:
            write_output(destination, render(schema))

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except SchemaDocError as e:
        logger.error(_one_line(e))
        return 1
    except Exception as e:
        logger.error(f"Error: {_one_line(e)}")
        return 1

    return 0


def _one_line(error: BaseException) -> str:
    return " ".join(str(error).split())


def run() -> None:
    """Main CLI entry point."""
    sys.exit(main())
