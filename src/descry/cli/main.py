"""Cyclopts CLI entry point for descry."""

from __future__ import annotations

import json
import logging
import sys
import tomllib
from dataclasses import asdict, replace
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, cast

from cyclopts import App, Parameter

from descry import __version__
from descry.lib.config.settings import ColorMode, DescryConfig, load_config
from descry.lib.describe import describe
from descry.lib.formatter import format_description

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

_COLOR_CHOICES = ("auto", "ansi", "html", "plain")

app = App(
    name="descry",
    help="Render structured values as readable, colorized text.",
    version=__version__,
    help_formatter="plain",
)
config_app = App(name="config", help="Configuration commands", help_formatter="plain")
app.command(config_app, name="config")


def _load_document(path: str) -> object:
    if path == "-":
        return json.loads(sys.stdin.read())
    source = Path(path)
    text = source.read_text(encoding="utf-8")
    suffix = source.suffix.lower()
    if suffix == ".toml":
        return tomllib.loads(text)
    if suffix in {".json", ""}:
        return json.loads(text)
    raise ValueError(f"Unsupported document type '{suffix}'. Expected .json or .toml.")


def _resolve_config(line_limit: int | None, color: str | None) -> DescryConfig:
    config = load_config()
    if line_limit is not None:
        if line_limit < 0:
            raise ValueError("--line-limit must be non-negative.")
        config = replace(config, line_limit=line_limit)
    if color is not None:
        normalized = color.strip().lower()
        if normalized not in _COLOR_CHOICES:
            raise ValueError(f"--color must be one of: {', '.join(_COLOR_CHOICES)}")
        config = replace(config, color=cast("ColorMode", normalized))
    return config


@app.command(name="show")
def show(
    path: str,
    *,
    line_limit: Annotated[
        int | None,
        Parameter(name="--line-limit", help="Packing budget before collections wrap."),
    ] = None,
    color: Annotated[
        str | None,
        Parameter(name="--color", help="Color output: auto, ansi, html, or plain."),
    ] = None,
) -> None:
    """Pretty-print a JSON or TOML document (use '-' for JSON on stdin)."""

    config = _resolve_config(line_limit, color)
    document = _load_document(path)
    logger.debug("Loaded document from %s.", path)
    description = describe(document, options=config.describe_options())
    print(format_description(description, config.format_options(is_tty=sys.stdout.isatty())))


@config_app.command(name="show")
def config_show(
    *,
    json_mode: Annotated[
        bool,
        Parameter(name="--json", help="Emit the resolved config as JSON."),
    ] = False,
) -> None:
    """Show the resolved configuration."""

    config = load_config()
    if json_mode:
        print(json.dumps(asdict(config), sort_keys=True))
        return
    description = describe(config)
    print(format_description(description, config.format_options(is_tty=sys.stdout.isatty())))


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `descry` and `python -m descry`."""

    from descry.lib.logging import configure_logging

    args = list(sys.argv[1:] if argv is None else argv)
    verbose_count = args.count("--verbose") + args.count("-v")
    args = [arg for arg in args if arg not in {"--verbose", "-v"}]
    configure_logging(json_mode="--json" in args, verbosity=verbose_count)

    try:
        app(args)
    except (KeyError, ValueError, FileNotFoundError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None
