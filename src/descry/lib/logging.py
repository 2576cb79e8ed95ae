"""Structlog configuration for descry's own diagnostics.

Diagnostics go to stderr so stdout stays reserved for rendered values.
Structured event values that are not plain scalars are passed through the
describer: rendered to text for the console, or to the wire payload in JSON
mode.
"""

from __future__ import annotations

import logging as std_logging
import sys
from typing import Any

import structlog

from descry.lib.describe import describe
from descry.lib.formatter import FormatOptions, format_description
from descry.lib.serialization import description_to_jsonable

_SCALAR_TYPES = (str, int, float, bool, type(None))
_PASSTHROUGH_KEYS = frozenset({"event", "exc_info", "stack_info"})


class DescribeEventValues:
    """Structlog processor that renders container values with descry."""

    def __init__(self, *, json_mode: bool = False, line_limit: int = 80) -> None:
        self.json_mode = json_mode
        self.format_options = FormatOptions(line_limit=line_limit)

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if key in _PASSTHROUGH_KEYS or isinstance(value, _SCALAR_TYPES):
                continue
            desc = describe(value)
            if self.json_mode:
                event_dict[key] = description_to_jsonable(desc)
            else:
                event_dict[key] = format_description(desc, self.format_options)
        return event_dict


def _level_from_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return std_logging.WARNING
    if verbosity == 1:
        return std_logging.INFO
    return std_logging.DEBUG


def configure_logging(json_mode: bool = False, verbosity: int = 0) -> None:
    """Configure stdlib logging and structlog for the CLI."""

    level = _level_from_verbosity(verbosity)
    handler = std_logging.StreamHandler(sys.stderr)
    handler.setFormatter(std_logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    std_logging.basicConfig(level=level, handlers=[handler], force=True)

    renderer: structlog.typing.Processor = (
        structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            DescribeEventValues(json_mode=json_mode),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
