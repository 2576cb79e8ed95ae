"""Structured value inspector: describe any value, render it as styled text."""

__version__ = "0.3.0"

from descry.lib.describe import UNDEFINED, DescribeContext, DescribeOptions, describe
from descry.lib.formatter import (
    FormatOptions,
    ansi_color,
    format_description,
    html_color,
    plain_color,
)
from descry.lib.logger import ChildLogger, Logger, LogMessage, Tag, format_message
from descry.lib.markers import CUSTOM_DESCRIPTION, RAW_CONTENT, ansi_text, raw, raw_text
from descry.lib.pretty import inspect
from descry.lib.sinks import LogReceiver, MemoryLogger, RelayLogger, StreamLogger

__all__ = [
    "CUSTOM_DESCRIPTION",
    "RAW_CONTENT",
    "UNDEFINED",
    "ChildLogger",
    "DescribeContext",
    "DescribeOptions",
    "FormatOptions",
    "LogMessage",
    "LogReceiver",
    "Logger",
    "MemoryLogger",
    "RelayLogger",
    "StreamLogger",
    "Tag",
    "__version__",
    "ansi_color",
    "ansi_text",
    "describe",
    "format_description",
    "format_message",
    "html_color",
    "inspect",
    "plain_color",
    "raw",
    "raw_text",
]
