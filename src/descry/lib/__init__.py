"""Describer, formatter and logging pipeline."""

from descry.lib.describe import UNDEFINED, DescribeContext, DescribeOptions, describe
from descry.lib.formatter import FormatOptions, format_description
from descry.lib.logger import Logger, LogMessage, Tag

__all__ = [
    "UNDEFINED",
    "DescribeContext",
    "DescribeOptions",
    "FormatOptions",
    "LogMessage",
    "Logger",
    "Tag",
    "describe",
    "format_description",
]
