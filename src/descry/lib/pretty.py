"""One-shot describe-and-format helper."""

from __future__ import annotations

from collections.abc import Mapping

from descry.lib.describe import DescribeOptions, describe
from descry.lib.description import SegmentColor
from descry.lib.formatter import (
    DEFAULT_COLOR_MAP,
    ColorFunction,
    ColorType,
    FormatOptions,
    ansi_color,
    format_description,
    plain_color,
)


def inspect(
    value: object,
    *,
    color: ColorFunction | None = None,
    colors: bool = False,
    line_limit: int = 50,
    color_map: Mapping[ColorType, SegmentColor] = DEFAULT_COLOR_MAP,
    describe_options: DescribeOptions | None = None,
) -> str:
    """Describe ``value`` and render it to text.

    ``color`` wins over ``colors``; ``colors=True`` selects ANSI output.
    """

    if color is None:
        color = ansi_color if colors else plain_color
    return format_description(
        describe(value, options=describe_options),
        FormatOptions(color=color, line_limit=line_limit, color_map=color_map),
    )
