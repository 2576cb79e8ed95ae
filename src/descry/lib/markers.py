"""Opt-in hooks that let a value supply its own description.

Two reserved attribute names make up the protocol:

``__descry_raw__``
    Holds a pre-built :class:`~descry.lib.description.Raw` description. The
    describer returns it verbatim.

``__descry__``
    A method called with the current :class:`~descry.lib.describe.DescribeContext`.
    Returning another value substitutes that value; returning ``self`` falls
    through to generic classification.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Literal

from descry.lib.description import (
    DESCRIPTION_TYPES,
    ColorName,
    CustomColor,
    Description,
    PaletteColor,
    Raw,
    SegmentColor,
    TextSegment,
)
from descry.lib.errors import InternalError
from descry.lib.formatter import ANSI_RESET, DEFAULT_COLOR_CODES

RAW_CONTENT = "__descry_raw__"
CUSTOM_DESCRIPTION = "__descry__"

MAX_ESCAPE_SEQUENCES = 1000

_ESCAPE_START = "\x1b["
_SGR_CODE_RE = re.compile(r"[0-9;]*")

_ANSI_COLOR_NAMES: dict[str, str] = {
    "30": "black",
    "31": "red",
    "32": "green",
    "33": "yellow",
    "34": "blue",
    "35": "magenta",
    "36": "cyan",
    "37": "white",
    "90": "gray",
    "91": "bright_red",
    "92": "bright_green",
    "93": "bright_yellow",
    "94": "bright_blue",
    "95": "bright_magenta",
    "96": "bright_cyan",
    "97": "bright_white",
}


class RawContent:
    """Carrier object exposing a raw description through the marker attribute."""

    __slots__ = (RAW_CONTENT,)

    def __init__(self, description: Raw) -> None:
        setattr(self, RAW_CONTENT, description)

    def __repr__(self) -> str:
        return f"RawContent({getattr(self, RAW_CONTENT)!r})"


def raw(segments: Iterable[TextSegment | Description]) -> RawContent:
    """Wrap segments so that describing the result yields them unchanged."""

    collected = tuple(segments)
    for segment in collected:
        if not isinstance(segment, (TextSegment, *DESCRIPTION_TYPES)):
            raise TypeError(
                f"Raw segments must be TextSegment or Description, got {type(segment).__name__}."
            )
    return RawContent(Raw(segments=collected))


def text_segment(
    text: str,
    color: SegmentColor | ColorName | Literal["ansi"] = "white",
    *,
    indent: bool = False,
) -> list[TextSegment]:
    """Build styled segments for ``text``.

    With ``color="ansi"`` the text is split on SGR escape sequences and each
    run keeps the color the preceding sequence selected.
    """

    if color == "ansi":
        return _parse_ansi(text, indent=indent)
    if isinstance(color, str):
        color = PaletteColor(color)
    return [TextSegment(text=text, color=color, indent=indent)]


def raw_text(
    text: str,
    color: SegmentColor | ColorName | Literal["ansi"] = "white",
    *,
    indent: bool = False,
) -> RawContent:
    return raw(text_segment(text, color, indent=indent))


def ansi_text(text: str) -> RawContent:
    """Raw content for text already carrying ANSI color escapes."""

    return raw(text_segment(text, "ansi"))


def _style_for_code(code: str) -> CustomColor:
    # Compound codes such as "1;31" take their color from the last parameter.
    last = code.rpartition(";")[2]
    color_name = _ANSI_COLOR_NAMES.get(last, "white")
    return CustomColor(
        code=DEFAULT_COLOR_CODES.get(color_name, DEFAULT_COLOR_CODES["grey"]),
        ansi_code=int(last) if last.isdigit() else None,
    )


def _parse_ansi(text: str, *, indent: bool) -> list[TextSegment]:
    text += ANSI_RESET
    segments: list[TextSegment] = []
    style = CustomColor(code=DEFAULT_COLOR_CODES["white"], ansi_code=37)
    prev = 0
    count = 0
    pos = text.find(_ESCAPE_START)
    while pos != -1:
        count += 1
        if count > MAX_ESCAPE_SEQUENCES:
            raise InternalError(
                f"Escape sequence limit of {MAX_ESCAPE_SEQUENCES} exceeded while parsing ANSI text."
            )
        if pos > prev:
            segments.append(TextSegment(text=text[prev:pos], color=style, indent=indent))
        code_start = pos + len(_ESCAPE_START)
        end = text.find("m", code_start)
        code = text[code_start:end]
        if end == -1 or not _SGR_CODE_RE.fullmatch(code):
            raise InternalError(f"Malformed escape sequence at offset {pos}.")
        style = _style_for_code(code)
        prev = end + 1
        pos = text.find(_ESCAPE_START, prev)
    return segments
