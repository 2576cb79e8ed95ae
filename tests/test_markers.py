"""Raw content builders and ANSI escape parsing."""

from __future__ import annotations

import pytest

from descry.lib.describe import describe
from descry.lib.description import CustomColor, PaletteColor, Raw, TextSegment
from descry.lib.errors import InternalError
from descry.lib.formatter import DEFAULT_COLOR_CODES
from descry.lib.markers import (
    MAX_ESCAPE_SEQUENCES,
    RawContent,
    ansi_text,
    raw,
    raw_text,
    text_segment,
)


def test_text_segment_with_palette_name() -> None:
    assert text_segment("hi", "red", indent=True) == [
        TextSegment(text="hi", color=PaletteColor("red"), indent=True)
    ]


def test_text_segment_with_custom_color() -> None:
    color = CustomColor(code="#123456")

    assert text_segment("hi", color) == [TextSegment(text="hi", color=color)]


def test_ansi_text_is_split_into_colored_runs() -> None:
    segments = text_segment("plain \x1b[31mred\x1b[0m tail", "ansi")

    assert [segment.text for segment in segments] == ["plain ", "red", " tail"]
    assert segments[0].color == CustomColor(code=DEFAULT_COLOR_CODES["white"], ansi_code=37)
    assert segments[1].color == CustomColor(code=DEFAULT_COLOR_CODES["red"], ansi_code=31)
    assert segments[2].color == CustomColor(code=DEFAULT_COLOR_CODES["white"], ansi_code=0)


def test_ansi_bright_and_compound_codes() -> None:
    segments = text_segment("\x1b[1;96mcyan\x1b[90mdim", "ansi")

    assert [segment.text for segment in segments] == ["cyan", "dim"]
    assert segments[0].color == CustomColor(code=DEFAULT_COLOR_CODES["bright_cyan"], ansi_code=96)
    assert segments[1].color == CustomColor(code=DEFAULT_COLOR_CODES["gray"], ansi_code=90)


def test_malformed_escape_sequence_is_internal_error() -> None:
    with pytest.raises(InternalError, match="Malformed escape sequence"):
        text_segment("bad \x1b[31", "ansi")

    with pytest.raises(InternalError, match="Malformed escape sequence"):
        text_segment("bad \x1b[3x1m", "ansi")


def test_escape_sequence_limit() -> None:
    within = "\x1b[31mx" * (MAX_ESCAPE_SEQUENCES - 1)
    assert len(text_segment(within, "ansi")) == MAX_ESCAPE_SEQUENCES - 1

    with pytest.raises(InternalError, match="limit"):
        text_segment("\x1b[31mx" * (MAX_ESCAPE_SEQUENCES + 1), "ansi")


def test_ansi_text_describes_as_raw() -> None:
    desc = describe(ansi_text("\x1b[32mok"))

    assert isinstance(desc, Raw)
    assert desc.segments == (
        TextSegment(text="ok", color=CustomColor(code=DEFAULT_COLOR_CODES["green"], ansi_code=32)),
    )


def test_raw_text_builds_carrier() -> None:
    content = raw_text("note", "gray")

    assert isinstance(content, RawContent)
    assert describe(content) == Raw(
        segments=(TextSegment(text="note", color=PaletteColor("gray")),)
    )


def test_raw_rejects_foreign_segments() -> None:
    with pytest.raises(TypeError, match="Raw segments"):
        raw(["not a segment"])  # type: ignore[list-item]
