"""Render descriptions into styled text.

The formatter never decides how text is styled; callers pass a ``color``
callback (ANSI, HTML or identity) and the formatter only decides layout.
"""

from __future__ import annotations

import html
import json
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

from descry.lib.description import (
    BigInt,
    Circular,
    ColorName,
    CustomColor,
    Date,
    Description,
    Function,
    ListDescription,
    PaletteColor,
    Primitive,
    Raw,
    RecordDescription,
    RegExp,
    SegmentColor,
    Shallow,
    Symbol,
    TextSegment,
)

ColorType = Literal[
    "string",
    "primitive",
    "function",
    "symbol",
    "circular",
    "date",
    "regexp",
    "shallow",
    "type",
    "other",
]

type ColorFunction = Callable[[str, SegmentColor], str]

DEFAULT_COLOR_MAP: Mapping[ColorType, SegmentColor] = MappingProxyType(
    {
        "string": PaletteColor("green"),
        "primitive": PaletteColor("yellow"),
        "function": PaletteColor("cyan"),
        "symbol": PaletteColor("green"),
        "circular": PaletteColor("blue"),
        "date": PaletteColor("magenta"),
        "regexp": PaletteColor("red"),
        "shallow": PaletteColor("white"),
        "type": PaletteColor("bold"),
        "other": PaletteColor("gray"),
    }
)

DEFAULT_COLOR_CODES: Mapping[str, str] = MappingProxyType(
    {
        "black": "#000000",
        "blue": "#2472c8",
        "bright_black": "#666666",
        "bright_blue": "#3b8eea",
        "bright_cyan": "#29b8db",
        "bright_green": "#23d18b",
        "bright_magenta": "#d670d6",
        "bright_red": "#f14c4c",
        "bright_white": "#ffffff",
        "bright_yellow": "#f5f543",
        "cyan": "#11a8cd",
        "green": "#0dbc79",
        "magenta": "#bc3fbc",
        "red": "#cd3131",
        "white": "#e5e5e5",
        "yellow": "#e5e510",
        "grey": "#aaaaaa",
        "gray": "#aaaaaa",
    }
)

# Tuned for white backgrounds.
LIGHT_COLOR_CODES: Mapping[str, str] = MappingProxyType(
    {
        "black": "#000000",
        "blue": "#1568c4",
        "bright_black": "#000000",
        "bright_blue": "#1568c4",
        "bright_cyan": "#24b2d6",
        "bright_green": "#1f8236",
        "bright_magenta": "#8f288f",
        "bright_red": "#b30e0e",
        "bright_white": "#000000",
        "bright_yellow": "#cf4600",
        "cyan": "#24b2d6",
        "green": "#1f8236",
        "magenta": "#8f288f",
        "red": "#b30e0e",
        "white": "#191919",
        "yellow": "#cf4600",
        "grey": "#555555",
        "gray": "#555555",
    }
)

ANSI_COLOR_CODES: Mapping[ColorName, str] = MappingProxyType(
    {
        "black": "30",
        "blue": "94",
        "bold": "1",
        "cyan": "96",
        "gray": "90",
        "green": "92",
        "magenta": "95",
        "red": "91",
        "white": "0",
        "yellow": "93",
    }
)

ANSI_RESET = "\x1b[0m"
INDENT = "  "

_BARE_KEY_RE = re.compile(r"[\w$]+")


def plain_color(text: str, color: SegmentColor) -> str:
    """Identity color function."""

    return text


def ansi_color(text: str, color: SegmentColor) -> str:
    """Wrap text in SGR escape codes."""

    if isinstance(color, CustomColor):
        if color.ansi_code is None:
            return text
        return f"\x1b[{color.ansi_code}m{text}{ANSI_RESET}"
    return f"\x1b[{ANSI_COLOR_CODES[color.name]}m{text}{ANSI_RESET}"


def html_color(text: str, color: SegmentColor) -> str:
    """Escape text and wrap it in an inline-styled span."""

    if isinstance(color, CustomColor):
        style = f"color: {color.code}"
    elif color.name == "bold":
        style = "font-weight: bold"
    else:
        style = f"color: {LIGHT_COLOR_CODES[color.name]}"
    return f'<span style="{style}">{html.escape(text, quote=True)}</span>'


@dataclass(frozen=True, slots=True)
class FormatOptions:
    """Layout and styling parameters for one format call."""

    color: ColorFunction = plain_color
    line_limit: int = 50
    color_map: Mapping[ColorType, SegmentColor] = field(default_factory=lambda: DEFAULT_COLOR_MAP)


def format_description(root: Description, options: FormatOptions | None = None) -> str:
    """Render ``root`` to text, packing collections inline when they fit."""

    return _Visitor(options or FormatOptions()).visit(root, 0)[0]


class _Visitor:
    __slots__ = ("color", "color_map", "line_limit")

    def __init__(self, options: FormatOptions) -> None:
        self.color = options.color
        self.line_limit = options.line_limit
        self.color_map = options.color_map

    def token(self, text: str, color_type: ColorType) -> tuple[str, bool]:
        return self.color(text, self.color_map[color_type]), False

    def visit(self, target: Description, indent: int) -> tuple[str, bool]:
        if isinstance(target, Primitive):
            value = target.value
            if isinstance(value, str):
                return self.token(json.dumps(value, ensure_ascii=False), "string")
            return self.token(repr(value), "primitive")
        if isinstance(target, BigInt):
            return self.token(target.text, "primitive")
        if isinstance(target, Function):
            return self.token(f"[{target.kind} {target.name}]", "function")
        if isinstance(target, Symbol):
            return self.token(target.name, "symbol")
        if isinstance(target, Circular):
            return self.token("[circular]", "circular")
        if isinstance(target, Date):
            return self.token(target.iso, "date")
        if isinstance(target, RegExp):
            return self.token(target.source, "regexp")
        if isinstance(target, Shallow):
            return self.token(target.name, "shallow")
        if isinstance(target, ListDescription):
            return self.visit_list(target, indent)
        if isinstance(target, RecordDescription):
            return self.visit_record(target, indent)
        if isinstance(target, Raw):
            return self.visit_raw(target, indent)
        return self.token(target.type, "other")

    def visit_key(self, target: Description, indent: int) -> tuple[str, bool]:
        if (
            isinstance(target, Primitive)
            and isinstance(target.value, str)
            and _BARE_KEY_RE.fullmatch(target.value)
        ):
            return target.value, False
        return self.visit(target, indent)

    def visit_list(self, target: ListDescription, indent: int) -> tuple[str, bool]:
        items = [self.visit(element, indent + 1) for element in target.elements]
        widths = [None if multiline else len(text) for text, multiline in items]
        prefix = (
            f"{self.color(target.name, self.color_map['type'])}({len(items)}) ["
            if target.name is not None
            else "["
        )
        return self.pack(prefix, "]", [text for text, _ in items], widths, indent)

    def visit_record(self, target: RecordDescription, indent: int) -> tuple[str, bool]:
        entries: list[str] = []
        widths: list[int | None] = []
        for item in target.items:
            key, key_multiline = self.visit_key(item.key, indent + 1)
            value, value_multiline = self.visit(item.value, indent + 1)
            entries.append(f"{key}: {value}")
            widths.append(None if key_multiline or value_multiline else len(key) + len(value))
        prefix = (
            f"{self.color(target.name, self.color_map['type'])} {{"
            if target.name is not None
            else "{"
        )
        return self.pack(prefix, "}", entries, widths, indent)

    def pack(
        self,
        prefix: str,
        close: str,
        entries: list[str],
        widths: list[int | None],
        indent: int,
    ) -> tuple[str, bool]:
        if not entries:
            return f"{prefix}{close}", False
        # A multiline child always forces the wrapped layout.
        if None not in widths:
            cost = max(width for width in widths if width is not None) * len(entries)
            if cost < self.line_limit:
                return f"{prefix} {', '.join(entries)} {close}", False
        inner = INDENT * (indent + 1)
        body = "\n".join(f"{inner}{entry}" for entry in entries)
        return f"{prefix}\n{body}\n{INDENT * indent}{close}", True

    def visit_raw(self, target: Raw, indent: int) -> tuple[str, bool]:
        parts: list[str] = []
        for segment in target.segments:
            if isinstance(segment, TextSegment):
                text = self.color(segment.text, segment.color)
                if segment.indent:
                    text = text.replace("\n", "\n" + INDENT * indent)
                parts.append(text)
            else:
                parts.append(self.visit(segment, indent)[0])
        result = "".join(parts)
        return result, "\n" in result
