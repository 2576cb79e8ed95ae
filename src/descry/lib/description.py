"""Immutable structural descriptions of runtime values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Literal

ColorName = Literal[
    "blue",
    "cyan",
    "yellow",
    "red",
    "green",
    "magenta",
    "white",
    "gray",
    "black",
    "bold",
]


@dataclass(frozen=True, slots=True)
class PaletteColor:
    """Named entry of the shared palette."""

    name: ColorName


@dataclass(frozen=True, slots=True)
class CustomColor:
    """Explicit color code, optionally paired with its SGR number."""

    code: str
    ansi_code: int | None = None


type SegmentColor = PaletteColor | CustomColor


@dataclass(frozen=True, slots=True)
class TextSegment:
    """Pre-styled text carried by a raw description."""

    text: str
    color: SegmentColor = PaletteColor("white")
    indent: bool = False


@dataclass(frozen=True, slots=True)
class Primitive:
    type: ClassVar[str] = "primitive"

    value: str | int | float | bool


@dataclass(frozen=True, slots=True)
class Null:
    type: ClassVar[str] = "null"


@dataclass(frozen=True, slots=True)
class Undefined:
    type: ClassVar[str] = "undefined"


@dataclass(frozen=True, slots=True)
class Symbol:
    type: ClassVar[str] = "symbol"

    name: str


@dataclass(frozen=True, slots=True)
class BigInt:
    type: ClassVar[str] = "bigint"

    text: str


@dataclass(frozen=True, slots=True)
class Function:
    type: ClassVar[str] = "function"

    kind: Literal["class", "function"]
    name: str


@dataclass(frozen=True, slots=True)
class ListDescription:
    type: ClassVar[str] = "list"

    kind: Literal["array", "set"]
    name: str | None
    elements: tuple[Description, ...] = ()


@dataclass(frozen=True, slots=True)
class RecordItem:
    key: Description
    value: Description


@dataclass(frozen=True, slots=True)
class RecordDescription:
    type: ClassVar[str] = "record"

    kind: Literal["object", "map"]
    name: str | None
    items: tuple[RecordItem, ...] = ()


@dataclass(frozen=True, slots=True)
class Date:
    type: ClassVar[str] = "date"

    iso: str


@dataclass(frozen=True, slots=True)
class RegExp:
    type: ClassVar[str] = "regexp"

    source: str


@dataclass(frozen=True, slots=True)
class Shallow:
    """Opaque container whose contents are deliberately not introspected."""

    type: ClassVar[str] = "shallow"

    name: str


@dataclass(frozen=True, slots=True)
class Circular:
    """Back-reference to a node earlier on the path from the root."""

    type: ClassVar[str] = "circular"

    path: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Raw:
    type: ClassVar[str] = "raw"

    segments: tuple[TextSegment | Description, ...] = ()


@dataclass(frozen=True, slots=True)
class Unknown:
    type: ClassVar[str] = "unknown"


type Description = (
    Primitive
    | Null
    | Undefined
    | Symbol
    | BigInt
    | Function
    | ListDescription
    | RecordDescription
    | Date
    | RegExp
    | Shallow
    | Circular
    | Raw
    | Unknown
)

DESCRIPTION_TYPES: tuple[type[Description], ...] = (
    Primitive,
    Null,
    Undefined,
    Symbol,
    BigInt,
    Function,
    ListDescription,
    RecordDescription,
    Date,
    RegExp,
    Shallow,
    Circular,
    Raw,
    Unknown,
)


def resolve_path(root: Description, path: tuple[str, ...]) -> Description:
    """Walk a circular path from ``root`` and return the node it names.

    Raises ``ValueError`` when a step does not match the tree shape.
    """

    node = root
    steps = list(path)
    while steps:
        step = steps.pop(0)
        if step == "elements" and isinstance(node, ListDescription) and steps:
            node = node.elements[int(steps.pop(0))]
            continue
        if step == "items" and isinstance(node, RecordDescription) and len(steps) >= 2:
            item = node.items[int(steps.pop(0))]
            side = steps.pop(0)
            if side == "key":
                node = item.key
                continue
            if side == "value":
                node = item.value
                continue
        raise ValueError(f"Path step '{step}' does not match a {node.type} node.")
    return node
