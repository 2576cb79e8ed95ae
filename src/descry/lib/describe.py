"""Classify arbitrary values into finite description trees."""

from __future__ import annotations

import array
import ast
import asyncio
import concurrent.futures
import datetime
import enum
import functools
import inspect
import linecache
import re
import traceback
import types
import weakref
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence, Set
from dataclasses import dataclass, field
from typing import Any

from descry.lib.description import (
    BigInt,
    Circular,
    Date,
    Description,
    Function,
    ListDescription,
    Null,
    PaletteColor,
    Primitive,
    Raw,
    RecordDescription,
    RecordItem,
    RegExp,
    Shallow,
    Symbol,
    TextSegment,
    Undefined,
    Unknown,
)
from descry.lib.markers import CUSTOM_DESCRIPTION, RAW_CONTENT, raw_text

# Integers beyond this magnitude lose precision as floats and are shown as bigint.
MAX_SAFE_INTEGER = 2**53 - 1

ANONYMOUS_NAME = "(anonymous)"
LINE_BREAK_MARKER = "↲"
_MAX_SYNTHETIC_NAME = 50
_NEWLINE_RE = re.compile(r"\n\s*")

_SEQUENCE_TYPES: tuple[type, ...] = (Sequence, array.array, bytes, bytearray)
_OPAQUE_TYPES: tuple[type, ...] = (
    weakref.ref,
    weakref.ProxyType,
    weakref.CallableProxyType,
    weakref.WeakKeyDictionary,
    weakref.WeakValueDictionary,
    weakref.WeakSet,
    asyncio.Future,
    concurrent.futures.Future,
    types.CoroutineType,
    types.GeneratorType,
    types.AsyncGeneratorType,
    Iterator,
)


class _UndefinedType:
    """Marker for a value that is absent rather than ``None``."""

    __slots__ = ()
    _instance: _UndefinedType | None = None

    def __new__(cls) -> _UndefinedType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED: Any = _UndefinedType()


@dataclass(frozen=True, slots=True)
class DescribeOptions:
    """Bounds applied to large ordered containers."""

    max_elements: int = 100
    head_elements: int = 50
    tail_elements: int = 50

    def __post_init__(self) -> None:
        if min(self.max_elements, self.head_elements, self.tail_elements) < 0:
            raise ValueError("Element bounds must be non-negative.")
        if self.head_elements + self.tail_elements > self.max_elements:
            raise ValueError("head_elements + tail_elements must not exceed max_elements.")


@dataclass(frozen=True, slots=True)
class DescribeContext:
    """Traversal state for one describe call.

    ``seen`` is shared by every context descended from the same root and maps
    ``id(value)`` to the value (kept alive for the call) and its first path.
    """

    path: tuple[str, ...] = ()
    seen: dict[int, tuple[object, tuple[str, ...]]] = field(default_factory=dict)
    options: DescribeOptions = field(default_factory=DescribeOptions)

    def descend(self, *steps: str) -> DescribeContext:
        return DescribeContext(path=(*self.path, *steps), seen=self.seen, options=self.options)

    def describe(self, value: object) -> Description:
        return _describe(value, self)


def describe(value: object, *, options: DescribeOptions | None = None) -> Description:
    """Return a cycle-free description of ``value``.

    Never raises: values that cannot be classified become ``unknown``.
    """

    return _describe(value, DescribeContext(options=options or DescribeOptions()))


def _safe_getattr(value: object, name: str) -> Any:
    try:
        return getattr(value, name, None)
    except Exception:
        return None


def _type_name(value: object) -> str:
    return type(value).__name__


def _describe(value: object, ctx: DescribeContext) -> Description:
    try:
        return _classify(value, ctx)
    except RecursionError:
        raise
    except Exception:
        return Unknown()


def _classify(value: object, ctx: DescribeContext) -> Description:
    if isinstance(value, enum.Enum):
        return Symbol(name=f"{_type_name(value)}.{value.name}")
    if isinstance(value, (str, bool, float)):
        return Primitive(value=value)
    if isinstance(value, int):
        if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER:
            return Primitive(value=int(value))
        return BigInt(text=str(value))
    if isinstance(value, type) or _is_function(value):
        return _describe_callable(value)
    if value is None:
        return Null()
    if value is UNDEFINED:
        return Undefined()
    return _describe_object(value, ctx)


def _is_function(value: object) -> bool:
    return inspect.isroutine(value) or isinstance(value, functools.partial)


def _describe_callable(value: Callable[..., Any] | type) -> Function:
    if isinstance(value, type):
        return Function(kind="class", name=value.__name__)
    if isinstance(value, functools.partial):
        inner = _describe_callable(value.func)
        return Function(kind="function", name=f"partial({inner.name})")
    name = _safe_getattr(value, "__name__")
    if not name or name == "<lambda>":
        name = _synthesize_name(value)
    return Function(kind="function", name=name)


def _synthesize_name(value: Callable[..., Any]) -> str:
    source = _function_source(value)
    if source is None:
        return ANONYMOUS_NAME
    compact = _NEWLINE_RE.sub(LINE_BREAK_MARKER, source.strip())
    if len(compact) < _MAX_SYNTHETIC_NAME:
        return compact
    return ANONYMOUS_NAME


def _function_source(value: Callable[..., Any]) -> str | None:
    """Source text of the function's own expression, or None if unavailable.

    ``inspect.getsource`` returns whole lines, so a lambda is located in the
    parsed module by its first line and the columns its bytecode spans.
    """

    code = getattr(value, "__code__", None)
    if not isinstance(code, types.CodeType):
        return None
    if code.co_name != "<lambda>":
        try:
            return inspect.getsource(value)
        except (OSError, TypeError):
            return None
    try:
        filename = inspect.getsourcefile(value)
    except TypeError:
        return None
    if filename is None:
        return None
    module_source = "".join(linecache.getlines(filename, getattr(value, "__globals__", None)))
    try:
        tree = ast.parse(module_source)
    except (SyntaxError, ValueError):
        return None

    # Zero-width entries (the synthetic RESUME) carry no real column.
    positions = [
        (line, column)
        for line, end_line, column, end_column in code.co_positions()
        if line is not None
        and column is not None
        and (line, column) != (end_line, end_column)
    ]
    candidates = [
        node
        for node in ast.walk(tree)
        if isinstance(node, ast.Lambda)
        and node.lineno == code.co_firstlineno
        and all(_node_contains(node, position) for position in positions)
    ]
    if not candidates:
        return None
    # Nested lambdas all contain the inner body; the innermost one is the match.
    node = min(candidates, key=_node_extent)
    return ast.get_source_segment(module_source, node)


def _node_contains(node: ast.expr, position: tuple[int, int]) -> bool:
    end_line = node.end_lineno if node.end_lineno is not None else node.lineno
    end_column = node.end_col_offset if node.end_col_offset is not None else node.col_offset
    return (node.lineno, node.col_offset) <= position <= (end_line, end_column)


def _node_extent(node: ast.expr) -> tuple[int, int]:
    end_line = node.end_lineno if node.end_lineno is not None else node.lineno
    end_column = node.end_col_offset if node.end_col_offset is not None else node.col_offset
    return (end_line - node.lineno, end_column - node.col_offset)


def _describe_object(value: object, ctx: DescribeContext) -> Description:
    seen = ctx.seen.get(id(value))
    if seen is not None:
        return Circular(path=seen[1])
    ctx.seen[id(value)] = (value, ctx.path)

    raw = _safe_getattr(value, RAW_CONTENT)
    if isinstance(raw, Raw):
        return raw

    hook = _safe_getattr(value, CUSTOM_DESCRIPTION)
    if callable(hook):
        try:
            result = hook(ctx)
        except Exception as exc:
            return _describe_error(exc)
        if result is not value:
            return _describe(result, ctx)

    if isinstance(value, _OPAQUE_TYPES):
        return Shallow(name=_type_name(value))
    if isinstance(value, _SEQUENCE_TYPES) and not isinstance(value, memoryview):
        return _describe_sequence(value, ctx)
    if isinstance(value, Set):
        return ListDescription(
            kind="set",
            name=_type_name(value),
            elements=tuple(
                _describe(element, ctx.descend("elements", str(index)))
                for index, element in enumerate(value)
            ),
        )
    if isinstance(value, Mapping):
        return RecordDescription(
            kind="map",
            name=None if type(value) is dict else _type_name(value),
            items=_describe_pairs(value.items(), ctx),
        )
    if isinstance(value, re.Pattern):
        return RegExp(source=repr(value))
    if isinstance(value, (datetime.date, datetime.time)):
        return Date(iso=value.isoformat())
    if isinstance(value, BaseException):
        return _describe_error(value)
    return RecordDescription(
        kind="object",
        name=None if type(value) is object else _type_name(value),
        items=_describe_pairs(_instance_attributes(value), ctx),
    )


def _describe_sequence(value: Any, ctx: DescribeContext) -> ListDescription:
    options = ctx.options
    length = _sequence_length(value)
    elements: list[object]
    if length > options.max_elements:
        # Index only the kept ends; the container is never copied whole.
        elements = [
            *(value[index] for index in range(options.head_elements)),
            _skip_marker(length - options.head_elements - options.tail_elements),
            *(value[index] for index in range(length - options.tail_elements, length)),
        ]
    else:
        elements = list(value)
    return ListDescription(
        kind="array",
        name=None if type(value) is list else _type_name(value),
        elements=tuple(
            _describe(element, ctx.descend("elements", str(index)))
            for index, element in enumerate(elements)
        ),
    )


def _sequence_length(value: Any) -> int:
    try:
        return len(value)
    except OverflowError:
        if not isinstance(value, range):
            raise
    # len() is limited to sys.maxsize; range bounds are not.
    if value.step > 0:
        return max(0, (value.stop - value.start + value.step - 1) // value.step)
    return max(0, (value.start - value.stop - value.step - 1) // -value.step)


def _skip_marker(skipped: int) -> object:
    return raw_text(f"...{skipped} elements skipped", "gray")


def _describe_pairs(
    pairs: Iterable[tuple[object, object]], ctx: DescribeContext
) -> tuple[RecordItem, ...]:
    items: list[RecordItem] = []
    for index, (key, item) in enumerate(pairs):
        items.append(
            RecordItem(
                key=_describe(key, ctx.descend("items", str(index), "key")),
                value=_describe(item, ctx.descend("items", str(index), "value")),
            )
        )
    return tuple(items)


def _instance_attributes(value: object) -> list[tuple[str, object]]:
    attributes: list[tuple[str, object]] = []
    instance_dict = _safe_getattr(value, "__dict__")
    if isinstance(instance_dict, dict):
        attributes.extend((str(key), item) for key, item in instance_dict.items())
    for klass in type(value).__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in {"__dict__", "__weakref__"}:
                continue
            try:
                attributes.append((slot, getattr(value, slot)))
            except AttributeError:
                continue
    return attributes


def _describe_error(error: BaseException) -> Raw:
    if error.__traceback__ is not None:
        text = "".join(traceback.format_exception(error)).rstrip("\n")
    else:
        text = "".join(traceback.format_exception_only(error)).rstrip("\n")
    return Raw(segments=(TextSegment(text=text, color=PaletteColor("white")),))
