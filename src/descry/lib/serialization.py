"""Wire codec for descriptions and messages shared across process boundaries.

Descriptions are already plain data, so the payload is a direct rendering of
the tree: ``{"type": ..., ...}`` objects, ``subtype`` for the kind of
lists, records and functions. Decoding rebuilds the description, never the
original value.
"""

from __future__ import annotations

from typing import Any, cast

from descry.lib.description import (
    BigInt,
    Circular,
    CustomColor,
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
    SegmentColor,
    Shallow,
    Symbol,
    TextSegment,
    Undefined,
    Unknown,
)
from descry.lib.levels import get_level
from descry.lib.logger import LogMessage, Tag

type JSONScalar = str | int | float | bool | None
type JSONValue = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
type JSONObject = dict[str, JSONValue]

_SCALAR_FIELDS: dict[str, tuple[type[Description], str]] = {
    "symbol": (Symbol, "name"),
    "bigint": (BigInt, "value"),
    "date": (Date, "date"),
    "regexp": (RegExp, "source"),
    "shallow": (Shallow, "name"),
}

_EMPTY_TYPES: dict[str, type[Description]] = {
    "null": Null,
    "undefined": Undefined,
    "unknown": Unknown,
}


def color_to_jsonable(color: SegmentColor) -> JSONObject:
    if isinstance(color, CustomColor):
        payload: JSONObject = {"custom": True, "code": color.code}
        if color.ansi_code is not None:
            payload["ansiCode"] = color.ansi_code
        return payload
    return {"custom": False, "name": color.name}


def color_from_jsonable(payload: object) -> SegmentColor:
    data = _expect_object(payload, "color")
    if data.get("custom"):
        ansi_code = data.get("ansiCode")
        return CustomColor(
            code=_expect_str(data.get("code"), "color.code"),
            ansi_code=ansi_code if isinstance(ansi_code, int) else None,
        )
    return PaletteColor(cast("Any", _expect_str(data.get("name"), "color.name")))


def description_to_jsonable(desc: Description) -> JSONObject:
    """Convert a description tree to a JSON-serializable payload."""

    if isinstance(desc, Primitive):
        return {"type": "primitive", "value": desc.value}
    if isinstance(desc, Symbol):
        return {"type": "symbol", "name": desc.name}
    if isinstance(desc, BigInt):
        return {"type": "bigint", "value": desc.text}
    if isinstance(desc, Date):
        return {"type": "date", "date": desc.iso}
    if isinstance(desc, RegExp):
        return {"type": "regexp", "source": desc.source}
    if isinstance(desc, Shallow):
        return {"type": "shallow", "name": desc.name}
    if isinstance(desc, Function):
        return {"type": "function", "subtype": desc.kind, "name": desc.name}
    if isinstance(desc, Circular):
        return {"type": "circular", "path": list(desc.path)}
    if isinstance(desc, ListDescription):
        return {
            "type": "list",
            "subtype": desc.kind,
            "name": desc.name,
            "elements": [description_to_jsonable(element) for element in desc.elements],
        }
    if isinstance(desc, RecordDescription):
        return {
            "type": "record",
            "subtype": desc.kind,
            "name": desc.name,
            "items": [
                {
                    "key": description_to_jsonable(item.key),
                    "value": description_to_jsonable(item.value),
                }
                for item in desc.items
            ],
        }
    if isinstance(desc, Raw):
        segments: list[JSONValue] = []
        for segment in desc.segments:
            if isinstance(segment, TextSegment):
                text_payload: JSONObject = {
                    "color": color_to_jsonable(segment.color),
                    "text": segment.text,
                }
                if segment.indent:
                    text_payload["indent"] = True
                segments.append(text_payload)
            else:
                segments.append(description_to_jsonable(segment))
        return {"type": "raw", "segments": segments}
    return {"type": desc.type}


def description_from_jsonable(payload: object) -> Description:
    """Rebuild a description tree from :func:`description_to_jsonable` output."""

    data = _expect_object(payload, "description")
    kind = data.get("type")
    if not isinstance(kind, str):
        raise ValueError(f"Invalid description type {kind!r}.")
    if kind in _EMPTY_TYPES:
        return _EMPTY_TYPES[kind]()
    if kind in _SCALAR_FIELDS:
        factory, key = _SCALAR_FIELDS[kind]
        return cast("Any", factory)(_expect_str(data.get(key), f"{kind}.{key}"))
    if kind == "primitive":
        value = data.get("value")
        if not isinstance(value, str | int | float | bool):
            raise ValueError(f"Invalid primitive value {value!r}.")
        return Primitive(value=value)
    if kind == "function":
        subtype = data.get("subtype")
        if subtype not in {"class", "function"}:
            raise ValueError(f"Invalid function subtype {subtype!r}.")
        return Function(kind=cast("Any", subtype), name=_expect_str(data.get("name"), "name"))
    if kind == "circular":
        path = _expect_list(data.get("path"), "circular.path")
        return Circular(path=tuple(_expect_str(step, "circular.path") for step in path))
    if kind == "list":
        subtype = data.get("subtype")
        if subtype not in {"array", "set"}:
            raise ValueError(f"Invalid list subtype {subtype!r}.")
        return ListDescription(
            kind=cast("Any", subtype),
            name=_optional_str(data.get("name"), "list.name"),
            elements=tuple(
                description_from_jsonable(element)
                for element in _expect_list(data.get("elements"), "list.elements")
            ),
        )
    if kind == "record":
        subtype = data.get("subtype")
        if subtype not in {"object", "map"}:
            raise ValueError(f"Invalid record subtype {subtype!r}.")
        items: list[RecordItem] = []
        for raw_item in _expect_list(data.get("items"), "record.items"):
            item = _expect_object(raw_item, "record.items")
            items.append(
                RecordItem(
                    key=description_from_jsonable(item.get("key")),
                    value=description_from_jsonable(item.get("value")),
                )
            )
        return RecordDescription(
            kind=cast("Any", subtype),
            name=_optional_str(data.get("name"), "record.name"),
            items=tuple(items),
        )
    if kind == "raw":
        segments: list[TextSegment | Description] = []
        for raw_segment in _expect_list(data.get("segments"), "raw.segments"):
            segment = _expect_object(raw_segment, "raw.segments")
            if "color" in segment:
                segments.append(
                    TextSegment(
                        text=_expect_str(segment.get("text"), "raw.segments.text"),
                        color=color_from_jsonable(segment["color"]),
                        indent=bool(segment.get("indent", False)),
                    )
                )
            else:
                segments.append(description_from_jsonable(segment))
        return Raw(segments=tuple(segments))
    raise ValueError(f"Unknown description type {kind!r}.")


def tag_to_jsonable(tag: Tag) -> JSONObject:
    return {"label": tag.label, "color": tag.color}


def tag_from_jsonable(payload: object) -> Tag:
    data = _expect_object(payload, "tag")
    return Tag(
        label=_expect_str(data.get("label"), "tag.label"),
        color=cast("Any", _expect_str(data.get("color", "white"), "tag.color")),
    )


def message_to_jsonable(message: LogMessage) -> JSONObject:
    """Encode a message in the relay wire shape."""

    return {
        "level": message.level,
        "content": [
            value if isinstance(value, str) else description_to_jsonable(value)
            for value in message.content
        ],
        "prefix": [tag_to_jsonable(tag) for tag in message.prefix],
        "origin": [tag_to_jsonable(tag) for tag in message.origin],
    }


def message_from_jsonable(payload: object) -> LogMessage:
    data = _expect_object(payload, "message")
    return LogMessage(
        level=get_level(_expect_str(data.get("level"), "level")).name,
        content=tuple(
            value if isinstance(value, str) else description_from_jsonable(value)
            for value in _expect_list(data.get("content"), "content")
        ),
        prefix=tuple(
            tag_from_jsonable(tag) for tag in _expect_list(data.get("prefix", []), "prefix")
        ),
        origin=tuple(
            tag_from_jsonable(tag) for tag in _expect_list(data.get("origin", []), "origin")
        ),
    )


def _expect_object(value: object, source: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise ValueError(
            f"Invalid value for '{source}': expected object, got {type(value).__name__}."
        )
    return cast("dict[str, object]", value)


def _expect_list(value: object, source: str) -> list[object]:
    if not isinstance(value, list):
        raise ValueError(
            f"Invalid value for '{source}': expected array, got {type(value).__name__}."
        )
    return cast("list[object]", value)


def _expect_str(value: object, source: str) -> str:
    if not isinstance(value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected string, got {type(value).__name__}."
        )
    return value


def _optional_str(value: object, source: str) -> str | None:
    if value is None:
        return None
    return _expect_str(value, source)
