"""Wire codec for descriptions and relayed messages."""

from __future__ import annotations

import datetime
import json
import re

import pytest

from descry.lib.describe import UNDEFINED, describe
from descry.lib.description import CustomColor, Primitive, TextSegment
from descry.lib.logger import LogMessage, Tag
from descry.lib.markers import raw
from descry.lib.serialization import (
    description_from_jsonable,
    description_to_jsonable,
    message_from_jsonable,
    message_to_jsonable,
)


class Node:
    pass


def test_description_tree_survives_json() -> None:
    node = Node()
    node.self = node  # type: ignore[attr-defined]
    value = {
        "text": "x",
        "big": 2**64,
        "none": None,
        "missing": UNDEFINED,
        "when": datetime.date(2024, 5, 6),
        "pattern": re.compile("a|b"),
        "fn": len,
        "tags": {"a"},
        "node": node,
        "note": raw(
            [TextSegment(text="hi", color=CustomColor(code="#fff", ansi_code=97), indent=True)]
        ),
        "gen": (i for i in ()),
    }
    desc = describe(value)

    payload = json.loads(json.dumps(description_to_jsonable(desc)))

    assert description_from_jsonable(payload) == desc


def test_wire_shape_uses_type_and_subtype_keys() -> None:
    payload = description_to_jsonable(describe({"n": [1, 2**60]}))

    assert payload == {
        "type": "record",
        "subtype": "map",
        "name": None,
        "items": [
            {
                "key": {"type": "primitive", "value": "n"},
                "value": {
                    "type": "list",
                    "subtype": "array",
                    "name": None,
                    "elements": [
                        {"type": "primitive", "value": 1},
                        {"type": "bigint", "value": str(2**60)},
                    ],
                },
            }
        ],
    }


def test_raw_segment_colors_on_the_wire() -> None:
    payload = description_to_jsonable(describe(raw([TextSegment(text="a"), Primitive(1)])))

    assert payload == {
        "type": "raw",
        "segments": [
            {"color": {"custom": False, "name": "white"}, "text": "a"},
            {"type": "primitive", "value": 1},
        ],
    }


def test_message_round_trip() -> None:
    message = LogMessage(
        level="warn",
        content=("n=", Primitive(5)),
        prefix=(Tag(label="db", color="cyan"),),
        origin=(Tag(label="w1"),),
    )

    payload = message_to_jsonable(message)

    assert payload["level"] == "warn"
    assert payload["content"] == ["n=", {"type": "primitive", "value": 5}]
    assert message_from_jsonable(json.loads(json.dumps(payload))) == message


@pytest.mark.parametrize(
    "payload",
    (
        [],
        {"type": 3},
        {"type": "nope"},
        {"type": "list", "subtype": "tuple", "name": None, "elements": []},
        {"type": "record", "subtype": "map", "name": None, "items": "x"},
        {"type": "primitive", "value": [1]},
        {"type": "circular", "path": [0]},
    ),
)
def test_malformed_description_payloads_raise(payload: object) -> None:
    with pytest.raises(ValueError):
        description_from_jsonable(payload)
