"""Structlog processor that renders event values with descry."""

from __future__ import annotations

from descry.lib.logging import DescribeEventValues


def test_console_mode_renders_containers_as_text() -> None:
    processor = DescribeEventValues()

    event = processor(
        None,
        "warning",
        {"event": "Dropped.", "payload": {"level": [1]}, "count": 2, "exc_info": True},
    )

    assert event == {
        "event": "Dropped.",
        "payload": "{ level: [ 1 ] }",
        "count": 2,
        "exc_info": True,
    }


def test_json_mode_emits_wire_payload() -> None:
    processor = DescribeEventValues(json_mode=True)

    event = processor(None, "info", {"event": "x", "items": (1,)})

    assert event["items"] == {
        "type": "list",
        "subtype": "array",
        "name": "tuple",
        "elements": [{"type": "primitive", "value": 1}],
    }
