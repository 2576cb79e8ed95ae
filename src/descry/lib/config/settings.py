"""Layered configuration: defaults, `.descry/config.toml`, environment."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Literal, cast

from descry.lib.describe import DescribeOptions
from descry.lib.formatter import ColorFunction, FormatOptions, ansi_color, html_color, plain_color
from descry.lib.levels import LogLevel, get_level

logger = logging.getLogger(__name__)

ColorMode = Literal["auto", "ansi", "html", "plain"]

CONFIG_DIR = ".descry"
CONFIG_FILE = "config.toml"

_COLOR_MODES = frozenset({"auto", "ansi", "html", "plain"})


@dataclass(frozen=True, slots=True)
class DescryConfig:
    """Resolved inspector and logger settings."""

    line_limit: int = 50
    max_elements: int = 100
    head_elements: int = 50
    tail_elements: int = 50
    log_level: str = "conn"
    color: ColorMode = "auto"

    def describe_options(self) -> DescribeOptions:
        return DescribeOptions(
            max_elements=self.max_elements,
            head_elements=self.head_elements,
            tail_elements=self.tail_elements,
        )

    def format_options(self, *, is_tty: bool = False) -> FormatOptions:
        return FormatOptions(color=self.color_function(is_tty=is_tty), line_limit=self.line_limit)

    def color_function(self, *, is_tty: bool = False) -> ColorFunction:
        """Pick the color callback; ``auto`` means ANSI on a terminal only."""

        if self.color == "ansi" or (self.color == "auto" and is_tty):
            return ansi_color
        if self.color == "html":
            return html_color
        return plain_color

    @property
    def threshold(self) -> LogLevel:
        return get_level(self.log_level)


_SECTION_KEY_MAP: dict[str, dict[str, str]] = {
    "inspect": {
        "line_limit": "line_limit",
        "max_elements": "max_elements",
        "head_elements": "head_elements",
        "tail_elements": "tail_elements",
    },
    "log": {
        "level": "log_level",
        "log_level": "log_level",
        "color": "color",
    },
}

_ENV_OVERRIDE_MAP: dict[str, str] = {
    "DESCRY_LINE_LIMIT": "line_limit",
    "DESCRY_MAX_ELEMENTS": "max_elements",
    "DESCRY_HEAD_ELEMENTS": "head_elements",
    "DESCRY_TAIL_ELEMENTS": "tail_elements",
    "DESCRY_LOG_LEVEL": "log_level",
    "DESCRY_COLOR": "color",
}

_INT_FIELDS = frozenset({"line_limit", "max_elements", "head_elements", "tail_elements"})


def resolve_config_root(explicit: Path | None = None) -> Path:
    """Resolve the directory holding `.descry/`.

    Precedence: explicit argument, `DESCRY_CONFIG_ROOT`, current directory.
    """

    if explicit is not None:
        return explicit.expanduser().resolve()
    env_root = os.getenv("DESCRY_CONFIG_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path.cwd().resolve()


def _normalize_str(*, field_name: str, value: str, source: str) -> str:
    normalized = value.strip().lower()
    if not normalized:
        raise ValueError(f"Invalid value for '{source}': expected non-empty string.")
    if field_name == "log_level":
        get_level(normalized)
    if field_name == "color" and normalized not in _COLOR_MODES:
        raise ValueError(
            f"Invalid value for '{source}': expected one of {sorted(_COLOR_MODES)}, "
            f"got {value!r}."
        )
    return normalized


def _coerce_file_value(*, field_name: str, raw_value: object, source: str) -> object:
    if field_name in _INT_FIELDS:
        if isinstance(raw_value, bool) or not isinstance(raw_value, int):
            raise ValueError(
                f"Invalid value for '{source}': expected int, got "
                f"{type(raw_value).__name__} ({raw_value!r})."
            )
        if raw_value < 0:
            raise ValueError(f"Invalid value for '{source}': expected non-negative int.")
        return raw_value

    if not isinstance(raw_value, str):
        raise ValueError(
            f"Invalid value for '{source}': expected str, got "
            f"{type(raw_value).__name__} ({raw_value!r})."
        )
    return _normalize_str(field_name=field_name, value=raw_value, source=source)


def _coerce_env_value(*, field_name: str, raw_value: str, env_name: str) -> object:
    if field_name in _INT_FIELDS:
        try:
            parsed = int(raw_value.strip())
        except ValueError as error:
            raise ValueError(
                f"Invalid environment override '{env_name}': expected int, got {raw_value!r}."
            ) from error
        if parsed < 0:
            raise ValueError(
                f"Invalid environment override '{env_name}': expected non-negative int."
            )
        return parsed
    return _normalize_str(field_name=field_name, value=raw_value, source=env_name)


def _default_values() -> dict[str, object]:
    defaults = DescryConfig()
    return {field.name: getattr(defaults, field.name) for field in fields(DescryConfig)}


def _apply_toml_payload(
    *,
    values: dict[str, object],
    payload: dict[str, object],
    path: Path,
    explicit: set[str],
) -> None:
    for key, raw_value in payload.items():
        section_map = _SECTION_KEY_MAP.get(key)
        if section_map is None:
            logger.warning("Ignoring unknown descry config key '%s'.", key)
            continue
        if not isinstance(raw_value, dict):
            raise ValueError(f"Invalid value for '{key}' in '{path}': expected table.")
        for section_key, section_value in cast("dict[str, object]", raw_value).items():
            field_name = section_map.get(section_key)
            if field_name is None:
                logger.warning(
                    "Ignoring unknown descry config key '%s.%s'.",
                    key,
                    section_key,
                )
                continue
            values[field_name] = _coerce_file_value(
                field_name=field_name,
                raw_value=section_value,
                source=f"{key}.{section_key}",
            )
            explicit.add(field_name)


def _apply_env_overrides(values: dict[str, object], explicit: set[str]) -> None:
    for env_name, field_name in _ENV_OVERRIDE_MAP.items():
        raw_value = os.getenv(env_name)
        if raw_value is None:
            continue
        values[field_name] = _coerce_env_value(
            field_name=field_name,
            raw_value=raw_value,
            env_name=env_name,
        )
        explicit.add(field_name)


def _derive_edge_bounds(values: dict[str, object], explicit: set[str]) -> None:
    """Split ``max_elements`` into head and tail when neither was set."""

    if "head_elements" in explicit or "tail_elements" in explicit:
        return
    max_elements = cast("int", values["max_elements"])
    values["head_elements"] = max_elements // 2
    values["tail_elements"] = max_elements - max_elements // 2


def _build_config(values: dict[str, object]) -> DescryConfig:
    config = DescryConfig(
        line_limit=cast("int", values["line_limit"]),
        max_elements=cast("int", values["max_elements"]),
        head_elements=cast("int", values["head_elements"]),
        tail_elements=cast("int", values["tail_elements"]),
        log_level=cast("str", values["log_level"]),
        color=cast("ColorMode", values["color"]),
    )
    if config.head_elements + config.tail_elements > config.max_elements:
        raise ValueError(
            "Invalid inspect bounds: head_elements + tail_elements "
            f"({config.head_elements} + {config.tail_elements}) exceeds "
            f"max_elements ({config.max_elements})."
        )
    return config


def config_path(root: Path) -> Path:
    return root / CONFIG_DIR / CONFIG_FILE


def load_config(root: Path | None = None) -> DescryConfig:
    """Load `.descry/config.toml` under ``root`` and apply environment overrides."""

    values = _default_values()
    explicit: set[str] = set()
    path = config_path(resolve_config_root(root))
    if path.is_file():
        payload_obj = tomllib.loads(path.read_text(encoding="utf-8"))
        payload = cast("dict[str, object]", payload_obj)
        _apply_toml_payload(values=values, payload=payload, path=path, explicit=explicit)

    _apply_env_overrides(values, explicit)
    _derive_edge_bounds(values, explicit)
    return _build_config(values)
