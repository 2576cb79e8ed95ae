"""Severity levels understood by loggers and sinks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from descry.lib.description import ColorName

LevelName = Literal["debug", "conn", "info", "warn", "error", "crit"]
LevelRole = Literal["log", "warn", "error"]


@dataclass(frozen=True, slots=True)
class LogLevel:
    """Display label, color and importance of one severity."""

    name: LevelName
    label: str
    color: ColorName
    importance: int
    role: LevelRole


DEBUG = LogLevel(name="debug", label="@DBG", color="magenta", importance=0, role="log")
CONN = LogLevel(name="conn", label="CONN", color="green", importance=1, role="log")
INFO = LogLevel(name="info", label="INFO", color="cyan", importance=3, role="log")
WARN = LogLevel(name="warn", label="WARN", color="yellow", importance=4, role="warn")
ERROR = LogLevel(name="error", label="ERR!", color="red", importance=4, role="error")
CRIT = LogLevel(name="crit", label="crit", color="red", importance=5, role="error")

LEVELS: dict[str, LogLevel] = {
    level.name: level for level in (DEBUG, CONN, INFO, WARN, ERROR, CRIT)
}


def get_level(name: str) -> LogLevel:
    """Look up a level by name, case-insensitively."""

    normalized = name.strip().lower()
    level = LEVELS.get(normalized)
    if level is None:
        raise ValueError(
            f"Unknown log level '{name}'. Expected one of: {', '.join(LEVELS)}."
        )
    return level
