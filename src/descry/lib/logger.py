"""Template logging on top of the describer.

Each level method takes a ``str.format``-style template and the values to
interpolate. Values are described when the message is built; formatting to
text is left to whichever sink finally receives the message.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Protocol

from descry.lib.describe import DescribeOptions, describe
from descry.lib.description import DESCRIPTION_TYPES, ColorName, PaletteColor
from descry.lib.formatter import FormatOptions, format_description
from descry.lib.levels import CONN, CRIT, DEBUG, ERROR, INFO, WARN, LogLevel, get_level

if TYPE_CHECKING:
    from descry.lib.description import Description

_TEMPLATE_PARSER = string.Formatter()


@dataclass(frozen=True, slots=True)
class Tag:
    """Label identifying a message's component (prefix) or process (origin)."""

    label: str
    color: ColorName = "white"


@dataclass(frozen=True, slots=True)
class LogMessage:
    """One log record: literal text interleaved with value descriptions."""

    level: str
    content: tuple[Description | str, ...] = ()
    prefix: tuple[Tag, ...] = ()
    origin: tuple[Tag, ...] = ()


class MessageTarget(Protocol):
    """Anything able to accept a finished message."""

    def send_message(self, message: LogMessage) -> None: ...


def build_content(
    template: str,
    values: tuple[object, ...],
    named: dict[str, object],
    *,
    options: DescribeOptions | None = None,
) -> tuple[Description | str, ...]:
    """Split ``template`` into literal text and described values.

    Every referenced value is described once, even if referenced twice.
    Positional values the template does not reference are appended, each
    preceded by a space.
    """

    content: list[Description | str] = []
    described: dict[int | str, Description] = {}
    auto_index = 0
    manual = False

    def resolve(key: int | str) -> Description:
        if key not in described:
            if isinstance(key, int):
                if key >= len(values):
                    raise ValueError(
                        f"Template '{template}' references value {key} but only "
                        f"{len(values)} were given."
                    )
                described[key] = describe(values[key], options=options)
            else:
                if key not in named:
                    raise ValueError(f"Template '{template}' references missing value '{key}'.")
                described[key] = describe(named[key], options=options)
        return described[key]

    for literal, field_name, _spec, _conversion in _TEMPLATE_PARSER.parse(template):
        if literal:
            content.append(literal)
        if field_name is None:
            continue
        key: int | str
        if field_name == "":
            if manual:
                raise ValueError("Cannot mix automatic and manual field numbering.")
            key = auto_index
            auto_index += 1
        elif field_name.isdigit():
            manual = True
            key = int(field_name)
        else:
            key = field_name
        content.append(resolve(key))

    for index in range(len(values)):
        if index not in described:
            content.append(" ")
            content.append(resolve(index))
    return tuple(content)


class Logger:
    """Root of a logger tree; subclasses decide where messages go."""

    def __init__(
        self,
        *,
        threshold: LogLevel | str = CONN,
        describe_options: DescribeOptions | None = None,
    ) -> None:
        self._threshold = get_level(threshold) if isinstance(threshold, str) else threshold
        self.describe_options = describe_options

    @property
    def threshold(self) -> LogLevel:
        """Least important level still dispatched."""

        return self._threshold

    @threshold.setter
    def threshold(self, level: LogLevel | str) -> None:
        self._threshold = get_level(level) if isinstance(level, str) else level

    def send_message(self, message: LogMessage) -> None:
        raise NotImplementedError(f"{type(self).__name__} does not deliver messages.")

    def prefix(self, tag: Tag | str, color: ColorName = "white") -> ChildLogger:
        """Return a logger that tags everything it forwards with ``tag``."""

        if isinstance(tag, str):
            tag = Tag(label=tag, color=color)
        return ChildLogger(self, tag)

    def log(self, level: LogLevel | str, template: str, *values: object, **named: object) -> None:
        if isinstance(level, str):
            level = get_level(level)
        if level.importance < self.threshold.importance:
            return
        content = build_content(template, values, named, options=self.describe_options)
        self.send_message(LogMessage(level=level.name, content=content))

    def debug(self, template: str, *values: object, **named: object) -> None:
        self.log(DEBUG, template, *values, **named)

    def conn(self, template: str, *values: object, **named: object) -> None:
        self.log(CONN, template, *values, **named)

    def info(self, template: str, *values: object, **named: object) -> None:
        self.log(INFO, template, *values, **named)

    def warn(self, template: str, *values: object, **named: object) -> None:
        self.log(WARN, template, *values, **named)

    def error(self, template: str, *values: object, **named: object) -> None:
        self.log(ERROR, template, *values, **named)

    def crit(self, template: str, *values: object, **named: object) -> None:
        self.log(CRIT, template, *values, **named)


class ChildLogger(Logger):
    """Forwards to a parent, prepending its own prefix tag.

    Messages that already carry origin tags came from another process and
    are forwarded untouched.
    """

    def __init__(self, parent: Logger, tag: Tag) -> None:
        super().__init__(threshold=parent.threshold, describe_options=parent.describe_options)
        self.parent = parent
        self.tag = tag

    @property
    def threshold(self) -> LogLevel:
        return self.parent.threshold

    @threshold.setter
    def threshold(self, level: LogLevel | str) -> None:
        self.parent.threshold = level

    def send_message(self, message: LogMessage) -> None:
        if message.origin:
            self.parent.send_message(message)
            return
        self.parent.send_message(replace(message, prefix=(self.tag, *message.prefix)))


def _format_tags(tags: tuple[Tag, ...], options: FormatOptions) -> str:
    return "".join(f"[{options.color(tag.label, PaletteColor(tag.color))}]" for tag in tags)


def format_message(message: LogMessage, options: FormatOptions | None = None) -> str:
    """Render ``[origin][LEVEL][prefix] content`` as one string."""

    options = options or FormatOptions()
    level = get_level(message.level)
    parts = [
        _format_tags(message.origin, options),
        f"[{options.color(level.label, PaletteColor(level.color))}]",
        _format_tags(message.prefix, options),
        " ",
    ]
    for value in message.content:
        if isinstance(value, DESCRIPTION_TYPES):
            parts.append(format_description(value, options))
        else:
            parts.append(value)
    return "".join(parts)
