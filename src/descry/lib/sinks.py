"""Terminal, in-memory and relay destinations for log messages."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any, TextIO

import structlog

from descry.lib.formatter import FormatOptions, ansi_color, plain_color
from descry.lib.levels import CONN, LogLevel, get_level
from descry.lib.logger import Logger, LogMessage, Tag, format_message
from descry.lib.serialization import message_from_jsonable, message_to_jsonable

if TYPE_CHECKING:
    from descry.lib.describe import DescribeOptions

logger = structlog.get_logger(__name__)

type RelayPayload = dict[str, Any]


class StreamLogger(Logger):
    """Writes one formatted line per message to stdout or stderr by level role."""

    def __init__(
        self,
        *,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        colors: bool = True,
        line_limit: int = 50,
        threshold: LogLevel | str = CONN,
        describe_options: DescribeOptions | None = None,
    ) -> None:
        super().__init__(threshold=threshold, describe_options=describe_options)
        self.stdout = stdout
        self.stderr = stderr
        self.format_options = FormatOptions(
            color=ansi_color if colors else plain_color,
            line_limit=line_limit,
        )

    def send_message(self, message: LogMessage) -> None:
        level = get_level(message.level)
        if level.role == "log":
            stream = self.stdout or sys.stdout
        else:
            stream = self.stderr or sys.stderr
        stream.write(format_message(message, self.format_options) + "\n")
        stream.flush()


class MemoryLogger(Logger):
    """Keeps messages in a list for later rendering, e.g. by a UI."""

    def __init__(
        self,
        *,
        threshold: LogLevel | str = CONN,
        describe_options: DescribeOptions | None = None,
    ) -> None:
        super().__init__(threshold=threshold, describe_options=describe_options)
        self.messages: list[LogMessage] = []

    def send_message(self, message: LogMessage) -> None:
        self.messages.append(message)

    def render(self, options: FormatOptions | None = None) -> list[str]:
        return [format_message(message, options) for message in self.messages]

    def clear(self) -> None:
        self.messages.clear()


class RelayLogger(Logger):
    """Hands each message to ``send`` as a JSON-compatible payload.

    When ``origin`` is set it is appended to the message's origin tags so the
    receiving side can tell where the message came from.
    """

    def __init__(
        self,
        send: Callable[[RelayPayload], None],
        *,
        origin: Tag | None = None,
        threshold: LogLevel | str = CONN,
        describe_options: DescribeOptions | None = None,
    ) -> None:
        super().__init__(threshold=threshold, describe_options=describe_options)
        self.send = send
        self.origin = origin

    def send_message(self, message: LogMessage) -> None:
        if self.origin is not None:
            message = replace(message, origin=(*message.origin, self.origin))
        self.send(message_to_jsonable(message))


class LogReceiver:
    """Decodes relayed payloads and forwards them to a local logger."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger

    def handle(self, payload: object) -> bool:
        """Forward one payload; return False if it was malformed and dropped."""

        try:
            message = message_from_jsonable(payload)
        except (TypeError, ValueError, KeyError):
            logger.warning("Dropped malformed relay payload.", payload=payload, exc_info=True)
            return False
        self.logger.send_message(message)
        return True
