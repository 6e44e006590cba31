"""Endpoint defaults and display constants shared by listener and sender."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 21212
TRANSPORT = "tcp"

# Continuation lines of a wrapped message are indented by this many columns.
INDENT = 4
LABEL_TERMINATOR = ": "
NAME_MARKER = "::name::"

HEADER_TEXT = "Debug listener -- Press q to quit, c to clear the output area."
INITIALIZING_TEXT = "Initializing..."


@dataclass(frozen=True)
class Endpoint:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @property
    def address(self) -> tuple[str, int]:
        return (self.host, self.port)

    def describe(self) -> str:
        return f"{TRANSPORT} server {self.host}:{self.port}"
