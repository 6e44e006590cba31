"""Reflow of tagged messages into fixed-width display blocks."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass

from linetap.config import INDENT


@dataclass(frozen=True)
class DisplayBlock:
    """Formatted text for one message.

    ``text`` always ends with a single newline. ``emphasis`` is the leading
    part of the first line that belongs to the sender label and should be
    drawn bold; it is empty for anonymous messages.
    """

    text: str
    emphasis: str = ""

    def lines(self) -> list[str]:
        return self.text[:-1].split("\n")


def _wrap(content: str, width: int) -> list[str]:
    return textwrap.wrap(
        content,
        width=width,
        expand_tabs=False,
        replace_whitespace=True,
        break_long_words=False,
        break_on_hyphens=False,
    )


def format_message(identity: str, text: str, width: int) -> DisplayBlock:
    """Wrap ``identity + text`` to ``width`` columns.

    Continuation lines are indented so they sit under the message body. The
    indent gives way before a line would overflow ``width``; only a single
    word longer than ``width`` can still exceed it. Blank text yields an
    indent-only block whatever the identity. Tabs and carriage returns become
    spaces, and whitespace at wrap points is dropped. Never raises.
    """

    width = max(1, width)
    if not text.strip():
        return DisplayBlock(" " * min(INDENT, width) + "\n")

    lines = _wrap(f"{identity}{text}", max(1, width - INDENT))
    out = [lines[0]]
    for line in lines[1:]:
        pad = min(INDENT, max(0, width - len(line)))
        out.append(" " * pad + line)

    emphasis = lines[0][: len(identity)] if identity else ""
    return DisplayBlock("\n".join(out) + "\n", emphasis)
