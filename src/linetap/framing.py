"""Newline framing over a blocking binary stream."""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"


def iter_lines(stream: BinaryIO, encoding: str = "utf-8") -> Iterator[str]:
    """Yield decoded lines from ``stream`` until it closes or fails.

    Each line excludes its terminator. A trailing fragment with no terminator
    is dropped. Read errors end the sequence instead of propagating, so the
    caller sees the same thing as a clean EOF.
    """

    while True:
        try:
            raw = stream.readline()
        except (OSError, ValueError) as exc:
            logger.debug("stream read failed: %s", exc)
            return
        if not raw:
            return
        if not raw.endswith(LINE_TERMINATOR):
            logger.debug("discarding %d unterminated trailing bytes", len(raw))
            return
        yield raw[: -len(LINE_TERMINATOR)].decode(encoding, errors="replace")
