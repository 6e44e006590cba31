"""Interactive sender: forwards typed lines to a listener."""

from __future__ import annotations

import argparse
import logging
import socket
import sys
from typing import TextIO

from linetap.config import Endpoint
from linetap.errors import ConnectFailure
from linetap.identity import announcement

logger = logging.getLogger(__name__)

PROMPT = "Text to send: "


def connect(endpoint: Endpoint, timeout: float | None = None) -> socket.socket:
    try:
        sock = socket.create_connection(endpoint.address, timeout=timeout)
    except OSError as exc:
        raise ConnectFailure(endpoint.host, endpoint.port, exc) from exc
    sock.settimeout(None)
    return sock


class LineSender:
    """Writes newline-terminated UTF-8 lines to one connection."""

    def __init__(self, sock: socket.socket) -> None:
        self.sock = sock
        self.sent = 0

    def send_line(self, text: str) -> None:
        data = text if text.endswith("\n") else text + "\n"
        self.sock.sendall(data.encode("utf-8"))
        self.sent += 1

    def announce(self, name: str) -> None:
        self.send_line(announcement(name))


def send_interactive(sender: LineSender, stdin: TextIO, output: TextIO, prompt: str = PROMPT) -> int:
    """Prompt for lines until input ends or the connection breaks.

    Returns the number of lines forwarded.
    """

    forwarded = 0
    while True:
        output.write(prompt)
        output.flush()
        line = stdin.readline()
        if not line:
            output.write("\n")
            break
        try:
            sender.send_line(line)
        except OSError as exc:
            logger.debug("send failed", exc_info=True)
            print(f"Error sending: {exc}", file=sys.stderr)
            break
        forwarded += 1
    return forwarded


def main(
    argv: list[str] | None = None,
    stdin: TextIO | None = None,
    output: TextIO | None = None,
    endpoint: Endpoint | None = None,
) -> int:
    parser = argparse.ArgumentParser(description="Send typed lines to a linetap listener")
    parser.add_argument("name", nargs="?", default=None, help="identity shown next to your lines")
    args = parser.parse_args(argv)

    stdin = stdin or sys.stdin
    output = output or sys.stdout
    endpoint = endpoint or Endpoint()

    output.write(f"Connecting to {endpoint.describe()}\n")
    try:
        sock = connect(endpoint)
    except ConnectFailure as exc:
        print(f"Error connecting: {exc.cause or exc}", file=sys.stderr)
        return 1

    with sock:
        sender = LineSender(sock)
        if args.name:
            output.write(f"Setting name to {args.name}\n")
            try:
                sender.announce(args.name)
            except OSError as exc:
                print(f"Error sending: {exc}", file=sys.stderr)
                return 0
        try:
            send_interactive(sender, stdin, output)
        except KeyboardInterrupt:
            output.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
