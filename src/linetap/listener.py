"""TCP listener spawning one worker thread per accepted connection."""

from __future__ import annotations

import itertools
import logging
import socket
import threading
from typing import Optional

from linetap.config import Endpoint
from linetap.errors import BindFailure
from linetap.events import EventDispatcher
from linetap.worker import handle_connection

logger = logging.getLogger(__name__)


def preferred_address(infos: list[tuple]) -> tuple:
    """Pick the ``getaddrinfo`` entry to bind, IPv4 first.

    When ``localhost`` resolves to both ``::1`` and ``127.0.0.1`` the IPv4
    address is bound, matching what plain ``127.0.0.1`` clients dial.
    """

    for info in infos:
        if info[0] == socket.AF_INET:
            return info
    return infos[0]


class Listener:
    """Accepts an unbounded number of line-oriented clients.

    ``bind`` runs on the caller's thread so a bind failure surfaces before the
    UI starts. ``start`` then moves the accept loop onto a daemon thread.
    """

    def __init__(
        self,
        dispatcher: EventDispatcher,
        endpoint: Endpoint | None = None,
        *,
        backlog: int = 128,
        poll_interval_s: float = 0.5,
    ) -> None:
        self.dispatcher = dispatcher
        self.endpoint = endpoint or Endpoint()
        self.backlog = backlog
        self.poll_interval_s = poll_interval_s
        self.accepted = 0
        self._sock: Optional[socket.socket] = None
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._ids = itertools.count(1)

    @property
    def address(self) -> tuple[str, int]:
        if self._sock is None:
            raise RuntimeError("listener is not bound")
        host, port = self._sock.getsockname()[:2]
        return host, port

    def bind(self) -> tuple[str, int]:
        host, port = self.endpoint.address
        try:
            infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
            family, socktype, proto, _, sockaddr = preferred_address(infos)
            sock = socket.socket(family, socktype, proto)
        except OSError as exc:
            raise BindFailure(host, port, exc) from exc
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(sockaddr)
            sock.listen(self.backlog)
        except OSError as exc:
            sock.close()
            raise BindFailure(host, port, exc) from exc
        sock.settimeout(self.poll_interval_s)
        self._sock = sock
        logger.info("listening on %s:%s", *self.address)
        return self.address

    def serve_forever(self) -> None:
        if self._sock is None:
            self.bind()
        assert self._sock is not None
        while not self._stop.is_set():
            try:
                conn, peer = self._sock.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stop.is_set():
                    break
                logger.error("Error connecting: %s", exc)
                return
            self.accepted += 1
            handle_connection(conn, self.dispatcher, conn_id=next(self._ids), peer=peer)

    def start(self) -> threading.Thread:
        if self._sock is None:
            self.bind()
        self._thread = threading.Thread(target=self.serve_forever, name="linetap-accept", daemon=True)
        self._thread.start()
        return self._thread

    def close(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.poll_interval_s * 4)
            self._thread = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "Listener":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
