"""Per-connection reader turning framed lines into tagged messages."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Optional

from linetap.events import EventDispatcher
from linetap.framing import iter_lines
from linetap.identity import ConnectionState, extract_identity

logger = logging.getLogger(__name__)


class ConnectionWorker:
    """Owns one accepted socket for its whole life.

    The worker is the only reader of ``conn`` and the only user of its
    ``ConnectionState``. It exits when the peer closes or a read fails, and
    never retries.
    """

    def __init__(
        self,
        conn: socket.socket,
        dispatcher: EventDispatcher,
        conn_id: int = 0,
        peer: object = None,
    ) -> None:
        self.conn = conn
        self.dispatcher = dispatcher
        self.conn_id = conn_id
        self.peer = peer
        self.state = ConnectionState()
        self.submitted = 0

    def run(self) -> None:
        logger.info("connection %s opened from %s", self.conn_id, self.peer)
        try:
            self.conn.settimeout(None)
            with self.conn.makefile("rb") as stream:
                for line in iter_lines(stream):
                    message = extract_identity(line, self.state)
                    if message is None:
                        logger.debug("connection %s identity now %r", self.conn_id, self.state.identity)
                        continue
                    self.dispatcher.submit(message)
                    self.submitted += 1
        except OSError as exc:
            logger.debug("connection %s failed: %s", self.conn_id, exc)
        finally:
            self._close()
        logger.info("connection %s closed after %d messages", self.conn_id, self.submitted)

    def start(self) -> threading.Thread:
        thread = threading.Thread(target=self.run, name=f"linetap-conn-{self.conn_id}", daemon=True)
        thread.start()
        return thread

    def _close(self) -> None:
        try:
            self.conn.close()
        except OSError:
            pass


def handle_connection(
    conn: socket.socket,
    dispatcher: EventDispatcher,
    conn_id: int = 0,
    peer: Optional[object] = None,
) -> threading.Thread:
    """Start a worker thread for ``conn`` and return it."""

    return ConnectionWorker(conn, dispatcher, conn_id=conn_id, peer=peer).start()
