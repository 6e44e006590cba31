import socket
import unittest

from linetap.events import EventDispatcher, TaggedMessage
from linetap.worker import ConnectionWorker, handle_connection


class TestConnectionWorker(unittest.TestCase):
    def setUp(self) -> None:
        self.dispatcher = EventDispatcher()
        self.server_side, self.client_side = socket.socketpair()
        self.addCleanup(self.client_side.close)
        self.addCleanup(self.server_side.close)

    def test_emits_tagged_messages_in_read_order(self):
        self.client_side.sendall(b"::name::Alice\nhello\nworld\n::name::Al\nbye\n")
        self.client_side.close()

        worker = ConnectionWorker(self.server_side, self.dispatcher, conn_id=7)
        worker.run()

        self.assertEqual(
            self.dispatcher.drain(),
            [
                TaggedMessage("Alice: ", "hello"),
                TaggedMessage("Alice: ", "world"),
                TaggedMessage("Al: ", "bye"),
            ],
        )
        self.assertEqual(worker.submitted, 3)
        self.assertEqual(worker.state.identity, "Al: ")

    def test_identity_only_connection_emits_nothing(self):
        self.client_side.sendall(b"::name::Bob\n")
        self.client_side.close()

        ConnectionWorker(self.server_side, self.dispatcher).run()

        self.assertEqual(self.dispatcher.drain(), [])

    def test_closes_socket_when_peer_goes_away(self):
        self.client_side.sendall(b"one\ntrailing")
        self.client_side.close()

        ConnectionWorker(self.server_side, self.dispatcher).run()

        self.assertEqual(self.dispatcher.drain(), [TaggedMessage("", "one")])
        self.assertEqual(self.server_side.fileno(), -1)

    def test_handle_connection_runs_on_daemon_thread(self):
        thread = handle_connection(self.server_side, self.dispatcher, conn_id=3)
        self.assertTrue(thread.daemon)
        self.assertEqual(thread.name, "linetap-conn-3")

        self.client_side.sendall(b"ping\n")
        self.assertEqual(self.dispatcher.next_event(timeout=5), TaggedMessage("", "ping"))

        self.client_side.close()
        thread.join(timeout=5)
        self.assertFalse(thread.is_alive())


if __name__ == "__main__":
    unittest.main()
