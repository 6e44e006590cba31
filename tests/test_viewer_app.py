import contextlib
import curses
import io
import logging
import socket
import unittest
from unittest import mock

from linetap import viewer_app
from linetap.config import HEADER_TEXT, INITIALIZING_TEXT, Endpoint
from linetap.events import EventDispatcher, TaggedMessage
from linetap.viewer_model import STATE_TERMINAL, ViewerModel


class FakeScreen:
    """Records drawing calls and replays a scripted key sequence."""

    def __init__(self, keys, size=(10, 40)):
        self.keys = list(keys)
        self.size = size
        self.frames = []
        self.current = []
        self.before_key = None

    def getmaxyx(self):
        return self.size

    def keypad(self, flag):
        pass

    def timeout(self, ms):
        pass

    def erase(self):
        self.current = []

    def addnstr(self, y, x, text, n, attr=0):
        self.current.append((y, x, text[:n], attr))

    def refresh(self):
        self.frames.append(list(self.current))

    def getch(self):
        if self.before_key is not None:
            self.before_key()
            self.before_key = None
        if not self.keys:
            return ord("q")
        key = self.keys.pop(0)
        if isinstance(key, tuple):
            self.size = key
            return curses.KEY_RESIZE
        return key


class TestNormalizeKey(unittest.TestCase):
    def test_named_keys(self):
        self.assertEqual(viewer_app._normalize_key(curses.KEY_UP), "UP")
        self.assertEqual(viewer_app._normalize_key(curses.KEY_NPAGE), "PGDN")
        self.assertEqual(viewer_app._normalize_key(curses.KEY_HOME), "HOME")

    def test_printable_keys_map_to_themselves(self):
        self.assertEqual(viewer_app._normalize_key(ord("q")), "q")
        self.assertEqual(viewer_app._normalize_key(ord("c")), "c")

    def test_unknown_keys(self):
        self.assertIsNone(viewer_app._normalize_key(0))

    def test_printable_strips_control_characters(self):
        self.assertEqual(viewer_app._printable("a\x00b\x1bc"), "a?b?c")


class TestRunViewer(unittest.TestCase):
    def test_messages_are_drawn_with_bold_label(self):
        dispatcher = EventDispatcher()
        dispatcher.submit(TaggedMessage("Alice: ", "hello"))
        model = ViewerModel()
        screen = FakeScreen([-1])

        viewer_app.run_viewer(screen, model, dispatcher)

        self.assertEqual(model.state, STATE_TERMINAL)
        self.assertEqual(model.transcript_text(), "Alice: hello\n")
        last = screen.frames[-1]
        self.assertIn((1, 0, "Alice: ", curses.A_BOLD), last)
        self.assertIn((1, 7, "hello", 0), last)
        self.assertTrue(f" {HEADER_TEXT} ".startswith(last[0][2]))
        self.assertTrue(last[-1][2].rstrip().endswith("100%"))

    def test_network_message_between_keys_is_rendered(self):
        dispatcher = EventDispatcher()
        model = ViewerModel()
        screen = FakeScreen([-1, -1])
        screen.before_key = lambda: dispatcher.submit(TaggedMessage("", "late arrival"))

        viewer_app.run_viewer(screen, model, dispatcher)

        self.assertIn((1, 0, "late arrival", 0), screen.frames[-1])

    def test_clear_key_and_resize(self):
        dispatcher = EventDispatcher()
        dispatcher.submit(TaggedMessage("", "to be cleared"))
        model = ViewerModel()
        screen = FakeScreen([ord("c"), (20, 60), -1])

        viewer_app.run_viewer(screen, model, dispatcher)

        self.assertEqual(model.transcript, [])
        self.assertEqual((model.width, model.height), (60, 20))

    def test_mouse_wheel_scrolls_transcript(self):
        dispatcher = EventDispatcher()
        for i in range(10):
            dispatcher.submit(TaggedMessage("", f"m{i}"))
        model = ViewerModel()
        screen = FakeScreen([curses.KEY_MOUSE], size=(5, 40))

        with mock.patch("curses.getmouse", return_value=(0, 1, 1, 0, curses.BUTTON4_PRESSED)):
            viewer_app.run_viewer(screen, model, dispatcher)

        self.assertEqual(model.viewport.y_offset, 4)
        self.assertEqual([line.text for line in model.render().visible], ["m4", "m5", "m6"])

    def test_unreadable_mouse_event_is_ignored(self):
        model = ViewerModel()
        screen = FakeScreen([curses.KEY_MOUSE], size=(5, 40))

        with mock.patch("curses.getmouse", side_effect=curses.error("no event")):
            viewer_app.run_viewer(screen, model, EventDispatcher())

        self.assertEqual(model.state, STATE_TERMINAL)

    def test_interrupt_while_drawing_ends_loop_quietly(self):
        dispatcher = EventDispatcher()
        dispatcher.submit(TaggedMessage("", "hello"))
        model = ViewerModel()
        screen = FakeScreen([])

        def _interrupt():
            raise KeyboardInterrupt

        screen.refresh = _interrupt

        viewer_app.run_viewer(screen, model, dispatcher)

        self.assertEqual(model.state, STATE_TERMINAL)

    def test_initializing_screen_before_geometry(self):
        screen = FakeScreen([])
        viewer_app.draw_screen(screen, ViewerModel())
        self.assertEqual(screen.frames[-1], [(1, 2, INITIALIZING_TEXT, 0)])


class TestCaptureLogs(unittest.TestCase):
    def test_records_are_buffered_and_handler_removed(self):
        buffer = io.StringIO()
        root = logging.getLogger()
        handlers_before = list(root.handlers)
        with viewer_app._capture_logs(buffer):
            logging.getLogger("linetap.worker").warning("peer vanished")
        self.assertIn("peer vanished", buffer.getvalue())
        self.assertEqual(root.handlers, handlers_before)


class TestViewerMain(unittest.TestCase):
    def test_bind_failure_exits_one(self):
        holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.addCleanup(holder.close)
        holder.bind(("127.0.0.1", 0))
        holder.listen()
        endpoint = Endpoint("127.0.0.1", holder.getsockname()[1])

        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr):
            code = viewer_app.main([], endpoint=endpoint)

        self.assertEqual(code, 1)
        self.assertIn("Error listening to port:", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
