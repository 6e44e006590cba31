"""Curses front end for the fan-in listener."""

from __future__ import annotations

import argparse
import curses
import io
import logging
import sys
from typing import Optional

from linetap.config import HEADER_TEXT, INITIALIZING_TEXT, Endpoint
from linetap.errors import BindFailure
from linetap.events import EventDispatcher, KeyEvent, QuitRequest, ResizeEvent
from linetap.listener import Listener
from linetap.viewer_model import HEADER_HEIGHT, ViewerModel

POLL_MS = 50

# Older ncurses builds only report four mouse buttons.
BUTTON5_PRESSED = getattr(curses, "BUTTON5_PRESSED", 0)


def _normalize_key(key: int) -> Optional[str]:
    if key == curses.KEY_UP:
        return "UP"
    if key == curses.KEY_DOWN:
        return "DOWN"
    if key == curses.KEY_PPAGE:
        return "PGUP"
    if key == curses.KEY_NPAGE:
        return "PGDN"
    if key == curses.KEY_HOME:
        return "HOME"
    if key == curses.KEY_END:
        return "END"
    if 32 <= key <= 126:
        return chr(key)
    return None


def _printable(text: str) -> str:
    # curses rejects NUL and garbles other control characters.
    return "".join(ch if ch.isprintable() else "?" for ch in text)


def _render_text(window: curses.window, y: int, x: int, text: str, attr: int = 0) -> None:
    max_y, max_x = window.getmaxyx()
    if 0 <= y < max_y and x < max_x - 1:
        window.addnstr(y, x, text, max_x - x - 1, attr)


def draw_screen(stdscr: curses.window, model: ViewerModel) -> None:
    stdscr.erase()
    max_y, max_x = stdscr.getmaxyx()
    render = model.render()
    if not render.ready:
        _render_text(stdscr, 1, 2, INITIALIZING_TEXT)
        stdscr.refresh()
        return

    title = f" {HEADER_TEXT} "
    _render_text(stdscr, 0, 0, title + "─" * max(0, max_x - len(title)))

    for row, line in enumerate(render.visible):
        y = HEADER_HEIGHT + row
        text = _printable(line.text)
        if line.emphasis:
            _render_text(stdscr, y, 0, text[: line.emphasis], curses.A_BOLD)
            _render_text(stdscr, y, line.emphasis, text[line.emphasis :])
        else:
            _render_text(stdscr, y, 0, text)

    info = f" {render.scroll_percent * 100:3.0f}% "
    _render_text(stdscr, max_y - 1, 0, "─" * max(0, max_x - len(info)) + info)
    stdscr.refresh()


def _wheel_key() -> Optional[str]:
    try:
        _, _, _, _, bstate = curses.getmouse()
    except curses.error:
        return None
    if bstate & curses.BUTTON4_PRESSED:
        return "WHEEL_UP"
    if bstate & BUTTON5_PRESSED:
        return "WHEEL_DOWN"
    return None


def run_viewer(stdscr: curses.window, model: ViewerModel, dispatcher: EventDispatcher, poll_ms: int = POLL_MS) -> None:
    """Drive ``model`` from ``dispatcher`` until a quit is requested.

    Keys, mouse wheel and terminal resizes are fed through the same
    dispatcher as network messages so the model sees a single ordered stream.
    Ctrl-C ends the loop like ``q``.
    """

    try:
        curses.curs_set(0)
    except curses.error:
        pass
    try:
        curses.mousemask(curses.BUTTON4_PRESSED | BUTTON5_PRESSED)
    except curses.error:
        pass
    stdscr.keypad(True)
    stdscr.timeout(poll_ms)

    try:
        _event_loop(stdscr, model, dispatcher)
    except KeyboardInterrupt:
        model.handle(QuitRequest())


def _event_loop(stdscr: curses.window, model: ViewerModel, dispatcher: EventDispatcher) -> None:
    max_y, max_x = stdscr.getmaxyx()
    dispatcher.submit(ResizeEvent(max_x, max_y))
    redraw = True

    while True:
        for event in dispatcher.drain():
            action = model.handle(event)
            if action == "quit":
                return
            if action == "redraw":
                redraw = True

        if redraw:
            # Drawing can fail mid-resize; the next pass repaints.
            try:
                draw_screen(stdscr, model)
            except curses.error:
                pass
            redraw = False

        key = stdscr.getch()
        if key == -1:
            continue
        if key == curses.KEY_RESIZE:
            max_y, max_x = stdscr.getmaxyx()
            dispatcher.submit(ResizeEvent(max_x, max_y))
            continue
        if key == curses.KEY_MOUSE:
            name = _wheel_key()
        else:
            name = _normalize_key(key)
        if name is not None:
            dispatcher.submit(KeyEvent(name))


class _capture_logs:
    """Buffer log records while curses owns the terminal."""

    def __init__(self, buffer: io.StringIO, level: int = logging.WARNING) -> None:
        self.buffer = buffer
        self.level = level
        self._handler = logging.StreamHandler(buffer)
        self._handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        self._previous_level = logging.NOTSET

    def __enter__(self) -> "_capture_logs":
        root = logging.getLogger()
        self._previous_level = root.level
        root.addHandler(self._handler)
        root.setLevel(self.level)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        root = logging.getLogger()
        root.removeHandler(self._handler)
        root.setLevel(self._previous_level)


def main(argv: list[str] | None = None, endpoint: Endpoint | None = None) -> int:
    parser = argparse.ArgumentParser(description="Show lines sent by any number of linetap senders")
    parser.parse_args(argv)

    dispatcher = EventDispatcher()
    model = ViewerModel()
    listener = Listener(dispatcher, endpoint or Endpoint())
    try:
        listener.bind()
    except BindFailure as exc:
        print(f"Error listening to port: {exc.cause or exc}", file=sys.stderr)
        return 1

    buffer = io.StringIO()
    try:
        with _capture_logs(buffer):
            listener.start()
            curses.wrapper(run_viewer, model, dispatcher)
    finally:
        listener.close()
        captured = buffer.getvalue()
        if captured:
            sys.stderr.write(captured)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
