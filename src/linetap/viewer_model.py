"""Pure-Python state machine behind the curses viewer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from linetap.events import ClearRequest, Event, KeyEvent, QuitRequest, ResizeEvent, TaggedMessage
from linetap.formatting import DisplayBlock, format_message

STATE_UNINITIALIZED = "UNINITIALIZED"
STATE_READY = "READY"
STATE_TERMINAL = "TERMINAL"

# One header row and one footer row frame the transcript.
HEADER_HEIGHT = 1
FOOTER_HEIGHT = 1

QUIT_KEYS = {"q"}
CLEAR_KEYS = {"c"}

# Lines moved per mouse wheel notch.
WHEEL_DELTA = 3


@dataclass(frozen=True)
class ViewLine:
    text: str
    emphasis: int = 0


@dataclass
class RenderState:
    state: str
    ready: bool
    width: int
    height: int
    visible: List[ViewLine]
    scroll_percent: float
    message_count: int


class Viewport:
    """Scrollable window over the transcript lines.

    ``y_offset`` counts lines hidden above the window. When the window sits at
    the bottom it keeps following new content.
    """

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = width
        self.height = height
        self.y_offset = 0
        self.lines: List[ViewLine] = []

    def max_offset(self) -> int:
        return max(0, len(self.lines) - max(0, self.height))

    def at_bottom(self) -> bool:
        return self.y_offset >= self.max_offset()

    def set_content(self, lines: List[ViewLine]) -> None:
        follow = self.at_bottom()
        self.lines = list(lines)
        if follow:
            self.y_offset = self.max_offset()
        else:
            self.y_offset = min(self.y_offset, self.max_offset())

    def resize(self, width: int, height: int) -> None:
        follow = self.at_bottom()
        self.width = max(0, width)
        self.height = max(0, height)
        self.y_offset = self.max_offset() if follow else min(self.y_offset, self.max_offset())

    def scroll(self, delta: int) -> None:
        self.y_offset = max(0, min(self.max_offset(), self.y_offset + delta))

    def handle_key(self, key: str) -> bool:
        if key in {"UP", "k"}:
            self.scroll(-1)
        elif key in {"DOWN", "j"}:
            self.scroll(1)
        elif key == "WHEEL_UP":
            self.scroll(-WHEEL_DELTA)
        elif key == "WHEEL_DOWN":
            self.scroll(WHEEL_DELTA)
        elif key == "u":
            self.scroll(-max(1, self.height // 2))
        elif key == "d":
            self.scroll(max(1, self.height // 2))
        elif key in {"PGUP", "b"}:
            self.scroll(-max(1, self.height))
        elif key in {"PGDN", "f", " "}:
            self.scroll(max(1, self.height))
        elif key in {"HOME", "g"}:
            self.y_offset = 0
        elif key in {"END", "G"}:
            self.y_offset = self.max_offset()
        else:
            return False
        return True

    def visible(self) -> List[ViewLine]:
        if self.height <= 0:
            return []
        return self.lines[self.y_offset : self.y_offset + self.height]

    def scroll_percent(self) -> float:
        if self.max_offset() == 0:
            return 1.0
        return max(0.0, min(1.0, self.y_offset / self.max_offset()))


class ViewerModel:
    """Single consumer of dispatcher events.

    Owns the transcript and the viewport geometry. Messages that arrive before
    the first size notification are held back and formatted once a width is
    known; after that every block keeps the width it was formatted at.
    """

    def __init__(self) -> None:
        self.state = STATE_UNINITIALIZED
        self.width = 0
        self.height = 0
        self.transcript: List[DisplayBlock] = []
        self.pending: List[TaggedMessage] = []
        self.viewport = Viewport()

    @property
    def ready(self) -> bool:
        return self.state == STATE_READY

    def handle(self, event: Event) -> Optional[str]:
        """Apply one event and return ``"redraw"``, ``"quit"`` or ``None``."""

        if self.state == STATE_TERMINAL:
            return None
        if isinstance(event, QuitRequest):
            return self.quit()
        if isinstance(event, ResizeEvent):
            return self.resize(event.width, event.height)
        if isinstance(event, TaggedMessage):
            return self.append(event)
        if isinstance(event, ClearRequest):
            return self.clear()
        if isinstance(event, KeyEvent):
            return self.handle_key(event.key)
        return None

    def handle_key(self, key: str) -> Optional[str]:
        if key in QUIT_KEYS:
            return self.quit()
        if key in CLEAR_KEYS:
            return self.clear()
        if self.ready and self.viewport.handle_key(key):
            return "redraw"
        return None

    def resize(self, width: int, height: int) -> str:
        self.width = max(0, width)
        self.height = max(0, height)
        self.viewport.resize(self.width, self.height - HEADER_HEIGHT - FOOTER_HEIGHT)
        if self.state == STATE_UNINITIALIZED:
            self.state = STATE_READY
            pending, self.pending = self.pending, []
            for message in pending:
                self.transcript.append(format_message(message.identity, message.text, self.width))
            self._refresh()
        return "redraw"

    def append(self, message: TaggedMessage) -> Optional[str]:
        if not self.ready:
            self.pending.append(message)
            return None
        self.transcript.append(format_message(message.identity, message.text, self.width))
        self._refresh()
        return "redraw"

    def clear(self) -> str:
        self.transcript = []
        self.pending = []
        self._refresh()
        return "redraw"

    def quit(self) -> str:
        self.state = STATE_TERMINAL
        return "quit"

    def transcript_text(self) -> str:
        return "".join(block.text for block in self.transcript)

    def render(self) -> RenderState:
        return RenderState(
            state=self.state,
            ready=self.ready,
            width=self.width,
            height=self.height,
            visible=self.viewport.visible(),
            scroll_percent=self.viewport.scroll_percent(),
            message_count=len(self.transcript),
        )

    def _refresh(self) -> None:
        lines: List[ViewLine] = []
        for block in self.transcript:
            for idx, line in enumerate(block.lines()):
                lines.append(ViewLine(line, len(block.emphasis) if idx == 0 else 0))
        self.viewport.set_content(lines)
