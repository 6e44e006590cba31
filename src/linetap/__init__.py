"""Fan-in line viewer: many TCP senders, one scrolling terminal view."""

from .config import Endpoint
from .errors import BindFailure, ConnectFailure, LinetapError
from .events import (
    ClearRequest,
    EventDispatcher,
    KeyEvent,
    QuitRequest,
    ResizeEvent,
    TaggedMessage,
)
from .formatting import DisplayBlock, format_message
from .framing import iter_lines
from .identity import ConnectionState, extract_identity
from .listener import Listener
from .viewer_model import ViewerModel
from .worker import ConnectionWorker

__all__ = [
    "BindFailure",
    "ClearRequest",
    "ConnectFailure",
    "ConnectionState",
    "ConnectionWorker",
    "DisplayBlock",
    "Endpoint",
    "EventDispatcher",
    "KeyEvent",
    "LinetapError",
    "Listener",
    "QuitRequest",
    "ResizeEvent",
    "TaggedMessage",
    "ViewerModel",
    "extract_identity",
    "format_message",
    "iter_lines",
]
