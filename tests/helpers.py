"""Shared helpers for socket-backed tests."""

from __future__ import annotations

import time
from typing import List

from linetap.events import Event, EventDispatcher


def collect_events(dispatcher: EventDispatcher, count: int, timeout_s: float = 5.0) -> List[Event]:
    """Block until ``count`` events arrive or the timeout passes."""

    events: List[Event] = []
    deadline = time.monotonic() + timeout_s
    while len(events) < count:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        event = dispatcher.next_event(timeout=remaining)
        if event is not None:
            events.append(event)
    return events
