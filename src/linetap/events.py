"""Event types and the fan-in dispatcher feeding the single render loop."""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import List, Optional, Union


@dataclass(frozen=True)
class TaggedMessage:
    """One displayable line paired with its connection's identity label."""

    identity: str
    text: str


@dataclass(frozen=True)
class ResizeEvent:
    width: int
    height: int


@dataclass(frozen=True)
class KeyEvent:
    key: str


@dataclass(frozen=True)
class ClearRequest:
    pass


@dataclass(frozen=True)
class QuitRequest:
    pass


Event = Union[TaggedMessage, ResizeEvent, KeyEvent, ClearRequest, QuitRequest]


class EventDispatcher:
    """Many-producer, single-consumer event channel.

    Any thread may ``submit``. Only the render loop calls ``next_event`` or
    ``drain``. Events from one producer come out in the order that producer
    submitted them; nothing is promised across producers beyond arrival order.
    With ``maxsize > 0`` a producer blocks in ``submit`` until the consumer
    catches up.
    """

    def __init__(self, maxsize: int = 0) -> None:
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=maxsize)

    def submit(self, event: Event) -> None:
        self._queue.put(event)

    def next_event(self, timeout: Optional[float] = None) -> Optional[Event]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[Event]:
        events: List[Event] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return events
