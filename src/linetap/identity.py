"""In-band identity announcements carried on the line stream."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from linetap.config import LABEL_TERMINATOR, NAME_MARKER
from linetap.events import TaggedMessage


@dataclass
class ConnectionState:
    """Per-connection state, owned by exactly one worker."""

    identity: str = ""


def announcement(name: str) -> str:
    """Return the wire line (without terminator) that announces ``name``."""

    return f"{NAME_MARKER}{name}"


def extract_identity(line: str, state: ConnectionState) -> Optional[TaggedMessage]:
    """Consume an announcement or tag a regular line.

    Announcement lines update ``state.identity`` and produce no message. A
    blank announcement resets the label to empty.
    """

    if line.startswith(NAME_MARKER):
        name = line[len(NAME_MARKER) :].strip()
        state.identity = f"{name}{LABEL_TERMINATOR}" if name else ""
        return None
    return TaggedMessage(identity=state.identity, text=line)
