from __future__ import annotations


class LinetapError(Exception):
    """Base class for startup failures surfaced to the user."""


class BindFailure(LinetapError):
    def __init__(self, host: str, port: int, cause: BaseException | None = None):
        self.host = host
        self.port = port
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not listen on {host}:{port}{detail}")


class ConnectFailure(LinetapError):
    def __init__(self, host: str, port: int, cause: BaseException | None = None):
        self.host = host
        self.port = port
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not connect to {host}:{port}{detail}")
