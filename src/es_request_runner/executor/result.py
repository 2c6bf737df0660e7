"""Outcome of executing one request."""

from typing import Any, Literal

from pydantic import BaseModel

ErrorKind = Literal["http", "connection", "tls", "timeout", "request", "file"]


class Ok(BaseModel):
    """The server answered with a 2xx/3xx status."""

    status: int
    body: Any = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return True


class Err(BaseModel):
    """The request failed; ``raw_body`` holds the server's error payload if any."""

    kind: ErrorKind
    message: str
    status: int | None = None
    raw_body: Any = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return False


ExecutionResult = Ok | Err
