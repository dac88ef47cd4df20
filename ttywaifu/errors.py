"""Failure values returned across component boundaries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class ErrorKind(Enum):
    NETWORK_TIMEOUT = auto()
    NETWORK_STATUS = auto()
    NETWORK_ERROR = auto()
    MALFORMED_RESPONSE = auto()
    RENDERER_EXIT_NONZERO = auto()
    RENDERER_MISSING = auto()
    FILESYSTEM_ERROR = auto()


@dataclass(frozen=True)
class Failure:
    """A recoverable failure. Components return these instead of raising."""
    kind: ErrorKind
    message: str
    status: int | None = None  # HTTP status or renderer exit code
    attempts: int = 1

    def __str__(self) -> str:
        return f"{self.kind.name}: {self.message}"
