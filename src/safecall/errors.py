from collections.abc import Mapping
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """
    Error categories surfaced by the executor.

    Values follow the ``AA-BBB-CCCC`` code layout:

        AA   - owning system (BA: this library, NET: network, SYS: system)
        BBB  - module
        CCCC - specific error
    """

    UNKNOWN = "BA-000-0000"
    TIMEOUT = "BA-001-0001"
    ABORTED = "BA-001-0002"
    NETWORK = "NET-001-0001"
    VALIDATION = "SYS-001-0001"


class AbortedError(Exception):
    """Raised when an operation stops because its cancellation signal fired."""

    def __init__(self, message: str = "Operation aborted") -> None:
        super().__init__(message)
        self.message = message


class AppError(Exception):
    """
    Classified failure surfaced to callers and to ``on_error`` hooks.

    ``cause`` holds the raw failure (or an upstream AppError). When it is an
    exception it is also chained as ``__cause__`` so tracebacks show it.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        cause: Any | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.cause = cause
        self.meta = meta
        if isinstance(cause, BaseException):
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"AppError(kind={self.kind.name}, message={self.message!r})"
