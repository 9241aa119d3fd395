from collections.abc import Callable
from typing import Any

from .errors import AbortedError, AppError, ErrorKind

ClassifierFn = Callable[[Any], AppError]


def default_classifier(err: Any) -> AppError:
    """
    Map an arbitrary failure to an AppError.

    Already-classified errors pass through unchanged, so classifying twice is
    harmless.
    """
    if isinstance(err, AppError):
        return err

    if isinstance(err, AbortedError):
        return AppError(ErrorKind.ABORTED, "Operation aborted", cause=err)

    return AppError(ErrorKind.UNKNOWN, "Unknown error", cause=err)


def timeout_error(err: BaseException) -> AppError:
    """Classification used when an attempt's own timeout aborted it."""
    return AppError(ErrorKind.TIMEOUT, "Operation timed out", cause=err)
