from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

from ..signal import CancellationSignal
from ..types import ErrorHook, LogHook, MetricHook

FiredBy = Literal["timeout", "signal"]
T = TypeVar("T")

__all__ = [
    "AttemptFailure",
    "CallContext",
    "ErrorHook",
    "FiredBy",
    "LogHook",
    "MetricHook",
    "Operation",
]


@dataclass(frozen=True)
class CallContext:
    """What an operation receives on each attempt."""

    signal: CancellationSignal | None
    attempt: int


Operation = Callable[[CallContext], Awaitable[T]]


@dataclass(frozen=True)
class AttemptFailure:
    """
    A failed attempt, tagged with which cancellation source (if any) had
    fired the attempt's effective signal.
    """

    attempt: int
    exception: Exception
    fired_by: FiredBy | None

    @property
    def timed_out(self) -> bool:
        return self.fired_by == "timeout"
