"""Testing utilities for deterministic operations and observability."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..config import SafeConfig
from ..errors import AbortedError
from ..policy.types import CallContext
from ..signal import sleep
from ..types import MISSING


@dataclass
class FlakyOperation:
    """Operation that raises ``errors`` in order, then returns ``result``.

    Every CallContext it receives is kept in ``contexts`` together with
    whether its signal had already fired, so tests can assert on what each
    attempt observed.
    """

    errors: Sequence[Exception] = ()
    result: Any = None
    contexts: list[CallContext] = field(default_factory=list)
    fired_on_entry: list[bool] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.contexts)

    async def __call__(self, ctx: CallContext) -> Any:
        self.contexts.append(ctx)
        self.fired_on_entry.append(ctx.signal is not None and ctx.signal.fired)
        index = len(self.contexts) - 1
        if index < len(self.errors):
            raise self.errors[index]
        return self.result


@dataclass
class SlowOperation:
    """Operation that sleeps ``delay_s`` while honouring its signal.

    Raises AbortedError as soon as the attempt's signal fires.
    """

    delay_s: float
    result: Any = None
    contexts: list[CallContext] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.contexts)

    async def __call__(self, ctx: CallContext) -> Any:
        self.contexts.append(ctx)
        await sleep(self.delay_s, ctx.signal)
        return self.result


@dataclass
class HangingOperation:
    """Operation that only finishes when its signal fires, then aborts."""

    contexts: list[CallContext] = field(default_factory=list)

    async def __call__(self, ctx: CallContext) -> Any:
        self.contexts.append(ctx)
        if ctx.signal is None:
            raise ValueError("HangingOperation needs a signal to finish.")
        await ctx.signal.wait()
        raise AbortedError()


@dataclass
class RecordingHooks:
    """Collect metric and log events emitted by the executor."""

    metrics: list[tuple[str, int, float, dict[str, Any]]] = field(default_factory=list)
    logs: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def on_metric(self, event: str, attempt: int, elapsed_s: float, tags: dict[str, Any]) -> None:
        self.metrics.append((event, attempt, elapsed_s, tags))

    def on_log(self, event: str, fields: dict[str, Any]) -> None:
        self.logs.append((event, fields))

    def events(self) -> list[str]:
        return [event for event, *_ in self.metrics]

    def kwargs(self) -> dict[str, Any]:
        return {"on_metric": self.on_metric, "on_log": self.on_log}

    def reset(self) -> None:
        self.metrics.clear()
        self.logs.clear()


@dataclass(frozen=True)
class CallRecord:
    func: Callable[[CallContext], Any]
    kwargs: dict[str, Any]
    result: Any | None = None
    exception: BaseException | None = None


class FakeExecutor:
    """Executor stub with a preset result or error; records every call."""

    def __init__(
        self,
        *,
        call_result: Any = MISSING,
        call_error: BaseException | None = None,
        config: SafeConfig | None = None,
    ) -> None:
        self.call_result = call_result
        self.call_error = call_error
        self.config = config or SafeConfig()
        self.calls: list[CallRecord] = []

    async def call(self, func: Callable[[CallContext], Any], **kwargs: Any) -> Any:
        kwargs_copy = dict(kwargs)
        try:
            if self.call_error is not None:
                raise self.call_error
            if self.call_result is not MISSING:
                result = self.call_result
            else:
                result = await func(CallContext(signal=kwargs.get("signal"), attempt=0))
        except BaseException as exc:
            self.calls.append(CallRecord(func=func, kwargs=kwargs_copy, exception=exc))
            raise
        self.calls.append(CallRecord(func=func, kwargs=kwargs_copy, result=result))
        return result


def no_retries(*, timeout_s: float | None = None) -> SafeConfig:
    """Return a SafeConfig with a single attempt and no fallback."""

    return SafeConfig(timeout_s=timeout_s, retry=0)


__all__ = [
    "CallRecord",
    "FakeExecutor",
    "FlakyOperation",
    "HangingOperation",
    "RecordingHooks",
    "SlowOperation",
    "no_retries",
]
