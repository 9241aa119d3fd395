"""
Attempt loop for the executor.

Each attempt owns its TimerResource and CombinedSignal (when configured) and
closes them before the next attempt is opened or the call resolves. Hook
emission lives here too so the loop reads top to bottom.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, cast

from ..classify import ClassifierFn, default_classifier, timeout_error
from ..combine import CombinedSignal, combine_signals
from ..config import SafeConfig
from ..errors import AbortedError, AppError
from ..events import EventName
from ..signal import CancellationSignal, with_abort
from ..timer import TimerResource
from .types import AttemptFailure, CallContext, FiredBy, LogHook, MetricHook, Operation, T


@dataclass
class _AttemptContext:
    """Resources owned by a single attempt."""

    attempt: int
    timer: TimerResource | None = None
    combined: CombinedSignal | None = None
    signal: CancellationSignal | None = None
    closed: bool = False

    @classmethod
    def open(
        cls,
        attempt: int,
        *,
        timeout_s: float | None,
        signal: CancellationSignal | None,
    ) -> "_AttemptContext":
        ctx = cls(attempt=attempt)
        sources: list[CancellationSignal] = []
        if signal is not None:
            sources.append(signal)
        if timeout_s is not None:
            ctx.timer = TimerResource()
            sources.append(ctx.timer.start(timeout_s))

        if len(sources) > 1:
            ctx.combined = combine_signals(sources)
            ctx.signal = ctx.combined
        elif sources:
            ctx.signal = sources[0]
        return ctx

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self.timer is not None:
            self.timer.dispose()
        if self.combined is not None:
            self.combined.close()

    def fired_by(self) -> FiredBy | None:
        effective = self.signal
        if effective is None or not effective.fired:
            return None
        if self.timer is not None and effective.source is self.timer.signal:
            return "timeout"
        return "signal"

    def failure(self, exc: Exception) -> AttemptFailure:
        return AttemptFailure(attempt=self.attempt, exception=exc, fired_by=self.fired_by())


@dataclass
class _CallState:
    on_metric: MetricHook | None
    on_log: LogHook | None
    operation: str | None
    started: float = field(default_factory=time.monotonic)

    def elapsed(self) -> float:
        return time.monotonic() - self.started

    def emit(
        self,
        event: EventName,
        attempts: int,
        *,
        error: AppError | None = None,
        failure: AttemptFailure | None = None,
    ) -> None:
        """
        Best-effort hook emission. ``attempts`` is the number of attempts made
        so far, so it is 1-based.
        """
        if self.on_metric is None and self.on_log is None:
            return

        tags: dict[str, Any] = {}
        if error is not None:
            tags["kind"] = error.kind.name
        if failure is not None:
            tags["err"] = type(failure.exception).__name__
            if failure.fired_by is not None:
                tags["fired_by"] = failure.fired_by
        if self.operation:
            tags["operation"] = self.operation
        elapsed_s = self.elapsed()

        if self.on_metric is not None:
            try:
                self.on_metric(event.value, attempts, elapsed_s, tags)
            except Exception:
                pass

        if self.on_log is not None:
            fields = {"attempt": attempts, "elapsed_s": elapsed_s, **tags}
            try:
                self.on_log(event.value, fields)
            except Exception:
                pass


def _classify(failure: AttemptFailure, classifier: ClassifierFn) -> AppError:
    # Only this attempt's own timer turns an abort into a timeout.
    if failure.timed_out and isinstance(failure.exception, AbortedError):
        return timeout_error(failure.exception)
    return classifier(failure.exception)


async def _invoke(func: Operation[T], attempt_ctx: _AttemptContext) -> T:
    ctx = CallContext(signal=attempt_ctx.signal, attempt=attempt_ctx.attempt)
    return await with_abort(func(ctx), attempt_ctx.signal)


async def _run_call(
    *,
    func: Operation[T],
    config: SafeConfig,
    on_metric: MetricHook | None,
    on_log: LogHook | None,
    operation: str | None,
) -> T:
    """Run ``func`` under ``config``, returning its result or the fallback."""
    state = _CallState(on_metric=on_metric, on_log=on_log, operation=operation)
    classifier = config.classifier or default_classifier
    attempt = 0

    while True:
        attempt_ctx = _AttemptContext.open(
            attempt, timeout_s=config.timeout_s, signal=config.signal
        )
        try:
            result = await _invoke(func, attempt_ctx)
        except (asyncio.CancelledError, KeyboardInterrupt, SystemExit):
            attempt_ctx.close()
            state.emit(EventName.CANCELLED, attempt + 1)
            raise
        except Exception as exc:
            attempt_ctx.close()
            failure = attempt_ctx.failure(exc)
        else:
            attempt_ctx.close()
            state.emit(EventName.SUCCESS, attempt + 1)
            return result

        error = _classify(failure, classifier)
        attempt += 1

        if attempt > config.retry:
            state.emit(EventName.EXHAUSTED, attempt, error=error, failure=failure)
            if config.on_error is not None:
                config.on_error(error)
            if config.has_fallback:
                state.emit(EventName.FALLBACK, attempt, error=error, failure=failure)
                return cast(T, config.fallback)
            raise error

        state.emit(EventName.RETRY, attempt, error=error, failure=failure)
