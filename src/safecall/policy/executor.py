from typing import Any

from ..classify import ClassifierFn
from ..config import SafeConfig
from ..signal import CancellationSignal
from ..types import MISSING
from .context import _SafeContext
from .runner import _run_call
from .types import ErrorHook, LogHook, MetricHook, Operation, T


class SafeExecutor:
    """
    Run an async operation with a per-attempt timeout, an external
    cancellation signal and a bounded retry budget.

    The executor is deliberately small:
      * It never sleeps between attempts; retries start immediately.
      * It knows nothing about HTTP, SQL, etc. Domain mapping lives in the
        classifier.
      * It holds no state between calls, so one instance can be shared.

    Parameters
    ----------
    timeout_s:
        Per-attempt timeout in seconds. Each attempt gets a fresh timer; when
        it fires the attempt's signal fires and the attempt fails with a
        TIMEOUT AppError.

    signal:
        External CancellationSignal. Combined with the timeout signal when
        both are present. Firing it fails the current attempt with an
        ABORTED AppError (subject to retry like any other failure).

    retry:
        Number of retries after the first attempt. ``retry=2`` means at most
        three invocations.

    fallback:
        Value returned instead of raising once retries are exhausted. Any
        value counts, including ``None``; leave unset to raise.

    on_error:
        Called once, with the last attempt's AppError, when retries are
        exhausted. Errors raised by it propagate to the caller.

    classifier:
        Replaces ``default_classifier``. Receives the raw exception.
    """

    def __init__(
        self,
        *,
        timeout_s: float | None = None,
        signal: CancellationSignal | None = None,
        retry: int = 0,
        fallback: Any = MISSING,
        on_error: ErrorHook | None = None,
        classifier: ClassifierFn | None = None,
    ) -> None:
        self.config = SafeConfig(
            timeout_s=timeout_s,
            signal=signal,
            retry=retry,
            fallback=fallback,
            on_error=on_error,
            classifier=classifier,
        )

    @classmethod
    def from_config(cls, config: SafeConfig) -> "SafeExecutor":
        """
        Construct a SafeExecutor from a SafeConfig bundle.
        """
        return cls(
            timeout_s=config.timeout_s,
            signal=config.signal,
            retry=config.retry,
            fallback=config.fallback,
            on_error=config.on_error,
            classifier=config.classifier,
        )

    async def call(
        self,
        func: Operation[T],
        *,
        signal: CancellationSignal | None = None,
        on_metric: MetricHook | None = None,
        on_log: LogHook | None = None,
        operation: str | None = None,
    ) -> T:
        """
        Execute ``func`` according to this executor's configuration.

        Parameters
        ----------
        func:
            Called once per attempt with a CallContext carrying the attempt's
            effective signal (or ``None``) and its 0-based index. Must return
            an awaitable.

        signal:
            Overrides the configured external signal for this call only.

        on_metric:
            Optional observability callback:

                on_metric(
                    event: str,           # see below
                    attempt: int,         # attempts made so far (1-based)
                    elapsed_s: float,     # time since the call started
                    tags: dict[str, Any], # safe tags (no payloads)
                )

            Events emitted:
              * "success"   - an attempt returned
              * "retry"     - an attempt failed and another will start
              * "exhausted" - the last allowed attempt failed
              * "fallback"  - the fallback value is being returned
              * "cancelled" - the awaiting task was cancelled

            Tags: ``kind`` (ErrorKind name), ``err`` (exception class
            name), ``fired_by`` ("timeout" or "signal") and ``operation``.
            Hook errors are swallowed.

        on_log:
            Optional ``on_log(event, fields)`` hook invoked at the same points;
            ``fields`` holds attempt, elapsed_s and the tags above.

        operation:
            Logical name propagated into tags.

        Raises
        ------
        AppError
            The last attempt's classified error when retries are exhausted
            and no fallback is configured.
        """
        config = self.config
        if signal is not None:
            config = config.replace(signal=signal)
        return await _run_call(
            func=func,
            config=config,
            on_metric=on_metric,
            on_log=on_log,
            operation=operation,
        )

    def context(
        self,
        *,
        signal: CancellationSignal | None = None,
        on_metric: MetricHook | None = None,
        on_log: LogHook | None = None,
        operation: str | None = None,
    ) -> _SafeContext:
        """
        Async context manager that binds hooks/operation for multiple calls.
        """
        return _SafeContext(self, signal, on_metric, on_log, operation)


async def safe_async(
    func: Operation[T],
    *,
    timeout_s: float | None = None,
    signal: CancellationSignal | None = None,
    retry: int = 0,
    fallback: Any = MISSING,
    on_error: ErrorHook | None = None,
    classifier: ClassifierFn | None = None,
    on_metric: MetricHook | None = None,
    on_log: LogHook | None = None,
    operation: str | None = None,
) -> T:
    """One-shot form of ``SafeExecutor(...).call(func)``."""
    executor = SafeExecutor(
        timeout_s=timeout_s,
        signal=signal,
        retry=retry,
        fallback=fallback,
        on_error=on_error,
        classifier=classifier,
    )
    return await executor.call(
        func, on_metric=on_metric, on_log=on_log, operation=operation
    )
