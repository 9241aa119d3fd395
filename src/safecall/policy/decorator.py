import functools
from collections.abc import Awaitable, Callable
from typing import Any

from ..classify import ClassifierFn
from ..types import MISSING
from .executor import SafeExecutor
from .types import CallContext, ErrorHook, LogHook, MetricHook, T


def safe(
    *,
    timeout_s: float | None = None,
    retry: int = 0,
    fallback: Any = MISSING,
    on_error: ErrorHook | None = None,
    classifier: ClassifierFn | None = None,
    on_metric: MetricHook | None = None,
    on_log: LogHook | None = None,
    operation: str | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Decorate an async function so every call runs through a SafeExecutor.

    The wrapped function receives the attempt's CallContext as a ``ctx``
    keyword argument. Callers may pass ``cancel_signal=`` to supply an
    external cancellation signal for that call; it is consumed here and not
    forwarded. Every other keyword, ``signal`` included, reaches the function.

        @safe(timeout_s=2.0, retry=2)
        async def fetch(url: str, *, ctx: CallContext) -> bytes:
            ...
    """
    executor = SafeExecutor(
        timeout_s=timeout_s,
        retry=retry,
        fallback=fallback,
        on_error=on_error,
        classifier=classifier,
    )

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = operation or func.__name__

        @functools.wraps(func)
        async def wrapper(
            *args: Any, cancel_signal: Any = None, **kwargs: Any
        ) -> T:
            def attempt(ctx: CallContext) -> Awaitable[T]:
                return func(*args, ctx=ctx, **kwargs)

            return await executor.call(
                attempt,
                signal=cancel_signal,
                on_metric=on_metric,
                on_log=on_log,
                operation=name,
            )

        wrapper.executor = executor  # type: ignore[attr-defined]
        return wrapper

    return decorator
