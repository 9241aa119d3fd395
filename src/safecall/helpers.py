"""Small conveniences around awaitables that do not need the executor."""

import asyncio
import functools
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def async_try(awaitable: Awaitable[T]) -> tuple[Exception | None, T | None]:
    """Await ``awaitable`` and return ``(error, value)`` instead of raising."""
    try:
        return None, await awaitable
    except Exception as exc:
        return exc, None


async def safe_all(
    items: Iterable[Callable[[], Awaitable[T]] | Awaitable[T]],
) -> tuple[Exception | None, list[T] | None]:
    """
    Run every item concurrently; return all results or the first error.

    Items may be awaitables or zero-argument callables returning one. Callables
    are invoked here, so nothing starts before ``safe_all`` is awaited.
    """
    awaitables: list[Awaitable[T]] = []
    try:
        for item in items:
            awaitables.append(item if inspect.isawaitable(item) else item())
    except Exception as exc:
        # Close coroutines that will never be awaited.
        for pending in awaitables:
            if inspect.iscoroutine(pending):
                pending.close()
        return exc, None

    try:
        results = await asyncio.gather(*awaitables)
    except Exception as exc:
        return exc, None
    return None, list(results)


def with_async_catch(
    func: Callable[..., Awaitable[R]],
    on_error: Callable[[Exception], None] | None = None,
) -> Callable[..., Awaitable[R | None]]:
    """
    Wrap ``func`` so failures return ``None`` and are handed to ``on_error``.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> R | None:
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            if on_error is not None:
                on_error(exc)
            return None

    return wrapper
