"""
Cooperative cancellation primitive.

A CancellationSignal is a one-way, one-shot flag. Operations receive one per
attempt and are expected to stop when it fires; ``with_abort`` lets the
awaiting side stop waiting even when the operation never looks at it.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from .errors import AbortedError

T = TypeVar("T")
SignalCallback = Callable[["CancellationSignal"], None]
Unsubscribe = Callable[[], None]


def _notify(callback: SignalCallback, signal: "CancellationSignal") -> None:
    try:
        callback(signal)
    except Exception:
        pass


def _noop() -> None:
    return None


class CancellationSignal:
    """
    One-shot cancellation flag with subscribe/fire semantics.

    * ``fire()`` is idempotent. Subscribers are notified synchronously, once,
      and then dropped.
    * Subscribing after the signal fired invokes the callback immediately, so
      late subscribers never miss a firing.
    * ``source`` is the signal whose firing caused this one to fire (``self``
      when fired directly).

    Subscriber errors are swallowed so one failing callback cannot prevent the
    others from running.
    """

    def __init__(self) -> None:
        self._fired = False
        self._source: CancellationSignal | None = None
        self._subscribers: dict[object, SignalCallback] = {}

    @classmethod
    def already_fired(cls) -> "CancellationSignal":
        signal = cls()
        signal.fire()
        return signal

    @property
    def fired(self) -> bool:
        return self._fired

    def is_fired(self) -> bool:
        return self._fired

    @property
    def source(self) -> "CancellationSignal | None":
        return self._source

    def fire(self) -> None:
        self._fire(self)

    def _fire(self, source: "CancellationSignal") -> None:
        if self._fired:
            return
        # Flip state before notifying so reentrant fire() calls are no-ops.
        self._fired = True
        self._source = source
        subscribers = list(self._subscribers.values())
        self._subscribers.clear()
        for callback in subscribers:
            _notify(callback, self)

    def subscribe(self, callback: SignalCallback) -> Unsubscribe:
        """
        Register ``callback`` to run once when the signal fires.

        Returns an idempotent callable that removes this subscription only;
        subscribing the same callable twice yields two independent entries.
        """
        if self._fired:
            _notify(callback, self)
            return _noop

        token = object()
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def raise_if_fired(self) -> None:
        if self._fired:
            raise AbortedError()

    async def wait(self) -> None:
        """Block until the signal fires."""
        if self._fired:
            return
        waiter, unsubscribe = _waiter(self)
        try:
            await waiter
        finally:
            unsubscribe()

    def __repr__(self) -> str:
        state = "fired" if self._fired else "live"
        return f"<{type(self).__name__} {state}>"


def _waiter(signal: CancellationSignal) -> "tuple[asyncio.Future[None], Unsubscribe]":
    waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()

    def wake(_: CancellationSignal) -> None:
        if not waiter.done():
            waiter.set_result(None)

    return waiter, signal.subscribe(wake)


def _discard_result(task: "asyncio.Future[Any]") -> None:
    if not task.cancelled():
        task.exception()


async def with_abort(awaitable: Awaitable[T], signal: CancellationSignal | None) -> T:
    """
    Await ``awaitable`` unless ``signal`` fires first.

    When the signal wins, the wrapping task is cancelled and AbortedError is
    raised. A result that is already available always wins over the signal.
    """
    if signal is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    aborted, unsubscribe = _waiter(signal)
    try:
        await asyncio.wait({task, aborted}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        task.add_done_callback(_discard_result)
        raise
    finally:
        # Listeners on the caller's signal must not outlive this call.
        unsubscribe()
        aborted.cancel()

    if task.done():
        return task.result()

    task.cancel()
    task.add_done_callback(_discard_result)
    raise AbortedError()


async def sleep(delay_s: float, signal: CancellationSignal | None = None) -> None:
    """asyncio.sleep that raises AbortedError as soon as ``signal`` fires."""
    if signal is not None:
        signal.raise_if_fired()
    await with_abort(asyncio.sleep(delay_s), signal)
