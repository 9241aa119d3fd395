"""
Timeout source backed by a single event-loop timer.
"""

import asyncio
from typing import Any, Literal

from .signal import CancellationSignal, Unsubscribe


class TimerResource:
    """
    Owns at most one pending timer and the signal that timer fires.

    The timer is cancelled when the resource is disposed or when its signal
    fires through any other path. A disposed resource never fires later.

    Parameters
    ----------
    signal:
        Optional host signal to fire on expiry. If it has already fired,
        ``start()`` schedules nothing and returns it as-is.

    loop:
        Event loop used for scheduling. Defaults to the running loop.
    """

    def __init__(
        self,
        *,
        signal: CancellationSignal | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.signal = signal if signal is not None else CancellationSignal()
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._unsubscribe: Unsubscribe | None = None
        self._disposed = False

    @property
    def active(self) -> bool:
        """True while a timer is pending."""
        return self._handle is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def start(self, delay_s: float) -> CancellationSignal:
        if self._disposed:
            raise RuntimeError("TimerResource has been disposed.")
        if self.signal.fired:
            return self.signal

        # Restarting replaces the pending timer; never two at once.
        self._clear_handle()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(delay_s, self._expire)
        if self._unsubscribe is None:
            self._unsubscribe = self.signal.subscribe(self._on_signal)
        return self.signal

    def dispose(self) -> None:
        """Cancel the pending timer. Safe to call any number of times."""
        if self._disposed:
            return
        self._disposed = True
        self._clear_handle()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _expire(self) -> None:
        self._handle = None
        if not self._disposed:
            self.signal.fire()

    def _on_signal(self, _: CancellationSignal) -> None:
        self._unsubscribe = None
        self._clear_handle()

    def _clear_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def __enter__(self) -> "TimerResource":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> Literal[False]:
        self.dispose()
        return False


def timeout_signal(
    delay_s: float,
    *,
    signal: CancellationSignal | None = None,
) -> TimerResource:
    """Start a TimerResource that fires after ``delay_s`` seconds."""
    timer = TimerResource(signal=signal)
    timer.start(delay_s)
    return timer
