from collections.abc import Iterable

from .signal import CancellationSignal, Unsubscribe


class CombinedSignal(CancellationSignal):
    """
    Signal that fires when the first of its sources fires.

    Sources are referenced, not owned. Once fired (or closed) the combination
    holds no subscriptions on any source.
    """

    def __init__(self, sources: Iterable[CancellationSignal] = ()) -> None:
        super().__init__()
        # dict keeps first-seen order and drops repeated references.
        self.sources: tuple[CancellationSignal, ...] = tuple(dict.fromkeys(sources))
        self._unsubscribers: list[Unsubscribe] = []

        for source in self.sources:
            if source.fired:
                self._fire(source)
                return

        for source in self.sources:
            self._unsubscribers.append(source.subscribe(self._fire))

    def _fire(self, source: CancellationSignal) -> None:
        self.close()
        super()._fire(source)

    def close(self) -> None:
        """Detach from every source. Idempotent; does not fire."""
        unsubscribers, self._unsubscribers = self._unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    @property
    def attached(self) -> bool:
        return bool(self._unsubscribers)


def combine_signals(signals: Iterable[CancellationSignal]) -> CombinedSignal:
    """
    Merge ``signals`` into one that fires on the first source to fire.

    An empty input yields a signal that never fires on its own.
    """
    return CombinedSignal(signals)
