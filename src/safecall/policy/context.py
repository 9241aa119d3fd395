from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Literal, TYPE_CHECKING

from ..signal import CancellationSignal
from .types import CallContext, LogHook, MetricHook, T

if TYPE_CHECKING:
    from .executor import SafeExecutor


@dataclass
class _SafeContext:
    executor: "SafeExecutor"
    signal: CancellationSignal | None
    on_metric: MetricHook | None
    on_log: LogHook | None
    operation: str | None

    async def __aenter__(self) -> Callable[..., Awaitable[Any]]:
        return self.call

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> Literal[False]:
        return False

    async def call(
        self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Call ``func(ctx, *args, **kwargs)`` through the executor."""

        def operation(ctx: CallContext) -> Awaitable[T]:
            return func(ctx, *args, **kwargs)

        return await self.executor.call(
            operation,
            signal=self.signal,
            on_metric=self.on_metric,
            on_log=self.on_log,
            operation=self.operation,
        )
