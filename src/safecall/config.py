import dataclasses
from dataclasses import dataclass
from typing import Any

from .classify import ClassifierFn
from .signal import CancellationSignal
from .types import MISSING, ErrorHook


@dataclass(frozen=True)
class SafeConfig:
    """
    Per-call settings for the executor.

    ``fallback`` defaults to the MISSING sentinel, so ``None`` is a valid
    fallback value. Use ``has_fallback`` rather than comparing the value.
    """

    timeout_s: float | None = None
    signal: CancellationSignal | None = None
    retry: int = 0
    fallback: Any = MISSING
    on_error: ErrorHook | None = None
    classifier: ClassifierFn | None = None

    def __post_init__(self) -> None:
        if self.retry < 0:
            raise ValueError("retry must be >= 0.")
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("timeout_s must be > 0.")

    @property
    def has_fallback(self) -> bool:
        return self.fallback is not MISSING

    @property
    def max_attempts(self) -> int:
        return self.retry + 1

    def replace(self, **changes: Any) -> "SafeConfig":
        """Return a copy with ``changes`` applied (validated again)."""
        return dataclasses.replace(self, **changes)
