from .classify import default_classifier, timeout_error
from .combine import CombinedSignal, combine_signals
from .config import SafeConfig
from .errors import AbortedError, AppError, ErrorKind
from .events import EventName
from .helpers import async_try, safe_all, with_async_catch
from .policy import AttemptFailure, CallContext, SafeExecutor, safe, safe_async
from .signal import CancellationSignal, sleep, with_abort
from .timer import TimerResource, timeout_signal
from .types import MISSING

__all__ = [
    "SafeExecutor",
    "SafeConfig",
    "safe_async",
    "safe",
    "CallContext",
    "AttemptFailure",
    "AppError",
    "AbortedError",
    "ErrorKind",
    "EventName",
    "default_classifier",
    "timeout_error",
    "CancellationSignal",
    "CombinedSignal",
    "combine_signals",
    "TimerResource",
    "timeout_signal",
    "with_abort",
    "sleep",
    "async_try",
    "safe_all",
    "with_async_catch",
    "MISSING",
]
