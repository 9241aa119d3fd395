from .decorator import safe
from .executor import SafeExecutor, safe_async
from .types import (
    AttemptFailure,
    CallContext,
    ErrorHook,
    FiredBy,
    LogHook,
    MetricHook,
    Operation,
)

__all__ = [
    "SafeExecutor",
    "safe_async",
    "safe",
    "AttemptFailure",
    "CallContext",
    "ErrorHook",
    "FiredBy",
    "LogHook",
    "MetricHook",
    "Operation",
]
