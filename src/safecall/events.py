from enum import Enum


class EventName(str, Enum):
    SUCCESS = "success"
    RETRY = "retry"
    EXHAUSTED = "exhausted"
    FALLBACK = "fallback"
    CANCELLED = "cancelled"
