"""Interaction guards and transport primitives."""

from .countdown import CountdownTimer
from .debounce import Debouncer
from .throttle import Throttle
from .throttled_async import AsyncStatus, ThrottledAsync

__all__ = [
    "AsyncStatus",
    "CountdownTimer",
    "Debouncer",
    "Throttle",
    "ThrottledAsync",
]
