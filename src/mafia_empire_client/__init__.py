"""Public package exports for the mafia empire game client."""

from .async_client import AsyncMafiaClient
from .config import MafiaClientConfig
from .core.countdown import CountdownTimer
from .core.debounce import Debouncer
from .core.throttle import Throttle
from .core.throttled_async import AsyncStatus, ThrottledAsync

__all__ = [
    "AsyncMafiaClient",
    "MafiaClientConfig",
    "AsyncStatus",
    "CountdownTimer",
    "Debouncer",
    "Throttle",
    "ThrottledAsync",
]
