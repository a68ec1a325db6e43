"""Client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from .core.query_cache import DEFAULT_STALE_SECONDS


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_seconds: float = 8.0

    def validate(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("transport.timeout_seconds must be > 0")


@dataclass(slots=True, frozen=True)
class GuardConfig:
    """Default windows for the interaction guards."""

    throttle_seconds: float = 0.3
    debounce_seconds: float = 0.5
    async_cooldown_seconds: float = 0.2
    countdown_tick_seconds: float = 1.0
    escape_cooldown_seconds: float = 30 * 60.0

    def validate(self) -> None:
        for field_name in (
            "throttle_seconds",
            "debounce_seconds",
            "async_cooldown_seconds",
            "escape_cooldown_seconds",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"guards.{field_name} must be >= 0")
        if self.countdown_tick_seconds <= 0:
            raise ValueError("guards.countdown_tick_seconds must be > 0")


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Query cache settings."""

    enabled: bool = True
    stale_seconds: float = DEFAULT_STALE_SECONDS

    def validate(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValueError("cache.enabled must be bool")
        if self.stale_seconds < 0:
            raise ValueError("cache.stale_seconds must be >= 0")


@dataclass(slots=True, frozen=True)
class MafiaClientConfig:
    """Runtime configuration for the game client."""

    base_url: str = "http://localhost:5000"
    user_agent: str = "mafia-empire-client/0.1.0"

    transport: TransportConfig = field(default_factory=TransportConfig)
    guards: GuardConfig = field(default_factory=GuardConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        self.transport.validate()
        self.guards.validate()
        self.cache.validate()


__all__ = [
    "TransportConfig",
    "GuardConfig",
    "CacheConfig",
    "MafiaClientConfig",
]
