"""Game domain and response models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class JailStatus:
    is_jailed: bool
    jail_time_end: datetime | None
    reason: str | None


@dataclass(slots=True, frozen=True)
class EscapeResult:
    success: bool
    message: str
    jail_time_end: datetime | None = None


@dataclass(slots=True, frozen=True)
class JailedUser:
    id: int
    username: str
    jail_time_end: datetime | None


@dataclass(slots=True, frozen=True)
class DrugLab:
    id: int
    name: str
    level: int
    security_level: int
    capacity: int
    cost_to_upgrade: int


@dataclass(slots=True, frozen=True)
class Production:
    id: int
    lab_id: int
    drug_id: int
    quantity: int
    completes_at: datetime
    is_completed: bool
    success_rate: int
    drug_name: str | None = None


@dataclass(slots=True, frozen=True)
class StartProductionResult:
    message: str
    completes_at: datetime | None
    production: Production | None = None


@dataclass(slots=True, frozen=True)
class CollectedBatch:
    drug_name: str
    quantity: int
    success: bool


@dataclass(slots=True, frozen=True)
class CollectResult:
    message: str
    results: tuple[CollectedBatch, ...] | list[CollectedBatch] = ()

    def __post_init__(self) -> None:
        if isinstance(self.results, tuple):
            return
        object.__setattr__(self, "results", tuple(self.results))

    @property
    def successful_quantity(self) -> int:
        return sum(batch.quantity for batch in self.results if batch.success)

    @property
    def failed_quantity(self) -> int:
        return sum(batch.quantity for batch in self.results if not batch.success)


@dataclass(slots=True, frozen=True)
class MessageResult:
    message: str


__all__ = [
    "JailStatus",
    "EscapeResult",
    "JailedUser",
    "DrugLab",
    "Production",
    "StartProductionResult",
    "CollectedBatch",
    "CollectResult",
    "MessageResult",
]
