"""Game feature services built on the interaction guards."""

from .customization import ProfileCustomization, Rarity
from .drugs import DrugLabService, ProductionMonitor
from .jail import JailEscapeFlow, JailService
from .models import (
    CollectedBatch,
    CollectResult,
    DrugLab,
    EscapeResult,
    JailedUser,
    JailStatus,
    MessageResult,
    Production,
    StartProductionResult,
)

__all__ = [
    "CollectedBatch",
    "CollectResult",
    "DrugLab",
    "DrugLabService",
    "EscapeResult",
    "JailedUser",
    "JailEscapeFlow",
    "JailService",
    "JailStatus",
    "MessageResult",
    "Production",
    "ProductionMonitor",
    "ProfileCustomization",
    "Rarity",
    "StartProductionResult",
]
