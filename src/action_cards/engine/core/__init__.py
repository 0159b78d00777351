"""Core engine types: entities, per-invocation session, results and RNG."""

from .entities import AbilityScore, Actor, FeatureItem, GearItem, OwnedItem, StatusItem
from .results import (
    CostResult,
    DamageResult,
    ExecutionResult,
    GearCheck,
    RepetitionResult,
    StatusEffectResult,
    TargetHitResult,
    TerminationReason,
)
from .rng import GameRNG
from .session import ExecutionSession

__all__ = [
    # entities
    "AbilityScore",
    "Actor",
    "FeatureItem",
    "GearItem",
    "OwnedItem",
    "StatusItem",
    # results
    "CostResult",
    "DamageResult",
    "ExecutionResult",
    "GearCheck",
    "RepetitionResult",
    "StatusEffectResult",
    "TargetHitResult",
    "TerminationReason",
    # misc
    "ExecutionSession",
    "GameRNG",
]
