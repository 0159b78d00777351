"""Intermediate Representation (IR) for action card content.

Cards, their attack-chain / saved-damage configuration and the effects
they carry are Pydantic models that serialise cleanly to/from JSON.
"""

from .cards import (
    Ability,
    ActionCard,
    ActionMode,
    AttackChainConfig,
    DamageType,
    EmbeddedItem,
    EmbeddedItemType,
    RollType,
    SavedDamageConfig,
    TriggerCondition,
)
from .effects import (
    SYSTEM_EFFECT_FLAG,
    EffectModifier,
    EmbeddedEffect,
    FeatureEffect,
    GearEffect,
    StatusEffect,
)

__all__ = [
    # cards
    "Ability",
    "ActionCard",
    "ActionMode",
    "AttackChainConfig",
    "DamageType",
    "EmbeddedItem",
    "EmbeddedItemType",
    "RollType",
    "SavedDamageConfig",
    "TriggerCondition",
    # effects
    "SYSTEM_EFFECT_FLAG",
    "EffectModifier",
    "EmbeddedEffect",
    "FeatureEffect",
    "GearEffect",
    "StatusEffect",
]
