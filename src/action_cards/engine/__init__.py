"""Action card resolution engine.

:class:`RepetitionController` is the entry point; the other components can
be used on their own for partial resolutions and tests.
"""

from .attack_chain import AttackChainResolver, AttackResolution
from .conditions import should_apply
from .costs import CostProcessor, ResourceCheck, check_embedded_item_resources
from .damage import DamageProcessor, apply_vulnerability_modifier
from .dice import DiceRoller, RollResult, RollService
from .intensification import IntensifyOutcome, StatusIntensifier, StoreIntensifier
from .inventory import find_gear_by_name, has_sufficient_quantity
from .notifications import (
    MESSAGES,
    CollectingNotificationSink,
    LoggingNotificationSink,
    NotificationSink,
    format_message,
)
from .pacing import AsyncioDelay, DelayProvider, Pacing, RecordingDelay
from .repetition import RepetitionController
from .status_applicator import StatusEffectApplicator, effect_selection_id
from .store import DocumentStore, InMemoryDocumentStore

__all__ = [
    "AsyncioDelay",
    "AttackChainResolver",
    "AttackResolution",
    "CollectingNotificationSink",
    "CostProcessor",
    "DamageProcessor",
    "DelayProvider",
    "DiceRoller",
    "DocumentStore",
    "InMemoryDocumentStore",
    "IntensifyOutcome",
    "LoggingNotificationSink",
    "MESSAGES",
    "NotificationSink",
    "Pacing",
    "RecordingDelay",
    "RepetitionController",
    "ResourceCheck",
    "RollResult",
    "RollService",
    "StatusEffectApplicator",
    "StatusIntensifier",
    "StoreIntensifier",
    "apply_vulnerability_modifier",
    "check_embedded_item_resources",
    "effect_selection_id",
    "find_gear_by_name",
    "format_message",
    "has_sufficient_quantity",
    "should_apply",
]
