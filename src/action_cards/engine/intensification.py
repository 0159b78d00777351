"""Attach-or-intensify for granted effects.

A target never carries two copies of the same status.  When a granted
status matches one the target already has (same name and description),
the existing status is intensified instead: every non-zero modifier moves
one step further from zero.  Gear and features are always created fresh.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from action_cards.engine.core.entities import Actor, StatusItem
from action_cards.engine.store import DocumentStore
from action_cards.errors import DocumentNotFoundError
from action_cards.ir.effects import EffectModifier, StatusEffect

logger = logging.getLogger(__name__)


@dataclass
class IntensifyOutcome:
    applied: bool
    intensified: bool = False
    item: Any = None
    error: str | None = None


class StatusIntensifier(Protocol):
    async def apply_or_intensify(self, target: Actor, effect: Any) -> IntensifyOutcome: ...


def intensify_modifier(modifier: EffectModifier) -> EffectModifier:
    """Return *modifier* moved one step away from zero (zero is unchanged)."""
    value = modifier.value
    if value > 0:
        value += 1
    elif value < 0:
        value -= 1
    return modifier.model_copy(update={"value": value})


def find_matching_status(target: Actor, effect: StatusEffect) -> StatusItem | None:
    for status in target.statuses:
        if status.name == effect.name and status.description == effect.description:
            return status
    return None


class StoreIntensifier:
    """Default :class:`StatusIntensifier` backed by a :class:`DocumentStore`."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def apply_or_intensify(self, target: Actor, effect: Any) -> IntensifyOutcome:
        try:
            current = await self.store.get(target.id)
            if current is None:
                raise DocumentNotFoundError(target.id)

            if isinstance(effect, StatusEffect):
                existing = find_matching_status(current, effect)
                if existing is not None:
                    modifiers = [intensify_modifier(m) for m in existing.modifiers]
                    item = await self.store.update_item(
                        current.id, existing.id, {"modifiers": modifiers}
                    )
                    logger.info("Intensified %s on %s", effect.name, current.name)
                    return IntensifyOutcome(applied=True, intensified=True, item=item)

            record = effect.model_dump(exclude={"id"})
            created = await self.store.create_embedded_records(current.id, [record])
            logger.info("Applied %s to %s", effect.name, current.name)
            return IntensifyOutcome(applied=True, intensified=False, item=created[0])
        except Exception as exc:
            logger.exception("Failed to apply %s to %s", effect.name, target.name)
            return IntensifyOutcome(applied=False, error=str(exc))
