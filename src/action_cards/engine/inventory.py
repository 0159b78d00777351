"""Gear lookup in an actor's inventory."""

from __future__ import annotations

import logging

from action_cards.engine.core.entities import Actor, GearItem

logger = logging.getLogger(__name__)


def has_sufficient_quantity(item: GearItem | None, required: int) -> bool:
    return item is not None and item.quantity >= required


def find_gear_by_name(
    actor: Actor,
    name: str,
    required_quantity: int | None = None,
) -> GearItem | None:
    """Find the best gear item called *name* in *actor*'s inventory.

    When several stacks share the name, prefer (in order) a stack that can
    cover *required_quantity*, an equipped stack, then the largest stack.

    Returns ``None`` if the actor owns no gear with that name.
    """
    matches = [g for g in actor.gear if g.name == name]
    if not matches:
        logger.debug("No gear named %r on %s", name, actor.name)
        return None

    def _rank(item: GearItem) -> tuple[bool, bool, int]:
        can_fulfil = required_quantity is None or item.quantity >= required_quantity
        return (can_fulfil, item.equipped, item.quantity)

    return max(matches, key=_rank)
