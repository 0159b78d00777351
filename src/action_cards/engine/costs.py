"""Resource checks and cost payment for a card's embedded item.

Combat powers cost power, gear costs quantity of the matching inventory
gear, features are free.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from action_cards.engine.core.entities import Actor
from action_cards.engine.core.results import CostResult
from action_cards.engine.inventory import find_gear_by_name, has_sufficient_quantity
from action_cards.engine.notifications import format_message
from action_cards.engine.store import DocumentStore
from action_cards.errors import DocumentNotFoundError
from action_cards.ir.cards import EmbeddedItem, EmbeddedItemType

logger = logging.getLogger(__name__)


@dataclass
class ResourceCheck:
    ok: bool
    message: str | None = None


def check_embedded_item_resources(
    item: EmbeddedItem | None,
    actor: Actor,
    should_consume_cost: bool = True,
) -> ResourceCheck:
    """Check that *actor* can pay for *item* before anything is rolled.

    Parameters
    ----------
    item:
        The card's embedded item.  ``None`` costs nothing.
    actor:
        The acting actor.
    should_consume_cost:
        False when no payment is due this repetition; always passes.
    """
    if item is None or not should_consume_cost or item.cost <= 0:
        return ResourceCheck(ok=True)

    if item.type == EmbeddedItemType.COMBAT_POWER:
        if item.cost > actor.power:
            message = format_message(
                "insufficient_power",
                actor=actor.name, name=item.name,
                required=item.cost, available=actor.power,
            )
            logger.warning("%s", message)
            return ResourceCheck(ok=False, message=message)
        return ResourceCheck(ok=True)

    if item.type == EmbeddedItemType.GEAR:
        gear = find_gear_by_name(actor, item.name, item.cost)
        if not has_sufficient_quantity(gear, item.cost):
            message = format_message(
                "insufficient_item_gear",
                actor=actor.name, name=item.name,
                required=item.cost, available=gear.quantity if gear else 0,
            )
            logger.warning("%s", message)
            return ResourceCheck(ok=False, message=message)
        return ResourceCheck(ok=True)

    return ResourceCheck(ok=True)


class CostProcessor:
    """Deducts the embedded item's cost through the document store."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def deduct_cost(
        self, item: EmbeddedItem, actor: Actor, repetition: int
    ) -> CostResult:
        try:
            if item.type == EmbeddedItemType.COMBAT_POWER:
                remaining = max(0, actor.power - item.cost)
                await self.store.update_actor(actor.id, {"power": remaining})
                logger.debug(
                    "Repetition %d: %s paid %d power for %s (%d left)",
                    repetition, actor.name, item.cost, item.name, remaining,
                )
                return CostResult(
                    item_name=item.name, resource="power", amount=item.cost,
                    remaining=remaining, repetition=repetition,
                )

            if item.type == EmbeddedItemType.GEAR:
                gear = self.store.find_gear_by_name(actor, item.name, item.cost)
                if gear is None:
                    raise DocumentNotFoundError(f"gear {item.name!r} on {actor.name}")
                remaining = max(0, gear.quantity - item.cost)
                await self.store.update_item(actor.id, gear.id, {"quantity": remaining})
                logger.debug(
                    "Repetition %d: %s used %d of %s (%d left)",
                    repetition, actor.name, item.cost, item.name, remaining,
                )
                return CostResult(
                    item_name=item.name, resource="gear", amount=item.cost,
                    remaining=remaining, repetition=repetition,
                )

            return CostResult(item_name=item.name, resource="none", repetition=repetition)
        except Exception as exc:
            logger.exception("Failed to deduct cost of %s from %s", item.name, actor.name)
            return CostResult(
                item_name=item.name, resource=item.type.value, amount=item.cost,
                repetition=repetition, error=str(exc),
            )
