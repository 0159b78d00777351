"""Opposed two-stat check for attack-chain cards.

One roll of the embedded item's formula is made per resolution and
compared against each target's defense for the card's ``first_stat`` and
``second_stat``.  A check hits when the roll total meets or exceeds the
defense.  Items with ``roll_type = none`` hit every target twice without
rolling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from action_cards.engine.core.entities import Actor
from action_cards.engine.core.results import TargetHitResult
from action_cards.engine.dice import RollResult, RollService
from action_cards.ir.cards import ActionCard, RollType
from action_cards.settings import EngineSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class AttackResolution:
    roll: RollResult | None
    hits: list[TargetHitResult] = field(default_factory=list)

    @property
    def roll_total(self) -> int | None:
        return self.roll.total if self.roll is not None else None


class AttackChainResolver:
    def __init__(self, roller: RollService, settings: EngineSettings | None = None) -> None:
        self.roller = roller
        self.settings = settings or get_settings()

    async def roll_attack(self, card: ActionCard, actor: Actor) -> RollResult | None:
        """Roll the embedded item's formula with *actor*'s roll data.

        Returns ``None`` when there is nothing to roll.
        """
        item = card.embedded_item
        if item is None or item.roll_type == RollType.NONE:
            return None
        roll = await self.roller.evaluate(item.roll_formula, actor.roll_data())
        logger.debug("%s rolled %d for %s", actor.name, roll.total, card.name)
        return roll

    def calculate_target_hits(
        self,
        targets: list[Actor],
        roll: RollResult | None,
        card: ActionCard,
    ) -> list[TargetHitResult]:
        item = card.embedded_item
        automatic = item is not None and item.roll_type == RollType.NONE
        first_stat = card.attack_chain.first_stat
        second_stat = card.attack_chain.second_stat
        default = self.settings.default_defense

        hits: list[TargetHitResult] = []
        for target in targets:
            if automatic:
                hits.append(TargetHitResult.from_checks(target, True, True))
                continue
            if roll is None:
                hits.append(TargetHitResult.from_checks(target, False, False))
                continue

            first_hit = roll.total >= target.defense(first_stat, default)
            second_hit = roll.total >= target.defense(second_stat, default)
            logger.debug(
                "%s vs %s: %s %s, %s %s",
                roll.total, target.name,
                first_stat.value, "hit" if first_hit else "miss",
                second_stat.value, "hit" if second_hit else "miss",
            )
            hits.append(TargetHitResult.from_checks(target, first_hit, second_hit, roll.total))
        return hits

    async def resolve(
        self, card: ActionCard, actor: Actor, targets: list[Actor]
    ) -> AttackResolution:
        roll = await self.roll_attack(card, actor)
        return AttackResolution(roll=roll, hits=self.calculate_target_hits(targets, roll, card))
