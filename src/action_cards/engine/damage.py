"""Damage and heal application.

Amounts are always the absolute value of the rolled total; heals add it to
the target's resolve, damage subtracts it, and resolve is clamped to
``[0, max_resolve]``.  A vulnerable target takes its vulnerability as a
flat bonus on every non-heal formula.
"""

from __future__ import annotations

import logging
from typing import Iterable

from action_cards.engine.conditions import should_apply
from action_cards.engine.core.entities import Actor
from action_cards.engine.core.results import DamageResult, TargetHitResult
from action_cards.engine.core.session import ExecutionSession
from action_cards.engine.dice import RollService
from action_cards.engine.notifications import NotificationSink, format_message
from action_cards.engine.store import DocumentStore
from action_cards.errors import DocumentNotFoundError
from action_cards.ir.cards import AttackChainConfig, DamageType, SavedDamageConfig

logger = logging.getLogger(__name__)


def apply_vulnerability_modifier(
    formula: str, damage_type: DamageType, target: Actor
) -> str:
    if damage_type == DamageType.HEAL or not target.vulnerability:
        return formula
    return f"{formula} + {abs(target.vulnerability)}"


class DamageProcessor:
    """Rolls and applies damage/heal formulas to targets.

    Parameters
    ----------
    store:
        Where resolve changes are written.
    roller:
        Evaluates the damage formulas.
    notifier:
        Receives a message for every target that could not be damaged.
    """

    def __init__(
        self,
        store: DocumentStore,
        roller: RollService,
        notifier: NotificationSink,
    ) -> None:
        self.store = store
        self.roller = roller
        self.notifier = notifier

    async def resolve_damage_for_target(
        self,
        target: Actor,
        formula: str,
        damage_type: DamageType,
        source_actor: Actor | None = None,
    ) -> DamageResult:
        """Roll *formula* and write the new resolve for *target*.

        The target is re-read from the store first, so repeated hits on
        the same actor within one pass stack instead of overwriting each
        other.

        Raises
        ------
        DocumentNotFoundError
            If *target* is no longer in the store.
        """
        current = await self.store.get(target.id)
        if current is None:
            raise DocumentNotFoundError(target.id)

        formula = apply_vulnerability_modifier(formula, damage_type, current)
        data = source_actor.roll_data() if source_actor is not None else {}
        roll = await self.roller.evaluate(formula, data)

        amount = abs(int(roll.total))
        delta = amount if damage_type == DamageType.HEAL else -amount
        after = current.resolve_after(delta)
        await self.store.update_actor(current.id, {"resolve": after})
        logger.info(
            "%s %s for %d (%s): resolve %d -> %d",
            current.name,
            "healed" if damage_type == DamageType.HEAL else "damaged",
            amount, formula, current.resolve, after,
        )
        return DamageResult(
            target=current,
            amount=amount,
            damage_type=damage_type,
            formula=formula,
            resolve_before=current.resolve,
            resolve_after=after,
        )

    async def process_damage_results(
        self,
        hits: list[TargetHitResult],
        config: AttackChainConfig,
        session: ExecutionSession,
        *,
        once_per_target: bool = True,
        source_actor: Actor | None = None,
    ) -> list[DamageResult]:
        """Apply attack-chain damage to every target whose hits qualify.

        With *once_per_target*, a target that already took damage earlier
        in this invocation is skipped even if it qualifies again.
        """
        if not config.damage_formula.strip():
            return []

        results: list[DamageResult] = []
        for hit in hits:
            target = hit.target
            if target is None:
                logger.warning("Skipping damage for hit result without a target: %r", hit)
                self.notifier.warn(format_message("invalid_hit", stage="damage"))
                continue
            if not should_apply(config.damage_condition, hit.one_hit, hit.both_hit, hit.roll_total):
                logger.debug("Damage condition not met for %s", target.name)
                continue
            if once_per_target and target.id in session.damaged_targets:
                logger.debug(
                    "Repetition %d: %s already damaged this invocation, skipping",
                    session.repetition_index, target.name,
                )
                continue

            result = await self._apply(target, config.damage_formula, config.damage_type, source_actor)
            if result.applied:
                session.damaged_targets.add(target.id)
            results.append(result)
        return results

    async def process_saved_damage(
        self,
        targets: Iterable[Actor],
        config: SavedDamageConfig,
        source_actor: Actor | None = None,
    ) -> list[DamageResult]:
        if not config.formula.strip():
            return []
        return [
            await self._apply(target, config.formula, config.type, source_actor)
            for target in targets
        ]

    async def _apply(
        self,
        target: Actor,
        formula: str,
        damage_type: DamageType,
        source_actor: Actor | None,
    ) -> DamageResult:
        try:
            return await self.resolve_damage_for_target(target, formula, damage_type, source_actor)
        except Exception as exc:
            logger.exception("Failed to apply %s to %s", damage_type.value, target.name)
            self.notifier.error(format_message("damage_failed", target=target.name, error=exc))
            return DamageResult(
                target=target, damage_type=damage_type, formula=formula,
                resolve_before=target.resolve, resolve_after=target.resolve,
                error=str(exc),
            )
