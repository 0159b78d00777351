"""Status-effect application for action cards.

Grants a card's embedded effects to every target whose hit result meets
the card's status condition, subject to the per-target application limit
tracked in the :class:`ExecutionSession`.

Failures are isolated per effect: a missing gear stack, a short quantity
or an exception while applying one effect produces a non-applied
:class:`StatusEffectResult` and processing moves on to the next effect.
"""

from __future__ import annotations

import logging
from typing import Sequence

from action_cards.engine.conditions import should_apply
from action_cards.engine.core.entities import Actor
from action_cards.engine.core.results import GearCheck, StatusEffectResult, TargetHitResult
from action_cards.engine.core.session import ExecutionSession
from action_cards.engine.intensification import StatusIntensifier
from action_cards.engine.notifications import NotificationSink, format_message
from action_cards.engine.pacing import Pacing
from action_cards.engine.store import DocumentStore
from action_cards.errors import DocumentNotFoundError, FatalPreconditionError
from action_cards.ir.cards import ActionCard
from action_cards.ir.effects import SYSTEM_EFFECT_FLAG, EmbeddedEffect, GearEffect
from action_cards.settings import EngineSettings, get_settings

logger = logging.getLogger(__name__)


def effect_selection_id(effect: EmbeddedEffect, index: int) -> str:
    """Identifier used by pre-selection: the effect id, else its position."""
    return effect.id or f"effect-{index}"


class StatusEffectApplicator:
    """Applies a card's embedded effects to qualifying targets.

    Parameters
    ----------
    store:
        Document store used for gear lookups and inventory deductions.
    intensifier:
        Decides between attaching a new effect and intensifying an
        existing one.
    notifier:
        Receives user-facing warnings for skipped gear grants and
        malformed input.
    settings:
        Engine settings; the shared instance is used when omitted.
    """

    def __init__(
        self,
        store: DocumentStore,
        intensifier: StatusIntensifier,
        notifier: NotificationSink,
        settings: EngineSettings | None = None,
    ) -> None:
        self.store = store
        self.intensifier = intensifier
        self.notifier = notifier
        self.settings = settings or get_settings()

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def process_status_results(
        self,
        session: ExecutionSession,
        hits: Sequence[TargetHitResult],
        card: ActionCard,
        source_actor: Actor,
        pacing: Pacing,
    ) -> list[StatusEffectResult]:
        """Run one status pass over *hits*.

        Returns the per-effect results for every target the pass reached.
        Targets skipped by the status condition or the application limit
        contribute no results.
        """
        if not card.embedded_effects:
            return []

        effects = self.filter_effects_by_selection(card.embedded_effects, session.selected_effect_ids)
        if not effects:
            logger.debug("No effects left after selection for %s", card.name)
            return []

        config = card.attack_chain
        threshold = config.status_threshold
        if threshold is None:
            threshold = self.settings.default_status_threshold

        results: list[StatusEffectResult] = []
        for hit in hits:
            target = getattr(hit, "target", None)
            if target is None:
                logger.warning("Invalid hit result in status pass, skipping: %r", hit)
                self.notifier.warn(format_message("invalid_hit", stage="status"))
                continue

            if not should_apply(
                config.status_condition, hit.one_hit, hit.both_hit, hit.roll_total, threshold
            ):
                logger.debug(
                    "Status condition %s not met for %s (roll %d, threshold %d)",
                    config.status_condition.value, target.name, hit.roll_total, threshold,
                )
                continue

            results.extend(
                await self.apply_effects_to_target(
                    target, effects, source_actor, card.attempt_inventory_reduction, session, pacing
                )
            )
        return results

    def filter_effects_by_selection(
        self,
        effects: Sequence[EmbeddedEffect],
        selected_ids: Sequence[str] | None,
    ) -> list[EmbeddedEffect]:
        if selected_ids is None:
            return list(effects)

        selected = set(selected_ids)
        kept = [
            effect
            for index, effect in enumerate(effects)
            if effect_selection_id(effect, index) in selected
        ]
        logger.debug(
            "Effect selection %s kept %d of %d effect(s)",
            sorted(selected), len(kept), len(effects),
        )
        return kept

    # ------------------------------------------------------------------
    # Per target
    # ------------------------------------------------------------------

    async def apply_effects_to_target(
        self,
        target: Actor,
        effects: Sequence[EmbeddedEffect],
        source_actor: Actor,
        attempt_inventory_reduction: bool,
        session: ExecutionSession,
        pacing: Pacing,
    ) -> list[StatusEffectResult]:
        """Run one application pass of *effects* over *target*.

        The whole target is skipped when it has already reached the
        session's application limit.  Otherwise every effect is attempted
        in order, and the target's pass count goes up by one afterwards
        regardless of how many effects landed.

        Raises
        ------
        FatalPreconditionError
            If *effects* is empty.
        """
        if not effects:
            raise FatalPreconditionError(f"no effects to apply to {target.name}")

        if session.limit_reached(target.id):
            logger.debug(
                "Skipping %s: %d of %d application pass(es) used",
                target.name, session.application_count(target.id),
                session.status_application_limit,
            )
            return []

        results: list[StatusEffectResult] = []
        for index, effect in enumerate(effects):
            if effect is None or not effect.name:
                logger.warning("Skipping malformed effect #%d for %s: %r", index, target.name, effect)
                message = format_message("malformed_effect", index=index, target=target.name)
                self.notifier.warn(message)
                results.append(
                    StatusEffectResult(target=target, effect=effect, applied=False, warning=message)
                )
                continue

            if isinstance(effect, GearEffect) and attempt_inventory_reduction:
                check = await self.process_gear_effect(effect, source_actor, target)
                if not check.valid:
                    results.append(check.result)
                    continue

            key = f"{target.id}-{effect.name}"
            results.append(await self.apply_single_effect(effect, target, key, session, pacing))

        count = session.record_application_pass(target.id)
        logger.debug(
            "%s application pass count now %d (limit %d)",
            target.name, count, session.status_application_limit,
        )
        return results

    # ------------------------------------------------------------------
    # Per effect
    # ------------------------------------------------------------------

    async def process_gear_effect(
        self,
        effect: GearEffect,
        source_actor: Actor,
        target: Actor,
    ) -> GearCheck:
        """Validate and pay for a gear grant from *source_actor*'s inventory.

        Never raises: lookup or update failures come back as an invalid
        check carrying the error.
        """
        try:
            current = await self.store.get(source_actor.id)
            if current is None:
                raise DocumentNotFoundError(source_actor.id)

            gear = self.store.find_gear_by_name(current, effect.name, effect.cost)
            if gear is None:
                message = format_message("gear_not_found", actor=current.name, name=effect.name)
                return self._invalid_gear(effect, target, message)

            if gear.quantity < effect.cost:
                message = format_message(
                    "insufficient_gear",
                    actor=current.name, name=effect.name,
                    required=effect.cost, available=gear.quantity,
                )
                return self._invalid_gear(effect, target, message)

            remaining = max(0, gear.quantity - effect.cost)
            updated = await self.store.update_item(current.id, gear.id, {"quantity": remaining})
            logger.debug(
                "%s gave %d %s to %s (%d left)",
                current.name, effect.cost, effect.name, target.name, remaining,
            )
            return GearCheck(valid=True, gear_item=updated)
        except Exception as exc:
            logger.exception("Gear check for %s failed", effect.name)
            return GearCheck(
                valid=False,
                result=StatusEffectResult(target=target, effect=effect, applied=False, error=str(exc)),
            )

    def _invalid_gear(self, effect: GearEffect, target: Actor, message: str) -> GearCheck:
        logger.warning("%s", message)
        self.notifier.warn(message)
        return GearCheck(
            valid=False,
            result=StatusEffectResult(target=target, effect=effect, applied=False, warning=message),
        )

    async def apply_single_effect(
        self,
        effect: EmbeddedEffect,
        target: Actor,
        key: str,
        session: ExecutionSession,
        pacing: Pacing,
    ) -> StatusEffectResult:
        try:
            payload = effect.model_copy(deep=True)
            payload.flags[SYSTEM_EFFECT_FLAG] = True
            if isinstance(payload, GearEffect):
                payload.equipped = True
                payload.quantity = 1

            outcome = await self.intensifier.apply_or_intensify(target, payload)
            if outcome.applied:
                session.mark_applied(key)
            else:
                logger.warning(
                    "%s was not applied to %s: %s", effect.name, target.name, outcome.error
                )

            if not session.is_final_repetition:
                await pacing.pause()

            return StatusEffectResult(
                target=target,
                effect=effect,
                applied=outcome.applied,
                intensified=outcome.intensified,
                error=outcome.error,
            )
        except Exception as exc:
            logger.exception("Failed to apply %s to %s", effect.name, target.name)
            self.notifier.error(
                format_message("effect_failed", effect=effect.name, target=target.name, error=exc)
            )
            return StatusEffectResult(target=target, effect=effect, applied=False, error=str(exc))
