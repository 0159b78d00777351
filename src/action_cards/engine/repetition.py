"""Top-level resolution of an action card.

:class:`RepetitionController` evaluates how many times a card repeats and
drives each repetition in order:

1. pay the embedded item's cost (every repetition, or only the first),
2. resolve the attack chain (every repetition with ``repeat_to_hit``,
   otherwise once, reusing the first repetition's hits),
3. apply damage (every qualifying repetition, or only the first one that
   qualifies for a given target),
4. run a status pass (every repetition, or only the first),
5. pause before the next repetition.

Later repetitions see the state earlier ones left behind (resolve, power,
inventory, application counts), so repetitions never run concurrently.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace

from action_cards.engine.attack_chain import AttackChainResolver
from action_cards.engine.core.entities import Actor
from action_cards.engine.core.results import (
    ExecutionResult,
    RepetitionResult,
    TargetHitResult,
    TerminationReason,
)
from action_cards.engine.core.session import ExecutionSession
from action_cards.engine.costs import CostProcessor, check_embedded_item_resources
from action_cards.engine.damage import DamageProcessor
from action_cards.engine.dice import RollService
from action_cards.engine.intensification import StatusIntensifier, StoreIntensifier
from action_cards.engine.notifications import (
    LoggingNotificationSink,
    NotificationSink,
    format_message,
)
from action_cards.engine.pacing import AsyncioDelay, DelayProvider, Pacing
from action_cards.engine.status_applicator import StatusEffectApplicator
from action_cards.engine.store import DocumentStore
from action_cards.errors import FatalPreconditionError, FormulaError
from action_cards.ir.cards import ActionCard
from action_cards.settings import EngineSettings, get_settings

logger = logging.getLogger(__name__)


class RepetitionController:
    """Runs action cards against a document store.

    Parameters
    ----------
    store:
        Source of actors and sink for every persistent change.
    roller:
        Evaluates the repetitions, attack and damage formulas.
    intensifier:
        Status attach/intensify collaborator.  Defaults to a
        :class:`StoreIntensifier` over *store*.
    notifier:
        User-facing notifications.  Defaults to logging them.
    delay:
        Where pacing waits go.  Defaults to :class:`AsyncioDelay`.
    settings:
        Engine settings; the shared instance is used when omitted.
    """

    def __init__(
        self,
        store: DocumentStore,
        roller: RollService,
        *,
        intensifier: StatusIntensifier | None = None,
        notifier: NotificationSink | None = None,
        delay: DelayProvider | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.store = store
        self.roller = roller
        self.notifier = notifier or LoggingNotificationSink()
        self.delay = delay or AsyncioDelay()
        self.settings = settings or get_settings()

        self.attack_chain = AttackChainResolver(roller, self.settings)
        self.damage = DamageProcessor(store, roller, self.notifier)
        self.costs = CostProcessor(store)
        self.status = StatusEffectApplicator(
            store,
            intensifier or StoreIntensifier(store),
            self.notifier,
            self.settings,
        )

    # ------------------------------------------------------------------
    # Repetition count
    # ------------------------------------------------------------------

    async def calculate_repetition_count(self, card: ActionCard, actor: Actor) -> int:
        """Evaluate ``card.repetitions`` once for this invocation.

        Non-integer totals are floored, anything below 1 is raised to 1
        (with a warning), and the result is capped by the configured
        ``execution_limit``.

        Raises
        ------
        FatalPreconditionError
            If the formula cannot be evaluated.
        """
        formula = card.repetitions.strip() or "1"
        try:
            roll = await self.roller.evaluate(formula, actor.roll_data())
        except FormulaError as exc:
            raise FatalPreconditionError(
                f"invalid repetitions formula {card.repetitions!r} on {card.name}: {exc}"
            ) from exc

        count = math.floor(roll.total)
        if count < 1:
            logger.warning(
                "%s rolled %d repetitions (%s), clamping to 1", card.name, count, formula
            )
            self.notifier.warn(format_message("repetitions_clamped", card=card.name, count=count))
            count = 1

        limit = self.settings.execution_limit
        if limit and count > limit:
            logger.info("%s: capping %d repetitions at execution limit %d", card.name, count, limit)
            self.notifier.info(
                format_message("repetitions_capped", card=card.name, count=count, limit=limit)
            )
            count = limit

        logger.info("%s will run %d repetition(s)", card.name, count)
        return count

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        card: ActionCard,
        actor_id: str,
        target_ids: list[str],
        *,
        selected_effect_ids: list[str] | None = None,
        disable_delays: bool | None = None,
    ) -> ExecutionResult:
        """Resolve *card* for *actor_id* against *target_ids*.

        Always returns the results of every repetition that ran.  When the
        actor or a target disappears mid-sequence, or the actor can no
        longer pay, the loop stops and the result carries the reason.

        Raises
        ------
        FatalPreconditionError
            If the acting actor does not exist when the invocation starts,
            or the repetitions formula is invalid.
        """
        actor = await self.store.get(actor_id)
        if actor is None:
            self.notifier.error(format_message("missing_actor", card=card.name))
            raise FatalPreconditionError(f"actor {actor_id!r} not found")

        result = ExecutionResult(card_id=card.id, actor_id=actor_id)
        if not target_ids:
            self.notifier.warn(format_message("no_targets", card=card.name))
            result.terminate(TerminationReason.NO_TARGETS, f"{card.name} has no targets")
            logger.warning("%s: no targets, nothing to do", card.name)
            return result

        total = await self.calculate_repetition_count(card, actor)
        result.total_repetitions = total

        session = ExecutionSession(
            status_application_limit=card.status_application_limit,
            selected_effect_ids=list(selected_effect_ids) if selected_effect_ids is not None else None,
            total_repetitions=total,
        )
        disabled = self.settings.disable_delays if disable_delays is None else disable_delays
        pacing = Pacing(
            self.delay,
            disabled=disabled,
            timing_override=card.timing_override,
            default_delay=self.settings.execution_delay,
        )

        hits: list[TargetHitResult] | None = None
        for index in range(1, total + 1):
            session.begin_repetition(index)

            actor = await self.store.get(actor_id)
            if actor is None:
                self.notifier.error(format_message("missing_actor", card=card.name))
                result.terminate(
                    TerminationReason.MISSING_ACTOR,
                    f"actor {actor_id!r} disappeared before repetition {index}",
                )
                break

            targets = await self._load_targets(target_ids)
            if targets is None:
                self.notifier.warn(
                    format_message("invalid_target", card=card.name, completed=index - 1)
                )
                result.terminate(
                    TerminationReason.INVALID_TARGET,
                    f"a target disappeared before repetition {index}",
                )
                break

            pays = card.cost_on_repetition or index == 1
            check = check_embedded_item_resources(card.embedded_item, actor, should_consume_cost=pays)
            if not check.ok:
                self.notifier.warn(check.message or "")
                result.terminate(TerminationReason.INSUFFICIENT_RESOURCES, check.message or "")
                break

            repetition = await self._run_repetition(card, actor, targets, hits, session, pacing, pays)
            result.repetitions.append(repetition)
            if repetition.hits:
                hits = repetition.hits

            if not session.is_final_repetition:
                await pacing.pause()

        if result.terminated_early:
            logger.warning(
                "%s stopped after %d of %d repetition(s): %s",
                card.name, result.completed_repetitions, total, result.termination_detail,
            )
        return result

    async def _load_targets(self, target_ids: list[str]) -> list[Actor] | None:
        """Fetch every target, or ``None`` if any of them is gone."""
        targets: list[Actor] = []
        for target_id in target_ids:
            target = await self.store.get(target_id)
            if target is None:
                logger.warning("Target %r no longer exists", target_id)
                return None
            targets.append(target)
        return targets

    async def _run_repetition(
        self,
        card: ActionCard,
        actor: Actor,
        targets: list[Actor],
        previous_hits: list[TargetHitResult] | None,
        session: ExecutionSession,
        pacing: Pacing,
        pays: bool,
    ) -> RepetitionResult:
        index = session.repetition_index
        repetition = RepetitionResult(index=index)
        try:
            if pays and card.embedded_item is not None:
                repetition.cost = await self.costs.deduct_cost(card.embedded_item, actor, index)

            if not card.is_attack_chain:
                if card.damage_application or index == 1:
                    repetition.damage = await self.damage.process_saved_damage(
                        targets, card.saved_damage, source_actor=actor
                    )
                return repetition

            if previous_hits is None or card.repeat_to_hit:
                resolution = await self.attack_chain.resolve(card, actor, targets)
                repetition.hits = resolution.hits
                repetition.roll_total = resolution.roll_total
            else:
                repetition.hits = _refresh_hits(previous_hits, targets)
                repetition.roll_total = repetition.hits[0].roll_total if repetition.hits else None

            repetition.damage = await self.damage.process_damage_results(
                repetition.hits,
                card.attack_chain,
                session,
                once_per_target=not card.damage_application,
                source_actor=actor,
            )

            if card.status_per_success or index == 1:
                repetition.statuses = await self.status.process_status_results(
                    session, repetition.hits, card, actor, pacing
                )
        except FatalPreconditionError:
            raise
        except Exception as exc:
            logger.exception("Repetition %d of %s failed", index, card.name)
            repetition.error = str(exc)
        return repetition


def _refresh_hits(hits: list[TargetHitResult], targets: list[Actor]) -> list[TargetHitResult]:
    """Point reused hit results at the freshly loaded target documents."""
    by_id = {t.id: t for t in targets}
    return [
        replace(hit, target=by_id.get(hit.target.id, hit.target)) if hit.target is not None else hit
        for hit in hits
    ]
