"""Tests for StatusEffectApplicator."""

import asyncio

import pytest

from action_cards.engine.core.entities import Actor, GearItem
from action_cards.engine.core.results import TargetHitResult
from action_cards.engine.core.session import ExecutionSession
from action_cards.engine.intensification import IntensifyOutcome, StoreIntensifier
from action_cards.engine.pacing import Pacing
from action_cards.engine.status_applicator import StatusEffectApplicator
from action_cards.engine.store import InMemoryDocumentStore
from action_cards.errors import FatalPreconditionError
from action_cards.ir import (
    SYSTEM_EFFECT_FLAG,
    ActionCard,
    AttackChainConfig,
    GearEffect,
    StatusEffect,
    TriggerCondition,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_actor(**kwargs) -> Actor:
    defaults = dict(name="Road Bandit", resolve=18, max_resolve=18)
    defaults.update(kwargs)
    return Actor(**defaults)


def _status(name: str, effect_id: str | None = None) -> StatusEffect:
    return StatusEffect(id=effect_id, name=name)


def _make_card(effects, **kwargs) -> ActionCard:
    defaults = dict(
        id="card",
        name="Dirty Trick",
        attack_chain=AttackChainConfig(status_condition=TriggerCondition.ONE_SUCCESS),
        embedded_effects=effects,
    )
    defaults.update(kwargs)
    return ActionCard(**defaults)


class RecordingIntensifier:
    """Records payloads; raises for effects named in *fail_on*."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.payloads = []

    async def apply_or_intensify(self, target, effect):
        if effect.name in self.fail_on:
            raise RuntimeError(f"cannot apply {effect.name}")
        self.payloads.append((target.id, effect))
        return IntensifyOutcome(applied=True)


def _applicator(store, intensifier, notifier, settings) -> StatusEffectApplicator:
    return StatusEffectApplicator(store, intensifier, notifier, settings)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestFilterEffectsBySelection:
    def test_keeps_only_selected_id(self, notifier, settings):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        effects = [_status("A", "id-1"), _status("B", "id-2"), _status("C", "id-3")]

        kept = app.filter_effects_by_selection(effects, ["id-2"])

        assert [e.id for e in kept] == ["id-2"]

    def test_no_selection_keeps_everything(self, notifier, settings):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        effects = [_status("A", "id-1"), _status("B")]

        assert app.filter_effects_by_selection(effects, None) == effects

    def test_positional_key_for_effects_without_id(self, notifier, settings):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        effects = [_status("A"), _status("B"), _status("C", "named")]

        kept = app.filter_effects_by_selection(effects, ["effect-1", "named"])

        assert [e.name for e in kept] == ["B", "C"]

    def test_empty_selection_keeps_nothing(self, notifier, settings):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        assert app.filter_effects_by_selection([_status("A", "id-1")], []) == []


# ---------------------------------------------------------------------------
# process_status_results
# ---------------------------------------------------------------------------

class TestProcessStatusResults:
    def test_no_effects_returns_immediately(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        target = _make_actor()
        hits = [TargetHitResult(target, one_hit=True, both_hit=True)]

        results = asyncio.run(
            app.process_status_results(ExecutionSession(), hits, _make_card([]), _make_actor(), pacing)
        )

        assert results == []
        assert intensifier.payloads == []

    def test_condition_gates_targets(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        a, b = _make_actor(name="A"), _make_actor(name="B")
        card = _make_card(
            [_status("Dazed")],
            attack_chain=AttackChainConfig(status_condition=TriggerCondition.TWO_SUCCESSES),
        )
        hits = [
            TargetHitResult(a, one_hit=True, both_hit=False),
            TargetHitResult(b, one_hit=True, both_hit=True),
        ]

        results = asyncio.run(app.process_status_results(ExecutionSession(), hits, card, _make_actor(), pacing))

        assert [r.target.name for r in results] == ["B"]

    def test_roll_value_uses_default_threshold(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        low, high = _make_actor(name="Low"), _make_actor(name="High")
        card = _make_card(
            [_status("Dazed")],
            attack_chain=AttackChainConfig(status_condition=TriggerCondition.ROLL_VALUE),
        )
        hits = [TargetHitResult(low, roll_total=14), TargetHitResult(high, roll_total=15)]

        results = asyncio.run(app.process_status_results(ExecutionSession(), hits, card, _make_actor(), pacing))

        assert [r.target.name for r in results] == ["High"]

    def test_roll_value_uses_card_threshold(self, notifier, settings, pacing):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        target = _make_actor()
        card = _make_card(
            [_status("Dazed")],
            attack_chain=AttackChainConfig(
                status_condition=TriggerCondition.ROLL_VALUE, status_threshold=25
            ),
        )
        hits = [TargetHitResult(target, roll_total=24)]

        results = asyncio.run(app.process_status_results(ExecutionSession(), hits, card, _make_actor(), pacing))

        assert results == []

    def test_malformed_hit_skipped(self, notifier, settings, pacing, caplog):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        target = _make_actor()
        hits = [TargetHitResult(None, one_hit=True), TargetHitResult(target, one_hit=True)]

        results = asyncio.run(
            app.process_status_results(ExecutionSession(), hits, _make_card([_status("Dazed")]), _make_actor(), pacing)
        )

        assert len(results) == 1
        assert "Invalid hit result" in caplog.text
        assert notifier.of_level("warn") == ["Skipped a hit result with no target during the status pass."]

    def test_selection_from_session(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        target = _make_actor()
        card = _make_card([_status("A", "id-1"), _status("B", "id-2"), _status("C", "id-3")])
        session = ExecutionSession(selected_effect_ids=["id-2"])

        asyncio.run(
            app.process_status_results(session, [TargetHitResult(target, one_hit=True)], card, _make_actor(), pacing)
        )

        assert [e.name for _, e in intensifier.payloads] == ["B"]


# ---------------------------------------------------------------------------
# apply_effects_to_target
# ---------------------------------------------------------------------------

class TestApplyEffectsToTarget:
    def test_empty_effects_is_fatal(self, notifier, settings, pacing):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        with pytest.raises(FatalPreconditionError):
            asyncio.run(
                app.apply_effects_to_target(_make_actor(), [], _make_actor(), False, ExecutionSession(), pacing)
            )

    def test_count_increments_once_per_pass(self, notifier, settings, pacing):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        target = _make_actor()
        session = ExecutionSession(status_application_limit=0)
        effects = [_status("A"), _status("B"), _status("C")]

        results = asyncio.run(app.apply_effects_to_target(target, effects, _make_actor(), False, session, pacing))

        assert len(results) == 3
        assert session.status_application_counts[target.id] == 1

    def test_limit_skips_whole_target(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        target = _make_actor()
        session = ExecutionSession(status_application_limit=1)
        effects = [_status("A"), _status("B")]

        first = asyncio.run(app.apply_effects_to_target(target, effects, _make_actor(), False, session, pacing))
        second = asyncio.run(app.apply_effects_to_target(target, effects, _make_actor(), False, session, pacing))

        assert len(first) == 2
        assert second == []
        assert len(intensifier.payloads) == 2
        assert session.status_application_counts[target.id] == 1

    def test_unlimited_when_limit_zero(self, notifier, settings, pacing):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        target = _make_actor()
        session = ExecutionSession(status_application_limit=0)

        for _ in range(3):
            asyncio.run(app.apply_effects_to_target(target, [_status("A")], _make_actor(), False, session, pacing))

        assert session.status_application_counts[target.id] == 3

    def test_exception_on_one_effect_does_not_stop_the_rest(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier(fail_on={"Second"})
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        target = _make_actor()
        session = ExecutionSession()
        effects = [_status("First"), _status("Second"), _status("Third")]

        results = asyncio.run(app.apply_effects_to_target(target, effects, _make_actor(), False, session, pacing))

        assert [r.applied for r in results] == [True, False, True]
        assert "cannot apply Second" in results[1].error
        assert [e.name for _, e in intensifier.payloads] == ["First", "Third"]
        assert session.status_application_counts[target.id] == 1
        assert len(notifier.of_level("error")) == 1

    def test_malformed_effect_skipped(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        target = _make_actor()
        effects = [_status(""), _status("Real")]

        results = asyncio.run(
            app.apply_effects_to_target(target, effects, _make_actor(), False, ExecutionSession(), pacing)
        )

        assert results[0].applied is False
        assert results[0].warning is not None
        assert [e.name for _, e in intensifier.payloads] == ["Real"]
        assert notifier.of_level("warn") == [results[0].warning]
        assert "#0" in results[0].warning


# ---------------------------------------------------------------------------
# Gear grants
# ---------------------------------------------------------------------------

class TestGearEffects:
    def test_gear_shortfall_skips_grant_only(self, notifier, settings, pacing):
        source = _make_actor(name="Tamsin", items=[GearItem(name="Caltrops", quantity=1)])
        target = _make_actor()
        store = InMemoryDocumentStore([source, target])
        intensifier = RecordingIntensifier()
        app = _applicator(store, intensifier, notifier, settings)
        gear = GearEffect(name="Caltrops", cost=3)

        check = asyncio.run(app.process_gear_effect(gear, source, target))
        assert not check.valid
        assert "needs 3, has 1" in check.result.warning

        effects = [gear, _status("Dazed")]
        results = asyncio.run(
            app.apply_effects_to_target(target, effects, source, True, ExecutionSession(), pacing)
        )

        assert [r.applied for r in results] == [False, True]
        assert [e.name for _, e in intensifier.payloads] == ["Dazed"]
        assert store.snapshot(source.id).gear[0].quantity == 1
        assert len(notifier.of_level("warn")) == 2

    def test_gear_not_found(self, notifier, settings):
        source, target = _make_actor(name="Tamsin"), _make_actor()
        store = InMemoryDocumentStore([source, target])
        app = _applicator(store, RecordingIntensifier(), notifier, settings)

        check = asyncio.run(app.process_gear_effect(GearEffect(name="Rope", cost=1), source, target))

        assert not check.valid
        assert "no gear named 'Rope'" in check.result.warning
        assert notifier.of_level("warn") == [check.result.warning]

    def test_gear_cost_deducted(self, notifier, settings):
        source = _make_actor(name="Tamsin", items=[GearItem(name="Bandage", quantity=3)])
        target = _make_actor()
        store = InMemoryDocumentStore([source, target])
        app = _applicator(store, RecordingIntensifier(), notifier, settings)

        check = asyncio.run(app.process_gear_effect(GearEffect(name="Bandage", cost=2), source, target))

        assert check.valid
        assert check.gear_item.quantity == 1
        assert store.snapshot(source.id).gear[0].quantity == 1

    def test_gear_check_failure_is_captured(self, notifier, settings):
        source, target = _make_actor(name="Tamsin"), _make_actor()
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)

        check = asyncio.run(app.process_gear_effect(GearEffect(name="Rope", cost=1), source, target))

        assert not check.valid
        assert check.result.error is not None

    def test_no_inventory_reduction_grants_directly(self, notifier, settings, pacing):
        source, target = _make_actor(name="Tamsin"), _make_actor()
        store = InMemoryDocumentStore([source, target])
        intensifier = RecordingIntensifier()
        app = _applicator(store, intensifier, notifier, settings)

        results = asyncio.run(
            app.apply_effects_to_target(
                target, [GearEffect(name="Rope", cost=5)], source, False, ExecutionSession(), pacing
            )
        )

        assert results[0].applied


# ---------------------------------------------------------------------------
# apply_single_effect
# ---------------------------------------------------------------------------

class TestApplySingleEffect:
    def test_payload_flagged_and_source_untouched(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        target = _make_actor()
        effect = _status("Dazed")
        session = ExecutionSession()

        result = asyncio.run(app.apply_single_effect(effect, target, f"{target.id}-Dazed", session, pacing))

        [(_, payload)] = intensifier.payloads
        assert payload.flags[SYSTEM_EFFECT_FLAG] is True
        assert SYSTEM_EFFECT_FLAG not in effect.flags
        assert result.applied
        assert f"{target.id}-Dazed" in session.applied_status_effects

    def test_gear_forced_equipped_single(self, notifier, settings, pacing):
        intensifier = RecordingIntensifier()
        app = _applicator(InMemoryDocumentStore(), intensifier, notifier, settings)
        effect = GearEffect(name="Bandage", cost=2, quantity=4, equipped=False)

        asyncio.run(app.apply_single_effect(effect, _make_actor(), "k", ExecutionSession(), pacing))

        [(_, payload)] = intensifier.payloads
        assert payload.equipped is True
        assert payload.quantity == 1

    def test_with_store_intensifier(self, notifier, settings, pacing):
        target = _make_actor()
        store = InMemoryDocumentStore([target])
        app = _applicator(store, StoreIntensifier(store), notifier, settings)

        asyncio.run(app.apply_single_effect(_status("Dazed"), target, "k", ExecutionSession(), pacing))
        result = asyncio.run(app.apply_single_effect(_status("Dazed"), target, "k", ExecutionSession(), pacing))

        assert result.intensified
        [status] = store.snapshot(target.id).statuses
        assert status.flags[SYSTEM_EFFECT_FLAG] is True

    def test_pauses_only_before_final_repetition(self, notifier, settings, delay):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        pacing = Pacing(delay, timing_override=0.25)
        session = ExecutionSession(total_repetitions=2)

        session.begin_repetition(1)
        asyncio.run(app.apply_single_effect(_status("A"), _make_actor(), "k", session, pacing))
        session.begin_repetition(2)
        asyncio.run(app.apply_single_effect(_status("A"), _make_actor(), "k", session, pacing))

        assert delay.waits == [0.25]

    def test_disabled_pacing_never_waits(self, notifier, settings, delay):
        app = _applicator(InMemoryDocumentStore(), RecordingIntensifier(), notifier, settings)
        pacing = Pacing(delay, disabled=True)
        session = ExecutionSession(total_repetitions=3)

        asyncio.run(app.apply_single_effect(_status("A"), _make_actor(), "k", session, pacing))

        assert delay.waits == []
