"""Tests for trigger-condition evaluation."""

import itertools

import pytest

from action_cards.engine.conditions import should_apply
from action_cards.ir import TriggerCondition


# ---------------------------------------------------------------------------
# never
# ---------------------------------------------------------------------------

class TestNever:
    @pytest.mark.parametrize(
        "one_hit,both_hit,roll_total",
        list(itertools.product([True, False], [True, False], [0, 15, 30])),
    )
    def test_never_applies(self, one_hit, both_hit, roll_total):
        assert should_apply(TriggerCondition.NEVER, one_hit, both_hit, roll_total, 15) is False


# ---------------------------------------------------------------------------
# hit-count conditions
# ---------------------------------------------------------------------------

class TestOneSuccess:
    def test_one_hit_applies(self):
        assert should_apply(TriggerCondition.ONE_SUCCESS, True, False) is True

    def test_no_hits_does_not_apply(self):
        assert should_apply(TriggerCondition.ONE_SUCCESS, False, False) is False

    def test_both_hit_alone_applies(self):
        assert should_apply(TriggerCondition.ONE_SUCCESS, False, True) is True


class TestTwoSuccesses:
    def test_one_hit_is_not_enough(self):
        assert should_apply(TriggerCondition.TWO_SUCCESSES, True, False) is False

    @pytest.mark.parametrize("one_hit", [True, False])
    def test_both_hit_applies(self, one_hit):
        assert should_apply(TriggerCondition.TWO_SUCCESSES, one_hit, True) is True


# ---------------------------------------------------------------------------
# roll_value
# ---------------------------------------------------------------------------

class TestRollValue:
    def test_threshold_is_inclusive(self):
        assert should_apply(TriggerCondition.ROLL_VALUE, False, False, 15, 15) is True

    def test_below_threshold(self):
        assert should_apply(TriggerCondition.ROLL_VALUE, True, True, 14, 15) is False

    def test_custom_threshold(self):
        assert should_apply(TriggerCondition.ROLL_VALUE, False, False, 22, 22) is True
        assert should_apply(TriggerCondition.ROLL_VALUE, False, False, 21, 22) is False

    def test_ignores_hits(self):
        assert should_apply(TriggerCondition.ROLL_VALUE, False, False, 20, 10) is True


class TestConditionInputs:
    def test_accepts_string_values(self):
        assert should_apply("one_success", True, False) is True
        assert should_apply("two_successes", True, False) is False

    def test_unknown_condition_is_false(self, caplog):
        assert should_apply("sometimes", True, True, 20, 1) is False
        assert "Unknown trigger condition" in caplog.text
