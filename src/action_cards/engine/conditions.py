"""Trigger-condition evaluation for damage and status payloads."""

from __future__ import annotations

import logging

from action_cards.ir.cards import TriggerCondition

logger = logging.getLogger(__name__)

DEFAULT_STATUS_THRESHOLD = 15


def should_apply(
    condition: TriggerCondition | str,
    one_hit: bool,
    both_hit: bool,
    roll_total: int = 0,
    threshold: int = DEFAULT_STATUS_THRESHOLD,
) -> bool:
    """Decide whether a payload fires for one target.

    Parameters
    ----------
    condition:
        The card's damage or status condition.
    one_hit:
        At least one of the two checks hit the target.
    both_hit:
        Both checks hit the target.
    roll_total:
        Total of the attack roll, used by ``roll_value``.
    threshold:
        Minimum roll total for ``roll_value`` (inclusive).
    """
    try:
        condition = TriggerCondition(condition)
    except ValueError:
        logger.warning("Unknown trigger condition %r, not applying", condition)
        return False

    if condition == TriggerCondition.NEVER:
        return False
    if condition == TriggerCondition.ONE_SUCCESS:
        return one_hit or both_hit
    if condition == TriggerCondition.TWO_SUCCESSES:
        return both_hit
    return roll_total >= threshold
