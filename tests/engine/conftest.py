"""Shared fixtures and fakes for engine tests."""

from __future__ import annotations

from typing import Mapping

import pytest

from action_cards.engine.dice import RollResult
from action_cards.engine.notifications import CollectingNotificationSink
from action_cards.engine.pacing import Pacing, RecordingDelay
from action_cards.errors import FormulaError
from action_cards.settings import EngineSettings


class ScriptedRoller:
    """Roll service that returns scripted totals per formula.

    Each formula maps to a list of totals consumed in order; the last total
    repeats once the list runs out.  Plain integer formulas evaluate to
    themselves.
    """

    def __init__(self, totals: Mapping[str, list[int]] | None = None, default: int | None = None):
        self.totals = {k: list(v) for k, v in (totals or {}).items()}
        self.default = default
        self.calls: list[str] = []

    async def evaluate(self, formula: str, data: Mapping[str, int] | None = None) -> RollResult:
        self.calls.append(formula)
        queue = self.totals.get(formula)
        if queue:
            total = queue.pop(0) if len(queue) > 1 else queue[0]
        elif formula.strip().lstrip("-").isdigit():
            total = int(formula)
        elif self.default is not None:
            total = self.default
        else:
            raise FormulaError(f"no scripted total for {formula!r}")
        return RollResult(formula=formula, total=total)


@pytest.fixture
def make_roller() -> type[ScriptedRoller]:
    """``make_roller({"1d20": [18, 4]})`` builds a :class:`ScriptedRoller`."""
    return ScriptedRoller


@pytest.fixture
def settings() -> EngineSettings:
    return EngineSettings(
        _env_file=None,
        execution_delay=1.5,
        disable_delays=False,
        execution_limit=0,
        default_status_threshold=15,
        default_defense=11,
    )


@pytest.fixture
def notifier() -> CollectingNotificationSink:
    return CollectingNotificationSink()


@pytest.fixture
def delay() -> RecordingDelay:
    return RecordingDelay()


@pytest.fixture
def pacing(delay: RecordingDelay) -> Pacing:
    return Pacing(delay, disabled=False, timing_override=0.0, default_delay=1.5)
