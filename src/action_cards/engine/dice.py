"""Dice formula evaluation.

Supported grammar (whitespace-insensitive)::

    formula := term (("+" | "-") term)*
    term    := ["+" | "-"] (NdM | dM | integer | @name)

``@name`` looks the value up in the roll data passed to
:meth:`DiceRoller.evaluate` (an actor's abilities, ``resolve``, ``power``
...).  The engine only ever reads :attr:`RollResult.total`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Protocol

from action_cards.engine.core.rng import GameRNG
from action_cards.errors import FormulaError

logger = logging.getLogger(__name__)

_TERM_RE = re.compile(
    r"\s*(?P<sign>[+-])?\s*"
    r"(?:(?P<count>\d*)[dD](?P<faces>\d+)|(?P<const>\d+)|@(?P<ref>[A-Za-z_][\w.]*))"
    r"\s*"
)

MAX_DICE = 1000


@dataclass
class RollResult:
    formula: str
    total: int
    rolls: list[int] = field(default_factory=list)


class RollService(Protocol):
    async def evaluate(
        self, formula: str, data: Mapping[str, int] | None = None
    ) -> RollResult: ...


class DiceRoller:
    """Evaluate dice formulas with a seeded :class:`GameRNG`."""

    def __init__(self, rng: GameRNG | None = None) -> None:
        self.rng = rng if rng is not None else GameRNG(0)

    async def evaluate(
        self, formula: str, data: Mapping[str, int] | None = None
    ) -> RollResult:
        return self.roll(formula, data)

    def roll(self, formula: str, data: Mapping[str, int] | None = None) -> RollResult:
        """Synchronous form of :meth:`evaluate`.

        Raises
        ------
        FormulaError
            If *formula* is blank, malformed, or references a name missing
            from *data*.
        """
        text = (formula or "").strip()
        if not text:
            raise FormulaError("empty dice formula")

        data = data or {}
        total = 0
        rolls: list[int] = []
        pos = 0
        first = True
        while pos < len(text):
            match = _TERM_RE.match(text, pos)
            if match is None or match.end() == pos:
                raise FormulaError(f"cannot parse {formula!r} at position {pos}")
            sign = match.group("sign")
            if sign is None and not first:
                raise FormulaError(f"missing operator in {formula!r} at position {pos}")

            value = self._term_value(match, data, rolls, formula)
            total += -value if sign == "-" else value
            pos = match.end()
            first = False

        logger.debug("Rolled %s -> %d %s", formula, total, rolls)
        return RollResult(formula=formula, total=total, rolls=rolls)

    def _term_value(
        self,
        match: re.Match[str],
        data: Mapping[str, int],
        rolls: list[int],
        formula: str,
    ) -> int:
        if match.group("faces") is not None:
            count = int(match.group("count") or 1)
            faces = int(match.group("faces"))
            if faces < 1:
                raise FormulaError(f"die with {faces} faces in {formula!r}")
            if count > MAX_DICE:
                raise FormulaError(f"too many dice ({count}) in {formula!r}")
            results = [self.rng.random_int(1, faces) for _ in range(count)]
            rolls.extend(results)
            return sum(results)
        if match.group("const") is not None:
            return int(match.group("const"))

        ref = match.group("ref")
        if ref not in data:
            raise FormulaError(f"unknown roll data @{ref} in {formula!r}")
        return int(data[ref])
