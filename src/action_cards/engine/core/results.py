"""Result records produced while resolving an action card.

These are plain ``dataclass`` instances (not Pydantic models); they are
built in the hot path of every repetition and only ever read back by the
caller.  Every sub-operation returns one of these instead of raising, so a
failure on one target or effect is reported next to the successes:

- **TargetHitResult**: outcome of the opposed check against one target.
- **StatusEffectResult**: outcome of granting one effect to one target.
- **GearCheck**: outcome of validating and paying for a gear grant.
- **DamageResult** / **CostResult**: damage/heal and resource payments.
- **RepetitionResult** / **ExecutionResult**: the aggregated run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from action_cards.ir.cards import DamageType

if TYPE_CHECKING:
    from action_cards.engine.core.entities import Actor, GearItem


@dataclass
class TargetHitResult:
    """Opposed-check outcome for a single target.

    Attributes
    ----------
    target:
        The target actor.  ``None`` marks a malformed entry that consumers
        skip with a warning.
    one_hit:
        At least one of the two checks hit.
    both_hit:
        Both checks hit.
    roll_total:
        Total of the roll the checks were made with (0 when no roll).
    first_hit, second_hit:
        The individual checks against ``first_stat`` / ``second_stat``.
    """

    target: Actor | None
    one_hit: bool = False
    both_hit: bool = False
    roll_total: int = 0
    first_hit: bool = False
    second_hit: bool = False

    @classmethod
    def from_checks(
        cls, target: Actor, first_hit: bool, second_hit: bool, roll_total: int = 0
    ) -> TargetHitResult:
        return cls(
            target=target,
            one_hit=first_hit or second_hit,
            both_hit=first_hit and second_hit,
            roll_total=roll_total,
            first_hit=first_hit,
            second_hit=second_hit,
        )


@dataclass
class StatusEffectResult:
    """Outcome of one effect against one target.

    ``applied`` is False whenever the effect did not land; ``warning``
    explains soft validation failures (missing gear, short quantity) and
    ``error`` carries the message of an exception caught at the effect
    boundary.
    """

    target: Actor | None
    effect: Any
    applied: bool
    intensified: bool = False
    warning: str | None = None
    error: str | None = None


@dataclass
class GearCheck:
    """Result of :meth:`StatusEffectApplicator.process_gear_effect`.

    When ``valid`` is False, ``result`` holds the non-applied
    :class:`StatusEffectResult` to report for the skipped grant.
    """

    valid: bool
    gear_item: GearItem | None = None
    result: StatusEffectResult | None = None


@dataclass
class DamageResult:
    target: Actor | None
    amount: int = 0
    damage_type: DamageType = DamageType.DAMAGE
    formula: str = ""
    resolve_before: int = 0
    resolve_after: int = 0
    error: str | None = None

    @property
    def applied(self) -> bool:
        return self.error is None


@dataclass
class CostResult:
    """A resource payment for the card's embedded item.

    Attributes
    ----------
    item_name:
        Name of the embedded item that was paid for.
    resource:
        ``"power"``, ``"gear"`` or ``"none"`` (features are free).
    amount:
        Units requested.
    remaining:
        Balance left after the deduction (power or gear quantity).
    repetition:
        1-based repetition the payment belongs to.
    error:
        Message of a failure caught while deducting.
    """

    item_name: str
    resource: str
    amount: int = 0
    remaining: int = 0
    repetition: int = 1
    error: str | None = None


class TerminationReason(str, Enum):
    MISSING_ACTOR = "missing_actor"
    INVALID_TARGET = "invalid_target"
    NO_TARGETS = "no_targets"
    INSUFFICIENT_RESOURCES = "insufficient_resources"


@dataclass
class RepetitionResult:
    index: int
    hits: list[TargetHitResult] = field(default_factory=list)
    roll_total: int | None = None
    damage: list[DamageResult] = field(default_factory=list)
    statuses: list[StatusEffectResult] = field(default_factory=list)
    cost: CostResult | None = None
    error: str | None = None


@dataclass
class ExecutionResult:
    """Everything that happened during one invocation of a card.

    Attributes
    ----------
    card_id:
        The card that was executed.
    actor_id:
        The acting actor.
    total_repetitions:
        Repetition count the invocation was planned with (after clamping
        and capping).
    repetitions:
        One entry per repetition that actually ran, in order.
    termination_reason:
        Set when the loop stopped before ``total_repetitions``.
    termination_detail:
        Human-readable explanation of the early stop.
    """

    card_id: str
    actor_id: str
    total_repetitions: int = 0
    repetitions: list[RepetitionResult] = field(default_factory=list)
    termination_reason: TerminationReason | None = None
    termination_detail: str | None = None

    @property
    def terminated_early(self) -> bool:
        return self.termination_reason is not None

    @property
    def completed_repetitions(self) -> int:
        return len(self.repetitions)

    @property
    def damage_results(self) -> list[DamageResult]:
        return [d for rep in self.repetitions for d in rep.damage]

    @property
    def status_results(self) -> list[StatusEffectResult]:
        return [s for rep in self.repetitions for s in rep.statuses]

    @property
    def cost_results(self) -> list[CostResult]:
        return [rep.cost for rep in self.repetitions if rep.cost is not None]

    def terminate(self, reason: TerminationReason, detail: str) -> None:
        self.termination_reason = reason
        self.termination_detail = detail
