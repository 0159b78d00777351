"""Per-invocation bookkeeping threaded through one card resolution.

An :class:`ExecutionSession` is created by the repetition controller at the
start of every invocation and passed by reference to every component that
reads or mutates cross-repetition state.  It is never stored on a
component and never reused for another invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ExecutionSession:
    """Mutable state for a single invocation.

    Attributes
    ----------
    status_application_limit:
        Maximum status application passes per target.  0 = unlimited.
    status_application_counts:
        ``target_id -> passes completed``.
    applied_status_effects:
        ``"<target_id>-<effect name>"`` keys of effects that landed during
        this invocation.  Informational only; it never blocks a later
        intensification.
    selected_effect_ids:
        Optional pre-selected subset of the card's effects.  ``None`` means
        every effect is eligible.
    damaged_targets:
        Ids of targets that already took this card's damage, used when
        damage lands only on the first qualifying repetition.
    repetition_index:
        1-based index of the repetition being resolved.
    total_repetitions:
        Planned repetition count.
    """

    status_application_limit: int = 1
    status_application_counts: dict[str, int] = field(default_factory=dict)
    applied_status_effects: set[str] = field(default_factory=set)
    selected_effect_ids: list[str] | None = None
    damaged_targets: set[str] = field(default_factory=set)
    repetition_index: int = 1
    total_repetitions: int = 1

    @property
    def is_final_repetition(self) -> bool:
        return self.repetition_index >= self.total_repetitions

    def begin_repetition(self, index: int) -> None:
        self.repetition_index = index

    # -- status application limit -------------------------------------------

    def application_count(self, target_id: str) -> int:
        return self.status_application_counts.get(target_id, 0)

    def limit_reached(self, target_id: str) -> bool:
        limit = self.status_application_limit
        return limit > 0 and self.application_count(target_id) >= limit

    def record_application_pass(self, target_id: str) -> int:
        """Count one completed pass over all effects for *target_id*."""
        count = self.application_count(target_id) + 1
        self.status_application_counts[target_id] = count
        return count

    def mark_applied(self, key: str) -> None:
        self.applied_status_effects.add(key)
