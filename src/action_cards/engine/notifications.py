"""User-facing notifications.

The engine reports soft failures (missing gear, clamped repetition counts,
early termination) to a human operator through a
:class:`NotificationSink`.  Notifications are fire-and-forget: sinks must
not block and must not raise.
"""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


MESSAGES: dict[str, str] = {
    "gear_not_found": "{actor} has no gear named '{name}' to give.",
    "insufficient_gear": (
        "{actor} does not have enough '{name}': needs {required}, has {available}."
    ),
    "insufficient_power": (
        "{actor} does not have enough power for '{name}': needs {required}, has {available}."
    ),
    "insufficient_item_gear": (
        "{actor} cannot use '{name}': needs {required}, has {available}."
    ),
    "repetitions_clamped": (
        "'{card}' rolled {count} repetitions; running it once instead."
    ),
    "missing_actor": "The actor using '{card}' no longer exists.",
    "invalid_target": "A target of '{card}' no longer exists; stopping after {completed} repetition(s).",
    "no_targets": "'{card}' has no targets.",
    "invalid_hit": "Skipped a hit result with no target during the {stage} pass.",
    "malformed_effect": "Skipped effect #{index} for {target}: it has no name.",
    "repetitions_capped": "'{card}' rolled {count} repetitions; capped at {limit}.",
    "effect_failed": "Could not apply '{effect}' to {target}: {error}",
    "damage_failed": "Could not apply damage to {target}: {error}",
}


def format_message(key: str, **values: object) -> str:
    """Render the catalogue message *key* with *values*.

    Unknown keys render as the key itself so a missing message never hides
    the underlying event.
    """
    template = MESSAGES.get(key)
    if template is None:
        logger.warning("Unknown notification message key: %s", key)
        return key
    return template.format(**values)


class NotificationSink(Protocol):
    def warn(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotificationSink:
    """Sends notifications to the ``action_cards.engine.notifications`` logger."""

    def warn(self, message: str) -> None:
        logger.warning("%s", message)

    def info(self, message: str) -> None:
        logger.info("%s", message)

    def error(self, message: str) -> None:
        logger.error("%s", message)


class CollectingNotificationSink:
    """Keeps every notification as a ``(level, message)`` pair."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def warn(self, message: str) -> None:
        self.messages.append(("warn", message))

    def info(self, message: str) -> None:
        self.messages.append(("info", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def of_level(self, level: str) -> list[str]:
        return [m for lvl, m in self.messages if lvl == level]
