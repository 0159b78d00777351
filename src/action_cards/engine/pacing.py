"""Readability pacing between repetitions and effect applications.

Waiting is delegated to a :class:`DelayProvider` so tests can record the
requested delays instead of sleeping.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class DelayProvider(Protocol):
    async def wait(self, seconds: float) -> None: ...


class AsyncioDelay:
    """Real wall-clock delay via :func:`asyncio.sleep`."""

    async def wait(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class RecordingDelay:
    """Records every requested delay and returns immediately."""

    def __init__(self) -> None:
        self.waits: list[float] = []

    async def wait(self, seconds: float) -> None:
        self.waits.append(seconds)


class Pacing:
    """Pacing policy for one invocation.

    Parameters
    ----------
    provider:
        Where waits are sent.
    disabled:
        If True, :meth:`pause` never waits.
    timing_override:
        Card-specific delay in seconds.  0 falls back to *default_delay*.
    default_delay:
        System default delay in seconds.
    """

    def __init__(
        self,
        provider: DelayProvider,
        disabled: bool = False,
        timing_override: float = 0.0,
        default_delay: float = 1.5,
    ) -> None:
        self.provider = provider
        self.disabled = disabled
        self.timing_override = timing_override
        self.default_delay = default_delay

    @property
    def delay_seconds(self) -> float:
        if self.timing_override > 0:
            return self.timing_override
        return self.default_delay

    async def pause(self) -> None:
        if self.disabled:
            return
        seconds = self.delay_seconds
        if seconds <= 0:
            return
        logger.debug("Pacing: waiting %.2fs", seconds)
        await self.provider.wait(seconds)
