"""Engine settings, read from ``ACTION_CARDS_*`` environment variables or a
``.env`` file.

Every engine component accepts an explicit ``settings=`` argument; when it
is omitted the shared instance from :func:`get_settings` is used.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    # Pacing
    execution_delay: float = Field(default=1.5, ge=0)
    """Seconds between repetitions and effect applications when a card has
    no ``timing_override``."""

    disable_delays: bool = False

    # Limits
    execution_limit: int = Field(default=0, ge=0)
    """Hard cap on repetitions for any card.  0 disables the cap."""

    # Rules defaults
    default_status_threshold: int = 15
    default_defense: int = 11

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="ACTION_CARDS_",
        env_file=".env",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Return the process-wide settings instance."""
    return EngineSettings()
