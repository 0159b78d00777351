"""Embedded effect definitions -- the status and gear grants bundled with a card.

Effects are a tagged union on ``type``.  Pydantic picks the right variant
when a card is validated from JSON, and the engine dispatches on the
variant class rather than on the raw string.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


SYSTEM_EFFECT_FLAG = "applied_by_action_card"
"""Flag set on every payload the engine hands to the document store, so
creation listeners can tell engine-granted items from hand-made ones."""


class EffectModifier(BaseModel):
    """A single numeric change carried by an effect (e.g. ``acro`` -1)."""

    key: str
    """Which value the modifier changes (an ability id, ``"vuln"``, ...)."""

    value: float = 0
    """Signed amount.  Intensification pushes this one step away from zero."""


class _EffectBase(BaseModel):
    id: str | None = None
    """Identifier used by effect pre-selection.  Effects without one are
    addressed by their position (``effect-<index>``)."""

    name: str = ""
    description: str = ""
    modifiers: list[EffectModifier] = Field(default_factory=list)
    flags: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": False, "populate_by_name": True}


class StatusEffect(_EffectBase):
    """A buff or debuff.  Re-applying a matching status intensifies it."""

    type: Literal["status"] = "status"


class GearEffect(_EffectBase):
    """A gear grant.  May consume ``cost`` units of the same-named gear from
    the source actor's inventory before being handed over."""

    type: Literal["gear"] = "gear"

    cost: int = Field(default=0, ge=0)
    """Quantity removed from the source actor's matching gear item."""

    quantity: int = 1
    equipped: bool = False


class FeatureEffect(_EffectBase):
    """A passive feature granted as-is."""

    type: Literal["feature"] = "feature"


EmbeddedEffect = Annotated[
    Union[StatusEffect, GearEffect, FeatureEffect],
    Field(discriminator="type"),
]
