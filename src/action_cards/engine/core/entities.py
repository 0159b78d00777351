"""Actor and owned-item documents as the engine sees them.

All data classes use Pydantic v2 BaseModel for validation and
serialization.  The engine never mutates these directly for persistent
changes -- it goes through the document store -- but reads them freely.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from action_cards.ir.cards import Ability
from action_cards.ir.effects import EffectModifier


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Owned items
# ---------------------------------------------------------------------------

class _OwnedItem(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    description: str = ""
    modifiers: list[EffectModifier] = Field(default_factory=list)
    flags: dict[str, Any] = Field(default_factory=dict)


class GearItem(_OwnedItem):
    """A stack of gear in an actor's inventory."""

    type: Literal["gear"] = "gear"
    quantity: int = 1
    cost: int = 0
    equipped: bool = False


class StatusItem(_OwnedItem):
    """A status effect currently carried by an actor."""

    type: Literal["status"] = "status"


class FeatureItem(_OwnedItem):
    type: Literal["feature"] = "feature"


OwnedItem = Annotated[
    Union[GearItem, StatusItem, FeatureItem],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Actor
# ---------------------------------------------------------------------------

class AbilityScore(BaseModel):
    value: int = 0
    """Bonus added to rolls that reference this ability (``@acro``)."""

    defense: int = 11
    """Target number an attack chain must meet to hit on this ability."""


class Actor(BaseModel):
    """A character or NPC that can act, be targeted, and own items."""

    id: str = Field(default_factory=_new_id)
    name: str
    resolve: int
    max_resolve: int
    power: int = 0
    max_power: int = 0
    abilities: dict[Ability, AbilityScore] = Field(default_factory=dict)
    vulnerability: int = 0
    """Added to every non-heal damage formula aimed at this actor."""

    items: list[OwnedItem] = Field(default_factory=list)

    # -- queries -------------------------------------------------------------

    @property
    def gear(self) -> list[GearItem]:
        return [i for i in self.items if isinstance(i, GearItem)]

    @property
    def statuses(self) -> list[StatusItem]:
        return [i for i in self.items if isinstance(i, StatusItem)]

    def defense(self, ability: Ability, default: int = 11) -> int:
        """Return the defense for *ability*, or *default* if the actor has
        no score for it."""
        score = self.abilities.get(ability)
        return score.defense if score is not None else default

    def roll_data(self) -> dict[str, int]:
        """Values available to ``@name`` references in dice formulas."""
        data = {ability.value: score.value for ability, score in self.abilities.items()}
        data.update(
            resolve=self.resolve,
            power=self.power,
            vuln=self.vulnerability,
        )
        return data

    def get_item(self, item_id: str) -> GearItem | StatusItem | FeatureItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    # -- resolve -------------------------------------------------------------

    def resolve_after(self, delta: int) -> int:
        """Resolve after adding *delta*, clamped to ``[0, max_resolve]``."""
        return max(0, min(self.max_resolve, self.resolve + delta))
