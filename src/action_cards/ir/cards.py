"""Action card definitions -- the authored input the engine resolves.

A card runs in exactly one of two modes.  In ``attack_chain`` mode an
embedded item is rolled against two of each target's defenses and the hit
outcome decides whether damage and status effects land.  In
``saved_damage`` mode a fixed formula is applied to every target with no
opposed check.  Either mode may be repeated a rolled number of times.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from .effects import EmbeddedEffect


class Ability(str, Enum):
    """The five abilities an attack chain can be checked against."""

    ACRO = "acro"
    PHYS = "phys"
    FORT = "fort"
    WILL = "will"
    WITS = "wits"


class ActionMode(str, Enum):
    ATTACK_CHAIN = "attack_chain"
    SAVED_DAMAGE = "saved_damage"


class TriggerCondition(str, Enum):
    """When a damage or status payload fires, given a target's hit result."""

    NEVER = "never"
    ONE_SUCCESS = "one_success"
    """At least one of the two checks hit."""

    TWO_SUCCESSES = "two_successes"
    """Both checks hit."""

    ROLL_VALUE = "roll_value"
    """The raw roll total meets a threshold, regardless of defenses."""


class DamageType(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"


class EmbeddedItemType(str, Enum):
    COMBAT_POWER = "combat_power"
    GEAR = "gear"
    FEATURE = "feature"


class RollType(str, Enum):
    ROLL = "roll"
    NONE = "none"
    """No roll: every target counts as hit twice."""


class EmbeddedItem(BaseModel):
    """The combat power, gear or feature an action card rolls with.

    Its ``cost`` is the resource cost of using the card: power for a
    combat power, quantity of the matching inventory gear for gear.
    """

    type: EmbeddedItemType = EmbeddedItemType.COMBAT_POWER
    name: str
    cost: int = Field(default=0, ge=0)
    roll_type: RollType = RollType.ROLL
    roll_formula: str = "1d20"
    """Dice formula for the opposed check.  May reference the acting actor's
    roll data, e.g. ``"1d20 + @acro"``."""


class AttackChainConfig(BaseModel):
    """Configuration used when ``mode == attack_chain``."""

    first_stat: Ability = Ability.ACRO
    second_stat: Ability = Ability.PHYS

    damage_condition: TriggerCondition = TriggerCondition.NEVER
    damage_formula: str = "1d6"
    """Blank means the chain never deals damage."""

    damage_type: DamageType = DamageType.DAMAGE

    status_condition: TriggerCondition = TriggerCondition.NEVER
    status_threshold: int | None = None
    """Roll total needed for ``roll_value``.  ``None`` falls back to the
    engine's configured default."""

    @field_validator("damage_condition")
    @classmethod
    def _damage_has_no_roll_value(cls, v: TriggerCondition) -> TriggerCondition:
        if v == TriggerCondition.ROLL_VALUE:
            raise ValueError("damage_condition does not support roll_value")
        return v


class SavedDamageConfig(BaseModel):
    """Configuration used when ``mode == saved_damage``."""

    formula: str = "1d6"
    type: DamageType = DamageType.DAMAGE
    description: str = ""


class ActionCard(BaseModel):
    """Complete definition of a single action card."""

    id: str
    name: str
    description: str = ""

    mode: ActionMode = ActionMode.ATTACK_CHAIN

    embedded_item: EmbeddedItem | None = None
    """What the card rolls with and what it costs.  ``None`` means no roll
    and no cost."""

    attack_chain: AttackChainConfig = Field(default_factory=AttackChainConfig)
    saved_damage: SavedDamageConfig = Field(default_factory=SavedDamageConfig)

    embedded_effects: list[EmbeddedEffect] = Field(default_factory=list)
    """Effects granted to targets that satisfy ``status_condition``."""

    attempt_inventory_reduction: bool = False
    """If True, gear grants consume their cost from the source actor's
    inventory and are skipped when it cannot pay."""

    status_application_limit: int = Field(default=1, ge=0)
    """Maximum status application passes per target per invocation.
    0 means unlimited."""

    # -- repetition ------------------------------------------------------

    repetitions: str = "1"
    """Dice formula evaluated once per invocation to the repetition count."""

    repeat_to_hit: bool = False
    """Attack chains only: roll again on every repetition instead of reusing
    the first repetition's hits."""

    damage_application: bool = False
    """True: damage lands on every qualifying repetition.  False: only on
    the first repetition that qualifies for a given target."""

    status_per_success: bool = False
    """True: a status pass may run on every repetition.  False: only on the
    first."""

    cost_on_repetition: bool = False
    """True: the embedded item's cost is paid on every repetition.  False:
    only on the first."""

    timing_override: float = Field(default=0.0, ge=0)
    """Seconds to wait between repetitions.  0 uses the engine default."""

    @property
    def is_attack_chain(self) -> bool:
        return self.mode == ActionMode.ATTACK_CHAIN
