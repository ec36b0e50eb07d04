"""Pydantic V2 schemas for static game data.

Everything in this module is read-only from the engine's point of view: it is
loaded once into a :class:`~idle_engine.models.registry.Registry` and looked up
by id. Polymorphic entries (skill actions, requirements) are tagged unions
keyed on a ``kind`` field so they can be matched on and loaded from JSON.
"""

from __future__ import annotations

import math
import random
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from idle_engine.core.constants import (
    DEFAULT_MONSTER_ATTACK_SPEED_S,
    HITPOINTS_PER_LEVEL,
    MAX_MONSTER_HIT,
)
from idle_engine.models.enums import (
    AttackType,
    CombatType,
    CookingArea,
    EquipmentSlot,
    SequenceType,
    Skill,
)


_DEFINITION_CONFIG = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Items & Drops
# =============================================================================


class ItemStack(BaseModel):
    """A quantity of a single item.

    Attributes:
        item_id: Item identifier.
        quantity: Number of items, always positive.
    """

    model_config = _DEFINITION_CONFIG

    item_id: str = Field(min_length=1, description="Item identifier")
    quantity: Annotated[int, Field(ge=1, description="Item count")] = 1


class DropTableEntry(BaseModel):
    """One weighted row of a drop table."""

    model_config = _DEFINITION_CONFIG

    item_id: str = Field(min_length=1)
    weight: Annotated[int, Field(ge=1)] = 1
    min_quantity: Annotated[int, Field(ge=1)] = 1
    max_quantity: Annotated[int, Field(ge=1)] = 1

    @model_validator(mode="after")
    def validate_quantity_range(self) -> "DropTableEntry":
        """Ensure the quantity range is ordered."""
        if self.max_quantity < self.min_quantity:
            raise ValueError("max_quantity must be >= min_quantity")
        return self


class DropTable(BaseModel):
    """A weighted table that yields exactly one entry per roll.

    Attributes:
        entries: Weighted rows; probability is weight / total weight.
    """

    model_config = _DEFINITION_CONFIG

    entries: tuple[DropTableEntry, ...] = ()

    @property
    def total_weight(self) -> int:
        """Sum of all entry weights."""
        return sum(entry.weight for entry in self.entries)

    def roll(self, rng: random.Random) -> ItemStack | None:
        """Pick one entry by weight and roll its quantity.

        Args:
            rng: Random source.

        Returns:
            The dropped stack, or None for an empty table.
        """
        if not self.entries:
            return None
        pick = rng.randrange(self.total_weight)
        for entry in self.entries:
            if pick < entry.weight:
                quantity = rng.randint(entry.min_quantity, entry.max_quantity)
                return ItemStack(item_id=entry.item_id, quantity=quantity)
            pick -= entry.weight
        return None


class ChanceDrop(BaseModel):
    """An independent drop with a fixed probability."""

    model_config = _DEFINITION_CONFIG

    item_id: str = Field(min_length=1)
    chance: Annotated[float, Field(ge=0, le=1)] = 1.0
    quantity: Annotated[int, Field(ge=1)] = 1

    def roll(self, rng: random.Random) -> ItemStack | None:
        """Roll the drop once."""
        if self.chance >= 1 or rng.random() < self.chance:
            return ItemStack(item_id=self.item_id, quantity=self.quantity)
        return None


class EquipmentStats(BaseModel):
    """Combat bonuses granted while an item is equipped.

    Attributes:
        attack_speed_ms: Weapon attack interval; None for non-weapons.
        resistance: Damage reduction percentage points.
    """

    model_config = _DEFINITION_CONFIG

    melee_attack_bonus: int = 0
    ranged_attack_bonus: int = 0
    magic_attack_bonus: int = 0
    melee_strength_bonus: int = 0
    ranged_strength_bonus: int = 0
    magic_damage_bonus: int = 0
    melee_defence_bonus: int = 0
    ranged_defence_bonus: int = 0
    magic_defence_bonus: int = 0
    resistance: int = 0
    attack_speed_ms: Annotated[int, Field(ge=1)] | None = None


class Item(BaseModel):
    """Static item definition.

    Attributes:
        id: Unique item identifier.
        name: Display name.
        sells_for: GP received per unit sold.
        equip_slots: Gear slots the item can occupy; empty if not equippable.
        weapon_type: Combat type for weapons.
        equipment_stats: Combat bonuses while equipped.
        modifiers: Additive modifiers while equipped.
        heals_for: HP restored when eaten; None if not food.
        compost_value: Compost applied to a plot; None if not compost.
        harvest_bonus: Extra harvest percentage granted by compost items.
        drop_table: Contents rolled when the item is opened.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1, description="Unique item identifier")
    name: str = Field(min_length=1, description="Display name")
    media: str | None = Field(default=None, description="Icon path")
    category: str = Field(default="misc", description="Bank category")
    sells_for: Annotated[int, Field(ge=0, description="GP per unit sold")] = 0
    equip_slots: tuple[EquipmentSlot, ...] = ()
    weapon_type: CombatType | None = None
    equipment_stats: EquipmentStats = Field(default_factory=EquipmentStats)
    modifiers: dict[str, float] = Field(default_factory=dict)
    heals_for: Annotated[int, Field(ge=1)] | None = None
    compost_value: Annotated[int, Field(ge=1)] | None = None
    harvest_bonus: Annotated[int, Field(ge=0)] | None = None
    drop_table: DropTable | None = None

    @property
    def is_food(self) -> bool:
        """Whether the item can be equipped in a food slot."""
        return self.heals_for is not None

    @property
    def is_openable(self) -> bool:
        """Whether the item can be opened for its drop table."""
        return self.drop_table is not None and bool(self.drop_table.entries)

    @property
    def is_compost(self) -> bool:
        """Whether the item can be applied to a farming plot."""
        return self.compost_value is not None


# =============================================================================
# Requirements
# =============================================================================


class SkillLevelRequirement(BaseModel):
    """Requires a minimum level in a skill."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["skill_level"] = "skill_level"
    skill: Skill
    level: Annotated[int, Field(ge=1)]

    def describe(self) -> str:
        """Human-readable requirement text."""
        return f"Requires {self.skill.value.title()} level {self.level}"


class ItemEquippedRequirement(BaseModel):
    """Requires an item to be worn."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["item_equipped"] = "item_equipped"
    item_id: str

    def describe(self) -> str:
        """Human-readable requirement text."""
        return f"Requires {self.item_id} to be equipped"


class DungeonCompletionRequirement(BaseModel):
    """Requires a dungeon to have been cleared a number of times."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["dungeon_completion"] = "dungeon_completion"
    dungeon_id: str
    count: Annotated[int, Field(ge=1)] = 1

    def describe(self) -> str:
        """Human-readable requirement text."""
        return f"Requires {self.count} completion(s) of {self.dungeon_id}"


class ShopPurchaseRequirement(BaseModel):
    """Requires a shop item to have been bought a number of times."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["shop_purchase"] = "shop_purchase"
    purchase_id: str
    count: Annotated[int, Field(ge=1)] = 1

    def describe(self) -> str:
        """Human-readable requirement text."""
        return f"Requires purchase of {self.purchase_id} x{self.count}"


AreaRequirement = Annotated[
    Union[
        SkillLevelRequirement,
        ItemEquippedRequirement,
        DungeonCompletionRequirement,
        ShopPurchaseRequirement,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# Monsters & Areas
# =============================================================================


class MonsterLevels(BaseModel):
    """A monster's combat skill levels."""

    model_config = _DEFINITION_CONFIG

    hitpoints: Annotated[int, Field(ge=0)] = 1
    attack: Annotated[int, Field(ge=0)] = 1
    strength: Annotated[int, Field(ge=0)] = 1
    defence: Annotated[int, Field(ge=0)] = 1
    ranged: Annotated[int, Field(ge=0)] = 1
    magic: Annotated[int, Field(ge=0)] = 1

    @property
    def combat_level(self) -> int:
        """Combat level from defence, hitpoints and the best offensive style."""
        base = (self.defence + self.hitpoints) / 4
        offense = max(
            float(self.attack + self.strength),
            self.ranged * 1.5,
            self.magic * 1.5,
        )
        return math.floor(base + offense * 0.325)


class CombatAction(BaseModel):
    """A monster the player can fight.

    Combat never completes on a timer; both sides attack on their own cadence
    until the monster dies, the player dies or the player stops.

    Attributes:
        id: Unique monster identifier.
        levels: Combat skill levels.
        attack_type: Damage type the monster attacks with.
        attack_speed: Seconds between monster attacks.
        min_gp_drop: Minimum GP dropped per kill.
        max_gp_drop: Maximum GP dropped per kill.
        loot_chance: Percentage chance to roll the loot table per kill.
        loot_table: Weighted loot rolled on a successful loot chance.
        bones: Guaranteed drop per kill.
        can_slayer: Whether the monster can be assigned as a slayer task.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1, description="Unique monster identifier")
    name: str = Field(min_length=1, description="Display name")
    media: str | None = None
    levels: MonsterLevels = Field(default_factory=MonsterLevels)
    attack_type: AttackType = AttackType.MELEE
    attack_speed: Annotated[float, Field(gt=0)] = DEFAULT_MONSTER_ATTACK_SPEED_S
    min_gp_drop: Annotated[int, Field(ge=0)] = 0
    max_gp_drop: Annotated[int, Field(ge=0)] = 0
    loot_chance: Annotated[float, Field(ge=0, le=100)] = 0
    loot_table: DropTable = Field(default_factory=DropTable)
    bones: ItemStack | None = None
    can_slayer: bool = True
    is_boss: bool = False

    @model_validator(mode="after")
    def validate_gp_range(self) -> "CombatAction":
        """Ensure the GP drop range is ordered."""
        if self.max_gp_drop < self.min_gp_drop:
            raise ValueError("max_gp_drop must be >= min_gp_drop")
        return self

    @property
    def combat_level(self) -> int:
        """The monster's combat level."""
        return self.levels.combat_level

    @property
    def max_hp(self) -> int:
        """Maximum hitpoints."""
        return self.levels.hitpoints * HITPOINTS_PER_LEVEL

    @property
    def max_hit(self) -> int:
        """Largest damage a single monster hit can deal."""
        effective = {
            AttackType.MELEE: self.levels.strength,
            AttackType.RANGED: self.levels.ranged,
            AttackType.MAGIC: self.levels.magic,
        }.get(
            self.attack_type,
            max(self.levels.strength, self.levels.ranged, self.levels.magic),
        )
        return min(max(round(effective * 1.3), 1), MAX_MONSTER_HIT)

    @property
    def min_hit(self) -> int:
        """Smallest damage a successful monster hit can deal."""
        return 0

    @property
    def accuracy(self) -> int:
        """Accuracy rating from the level matching the attack type."""
        level = {
            AttackType.MELEE: self.levels.attack,
            AttackType.RANGED: self.levels.ranged,
            AttackType.MAGIC: self.levels.magic,
        }.get(
            self.attack_type,
            max(self.levels.attack, self.levels.ranged, self.levels.magic),
        )
        return (level + 9) * 64

    @property
    def evasion(self) -> int:
        """Evasion rating; monsters evade all damage types equally."""
        return (self.levels.defence + 9) * 64

    def roll_gp_drop(self, rng: random.Random) -> int:
        """Roll GP dropped on kill, inclusive of both bounds."""
        if self.min_gp_drop >= self.max_gp_drop:
            return self.max_gp_drop
        return rng.randint(self.min_gp_drop, self.max_gp_drop)

    def roll_loot(self, rng: random.Random) -> ItemStack | None:
        """Roll the loot table if the loot chance succeeds."""
        if self.loot_chance <= 0 or not self.loot_table.entries:
            return None
        if rng.random() * 100 >= self.loot_chance:
            return None
        return self.loot_table.roll(rng)


class CombatArea(BaseModel):
    """Free-choice combat area with no entry requirements."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    monster_ids: tuple[str, ...] = Field(min_length=1)


class SlayerArea(BaseModel):
    """Free-choice combat area gated by requirements.

    Attributes:
        requirements: Every requirement must hold to fight any monster here.
        modifiers: Additive modifiers applied while fighting in the area.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    monster_ids: tuple[str, ...] = Field(min_length=1)
    requirements: tuple[AreaRequirement, ...] = ()
    modifiers: dict[str, float] = Field(default_factory=dict)


class MonsterSequence(BaseModel):
    """An ordered monster run: a dungeon or a stronghold."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    sequence_type: SequenceType = SequenceType.DUNGEON
    monster_ids: tuple[str, ...] = Field(min_length=1)
    requirements: tuple[AreaRequirement, ...] = ()


class SlayerTaskCategory(BaseModel):
    """A slayer task tier.

    Attributes:
        level_required: Slayer level needed to roll a task.
        roll_cost: GP charged to roll a new task.
        coin_reward_percent: Slayer coins per kill as a percentage of monster max HP.
        min_combat_level: Lowest monster combat level that can be assigned.
        max_combat_level: Highest monster combat level that can be assigned.
        base_task_length: Kills required for a task.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    level_required: Annotated[int, Field(ge=1)] = 1
    roll_cost: Annotated[int, Field(ge=0)] = 0
    coin_reward_percent: Annotated[int, Field(ge=0)] = 0
    min_combat_level: Annotated[int, Field(ge=0)] = 0
    max_combat_level: Annotated[int, Field(ge=0)] = 9999
    base_task_length: Annotated[int, Field(ge=1)] = 10


class ShopPurchase(BaseModel):
    """A shop entry the player can buy with GP or slayer coins."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    gp_cost: Annotated[int, Field(ge=0)] = 0
    slayer_coin_cost: Annotated[int, Field(ge=0)] = 0
    buy_limit: Annotated[int, Field(ge=0, description="0 means unlimited")] = 0
    granted_items: tuple[ItemStack, ...] = ()
    modifiers: dict[str, float] = Field(default_factory=dict)


# =============================================================================
# Skill Actions
# =============================================================================


class Recipe(BaseModel):
    """An alternative set of inputs for a multi-recipe action."""

    model_config = _DEFINITION_CONFIG

    inputs: dict[str, int] = Field(default_factory=dict)
    output_multiplier: Annotated[int, Field(ge=1)] = 1


class _SkillActionBase(BaseModel):
    """Fields shared by every timed skill action."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1, description="Unique action identifier")
    name: str = Field(min_length=1, description="Display name")
    media: str | None = None
    skill: Skill
    level_required: Annotated[int, Field(ge=1)] = 1
    xp: Annotated[int, Field(ge=0, description="Skill XP per completion")] = 0
    min_duration: Annotated[float, Field(gt=0, description="Seconds")] = 3.0
    max_duration: Annotated[float, Field(gt=0, description="Seconds")] | None = None
    inputs: dict[str, int] = Field(default_factory=dict)
    alternative_recipes: tuple[Recipe, ...] = ()
    outputs: dict[str, int] = Field(default_factory=dict)
    drops: tuple[ChanceDrop, ...] = ()
    gp_cost: Annotated[int, Field(ge=0)] = 0

    @model_validator(mode="after")
    def validate_duration_range(self) -> "_SkillActionBase":
        """Ensure a ranged duration is ordered."""
        if self.max_duration is not None and self.max_duration < self.min_duration:
            raise ValueError("max_duration must be >= min_duration")
        return self

    @property
    def is_fixed_duration(self) -> bool:
        """Whether every completion takes the same time."""
        return self.max_duration is None or self.max_duration == self.min_duration

    @property
    def mean_duration(self) -> float:
        """Mean duration in seconds."""
        if self.max_duration is None:
            return self.min_duration
        return (self.min_duration + self.max_duration) / 2

    @property
    def has_recipes(self) -> bool:
        """Whether the player chooses between alternative recipes."""
        return bool(self.alternative_recipes)

    def recipe(self, index: int) -> Recipe:
        """Get the selected recipe, falling back to the default inputs.

        Args:
            index: Selected recipe index.

        Returns:
            The recipe at ``index`` or a recipe made of ``inputs``.
        """
        if self.alternative_recipes and 0 <= index < len(self.alternative_recipes):
            return self.alternative_recipes[index]
        return Recipe(inputs=dict(self.inputs))


class GenericAction(_SkillActionBase):
    """A plain timed action such as fishing or astrology."""

    kind: Literal["generic"] = "generic"


class CookingAction(_SkillActionBase):
    """A cooking recipe bound to one cooking area."""

    kind: Literal["cooking"] = "cooking"
    category: CookingArea = CookingArea.FIRE


class SummoningAction(_SkillActionBase):
    """A tablet craft for a familiar.

    Attributes:
        tier: Familiar tier; higher tiers find marks more slowly.
        mark_skills: Skills whose actions can discover this familiar's mark.
        mark_item_id: Equipped item that boosts the mark chance.
    """

    kind: Literal["summoning"] = "summoning"
    tier: Annotated[int, Field(ge=1, le=3)] = 1
    mark_skills: tuple[Skill, ...] = ()
    mark_item_id: str | None = None


class ThievingAction(_SkillActionBase):
    """A pickpocket target.

    Attributes:
        perception: Target perception against the player's stealth.
        max_hit: Largest damage dealt to the player on failure.
        max_gold: Largest GP reward on success.
    """

    kind: Literal["thieving"] = "thieving"
    perception: Annotated[int, Field(ge=0)] = 10
    max_hit: Annotated[int, Field(ge=1)] = 1
    max_gold: Annotated[int, Field(ge=1)] = 1


class FarmingCrop(_SkillActionBase):
    """A crop planted into a farming plot.

    Crops grow in the background and never occupy the active action slot.

    Attributes:
        category_id: Farming category the crop belongs to.
        seed_id: Seed item consumed on planting.
        seed_cost: Seeds consumed per planting.
        product_id: Item produced on a successful harvest.
        base_quantity: Product quantity before multipliers.
        growth_time: Seconds until the crop is ready.
    """

    kind: Literal["farming"] = "farming"
    category_id: str = Field(min_length=1)
    seed_id: str = Field(min_length=1)
    seed_cost: Annotated[int, Field(ge=1)] = 1
    product_id: str = Field(min_length=1)
    base_quantity: Annotated[int, Field(ge=1)] = 1
    growth_time: Annotated[float, Field(gt=0)] = 60.0


SkillAction = Annotated[
    Union[GenericAction, CookingAction, SummoningAction, ThievingAction, FarmingCrop],
    Field(discriminator="kind"),
]


class FarmingCategory(BaseModel):
    """Shared harvest rules for a group of crops and plots.

    Attributes:
        harvest_multiplier: Quantity multiplier on harvest.
        gives_xp_on_plant: Grant crop XP when planting as well as harvesting.
        scale_xp_with_quantity: Multiply harvest XP by quantity harvested.
        returns_seeds: Whether harvests can return seeds.
        mastery_xp_divider: Divides crop XP to get mastery XP per harvest.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    harvest_multiplier: Annotated[float, Field(gt=0)] = 1.0
    gives_xp_on_plant: bool = False
    scale_xp_with_quantity: bool = True
    returns_seeds: bool = False
    mastery_xp_divider: Annotated[int, Field(ge=1)] = 1


class FarmingPlot(BaseModel):
    """A farming plot the player may unlock."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    category_id: str = Field(min_length=1)
    level_required: Annotated[int, Field(ge=1)] = 1
    gp_cost: Annotated[int, Field(ge=0)] = 0


# =============================================================================
# Township
# =============================================================================


class TownshipResource(BaseModel):
    """A township resource; GP-like resources deposit straight to the bank."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    deposits_to_bank: bool = False


class TownshipBiome(BaseModel):
    """A township biome, unlocked at a population threshold."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    population_required: Annotated[int, Field(ge=0)] = 0


class TownshipBuilding(BaseModel):
    """A buildable township structure.

    Attributes:
        biome_ids: Biomes the building may be placed in.
        gp_cost: GP per building.
        resource_costs: Township resources per building.
        production: Resource amounts produced per hour per building.
        max_count: Cap on buildings of this type per biome.
        can_degrade: Whether hourly updates wear down efficiency; storage
            buildings never degrade.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    biome_ids: tuple[str, ...] = Field(min_length=1)
    level_required: Annotated[int, Field(ge=1)] = 1
    gp_cost: Annotated[int, Field(ge=0)] = 0
    resource_costs: dict[str, int] = Field(default_factory=dict)
    population: Annotated[int, Field(ge=0)] = 0
    storage: Annotated[int, Field(ge=0)] = 0
    happiness: float = 0
    education: float = 0
    worship: Annotated[int, Field(ge=0)] = 0
    production: dict[str, float] = Field(default_factory=dict)
    max_count: Annotated[int, Field(ge=1)] | None = None
    can_degrade: bool = True


class TownshipDeity(BaseModel):
    """A deity whose worship boosts production.

    Attributes:
        production_bonus: Percent production bonus at maximum worship.
        biome_ids: Biomes receiving the bonus; empty means all biomes.
    """

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    production_bonus: Annotated[float, Field(ge=0)] = 0
    biome_ids: tuple[str, ...] = ()


class PopulationGoal(BaseModel):
    """Township population must reach an amount."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["population"] = "population"
    amount: Annotated[int, Field(ge=1)]


class BuildBuildingGoal(BaseModel):
    """A number of buildings of one type must exist across all biomes."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["build_building"] = "build_building"
    building_id: str
    count: Annotated[int, Field(ge=1)] = 1


class TownshipLevelGoal(BaseModel):
    """Township skill level must reach a value."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["township_level"] = "township_level"
    level: Annotated[int, Field(ge=1)]


class ResourceGoal(BaseModel):
    """A township resource stockpile must reach an amount."""

    model_config = _DEFINITION_CONFIG

    kind: Literal["resource"] = "resource"
    resource_id: str
    amount: Annotated[int, Field(ge=1)]


TaskGoal = Annotated[
    Union[PopulationGoal, BuildBuildingGoal, TownshipLevelGoal, ResourceGoal],
    Field(discriminator="kind"),
]


class TownshipTask(BaseModel):
    """A claimable township task and its rewards."""

    model_config = _DEFINITION_CONFIG

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    goals: tuple[TaskGoal, ...] = ()
    gp_reward: Annotated[int, Field(ge=0)] = 0
    xp_reward: Annotated[int, Field(ge=0)] = 0
    item_rewards: tuple[ItemStack, ...] = ()
    resource_rewards: dict[str, int] = Field(default_factory=dict)


class TownshipData(BaseModel):
    """All township definitions.

    Attributes:
        heal_resource_id: Resource spent to restore township health.
        heal_cost_per_percent: Units of the heal resource per health point.
    """

    model_config = _DEFINITION_CONFIG

    resources: tuple[TownshipResource, ...] = ()
    biomes: tuple[TownshipBiome, ...] = ()
    buildings: tuple[TownshipBuilding, ...] = ()
    deities: tuple[TownshipDeity, ...] = ()
    tasks: tuple[TownshipTask, ...] = ()
    heal_resource_id: str | None = None
    heal_cost_per_percent: Annotated[int, Field(ge=1)] = 10


__all__ = [
    # Items & drops
    "ItemStack",
    "DropTableEntry",
    "DropTable",
    "ChanceDrop",
    "EquipmentStats",
    "Item",
    # Requirements
    "SkillLevelRequirement",
    "ItemEquippedRequirement",
    "DungeonCompletionRequirement",
    "ShopPurchaseRequirement",
    "AreaRequirement",
    # Monsters & areas
    "MonsterLevels",
    "CombatAction",
    "CombatArea",
    "SlayerArea",
    "MonsterSequence",
    "SlayerTaskCategory",
    "ShopPurchase",
    # Skill actions
    "Recipe",
    "GenericAction",
    "CookingAction",
    "SummoningAction",
    "ThievingAction",
    "FarmingCrop",
    "SkillAction",
    "FarmingCategory",
    "FarmingPlot",
    # Township
    "TownshipResource",
    "TownshipBiome",
    "TownshipBuilding",
    "TownshipDeity",
    "PopulationGoal",
    "BuildBuildingGoal",
    "TownshipLevelGoal",
    "ResourceGoal",
    "TaskGoal",
    "TownshipTask",
    "TownshipData",
]
