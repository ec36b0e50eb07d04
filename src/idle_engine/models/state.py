"""Pydantic V2 schemas for mutable player state.

:class:`GameState` is the single source of truth for a save. The engine owns
one working copy and mutates it; everything handed to callers is a deep copy,
so readers never observe a half-applied command.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from idle_engine.core.constants import (
    HITPOINTS_PER_LEVEL,
    MAX_COMPOST,
    TOWNSHIP_BASE_STORAGE,
    TOWNSHIP_MAX_EFFICIENCY,
    TOWNSHIP_MAX_HEALTH,
)
from idle_engine.core.exceptions import InsufficientResourcesError, InventoryFullError
from idle_engine.models.combat import CombatActionState
from idle_engine.models.definitions import ItemStack
from idle_engine.models.enums import (
    AttackStyle,
    CookingArea,
    Currency,
    EquipmentSlot,
    Season,
    Skill,
    StopReason,
)
from idle_engine.models.progression import level_for_xp, mastery_level_for_xp


_STATE_CONFIG = ConfigDict(extra="forbid", validate_assignment=True)


# =============================================================================
# Inventory & Equipment
# =============================================================================


class Inventory(BaseModel):
    """Item counts keyed by item id, bounded by distinct-item capacity.

    Counts are always positive; an item whose count reaches zero is removed
    so it frees its bank slot.

    Attributes:
        capacity: Number of distinct item types that fit in the bank.
        items: Item id to count, in the order items were first added.
    """

    model_config = _STATE_CONFIG

    capacity: Annotated[int, Field(ge=1)] = 200
    items: dict[str, Annotated[int, Field(ge=1)]] = Field(default_factory=dict)

    def count(self, item_id: str) -> int:
        """Get how many of an item are held."""
        return self.items.get(item_id, 0)

    def has(self, item_id: str, quantity: int = 1) -> bool:
        """Check whether at least ``quantity`` of an item is held."""
        return self.count(item_id) >= quantity

    @property
    def used_slots(self) -> int:
        """Number of distinct item types held."""
        return len(self.items)

    @property
    def is_full(self) -> bool:
        """Whether no new item type can be added."""
        return self.used_slots >= self.capacity

    def can_add(self, item_id: str) -> bool:
        """Check whether an item can be added without exceeding capacity."""
        return item_id in self.items or not self.is_full

    def add(self, item_id: str, quantity: int) -> None:
        """Add items.

        Args:
            item_id: Item to add.
            quantity: Positive amount to add.

        Raises:
            InventoryFullError: If the item is new and the bank is full.
        """
        if quantity <= 0:
            return
        if not self.can_add(item_id):
            raise InventoryFullError(item_id=item_id, capacity=self.capacity)
        self.items[item_id] = self.items.get(item_id, 0) + quantity

    def remove(self, item_id: str, quantity: int) -> None:
        """Remove items.

        Args:
            item_id: Item to remove.
            quantity: Positive amount to remove.

        Raises:
            InsufficientResourcesError: If fewer than ``quantity`` are held.
        """
        if quantity <= 0:
            return
        held = self.count(item_id)
        if held < quantity:
            raise InsufficientResourcesError(
                f"Not enough {item_id}",
                item_id=item_id,
                required=quantity,
                available=held,
            )
        if held == quantity:
            del self.items[item_id]
        else:
            self.items[item_id] = held - quantity


class Equipment(BaseModel):
    """Worn gear and equipped food.

    Attributes:
        gear: Item id worn in each occupied slot.
        food_slots: Fixed-length list of food stacks; None for empty slots.
        selected_food_slot: Index of the food slot eaten from.
    """

    model_config = _STATE_CONFIG

    gear: dict[EquipmentSlot, str] = Field(default_factory=dict)
    food_slots: list[ItemStack | None] = Field(default_factory=lambda: [None, None, None])
    selected_food_slot: Annotated[int, Field(ge=0)] = 0

    def equipped(self, slot: EquipmentSlot) -> str | None:
        """Get the item worn in a slot."""
        return self.gear.get(slot)

    def is_equipped(self, item_id: str) -> bool:
        """Check whether an item is worn in any slot."""
        return item_id in self.gear.values()

    @property
    def selected_food(self) -> ItemStack | None:
        """Food stack in the selected slot."""
        if 0 <= self.selected_food_slot < len(self.food_slots):
            return self.food_slots[self.selected_food_slot]
        return None

    def food_slot_for(self, item_id: str) -> int | None:
        """Find the slot an item of food should go into.

        Returns:
            A slot already holding the item, else the first empty slot, else None.
        """
        for index, stack in enumerate(self.food_slots):
            if stack is not None and stack.item_id == item_id:
                return index
        for index, stack in enumerate(self.food_slots):
            if stack is None:
                return index
        return None

    def next_non_empty_food_slot(self) -> int | None:
        """First food slot holding food, if any."""
        for index, stack in enumerate(self.food_slots):
            if stack is not None:
                return index
        return None


# =============================================================================
# Player Status
# =============================================================================


class HealthState(BaseModel):
    """Player hitpoints tracked as damage taken.

    Attributes:
        lost_hp: Damage taken since full health.
        regen_ticks_remaining: Ticks until the next regeneration pulse.
    """

    model_config = _STATE_CONFIG

    lost_hp: Annotated[int, Field(ge=0)] = 0
    regen_ticks_remaining: Annotated[int, Field(ge=0)] = 0

    @property
    def is_full(self) -> bool:
        """Whether the player is at full health."""
        return self.lost_hp == 0


class StunnedState(BaseModel):
    """Stun countdown; the player cannot act while it is non-zero."""

    model_config = _STATE_CONFIG

    ticks_remaining: Annotated[int, Field(ge=0)] = 0

    @property
    def is_stunned(self) -> bool:
        """Whether the player is currently stunned."""
        return self.ticks_remaining > 0


class SkillState(BaseModel):
    """Skill XP and the skill's shared mastery pool."""

    model_config = _STATE_CONFIG

    xp: Annotated[int, Field(ge=0)] = 0
    mastery_pool_xp: Annotated[int, Field(ge=0)] = 0

    @property
    def level(self) -> int:
        """Skill level reached with the current XP."""
        return level_for_xp(self.xp)


class ActionState(BaseModel):
    """Per-action progression.

    Attributes:
        mastery_xp: Mastery XP for this action; never decreases.
        selected_recipe_index: Chosen recipe for multi-recipe actions.
        cumulative_ticks: Ticks spent performing this action.
    """

    model_config = _STATE_CONFIG

    mastery_xp: Annotated[int, Field(ge=0)] = 0
    selected_recipe_index: Annotated[int, Field(ge=0)] = 0
    cumulative_ticks: Annotated[int, Field(ge=0)] = 0

    @property
    def mastery_level(self) -> int:
        """Mastery level reached with the current mastery XP."""
        return mastery_level_for_xp(self.mastery_xp)


class SlayerTask(BaseModel):
    """An assigned slayer task."""

    model_config = _STATE_CONFIG

    category_id: str
    monster_id: str
    kills_required: Annotated[int, Field(ge=1)]
    kills_completed: Annotated[int, Field(ge=0)] = 0

    @property
    def is_complete(self) -> bool:
        """Whether enough kills have been recorded."""
        return self.kills_completed >= self.kills_required

    def record_kill(self) -> None:
        """Count one kill towards the task."""
        if not self.is_complete:
            self.kills_completed += 1


# =============================================================================
# Active Action
# =============================================================================


class ActiveSkillAction(BaseModel):
    """A timed skill action occupying the active slot."""

    model_config = _STATE_CONFIG

    kind: Literal["skill"] = "skill"
    action_id: str
    remaining_ticks: Annotated[int, Field(ge=0)]
    total_ticks: Annotated[int, Field(ge=1)]

    @property
    def progress(self) -> float:
        """Fraction of the current completion that has elapsed."""
        return 1 - self.remaining_ticks / self.total_ticks


class ActiveCombat(BaseModel):
    """Combat occupying the active slot."""

    model_config = _STATE_CONFIG

    kind: Literal["combat"] = "combat"
    combat: CombatActionState

    @property
    def action_id(self) -> str:
        """Monster currently being fought."""
        return self.combat.monster_id


ActiveAction = Annotated[
    Union[ActiveSkillAction, ActiveCombat],
    Field(discriminator="kind"),
]


# =============================================================================
# Background Activities
# =============================================================================


class PlotState(BaseModel):
    """An unlocked farming plot.

    Attributes:
        crop_id: Crop growing in the plot; None when empty.
        growth_ticks_remaining: Ticks until the crop can be harvested.
        compost_applied: Compost value applied, between 0 and 50.
        harvest_bonus_applied: Extra harvest percentage from compost items.
    """

    model_config = _STATE_CONFIG

    crop_id: str | None = None
    growth_ticks_remaining: Annotated[int, Field(ge=0)] = 0
    compost_applied: Annotated[int, Field(ge=0, le=MAX_COMPOST)] = 0
    harvest_bonus_applied: Annotated[int, Field(ge=0)] = 0

    @property
    def is_empty(self) -> bool:
        """Whether nothing is planted."""
        return self.crop_id is None

    @property
    def is_growing(self) -> bool:
        """Whether a crop is planted and still growing."""
        return self.crop_id is not None and self.growth_ticks_remaining > 0

    @property
    def is_ready(self) -> bool:
        """Whether a crop is planted and ready to harvest."""
        return self.crop_id is not None and self.growth_ticks_remaining == 0


class CookingAreaState(BaseModel):
    """Recipe assigned to a cooking area and its passive progress."""

    model_config = _STATE_CONFIG

    recipe_id: str | None = None
    progress_ticks_remaining: Annotated[int, Field(ge=0)] = 0


class SummoningState(BaseModel):
    """Familiar marks found and tablets crafted.

    Attributes:
        marks: Familiar action id to number of marks found.
        crafted_tablets: Familiars whose tablet has been crafted at least once.
    """

    model_config = _STATE_CONFIG

    marks: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
    crafted_tablets: list[str] = Field(default_factory=list)

    def marks_for(self, familiar_id: str) -> int:
        """Marks found for a familiar."""
        return self.marks.get(familiar_id, 0)

    def has_crafted(self, familiar_id: str) -> bool:
        """Whether a familiar's tablet has been crafted."""
        return familiar_id in self.crafted_tablets


class BuildingState(BaseModel):
    """Count and condition of one building type in a biome."""

    model_config = _STATE_CONFIG

    count: Annotated[int, Field(ge=0)] = 0
    efficiency: Annotated[float, Field(ge=0, le=TOWNSHIP_MAX_EFFICIENCY)] = TOWNSHIP_MAX_EFFICIENCY

    @property
    def needs_repair(self) -> bool:
        """Whether efficiency has dropped below 100%."""
        return self.efficiency < TOWNSHIP_MAX_EFFICIENCY


class BiomeState(BaseModel):
    """Buildings placed in one biome."""

    model_config = _STATE_CONFIG

    buildings: dict[str, BuildingState] = Field(default_factory=dict)


class TownshipState(BaseModel):
    """Township simulation state.

    Attributes:
        biomes: Biome id to placed buildings.
        resources: Township resource stockpiles.
        health: Township health percentage.
        worship_id: Selected deity.
        worship: Worship points, 0 to 2000.
        season: Current season.
        season_ticks_remaining: Ticks until the season changes.
        update_ticks_remaining: Ticks until the next hourly update.
        completed_tasks: Claimed task ids.
    """

    model_config = _STATE_CONFIG

    biomes: dict[str, BiomeState] = Field(default_factory=dict)
    resources: dict[str, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
    health: Annotated[float, Field(ge=0, le=TOWNSHIP_MAX_HEALTH)] = TOWNSHIP_MAX_HEALTH
    worship_id: str | None = None
    worship: Annotated[int, Field(ge=0)] = 0
    season: Season = Season.SPRING
    season_ticks_remaining: Annotated[int, Field(ge=0)] = 0
    update_ticks_remaining: Annotated[int, Field(ge=0)] = 0
    completed_tasks: list[str] = Field(default_factory=list)

    def resource(self, resource_id: str) -> int:
        """Amount of a resource held."""
        return self.resources.get(resource_id, 0)

    def building(self, biome_id: str, building_id: str) -> BuildingState:
        """Get building state, or an empty state if none are built."""
        biome = self.biomes.get(biome_id)
        if biome is None:
            return BuildingState()
        return biome.buildings.get(building_id, BuildingState())

    def building_count(self, building_id: str) -> int:
        """Buildings of one type across every biome."""
        return sum(
            biome.buildings[building_id].count
            for biome in self.biomes.values()
            if building_id in biome.buildings
        )

    @property
    def stored_total(self) -> int:
        """Sum of all stockpiled resources."""
        return sum(self.resources.values())

    @property
    def base_storage(self) -> int:
        """Storage available before buildings add capacity."""
        return TOWNSHIP_BASE_STORAGE


# =============================================================================
# Root State
# =============================================================================


class GameState(BaseModel):
    """The complete state of one save.

    Attributes:
        inventory: Bank contents.
        equipment: Gear and food.
        currencies: Currency balances; never negative.
        skills: XP and mastery pool per skill.
        action_states: Mastery and recipe selection per action id.
        active_action: The single running action, if any.
        attack_style: Player attack style.
        health: Player hitpoints.
        stunned: Player stun countdown.
        plots: Unlocked farming plots keyed by plot id.
        cooking_areas: Assigned recipe per cooking area.
        summoning: Familiar marks.
        township: Township simulation.
        slayer_task: Current slayer task.
        dungeon_completions: Clears per dungeon id.
        stronghold_completions: Clears per stronghold id.
        shop_purchases: Purchase counts per shop entry id.
        elapsed_ticks: Ticks simulated since the save was created.
        last_stop_reason: Why the last active action ended.
    """

    model_config = _STATE_CONFIG

    inventory: Inventory = Field(default_factory=Inventory)
    equipment: Equipment = Field(default_factory=Equipment)
    currencies: dict[Currency, Annotated[int, Field(ge=0)]] = Field(default_factory=dict)
    skills: dict[Skill, SkillState] = Field(default_factory=dict)
    action_states: dict[str, ActionState] = Field(default_factory=dict)
    active_action: ActiveAction | None = None
    attack_style: AttackStyle = AttackStyle.STAB
    health: HealthState = Field(default_factory=HealthState)
    stunned: StunnedState = Field(default_factory=StunnedState)
    plots: dict[str, PlotState] = Field(default_factory=dict)
    cooking_areas: dict[CookingArea, CookingAreaState] = Field(default_factory=dict)
    summoning: SummoningState = Field(default_factory=SummoningState)
    township: TownshipState = Field(default_factory=TownshipState)
    slayer_task: SlayerTask | None = None
    dungeon_completions: dict[str, int] = Field(default_factory=dict)
    stronghold_completions: dict[str, int] = Field(default_factory=dict)
    shop_purchases: dict[str, int] = Field(default_factory=dict)
    elapsed_ticks: Annotated[int, Field(ge=0)] = 0
    last_stop_reason: StopReason | None = None

    # =========================================================================
    # Read helpers
    # =========================================================================

    def currency(self, currency: Currency) -> int:
        """Balance of a currency."""
        return self.currencies.get(currency, 0)

    def skill_state(self, skill: Skill) -> SkillState:
        """XP state of a skill; a fresh state if never trained."""
        state = self.skills.get(skill)
        return state if state is not None else SkillState()

    def skill_level(self, skill: Skill) -> int:
        """Level of a skill."""
        return self.skill_state(skill).level

    def action_state(self, action_id: str) -> ActionState:
        """Progress of an action; a fresh state if never performed."""
        state = self.action_states.get(action_id)
        return state if state is not None else ActionState()

    @property
    def active_action_id(self) -> str | None:
        """Identifier of the running action, if any."""
        if self.active_action is None:
            return None
        return self.active_action.action_id

    @property
    def combat(self) -> CombatActionState | None:
        """Combat state when combat is the active action."""
        if isinstance(self.active_action, ActiveCombat):
            return self.active_action.combat
        return None

    @property
    def max_player_hp(self) -> int:
        """Player max HP from the hitpoints level."""
        return self.skill_level(Skill.HITPOINTS) * HITPOINTS_PER_LEVEL

    @property
    def player_hp(self) -> int:
        """Player current HP."""
        return max(self.max_player_hp - self.health.lost_hp, 0)

    def dungeon_completion_count(self, dungeon_id: str) -> int:
        """Times a dungeon has been cleared."""
        return self.dungeon_completions.get(dungeon_id, 0)

    def shop_purchase_count(self, purchase_id: str) -> int:
        """Times a shop entry has been bought."""
        return self.shop_purchases.get(purchase_id, 0)


__all__ = [
    # Inventory & equipment
    "Inventory",
    "Equipment",
    # Player status
    "HealthState",
    "StunnedState",
    "SkillState",
    "ActionState",
    "SlayerTask",
    # Active action
    "ActiveSkillAction",
    "ActiveCombat",
    "ActiveAction",
    # Background activities
    "PlotState",
    "CookingAreaState",
    "SummoningState",
    "BuildingState",
    "BiomeState",
    "TownshipState",
    # Root state
    "GameState",
]
