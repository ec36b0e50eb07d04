"""Typed commands accepted by the engine and the results it returns.

Commands are immutable requests. The engine validates each one against the
current state and either applies it in full or rejects it with every reason
it found, leaving state untouched.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from idle_engine.models.enums import AttackStyle, CookingArea, EquipmentSlot, SequenceType


_COMMAND_CONFIG = ConfigDict(frozen=True, extra="forbid")


# =============================================================================
# Combat
# =============================================================================


class StartCombat(BaseModel):
    """Fight a monster, optionally chosen from a combat or slayer area."""

    model_config = _COMMAND_CONFIG

    kind: Literal["start_combat"] = "start_combat"
    monster_id: str
    area_id: str | None = None


class StartSequence(BaseModel):
    """Start a dungeon or stronghold run from its first monster."""

    model_config = _COMMAND_CONFIG

    kind: Literal["start_sequence"] = "start_sequence"
    sequence_type: SequenceType
    sequence_id: str


class StopCombat(BaseModel):
    """Flee from combat."""

    model_config = _COMMAND_CONFIG

    kind: Literal["stop_combat"] = "stop_combat"


class SetAttackStyle(BaseModel):
    """Change the player's attack style."""

    model_config = _COMMAND_CONFIG

    kind: Literal["set_attack_style"] = "set_attack_style"
    style: AttackStyle


class RollSlayerTask(BaseModel):
    """Pay to be assigned a new slayer task from a category."""

    model_config = _COMMAND_CONFIG

    kind: Literal["roll_slayer_task"] = "roll_slayer_task"
    category_id: str


# =============================================================================
# Skill Actions
# =============================================================================


class ToggleAction(BaseModel):
    """Start a skill action, or stop it if it is already running."""

    model_config = _COMMAND_CONFIG

    kind: Literal["toggle_action"] = "toggle_action"
    action_id: str


class StopAction(BaseModel):
    """Stop whatever action is running."""

    model_config = _COMMAND_CONFIG

    kind: Literal["stop_action"] = "stop_action"


class SelectRecipe(BaseModel):
    """Choose which alternative recipe a multi-recipe action uses."""

    model_config = _COMMAND_CONFIG

    kind: Literal["select_recipe"] = "select_recipe"
    action_id: str
    recipe_index: Annotated[int, Field(ge=0)]


class AssignCookingRecipe(BaseModel):
    """Assign a recipe to a cooking area, or clear it with None."""

    model_config = _COMMAND_CONFIG

    kind: Literal["assign_cooking_recipe"] = "assign_cooking_recipe"
    area: CookingArea
    recipe_id: str | None = None


# =============================================================================
# Farming
# =============================================================================


class UnlockPlot(BaseModel):
    """Buy a farming plot."""

    model_config = _COMMAND_CONFIG

    kind: Literal["unlock_plot"] = "unlock_plot"
    plot_id: str


class PlantCrop(BaseModel):
    """Plant a crop into an empty plot."""

    model_config = _COMMAND_CONFIG

    kind: Literal["plant_crop"] = "plant_crop"
    plot_id: str
    crop_id: str


class ApplyCompost(BaseModel):
    """Apply a compost item to an empty plot."""

    model_config = _COMMAND_CONFIG

    kind: Literal["apply_compost"] = "apply_compost"
    plot_id: str
    item_id: str


class HarvestCrop(BaseModel):
    """Harvest a ready crop."""

    model_config = _COMMAND_CONFIG

    kind: Literal["harvest_crop"] = "harvest_crop"
    plot_id: str


class ClearPlot(BaseModel):
    """Destroy whatever is planted in a plot."""

    model_config = _COMMAND_CONFIG

    kind: Literal["clear_plot"] = "clear_plot"
    plot_id: str


# =============================================================================
# Ledger
# =============================================================================


class SelectFoodSlot(BaseModel):
    """Select the food slot to eat from."""

    model_config = _COMMAND_CONFIG

    kind: Literal["select_food_slot"] = "select_food_slot"
    index: int


class EatFood(BaseModel):
    """Eat one food from the selected slot."""

    model_config = _COMMAND_CONFIG

    kind: Literal["eat_food"] = "eat_food"


class EquipFood(BaseModel):
    """Move food from the bank into a food slot."""

    model_config = _COMMAND_CONFIG

    kind: Literal["equip_food"] = "equip_food"
    item_id: str
    quantity: Annotated[int, Field(ge=1)]


class UnequipFood(BaseModel):
    """Return a food slot's contents to the bank."""

    model_config = _COMMAND_CONFIG

    kind: Literal["unequip_food"] = "unequip_food"
    index: int


class EquipGear(BaseModel):
    """Wear an item, returning whatever was in the slot to the bank."""

    model_config = _COMMAND_CONFIG

    kind: Literal["equip_gear"] = "equip_gear"
    item_id: str
    slot: EquipmentSlot


class UnequipGear(BaseModel):
    """Return the item in a gear slot to the bank."""

    model_config = _COMMAND_CONFIG

    kind: Literal["unequip_gear"] = "unequip_gear"
    slot: EquipmentSlot


class SellItem(BaseModel):
    """Sell items for GP."""

    model_config = _COMMAND_CONFIG

    kind: Literal["sell_item"] = "sell_item"
    item_id: str
    count: Annotated[int, Field(ge=1)]


class OpenItem(BaseModel):
    """Open items with a drop table, such as chests."""

    model_config = _COMMAND_CONFIG

    kind: Literal["open_item"] = "open_item"
    item_id: str
    count: Annotated[int, Field(ge=1)] = 1


class PurchaseShopItem(BaseModel):
    """Buy a shop entry."""

    model_config = _COMMAND_CONFIG

    kind: Literal["purchase_shop_item"] = "purchase_shop_item"
    purchase_id: str
    count: Annotated[int, Field(ge=1)] = 1


# =============================================================================
# Township
# =============================================================================


class BuildTownshipBuilding(BaseModel):
    """Build one building in a biome."""

    model_config = _COMMAND_CONFIG

    kind: Literal["build_township_building"] = "build_township_building"
    biome_id: str
    building_id: str


class RepairTownshipBuilding(BaseModel):
    """Restore a building type in a biome to full efficiency."""

    model_config = _COMMAND_CONFIG

    kind: Literal["repair_township_building"] = "repair_township_building"
    biome_id: str
    building_id: str


class HealTownship(BaseModel):
    """Spend the healing resource to restore township health."""

    model_config = _COMMAND_CONFIG

    kind: Literal["heal_township"] = "heal_township"
    amount: Annotated[int, Field(ge=1)]


class ClaimTownshipTask(BaseModel):
    """Claim a completed township task."""

    model_config = _COMMAND_CONFIG

    kind: Literal["claim_township_task"] = "claim_township_task"
    task_id: str


class SelectDeity(BaseModel):
    """Choose the deity the township worships."""

    model_config = _COMMAND_CONFIG

    kind: Literal["select_deity"] = "select_deity"
    deity_id: str


Command = Annotated[
    Union[
        StartCombat,
        StartSequence,
        StopCombat,
        SetAttackStyle,
        RollSlayerTask,
        ToggleAction,
        StopAction,
        SelectRecipe,
        AssignCookingRecipe,
        UnlockPlot,
        PlantCrop,
        ApplyCompost,
        HarvestCrop,
        ClearPlot,
        SelectFoodSlot,
        EatFood,
        EquipFood,
        UnequipFood,
        EquipGear,
        UnequipGear,
        SellItem,
        OpenItem,
        PurchaseShopItem,
        BuildTownshipBuilding,
        RepairTownshipBuilding,
        HealTownship,
        ClaimTownshipTask,
        SelectDeity,
    ],
    Field(discriminator="kind"),
]


class CommandResult(BaseModel):
    """Outcome of dispatching a command.

    Attributes:
        success: Whether the command was applied.
        message: Summary suitable for a notification.
        reasons: Every reason the command was rejected; empty on success.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str = ""
    reasons: tuple[str, ...] = ()

    @classmethod
    def ok(cls, message: str = "") -> CommandResult:
        """Build a successful result."""
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, message: str, reasons: list[str] | None = None) -> CommandResult:
        """Build a rejected result; ``reasons`` defaults to ``[message]``."""
        return cls(success=False, message=message, reasons=tuple(reasons or [message]))

    def __bool__(self) -> bool:
        return self.success


__all__ = [
    # Combat
    "StartCombat",
    "StartSequence",
    "StopCombat",
    "SetAttackStyle",
    "RollSlayerTask",
    # Skill actions
    "ToggleAction",
    "StopAction",
    "SelectRecipe",
    "AssignCookingRecipe",
    # Farming
    "UnlockPlot",
    "PlantCrop",
    "ApplyCompost",
    "HarvestCrop",
    "ClearPlot",
    # Ledger
    "SelectFoodSlot",
    "EatFood",
    "EquipFood",
    "UnequipFood",
    "EquipGear",
    "UnequipGear",
    "SellItem",
    "OpenItem",
    "PurchaseShopItem",
    # Township
    "BuildTownshipBuilding",
    "RepairTownshipBuilding",
    "HealTownship",
    "ClaimTownshipTask",
    "SelectDeity",
    # Dispatch
    "Command",
    "CommandResult",
]
