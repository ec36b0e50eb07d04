"""Farming plots.

Crops grow in the background: a planted plot counts down on every tick no
matter what the active action is. The harvest outcome is rolled exactly once,
when the player harvests, at ``(50 + compost)%``. A failed roll destroys the
crop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from idle_engine.core.constants import (
    BASE_HARVEST_CHANCE,
    MASTERY_HARVEST_BONUS_PER_LEVEL,
    MASTERY_POOL_SHARE,
    MAX_COMPOST,
    SEED_RETURN_BASE_CHANCE,
)
from idle_engine.core.exceptions import (
    InsufficientResourcesError,
    InvalidGameStateError,
    InventoryFullError,
    RequirementsNotMetError,
    ValidationError,
)
from idle_engine.core.logging import get_logger
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.ledger import (
    add_items,
    fits_after,
    grant_mastery_xp,
    grant_xp,
    spend_currency,
)
from idle_engine.engine.ticks import seconds_to_ticks
from idle_engine.models.enums import Currency, Skill
from idle_engine.models.state import PlotState


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.models.definitions import FarmingPlot
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


def harvest_chance(compost: int) -> float:
    """Probability that a harvest succeeds with a given amount of compost."""
    return min(BASE_HARVEST_CHANCE + compost, 100) / 100


def _unlocked_plot(
    state: GameState, ctx: EngineContext, plot_id: str
) -> tuple[FarmingPlot, PlotState]:
    definition = ctx.registry.farming_plots.by_id(plot_id)
    plot = state.plots.get(plot_id)
    if plot is None:
        raise ValidationError(
            f"Plot {plot_id} is locked", field_name="plot_id", invalid_value=plot_id
        )
    return definition, plot


# =============================================================================
# Plot Commands
# =============================================================================


def unlock_plot(state: GameState, ctx: EngineContext, plot_id: str) -> None:
    """Buy a farming plot.

    Raises:
        InvalidGameStateError: If the plot is already unlocked.
        RequirementsNotMetError: If the farming level is too low.
        InsufficientResourcesError: If the GP cost cannot be paid.
    """
    definition = ctx.registry.farming_plots.by_id(plot_id)
    if plot_id in state.plots:
        raise InvalidGameStateError(f"Plot {plot_id} is already unlocked", current_state="unlocked")
    if state.skill_level(Skill.FARMING) < definition.level_required:
        raise RequirementsNotMetError(
            f"Cannot unlock plot {plot_id}",
            unmet=[f"Requires Farming level {definition.level_required}"],
        )
    spend_currency(state, Currency.GP, definition.gp_cost)
    state.plots[plot_id] = PlotState()
    logger.info("Plot unlocked", plot_id=plot_id, gp_cost=definition.gp_cost)


def plant_crop(state: GameState, ctx: EngineContext, plot_id: str, crop_id: str) -> None:
    """Plant a crop, consuming its seed cost in full.

    Raises:
        ValidationError: If the plot is locked or belongs to another category.
        InvalidGameStateError: If something is already planted.
        RequirementsNotMetError: If the farming level is too low.
        InsufficientResourcesError: If fewer seeds than the seed cost are held.
    """
    definition, plot = _unlocked_plot(state, ctx, plot_id)
    crop = ctx.registry.crop(crop_id)
    if crop.category_id != definition.category_id:
        raise ValidationError(
            f"{crop.name} cannot be planted in plot {plot_id}",
            field_name="crop_id",
            invalid_value=crop_id,
        )
    if not plot.is_empty:
        raise InvalidGameStateError(f"Plot {plot_id} is not empty", current_state="planted")
    if state.skill_level(Skill.FARMING) < crop.level_required:
        raise RequirementsNotMetError(
            f"Cannot plant {crop.name}",
            unmet=[f"Requires Farming level {crop.level_required}"],
        )
    held = state.inventory.count(crop.seed_id)
    if held < crop.seed_cost:
        raise InsufficientResourcesError(
            f"Not enough {crop.seed_id} to plant {crop.name}",
            item_id=crop.seed_id,
            required=crop.seed_cost,
            available=held,
        )

    state.inventory.remove(crop.seed_id, crop.seed_cost)
    plot.crop_id = crop_id
    plot.growth_ticks_remaining = max(1, seconds_to_ticks(crop.growth_time))
    category = ctx.registry.farming_categories.get(crop.category_id)
    if category is not None and category.gives_xp_on_plant:
        grant_xp(state, ctx, Skill.FARMING, crop.xp)
    logger.info("Crop planted", plot_id=plot_id, crop_id=crop_id, ticks=plot.growth_ticks_remaining)


def apply_compost(state: GameState, ctx: EngineContext, plot_id: str, item_id: str) -> None:
    """Apply one compost item to an empty plot; the total is capped at 50.

    Raises:
        ValidationError: If the item is not compost or the plot is at the cap.
        InvalidGameStateError: If a crop is already planted.
    """
    _, plot = _unlocked_plot(state, ctx, plot_id)
    item = ctx.registry.items.by_id(item_id)
    if not item.is_compost or item.compost_value is None:
        raise ValidationError(
            f"{item.name} is not compost", field_name="item_id", invalid_value=item_id
        )
    if not plot.is_empty:
        raise InvalidGameStateError(
            "Compost can only be applied to an empty plot", current_state="planted"
        )
    if plot.compost_applied >= MAX_COMPOST:
        raise ValidationError(f"Plot {plot_id} already has maximum compost", field_name="plot_id")
    state.inventory.remove(item_id, 1)
    plot.compost_applied = min(plot.compost_applied + item.compost_value, MAX_COMPOST)
    plot.harvest_bonus_applied += item.harvest_bonus or 0


def harvest_crop(state: GameState, ctx: EngineContext, plot_id: str) -> int:
    """Harvest a ready crop, rolling success once.

    Returns:
        Quantity of product harvested; 0 if the crop failed.

    Raises:
        InvalidGameStateError: If nothing is planted or the crop is still growing.
        InventoryFullError: If the harvest does not fit in the bank.
    """
    _, plot = _unlocked_plot(state, ctx, plot_id)
    if plot.crop_id is None:
        raise InvalidGameStateError(f"Nothing is planted in plot {plot_id}", current_state="empty")
    if not plot.is_ready:
        raise InvalidGameStateError(
            f"Crop in plot {plot_id} is still growing", current_state="growing"
        )
    crop = ctx.registry.crop(plot.crop_id)
    category = ctx.registry.farming_categories.by_id(crop.category_id)

    if ctx.rng.random() >= harvest_chance(plot.compost_applied):
        logger.info("Crop failed", plot_id=plot_id, crop_id=crop.id)
        ctx.emit(EngineEventType.CROP_FAILED, plot_id=plot_id, crop_id=crop.id)
        state.plots[plot_id] = PlotState()
        return 0

    mastery_level = state.action_state(crop.id).mastery_level
    mastery_bonus = MASTERY_HARVEST_BONUS_PER_LEVEL * mastery_level
    quantity = round(
        crop.base_quantity
        * category.harvest_multiplier
        * (1 + plot.harvest_bonus_applied / 100)
        * (1 + mastery_bonus)
    )
    quantity = max(quantity, 1)
    produced = {crop.product_id: quantity}
    if category.returns_seeds:
        seed_chance = SEED_RETURN_BASE_CHANCE + mastery_bonus
        seeds = sum(1 for _ in range(quantity) if ctx.rng.random() < seed_chance)
        if seeds:
            produced[crop.seed_id] = produced.get(crop.seed_id, 0) + seeds
    if not fits_after(state, {}, produced):
        raise InventoryFullError(item_id=crop.product_id, capacity=state.inventory.capacity)

    add_items(state, produced)
    xp = crop.xp * quantity if category.scale_xp_with_quantity else crop.xp
    grant_xp(state, ctx, Skill.FARMING, xp)
    grant_mastery_xp(
        state,
        Skill.FARMING,
        crop.id,
        xp // category.mastery_xp_divider,
        pool_share=MASTERY_POOL_SHARE,
    )
    state.plots[plot_id] = PlotState()
    logger.info("Crop harvested", plot_id=plot_id, crop_id=crop.id, quantity=quantity)
    ctx.emit(EngineEventType.CROP_HARVESTED, plot_id=plot_id, crop_id=crop.id, quantity=quantity)
    return quantity


def clear_plot(state: GameState, ctx: EngineContext, plot_id: str) -> None:
    """Destroy the plot's crop and compost.

    Raises:
        InvalidGameStateError: If there is nothing to clear.
    """
    _, plot = _unlocked_plot(state, ctx, plot_id)
    if plot.is_empty and plot.compost_applied == 0:
        raise InvalidGameStateError(f"Plot {plot_id} is already clear", current_state="empty")
    state.plots[plot_id] = PlotState()
    logger.info("Plot cleared", plot_id=plot_id)


# =============================================================================
# Growth
# =============================================================================


def ticks_until_next_event(state: GameState) -> int | None:
    """Ticks until the next crop becomes ready, or None when nothing grows."""
    growing = [plot.growth_ticks_remaining for plot in state.plots.values() if plot.is_growing]
    return min(growing) if growing else None


def advance_farming(state: GameState, ctx: EngineContext, ticks: int) -> None:
    """Count down every growing plot."""
    if ticks <= 0:
        return
    for plot_id, plot in state.plots.items():
        if not plot.is_growing:
            continue
        plot.growth_ticks_remaining = max(plot.growth_ticks_remaining - ticks, 0)
        if plot.is_ready:
            logger.debug("Crop ready", plot_id=plot_id, crop_id=plot.crop_id)


__all__ = [
    "harvest_chance",
    "unlock_plot",
    "plant_crop",
    "apply_compost",
    "harvest_crop",
    "clear_plot",
    "ticks_until_next_event",
    "advance_farming",
]
