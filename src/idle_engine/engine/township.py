"""Township simulation.

The township runs entirely in the background. Once the first building is
placed it receives an update every in-game hour: buildings may degrade,
production is credited, worship accrues and township XP is granted. Seasons
rotate every three days of elapsed ticks.

Player-facing operations (build, repair, heal, claim, select deity) raise
:class:`~idle_engine.core.exceptions.TownshipError` so callers can show the
reason.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from idle_engine.core.constants import (
    TICKS_PER_HOUR,
    TOWNSHIP_BASE_POPULATION,
    TOWNSHIP_DEGRADE_CHANCE,
    TOWNSHIP_HEALTH_LOSS_CHANCE,
    TOWNSHIP_HEALTH_LOSS_LEVEL,
    TOWNSHIP_HEALTH_LOSS_PER_UPDATE,
    TOWNSHIP_MAX_EFFICIENCY,
    TOWNSHIP_MAX_HEALTH,
    TOWNSHIP_MAX_WORSHIP,
    TOWNSHIP_MIN_EFFICIENCY,
    TOWNSHIP_MIN_HEALTH,
    TOWNSHIP_SEASON_DAYS,
    TOWNSHIP_WORSHIP_PER_BONUS_PERCENT,
    TOWNSHIP_XP_PER_POPULATION,
)
from idle_engine.core.exceptions import TownshipError
from idle_engine.core.logging import get_logger
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.ledger import add_currency, add_items, grant_xp, spend_currency
from idle_engine.models.definitions import (
    BuildBuildingGoal,
    PopulationGoal,
    ResourceGoal,
    TownshipLevelGoal,
)
from idle_engine.models.enums import Currency, Skill
from idle_engine.models.state import BiomeState, BuildingState


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.models.definitions import (
        TaskGoal,
        TownshipBuilding,
        TownshipDeity,
        TownshipTask,
    )
    from idle_engine.models.registry import Registry
    from idle_engine.models.state import GameState, TownshipState

logger = get_logger(__name__)

SEASON_TICKS = TOWNSHIP_SEASON_DAYS * 24 * TICKS_PER_HOUR


# =============================================================================
# Derived Stats
# =============================================================================


@dataclass(frozen=True)
class TownshipStats:
    """Aggregate figures derived from the buildings currently placed.

    ``effective_population`` is the population scaled by township health; it
    is what township XP is paid on.
    """

    population: int
    effective_population: int
    storage: int
    happiness: float
    education: float
    worship_rate: int


def _placed(
    township: TownshipState, registry: Registry
) -> Iterator[tuple[str, TownshipBuilding, BuildingState]]:
    """Yield ``(biome_id, building definition, building state)`` for placed buildings."""
    for biome_id, biome in township.biomes.items():
        for building_id, placed in biome.buildings.items():
            if placed.count > 0:
                yield biome_id, registry.township_buildings.by_id(building_id), placed


def has_buildings(township: TownshipState) -> bool:
    """Whether any building has been placed."""
    return any(
        placed.count > 0
        for biome in township.biomes.values()
        for placed in biome.buildings.values()
    )


def township_stats(state: GameState, registry: Registry) -> TownshipStats:
    """Compute population, storage, happiness, education and worship rate."""
    township = state.township
    population = TOWNSHIP_BASE_POPULATION
    storage = township.base_storage
    happiness = float(township.season.happiness_modifier)
    education = float(township.season.education_modifier)
    worship_rate = 0
    for _, building, placed in _placed(township, registry):
        population += building.population * placed.count
        storage += building.storage * placed.count
        happiness += building.happiness * placed.count
        education += building.education * placed.count
        worship_rate += building.worship * placed.count
    return TownshipStats(
        population=population,
        effective_population=math.floor(population * township.health / TOWNSHIP_MAX_HEALTH),
        storage=storage,
        happiness=max(happiness, 0.0),
        education=max(education, 0.0),
        worship_rate=worship_rate,
    )


def deity_bonus_percent(
    township: TownshipState,
    deity: TownshipDeity | None,
    biome_id: str,
) -> float:
    """Production bonus the selected deity grants a biome.

    The bonus grows by one percent per 20 worship points, up to the deity's
    maximum.
    """
    if deity is None:
        return 0.0
    if deity.biome_ids and biome_id not in deity.biome_ids:
        return 0.0
    return min(township.worship / TOWNSHIP_WORSHIP_PER_BONUS_PERCENT, deity.production_bonus)


def hourly_production(state: GameState, registry: Registry) -> dict[str, int]:
    """Resources the township produces in one hourly update.

    Each building produces its listed amounts scaled by count, efficiency,
    education and the deity bonus for its biome. Township health does not
    affect production; it scales the population XP is paid on.
    """
    township = state.township
    stats = township_stats(state, registry)
    deity = registry.township_deities.get(township.worship_id) if township.worship_id else None
    totals: dict[str, float] = {}
    for biome_id, building, placed in _placed(township, registry):
        bonus = stats.education + deity_bonus_percent(township, deity, biome_id)
        multiplier = placed.count * (placed.efficiency / 100) * (1 + bonus / 100)
        for resource_id, amount in building.production.items():
            totals[resource_id] = totals.get(resource_id, 0.0) + amount * multiplier
    return {resource_id: math.floor(amount) for resource_id, amount in totals.items()}


def repair_cost(building: TownshipBuilding, placed: BuildingState) -> int:
    """GP needed to restore a building type in a biome to full efficiency."""
    missing = 1 - placed.efficiency / TOWNSHIP_MAX_EFFICIENCY
    return max(math.ceil(building.gp_cost / 3 * placed.count * missing), 1)


# =============================================================================
# Commands
# =============================================================================


def build(state: GameState, ctx: EngineContext, biome_id: str, building_id: str) -> None:
    """Place one building in a biome, paying GP and township resources.

    Raises:
        TownshipError: If the biome is locked or unsuitable, the cap is reached,
            the level is too low or the costs cannot be paid.
    """
    township = state.township
    building = ctx.registry.township_buildings.by_id(building_id)
    biome = ctx.registry.township_biomes.by_id(biome_id)
    if biome_id not in building.biome_ids:
        raise TownshipError(
            f"{building.name} cannot be built in {biome.name}",
            building_id=building_id,
            biome_id=biome_id,
        )
    population = township_stats(state, ctx.registry).population
    if population < biome.population_required:
        raise TownshipError(
            f"{biome.name} requires a population of {biome.population_required}",
            biome_id=biome_id,
            details={"population": population},
        )
    if state.skill_level(Skill.TOWNSHIP) < building.level_required:
        raise TownshipError(
            f"{building.name} requires Township level {building.level_required}",
            building_id=building_id,
        )
    placed = township.building(biome_id, building_id)
    if building.max_count is not None and placed.count >= building.max_count:
        raise TownshipError(
            f"{biome.name} already has the maximum number of {building.name}",
            building_id=building_id,
            biome_id=biome_id,
        )
    if state.currency(Currency.GP) < building.gp_cost:
        raise TownshipError(f"Not enough GP to build {building.name}", building_id=building_id)
    for resource_id, amount in building.resource_costs.items():
        if township.resource(resource_id) < amount:
            raise TownshipError(
                f"Not enough {resource_id} to build {building.name}",
                building_id=building_id,
                details={"resource_id": resource_id, "required": amount},
            )

    spend_currency(state, Currency.GP, building.gp_cost)
    for resource_id, amount in building.resource_costs.items():
        township.resources[resource_id] = township.resource(resource_id) - amount
    was_started = has_buildings(township)
    biome_state = township.biomes.setdefault(biome_id, BiomeState())
    placed = biome_state.buildings.setdefault(building_id, BuildingState())
    placed.count += 1
    if not was_started:
        township.update_ticks_remaining = TICKS_PER_HOUR
        township.season_ticks_remaining = SEASON_TICKS
    logger.info("Building built", biome_id=biome_id, building_id=building_id, count=placed.count)


def repair(state: GameState, ctx: EngineContext, biome_id: str, building_id: str) -> int:
    """Restore a building type in a biome to full efficiency.

    Returns:
        GP spent.

    Raises:
        TownshipError: If nothing is built, nothing needs repair or GP is short.
    """
    building = ctx.registry.township_buildings.by_id(building_id)
    placed = state.township.building(biome_id, building_id)
    if placed.count == 0:
        raise TownshipError(f"No {building.name} built", building_id=building_id, biome_id=biome_id)
    if not placed.needs_repair:
        raise TownshipError(
            f"{building.name} does not need repair",
            building_id=building_id,
            biome_id=biome_id,
        )
    cost = repair_cost(building, placed)
    if state.currency(Currency.GP) < cost:
        raise TownshipError(
            f"Not enough GP to repair {building.name}",
            building_id=building_id,
            details={"required": cost},
        )
    spend_currency(state, Currency.GP, cost)
    placed.efficiency = TOWNSHIP_MAX_EFFICIENCY
    logger.info("Building repaired", biome_id=biome_id, building_id=building_id, gp_cost=cost)
    return cost


def heal(state: GameState, ctx: EngineContext, amount: int) -> int:
    """Spend the healing resource to restore up to ``amount`` health.

    Returns:
        Health points restored.

    Raises:
        TownshipError: If no healing resource is defined, health is full or
            the resource is short.
    """
    township = state.township
    data = ctx.registry.township
    if data.heal_resource_id is None:
        raise TownshipError("The township cannot be healed")
    missing = math.floor(TOWNSHIP_MAX_HEALTH - township.health)
    if missing <= 0:
        raise TownshipError("Township health is already full")
    points = min(amount, missing)
    cost = points * data.heal_cost_per_percent
    held = township.resource(data.heal_resource_id)
    if held < cost:
        raise TownshipError(
            f"Not enough {data.heal_resource_id} to heal the township",
            details={"required": cost, "available": held},
        )
    township.resources[data.heal_resource_id] = held - cost
    township.health = min(township.health + points, TOWNSHIP_MAX_HEALTH)
    logger.info("Township healed", points=points, cost=cost)
    return points


def is_goal_met(state: GameState, registry: Registry, goal: TaskGoal) -> bool:
    """Check one township task goal."""
    township = state.township
    if isinstance(goal, PopulationGoal):
        return township_stats(state, registry).population >= goal.amount
    if isinstance(goal, BuildBuildingGoal):
        return township.building_count(goal.building_id) >= goal.count
    if isinstance(goal, TownshipLevelGoal):
        return state.skill_level(Skill.TOWNSHIP) >= goal.level
    if isinstance(goal, ResourceGoal):
        return township.resource(goal.resource_id) >= goal.amount
    return False


def unmet_goals(state: GameState, registry: Registry, task: TownshipTask) -> list[str]:
    """Describe every goal of a task that is not met."""
    return [goal.kind for goal in task.goals if not is_goal_met(state, registry, goal)]


def claim_task(state: GameState, ctx: EngineContext, task_id: str) -> None:
    """Claim a completed task and grant its rewards.

    Raises:
        TownshipError: If the task was already claimed or a goal is unmet.
        InventoryFullError: If the item rewards do not fit in the bank.
    """
    township = state.township
    task = ctx.registry.township_tasks.by_id(task_id)
    if task_id in township.completed_tasks:
        raise TownshipError(f"{task.name} has already been claimed", details={"task_id": task_id})
    unmet = unmet_goals(state, ctx.registry, task)
    if unmet:
        raise TownshipError(
            f"{task.name} is not complete",
            details={"task_id": task_id, "unmet": unmet},
        )
    add_items(state, {stack.item_id: stack.quantity for stack in task.item_rewards})
    add_currency(state, Currency.GP, task.gp_reward)
    for resource_id, amount in task.resource_rewards.items():
        township.resources[resource_id] = township.resource(resource_id) + amount
    grant_xp(state, ctx, Skill.TOWNSHIP, task.xp_reward)
    township.completed_tasks.append(task_id)
    logger.info("Township task claimed", task_id=task_id)


def select_deity(state: GameState, ctx: EngineContext, deity_id: str) -> None:
    """Worship a deity; switching from another deity resets worship to 0.

    Raises:
        TownshipError: If the deity is already selected.
    """
    township = state.township
    deity = ctx.registry.township_deities.by_id(deity_id)
    if township.worship_id == deity_id:
        raise TownshipError(f"{deity.name} is already worshipped")
    if township.worship_id is not None:
        township.worship = 0
    township.worship_id = deity_id
    logger.info("Deity selected", deity_id=deity_id)


# =============================================================================
# Hourly Update & Seasons
# =============================================================================


def _degrade_buildings(township: TownshipState, ctx: EngineContext) -> None:
    """Roll efficiency loss once for every placed building that can degrade."""
    for _, building, placed in _placed(township, ctx.registry):
        if not building.can_degrade:
            continue
        losses = sum(ctx.rng.random() < TOWNSHIP_DEGRADE_CHANCE for _ in range(placed.count))
        placed.efficiency = max(placed.efficiency - losses, TOWNSHIP_MIN_EFFICIENCY)


def run_hourly_update(state: GameState, ctx: EngineContext) -> dict[str, int]:
    """Apply one hourly township update.

    Production for bank-deposited resources is paid straight into GP; other
    resources are stockpiled up to the storage limit and the excess is lost.

    Returns:
        Resources credited by this update.
    """
    township = state.township
    stats = township_stats(state, ctx.registry)
    produced = hourly_production(state, ctx.registry)
    _degrade_buildings(township, ctx)

    credited: dict[str, int] = {}
    for resource_id, amount in produced.items():
        if amount <= 0:
            continue
        resource = ctx.registry.township_resources.get(resource_id)
        if resource is not None and resource.deposits_to_bank:
            add_currency(state, Currency.GP, amount)
            credited[resource_id] = amount
            continue
        space = max(stats.storage - township.stored_total, 0)
        stored = min(amount, space)
        if stored:
            township.resources[resource_id] = township.resource(resource_id) + stored
            credited[resource_id] = stored

    if township.worship_id is not None:
        township.worship = min(township.worship + stats.worship_rate, TOWNSHIP_MAX_WORSHIP)
    losing_health = state.skill_level(Skill.TOWNSHIP) >= TOWNSHIP_HEALTH_LOSS_LEVEL
    if losing_health and ctx.rng.random() < TOWNSHIP_HEALTH_LOSS_CHANCE:
        township.health = max(
            township.health - TOWNSHIP_HEALTH_LOSS_PER_UPDATE, TOWNSHIP_MIN_HEALTH
        )
    xp_per_citizen = TOWNSHIP_XP_PER_POPULATION * (1 + stats.happiness / 100)
    grant_xp(state, ctx, Skill.TOWNSHIP, math.floor(stats.effective_population * xp_per_citizen))

    logger.info("Township updated", credited=credited, health=township.health)
    ctx.emit(EngineEventType.TOWNSHIP_UPDATED, credited=credited)
    return credited


def ticks_until_next_event(state: GameState) -> int | None:
    """Ticks until the next hourly update or season change."""
    township = state.township
    if not has_buildings(township):
        return None
    return max(min(township.update_ticks_remaining, township.season_ticks_remaining), 1)


def advance_township(state: GameState, ctx: EngineContext, ticks: int) -> None:
    """Count down the hourly and season timers, firing whatever comes due."""
    township = state.township
    if ticks <= 0 or not has_buildings(township):
        return

    township.season_ticks_remaining = max(township.season_ticks_remaining - ticks, 0)
    if township.season_ticks_remaining == 0:
        township.season = township.season.next
        township.season_ticks_remaining = SEASON_TICKS
        logger.info("Season changed", season=township.season.value)
        ctx.emit(EngineEventType.SEASON_CHANGED, season=township.season.value)

    township.update_ticks_remaining = max(township.update_ticks_remaining - ticks, 0)
    if township.update_ticks_remaining == 0:
        run_hourly_update(state, ctx)
        township.update_ticks_remaining = TICKS_PER_HOUR


__all__ = [
    "SEASON_TICKS",
    "TownshipStats",
    "has_buildings",
    "township_stats",
    "deity_bonus_percent",
    "hourly_production",
    "repair_cost",
    "build",
    "repair",
    "heal",
    "is_goal_met",
    "unmet_goals",
    "claim_task",
    "select_deity",
    "run_hourly_update",
    "ticks_until_next_event",
    "advance_township",
]
