"""Timed skill actions.

Every non-combat skill shares one loop: an action counts down its duration,
completes, pays out and immediately restarts until the player stops it or the
inputs run out. Skill-specific behaviour hangs off the action's variant:

* thieving rolls success against the target's perception and can stun;
* summoning tablets need a discovered mark, and every completed action can
  discover marks for familiars tied to its skill;
* cooking keeps assigned recipes in the other cooking areas progressing
  passively at a fifth of the speed.

Farming crops are also skill actions but grow in plots instead of the active
slot; see :mod:`idle_engine.engine.farming`.
"""

from __future__ import annotations

import bisect
from typing import TYPE_CHECKING

from idle_engine.core.constants import (
    MASTERY_POOL_SHARE,
    PASSIVE_COOKING_DURATION_MULTIPLIER,
    SUMMONING_EQUIPMENT_MARK_MODIFIER,
    SUMMONING_MARK_THRESHOLDS,
    THIEVING_BASE_STEALTH,
    TICKS_PER_SECOND,
)
from idle_engine.core.exceptions import (
    InsufficientResourcesError,
    InvalidGameStateError,
    RequirementsNotMetError,
    ValidationError,
)
from idle_engine.core.logging import get_logger
from idle_engine.engine.actions import require_not_stunned, stop_active_action
from idle_engine.engine.combat import handle_player_death, stun_player
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.ledger import (
    add_currency,
    add_items,
    auto_eat,
    damage_player,
    fits_after,
    grant_mastery_xp,
    grant_xp,
    remove_items,
    require_items,
    spend_currency,
)
from idle_engine.engine.modifiers import global_modifiers
from idle_engine.engine.ticks import modified_ticks
from idle_engine.models.definitions import (
    CookingAction,
    FarmingCrop,
    SummoningAction,
    ThievingAction,
)
from idle_engine.models.enums import Currency, Skill, StopReason
from idle_engine.models.progression import mastery_xp_per_action
from idle_engine.models.state import ActionState, ActiveSkillAction, CookingAreaState


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.engine.modifiers import ModifierSet
    from idle_engine.models.definitions import SkillAction
    from idle_engine.models.enums import CookingArea
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


# =============================================================================
# Durations & Rewards
# =============================================================================


def action_duration_ticks(
    ctx: EngineContext,
    action: SkillAction,
    modifiers: ModifierSet,
    *,
    sample: bool = True,
) -> int:
    """Duration of one completion in ticks after interval modifiers.

    Args:
        ctx: Engine context supplying the random source.
        action: Action being timed.
        modifiers: Aggregated modifiers.
        sample: Draw a ranged duration uniformly; otherwise use its mean.

    Returns:
        Duration in ticks, at least 1.
    """
    if action.is_fixed_duration or action.max_duration is None:
        seconds = action.min_duration
    elif sample:
        seconds = ctx.rng.uniform(action.min_duration, action.max_duration)
    else:
        seconds = action.mean_duration
    skill = action.skill.value
    return modified_ticks(
        seconds * TICKS_PER_SECOND,
        interval_percent=modifiers.scoped("skill_interval", skill),
        flat_ms=modifiers.scoped("flat_skill_interval", skill),
    )


def mastery_xp_for(
    state: GameState,
    ctx: EngineContext,
    action: SkillAction,
    modifiers: ModifierSet,
) -> int:
    """Mastery XP for one completion of ``action``."""
    actions = ctx.registry.for_skill(action.skill)
    level = state.skill_level(action.skill)
    return mastery_xp_per_action(
        unlocked_actions=sum(1 for candidate in actions if candidate.level_required <= level),
        total_actions=len(actions),
        total_mastery_level=sum(
            state.action_state(candidate.id).mastery_level for candidate in actions
        ),
        action_mastery_level=state.action_state(action.id).mastery_level,
        action_seconds=action.mean_duration,
        bonus_percent=modifiers.scoped("mastery_xp", action.skill.value),
    )


def summoning_mark_level(marks: int) -> int:
    """Mark level reached with a number of discovered marks."""
    return bisect.bisect_right(SUMMONING_MARK_THRESHOLDS, marks)


# =============================================================================
# Start & Stop
# =============================================================================


def check_can_perform(state: GameState, ctx: EngineContext, action: SkillAction) -> None:
    """Validate that one completion of ``action`` could be paid for now.

    Raises:
        ValidationError: If the action cannot occupy the active slot.
        RequirementsNotMetError: If the skill level is too low, or a tablet
            has no discovered mark.
        InsufficientResourcesError: If recipe inputs or GP are short.
    """
    if isinstance(action, FarmingCrop):
        raise ValidationError(
            f"{action.name} is planted in a farming plot",
            field_name="action_id",
            invalid_value=action.id,
        )
    unmet = []
    if state.skill_level(action.skill) < action.level_required:
        unmet.append(f"Requires {action.skill.value.title()} level {action.level_required}")
    if isinstance(action, SummoningAction) and state.summoning.marks_for(action.id) < 1:
        unmet.append(f"Requires a discovered mark for {action.name}")
    if unmet:
        raise RequirementsNotMetError(f"Cannot start {action.name}", unmet=unmet)
    recipe = action.recipe(state.action_state(action.id).selected_recipe_index)
    require_items(state, recipe.inputs)
    if state.currency(Currency.GP) < action.gp_cost:
        raise InsufficientResourcesError(
            f"Not enough gp for {action.name}",
            item_id=Currency.GP.value,
            required=action.gp_cost,
            available=state.currency(Currency.GP),
        )


def start_action(state: GameState, ctx: EngineContext, action_id: str) -> ActiveSkillAction:
    """Start a skill action, replacing whatever is running.

    Raises:
        StunnedError: If the player is stunned.
        RegistryLookupError: If the action is unknown.
    """
    require_not_stunned(state)
    action = ctx.registry.actions.by_id(action_id)
    check_can_perform(state, ctx, action)
    stop_active_action(state, ctx, StopReason.REPLACED)
    ticks = action_duration_ticks(ctx, action, global_modifiers(state, ctx.registry))
    active = ActiveSkillAction(action_id=action_id, remaining_ticks=ticks, total_ticks=ticks)
    state.active_action = active
    state.action_states.setdefault(action_id, ActionState())
    logger.info("Action started", action_id=action_id, skill=action.skill.value, ticks=ticks)
    ctx.emit(EngineEventType.ACTION_STARTED, action_id=action_id, kind="skill")
    return active


def toggle_action(state: GameState, ctx: EngineContext, action_id: str) -> bool:
    """Start an action, or stop it if it is already the running one.

    Returns:
        True if the action is running afterwards.
    """
    if isinstance(state.active_action, ActiveSkillAction) and state.active_action_id == action_id:
        require_not_stunned(state)
        stop_active_action(state, ctx, StopReason.STOPPED_BY_PLAYER)
        return False
    start_action(state, ctx, action_id)
    return True


def stop_action(state: GameState, ctx: EngineContext) -> str:
    """Stop the running action, whatever it is.

    Raises:
        InvalidGameStateError: If nothing is running.
        StunnedError: If the player is stunned.
    """
    if state.active_action is None:
        raise InvalidGameStateError("No action is running", current_state="idle")
    require_not_stunned(state)
    stopped = stop_active_action(state, ctx, StopReason.STOPPED_BY_PLAYER)
    return stopped or ""


def select_recipe(state: GameState, ctx: EngineContext, action_id: str, recipe_index: int) -> None:
    """Choose an alternative recipe for a multi-recipe action.

    Raises:
        ValidationError: If the action has no such recipe.
    """
    action = ctx.registry.actions.by_id(action_id)
    if not 0 <= recipe_index < len(action.alternative_recipes):
        raise ValidationError(
            f"{action.name} has no recipe {recipe_index}",
            field_name="recipe_index",
            invalid_value=recipe_index,
        )
    state.action_states.setdefault(action_id, ActionState()).selected_recipe_index = recipe_index


# =============================================================================
# Tick Processing
# =============================================================================


def ticks_until_next_event(state: GameState) -> int | None:
    """Ticks until the running skill action completes, or None."""
    if isinstance(state.active_action, ActiveSkillAction):
        return state.active_action.remaining_ticks
    return None


def advance_skill_action(state: GameState, ctx: EngineContext, ticks: int) -> None:
    """Advance the running skill action, completing it when its timer runs out."""
    active = state.active_action
    if not isinstance(active, ActiveSkillAction) or ticks <= 0:
        return
    active.remaining_ticks = max(active.remaining_ticks - ticks, 0)
    state.action_states.setdefault(active.action_id, ActionState()).cumulative_ticks += ticks
    if active.remaining_ticks == 0:
        complete_action(state, ctx, active)


def complete_action(state: GameState, ctx: EngineContext, active: ActiveSkillAction) -> None:
    """Pay out one completion and restart, or stop if the next one is unaffordable."""
    action = ctx.registry.actions.by_id(active.action_id)
    modifiers = global_modifiers(state, ctx.registry)

    if isinstance(action, ThievingAction):
        if not _complete_thieving(state, ctx, action, modifiers):
            return
    elif not _complete_production(state, ctx, action, modifiers):
        return

    try:
        check_can_perform(state, ctx, action)
    except (InsufficientResourcesError, RequirementsNotMetError):
        stop_active_action(state, ctx, StopReason.OUT_OF_INPUTS)
        return
    ticks = action_duration_ticks(ctx, action, modifiers)
    active.total_ticks = ticks
    active.remaining_ticks = ticks


def _grant_completion_xp(
    state: GameState,
    ctx: EngineContext,
    action: SkillAction,
    modifiers: ModifierSet,
) -> None:
    grant_xp(state, ctx, action.skill, action.xp)
    mastery = mastery_xp_for(state, ctx, action, modifiers)
    grant_mastery_xp(state, action.skill, action.id, mastery, pool_share=MASTERY_POOL_SHARE)
    ctx.emit(EngineEventType.ACTION_COMPLETED, action_id=action.id)
    _roll_summoning_marks(state, ctx, action)


def _complete_production(
    state: GameState,
    ctx: EngineContext,
    action: SkillAction,
    modifiers: ModifierSet,
) -> bool:
    recipe = action.recipe(state.action_state(action.id).selected_recipe_index)
    multiplier = recipe.output_multiplier
    doubling = modifiers.scoped("doubling_chance", action.skill.value)
    if doubling > 0 and ctx.rng.random() * 100 < doubling:
        multiplier *= 2

    produced: dict[str, int] = {
        item_id: quantity * multiplier for item_id, quantity in action.outputs.items()
    }
    for drop in action.drops:
        stack = drop.roll(ctx.rng)
        if stack is not None:
            produced[stack.item_id] = produced.get(stack.item_id, 0) + stack.quantity

    try:
        require_items(state, recipe.inputs)
        spend_currency(state, Currency.GP, action.gp_cost)
    except InsufficientResourcesError:
        stop_active_action(state, ctx, StopReason.OUT_OF_INPUTS)
        return False
    if not fits_after(state, recipe.inputs, produced):
        stop_active_action(state, ctx, StopReason.INVENTORY_FULL)
        return False

    remove_items(state, recipe.inputs)
    add_items(state, produced)
    if isinstance(action, SummoningAction) and not state.summoning.has_crafted(action.id):
        state.summoning.crafted_tablets.append(action.id)
    _grant_completion_xp(state, ctx, action, modifiers)
    logger.debug("Action completed", action_id=action.id, produced=produced)
    return True


def _complete_thieving(
    state: GameState,
    ctx: EngineContext,
    action: ThievingAction,
    modifiers: ModifierSet,
) -> bool:
    mastery_level = state.action_state(action.id).mastery_level
    stealth = (
        THIEVING_BASE_STEALTH
        + state.skill_level(Skill.THIEVING)
        + mastery_level
        + modifiers.get("thieving_stealth")
    )
    chance = min(1.0, (100 + stealth) / (100 + action.perception))

    if ctx.rng.random() < chance:
        loot: dict[str, int] = {}
        for drop in action.drops:
            stack = drop.roll(ctx.rng)
            if stack is not None:
                loot[stack.item_id] = loot.get(stack.item_id, 0) + stack.quantity
        if not fits_after(state, {}, loot):
            stop_active_action(state, ctx, StopReason.INVENTORY_FULL)
            return False
        add_items(state, loot)
        add_currency(state, Currency.GP, ctx.rng.randint(1, action.max_gold))
        _grant_completion_xp(state, ctx, action, modifiers)
        return True

    damage = ctx.rng.randint(1, action.max_hit)
    damage_player(state, damage)
    logger.info("Pickpocket failed", action_id=action.id, damage=damage)
    auto_eat(state, ctx, modifiers)
    if state.player_hp <= 0:
        handle_player_death(state, ctx, cause=action.id)
        return False
    stun_player(state, ctx)
    return True


def _roll_summoning_marks(state: GameState, ctx: EngineContext, action: SkillAction) -> None:
    """Roll mark discovery for every familiar tied to the completed action's skill.

    Only the first mark of a familiar can be found until its tablet has been
    crafted once.
    """
    seconds = action.mean_duration
    for familiar in ctx.registry.for_skill(Skill.SUMMONING):
        if not isinstance(familiar, SummoningAction) or action.skill not in familiar.mark_skills:
            continue
        marks = state.summoning.marks_for(familiar.id)
        if marks >= 1 and not state.summoning.has_crafted(familiar.id):
            continue
        chance = seconds / ((familiar.tier + 1) ** 2 * 200)
        if familiar.mark_item_id is not None and state.equipment.is_equipped(familiar.mark_item_id):
            chance *= SUMMONING_EQUIPMENT_MARK_MODIFIER
        if ctx.rng.random() >= chance:
            continue
        state.summoning.marks[familiar.id] = marks + 1
        level = summoning_mark_level(marks + 1)
        logger.info("Summoning mark found", familiar_id=familiar.id, marks=marks + 1, level=level)
        ctx.emit(
            EngineEventType.MARK_DISCOVERED,
            familiar_id=familiar.id,
            marks=marks + 1,
            level=level,
        )


# =============================================================================
# Passive Cooking
# =============================================================================


def _active_cooking(state: GameState, ctx: EngineContext) -> CookingAction | None:
    active = state.active_action
    if not isinstance(active, ActiveSkillAction):
        return None
    action = ctx.registry.actions.get(active.action_id)
    return action if isinstance(action, CookingAction) else None


def passive_cooking_ticks(state: GameState, ctx: EngineContext, action: CookingAction) -> int:
    """Duration of one passive cook: five times the active duration."""
    modifiers = global_modifiers(state, ctx.registry)
    ticks = action_duration_ticks(ctx, action, modifiers, sample=False)
    return ticks * PASSIVE_COOKING_DURATION_MULTIPLIER


def assign_cooking_recipe(
    state: GameState,
    ctx: EngineContext,
    area: CookingArea,
    recipe_id: str | None,
) -> None:
    """Assign a recipe to a cooking area, or clear it with None.

    Raises:
        ValidationError: If the recipe is not a cooking action for ``area``.
        RequirementsNotMetError: If the cooking level is too low.
    """
    if recipe_id is None:
        state.cooking_areas[area] = CookingAreaState()
        return
    action = ctx.registry.actions.by_id(recipe_id)
    if not isinstance(action, CookingAction) or action.category is not area:
        raise ValidationError(
            f"{recipe_id} cannot be cooked on the {area.value}",
            field_name="recipe_id",
            invalid_value=recipe_id,
        )
    if state.skill_level(Skill.COOKING) < action.level_required:
        raise RequirementsNotMetError(
            f"Cannot assign {action.name}",
            unmet=[f"Requires Cooking level {action.level_required}"],
        )
    state.cooking_areas[area] = CookingAreaState(
        recipe_id=recipe_id,
        progress_ticks_remaining=passive_cooking_ticks(state, ctx, action),
    )


def _passive_areas(
    state: GameState,
    active: CookingAction,
) -> list[tuple[CookingArea, CookingAreaState]]:
    return [
        (area, area_state)
        for area, area_state in state.cooking_areas.items()
        if area is not active.category and area_state.recipe_id is not None
    ]


def ticks_until_passive_event(state: GameState, ctx: EngineContext) -> int | None:
    """Ticks until the next passive cook completes, or None when none progress.

    An area with no progress left over starts a full cook on the next step.
    """
    active = _active_cooking(state, ctx)
    if active is None:
        return None
    pending = []
    for _, area_state in _passive_areas(state, active):
        action = ctx.registry.actions.get(area_state.recipe_id or "")
        if not isinstance(action, CookingAction):
            continue
        remaining = area_state.progress_ticks_remaining
        pending.append(remaining or passive_cooking_ticks(state, ctx, action))
    return min(pending) if pending else None


def advance_passive_cooking(state: GameState, ctx: EngineContext, ticks: int) -> None:
    """Progress assigned recipes in the idle cooking areas while cooking is active.

    Passive cooks consume inputs and produce base output only; they grant no
    XP. A cook that cannot be paid for or stored waits at full duration.
    """
    active = _active_cooking(state, ctx)
    if active is None or ticks <= 0:
        return
    for area, area_state in _passive_areas(state, active):
        action = ctx.registry.actions.get(area_state.recipe_id or "")
        if not isinstance(action, CookingAction):
            continue
        duration = passive_cooking_ticks(state, ctx, action)
        if area_state.progress_ticks_remaining == 0:
            area_state.progress_ticks_remaining = duration
        area_state.progress_ticks_remaining = max(area_state.progress_ticks_remaining - ticks, 0)
        if area_state.progress_ticks_remaining > 0:
            continue
        area_state.progress_ticks_remaining = duration
        recipe = action.recipe(state.action_state(action.id).selected_recipe_index)
        produced = {
            item_id: quantity * recipe.output_multiplier
            for item_id, quantity in action.outputs.items()
        }
        try:
            require_items(state, recipe.inputs)
        except InsufficientResourcesError:
            continue
        if not fits_after(state, recipe.inputs, produced):
            continue
        remove_items(state, recipe.inputs)
        add_items(state, produced)
        logger.debug("Passive cook completed", area=area.value, action_id=action.id)


__all__ = [
    "action_duration_ticks",
    "mastery_xp_for",
    "summoning_mark_level",
    "check_can_perform",
    "start_action",
    "toggle_action",
    "stop_action",
    "select_recipe",
    "ticks_until_next_event",
    "advance_skill_action",
    "complete_action",
    "assign_cooking_recipe",
    "passive_cooking_ticks",
    "ticks_until_passive_event",
    "advance_passive_cooking",
]
