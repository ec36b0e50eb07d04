"""Monster selection: areas, dungeons, strongholds and slayer tasks.

This module decides *which* monster the combat state machine fights next. Free
areas let the player pick; slayer areas gate that pick behind requirements;
dungeons and strongholds walk an ordered list and count full clears.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import TYPE_CHECKING

from idle_engine.core.exceptions import RequirementsNotMetError, ValidationError
from idle_engine.core.logging import get_logger
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.ledger import add_currency, grant_xp, spend_currency
from idle_engine.models.combat import MonsterCombatContext, SequenceCombatContext
from idle_engine.models.definitions import (
    DungeonCompletionRequirement,
    ItemEquippedRequirement,
    ShopPurchaseRequirement,
    SkillLevelRequirement,
)
from idle_engine.models.enums import Currency, SequenceType, Skill
from idle_engine.models.state import SlayerTask


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.models.definitions import AreaRequirement, CombatAction
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


# =============================================================================
# Requirements
# =============================================================================


def is_requirement_met(state: GameState, requirement: AreaRequirement) -> bool:
    """Check a single entry requirement against the player's state."""
    if isinstance(requirement, SkillLevelRequirement):
        return state.skill_level(requirement.skill) >= requirement.level
    if isinstance(requirement, ItemEquippedRequirement):
        return state.equipment.is_equipped(requirement.item_id)
    if isinstance(requirement, DungeonCompletionRequirement):
        return state.dungeon_completion_count(requirement.dungeon_id) >= requirement.count
    if isinstance(requirement, ShopPurchaseRequirement):
        return state.shop_purchase_count(requirement.purchase_id) >= requirement.count
    return False


def unmet_requirements(state: GameState, requirements: Iterable[AreaRequirement]) -> list[str]:
    """Describe every requirement that is not satisfied.

    All requirements are evaluated; the result is never cut short at the
    first failure.

    Returns:
        Descriptions in definition order; empty when everything is met.
    """
    return [
        requirement.describe()
        for requirement in requirements
        if not is_requirement_met(state, requirement)
    ]


def require_all(state: GameState, requirements: Iterable[AreaRequirement], *, name: str) -> None:
    """Raise with every unmet requirement if any is unmet.

    Raises:
        RequirementsNotMetError: Carrying the full list in ``unmet``.
    """
    unmet = unmet_requirements(state, requirements)
    if unmet:
        raise RequirementsNotMetError(f"Cannot enter {name}", unmet=unmet)


def area_unmet_requirements(state: GameState, ctx: EngineContext, area_id: str) -> list[str]:
    """Unmet requirements for a slayer area; always empty for free areas.

    The result applies to every monster in the area alike.
    """
    area = ctx.registry.slayer_areas.get(area_id)
    if area is None:
        ctx.registry.combat_areas.by_id(area_id)
        return []
    return unmet_requirements(state, area.requirements)


# =============================================================================
# Combat Contexts
# =============================================================================


def monster_context(
    state: GameState,
    ctx: EngineContext,
    monster_id: str,
    *,
    area_id: str | None = None,
) -> MonsterCombatContext:
    """Validate a free monster choice and build its combat context.

    Raises:
        RegistryLookupError: If the monster or area is unknown.
        ValidationError: If the monster is not in the area.
        RequirementsNotMetError: If the area is a slayer area with unmet requirements.
    """
    ctx.registry.monsters.by_id(monster_id)
    if area_id is None:
        return MonsterCombatContext(monster_id=monster_id)

    slayer_area = ctx.registry.slayer_areas.get(area_id)
    if slayer_area is not None:
        monster_ids, name = slayer_area.monster_ids, slayer_area.name
        require_all(state, slayer_area.requirements, name=name)
    else:
        area = ctx.registry.combat_areas.by_id(area_id)
        monster_ids, name = area.monster_ids, area.name
    if monster_id not in monster_ids:
        raise ValidationError(
            f"{monster_id} is not found in {name}",
            field_name="monster_id",
            invalid_value=monster_id,
        )
    return MonsterCombatContext(monster_id=monster_id, area_id=area_id)


def sequence_context(
    state: GameState,
    ctx: EngineContext,
    sequence_type: SequenceType,
    sequence_id: str,
) -> SequenceCombatContext:
    """Validate a dungeon or stronghold and build a run starting at its first monster.

    Raises:
        RegistryLookupError: If the sequence or any of its monsters is unknown.
        RequirementsNotMetError: If any entry requirement is unmet.
    """
    sequence = ctx.registry.sequence(sequence_type, sequence_id)
    for monster_id in sequence.monster_ids:
        ctx.registry.monsters.by_id(monster_id)
    require_all(state, sequence.requirements, name=sequence.name)
    return SequenceCombatContext(
        sequence_type=sequence_type,
        sequence_id=sequence_id,
        monster_ids=sequence.monster_ids,
    )


def advance_sequence(state: GameState, ctx: EngineContext, context: SequenceCombatContext) -> bool:
    """Move a run past the monster just killed.

    Killing the last monster counts one completion and restarts the run at
    index 0.

    Returns:
        True if this kill completed the run.
    """
    completed = context.is_last_monster
    if completed:
        counts = (
            state.stronghold_completions
            if context.sequence_type is SequenceType.STRONGHOLD
            else state.dungeon_completions
        )
        counts[context.sequence_id] = counts.get(context.sequence_id, 0) + 1
        logger.info(
            "Sequence completed",
            sequence_type=context.sequence_type.value,
            sequence_id=context.sequence_id,
            completions=counts[context.sequence_id],
        )
        ctx.emit(
            EngineEventType.SEQUENCE_COMPLETED,
            sequence_type=context.sequence_type.value,
            sequence_id=context.sequence_id,
            completions=counts[context.sequence_id],
        )
    context.advance()
    return completed


# =============================================================================
# Slayer Tasks
# =============================================================================


def slayer_task_candidates(
    state: GameState,
    ctx: EngineContext,
    category_id: str,
) -> list[CombatAction]:
    """Monsters a category can assign that the player can currently reach."""
    category = ctx.registry.slayer_task_categories.by_id(category_id)
    candidates = []
    for monster in ctx.registry.monsters:
        if not monster.can_slayer:
            continue
        if not category.min_combat_level <= monster.combat_level <= category.max_combat_level:
            continue
        area = ctx.registry.slayer_area_for_monster(monster.id)
        if area is not None and unmet_requirements(state, area.requirements):
            continue
        candidates.append(monster)
    return candidates


def roll_slayer_task(state: GameState, ctx: EngineContext, category_id: str) -> SlayerTask:
    """Pay the category's roll cost and assign a new task, replacing any current one.

    Raises:
        RequirementsNotMetError: If the slayer level is too low.
        ValidationError: If no monster fits the category.
        InsufficientResourcesError: If the roll cost cannot be paid.
    """
    category = ctx.registry.slayer_task_categories.by_id(category_id)
    if state.skill_level(Skill.SLAYER) < category.level_required:
        requirement = SkillLevelRequirement(skill=Skill.SLAYER, level=category.level_required)
        raise RequirementsNotMetError(
            f"Cannot roll a {category.name} task",
            unmet=[requirement.describe()],
        )
    candidates = slayer_task_candidates(state, ctx, category_id)
    if not candidates:
        raise ValidationError(
            f"No monsters available for {category.name}",
            field_name="category_id",
            invalid_value=category_id,
        )
    spend_currency(state, Currency.GP, category.roll_cost)
    monster = ctx.rng.choice(candidates)
    task = SlayerTask(
        category_id=category_id,
        monster_id=monster.id,
        kills_required=category.base_task_length,
    )
    state.slayer_task = task
    logger.info("Slayer task assigned", category_id=category_id, monster_id=monster.id)
    return task


def record_slayer_kill(state: GameState, ctx: EngineContext, monster: CombatAction) -> bool:
    """Credit a kill to the current slayer task if it targets ``monster``.

    Each task kill grants slayer XP equal to the monster's max HP and slayer
    coins as a percentage of it.

    Returns:
        True if the kill counted towards the task.
    """
    task = state.slayer_task
    if task is None or task.monster_id != monster.id:
        return False
    category = ctx.registry.slayer_task_categories.get(task.category_id)
    task.record_kill()
    grant_xp(state, ctx, Skill.SLAYER, monster.max_hp)
    if category is not None:
        add_currency(
            state,
            Currency.SLAYER_COINS,
            math.floor(monster.max_hp * category.coin_reward_percent / 100),
        )
    if task.is_complete:
        logger.info("Slayer task completed", monster_id=monster.id, kills=task.kills_completed)
        ctx.emit(
            EngineEventType.SLAYER_TASK_COMPLETED,
            category_id=task.category_id,
            monster_id=monster.id,
        )
        state.slayer_task = None
    return True


__all__ = [
    "is_requirement_met",
    "unmet_requirements",
    "require_all",
    "area_unmet_requirements",
    "monster_context",
    "sequence_context",
    "advance_sequence",
    "slayer_task_candidates",
    "roll_slayer_task",
    "record_slayer_kill",
]
