"""Combat turn state machine.

A fight moves through ``idle -> spawning -> active`` and back. While active the
player and the monster each count down their own attack timer and attack when
it reaches zero, so the two sides act on independent cadences. A kill pays out
loot and either respawns the same monster or moves a dungeon run along; a
player death ends the fight.

The engine advances combat in steps no longer than
:func:`ticks_until_next_event`, so at most one spawn or one attack per side
happens per step.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from idle_engine.core.constants import HP_REGEN_PERCENT
from idle_engine.core.exceptions import CombatError, InvalidGameStateError
from idle_engine.core.logging import get_logger
from idle_engine.engine.actions import require_not_stunned, stop_active_action
from idle_engine.engine.combat_math import (
    MonsterStats,
    PlayerStats,
    apply_triangle_damage,
    combat_triangle,
    combat_xp_for_damage,
    compute_player_stats,
    monster_hit_chance,
    player_hit_chance,
    reduce_damage,
    roll_damage,
    roll_hit,
)
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.ledger import (
    add_currency,
    auto_eat,
    damage_player,
    grant_xp,
    heal_player,
    restore_full_health,
)
from idle_engine.engine.modifiers import combat_modifiers, weapon_attack_speed_ms
from idle_engine.engine.sequences import (
    advance_sequence,
    monster_context,
    record_slayer_kill,
    sequence_context,
)
from idle_engine.engine.ticks import seconds_to_ticks
from idle_engine.models.combat import CombatActionState, MonsterCombatContext, SequenceCombatContext
from idle_engine.models.enums import CombatPhase, Currency, StopReason
from idle_engine.models.state import ActiveCombat


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.engine.modifiers import ModifierSet
    from idle_engine.models.combat import CombatContext
    from idle_engine.models.definitions import CombatAction
    from idle_engine.models.enums import AttackStyle, SequenceType
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


# =============================================================================
# Stat Resolution
# =============================================================================


def _area_id(combat: CombatActionState) -> str | None:
    if isinstance(combat.context, MonsterCombatContext):
        return combat.context.area_id
    return None


def resolve_player(
    state: GameState,
    ctx: EngineContext,
    *,
    area_id: str | None = None,
) -> tuple[PlayerStats, ModifierSet]:
    """Resolve player stats and the modifiers they were built from."""
    modifiers = combat_modifiers(state, ctx.registry, area_id=area_id)
    stats = compute_player_stats(
        state,
        modifiers,
        weapon_speed_ms=weapon_attack_speed_ms(state, ctx.registry),
    )
    return stats, modifiers


def combat_phase(state: GameState) -> CombatPhase:
    """Observable phase of the combat state machine."""
    combat = state.combat
    if combat is None:
        return CombatPhase.IDLE
    if state.stunned.is_stunned:
        return CombatPhase.STUNNED
    return combat.phase


# =============================================================================
# Start & Stop
# =============================================================================


def begin_combat(state: GameState, ctx: EngineContext, context: CombatContext) -> CombatActionState:
    """Put combat in the active slot, replacing any running action.

    Raises:
        StunnedError: If the player is stunned.
    """
    require_not_stunned(state)
    stop_active_action(state, ctx, StopReason.REPLACED)
    if isinstance(context, SequenceCombatContext):
        monster_id = context.current_monster_id
    else:
        monster_id = context.monster_id
    combat = CombatActionState(monster_id=monster_id, context=context)
    state.active_action = ActiveCombat(combat=combat)
    logger.info("Combat started", monster_id=monster_id, context=context.kind)
    ctx.emit(EngineEventType.ACTION_STARTED, action_id=monster_id, kind="combat")
    _begin_spawn(state, ctx, combat)
    return combat


def start_combat(
    state: GameState,
    ctx: EngineContext,
    monster_id: str,
    *,
    area_id: str | None = None,
) -> CombatActionState:
    """Fight a chosen monster, optionally from a combat or slayer area."""
    require_not_stunned(state)
    return begin_combat(state, ctx, monster_context(state, ctx, monster_id, area_id=area_id))


def start_sequence(
    state: GameState,
    ctx: EngineContext,
    sequence_type: SequenceType,
    sequence_id: str,
) -> CombatActionState:
    """Start a dungeon or stronghold run from its first monster."""
    require_not_stunned(state)
    return begin_combat(state, ctx, sequence_context(state, ctx, sequence_type, sequence_id))


def stop_combat(state: GameState, ctx: EngineContext) -> None:
    """Flee; combat state is torn down immediately.

    Raises:
        InvalidGameStateError: If the player is not fighting.
        StunnedError: If the player is stunned.
    """
    if state.combat is None:
        raise InvalidGameStateError(
            "Not in combat",
            current_state=combat_phase(state).value,
            expected_states=[CombatPhase.SPAWNING.value, CombatPhase.ACTIVE.value],
        )
    require_not_stunned(state)
    stop_active_action(state, ctx, StopReason.STOPPED_BY_PLAYER)


def set_attack_style(state: GameState, style: AttackStyle) -> None:
    """Change the attack style; takes effect from the next attack."""
    state.attack_style = style


# =============================================================================
# Tick Processing
# =============================================================================


def ticks_until_next_event(state: GameState) -> int | None:
    """Ticks until the next spawn or attack, or None when not fighting."""
    combat = state.combat
    if combat is None:
        return None
    if combat.spawn_ticks_remaining is not None:
        return combat.spawn_ticks_remaining
    return min(combat.player_attack_ticks_remaining, combat.monster_attack_ticks_remaining)


def advance_combat(state: GameState, ctx: EngineContext, ticks: int) -> None:
    """Advance combat by ``ticks``, which must not overshoot the next event.

    When both sides reach zero on the same tick the player attacks first.

    Raises:
        CombatError: If ``ticks`` would skip past a spawn or attack.
    """
    combat = state.combat
    if combat is None or ticks <= 0:
        return
    upcoming = ticks_until_next_event(state)
    if upcoming is not None and ticks > upcoming:
        raise CombatError(
            f"Cannot advance {ticks} ticks past an event due in {upcoming}",
            monster_id=combat.monster_id,
            tick=ctx.tick,
        )
    if combat.spawn_ticks_remaining is not None:
        combat.spawn_ticks_remaining = max(combat.spawn_ticks_remaining - ticks, 0)
        if combat.spawn_ticks_remaining == 0:
            _spawn(state, ctx, combat)
        return

    combat.player_attack_ticks_remaining = max(combat.player_attack_ticks_remaining - ticks, 0)
    combat.monster_attack_ticks_remaining = max(combat.monster_attack_ticks_remaining - ticks, 0)
    if combat.player_attack_ticks_remaining == 0:
        _player_attack(state, ctx, combat)
        if state.combat is not combat or combat.is_spawning:
            return
    if combat.monster_attack_ticks_remaining == 0:
        _monster_attack(state, ctx, combat)


def _begin_spawn(state: GameState, ctx: EngineContext, combat: CombatActionState) -> None:
    combat.spawn_ticks_remaining = seconds_to_ticks(ctx.settings.combat.monster_spawn_seconds)
    if combat.spawn_ticks_remaining == 0:
        _spawn(state, ctx, combat)


def _spawn(state: GameState, ctx: EngineContext, combat: CombatActionState) -> None:
    monster = ctx.registry.monsters.by_id(combat.monster_id)
    player, _ = resolve_player(state, ctx, area_id=_area_id(combat))
    combat.monster_hp = monster.max_hp
    combat.spawn_ticks_remaining = None
    combat.player_attack_ticks_remaining = max(1, seconds_to_ticks(player.attack_speed))
    combat.monster_attack_ticks_remaining = max(1, seconds_to_ticks(monster.attack_speed))
    logger.debug("Monster spawned", monster_id=monster.id, hp=combat.monster_hp)
    ctx.emit(EngineEventType.MONSTER_SPAWNED, monster_id=monster.id, hp=combat.monster_hp)


def _player_attack(state: GameState, ctx: EngineContext, combat: CombatActionState) -> None:
    monster = ctx.registry.monsters.by_id(combat.monster_id)
    player, _ = resolve_player(state, ctx, area_id=_area_id(combat))
    target = MonsterStats.from_action(monster)
    combat.player_attack_ticks_remaining = max(1, seconds_to_ticks(player.attack_speed))

    if not roll_hit(ctx.rng, player_hit_chance(player, target)):
        logger.debug("Player missed", monster_id=monster.id)
        return
    damage = roll_damage(ctx.rng, player.min_hit, player.max_hit)
    if player.crit_chance > 0 and ctx.rng.random() < player.crit_chance:
        damage = math.floor(damage * ctx.settings.combat.crit_multiplier)
    damage = apply_triangle_damage(damage, combat_triangle(player.combat_type, monster.attack_type))
    dealt = min(damage, combat.monster_hp)
    combat.monster_hp -= dealt
    logger.debug("Player hit", monster_id=monster.id, damage=dealt, monster_hp=combat.monster_hp)

    for skill, xp in combat_xp_for_damage(dealt, state.attack_style).items():
        grant_xp(state, ctx, skill, xp)
    if player.lifesteal > 0:
        heal_player(state, math.floor(dealt * player.lifesteal))
    if combat.monster_hp == 0:
        _on_monster_killed(state, ctx, combat, monster)


def _monster_attack(state: GameState, ctx: EngineContext, combat: CombatActionState) -> None:
    monster = ctx.registry.monsters.by_id(combat.monster_id)
    player, modifiers = resolve_player(state, ctx, area_id=_area_id(combat))
    attacker = MonsterStats.from_action(monster)
    combat.monster_attack_ticks_remaining = max(1, seconds_to_ticks(monster.attack_speed))

    if not roll_hit(ctx.rng, monster_hit_chance(attacker, player)):
        logger.debug("Monster missed", monster_id=monster.id)
        return
    damage = roll_damage(ctx.rng, attacker.min_hit, attacker.max_hit)
    triangle = combat_triangle(player.combat_type, monster.attack_type)
    damage = reduce_damage(damage, player.damage_reduction, triangle)
    hp = damage_player(state, damage)
    logger.debug("Monster hit", monster_id=monster.id, damage=damage, player_hp=hp)

    auto_eat(state, ctx, modifiers)
    if state.player_hp <= 0:
        handle_player_death(state, ctx, cause=monster.id)


def _on_monster_killed(
    state: GameState,
    ctx: EngineContext,
    combat: CombatActionState,
    monster: CombatAction,
) -> None:
    combat.kills += 1
    gp = monster.roll_gp_drop(ctx.rng)
    add_currency(state, Currency.GP, gp)
    for stack in (monster.roll_loot(ctx.rng), monster.bones):
        if stack is None:
            continue
        if state.inventory.can_add(stack.item_id):
            state.inventory.add(stack.item_id, stack.quantity)
        else:
            logger.info("Loot lost to full bank", item_id=stack.item_id, quantity=stack.quantity)
    record_slayer_kill(state, ctx, monster)
    logger.info("Monster killed", monster_id=monster.id, gp=gp, kills=combat.kills)
    ctx.emit(EngineEventType.MONSTER_KILLED, monster_id=monster.id, gp=gp)

    if isinstance(combat.context, SequenceCombatContext):
        advance_sequence(state, ctx, combat.context)
        combat.monster_id = combat.context.current_monster_id
    _begin_spawn(state, ctx, combat)


def handle_player_death(state: GameState, ctx: EngineContext, *, cause: str) -> None:
    """Restore HP and end the active action after the player dies.

    Args:
        state: Working state.
        ctx: Engine context.
        cause: Monster or action that dealt the killing blow.
    """
    logger.info("Player died", cause=cause)
    ctx.emit(EngineEventType.PLAYER_DIED, cause=cause)
    restore_full_health(state)
    stop_active_action(state, ctx, StopReason.PLAYER_DIED)


# =============================================================================
# Player Status
# =============================================================================


def regen_interval_ticks(ctx: EngineContext) -> int:
    """Ticks between passive HP regeneration pulses."""
    return max(1, seconds_to_ticks(ctx.settings.combat.hp_regen_seconds))


def ticks_until_status_event(state: GameState, ctx: EngineContext) -> int:
    """Ticks until the stun clears or the next regeneration pulse."""
    regen = state.health.regen_ticks_remaining or regen_interval_ticks(ctx)
    if state.stunned.is_stunned:
        return min(regen, state.stunned.ticks_remaining)
    return regen


def advance_player_status(state: GameState, ctx: EngineContext, ticks: int) -> None:
    """Count down the stun and apply passive HP regeneration.

    Each pulse restores 1% of max HP, at least 1.
    """
    if ticks <= 0:
        return
    if state.stunned.is_stunned:
        state.stunned.ticks_remaining = max(state.stunned.ticks_remaining - ticks, 0)

    health = state.health
    if health.regen_ticks_remaining == 0:
        health.regen_ticks_remaining = regen_interval_ticks(ctx)
    health.regen_ticks_remaining = max(health.regen_ticks_remaining - ticks, 0)
    if health.regen_ticks_remaining == 0:
        heal_player(state, max(1, round(state.max_player_hp * HP_REGEN_PERCENT / 100)))
        health.regen_ticks_remaining = regen_interval_ticks(ctx)


def stun_player(state: GameState, ctx: EngineContext) -> None:
    """Apply the configured stun duration."""
    ticks = seconds_to_ticks(ctx.settings.combat.stun_seconds)
    state.stunned.ticks_remaining = max(state.stunned.ticks_remaining, ticks)
    if ticks:
        ctx.emit(EngineEventType.PLAYER_STUNNED, ticks=ticks)


__all__ = [
    "resolve_player",
    "combat_phase",
    "begin_combat",
    "start_combat",
    "start_sequence",
    "stop_combat",
    "set_attack_style",
    "ticks_until_next_event",
    "advance_combat",
    "handle_player_death",
    "regen_interval_ticks",
    "ticks_until_status_event",
    "advance_player_status",
    "stun_player",
]
