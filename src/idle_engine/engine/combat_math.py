"""Pure combat formulas.

Nothing in this module mutates state. Randomness is always injected as a
``random.Random`` so callers can reproduce a fight from a seed.

Example:
    >>> calculate_hit_chance(100, 50)
    0.75
    >>> calculate_hit_chance(50, 100)
    0.25
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from idle_engine.core.constants import (
    ACCURATE_STYLE_LEVEL_BONUS,
    MAX_DAMAGE_REDUCTION,
    MAX_PLAYER_ATTACK_SPEED_S,
    MAX_PLAYER_HIT,
    MIN_PLAYER_ATTACK_SPEED_S,
    RAPID_STYLE_SPEED_FACTOR,
    UNARMED_ATTACK_SPEED_MS,
)
from idle_engine.models.enums import AttackStyle, AttackType, CombatType, Skill


if TYPE_CHECKING:
    from idle_engine.engine.modifiers import ModifierSet
    from idle_engine.models.definitions import CombatAction
    from idle_engine.models.state import GameState


# =============================================================================
# Stat Blocks
# =============================================================================


@dataclass(frozen=True)
class PlayerStats:
    """Resolved player combat stats for one resolution.

    Attributes:
        combat_type: Corner of the combat triangle the player attacks from.
        attack_speed: Seconds between player attacks.
        damage_reduction: Fraction of incoming damage removed, 0 to 0.95.
        crit_chance: Probability of a critical hit, 0 to 1.
        lifesteal: Fraction of damage dealt returned as healing, 0 to 1.
    """

    combat_type: CombatType
    min_hit: int
    max_hit: int
    accuracy: int
    melee_evasion: int
    ranged_evasion: int
    magic_evasion: int
    attack_speed: float
    damage_reduction: float
    crit_chance: float = 0.0
    lifesteal: float = 0.0

    def evasion_for(self, attack_type: AttackType) -> int:
        """Evasion against a monster attack type; random attacks use melee."""
        if attack_type is AttackType.RANGED:
            return self.ranged_evasion
        if attack_type is AttackType.MAGIC:
            return self.magic_evasion
        return self.melee_evasion


@dataclass(frozen=True)
class MonsterStats:
    """Resolved monster combat stats."""

    attack_type: AttackType
    max_hp: int
    min_hit: int
    max_hit: int
    accuracy: int
    melee_evasion: int
    ranged_evasion: int
    magic_evasion: int
    attack_speed: float
    damage_reduction: float = 0.0

    @classmethod
    def from_action(cls, monster: CombatAction) -> MonsterStats:
        """Derive stats from a monster definition."""
        evasion = monster.evasion
        return cls(
            attack_type=monster.attack_type,
            max_hp=monster.max_hp,
            min_hit=monster.min_hit,
            max_hit=monster.max_hit,
            accuracy=monster.accuracy,
            melee_evasion=evasion,
            ranged_evasion=evasion,
            magic_evasion=evasion,
            attack_speed=monster.attack_speed,
        )

    def evasion_for(self, combat_type: CombatType) -> int:
        """Evasion against a player combat type."""
        if combat_type is CombatType.RANGED:
            return self.ranged_evasion
        if combat_type is CombatType.MAGIC:
            return self.magic_evasion
        return self.melee_evasion


# =============================================================================
# Hit Chance
# =============================================================================


def calculate_hit_chance(accuracy: int, evasion: int) -> float:
    """Probability that an attack with ``accuracy`` lands against ``evasion``.

    Args:
        accuracy: Attacker's accuracy rating.
        evasion: Defender's evasion rating.

    Returns:
        Probability in [0, 1]; strictly inside (0, 1) when both are positive.
    """
    if accuracy <= 0:
        return 0.0
    if evasion <= 0:
        return 1.0
    if accuracy > evasion:
        return 0.5 + (accuracy - evasion) / (2 * accuracy)
    return 0.5 * accuracy / evasion


def roll_hit(rng: random.Random, hit_chance: float) -> bool:
    """Roll one attack against a hit chance."""
    return rng.random() < hit_chance


def player_hit_chance(player: PlayerStats, monster: MonsterStats) -> float:
    """Chance for the player to hit a monster."""
    return calculate_hit_chance(player.accuracy, monster.evasion_for(player.combat_type))


def monster_hit_chance(monster: MonsterStats, player: PlayerStats) -> float:
    """Chance for a monster to hit the player, using the matching evasion."""
    return calculate_hit_chance(monster.accuracy, player.evasion_for(monster.attack_type))


# =============================================================================
# Damage
# =============================================================================


def roll_damage(rng: random.Random, min_hit: int, max_hit: int) -> int:
    """Uniform integer damage in ``[min_hit, max_hit]``."""
    if max_hit <= min_hit:
        return max(max_hit, 0)
    return rng.randint(min_hit, max_hit)


@dataclass(frozen=True)
class TriangleModifiers:
    """Combat triangle adjustments for one matchup.

    Attributes:
        damage_multiplier: Applied to damage the player deals.
        damage_reduction_multiplier: Applied to the player's damage reduction.
    """

    damage_multiplier: float = 1.0
    damage_reduction_multiplier: float = 1.0


NEUTRAL_TRIANGLE = TriangleModifiers()

_TRIANGLE_BEATS = {
    CombatType.MELEE: CombatType.RANGED,
    CombatType.RANGED: CombatType.MAGIC,
    CombatType.MAGIC: CombatType.MELEE,
}

_DISADVANTAGE_DR = {
    CombatType.MELEE: 0.75,
    CombatType.RANGED: 0.95,
    CombatType.MAGIC: 0.85,
}


def combat_triangle(player_type: CombatType, monster_attack: AttackType) -> TriangleModifiers:
    """Triangle modifiers for the player's combat type against a monster.

    Melee beats ranged, ranged beats magic and magic beats melee.
    """
    monster_type = monster_attack.combat_type
    if player_type is monster_type:
        return NEUTRAL_TRIANGLE
    if _TRIANGLE_BEATS[player_type] is monster_type:
        return TriangleModifiers(damage_multiplier=1.10, damage_reduction_multiplier=1.25)
    return TriangleModifiers(
        damage_multiplier=0.85,
        damage_reduction_multiplier=_DISADVANTAGE_DR[player_type],
    )


def apply_triangle_damage(damage: int, triangle: TriangleModifiers) -> int:
    """Scale player damage by the triangle."""
    return round(damage * triangle.damage_multiplier)


def reduce_damage(damage: int, damage_reduction: float, triangle: TriangleModifiers) -> int:
    """Apply the player's damage reduction, adjusted by the triangle and capped."""
    effective = damage_reduction * triangle.damage_reduction_multiplier
    effective = min(max(effective, 0.0), MAX_DAMAGE_REDUCTION)
    return round(damage * (1 - effective))


def crit_chance(modifiers: ModifierSet, combat_type: CombatType, *, base: float = 0.0) -> float:
    """Critical hit probability from a base percent plus modifiers."""
    percent = base + modifiers.scoped("crit_chance", combat_type.value)
    return min(max(percent, 0.0), 100.0) / 100


def lifesteal(modifiers: ModifierSet, combat_type: CombatType, *, base: float = 0.0) -> float:
    """Fraction of damage dealt healed back, from a base percent plus modifiers."""
    percent = base + modifiers.scoped("lifesteal", combat_type.value)
    return min(max(percent, 0.0), 100.0) / 100


def hp_fraction(current_hp: int, max_hp: int) -> float:
    """Remaining HP as a fraction; 0 for a zero max instead of dividing."""
    if max_hp <= 0:
        return 0.0
    return min(max(current_hp / max_hp, 0.0), 1.0)


# =============================================================================
# Player Stats
# =============================================================================


def accuracy_rating(effective_level: int, bonus: float, modifier_percent: float) -> int:
    """Accuracy or evasion rating for an effective level and equipment bonus."""
    return math.floor((effective_level + 9) * (bonus + 64) * (1 + modifier_percent / 100))


def base_max_hit(effective_level: int, bonus: float) -> int:
    """Max hit before percentage and flat modifiers."""
    return math.floor(10 * (2.2 + effective_level / 10 + (effective_level + 17) * bonus / 640))


def compute_player_stats(
    state: GameState,
    modifiers: ModifierSet,
    *,
    weapon_speed_ms: int | None = None,
) -> PlayerStats:
    """Resolve player combat stats from levels, style and modifiers.

    Args:
        state: Player state supplying levels and attack style.
        modifiers: Aggregated modifiers for this resolution.
        weapon_speed_ms: Attack interval of the worn weapon, if any.

    Returns:
        Resolved stats.
    """
    style = state.attack_style
    combat_type = style.combat_type
    attack = state.skill_level(Skill.ATTACK)
    strength = state.skill_level(Skill.STRENGTH)
    defence = state.skill_level(Skill.DEFENCE)
    ranged = state.skill_level(Skill.RANGED)
    magic = state.skill_level(Skill.MAGIC)
    style_bonus = ACCURATE_STYLE_LEVEL_BONUS if style is AttackStyle.ACCURATE else 0

    if combat_type is CombatType.MELEE:
        hit_level, accuracy_level = strength, attack
    elif combat_type is CombatType.RANGED:
        hit_level = accuracy_level = ranged + style_bonus
    else:
        hit_level = accuracy_level = magic
    scope = combat_type.value

    max_hit = base_max_hit(hit_level, modifiers.get(f"flat_{scope}_strength_bonus"))
    max_hit = math.floor(max_hit * (1 + modifiers.scoped("max_hit", scope) / 100))
    max_hit += int(modifiers.get("flat_max_hit"))
    max_hit = min(max(max_hit, 1), MAX_PLAYER_HIT)

    min_hit = 1 + int(modifiers.get("flat_min_hit"))
    min_hit = min(max(min_hit, 1), max_hit)

    speed_ms = float(weapon_speed_ms or UNARMED_ATTACK_SPEED_MS)
    speed_ms *= 1 + modifiers.get("attack_interval") / 100
    if style is AttackStyle.RAPID:
        speed_ms *= RAPID_STYLE_SPEED_FACTOR
    speed_ms += modifiers.get("flat_attack_interval")
    attack_speed = min(max(speed_ms / 1000, MIN_PLAYER_ATTACK_SPEED_S), MAX_PLAYER_ATTACK_SPEED_S)

    resistance = modifiers.get("resistance") + modifiers.get("flat_resistance")
    damage_reduction = min(max(resistance / 100, 0.0), MAX_DAMAGE_REDUCTION)

    accuracy = accuracy_rating(
        accuracy_level,
        modifiers.get(f"flat_{scope}_attack_bonus"),
        modifiers.get(f"{scope}_accuracy_rating"),
    )
    magic_defence_level = math.floor(defence * 0.3 + magic * 0.7)

    return PlayerStats(
        combat_type=combat_type,
        min_hit=min_hit,
        max_hit=max_hit,
        accuracy=accuracy,
        melee_evasion=accuracy_rating(
            defence, modifiers.get("flat_melee_defence_bonus"), modifiers.get("melee_evasion")
        ),
        ranged_evasion=accuracy_rating(
            defence, modifiers.get("flat_ranged_defence_bonus"), modifiers.get("ranged_evasion")
        ),
        magic_evasion=accuracy_rating(
            magic_defence_level,
            modifiers.get("flat_magic_defence_bonus"),
            modifiers.get("magic_evasion"),
        ),
        attack_speed=attack_speed,
        damage_reduction=damage_reduction,
        crit_chance=crit_chance(modifiers, combat_type),
        lifesteal=lifesteal(modifiers, combat_type),
    )


# =============================================================================
# Combat XP
# =============================================================================


def combat_xp_for_damage(damage: int, style: AttackStyle) -> dict[Skill, int]:
    """XP granted for dealing damage with an attack style.

    Hitpoints always receives ``floor(0.133 * damage)``. Single-skill styles
    give ``floor(0.04 * damage)`` to their skill and hybrid styles give
    ``floor(0.02 * damage)`` to each of their two skills. Every grant is at
    least 1 whenever damage was dealt.

    Args:
        damage: Damage dealt by one hit.
        style: Attack style the hit was made with.

    Returns:
        Skill to XP; empty when no damage was dealt.
    """
    if damage <= 0:
        return {}
    skills = style.trained_skills
    rate = 0.04 if len(skills) == 1 else 0.02
    grants = {Skill.HITPOINTS: min(max(math.floor(damage * 0.133), 1), damage)}
    for skill in skills:
        grants[skill] = min(max(math.floor(damage * rate), 1), damage)
    return grants


__all__ = [
    "PlayerStats",
    "MonsterStats",
    "calculate_hit_chance",
    "roll_hit",
    "player_hit_chance",
    "monster_hit_chance",
    "roll_damage",
    "TriangleModifiers",
    "NEUTRAL_TRIANGLE",
    "combat_triangle",
    "apply_triangle_damage",
    "reduce_damage",
    "crit_chance",
    "lifesteal",
    "hp_fraction",
    "accuracy_rating",
    "base_max_hit",
    "compute_player_stats",
    "combat_xp_for_damage",
]
