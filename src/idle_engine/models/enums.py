"""Enumeration types for the idle RPG engine.

This module defines the skills, combat types, attack styles, equipment slots,
currencies and other closed sets the engine switches on.
"""

from __future__ import annotations

from enum import StrEnum


class Skill(StrEnum):
    """Trainable skills."""

    # Combat skills
    HITPOINTS = "hitpoints"
    ATTACK = "attack"
    STRENGTH = "strength"
    DEFENCE = "defence"
    RANGED = "ranged"
    MAGIC = "magic"
    SLAYER = "slayer"

    # Non-combat skills
    COOKING = "cooking"
    FARMING = "farming"
    FISHING = "fishing"
    SUMMONING = "summoning"
    ASTROLOGY = "astrology"
    THIEVING = "thieving"
    TOWNSHIP = "township"

    @property
    def is_combat(self) -> bool:
        """Check whether the skill is trained through combat.

        Returns:
            True for hitpoints, the attack styles' skills and slayer.
        """
        return self in _COMBAT_SKILLS


_COMBAT_SKILLS = frozenset(
    {
        Skill.HITPOINTS,
        Skill.ATTACK,
        Skill.STRENGTH,
        Skill.DEFENCE,
        Skill.RANGED,
        Skill.MAGIC,
        Skill.SLAYER,
    }
)


class CombatType(StrEnum):
    """Player combat type, one corner of the combat triangle."""

    MELEE = "melee"
    RANGED = "ranged"
    MAGIC = "magic"


class AttackType(StrEnum):
    """Monster attack type."""

    MELEE = "melee"
    RANGED = "ranged"
    MAGIC = "magic"
    RANDOM = "random"

    @property
    def combat_type(self) -> CombatType:
        """Map the attack type onto the combat triangle.

        Returns:
            The matching combat type; random attacks count as melee.
        """
        if self is AttackType.RANGED:
            return CombatType.RANGED
        if self is AttackType.MAGIC:
            return CombatType.MAGIC
        return CombatType.MELEE


class AttackStyle(StrEnum):
    """Player attack style, which decides combat type and XP split."""

    STAB = "stab"
    SLASH = "slash"
    BLOCK = "block"
    ACCURATE = "accurate"
    RAPID = "rapid"
    LONG_RANGE = "long_range"
    STANDARD = "standard"
    DEFENSIVE = "defensive"

    @property
    def combat_type(self) -> CombatType:
        """Get the combat type this style belongs to."""
        if self in (AttackStyle.STAB, AttackStyle.SLASH, AttackStyle.BLOCK):
            return CombatType.MELEE
        if self in (AttackStyle.ACCURATE, AttackStyle.RAPID, AttackStyle.LONG_RANGE):
            return CombatType.RANGED
        return CombatType.MAGIC

    @property
    def trained_skills(self) -> tuple[Skill, ...]:
        """Get the skills that receive combat XP for this style.

        Returns:
            One skill for single-skill styles, two for hybrid styles.
        """
        return _STYLE_SKILLS[self]


_STYLE_SKILLS: dict[AttackStyle, tuple[Skill, ...]] = {
    AttackStyle.STAB: (Skill.ATTACK,),
    AttackStyle.SLASH: (Skill.STRENGTH,),
    AttackStyle.BLOCK: (Skill.DEFENCE,),
    AttackStyle.ACCURATE: (Skill.RANGED,),
    AttackStyle.RAPID: (Skill.RANGED,),
    AttackStyle.LONG_RANGE: (Skill.RANGED, Skill.DEFENCE),
    AttackStyle.STANDARD: (Skill.MAGIC,),
    AttackStyle.DEFENSIVE: (Skill.MAGIC, Skill.DEFENCE),
}


class EquipmentSlot(StrEnum):
    """Gear slots on the player."""

    WEAPON = "weapon"
    SHIELD = "shield"
    HELMET = "helmet"
    BODY = "body"
    LEGS = "legs"
    BOOTS = "boots"
    GLOVES = "gloves"
    CAPE = "cape"
    AMULET = "amulet"
    RING = "ring"
    QUIVER = "quiver"
    SUMMON1 = "summon1"
    SUMMON2 = "summon2"


class Currency(StrEnum):
    """Currencies tracked by the ledger."""

    GP = "gp"
    SLAYER_COINS = "slayer_coins"


class SequenceType(StrEnum):
    """Kinds of ordered monster runs."""

    DUNGEON = "dungeon"
    STRONGHOLD = "stronghold"


class CookingArea(StrEnum):
    """Cooking stations; each can hold one assigned recipe."""

    FIRE = "fire"
    FURNACE = "furnace"
    POT = "pot"


class Season(StrEnum):
    """Township seasons, in rotation order."""

    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"

    @property
    def next(self) -> Season:
        """Get the season that follows this one."""
        members = list(Season)
        return members[(members.index(self) + 1) % len(members)]

    @property
    def happiness_modifier(self) -> int:
        """Township happiness change while this season is active."""
        return {Season.SPRING: 50, Season.WINTER: -50}.get(self, 0)

    @property
    def education_modifier(self) -> int:
        """Township education change while this season is active."""
        return 50 if self is Season.SPRING else 0


class StopReason(StrEnum):
    """Why the active action ended."""

    STOPPED_BY_PLAYER = "stopped_by_player"
    REPLACED = "replaced"
    OUT_OF_INPUTS = "out_of_inputs"
    INVENTORY_FULL = "inventory_full"
    PLAYER_DIED = "player_died"


class CombatPhase(StrEnum):
    """Observable phase of the combat state machine."""

    IDLE = "idle"
    SPAWNING = "spawning"
    ACTIVE = "active"
    STUNNED = "stunned"


__all__ = [
    "Skill",
    "CombatType",
    "AttackType",
    "AttackStyle",
    "EquipmentSlot",
    "Currency",
    "SequenceType",
    "CookingArea",
    "Season",
    "StopReason",
    "CombatPhase",
]
