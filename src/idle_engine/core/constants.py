"""Game-wide constants for the idle RPG engine.

Values that designers might tune per deployment live in
:mod:`idle_engine.core.config`; the constants here are fixed game rules.
"""

from __future__ import annotations

# =============================================================================
# Time
# =============================================================================

TICK_MS = 100
"""Milliseconds represented by one engine tick."""

TICKS_PER_SECOND = 1000 // TICK_MS
"""Engine ticks per real-time second."""

TICKS_PER_HOUR = 3600 * TICKS_PER_SECOND
"""Engine ticks per hour; township updates run on this cadence."""

# =============================================================================
# Levels & Mastery
# =============================================================================

MAX_SKILL_LEVEL = 99
"""Highest skill level reachable through XP."""

MAX_MASTERY_LEVEL = 99
"""Highest per-action mastery level."""

MASTERY_POOL_SHARE = 0.25
"""Fraction of action mastery XP that also flows into the skill's pool."""

# =============================================================================
# Combat
# =============================================================================

HITPOINTS_PER_LEVEL = 10
"""Max HP granted per hitpoints level, for players and monsters alike."""

STARTING_HITPOINTS_LEVEL = 10
"""Hitpoints level of a new save."""

UNARMED_ATTACK_SPEED_MS = 4000
"""Player attack interval when no weapon is equipped."""

MIN_PLAYER_ATTACK_SPEED_S = 0.5
MAX_PLAYER_ATTACK_SPEED_S = 10.0

DEFAULT_MONSTER_ATTACK_SPEED_S = 2.4
"""Attack speed used for monsters that do not define one."""

MAX_DAMAGE_REDUCTION = 0.95
"""Damage reduction cap after combat triangle adjustments."""

MAX_PLAYER_HIT = 99_999
MAX_MONSTER_HIT = 9_999

RAPID_STYLE_SPEED_FACTOR = 0.8
"""Attack interval multiplier for the rapid ranged style."""

ACCURATE_STYLE_LEVEL_BONUS = 3
"""Effective level bonus for the accurate ranged style."""

HP_REGEN_PERCENT = 1
"""Percent of max HP restored by each passive regeneration pulse."""

# =============================================================================
# Skilling
# =============================================================================

PASSIVE_COOKING_DURATION_MULTIPLIER = 5
"""Passive cooking areas take this many times longer than active cooking."""

THIEVING_BASE_STEALTH = 40
"""Stealth every player has before level and mastery are added."""

SUMMONING_MARK_THRESHOLDS = (1, 6, 16, 31, 46, 61)
"""Marks needed for each summoning mark level."""

SUMMONING_EQUIPMENT_MARK_MODIFIER = 2.5
"""Mark chance multiplier applied for the familiar's matching gear."""

# =============================================================================
# Farming
# =============================================================================

BASE_HARVEST_CHANCE = 50
"""Harvest success percentage before compost is applied."""

MAX_COMPOST = 50
"""Maximum compost value that can be applied to one plot."""

SEED_RETURN_BASE_CHANCE = 0.30
"""Per-unit chance of getting a seed back on harvest."""

MASTERY_HARVEST_BONUS_PER_LEVEL = 0.002
"""Harvest quantity and seed return bonus per mastery level."""

# =============================================================================
# Township
# =============================================================================

TOWNSHIP_SEASON_DAYS = 3
"""Days each township season lasts."""

TOWNSHIP_BASE_POPULATION = 7
TOWNSHIP_BASE_STORAGE = 50_000

TOWNSHIP_MAX_WORSHIP = 2000
"""Worship points at which the deity bonus is maxed out."""

TOWNSHIP_WORSHIP_PER_BONUS_PERCENT = 20
"""Worship points per percentage point of deity production bonus."""

TOWNSHIP_DEGRADE_CHANCE = 0.25
"""Hourly chance for each building to lose efficiency."""

TOWNSHIP_MIN_EFFICIENCY = 20
TOWNSHIP_MAX_EFFICIENCY = 100

TOWNSHIP_MAX_HEALTH = 100
"""Township health percentage cap."""

TOWNSHIP_MIN_HEALTH = 20
"""Floor that hourly health loss never goes below."""

TOWNSHIP_HEALTH_LOSS_LEVEL = 15
"""Township level from which health starts to decline."""

TOWNSHIP_HEALTH_LOSS_CHANCE = 0.25
"""Hourly chance to lose health once the loss level is reached."""

TOWNSHIP_HEALTH_LOSS_PER_UPDATE = 1

TOWNSHIP_XP_PER_POPULATION = 1
"""Township XP granted per citizen on each hourly update."""
