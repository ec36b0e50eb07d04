"""Skill and mastery level progression.

Skill levels and per-action mastery levels share one experience curve: the
XP needed to reach level ``L`` is ``floor(sum(floor(i + 300 * 2 ** (i / 7))
for i in 1..L-1) / 4)``, giving 83 XP for level 2 and 13,034,431 XP for 99.
"""

from __future__ import annotations

import bisect
import math

from idle_engine.core.constants import MAX_MASTERY_LEVEL, MAX_SKILL_LEVEL


def _build_xp_table(max_level: int) -> tuple[int, ...]:
    table = [0]
    points = 0
    for level in range(1, max_level):
        points += math.floor(level + 300 * 2 ** (level / 7))
        table.append(points // 4)
    return tuple(table)


# =============================================================================
# XP Thresholds
# =============================================================================

XP_TABLE: tuple[int, ...] = _build_xp_table(MAX_SKILL_LEVEL)
"""XP_TABLE[L - 1] is the XP required to reach level L."""


def level_for_xp(xp: int, *, max_level: int = MAX_SKILL_LEVEL) -> int:
    """Determine the level reached with a given amount of XP.

    Args:
        xp: Accumulated experience.
        max_level: Level cap to clamp to.

    Returns:
        Level between 1 and ``max_level``.
    """
    if xp <= 0:
        return 1
    level = bisect.bisect_right(XP_TABLE, xp)
    return min(max(level, 1), max_level)


def xp_for_level(level: int) -> int:
    """Get the XP required to reach a level."""
    if level <= 1:
        return 0
    return XP_TABLE[min(level, MAX_SKILL_LEVEL) - 1]


def xp_to_next_level(xp: int) -> int | None:
    """Get the XP still needed for the next level. Returns None at the cap."""
    level = level_for_xp(xp)
    if level >= MAX_SKILL_LEVEL:
        return None
    return xp_for_level(level + 1) - xp


def mastery_level_for_xp(mastery_xp: int) -> int:
    """Determine a per-action mastery level."""
    return level_for_xp(mastery_xp, max_level=MAX_MASTERY_LEVEL)


def mastery_xp_per_action(
    *,
    unlocked_actions: int,
    total_actions: int,
    total_mastery_level: int,
    action_mastery_level: int,
    action_seconds: float,
    bonus_percent: float = 0,
) -> int:
    """Mastery XP earned by completing one action.

    The formula rewards both breadth (mastery across every action in the
    skill) and depth (mastery of this action), scaled by action time.

    Args:
        unlocked_actions: Actions in the skill the player can perform.
        total_actions: All actions in the skill.
        total_mastery_level: Sum of mastery levels across the skill.
        action_mastery_level: Mastery level of this action.
        action_seconds: Duration of the action in seconds.
        bonus_percent: Additive mastery XP bonus.

    Returns:
        Mastery XP, at least 1.
    """
    if total_actions <= 0:
        return 1
    breadth = unlocked_actions * (total_mastery_level / (total_actions * MAX_MASTERY_LEVEL))
    depth = action_mastery_level * (total_actions / 10)
    xp = (breadth + depth) * action_seconds * 0.5 * (1 + bonus_percent / 100)
    return max(1, int(xp))


def mastery_pool_xp(mastery_xp: int, share: float) -> int:
    """Portion of action mastery XP that also flows into the skill pool."""
    return max(1, int(mastery_xp * share))


__all__ = [
    "XP_TABLE",
    "level_for_xp",
    "xp_for_level",
    "xp_to_next_level",
    "mastery_level_for_xp",
    "mastery_xp_per_action",
    "mastery_pool_xp",
]
