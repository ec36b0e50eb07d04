"""Tests for skill and mastery progression."""

from __future__ import annotations

import pytest

from idle_engine.models.progression import (
    XP_TABLE,
    level_for_xp,
    mastery_level_for_xp,
    mastery_pool_xp,
    mastery_xp_per_action,
    xp_for_level,
    xp_to_next_level,
)


class TestXpTable:
    """Tests for the XP curve."""

    def test_known_thresholds(self) -> None:
        """Test the well-known thresholds for levels 2 and 99."""
        assert xp_for_level(1) == 0
        assert xp_for_level(2) == 83
        assert xp_for_level(99) == 13_034_431

    def test_table_is_increasing(self) -> None:
        """Test every level needs more XP than the last."""
        assert all(a < b for a, b in zip(XP_TABLE, XP_TABLE[1:]))

    @pytest.mark.parametrize(
        ("xp", "level"),
        [(0, 1), (82, 1), (83, 2), (1154, 10), (13_034_430, 98), (13_034_431, 99)],
    )
    def test_level_for_xp(self, xp: int, level: int) -> None:
        """Test levels at and around thresholds."""
        assert level_for_xp(xp) == level

    def test_level_is_capped(self) -> None:
        """Test XP beyond the cap stays at 99."""
        assert level_for_xp(10**9) == 99

    def test_negative_xp_is_level_one(self) -> None:
        """Test negative XP is treated as level 1."""
        assert level_for_xp(-5) == 1

    def test_xp_to_next_level(self) -> None:
        """Test remaining XP to the next level."""
        assert xp_to_next_level(0) == 83
        assert xp_to_next_level(80) == 3
        assert xp_to_next_level(13_034_431) is None


class TestMastery:
    """Tests for mastery XP formulas."""

    def test_mastery_shares_the_curve(self) -> None:
        """Test mastery levels use the skill XP curve."""
        assert mastery_level_for_xp(83) == 2

    def test_mastery_xp_is_at_least_one(self) -> None:
        """Test a fresh action still earns one mastery XP."""
        xp = mastery_xp_per_action(
            unlocked_actions=1,
            total_actions=1,
            total_mastery_level=1,
            action_mastery_level=1,
            action_seconds=0.1,
        )
        assert xp == 1

    def test_mastery_xp_with_no_actions(self) -> None:
        """Test a skill with no actions falls back to one XP."""
        xp = mastery_xp_per_action(
            unlocked_actions=0,
            total_actions=0,
            total_mastery_level=0,
            action_mastery_level=1,
            action_seconds=3.0,
        )
        assert xp == 1

    def test_mastery_xp_grows_with_depth(self) -> None:
        """Test higher action mastery earns more mastery XP."""
        kwargs = {
            "unlocked_actions": 10,
            "total_actions": 10,
            "total_mastery_level": 100,
            "action_seconds": 3.0,
        }
        low = mastery_xp_per_action(action_mastery_level=1, **kwargs)
        high = mastery_xp_per_action(action_mastery_level=50, **kwargs)
        assert high > low

    def test_bonus_percent(self) -> None:
        """Test the bonus scales the result."""
        kwargs = {
            "unlocked_actions": 10,
            "total_actions": 10,
            "total_mastery_level": 500,
            "action_mastery_level": 50,
            "action_seconds": 3.0,
        }
        base = mastery_xp_per_action(**kwargs)
        boosted = mastery_xp_per_action(bonus_percent=100, **kwargs)
        assert boosted >= 2 * base - 1

    def test_pool_share(self) -> None:
        """Test pool XP is a share of mastery XP, at least 1."""
        assert mastery_pool_xp(100, 0.25) == 25
        assert mastery_pool_xp(1, 0.25) == 1
