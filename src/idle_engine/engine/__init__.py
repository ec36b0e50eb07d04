"""Tick engine for the idle RPG.

This module provides the simulation: combat resolution, monster sequencing,
the skill action loop, farming, township and the resource ledger, all driven
by :class:`GameEngine`.

Submodules:
    combat_math: Hit chance, damage and stat formulas
    combat: Combat state machine (spawn, attack timers, loot, death)
    sequences: Areas, dungeons, strongholds and slayer tasks
    skill_actions: Generic skill loop and passive cooking
    farming: Plots, planting, compost and harvesting
    township: Buildings, hourly production and seasons
    ledger: Inventory, currencies, XP and equipment
    game_loop: Command dispatch and tick scheduling

Example:
    >>> from idle_engine.engine import GameEngine
    >>> from idle_engine.models import Registry
    >>> from idle_engine.models.commands import ToggleAction
    >>>
    >>> engine = GameEngine.new_game(Registry.from_json("data/game.json"))
    >>> result = engine.dispatch(ToggleAction(action_id="raw_shrimp"))
    >>> engine.tick(600)
"""

from __future__ import annotations

# =============================================================================
# Context & Events
# =============================================================================
from idle_engine.engine.context import EngineContext, EngineEvent, EngineEventType

# =============================================================================
# Combat Math
# =============================================================================
from idle_engine.engine.combat_math import (
    MonsterStats,
    PlayerStats,
    calculate_hit_chance,
    compute_player_stats,
    roll_damage,
)

# =============================================================================
# Modifiers & Ticks
# =============================================================================
from idle_engine.engine.modifiers import ModifierSet
from idle_engine.engine.ticks import seconds_to_ticks, ticks_to_seconds

# =============================================================================
# Engine
# =============================================================================
from idle_engine.engine.game_loop import EventHandler, GameEngine, new_game_state


__all__ = [
    # Context & events
    "EngineContext",
    "EngineEvent",
    "EngineEventType",
    # Combat math
    "PlayerStats",
    "MonsterStats",
    "calculate_hit_chance",
    "roll_damage",
    "compute_player_stats",
    # Modifiers & ticks
    "ModifierSet",
    "seconds_to_ticks",
    "ticks_to_seconds",
    # Engine
    "EventHandler",
    "GameEngine",
    "new_game_state",
]
