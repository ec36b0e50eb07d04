"""Idle RPG Engine - tick-driven simulation core for an idle RPG.

The engine owns the whole game state and advances it in discrete 100 ms
ticks. Front ends send commands and ask for ticks; everything the player
sees is read back from state snapshots and engine events.

ARCHITECTURE:
- Definitions (monsters, actions, plots, buildings) live in an immutable Registry
- GameState is the single source of truth and is plain pydantic data
- GameEngine applies commands atomically and steps time event by event
- Randomness comes from one injectable random source, so seeded runs replay

Example:
    >>> from idle_engine import GameEngine, Registry
    >>> from idle_engine.models.commands import StartCombat
    >>>
    >>> registry = Registry.from_json("data/game.json")
    >>> engine = GameEngine.new_game(registry)
    >>> engine.dispatch(StartCombat(monster_id="chicken", area_id="farmlands"))
    >>> engine.tick(600)
    >>> print(engine.state.combat.kills)

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 definitions, game state and commands.
    engine: Combat, skill actions, farming, township and the game loop.
    storage: SQLite save slots.
"""

from __future__ import annotations

# Core
from idle_engine.core.config import Settings, get_settings
from idle_engine.core.exceptions import IdleEngineError
from idle_engine.core.logging import configure_logging, get_logger, setup_logging

# Engine
from idle_engine.engine.context import EngineEvent, EngineEventType
from idle_engine.engine.game_loop import GameEngine, new_game_state

# Models
from idle_engine.models.commands import Command, CommandResult
from idle_engine.models.registry import Registry
from idle_engine.models.state import GameState

# Storage
from idle_engine.storage.save_slots import SaveSlotStore, SlotInfo


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "IdleEngineError",
    "Settings",
    "get_settings",
    "configure_logging",
    "setup_logging",
    "get_logger",
    # Engine
    "GameEngine",
    "new_game_state",
    "EngineEvent",
    "EngineEventType",
    # Models
    "Command",
    "CommandResult",
    "Registry",
    "GameState",
    # Storage
    "SaveSlotStore",
    "SlotInfo",
]
