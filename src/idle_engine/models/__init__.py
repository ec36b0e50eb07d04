"""Pydantic models for static game data, player state and commands.

Exports:
    Definitions: Item, CombatAction, SkillAction variants, areas, township data.
    Registry: Registry, RegistrySection.
    State: GameState and its components.
    Commands: Command union and CommandResult.
"""

from __future__ import annotations

from idle_engine.models.combat import (
    CombatActionState,
    CombatContext,
    MonsterCombatContext,
    SequenceCombatContext,
)
from idle_engine.models.commands import Command, CommandResult
from idle_engine.models.definitions import (
    CombatAction,
    CookingAction,
    FarmingCrop,
    GenericAction,
    Item,
    ItemStack,
    MonsterSequence,
    SkillAction,
    SlayerArea,
    SummoningAction,
    ThievingAction,
)
from idle_engine.models.enums import (
    AttackStyle,
    AttackType,
    CombatPhase,
    CombatType,
    CookingArea,
    Currency,
    EquipmentSlot,
    Season,
    SequenceType,
    Skill,
    StopReason,
)
from idle_engine.models.registry import Registry, RegistrySection
from idle_engine.models.state import (
    ActiveCombat,
    ActiveSkillAction,
    GameState,
    Inventory,
    PlotState,
    TownshipState,
)


__all__ = [
    # Enums
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
    # Definitions
    "ItemStack",
    "Item",
    "CombatAction",
    "MonsterSequence",
    "SlayerArea",
    "SkillAction",
    "GenericAction",
    "CookingAction",
    "SummoningAction",
    "ThievingAction",
    "FarmingCrop",
    # Registry
    "Registry",
    "RegistrySection",
    # Combat
    "CombatActionState",
    "CombatContext",
    "MonsterCombatContext",
    "SequenceCombatContext",
    # State
    "GameState",
    "Inventory",
    "PlotState",
    "TownshipState",
    "ActiveSkillAction",
    "ActiveCombat",
    # Commands
    "Command",
    "CommandResult",
]
