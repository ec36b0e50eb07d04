"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the idle engine test suite.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path

    from idle_engine.core.config import Settings
    from idle_engine.engine.context import EngineContext
    from idle_engine.engine.game_loop import GameEngine
    from idle_engine.models.registry import Registry
    from idle_engine.models.state import GameState


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from idle_engine.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Provide settings with storage pointed at a temporary directory.

    Returns:
        Settings instance.
    """
    from idle_engine.core.config import Settings, StorageSettings

    return Settings(storage=StorageSettings(database_path=tmp_path / "saves.db"))


# =============================================================================
# Registry Fixtures
# =============================================================================


@pytest.fixture
def registry_data() -> dict[str, Any]:
    """Provide a small but complete set of game definitions.

    Returns:
        Mapping shaped like RegistryData.
    """
    return {
        "items": [
            {"id": "shrimp_raw", "name": "Raw Shrimp", "sells_for": 1},
            {"id": "shrimp", "name": "Shrimp", "sells_for": 3, "heals_for": 30},
            {"id": "sardine_raw", "name": "Raw Sardine", "sells_for": 2},
            {"id": "sardine", "name": "Sardine", "sells_for": 5, "heals_for": 40},
            {"id": "bones", "name": "Bones", "sells_for": 1},
            {"id": "feather", "name": "Feather", "sells_for": 2},
            {"id": "stardust", "name": "Stardust", "sells_for": 4},
            {"id": "shard", "name": "Summoning Shard", "sells_for": 1},
            {"id": "golbin_tablet", "name": "Golbin Tablet", "sells_for": 1},
            {"id": "potato_seed", "name": "Potato Seed", "sells_for": 1},
            {"id": "potato", "name": "Potato", "sells_for": 2},
            {"id": "compost", "name": "Compost", "compost_value": 20},
            {
                "id": "weird_gloop",
                "name": "Weird Gloop",
                "compost_value": 50,
                "harvest_bonus": 10,
            },
            {
                "id": "bronze_sword",
                "name": "Bronze Sword",
                "sells_for": 10,
                "equip_slots": ["weapon"],
                "weapon_type": "melee",
                "equipment_stats": {"melee_strength_bonus": 5, "attack_speed_ms": 2400},
            },
            {
                "id": "iron_sword",
                "name": "Iron Sword",
                "sells_for": 20,
                "equip_slots": ["weapon"],
                "weapon_type": "melee",
            },
            {"id": "slayer_helmet", "name": "Slayer Helmet", "equip_slots": ["helmet"]},
            {
                "id": "egg_chest",
                "name": "Egg Chest",
                "drop_table": {"entries": [{"item_id": "feather", "weight": 1}]},
            },
        ],
        "monsters": [
            {
                "id": "chicken",
                "name": "Chicken",
                "levels": {"hitpoints": 3},
                "max_gp_drop": 0,
                "bones": {"item_id": "bones", "quantity": 1},
            },
            {
                "id": "cow",
                "name": "Cow",
                "levels": {"hitpoints": 5, "attack": 2, "strength": 2, "defence": 2},
                "min_gp_drop": 1,
                "max_gp_drop": 5,
            },
            {"id": "golbin", "name": "Golbin", "levels": {"hitpoints": 2}},
            {
                "id": "dragon",
                "name": "Dragon",
                "levels": {
                    "hitpoints": 60,
                    "attack": 60,
                    "strength": 60,
                    "defence": 60,
                    "ranged": 60,
                    "magic": 60,
                },
            },
        ],
        "combat_areas": [
            {"id": "farmlands", "name": "Farmlands", "monster_ids": ["chicken", "cow"]},
        ],
        "slayer_areas": [
            {
                "id": "dark_cave",
                "name": "Dark Cave",
                "monster_ids": ["dragon"],
                "requirements": [
                    {"kind": "skill_level", "skill": "slayer", "level": 10},
                    {"kind": "item_equipped", "item_id": "slayer_helmet"},
                ],
                "modifiers": {"melee_accuracy_rating": 10},
            },
        ],
        "dungeons": [
            {
                "id": "chicken_coop",
                "name": "Chicken Coop",
                "monster_ids": ["chicken", "golbin"],
            },
            {
                "id": "deep_dungeon",
                "name": "Deep Dungeon",
                "monster_ids": ["dragon"],
                "requirements": [
                    {"kind": "dungeon_completion", "dungeon_id": "chicken_coop"},
                    {"kind": "shop_purchase", "purchase_id": "dungeon_key"},
                ],
            },
        ],
        "strongholds": [
            {
                "id": "golbin_fort",
                "name": "Golbin Fort",
                "sequence_type": "stronghold",
                "monster_ids": ["golbin", "golbin"],
            },
        ],
        "slayer_task_categories": [
            {
                "id": "easy",
                "name": "Easy",
                "roll_cost": 10,
                "coin_reward_percent": 10,
                "max_combat_level": 50,
                "base_task_length": 3,
            },
            {"id": "elite", "name": "Elite", "level_required": 90},
        ],
        "shop_purchases": [
            {"id": "dungeon_key", "name": "Dungeon Key", "gp_cost": 100, "buy_limit": 1},
            {
                "id": "auto_eat",
                "name": "Auto Eat",
                "gp_cost": 50,
                "buy_limit": 1,
                "modifiers": {
                    "auto_eat_threshold": 40,
                    "auto_eat_hp_limit": 80,
                    "auto_eat_efficiency": 100,
                },
            },
            {
                "id": "bait_bundle",
                "name": "Bait Bundle",
                "gp_cost": 10,
                "slayer_coin_cost": 5,
                "granted_items": [{"item_id": "shrimp_raw", "quantity": 5}],
            },
        ],
        "actions": [
            {
                "kind": "generic",
                "id": "fish_shrimp",
                "name": "Shrimp",
                "skill": "fishing",
                "xp": 10,
                "min_duration": 3.0,
                "outputs": {"shrimp_raw": 1},
            },
            {
                "kind": "generic",
                "id": "fish_sardine",
                "name": "Sardine",
                "skill": "fishing",
                "level_required": 5,
                "xp": 20,
                "min_duration": 4.0,
                "outputs": {"sardine_raw": 1},
            },
            {
                "kind": "generic",
                "id": "study_deedree",
                "name": "Deedree",
                "skill": "astrology",
                "xp": 5,
                "min_duration": 3.0,
                "outputs": {"stardust": 1},
            },
            {
                "kind": "cooking",
                "id": "cook_shrimp",
                "name": "Cook Shrimp",
                "skill": "cooking",
                "category": "fire",
                "xp": 30,
                "min_duration": 2.0,
                "inputs": {"shrimp_raw": 1},
                "outputs": {"shrimp": 1},
            },
            {
                "kind": "cooking",
                "id": "cook_sardine",
                "name": "Cook Sardine",
                "skill": "cooking",
                "category": "pot",
                "xp": 40,
                "min_duration": 2.0,
                "inputs": {"sardine_raw": 1},
                "outputs": {"sardine": 1},
                "alternative_recipes": [
                    {"inputs": {"sardine_raw": 1}},
                    {"inputs": {"sardine_raw": 2}, "output_multiplier": 3},
                ],
            },
            {
                "kind": "thieving",
                "id": "pickpocket_man",
                "name": "Man",
                "skill": "thieving",
                "xp": 5,
                "min_duration": 3.0,
                "perception": 10,
                "max_hit": 5,
                "max_gold": 10,
            },
            {
                "kind": "thieving",
                "id": "pickpocket_guard",
                "name": "Guard",
                "skill": "thieving",
                "xp": 50,
                "min_duration": 3.0,
                "perception": 100_000,
                "max_hit": 5,
                "max_gold": 50,
            },
            {
                "kind": "summoning",
                "id": "golbin_familiar",
                "name": "Golbin",
                "skill": "summoning",
                "xp": 10,
                "min_duration": 5.0,
                "tier": 1,
                "mark_skills": ["fishing"],
                "inputs": {"shard": 10},
                "outputs": {"golbin_tablet": 25},
            },
            {
                "kind": "farming",
                "id": "potato",
                "name": "Potato",
                "skill": "farming",
                "xp": 10,
                "category_id": "allotment",
                "seed_id": "potato_seed",
                "seed_cost": 5,
                "product_id": "potato",
                "base_quantity": 5,
                "growth_time": 10.0,
            },
            {
                "kind": "farming",
                "id": "oak_tree",
                "name": "Oak Tree",
                "skill": "farming",
                "level_required": 15,
                "xp": 100,
                "category_id": "tree",
                "seed_id": "potato_seed",
                "seed_cost": 1,
                "product_id": "potato",
                "base_quantity": 1,
                "growth_time": 60.0,
            },
        ],
        "farming_categories": [
            {"id": "allotment", "name": "Allotments"},
            {
                "id": "tree",
                "name": "Trees",
                "gives_xp_on_plant": True,
                "scale_xp_with_quantity": False,
                "mastery_xp_divider": 4,
            },
        ],
        "farming_plots": [
            {"id": "allotment_1", "category_id": "allotment"},
            {"id": "allotment_2", "category_id": "allotment", "gp_cost": 100},
            {"id": "allotment_3", "category_id": "allotment", "level_required": 20},
            {"id": "tree_1", "category_id": "tree"},
        ],
        "township": {
            "resources": [
                {"id": "wood", "name": "Wood"},
                {"id": "herbs", "name": "Herbs"},
                {"id": "coins", "name": "Coins", "deposits_to_bank": True},
            ],
            "biomes": [
                {"id": "grasslands", "name": "Grasslands"},
                {"id": "mountains", "name": "Mountains", "population_required": 100},
            ],
            "buildings": [
                {
                    "id": "woodcutter",
                    "name": "Woodcutter",
                    "biome_ids": ["grasslands", "mountains"],
                    "gp_cost": 90,
                    "production": {"wood": 10},
                },
                {
                    "id": "house",
                    "name": "House",
                    "biome_ids": ["grasslands"],
                    "gp_cost": 50,
                    "resource_costs": {"wood": 20},
                    "population": 10,
                    "happiness": 5,
                },
                {
                    "id": "market",
                    "name": "Market",
                    "biome_ids": ["grasslands"],
                    "gp_cost": 200,
                    "production": {"coins": 20},
                    "max_count": 1,
                },
                {
                    "id": "temple",
                    "name": "Temple",
                    "biome_ids": ["grasslands"],
                    "gp_cost": 100,
                    "worship": 10,
                },
                {
                    "id": "warehouse",
                    "name": "Warehouse",
                    "biome_ids": ["grasslands"],
                    "storage": 1000,
                    "can_degrade": False,
                },
                {
                    "id": "castle",
                    "name": "Castle",
                    "biome_ids": ["grasslands"],
                    "level_required": 50,
                },
            ],
            "deities": [
                {
                    "id": "forest_god",
                    "name": "Forest God",
                    "production_bonus": 25,
                    "biome_ids": ["grasslands"],
                },
                {"id": "sky_god", "name": "Sky God", "production_bonus": 10},
            ],
            "tasks": [
                {
                    "id": "first_house",
                    "name": "First House",
                    "goals": [{"kind": "build_building", "building_id": "house"}],
                    "gp_reward": 500,
                    "xp_reward": 100,
                    "item_rewards": [{"item_id": "shrimp", "quantity": 2}],
                    "resource_rewards": {"wood": 50},
                },
                {
                    "id": "big_town",
                    "name": "Big Town",
                    "goals": [
                        {"kind": "population", "amount": 1000},
                        {"kind": "resource", "resource_id": "wood", "amount": 10},
                    ],
                },
            ],
            "heal_resource_id": "herbs",
            "heal_cost_per_percent": 10,
        },
    }


@pytest.fixture
def registry(registry_data: dict[str, Any]) -> Registry:
    """Build a registry from the sample definitions.

    Returns:
        Registry instance.
    """
    from idle_engine.models.registry import Registry

    return Registry.from_dict(registry_data)


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Create a random source with a fixed seed for reproducible tests.

    Returns:
        Seeded Random instance.
    """
    return random.Random(42)


@pytest.fixture
def ctx(registry: Registry, rng: random.Random, settings: Settings) -> EngineContext:
    """Create an engine context over the sample registry.

    Returns:
        EngineContext instance.
    """
    from idle_engine.engine.context import EngineContext

    return EngineContext(registry=registry, rng=rng, settings=settings)


@pytest.fixture
def state(registry: Registry, settings: Settings) -> GameState:
    """Create the state of a fresh save.

    Returns:
        GameState instance.
    """
    from idle_engine.engine.game_loop import new_game_state

    return new_game_state(registry, settings)


@pytest.fixture
def engine(registry: Registry, settings: Settings) -> GameEngine:
    """Create a GameEngine on a fresh save with a fixed seed.

    Returns:
        GameEngine instance.
    """
    from idle_engine.engine.game_loop import GameEngine

    return GameEngine.new_game(registry, settings=settings, rng=random.Random(42))
