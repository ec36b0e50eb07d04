"""Tests for the static data registry and definitions."""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from idle_engine.core.exceptions import RegistryLookupError
from idle_engine.models.definitions import (
    CombatAction,
    DropTable,
    FarmingCrop,
    SkillLevelRequirement,
    ThievingAction,
)
from idle_engine.models.enums import SequenceType, Skill
from idle_engine.models.registry import Registry


class TestRegistrySection:
    """Tests for id lookups."""

    def test_by_id(self, registry: Registry) -> None:
        """Test a known id resolves."""
        assert registry.items.by_id("shrimp").heals_for == 30

    def test_by_id_unknown_raises(self, registry: Registry) -> None:
        """Test an unknown id raises with context."""
        with pytest.raises(RegistryLookupError) as exc_info:
            registry.monsters.by_id("unicorn")

        assert exc_info.value.details["entry_id"] == "unicorn"
        assert exc_info.value.details["kind"] == "monster"

    def test_get_unknown_returns_none(self, registry: Registry) -> None:
        """Test the soft lookup returns None."""
        assert registry.items.get("unicorn_horn") is None

    def test_contains_and_len(self, registry: Registry) -> None:
        """Test membership and size."""
        assert "chicken" in registry.monsters
        assert len(registry.monsters) == 4

    def test_duplicate_ids_rejected(self, registry_data: dict[str, Any]) -> None:
        """Test two definitions may not share an id."""
        registry_data["items"].append({"id": "shrimp", "name": "Another Shrimp"})

        with pytest.raises(ValueError, match="Duplicate item id"):
            Registry.from_dict(registry_data)


class TestRegistryQueries:
    """Tests for registry queries."""

    def test_for_skill_keeps_load_order(self, registry: Registry) -> None:
        """Test skill lookups return actions in load order."""
        assert [a.id for a in registry.for_skill(Skill.FISHING)] == ["fish_shrimp", "fish_sardine"]

    def test_for_skill_parses_action_kinds(self, registry: Registry) -> None:
        """Test actions are parsed into their variant types."""
        assert isinstance(registry.actions.by_id("pickpocket_man"), ThievingAction)
        assert isinstance(registry.actions.by_id("potato"), FarmingCrop)

    def test_for_category(self, registry: Registry) -> None:
        """Test category lookups for farming and cooking."""
        assert [a.id for a in registry.for_category("allotment")] == ["potato"]
        assert [a.id for a in registry.for_category("fire")] == ["cook_shrimp"]

    def test_alternative_recipes(self, registry: Registry) -> None:
        """Test only multi-recipe actions report recipes."""
        assert registry.actions.by_id("cook_sardine").has_recipes
        assert not registry.actions.by_id("cook_shrimp").has_recipes

    def test_combat_skills(self) -> None:
        """Test combat skills are told apart from gathering skills."""
        assert Skill.SLAYER.is_combat
        assert Skill.HITPOINTS.is_combat
        assert not Skill.FISHING.is_combat

    def test_crop_rejects_non_crop(self, registry: Registry) -> None:
        """Test crop lookup refuses other actions."""
        with pytest.raises(RegistryLookupError):
            registry.crop("fish_shrimp")

    def test_sequence_by_type(self, registry: Registry) -> None:
        """Test dungeons and strongholds resolve from their own sections."""
        assert registry.sequence(SequenceType.STRONGHOLD, "golbin_fort").name == "Golbin Fort"
        with pytest.raises(RegistryLookupError):
            registry.sequence(SequenceType.DUNGEON, "golbin_fort")

    def test_slayer_area_for_monster(self, registry: Registry) -> None:
        """Test the slayer area listing a monster is found."""
        area = registry.slayer_area_for_monster("dragon")
        assert area is not None
        assert area.id == "dark_cave"
        assert registry.slayer_area_for_monster("chicken") is None

    def test_requirements_parse(self, registry: Registry) -> None:
        """Test requirement unions parse by kind."""
        area = registry.slayer_areas.by_id("dark_cave")
        assert isinstance(area.requirements[0], SkillLevelRequirement)
        assert area.requirements[0].describe() == "Requires Slayer level 10"


class TestRegistryConstruction:
    """Tests for building registries."""

    def test_from_json(self, tmp_path: Path, registry_data: dict[str, Any]) -> None:
        """Test loading from a JSON file."""
        path = tmp_path / "game.json"
        path.write_text(json.dumps(registry_data), encoding="utf-8")

        registry = Registry.from_json(path)

        assert registry.monsters.by_id("chicken").max_hp == 30

    def test_empty(self) -> None:
        """Test an empty registry."""
        registry = Registry.empty()
        assert len(registry.items) == 0
        assert registry.township.heal_resource_id is None

    def test_unknown_section_rejected(self) -> None:
        """Test unknown top-level keys are rejected."""
        with pytest.raises(PydanticValidationError):
            Registry.from_dict({"spells": []})


class TestMonsterDefinition:
    """Tests for derived monster stats."""

    def test_derived_stats(self, registry: Registry) -> None:
        """Test HP, accuracy, evasion and hits derive from levels."""
        chicken = registry.monsters.by_id("chicken")

        assert chicken.max_hp == 30
        assert chicken.accuracy == (1 + 9) * 64
        assert chicken.evasion == (1 + 9) * 64
        assert chicken.max_hit == 1
        assert chicken.min_hit == 0
        assert chicken.combat_level == 1

    def test_gp_range_validated(self) -> None:
        """Test a reversed GP range is rejected."""
        with pytest.raises(PydanticValidationError):
            CombatAction(id="x", name="X", min_gp_drop=10, max_gp_drop=1)

    def test_gp_drop_in_range(self, registry: Registry) -> None:
        """Test GP drops fall inside the range."""
        cow = registry.monsters.by_id("cow")
        rng = random.Random(1)
        drops = {cow.roll_gp_drop(rng) for _ in range(200)}
        assert drops <= set(range(1, 6))
        assert len(drops) > 1


class TestDropTable:
    """Tests for weighted drop tables."""

    def test_empty_table(self) -> None:
        """Test an empty table drops nothing."""
        assert DropTable().roll(random.Random(0)) is None

    def test_weights(self) -> None:
        """Test rows are picked in proportion to weight."""
        table = DropTable.model_validate(
            {"entries": [{"item_id": "a", "weight": 3}, {"item_id": "b", "weight": 1}]}
        )
        rng = random.Random(3)
        picks = [table.roll(rng).item_id for _ in range(4000)]

        assert 0.70 < picks.count("a") / len(picks) < 0.80
