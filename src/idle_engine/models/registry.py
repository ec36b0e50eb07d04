"""Read-only registry of static game data.

The registry is the engine's only source of definitions. Lookups come in two
flavours: :meth:`RegistrySection.by_id` raises :class:`RegistryLookupError`
for unknown ids, while :meth:`RegistrySection.get` returns None so
presentation code can render a fallback.

Example:
    >>> registry = Registry.from_json("data/game.json")
    >>> registry.monsters.by_id("chicken").max_hp
    30
    >>> [a.id for a in registry.for_skill(Skill.FISHING)]
    ['raw_shrimp', 'raw_sardine']
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from idle_engine.core.exceptions import RegistryLookupError
from idle_engine.core.logging import get_logger
from idle_engine.models.definitions import (
    CombatAction,
    CombatArea,
    CookingAction,
    FarmingCategory,
    FarmingCrop,
    FarmingPlot,
    Item,
    MonsterSequence,
    ShopPurchase,
    SkillAction,
    SlayerArea,
    SlayerTaskCategory,
    TownshipBiome,
    TownshipBuilding,
    TownshipData,
    TownshipDeity,
    TownshipResource,
    TownshipTask,
)
from idle_engine.models.enums import SequenceType, Skill


logger = get_logger(__name__)

T = TypeVar("T")


class RegistrySection(Generic[T]):
    """An id-indexed, insertion-ordered collection of definitions.

    Args:
        kind: Section name used in error messages.
        entries: Definitions; each must expose an ``id`` attribute.

    Raises:
        ValueError: If two entries share an id.
    """

    def __init__(self, kind: str, entries: Iterable[T]) -> None:
        self._kind = kind
        self._by_id: dict[str, T] = {}
        for entry in entries:
            entry_id = getattr(entry, "id")
            if entry_id in self._by_id:
                raise ValueError(f"Duplicate {kind} id: {entry_id}")
            self._by_id[entry_id] = entry

    @property
    def kind(self) -> str:
        """Section name."""
        return self._kind

    def by_id(self, entry_id: str) -> T:
        """Look up a definition, raising if it does not exist.

        Args:
            entry_id: Identifier to resolve.

        Returns:
            The matching definition.

        Raises:
            RegistryLookupError: If the id is unknown.
        """
        try:
            return self._by_id[entry_id]
        except KeyError:
            raise RegistryLookupError(
                f"Unknown {self._kind} id: {entry_id}",
                entry_id=entry_id,
                kind=self._kind,
            ) from None

    def get(self, entry_id: str) -> T | None:
        """Look up a definition, returning None if it does not exist."""
        return self._by_id.get(entry_id)

    @property
    def all(self) -> list[T]:
        """All definitions in load order."""
        return list(self._by_id.values())

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def __iter__(self) -> Iterator[T]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


class RegistryData(BaseModel):
    """Raw registry contents as loaded from JSON or a dict."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    items: list[Item] = Field(default_factory=list)
    monsters: list[CombatAction] = Field(default_factory=list)
    combat_areas: list[CombatArea] = Field(default_factory=list)
    slayer_areas: list[SlayerArea] = Field(default_factory=list)
    dungeons: list[MonsterSequence] = Field(default_factory=list)
    strongholds: list[MonsterSequence] = Field(default_factory=list)
    slayer_task_categories: list[SlayerTaskCategory] = Field(default_factory=list)
    shop_purchases: list[ShopPurchase] = Field(default_factory=list)
    actions: list[SkillAction] = Field(default_factory=list)
    farming_categories: list[FarmingCategory] = Field(default_factory=list)
    farming_plots: list[FarmingPlot] = Field(default_factory=list)
    township: TownshipData = Field(default_factory=TownshipData)


class Registry:
    """Static game data, indexed for lookup by id, skill and category.

    Attributes:
        items: Item definitions.
        monsters: Monster definitions.
        actions: Skill actions, including farming crops.
    """

    def __init__(self, data: RegistryData) -> None:
        """Index raw registry data.

        Args:
            data: Validated registry contents.
        """
        self._data = data
        self.items: RegistrySection[Item] = RegistrySection("item", data.items)
        self.monsters: RegistrySection[CombatAction] = RegistrySection("monster", data.monsters)
        self.combat_areas: RegistrySection[CombatArea] = RegistrySection(
            "combat_area", data.combat_areas
        )
        self.slayer_areas: RegistrySection[SlayerArea] = RegistrySection(
            "slayer_area", data.slayer_areas
        )
        self.dungeons: RegistrySection[MonsterSequence] = RegistrySection(
            "dungeon", data.dungeons
        )
        self.strongholds: RegistrySection[MonsterSequence] = RegistrySection(
            "stronghold", data.strongholds
        )
        self.slayer_task_categories: RegistrySection[SlayerTaskCategory] = RegistrySection(
            "slayer_task_category", data.slayer_task_categories
        )
        self.shop_purchases: RegistrySection[ShopPurchase] = RegistrySection(
            "shop_purchase", data.shop_purchases
        )
        self.actions: RegistrySection[SkillAction] = RegistrySection("action", data.actions)
        self.farming_categories: RegistrySection[FarmingCategory] = RegistrySection(
            "farming_category", data.farming_categories
        )
        self.farming_plots: RegistrySection[FarmingPlot] = RegistrySection(
            "farming_plot", data.farming_plots
        )
        self.township_resources: RegistrySection[TownshipResource] = RegistrySection(
            "township_resource", data.township.resources
        )
        self.township_biomes: RegistrySection[TownshipBiome] = RegistrySection(
            "township_biome", data.township.biomes
        )
        self.township_buildings: RegistrySection[TownshipBuilding] = RegistrySection(
            "township_building", data.township.buildings
        )
        self.township_deities: RegistrySection[TownshipDeity] = RegistrySection(
            "township_deity", data.township.deities
        )
        self.township_tasks: RegistrySection[TownshipTask] = RegistrySection(
            "township_task", data.township.tasks
        )

    @property
    def data(self) -> RegistryData:
        """The raw data this registry was built from."""
        return self._data

    @property
    def township(self) -> TownshipData:
        """Township definitions."""
        return self._data.township

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Registry:
        """Build a registry from a plain mapping.

        Args:
            raw: Mapping shaped like :class:`RegistryData`.

        Returns:
            A populated registry.
        """
        registry = cls(RegistryData.model_validate(raw))
        logger.info(
            "Registry loaded",
            items=len(registry.items),
            monsters=len(registry.monsters),
            actions=len(registry.actions),
        )
        return registry

    @classmethod
    def from_json(cls, path: str | Path) -> Registry:
        """Build a registry from a JSON file.

        Args:
            path: Path to the JSON document.

        Returns:
            A populated registry.
        """
        with Path(path).open(encoding="utf-8") as handle:
            return cls.from_dict(json.load(handle))

    @classmethod
    def empty(cls) -> Registry:
        """Build a registry with no definitions."""
        return cls(RegistryData())

    # =========================================================================
    # Queries
    # =========================================================================

    def for_skill(self, skill: Skill) -> list[SkillAction]:
        """Get every action belonging to a skill, in load order."""
        return [action for action in self.actions if action.skill == skill]

    def for_category(self, category_id: str) -> list[SkillAction]:
        """Get every action in a category.

        Farming crops match their farming category; cooking actions match
        their cooking area.

        Args:
            category_id: Farming category id or cooking area name.

        Returns:
            Matching actions in load order.
        """
        matches: list[SkillAction] = []
        for action in self.actions:
            if isinstance(action, FarmingCrop) and action.category_id == category_id:
                matches.append(action)
            elif isinstance(action, CookingAction) and action.category.value == category_id:
                matches.append(action)
        return matches

    def sequence(self, sequence_type: SequenceType, sequence_id: str) -> MonsterSequence:
        """Look up a dungeon or stronghold by type and id.

        Raises:
            RegistryLookupError: If the id is unknown.
        """
        if sequence_type is SequenceType.STRONGHOLD:
            return self.strongholds.by_id(sequence_id)
        return self.dungeons.by_id(sequence_id)

    def crop(self, crop_id: str) -> FarmingCrop:
        """Look up a farming crop.

        Raises:
            RegistryLookupError: If the id is unknown or is not a crop.
        """
        action = self.actions.by_id(crop_id)
        if not isinstance(action, FarmingCrop):
            raise RegistryLookupError(
                "Action is not a farming crop",
                entry_id=crop_id,
                kind="action",
            )
        return action

    def slayer_area_for_monster(self, monster_id: str) -> SlayerArea | None:
        """Find the first slayer area that lists a monster."""
        for area in self.slayer_areas:
            if monster_id in area.monster_ids:
                return area
        return None


__all__ = [
    "RegistrySection",
    "RegistryData",
    "Registry",
]
