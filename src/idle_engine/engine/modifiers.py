"""Additive modifier aggregation.

Modifiers are named numeric contributions (percentages or flat amounts) from
equipment, shop purchases and the current slayer area. All sources are summed
into one :class:`ModifierSet` per resolution. Scoped variants such as
``melee_lifesteal`` or ``fishing_skill_interval`` stack on top of the
unscoped value through :meth:`ModifierSet.scoped`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from idle_engine.core.logging import get_logger
from idle_engine.models.enums import EquipmentSlot


if TYPE_CHECKING:
    from idle_engine.models.definitions import EquipmentStats
    from idle_engine.models.registry import Registry
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


@dataclass(frozen=True)
class ModifierSet:
    """An immutable bag of summed modifier values.

    Example:
        >>> mods = ModifierSet.of({"lifesteal": 2}) + ModifierSet.of({"melee_lifesteal": 3})
        >>> mods.scoped("lifesteal", "melee")
        5.0
    """

    values: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def of(cls, values: Mapping[str, float]) -> ModifierSet:
        """Build a set from a mapping, dropping zero entries."""
        return cls(MappingProxyType({k: float(v) for k, v in values.items() if v}))

    @classmethod
    def combine(cls, sets: Iterable[ModifierSet]) -> ModifierSet:
        """Sum several sets."""
        totals: dict[str, float] = {}
        for modifier_set in sets:
            for name, value in modifier_set.values.items():
                totals[name] = totals.get(name, 0.0) + value
        return cls.of(totals)

    def __add__(self, other: ModifierSet) -> ModifierSet:
        return ModifierSet.combine((self, other))

    def scaled(self, factor: float) -> ModifierSet:
        """Multiply every value, e.g. for repeated shop purchases."""
        return ModifierSet.of({k: v * factor for k, v in self.values.items()})

    def get(self, name: str) -> float:
        """Value of a modifier; 0 when absent."""
        return self.values.get(name, 0.0)

    def scoped(self, name: str, scope: str) -> float:
        """Unscoped value plus the ``{scope}_{name}`` variant."""
        return self.get(name) + self.get(f"{scope}_{name}")

    def __len__(self) -> int:
        return len(self.values)


EMPTY_MODIFIERS = ModifierSet()


def stats_as_modifiers(stats: EquipmentStats) -> ModifierSet:
    """Translate equipment stats into flat modifiers."""
    return ModifierSet.of(
        {
            "flat_melee_attack_bonus": stats.melee_attack_bonus,
            "flat_ranged_attack_bonus": stats.ranged_attack_bonus,
            "flat_magic_attack_bonus": stats.magic_attack_bonus,
            "flat_melee_strength_bonus": stats.melee_strength_bonus,
            "flat_ranged_strength_bonus": stats.ranged_strength_bonus,
            "flat_magic_strength_bonus": stats.magic_damage_bonus,
            "flat_melee_defence_bonus": stats.melee_defence_bonus,
            "flat_ranged_defence_bonus": stats.ranged_defence_bonus,
            "flat_magic_defence_bonus": stats.magic_defence_bonus,
            "flat_resistance": stats.resistance,
        }
    )


def equipment_modifiers(state: GameState, registry: Registry) -> ModifierSet:
    """Sum modifiers and stats from every worn item.

    Unknown item ids are skipped with a warning so a stale save does not
    prevent combat.
    """
    sets: list[ModifierSet] = []
    for slot, item_id in state.equipment.gear.items():
        item = registry.items.get(item_id)
        if item is None:
            logger.warning("Equipped item missing from registry", slot=slot.value, item_id=item_id)
            continue
        sets.append(ModifierSet.of(item.modifiers))
        sets.append(stats_as_modifiers(item.equipment_stats))
    return ModifierSet.combine(sets)


def shop_modifiers(state: GameState, registry: Registry) -> ModifierSet:
    """Sum modifiers granted by shop purchases, once per purchase."""
    sets: list[ModifierSet] = []
    for purchase_id, count in state.shop_purchases.items():
        purchase = registry.shop_purchases.get(purchase_id)
        if purchase is None or not purchase.modifiers:
            continue
        sets.append(ModifierSet.of(purchase.modifiers).scaled(count))
    return ModifierSet.combine(sets)


def global_modifiers(state: GameState, registry: Registry) -> ModifierSet:
    """Modifiers that apply everywhere: equipment and shop purchases."""
    return equipment_modifiers(state, registry) + shop_modifiers(state, registry)


def combat_modifiers(
    state: GameState,
    registry: Registry,
    *,
    area_id: str | None = None,
) -> ModifierSet:
    """Modifiers for one combat resolution, including the slayer area's."""
    modifiers = global_modifiers(state, registry)
    if area_id is not None:
        area = registry.slayer_areas.get(area_id)
        if area is not None:
            modifiers = modifiers + ModifierSet.of(area.modifiers)
    return modifiers


def weapon_attack_speed_ms(state: GameState, registry: Registry) -> int | None:
    """Attack interval of the worn weapon, if any."""
    weapon_id = state.equipment.equipped(EquipmentSlot.WEAPON)
    if weapon_id is None:
        return None
    weapon = registry.items.get(weapon_id)
    if weapon is None:
        return None
    return weapon.equipment_stats.attack_speed_ms


__all__ = [
    "ModifierSet",
    "EMPTY_MODIFIERS",
    "stats_as_modifiers",
    "equipment_modifiers",
    "shop_modifiers",
    "global_modifiers",
    "combat_modifiers",
    "weapon_attack_speed_ms",
]
