"""Inventory, currency, XP and equipment mutations.

Every change to items, balances or experience goes through this module so the
non-negativity rules live in one place. Functions validate before mutating and
raise an :class:`~idle_engine.core.exceptions.IdleEngineError` subclass on
failure; the engine runs each command against a working copy so a raise
partway through leaves the committed state untouched.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from idle_engine.core.exceptions import (
    InsufficientResourcesError,
    InvalidGameStateError,
    InventoryFullError,
    ValidationError,
)
from idle_engine.core.logging import get_logger
from idle_engine.engine.context import EngineEventType
from idle_engine.models.enums import Currency, EquipmentSlot, Skill
from idle_engine.models.definitions import ItemStack
from idle_engine.models.progression import mastery_pool_xp
from idle_engine.models.state import ActionState, SkillState


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.engine.modifiers import ModifierSet
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


# =============================================================================
# Items & Currency
# =============================================================================


def add_currency(state: GameState, currency: Currency, amount: int) -> None:
    """Credit a currency balance."""
    if amount <= 0:
        return
    state.currencies[currency] = state.currency(currency) + amount


def spend_currency(state: GameState, currency: Currency, amount: int) -> None:
    """Debit a currency balance.

    Raises:
        InsufficientResourcesError: If the balance is below ``amount``.
    """
    if amount <= 0:
        return
    balance = state.currency(currency)
    if balance < amount:
        raise InsufficientResourcesError(
            f"Not enough {currency.value}",
            item_id=currency.value,
            required=amount,
            available=balance,
        )
    state.currencies[currency] = balance - amount


def require_items(state: GameState, items: dict[str, int]) -> None:
    """Check that every listed item is held in the required quantity.

    Raises:
        InsufficientResourcesError: For the first missing item.
    """
    for item_id, quantity in items.items():
        held = state.inventory.count(item_id)
        if held < quantity:
            raise InsufficientResourcesError(
                f"Not enough {item_id}",
                item_id=item_id,
                required=quantity,
                available=held,
            )


def remove_items(state: GameState, items: dict[str, int]) -> None:
    """Remove several items at once after checking all of them."""
    require_items(state, items)
    for item_id, quantity in items.items():
        state.inventory.remove(item_id, quantity)


def add_items(state: GameState, items: dict[str, int]) -> None:
    """Add several items at once after checking bank space for all of them.

    Raises:
        InventoryFullError: If the new item types do not fit.
    """
    new_types = {
        item_id
        for item_id, quantity in items.items()
        if quantity > 0 and item_id not in state.inventory.items
    }
    free = state.inventory.capacity - state.inventory.used_slots
    if len(new_types) > free:
        raise InventoryFullError(item_id=sorted(new_types)[0], capacity=state.inventory.capacity)
    for item_id, quantity in items.items():
        state.inventory.add(item_id, quantity)


def fits_after(state: GameState, consumed: dict[str, int], produced: dict[str, int]) -> bool:
    """Check whether ``produced`` fits in the bank once ``consumed`` is removed."""
    remaining = {
        item_id
        for item_id, held in state.inventory.items.items()
        if held > consumed.get(item_id, 0)
    }
    new_types = {item_id for item_id, quantity in produced.items() if quantity > 0} - remaining
    return len(remaining) + len(new_types) <= state.inventory.capacity


# =============================================================================
# Experience
# =============================================================================


def grant_xp(state: GameState, ctx: EngineContext, skill: Skill, amount: int) -> None:
    """Add skill XP and announce any level gained.

    Args:
        state: Working state.
        ctx: Engine context for events.
        skill: Skill receiving XP.
        amount: XP to add; non-positive amounts are ignored.
    """
    if amount <= 0:
        return
    skill_state = state.skills.setdefault(skill, SkillState())
    before = skill_state.level
    skill_state.xp += amount
    after = skill_state.level
    if after > before:
        logger.info("Level up", skill=skill.value, level=after)
        ctx.emit(EngineEventType.LEVEL_UP, skill=skill.value, level=after)


def grant_mastery_xp(
    state: GameState,
    skill: Skill,
    action_id: str,
    amount: int,
    *,
    pool_share: float,
) -> int:
    """Add mastery XP to an action and its share to the skill's pool.

    Returns:
        Pool XP granted.
    """
    if amount <= 0:
        return 0
    action_state = state.action_states.setdefault(action_id, ActionState())
    action_state.mastery_xp += amount
    pool = mastery_pool_xp(amount, pool_share)
    skill_state = state.skills.setdefault(skill, SkillState())
    skill_state.mastery_pool_xp += pool
    return pool


# =============================================================================
# Hitpoints
# =============================================================================


def damage_player(state: GameState, amount: int) -> int:
    """Apply damage to the player.

    Returns:
        HP remaining after the damage.
    """
    if amount > 0:
        state.health.lost_hp = min(state.health.lost_hp + amount, state.max_player_hp)
    return state.player_hp


def heal_player(state: GameState, amount: int) -> int:
    """Restore HP, never above max.

    Returns:
        HP actually restored.
    """
    if amount <= 0:
        return 0
    healed = min(amount, state.health.lost_hp)
    state.health.lost_hp -= healed
    return healed


def restore_full_health(state: GameState) -> None:
    """Reset the player to full HP."""
    state.health.lost_hp = 0


def _eat_from_slot(state: GameState, ctx: EngineContext, index: int, efficiency: float) -> int:
    stack = state.equipment.food_slots[index]
    if stack is None:
        return 0
    food = ctx.registry.items.by_id(stack.item_id)
    heal = math.ceil((food.heals_for or 0) * efficiency / 100)
    healed = heal_player(state, heal)
    remaining = stack.quantity - 1
    state.equipment.food_slots[index] = (
        ItemStack(item_id=stack.item_id, quantity=remaining) if remaining > 0 else None
    )
    return healed


def eat_food(state: GameState, ctx: EngineContext) -> int:
    """Eat one food from the selected slot.

    Returns:
        HP restored.

    Raises:
        InvalidGameStateError: If the player is at full HP or the slot is empty.
    """
    if state.health.is_full:
        raise InvalidGameStateError("Already at full health", current_state="full_health")
    if state.equipment.selected_food is None:
        raise InvalidGameStateError("No food in the selected slot", current_state="no_food")
    return _eat_from_slot(state, ctx, state.equipment.selected_food_slot, 100)


def auto_eat(state: GameState, ctx: EngineContext, modifiers: ModifierSet) -> int:
    """Eat automatically when HP drops below the auto-eat threshold.

    Food is eaten from the selected slot until HP reaches the auto-eat limit.
    With ``auto_swap_food`` the selection moves to the next non-empty slot
    when the selected one runs out.

    Args:
        state: Working state.
        ctx: Engine context.
        modifiers: Aggregated modifiers carrying the auto-eat settings.

    Returns:
        Number of food items eaten.
    """
    threshold = modifiers.get("auto_eat_threshold")
    if threshold <= 0:
        return 0
    max_hp = state.max_player_hp
    if state.player_hp >= math.ceil(max_hp * threshold / 100):
        return 0
    limit = max(modifiers.get("auto_eat_hp_limit"), threshold)
    target = math.ceil(max_hp * limit / 100)
    efficiency = modifiers.get("auto_eat_efficiency") or 100
    swap = modifiers.get("auto_swap_food") > 0

    eaten = 0
    while state.player_hp < target:
        if state.equipment.selected_food is None:
            next_slot = state.equipment.next_non_empty_food_slot() if swap else None
            if next_slot is None:
                break
            state.equipment.selected_food_slot = next_slot
        _eat_from_slot(state, ctx, state.equipment.selected_food_slot, efficiency)
        eaten += 1
    if eaten:
        logger.debug("Auto-ate food", eaten=eaten, hp=state.player_hp)
    return eaten


# =============================================================================
# Equipment
# =============================================================================


def equip_gear(state: GameState, ctx: EngineContext, item_id: str, slot: EquipmentSlot) -> None:
    """Wear an item, returning the previous occupant of the slot to the bank.

    Raises:
        ValidationError: If the item cannot go in the slot.
        InsufficientResourcesError: If the item is not in the bank.
    """
    item = ctx.registry.items.by_id(item_id)
    if slot not in item.equip_slots:
        raise ValidationError(
            f"{item.name} cannot be equipped in the {slot.value} slot",
            field_name="slot",
            invalid_value=slot.value,
        )
    state.inventory.remove(item_id, 1)
    previous = state.equipment.equipped(slot)
    if previous is not None:
        state.inventory.add(previous, 1)
    state.equipment.gear[slot] = item_id


def unequip_gear(state: GameState, slot: EquipmentSlot) -> None:
    """Return a worn item to the bank.

    Raises:
        InvalidGameStateError: If the slot is empty.
    """
    item_id = state.equipment.equipped(slot)
    if item_id is None:
        raise InvalidGameStateError(f"Nothing equipped in {slot.value}", current_state="empty_slot")
    state.inventory.add(item_id, 1)
    del state.equipment.gear[slot]


def equip_food(state: GameState, ctx: EngineContext, item_id: str, quantity: int) -> int:
    """Move food from the bank into a matching or empty food slot.

    Returns:
        Index of the food slot used.

    Raises:
        ValidationError: If the item is not food or every slot holds other food.
        InsufficientResourcesError: If fewer than ``quantity`` are held.
    """
    item = ctx.registry.items.by_id(item_id)
    if not item.is_food:
        raise ValidationError(
            f"{item.name} is not food",
            field_name="item_id",
            invalid_value=item_id,
        )
    index = state.equipment.food_slot_for(item_id)
    if index is None:
        raise ValidationError("Food slots full", field_name="food_slots")
    state.inventory.remove(item_id, quantity)
    current = state.equipment.food_slots[index]
    total = quantity + (current.quantity if current is not None else 0)
    state.equipment.food_slots[index] = ItemStack(item_id=item_id, quantity=total)
    return index


def _check_food_index(state: GameState, index: int) -> None:
    if not 0 <= index < len(state.equipment.food_slots):
        raise ValidationError(
            f"Food slot {index} does not exist",
            field_name="index",
            invalid_value=index,
        )


def unequip_food(state: GameState, index: int) -> None:
    """Return a food slot's stack to the bank."""
    _check_food_index(state, index)
    stack = state.equipment.food_slots[index]
    if stack is None:
        raise InvalidGameStateError(f"Food slot {index} is empty", current_state="empty_slot")
    state.inventory.add(stack.item_id, stack.quantity)
    state.equipment.food_slots[index] = None


def select_food_slot(state: GameState, index: int) -> None:
    """Choose the food slot to eat from."""
    _check_food_index(state, index)
    state.equipment.selected_food_slot = index


# =============================================================================
# Bank Operations
# =============================================================================


def sell_item(state: GameState, ctx: EngineContext, item_id: str, count: int) -> int:
    """Sell items for GP.

    Returns:
        GP received.

    Raises:
        InsufficientResourcesError: If fewer than ``count`` are held.
    """
    item = ctx.registry.items.by_id(item_id)
    held = state.inventory.count(item_id)
    if held < count:
        raise InsufficientResourcesError(
            f"Cannot sell {count} {item.name}; only {held} held",
            item_id=item_id,
            required=count,
            available=held,
        )
    state.inventory.remove(item_id, count)
    gp = count * item.sells_for
    add_currency(state, Currency.GP, gp)
    logger.info("Sold items", item_id=item_id, count=count, gp=gp)
    return gp


def open_item(state: GameState, ctx: EngineContext, item_id: str, count: int) -> list[ItemStack]:
    """Open containers, rolling the drop table once per unit.

    Opening stops early when a drop no longer fits in the bank.

    Returns:
        Drops received.

    Raises:
        ValidationError: If the item cannot be opened.
        InsufficientResourcesError: If fewer than ``count`` are held.
        InventoryFullError: If not even one unit could be opened.
    """
    item = ctx.registry.items.by_id(item_id)
    if not item.is_openable or item.drop_table is None:
        raise ValidationError(
            f"{item.name} cannot be opened",
            field_name="item_id",
            invalid_value=item_id,
        )
    require_items(state, {item_id: count})

    drops: list[ItemStack] = []
    for _ in range(count):
        drop = item.drop_table.roll(ctx.rng)
        if drop is None:
            continue
        freed = state.inventory.count(item_id) == 1 and drop.item_id not in state.inventory.items
        if not state.inventory.can_add(drop.item_id) and not freed:
            break
        state.inventory.remove(item_id, 1)
        state.inventory.add(drop.item_id, drop.quantity)
        drops.append(drop)
    if not drops:
        raise InventoryFullError(item_id=item_id, capacity=state.inventory.capacity)
    return drops


def purchase_shop_item(state: GameState, ctx: EngineContext, purchase_id: str, count: int) -> None:
    """Buy a shop entry ``count`` times.

    Raises:
        ValidationError: If the buy limit would be exceeded.
        InsufficientResourcesError: If either currency is short.
        InventoryFullError: If granted items do not fit.
    """
    purchase = ctx.registry.shop_purchases.by_id(purchase_id)
    owned = state.shop_purchase_count(purchase_id)
    if purchase.buy_limit and owned + count > purchase.buy_limit:
        raise ValidationError(
            f"{purchase.name} can only be bought {purchase.buy_limit} time(s)",
            field_name="count",
            invalid_value=count,
        )
    gp_cost = purchase.gp_cost * count
    coin_cost = purchase.slayer_coin_cost * count
    if state.currency(Currency.GP) < gp_cost or state.currency(Currency.SLAYER_COINS) < coin_cost:
        short = Currency.GP if state.currency(Currency.GP) < gp_cost else Currency.SLAYER_COINS
        raise InsufficientResourcesError(
            f"Not enough {short.value} for {purchase.name}",
            item_id=short.value,
            required=gp_cost if short is Currency.GP else coin_cost,
            available=state.currency(short),
        )
    spend_currency(state, Currency.GP, gp_cost)
    spend_currency(state, Currency.SLAYER_COINS, coin_cost)
    add_items(state, {stack.item_id: stack.quantity * count for stack in purchase.granted_items})
    state.shop_purchases[purchase_id] = owned + count
    logger.info("Shop purchase", purchase_id=purchase_id, count=count)


__all__ = [
    "add_currency",
    "spend_currency",
    "require_items",
    "remove_items",
    "add_items",
    "fits_after",
    "grant_xp",
    "grant_mastery_xp",
    "damage_player",
    "heal_player",
    "restore_full_health",
    "eat_food",
    "auto_eat",
    "equip_gear",
    "unequip_gear",
    "equip_food",
    "unequip_food",
    "select_food_slot",
    "sell_item",
    "open_item",
    "purchase_shop_item",
]
