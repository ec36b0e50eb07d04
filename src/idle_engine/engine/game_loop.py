"""Main engine orchestration.

:class:`GameEngine` owns the authoritative :class:`GameState`. Commands and
ticks run against a working copy that replaces the committed state only when
the whole operation succeeds, so a rejected command never leaves partial
changes behind. Events raised during an operation are delivered to handlers
after it commits.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from idle_engine.core.config import get_settings
from idle_engine.core.constants import STARTING_HITPOINTS_LEVEL
from idle_engine.core.exceptions import (
    IdleEngineError,
    RegistryLookupError,
    RequirementsNotMetError,
    ValidationError,
)
from idle_engine.core.logging import get_logger
from idle_engine.engine import combat, farming, ledger, sequences, skill_actions, township
from idle_engine.engine.context import EngineContext
from idle_engine.engine.ticks import seconds_to_ticks
from idle_engine.models.commands import (
    ApplyCompost,
    AssignCookingRecipe,
    BuildTownshipBuilding,
    ClaimTownshipTask,
    ClearPlot,
    CommandResult,
    EatFood,
    EquipFood,
    EquipGear,
    HarvestCrop,
    HealTownship,
    OpenItem,
    PlantCrop,
    PurchaseShopItem,
    RepairTownshipBuilding,
    RollSlayerTask,
    SelectDeity,
    SelectFoodSlot,
    SelectRecipe,
    SellItem,
    SetAttackStyle,
    StartCombat,
    StartSequence,
    StopAction,
    StopCombat,
    ToggleAction,
    UnequipFood,
    UnequipGear,
    UnlockPlot,
)
from idle_engine.models.enums import CombatPhase, Skill
from idle_engine.models.progression import xp_for_level
from idle_engine.models.state import (
    ActiveCombat,
    ActiveSkillAction,
    Equipment,
    GameState,
    Inventory,
    PlotState,
    SkillState,
)


if TYPE_CHECKING:
    from idle_engine.core.config import Settings
    from idle_engine.engine.context import EngineEvent, EngineEventType
    from idle_engine.models.commands import Command
    from idle_engine.models.registry import Registry

logger = get_logger(__name__)

EventHandler = Callable[["EngineEvent"], None]


def new_game_state(registry: Registry, settings: Settings) -> GameState:
    """Build the state of a fresh save.

    The player starts with level 10 hitpoints at full health, and every free
    level-1 farming plot is unlocked.
    """
    state = GameState(
        inventory=Inventory(capacity=settings.engine.bank_slots),
        equipment=Equipment(food_slots=[None] * settings.combat.food_slot_count),
    )
    state.skills[Skill.HITPOINTS] = SkillState(xp=xp_for_level(STARTING_HITPOINTS_LEVEL))
    state.health.regen_ticks_remaining = max(
        1, seconds_to_ticks(settings.combat.hp_regen_seconds)
    )
    for plot in registry.farming_plots:
        if plot.gp_cost == 0 and plot.level_required == 1:
            state.plots[plot.id] = PlotState()
    return state


class GameEngine:
    """Tick-driven engine facade.

    Attributes:
        state: Snapshot of the committed game state.
        registry: Static game data.
        settings: Engine configuration.
    """

    def __init__(
        self,
        registry: Registry,
        state: GameState | None = None,
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Static game data.
            state: Existing state to resume; a new game when omitted.
            settings: Configuration; the application settings when omitted.
            rng: Random source; seeded from settings when omitted.
        """
        self._settings = settings or get_settings()
        if rng is None:
            rng = random.Random(self._settings.engine.random_seed)
        self._ctx = EngineContext(registry=registry, rng=rng, settings=self._settings)
        if state is None:
            state = new_game_state(registry, self._settings)
        else:
            state = state.model_copy(deep=True)
        self._state = state
        self._handlers: dict[EngineEventType, list[EventHandler]] = {}

        logger.info("GameEngine initialized", elapsed_ticks=state.elapsed_ticks)

    @classmethod
    def new_game(
        cls,
        registry: Registry,
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> GameEngine:
        """Create an engine for a fresh save."""
        return cls(registry, settings=settings, rng=rng)

    @classmethod
    def from_state(
        cls,
        registry: Registry,
        state: GameState,
        *,
        settings: Settings | None = None,
        rng: random.Random | None = None,
    ) -> GameEngine:
        """Resume from a loaded state; the engine keeps its own copy."""
        return cls(registry, state, settings=settings, rng=rng)

    # =========================================================================
    # Snapshots & Queries
    # =========================================================================

    @property
    def state(self) -> GameState:
        """Get a copy of the committed state.

        Returns:
            A deep copy; changing it has no effect on the engine.
        """
        return self._state.model_copy(deep=True)

    @property
    def registry(self) -> Registry:
        """Get the static game data."""
        return self._ctx.registry

    @property
    def settings(self) -> Settings:
        """Get the engine configuration."""
        return self._settings

    @property
    def elapsed_ticks(self) -> int:
        """Ticks simulated since the save was created."""
        return self._state.elapsed_ticks

    @property
    def combat_phase(self) -> CombatPhase:
        """Current phase of the combat state machine."""
        return combat.combat_phase(self._state)

    def area_requirements(self, area_id: str) -> list[str]:
        """Unmet entry requirements for a combat or slayer area."""
        return sequences.area_unmet_requirements(self._state, self._ctx, area_id)

    # =========================================================================
    # Events
    # =========================================================================

    def on_event(self, event_type: EngineEventType, handler: EventHandler) -> None:
        """Register an event handler.

        Args:
            event_type: Type of event to handle.
            handler: Callback invoked with each committed event.
        """
        self._handlers.setdefault(event_type, []).append(handler)

    def _deliver(self, events: list[EngineEvent]) -> None:
        for event in events:
            for handler in self._handlers.get(event.event_type, []):
                try:
                    handler(event)
                except Exception:
                    logger.exception("Event handler error", event_type=event.event_type.value)

    @contextmanager
    def _transaction(self) -> Iterator[GameState]:
        """Yield a working copy that is committed only if the block succeeds."""
        self._ctx.drain()
        working = self._state.model_copy(deep=True)
        try:
            yield working
        except Exception:
            self._ctx.drain()
            raise
        self._state = working
        self._deliver(self._ctx.drain())

    # =========================================================================
    # Commands
    # =========================================================================

    def dispatch(self, command: Command) -> CommandResult:
        """Apply a command in full or reject it without changing state.

        Args:
            command: The command to apply.

        Returns:
            The outcome; failures carry every reason found.

        Raises:
            RegistryLookupError: If the command names an unknown id and strict
                lookups are enabled.
        """
        try:
            with self._transaction() as working:
                self._ctx.tick = working.elapsed_ticks
                message = self._apply(working, command)
        except RegistryLookupError as exc:
            if self._ctx.strict:
                raise
            logger.warning("Unknown id in command", command=command.kind, error=exc.message)
            return CommandResult.failed(exc.message)
        except RequirementsNotMetError as exc:
            logger.info("Command rejected", command=command.kind, unmet=exc.unmet)
            return CommandResult.failed(exc.message, exc.unmet)
        except IdleEngineError as exc:
            logger.info("Command rejected", command=command.kind, error=exc.message)
            return CommandResult.failed(exc.message)

        logger.debug("Command applied", command=command.kind)
        return CommandResult.ok(message)

    def _apply(self, state: GameState, command: Command) -> str:
        ctx = self._ctx

        # Combat
        if isinstance(command, StartCombat):
            combat.start_combat(state, ctx, command.monster_id, area_id=command.area_id)
            return f"Fighting {command.monster_id}"
        if isinstance(command, StartSequence):
            combat.start_sequence(state, ctx, command.sequence_type, command.sequence_id)
            return f"Entered {command.sequence_id}"
        if isinstance(command, StopCombat):
            combat.stop_combat(state, ctx)
            return "Combat stopped"
        if isinstance(command, SetAttackStyle):
            combat.set_attack_style(state, command.style)
            return f"Attack style set to {command.style.value}"
        if isinstance(command, RollSlayerTask):
            task = sequences.roll_slayer_task(state, ctx, command.category_id)
            return f"Slayer task: {task.kills_required} {task.monster_id}"

        # Skill actions
        if isinstance(command, ToggleAction):
            running = skill_actions.toggle_action(state, ctx, command.action_id)
            return f"{'Started' if running else 'Stopped'} {command.action_id}"
        if isinstance(command, StopAction):
            stopped = skill_actions.stop_action(state, ctx)
            return f"Stopped {stopped}"
        if isinstance(command, SelectRecipe):
            skill_actions.select_recipe(state, ctx, command.action_id, command.recipe_index)
            return "Recipe selected"
        if isinstance(command, AssignCookingRecipe):
            skill_actions.assign_cooking_recipe(state, ctx, command.area, command.recipe_id)
            return "Cooking area updated"

        # Farming
        if isinstance(command, UnlockPlot):
            farming.unlock_plot(state, ctx, command.plot_id)
            return f"Unlocked {command.plot_id}"
        if isinstance(command, PlantCrop):
            farming.plant_crop(state, ctx, command.plot_id, command.crop_id)
            return f"Planted {command.crop_id}"
        if isinstance(command, ApplyCompost):
            farming.apply_compost(state, ctx, command.plot_id, command.item_id)
            return "Compost applied"
        if isinstance(command, HarvestCrop):
            quantity = farming.harvest_crop(state, ctx, command.plot_id)
            return f"Harvested {quantity}" if quantity else "The crop failed"
        if isinstance(command, ClearPlot):
            farming.clear_plot(state, ctx, command.plot_id)
            return "Plot cleared"

        # Ledger
        if isinstance(command, SelectFoodSlot):
            ledger.select_food_slot(state, command.index)
            return "Food slot selected"
        if isinstance(command, EatFood):
            healed = ledger.eat_food(state, ctx)
            return f"Healed {healed}"
        if isinstance(command, EquipFood):
            index = ledger.equip_food(state, ctx, command.item_id, command.quantity)
            return f"Equipped food in slot {index}"
        if isinstance(command, UnequipFood):
            ledger.unequip_food(state, command.index)
            return "Food unequipped"
        if isinstance(command, EquipGear):
            ledger.equip_gear(state, ctx, command.item_id, command.slot)
            return f"Equipped {command.item_id}"
        if isinstance(command, UnequipGear):
            ledger.unequip_gear(state, command.slot)
            return f"Unequipped {command.slot.value}"
        if isinstance(command, SellItem):
            gp = ledger.sell_item(state, ctx, command.item_id, command.count)
            return f"Sold for {gp} GP"
        if isinstance(command, OpenItem):
            opened = ledger.open_item(state, ctx, command.item_id, command.count)
            return f"Received {len(opened)} drops"
        if isinstance(command, PurchaseShopItem):
            ledger.purchase_shop_item(state, ctx, command.purchase_id, command.count)
            return f"Purchased {command.purchase_id}"

        # Township
        if isinstance(command, BuildTownshipBuilding):
            township.build(state, ctx, command.biome_id, command.building_id)
            return f"Built {command.building_id}"
        if isinstance(command, RepairTownshipBuilding):
            cost = township.repair(state, ctx, command.biome_id, command.building_id)
            return f"Repaired for {cost} GP"
        if isinstance(command, HealTownship):
            healed = township.heal(state, ctx, command.amount)
            return f"Township healed by {healed}"
        if isinstance(command, ClaimTownshipTask):
            township.claim_task(state, ctx, command.task_id)
            return f"Claimed {command.task_id}"
        if isinstance(command, SelectDeity):
            township.select_deity(state, ctx, command.deity_id)
            return f"Worshipping {command.deity_id}"

        raise ValidationError(f"Unsupported command: {type(command).__name__}")

    # =========================================================================
    # Ticking
    # =========================================================================

    def tick(self, ticks: int = 1) -> int:
        """Advance the simulation.

        Time is processed in steps that end on the next event of any
        subsystem, so every attack, completion and update happens on the
        tick it is due.

        Args:
            ticks: Ticks to simulate (1 tick is 100 ms).

        Returns:
            Ticks actually processed, after clamping to ``max_ticks_per_call``.
        """
        if ticks <= 0:
            return 0
        limit = self._settings.engine.max_ticks_per_call
        if ticks > limit:
            logger.warning("Tick request clamped", requested=ticks, limit=limit)
            ticks = limit

        with self._transaction() as working:
            remaining = ticks
            while remaining > 0:
                step = min(remaining, self._ticks_until_next_event(working))
                self._advance(working, step)
                remaining -= step
        return ticks

    def _ticks_until_next_event(self, state: GameState) -> int:
        ctx = self._ctx
        candidates = [
            combat.ticks_until_status_event(state, ctx),
            farming.ticks_until_next_event(state),
            skill_actions.ticks_until_passive_event(state, ctx),
            township.ticks_until_next_event(state),
        ]
        if not state.stunned.is_stunned:
            candidates.append(combat.ticks_until_next_event(state))
            candidates.append(skill_actions.ticks_until_next_event(state))
        pending = [value for value in candidates if value is not None]
        return max(min(pending), 1) if pending else 1

    def _advance(self, state: GameState, step: int) -> None:
        ctx = self._ctx
        ctx.tick = state.elapsed_ticks + step
        was_stunned = state.stunned.is_stunned

        combat.advance_player_status(state, ctx, step)
        farming.advance_farming(state, ctx, step)
        skill_actions.advance_passive_cooking(state, ctx, step)
        township.advance_township(state, ctx, step)

        if not was_stunned:
            if isinstance(state.active_action, ActiveCombat):
                combat.advance_combat(state, ctx, step)
            elif isinstance(state.active_action, ActiveSkillAction):
                skill_actions.advance_skill_action(state, ctx, step)
        state.elapsed_ticks += step


__all__ = [
    "EventHandler",
    "new_game_state",
    "GameEngine",
]
