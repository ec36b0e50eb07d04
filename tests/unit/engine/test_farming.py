"""Tests for farming plots."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from idle_engine.core.exceptions import (
    InsufficientResourcesError,
    InvalidGameStateError,
    InventoryFullError,
    RequirementsNotMetError,
    ValidationError,
)
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.farming import (
    advance_farming,
    apply_compost,
    clear_plot,
    harvest_chance,
    harvest_crop,
    plant_crop,
    ticks_until_next_event,
    unlock_plot,
)
from idle_engine.engine.ledger import add_currency, grant_xp
from idle_engine.models.enums import Currency, Skill
from idle_engine.models.progression import xp_for_level


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.models.state import GameState


def grow(state: GameState, ctx: EngineContext, plot_id: str) -> None:
    """Advance a plot until its crop is ready."""
    advance_farming(state, ctx, state.plots[plot_id].growth_ticks_remaining)


class TestPlots:
    """Tests for unlocking plots."""

    def test_free_plots_start_unlocked(self, state: GameState) -> None:
        """Test a new save has every free level-1 plot."""
        assert set(state.plots) == {"allotment_1", "tree_1"}

    def test_unlock_costs_gp(self, state: GameState, ctx: EngineContext) -> None:
        """Test buying a plot."""
        add_currency(state, Currency.GP, 150)

        unlock_plot(state, ctx, "allotment_2")

        assert "allotment_2" in state.plots
        assert state.currency(Currency.GP) == 50

    def test_unlock_without_gp(self, state: GameState, ctx: EngineContext) -> None:
        """Test the plot cost must be affordable."""
        with pytest.raises(InsufficientResourcesError):
            unlock_plot(state, ctx, "allotment_2")
        assert "allotment_2" not in state.plots

    def test_unlock_level_gate(self, state: GameState, ctx: EngineContext) -> None:
        """Test high plots need farming levels."""
        with pytest.raises(RequirementsNotMetError) as exc_info:
            unlock_plot(state, ctx, "allotment_3")
        assert exc_info.value.unmet == ["Requires Farming level 20"]

    def test_unlock_twice(self, state: GameState, ctx: EngineContext) -> None:
        """Test an unlocked plot cannot be bought again."""
        with pytest.raises(InvalidGameStateError):
            unlock_plot(state, ctx, "allotment_1")


class TestPlanting:
    """Tests for planting crops."""

    def test_plant_consumes_exact_seed_cost(self, state: GameState, ctx: EngineContext) -> None:
        """Test planting with exactly the seed cost succeeds."""
        state.inventory.add("potato_seed", 5)

        plant_crop(state, ctx, "allotment_1", "potato")

        plot = state.plots["allotment_1"]
        assert plot.crop_id == "potato"
        assert plot.growth_ticks_remaining == 100
        assert state.inventory.count("potato_seed") == 0

    def test_plant_short_of_seeds(self, state: GameState, ctx: EngineContext) -> None:
        """Test one seed short of the cost is rejected without change."""
        state.inventory.add("potato_seed", 4)

        with pytest.raises(InsufficientResourcesError):
            plant_crop(state, ctx, "allotment_1", "potato")

        assert state.inventory.count("potato_seed") == 4
        assert state.plots["allotment_1"].is_empty

    def test_locked_plot(self, state: GameState, ctx: EngineContext) -> None:
        """Test locked plots cannot be planted."""
        state.inventory.add("potato_seed", 5)
        with pytest.raises(ValidationError):
            plant_crop(state, ctx, "allotment_2", "potato")

    def test_wrong_category(self, state: GameState, ctx: EngineContext) -> None:
        """Test crops only go in plots of their category."""
        state.inventory.add("potato_seed", 5)
        with pytest.raises(ValidationError):
            plant_crop(state, ctx, "tree_1", "potato")

    def test_occupied_plot(self, state: GameState, ctx: EngineContext) -> None:
        """Test a planted plot cannot be planted again."""
        state.inventory.add("potato_seed", 10)
        plant_crop(state, ctx, "allotment_1", "potato")

        with pytest.raises(InvalidGameStateError):
            plant_crop(state, ctx, "allotment_1", "potato")

    def test_level_gate(self, state: GameState, ctx: EngineContext) -> None:
        """Test crops need their farming level."""
        state.inventory.add("potato_seed", 1)
        with pytest.raises(RequirementsNotMetError):
            plant_crop(state, ctx, "tree_1", "oak_tree")

    def test_trees_grant_xp_on_plant(self, state: GameState, ctx: EngineContext) -> None:
        """Test tree categories grant XP when planted."""
        grant_xp(state, ctx, Skill.FARMING, xp_for_level(15))
        state.inventory.add("potato_seed", 1)
        before = state.skill_state(Skill.FARMING).xp

        plant_crop(state, ctx, "tree_1", "oak_tree")

        assert state.skill_state(Skill.FARMING).xp == before + 100


class TestCompost:
    """Tests for compost."""

    def test_harvest_chance(self) -> None:
        """Test compost raises the harvest chance up to certainty."""
        assert harvest_chance(0) == 0.5
        assert harvest_chance(20) == 0.7
        assert harvest_chance(50) == 1.0

    def test_compost_caps_at_fifty(self, state: GameState, ctx: EngineContext) -> None:
        """Test compost stacks to the cap and is then refused."""
        state.inventory.add("compost", 4)
        for _ in range(3):
            apply_compost(state, ctx, "allotment_1", "compost")

        assert state.plots["allotment_1"].compost_applied == 50
        with pytest.raises(ValidationError):
            apply_compost(state, ctx, "allotment_1", "compost")
        assert state.inventory.count("compost") == 1

    def test_not_compost(self, state: GameState, ctx: EngineContext) -> None:
        """Test only compost items can be applied."""
        state.inventory.add("bones", 1)
        with pytest.raises(ValidationError):
            apply_compost(state, ctx, "allotment_1", "bones")

    def test_compost_on_planted_plot(self, state: GameState, ctx: EngineContext) -> None:
        """Test compost must go on before planting."""
        state.inventory.add("potato_seed", 5)
        state.inventory.add("compost", 1)
        plant_crop(state, ctx, "allotment_1", "potato")

        with pytest.raises(InvalidGameStateError):
            apply_compost(state, ctx, "allotment_1", "compost")


class TestGrowthAndHarvest:
    """Tests for growing and harvesting."""

    @pytest.fixture
    def planted(self, state: GameState, ctx: EngineContext) -> GameState:
        """Plant potatoes in allotment_1 on guaranteed-success compost."""
        state.inventory.add("weird_gloop", 1)
        state.inventory.add("potato_seed", 5)
        apply_compost(state, ctx, "allotment_1", "weird_gloop")
        plant_crop(state, ctx, "allotment_1", "potato")
        return state

    def test_growth_counts_down(self, planted: GameState, ctx: EngineContext) -> None:
        """Test a crop is not harvestable until fully grown."""
        advance_farming(planted, ctx, 99)

        assert ticks_until_next_event(planted) == 1
        with pytest.raises(InvalidGameStateError):
            harvest_crop(planted, ctx, "allotment_1")

        advance_farming(planted, ctx, 1)
        assert planted.plots["allotment_1"].is_ready
        assert ticks_until_next_event(planted) is None

    def test_harvest(self, planted: GameState, ctx: EngineContext) -> None:
        """Test a successful harvest pays product and XP and resets the plot."""
        grow(planted, ctx, "allotment_1")

        quantity = harvest_crop(planted, ctx, "allotment_1")

        assert quantity == 6
        assert planted.inventory.count("potato") == 6
        assert planted.skill_state(Skill.FARMING).xp == 60
        assert planted.plots["allotment_1"].is_empty
        assert planted.plots["allotment_1"].compost_applied == 0
        assert EngineEventType.CROP_HARVESTED in [e.event_type for e in ctx.drain()]

    def test_harvest_into_full_bank(self, planted: GameState, ctx: EngineContext) -> None:
        """Test a harvest with nowhere to go is rejected and the crop kept."""
        grow(planted, ctx, "allotment_1")
        planted.inventory.add("bones", 1)
        planted.inventory.capacity = planted.inventory.used_slots

        with pytest.raises(InventoryFullError):
            harvest_crop(planted, ctx, "allotment_1")

    def test_failed_harvest(
        self, state: GameState, ctx: EngineContext, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a failed roll destroys the crop."""
        state.inventory.add("potato_seed", 5)
        plant_crop(state, ctx, "allotment_1", "potato")
        grow(state, ctx, "allotment_1")
        monkeypatch.setattr(ctx.rng, "random", lambda: 0.99)

        assert harvest_crop(state, ctx, "allotment_1") == 0

        assert state.inventory.count("potato") == 0
        assert state.plots["allotment_1"].is_empty
        assert EngineEventType.CROP_FAILED in [e.event_type for e in ctx.drain()]

    def test_uncomposted_success_rate(self, state: GameState, ctx: EngineContext) -> None:
        """Test uncomposted harvests succeed about half the time."""
        trials = 2000
        state.inventory.add("potato_seed", 5 * trials)
        successes = 0
        for _ in range(trials):
            plant_crop(state, ctx, "allotment_1", "potato")
            grow(state, ctx, "allotment_1")
            if harvest_crop(state, ctx, "allotment_1"):
                successes += 1

        assert 0.45 < successes / trials < 0.55

    def test_harvest_empty_plot(self, state: GameState, ctx: EngineContext) -> None:
        """Test harvesting nothing is rejected."""
        with pytest.raises(InvalidGameStateError):
            harvest_crop(state, ctx, "allotment_1")

    def test_clear_plot(self, planted: GameState, ctx: EngineContext) -> None:
        """Test clearing destroys the crop and compost."""
        clear_plot(planted, ctx, "allotment_1")

        assert planted.plots["allotment_1"].is_empty
        assert planted.plots["allotment_1"].compost_applied == 0
        with pytest.raises(InvalidGameStateError):
            clear_plot(planted, ctx, "allotment_1")
