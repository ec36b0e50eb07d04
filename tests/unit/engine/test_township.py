"""Tests for the township simulation."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

import pytest

from idle_engine.core.constants import TICKS_PER_HOUR
from idle_engine.core.exceptions import TownshipError
from idle_engine.engine.context import EngineEventType
from idle_engine.engine.ledger import add_currency, grant_xp
from idle_engine.engine.township import (
    advance_township,
    build,
    claim_task,
    deity_bonus_percent,
    has_buildings,
    heal,
    hourly_production,
    repair,
    repair_cost,
    run_hourly_update,
    select_deity,
    ticks_until_next_event,
    township_stats,
)
from idle_engine.models.enums import Currency, Season, Skill
from idle_engine.models.progression import xp_for_level
from idle_engine.models.state import BuildingState


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.models.state import GameState


@pytest.fixture
def with_woodcutter(state: GameState, ctx: EngineContext) -> GameState:
    """Build one woodcutter in the grasslands."""
    add_currency(state, Currency.GP, 90)
    build(state, ctx, "grasslands", "woodcutter")
    ctx.drain()
    return state


class TestStats:
    """Tests for derived township figures."""

    def test_empty_township(self, state: GameState, ctx: EngineContext) -> None:
        """Test base population and spring bonuses."""
        stats = township_stats(state, ctx.registry)

        assert stats.population == 7
        assert stats.happiness == 50
        assert stats.education == 50
        assert not has_buildings(state.township)
        assert ticks_until_next_event(state) is None

    def test_winter_happiness_floor(self, state: GameState, ctx: EngineContext) -> None:
        """Test winter lowers happiness but never below zero."""
        state.township.season = Season.WINTER
        assert township_stats(state, ctx.registry).happiness == 0

    def test_deity_bonus(self, state: GameState, ctx: EngineContext) -> None:
        """Test the deity bonus follows worship, its cap and its biomes."""
        forest = ctx.registry.township_deities.by_id("forest_god")
        sky = ctx.registry.township_deities.by_id("sky_god")
        state.township.worship = 300

        assert deity_bonus_percent(state.township, forest, "grasslands") == 15
        assert deity_bonus_percent(state.township, forest, "mountains") == 0
        assert deity_bonus_percent(state.township, sky, "mountains") == 10
        assert deity_bonus_percent(state.township, None, "grasslands") == 0


class TestBuild:
    """Tests for placing buildings."""

    def test_build_starts_timers(self, with_woodcutter: GameState) -> None:
        """Test the first building starts the hourly clock."""
        township = with_woodcutter.township

        assert township.building("grasslands", "woodcutter").count == 1
        assert with_woodcutter.currency(Currency.GP) == 0
        assert township.update_ticks_remaining == TICKS_PER_HOUR
        assert ticks_until_next_event(with_woodcutter) == TICKS_PER_HOUR

    def test_resource_cost(self, state: GameState, ctx: EngineContext) -> None:
        """Test buildings consume township resources."""
        add_currency(state, Currency.GP, 100)
        with pytest.raises(TownshipError, match="Not enough wood"):
            build(state, ctx, "grasslands", "house")

        state.township.resources["wood"] = 20
        build(state, ctx, "grasslands", "house")

        assert state.township.resource("wood") == 0
        assert township_stats(state, ctx.registry).population == 17

    def test_wrong_biome(self, state: GameState, ctx: EngineContext) -> None:
        """Test buildings only go in their listed biomes."""
        add_currency(state, Currency.GP, 100)
        state.township.resources["wood"] = 20
        with pytest.raises(TownshipError) as exc_info:
            build(state, ctx, "mountains", "house")
        assert exc_info.value.details["biome_id"] == "mountains"

    def test_biome_population_gate(self, state: GameState, ctx: EngineContext) -> None:
        """Test locked biomes need population."""
        add_currency(state, Currency.GP, 100)
        with pytest.raises(TownshipError, match="population of 100"):
            build(state, ctx, "mountains", "woodcutter")

    def test_level_gate(self, state: GameState, ctx: EngineContext) -> None:
        """Test buildings need township levels."""
        with pytest.raises(TownshipError, match="Township level 50"):
            build(state, ctx, "grasslands", "castle")

    def test_max_count(self, state: GameState, ctx: EngineContext) -> None:
        """Test capped buildings cannot exceed their maximum."""
        add_currency(state, Currency.GP, 400)
        build(state, ctx, "grasslands", "market")

        with pytest.raises(TownshipError, match="maximum"):
            build(state, ctx, "grasslands", "market")
        assert state.currency(Currency.GP) == 200

    def test_gp_cost(self, state: GameState, ctx: EngineContext) -> None:
        """Test buildings need GP."""
        with pytest.raises(TownshipError, match="Not enough GP"):
            build(state, ctx, "grasslands", "woodcutter")


class TestHourlyUpdate:
    """Tests for the hourly township update."""

    def test_production_includes_education(
        self, with_woodcutter: GameState, ctx: EngineContext
    ) -> None:
        """Test spring education boosts production."""
        assert hourly_production(with_woodcutter, ctx.registry) == {"wood": 15}

    def test_production_with_deity(self, with_woodcutter: GameState, ctx: EngineContext) -> None:
        """Test the deity bonus adds to production."""
        with_woodcutter.township.worship_id = "forest_god"
        with_woodcutter.township.worship = 2000

        assert hourly_production(with_woodcutter, ctx.registry) == {"wood": 17}

    def test_production_scaled_by_efficiency(
        self, with_woodcutter: GameState, ctx: EngineContext
    ) -> None:
        """Test low efficiency reduces production."""
        with_woodcutter.township.biomes["grasslands"].buildings["woodcutter"].efficiency = 50

        assert hourly_production(with_woodcutter, ctx.registry) == {"wood": 7}

    def test_health_does_not_change_production(
        self, with_woodcutter: GameState, ctx: EngineContext
    ) -> None:
        """Test township health leaves production alone."""
        with_woodcutter.township.health = 50

        assert hourly_production(with_woodcutter, ctx.registry) == {"wood": 15}

    def test_health_scales_xp_population(
        self, with_woodcutter: GameState, ctx: EngineContext
    ) -> None:
        """Test XP is paid on the population scaled by health."""
        with_woodcutter.township.health = 50

        stats = township_stats(with_woodcutter, ctx.registry)
        run_hourly_update(with_woodcutter, ctx)

        assert stats.effective_population == 3
        assert with_woodcutter.skill_state(Skill.TOWNSHIP).xp == 4

    def test_update_credits_and_grants_xp(
        self, with_woodcutter: GameState, ctx: EngineContext
    ) -> None:
        """Test an update stores resources and grants XP by population."""
        credited = run_hourly_update(with_woodcutter, ctx)

        assert credited == {"wood": 15}
        assert with_woodcutter.township.resource("wood") == 15
        assert with_woodcutter.skill_state(Skill.TOWNSHIP).xp == 10
        assert EngineEventType.TOWNSHIP_UPDATED in [e.event_type for e in ctx.drain()]

    def test_bank_resources_pay_gp(self, state: GameState, ctx: EngineContext) -> None:
        """Test bank-deposited resources are paid as GP."""
        add_currency(state, Currency.GP, 200)
        build(state, ctx, "grasslands", "market")

        run_hourly_update(state, ctx)

        assert state.currency(Currency.GP) == 30
        assert state.township.resource("coins") == 0

    def test_storage_limit(self, with_woodcutter: GameState, ctx: EngineContext) -> None:
        """Test production beyond storage is lost."""
        with_woodcutter.township.resources["herbs"] = 49_995

        run_hourly_update(with_woodcutter, ctx)

        assert with_woodcutter.township.resource("wood") == 5

    def test_worship_accrues(self, state: GameState, ctx: EngineContext) -> None:
        """Test temples add worship to the selected deity."""
        add_currency(state, Currency.GP, 100)
        build(state, ctx, "grasslands", "temple")
        select_deity(state, ctx, "sky_god")

        run_hourly_update(state, ctx)

        assert state.township.worship == 10

    def test_advance_runs_update_on_the_hour(
        self, with_woodcutter: GameState, ctx: EngineContext
    ) -> None:
        """Test the hourly timer fires and rearms."""
        advance_township(with_woodcutter, ctx, TICKS_PER_HOUR - 1)
        assert with_woodcutter.township.resource("wood") == 0

        advance_township(with_woodcutter, ctx, 1)

        assert with_woodcutter.township.resource("wood") == 15
        assert with_woodcutter.township.update_ticks_remaining == TICKS_PER_HOUR

    def test_season_rotates(self, with_woodcutter: GameState, ctx: EngineContext) -> None:
        """Test seasons change when their timer runs out."""
        with_woodcutter.township.season_ticks_remaining = 1

        advance_township(with_woodcutter, ctx, 1)

        assert with_woodcutter.township.season is Season.SUMMER
        events = ctx.drain()
        assert events[0].event_type is EngineEventType.SEASON_CHANGED
        assert events[0].data == {"season": "summer"}

    def test_no_updates_without_buildings(self, state: GameState, ctx: EngineContext) -> None:
        """Test an empty township never updates."""
        advance_township(state, ctx, TICKS_PER_HOUR)

        assert ctx.drain() == []
        assert state.skill_state(Skill.TOWNSHIP).xp == 0


class TestDegradation:
    """Tests for hourly wear and health loss."""

    @pytest.fixture
    def crowded(self, with_woodcutter: GameState) -> GameState:
        """Fifty woodcutters and five warehouses in the grasslands."""
        buildings = with_woodcutter.township.biomes["grasslands"].buildings
        buildings["woodcutter"].count = 50
        buildings["warehouse"] = BuildingState(count=5)
        return with_woodcutter

    def test_every_building_rolls(
        self, crowded: GameState, ctx: EngineContext, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test each placed building loses efficiency on a successful roll."""
        monkeypatch.setattr(ctx.rng, "random", lambda: 0.1)

        run_hourly_update(crowded, ctx)

        buildings = crowded.township.biomes["grasslands"].buildings
        assert buildings["woodcutter"].efficiency == 50
        assert buildings["warehouse"].efficiency == 100

    def test_failed_rolls_keep_efficiency(
        self, crowded: GameState, ctx: EngineContext, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test rolls above the degrade chance change nothing."""
        monkeypatch.setattr(ctx.rng, "random", lambda: 0.5)

        run_hourly_update(crowded, ctx)

        assert crowded.township.biomes["grasslands"].buildings["woodcutter"].efficiency == 100

    def test_efficiency_floor(self, crowded: GameState, ctx: EngineContext) -> None:
        """Test many buildings wear down to the floor and stop there."""
        ctx.rng = random.Random(1)

        for _ in range(20):
            run_hourly_update(crowded, ctx)

        buildings = crowded.township.biomes["grasslands"].buildings
        assert buildings["woodcutter"].efficiency == 20
        assert buildings["warehouse"].efficiency == 100

    def test_health_loss_is_a_chance(
        self, with_woodcutter: GameState, ctx: EngineContext, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test health drops only on a successful roll from level 15."""
        grant_xp(with_woodcutter, ctx, Skill.TOWNSHIP, xp_for_level(15))

        monkeypatch.setattr(ctx.rng, "random", lambda: 0.5)
        run_hourly_update(with_woodcutter, ctx)
        assert with_woodcutter.township.health == 100

        monkeypatch.setattr(ctx.rng, "random", lambda: 0.1)
        run_hourly_update(with_woodcutter, ctx)
        assert with_woodcutter.township.health == 99

    def test_no_health_loss_below_level(
        self, with_woodcutter: GameState, ctx: EngineContext, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test low-level townships never lose health."""
        monkeypatch.setattr(ctx.rng, "random", lambda: 0.0)

        run_hourly_update(with_woodcutter, ctx)

        assert with_woodcutter.township.health == 100


class TestUpkeep:
    """Tests for repair and healing."""

    def test_repair(self, with_woodcutter: GameState, ctx: EngineContext) -> None:
        """Test repair restores efficiency for a third of the lost value."""
        placed = with_woodcutter.township.biomes["grasslands"].buildings["woodcutter"]
        placed.efficiency = 50
        building = ctx.registry.township_buildings.by_id("woodcutter")
        assert repair_cost(building, placed) == 15
        add_currency(with_woodcutter, Currency.GP, 20)

        assert repair(with_woodcutter, ctx, "grasslands", "woodcutter") == 15

        assert placed.efficiency == 100
        assert with_woodcutter.currency(Currency.GP) == 5

    def test_repair_not_needed(self, with_woodcutter: GameState, ctx: EngineContext) -> None:
        """Test a building at full efficiency cannot be repaired."""
        with pytest.raises(TownshipError, match="does not need repair"):
            repair(with_woodcutter, ctx, "grasslands", "woodcutter")

    def test_heal(self, state: GameState, ctx: EngineContext) -> None:
        """Test healing spends the heal resource."""
        state.township.health = 90
        state.township.resources["herbs"] = 100

        assert heal(state, ctx, 5) == 5

        assert state.township.health == 95
        assert state.township.resource("herbs") == 50

    def test_heal_clamped_to_missing(self, state: GameState, ctx: EngineContext) -> None:
        """Test healing never exceeds full health."""
        state.township.health = 98
        state.township.resources["herbs"] = 100

        assert heal(state, ctx, 10) == 2
        assert state.township.resource("herbs") == 80

    def test_heal_rejections(self, state: GameState, ctx: EngineContext) -> None:
        """Test full health and missing herbs are rejected."""
        with pytest.raises(TownshipError, match="already full"):
            heal(state, ctx, 5)

        state.township.health = 50
        with pytest.raises(TownshipError, match="Not enough herbs"):
            heal(state, ctx, 5)


class TestTasksAndDeities:
    """Tests for task claims and worship."""

    def test_claim_incomplete(self, state: GameState, ctx: EngineContext) -> None:
        """Test unmet goals are listed."""
        with pytest.raises(TownshipError) as exc_info:
            claim_task(state, ctx, "big_town")
        assert exc_info.value.details["unmet"] == ["population", "resource"]

    def test_claim_rewards_once(self, state: GameState, ctx: EngineContext) -> None:
        """Test a completed task pays out once."""
        add_currency(state, Currency.GP, 50)
        state.township.resources["wood"] = 20
        build(state, ctx, "grasslands", "house")

        claim_task(state, ctx, "first_house")

        assert state.currency(Currency.GP) == 500
        assert state.inventory.count("shrimp") == 2
        assert state.township.resource("wood") == 50
        assert state.skill_state(Skill.TOWNSHIP).xp == 100
        with pytest.raises(TownshipError, match="already been claimed"):
            claim_task(state, ctx, "first_house")

    def test_switching_deity_resets_worship(self, state: GameState, ctx: EngineContext) -> None:
        """Test changing deity loses accumulated worship."""
        select_deity(state, ctx, "forest_god")
        state.township.worship = 500

        with pytest.raises(TownshipError):
            select_deity(state, ctx, "forest_god")
        select_deity(state, ctx, "sky_god")

        assert state.township.worship_id == "sky_god"
        assert state.township.worship == 0
