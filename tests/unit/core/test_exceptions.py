"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from idle_engine.core.exceptions import (
    CombatError,
    ConfigurationError,
    GameEngineError,
    IdleEngineError,
    InsufficientResourcesError,
    InvalidGameStateError,
    InventoryFullError,
    PersistenceError,
    RegistryLookupError,
    RequirementsNotMetError,
    StunnedError,
    TownshipError,
    ValidationError,
)


class TestIdleEngineError:
    """Tests for the base IdleEngineError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = IdleEngineError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = IdleEngineError("Test error", details={"key": "value", "count": 42})
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        exc = IdleEngineError("Test", details={"x": 1})
        repr_str = repr(exc)
        assert "IdleEngineError" in repr_str
        assert "Test" in repr_str
        assert "x" in repr_str


class TestGameEngineExceptions:
    """Tests for game engine exceptions."""

    def test_invalid_game_state_error(self) -> None:
        """Test InvalidGameStateError with state context."""
        exc = InvalidGameStateError(
            "Not in combat",
            current_state="idle",
            expected_states=["spawning", "active"],
        )
        assert exc.details["current_state"] == "idle"
        assert exc.details["expected_states"] == ["spawning", "active"]
        assert isinstance(exc, GameEngineError)

    def test_combat_error_with_tick(self) -> None:
        """Test CombatError keeps a zero tick."""
        exc = CombatError("Bad spawn", monster_id="chicken", tick=0)
        assert exc.details == {"monster_id": "chicken", "tick": 0}

    def test_stunned_error_default_message(self) -> None:
        """Test StunnedError default message and remaining ticks."""
        exc = StunnedError(ticks_remaining=30)
        assert exc.message == "Player is stunned"
        assert exc.details["ticks_remaining"] == 30

    def test_requirements_not_met_keeps_every_reason(self) -> None:
        """Test RequirementsNotMetError carries the full list."""
        exc = RequirementsNotMetError(
            "Cannot enter Dark Cave",
            unmet=["Requires Slayer level 10", "Requires Slayer Helmet equipped"],
        )
        assert exc.unmet == ["Requires Slayer level 10", "Requires Slayer Helmet equipped"]
        assert exc.details["unmet"] == exc.unmet

    def test_requirements_not_met_without_reasons(self) -> None:
        """Test RequirementsNotMetError with no reasons has no details."""
        exc = RequirementsNotMetError("Nope")
        assert exc.unmet == []
        assert exc.details == {}

    def test_township_error_context(self) -> None:
        """Test TownshipError with building and biome."""
        exc = TownshipError("Cannot build", building_id="house", biome_id="grasslands")
        assert exc.details == {"building_id": "house", "biome_id": "grasslands"}
        assert isinstance(exc, GameEngineError)


class TestLedgerExceptions:
    """Tests for ledger and registry exceptions."""

    def test_insufficient_resources_error(self) -> None:
        """Test InsufficientResourcesError records the shortfall."""
        exc = InsufficientResourcesError(
            "Not enough shrimp",
            item_id="shrimp",
            required=5,
            available=0,
        )
        assert exc.details == {"item_id": "shrimp", "required": 5, "available": 0}

    def test_inventory_full_error(self) -> None:
        """Test InventoryFullError default message."""
        exc = InventoryFullError(item_id="bones", capacity=200)
        assert exc.message == "Inventory is full"
        assert exc.details["capacity"] == 200

    def test_registry_lookup_error(self) -> None:
        """Test RegistryLookupError names the id and section."""
        exc = RegistryLookupError("Unknown monster id", entry_id="dragon", kind="monster")
        assert exc.details == {"entry_id": "dragon", "kind": "monster"}

    def test_persistence_error_slot_zero(self) -> None:
        """Test PersistenceError keeps slot 0."""
        exc = PersistenceError("Corrupt save", slot=0)
        assert exc.details["slot"] == 0


class TestValidationError:
    """Tests for validation exceptions."""

    def test_with_field_info(self) -> None:
        """Test ValidationError with field information."""
        exc = ValidationError(
            "Food slot does not exist",
            field_name="index",
            invalid_value=7,
        )
        assert exc.details["field_name"] == "index"
        assert exc.details["invalid_value"] == 7

    def test_configuration_error(self) -> None:
        """Test ConfigurationError with config key."""
        exc = ConfigurationError("Bad interval", config_key="combat.hp_regen_seconds")
        assert exc.details["config_key"] == "combat.hp_regen_seconds"


class TestExceptionCatching:
    """Tests for catching exceptions through the hierarchy."""

    @pytest.mark.parametrize(
        "exc",
        [
            InvalidGameStateError("x"),
            StunnedError(),
            TownshipError("x"),
            InsufficientResourcesError("x"),
            InventoryFullError(),
            RegistryLookupError("x"),
            PersistenceError("x"),
            ValidationError("x"),
        ],
    )
    def test_catch_as_base(self, exc: IdleEngineError) -> None:
        """Test every engine error is an IdleEngineError."""
        with pytest.raises(IdleEngineError):
            raise exc
