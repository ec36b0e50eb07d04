"""Custom exception hierarchy for the idle RPG engine.

All engine errors inherit from IdleEngineError so callers can handle them
uniformly at the command boundary while keeping domain-specific context in
``details``.

Example:
    >>> from idle_engine.core.exceptions import InsufficientResourcesError
    >>> raise InsufficientResourcesError("Not enough seeds", item_id="potato_seed", required=5, available=4)
"""

from __future__ import annotations

from typing import Any


class IdleEngineError(Exception):
    """Base exception for all idle engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(IdleEngineError):
    """Base exception for all game engine errors.

    Raised when there are issues with state transitions, combat resolution,
    or action processing.
    """


class InvalidGameStateError(GameEngineError):
    """Raised when a command is not valid in the current engine state."""

    def __init__(
        self,
        message: str,
        *,
        current_state: str | None = None,
        expected_states: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize invalid game state error with state context.

        Args:
            message: Human-readable error description.
            current_state: The current state identifier.
            expected_states: List of valid states that were expected.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if current_state:
            combined_details["current_state"] = current_state
        if expected_states:
            combined_details["expected_states"] = expected_states
        super().__init__(message, details=combined_details)


class CombatError(GameEngineError):
    """Raised when combat resolution encounters an error."""

    def __init__(
        self,
        message: str,
        *,
        monster_id: str | None = None,
        tick: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with encounter context.

        Args:
            message: Human-readable error description.
            monster_id: Identifier of the monster involved.
            tick: Engine tick at which the error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if monster_id:
            combined_details["monster_id"] = monster_id
        if tick is not None:
            combined_details["tick"] = tick
        super().__init__(message, details=combined_details)


class StunnedError(GameEngineError):
    """Raised when the player tries to act while stunned."""

    def __init__(
        self,
        message: str = "Player is stunned",
        *,
        ticks_remaining: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize stunned error with the remaining stun duration.

        Args:
            message: Human-readable error description.
            ticks_remaining: Ticks until the stun clears.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if ticks_remaining is not None:
            combined_details["ticks_remaining"] = ticks_remaining
        super().__init__(message, details=combined_details)


class RequirementsNotMetError(GameEngineError):
    """Raised when one or more entry requirements are unmet.

    Every unmet requirement is collected in ``unmet`` rather than stopping at
    the first failure.
    """

    def __init__(
        self,
        message: str,
        *,
        unmet: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the full list of unmet requirements.

        Args:
            message: Human-readable error description.
            unmet: Descriptions of every requirement that is not satisfied.
            details: Optional dictionary containing additional error context.
        """
        self.unmet = list(unmet or [])
        combined_details = details or {}
        if self.unmet:
            combined_details["unmet"] = self.unmet
        super().__init__(message, details=combined_details)


class TownshipError(GameEngineError):
    """Raised when a township build, repair, heal or claim cannot proceed."""

    def __init__(
        self,
        message: str,
        *,
        building_id: str | None = None,
        biome_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize township error with building context.

        Args:
            message: Human-readable error description.
            building_id: Building involved, if any.
            biome_id: Biome involved, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if building_id:
            combined_details["building_id"] = building_id
        if biome_id:
            combined_details["biome_id"] = biome_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Ledger & Registry Exceptions
# =============================================================================


class InsufficientResourcesError(IdleEngineError):
    """Raised when an item count or currency balance would go negative."""

    def __init__(
        self,
        message: str,
        *,
        item_id: str | None = None,
        required: int | None = None,
        available: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the shortfall that caused the failure.

        Args:
            message: Human-readable error description.
            item_id: Item or currency identifier.
            required: Amount that was needed.
            available: Amount actually held.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if item_id:
            combined_details["item_id"] = item_id
        if required is not None:
            combined_details["required"] = required
        if available is not None:
            combined_details["available"] = available
        super().__init__(message, details=combined_details)


class InventoryFullError(IdleEngineError):
    """Raised when a new item type does not fit into the bank."""

    def __init__(
        self,
        message: str = "Inventory is full",
        *,
        item_id: str | None = None,
        capacity: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the rejected item and bank capacity.

        Args:
            message: Human-readable error description.
            item_id: Item that could not be stored.
            capacity: Number of distinct item slots in the bank.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if item_id:
            combined_details["item_id"] = item_id
        if capacity is not None:
            combined_details["capacity"] = capacity
        super().__init__(message, details=combined_details)


class RegistryLookupError(IdleEngineError):
    """Raised when an identifier is not present in the static registry."""

    def __init__(
        self,
        message: str,
        *,
        entry_id: str | None = None,
        kind: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the identifier that could not be resolved.

        Args:
            message: Human-readable error description.
            entry_id: The identifier that was looked up.
            kind: Registry section that was searched (items, monsters, ...).
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if entry_id:
            combined_details["entry_id"] = entry_id
        if kind:
            combined_details["kind"] = kind
        super().__init__(message, details=combined_details)


class PersistenceError(IdleEngineError):
    """Raised when a save slot cannot be read or written."""

    def __init__(
        self,
        message: str,
        *,
        slot: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the affected save slot.

        Args:
            message: Human-readable error description.
            slot: Save slot index.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if slot is not None:
            combined_details["slot"] = slot
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(IdleEngineError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(IdleEngineError):
    """Raised when a command fails validation.

    This covers insufficient levels, wrong slot indices, and any other
    precondition the engine checks before mutating state.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "IdleEngineError",
    # Game engine exceptions
    "GameEngineError",
    "InvalidGameStateError",
    "CombatError",
    "StunnedError",
    "RequirementsNotMetError",
    "TownshipError",
    # Ledger & registry exceptions
    "InsufficientResourcesError",
    "InventoryFullError",
    "RegistryLookupError",
    "PersistenceError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
]
