"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        IdleEngineError: Base exception for all engine errors.
        ConfigurationError: Configuration-related errors.
        ValidationError: Command validation errors.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        setup_logging: Set up logging from Settings.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from idle_engine.core.config import (
    CombatSettings,
    EngineSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
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
from idle_engine.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    setup_logging,
)


__all__ = [
    # Base exception
    "IdleEngineError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
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
    # Configuration
    "Settings",
    "EngineSettings",
    "CombatSettings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
