"""Configuration management for the idle RPG engine.

Settings are loaded with pydantic-settings from environment variables and an
optional ``.env`` file. Nested groups can be overridden with the ``__``
delimiter, e.g. ``IDLE_ENGINE_ENGINE__STRICT_LOOKUPS=true``.

Example:
    >>> from idle_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.engine.bank_slots
    200

Environment Variables:
    IDLE_ENGINE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    IDLE_ENGINE_ENGINE_STRICT_LOOKUPS: Raise on unknown registry ids
    IDLE_ENGINE_ENGINE_RANDOM_SEED: Seed for the engine's random source
    IDLE_ENGINE_STORAGE_DATABASE_PATH: Path to the save-slot database
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from idle_engine.core.constants import TICK_MS
from idle_engine.core.exceptions import ConfigurationError


class EngineSettings(BaseSettings):
    """Configuration for the tick engine.

    Attributes:
        strict_lookups: Raise on unknown registry ids instead of failing softly.
        random_seed: Optional seed for reproducible runs.
        max_ticks_per_call: Upper bound on ticks processed by a single tick() call.
        bank_slots: Number of distinct item types the inventory can hold.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDLE_ENGINE_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strict_lookups: bool = Field(
        default=False,
        description="Raise on unknown registry identifiers",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for the engine random source",
    )
    max_ticks_per_call: int = Field(
        default=36_000 * 24,
        ge=1,
        description="Maximum ticks processed by one tick() call",
    )
    bank_slots: int = Field(
        default=200,
        ge=1,
        le=100_000,
        description="Distinct item types the inventory can hold",
    )


class CombatSettings(BaseSettings):
    """Configuration for combat timing and multipliers.

    Attributes:
        monster_spawn_seconds: Delay before a monster becomes attackable.
        stun_seconds: Duration of the stun applied by a failed pickpocket.
        hp_regen_seconds: Interval between passive hitpoint regeneration.
        crit_multiplier: Damage multiplier applied on a critical hit.
        food_slot_count: Number of food slots on the equipment.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDLE_ENGINE_COMBAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    monster_spawn_seconds: float = Field(
        default=3.0,
        ge=0,
        le=60,
        description="Monster spawn delay in seconds",
    )
    stun_seconds: float = Field(
        default=3.0,
        ge=0,
        le=60,
        description="Stun duration in seconds",
    )
    hp_regen_seconds: float = Field(
        default=10.0,
        gt=0,
        le=600,
        description="Hitpoint regeneration interval in seconds",
    )
    crit_multiplier: float = Field(
        default=1.5,
        ge=1.0,
        le=10.0,
        description="Damage multiplier for critical hits",
    )
    food_slot_count: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Number of equipped food slots",
    )


class StorageSettings(BaseSettings):
    """Configuration for save-slot storage.

    Attributes:
        database_path: Path to the SQLite save-slot database.
        slot_count: Number of save slots offered to the player.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDLE_ENGINE_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/idle_engine.db"),
        description="Path to SQLite save-slot database",
    )
    slot_count: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Number of save slots",
    )


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        engine: Tick engine settings.
        combat: Combat settings.
        storage: Save-slot storage settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="IDLE_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="Idle RPG Engine",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    engine: EngineSettings = Field(default_factory=EngineSettings)
    combat: CombatSettings = Field(default_factory=CombatSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @model_validator(mode="after")
    def validate_combat_timing(self) -> "Settings":
        """Ensure combat timings are expressible in whole ticks.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the hp regen interval is shorter than one tick.
        """
        if self.combat.hp_regen_seconds * 1000 < TICK_MS:
            raise ConfigurationError(
                f"hp_regen_seconds ({self.combat.hp_regen_seconds}) is shorter "
                f"than one tick ({TICK_MS} ms)",
                config_key="combat.hp_regen_seconds",
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production mode.

        Returns:
            True if not in debug mode.
        """
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    Example:
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads from environment
    """
    get_settings.cache_clear()


__all__ = [
    "EngineSettings",
    "CombatSettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
