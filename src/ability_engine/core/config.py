"""Configuration management for the ability engine.

This module provides centralized configuration using pydantic-settings,
supporting environment variables, .env files, and runtime overrides.

Example:
    >>> from ability_engine.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.ledger.round_seconds
    3.0

Environment Variables:
    ABILITY_ENGINE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    ABILITY_ENGINE_LEDGER_ROUND_SECONDS: Seconds per combat round for round cooldowns
    ABILITY_ENGINE_SCHEDULER_DAY_LENGTH_SECONDS: Length of an in-game day
    ABILITY_ENGINE_DATABASE_PATH: Path to the SQLite ledger database
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ability_engine.core.constants import (
    DEFAULT_AREA_ID,
    DEFAULT_INVISIBILITY_SECONDS,
    DEFAULT_LEVITATE_SECONDS,
    DEFAULT_LIGHT_RADIUS,
    DEFAULT_LIGHT_SECONDS,
    DEFAULT_OWNER_TYPE,
    DEFAULT_PHASE_RANGE,
    DEFAULT_ROUND_SECONDS,
    HOME_COORDINATES,
    SECONDS_PER_DAY,
)
from ability_engine.core.exceptions import ConfigurationError


class LedgerSettings(BaseSettings):
    """Configuration for the cooldown/charge ledger.

    Attributes:
        round_seconds: Wall-clock seconds per combat round, used to turn a
            ``CombatRounds`` policy into an absolute expiry.
        owner_type: Owner type written into ledger keys.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABILITY_ENGINE_LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    round_seconds: float = Field(
        default=DEFAULT_ROUND_SECONDS,
        gt=0,
        le=600,
        description="Seconds per combat round",
    )
    owner_type: str = Field(
        default=DEFAULT_OWNER_TYPE,
        min_length=1,
        description="Owner type used in ledger keys",
    )


class DispatcherSettings(BaseSettings):
    """Configuration for utility effect handlers.

    Attributes:
        default_area_id: Area assumed for locations without one.
        home_x: Grid X of the recall destination.
        home_y: Grid Y of the recall destination.
        home_area_id: Area of the recall destination.
        default_phase_range: Phase walk range when the ability declares none.
        levitate_seconds: Default levitation duration.
        invisibility_seconds: Default invisibility duration.
        light_seconds: Default light duration.
        light_radius: Default light radius in feet.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABILITY_ENGINE_DISPATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_area_id: str = Field(default=DEFAULT_AREA_ID)
    home_x: int = Field(default=HOME_COORDINATES[0])
    home_y: int = Field(default=HOME_COORDINATES[1])
    home_area_id: str = Field(default=DEFAULT_AREA_ID)
    default_phase_range: int = Field(default=DEFAULT_PHASE_RANGE, ge=1)
    levitate_seconds: int = Field(default=DEFAULT_LEVITATE_SECONDS, ge=0)
    invisibility_seconds: int = Field(default=DEFAULT_INVISIBILITY_SECONDS, ge=0)
    light_seconds: int = Field(default=DEFAULT_LIGHT_SECONDS, ge=0)
    light_radius: int = Field(default=DEFAULT_LIGHT_RADIUS, ge=0)


class SchedulerSettings(BaseSettings):
    """Configuration for the daily charge reset.

    Attributes:
        day_length_seconds: Length of an in-game day.
        day_offset_seconds: Shift applied to the clock before computing the
            day index, so the boundary need not fall on UTC midnight.
        poll_interval_seconds: How often the background thread checks for a
            new day.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABILITY_ENGINE_SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    day_length_seconds: int = Field(default=SECONDS_PER_DAY, ge=1)
    day_offset_seconds: int = Field(default=0)
    poll_interval_seconds: float = Field(default=60.0, gt=0)

    @model_validator(mode="after")
    def validate_poll_interval(self) -> "SchedulerSettings":
        """Ensure the poll interval cannot skip a whole day.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If the poll interval exceeds the day length.
        """
        if self.poll_interval_seconds > self.day_length_seconds:
            raise ConfigurationError(
                f"poll_interval_seconds ({self.poll_interval_seconds}) must not exceed "
                f"day_length_seconds ({self.day_length_seconds})",
                config_key="poll_interval_seconds",
            )
        return self


class StorageSettings(BaseSettings):
    """Configuration for ledger persistence.

    Attributes:
        database_path: Path to the SQLite ledger database.
        busy_retry_attempts: Attempts made when SQLite reports a locked database.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABILITY_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/ability_ledger.db"),
        description="Path to SQLite ledger database",
    )
    busy_retry_attempts: int = Field(default=5, ge=1, le=20)


class CasterSettings(BaseSettings):
    """Configuration for cast orchestration.

    Attributes:
        require_known_ability: Only abilities reachable through the actor's
            class, items and features may be cast.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABILITY_ENGINE_CASTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    require_known_ability: bool = Field(default=True)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        debug: Enable debug mode.
        log_level: Application logging level.
        ledger: Ledger settings.
        dispatcher: Utility effect settings.
        scheduler: Daily reset settings.
        storage: Persistence settings.
        caster: Cast orchestration settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABILITY_ENGINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="Ability Engine")
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    dispatcher: DispatcherSettings = Field(default_factory=DispatcherSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    caster: CasterSettings = Field(default_factory=CasterSettings)


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
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "LedgerSettings",
    "DispatcherSettings",
    "SchedulerSettings",
    "StorageSettings",
    "CasterSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
