"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        AbilityEngineError: Base exception for all engine errors.
        ConfigurationError: Configuration-related errors.
        StorageError / LedgerStoreError: Persistence failures.
        ContentDecodeError: Undecodable feature spell data.
        SchedulerError: Daily reset scheduler misuse.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
        log_context: Bind context for the length of a block.
"""

from __future__ import annotations

from ability_engine.core.config import (
    CasterSettings,
    DispatcherSettings,
    LedgerSettings,
    SchedulerSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from ability_engine.core.exceptions import (
    AbilityEngineError,
    ConfigurationError,
    ContentDecodeError,
    LedgerStoreError,
    SchedulerError,
    StorageError,
)
from ability_engine.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    log_context,
)


__all__ = [
    # Exceptions
    "AbilityEngineError",
    "ConfigurationError",
    "StorageError",
    "LedgerStoreError",
    "ContentDecodeError",
    "SchedulerError",
    # Configuration
    "Settings",
    "LedgerSettings",
    "DispatcherSettings",
    "SchedulerSettings",
    "StorageSettings",
    "CasterSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "log_context",
]
